"""Order API views.

Exposes the ``OrderStatusService`` via HTTP using DRF ViewSets.
Domain exceptions are caught and translated into HTTP status codes:
not found is 404, access denied is 403, every other domain error is
400.  The view never swallows generic exceptions.

The requester is the company attached to the authenticated user; a user
without a company gets 403 on every endpoint.
"""

from __future__ import annotations

import math

from rest_framework import status
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import BaseThrottle
from rest_framework.viewsets import GenericViewSet

from modules.companies.models import CompanyRole
from modules.orders.dtos import (
    OrderFiltersDTO,
    RequesterDTO,
    UpdateOrderNfeDTO,
    UpdateOrderStatusDTO,
)
from modules.orders.exceptions import (
    OrderAccessDenied,
    OrderDomainError,
    OrderNotFound,
)
from modules.orders.models import Order
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.serializers import (
    AdminOrderListQuerySerializer,
    BulkUpdateOrderStatusSerializer,
    OrderListQuerySerializer,
    OrderSerializer,
    UpdateOrderNfeSerializer,
    UpdateOrderStatusSerializer,
)
from modules.orders.services import OrderStatusService

ORDER_MANAGER_ROLES = frozenset({CompanyRole.ADMIN, CompanyRole.SUPPLIER})


def _domain_error_response(exc: OrderDomainError) -> Response:
    if isinstance(exc, OrderNotFound):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, OrderAccessDenied):
        code = status.HTTP_403_FORBIDDEN
    else:
        code = status.HTTP_400_BAD_REQUEST
    return Response({"detail": str(exc)}, status=code)


def _paginated(orders, total: int, page: int, limit: int) -> dict:
    return {
        "data": OrderSerializer(orders, many=True).data,
        "pagination": {
            "total": total,
            "page": page,
            "limit": limit,
            "totalPages": math.ceil(total / limit),
        },
    }


class OrderViewSet(GenericViewSet):
    """ViewSet for the order lifecycle.

    Uses ``OrderStatusService`` with an injected repository (DIP).
    Does **not** extend ``ModelViewSet``: all ORM access goes through
    the service/repository layer.
    """

    queryset = Order.objects.none()
    serializer_class = OrderSerializer

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = OrderStatusService(order_repository=OrderDjangoRepository())

    def get_throttles(self) -> list[BaseThrottle]:
        """Define escopos de throttling por ação."""
        throttle_scope: str | None
        if self.action in {"update_status", "bulk_status", "update_nfe"}:
            throttle_scope = "order_status_update"
        elif self.action in {"list", "history", "admin_all", "admin_stats"}:
            throttle_scope = "order_listing"
        else:
            throttle_scope = None
        self.throttle_scope = throttle_scope
        return super().get_throttles()

    # ------------------------------------------------------------------
    # Requester
    # ------------------------------------------------------------------

    def _get_requester(self, request: Request) -> RequesterDTO:
        company = getattr(request.user, "company", None)
        if company is None:
            raise PermissionDenied("User is not linked to a company.")
        return RequesterDTO(company_id=company.id, role=company.role)

    def _require_role(self, requester: RequesterDTO, roles, message: str) -> None:
        if requester.role not in roles:
            raise PermissionDenied(message)

    # ------------------------------------------------------------------
    # Listings
    # ------------------------------------------------------------------

    def list(self, request: Request) -> Response:
        """GET /api/v1/orders/

        Suppliers see the orders they fulfil, customers the orders they
        bought, admins the orders of their own company.
        """
        requester = self._get_requester(request)
        query = OrderListQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        params = query.validated_data
        page, limit = params["page"], params["limit"]

        if requester.role == CompanyRole.CUSTOMER:
            scope = {"buyer_id": requester.company_id}
        else:
            scope = {"company_id": requester.company_id}

        result = self._service.get_orders_by_status(
            params.get("status"),
            OrderFiltersDTO(limit=limit, offset=(page - 1) * limit, **scope),
        )
        return Response(_paginated(result.orders, result.total, page, limit))

    @action(detail=False, methods=["get"], url_path="admin/all")
    def admin_all(self, request: Request) -> Response:
        """GET /api/v1/orders/admin/all/"""
        requester = self._get_requester(request)
        self._require_role(requester, {CompanyRole.ADMIN}, "Admin access required.")
        query = AdminOrderListQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        params = query.validated_data
        page, limit = params["page"], params["limit"]

        try:
            filters = OrderFiltersDTO(
                start_date=params.get("start_date"),
                end_date=params.get("end_date"),
                limit=limit,
                offset=(page - 1) * limit,
            )
        except ValueError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        result = self._service.get_orders_by_status(params.get("status"), filters)
        return Response(_paginated(result.orders, result.total, page, limit))

    @action(detail=False, methods=["get"], url_path="admin/stats")
    def admin_stats(self, request: Request) -> Response:
        """GET /api/v1/orders/admin/stats/"""
        requester = self._get_requester(request)
        self._require_role(requester, {CompanyRole.ADMIN}, "Admin access required.")
        stats = self._service.get_order_status_stats()
        return Response(stats.model_dump(by_alias=True, mode="json"))

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    @action(detail=True, methods=["get"])
    def history(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/orders/{pk}/history/"""
        requester = self._get_requester(request)
        try:
            result = self._service.get_order_history(pk)
        except OrderDomainError as exc:
            return _domain_error_response(exc)

        if (
            requester.role == CompanyRole.CUSTOMER
            and result.order.quotation.buyer_id != requester.company_id
        ):
            return Response(
                {"detail": "Access denied."}, status=status.HTTP_403_FORBIDDEN
            )

        return Response(
            {
                "order": OrderSerializer(result.order).data,
                "timeline": [
                    entry.model_dump(by_alias=True, mode="json")
                    for entry in result.timeline
                ],
            }
        )

    # ------------------------------------------------------------------
    # Status Update
    # ------------------------------------------------------------------

    @action(detail=True, methods=["put"], url_path="status")
    def update_status(self, request: Request, pk: str | None = None) -> Response:
        """PUT /api/v1/orders/{pk}/status/"""
        requester = self._get_requester(request)
        self._require_role(
            requester,
            ORDER_MANAGER_ROLES,
            "Only admins and suppliers can update order status.",
        )
        serializer = UpdateOrderStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        dto = UpdateOrderStatusDTO(**serializer.validated_data)

        try:
            order = self._service.update_order_status(
                pk, dto, company_id=requester.company_id
            )
        except OrderDomainError as exc:
            return _domain_error_response(exc)

        return Response(OrderSerializer(order).data)

    @action(detail=False, methods=["post"], url_path="bulk-status")
    def bulk_status(self, request: Request) -> Response:
        """POST /api/v1/orders/bulk-status/

        Orders that fail are skipped; the response lists the ones that
        were updated.
        """
        requester = self._get_requester(request)
        self._require_role(
            requester,
            ORDER_MANAGER_ROLES,
            "Only admins and suppliers can update order status.",
        )
        serializer = BulkUpdateOrderStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        order_ids = [str(order_id) for order_id in data.pop("order_ids")]
        dto = UpdateOrderStatusDTO(**data)

        orders = self._service.bulk_update_order_status(
            order_ids, dto, company_id=requester.company_id
        )
        return Response(
            {
                "data": OrderSerializer(orders, many=True).data,
                "requested": len(order_ids),
                "updated": len(orders),
            }
        )

    # ------------------------------------------------------------------
    # NF-e correction
    # ------------------------------------------------------------------

    @action(detail=True, methods=["patch"], url_path="nfe")
    def update_nfe(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/orders/{pk}/nfe/"""
        requester = self._get_requester(request)
        self._require_role(
            requester,
            ORDER_MANAGER_ROLES,
            "Only admins and suppliers can update NF-e data.",
        )
        serializer = UpdateOrderNfeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        dto = UpdateOrderNfeDTO(**serializer.validated_data)

        try:
            order = self._service.update_order_nfe(pk, dto, requester)
        except OrderDomainError as exc:
            return _domain_error_response(exc)

        return Response(OrderSerializer(order).data)
