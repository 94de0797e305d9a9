"""Order status service layer (Use Cases).

Orchestrates the order lifecycle: status transitions validated against
the state machine, shipment side-effect fields, the two-point history
timeline, bulk updates, status reporting and NF-e corrections.

Every command follows the same read / validate / single-write / re-read
sequence.  A validation failure leaves the order untouched.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence
from uuid import UUID

import structlog
from django.db import transaction

from modules.orders.constants import NFE_CORRECTABLE_STATUSES, OrderStatus
from modules.orders.delivery import calculate_estimated_delivery
from modules.orders.dtos import (
    OrderFiltersDTO,
    OrderHistory,
    OrderPage,
    OrderStatusStatsDTO,
    TimelineEntryDTO,
    UpdateOrderStatusDTO,
)
from modules.orders.events import OrderNfeCorrected, OrderStatusChanged
from modules.orders.exceptions import (
    EmptyNfePatch,
    InvalidOrderState,
    InvalidStatusTransition,
    MissingRequiredField,
    OrderAccessDenied,
    OrderNotFound,
)
from modules.orders.state_machine import (
    OrderStateMachine,
    default_state_machine,
    get_status_description,
)
from shared.infrastructure.bus import event_bus as default_event_bus

if TYPE_CHECKING:
    from modules.orders.dtos import RequesterDTO, UpdateOrderNfeDTO
    from modules.orders.models import Order
    from modules.orders.repositories.interfaces import IOrderRepository
    from shared.domain.bus import IEventBus

logger = structlog.get_logger(__name__)

SECONDS_PER_DAY = 86400


class OrderStatusService:
    """Application service for order status use-cases.

    Receives the repository, event bus and state machine via constructor
    injection (DIP).
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        event_bus: Optional[IEventBus] = None,
        state_machine: OrderStateMachine = default_state_machine,
    ) -> None:
        self._order_repo = order_repository
        self._event_bus = event_bus if event_bus is not None else default_event_bus
        self._state_machine = state_machine

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def update_order_status(
        self,
        order_id: str,
        update: UpdateOrderStatusDTO,
        company_id: Optional[UUID] = None,
    ) -> Order:
        """Move an order to ``update.status``.

        ``company_id`` is recorded in the logs only; ownership is not
        checked on this path.

        Raises:
            OrderNotFound: order does not exist.
            InvalidStatusTransition: the edge is not in the graph.
            MissingRequiredField: the edge requires a field the payload lacks.
        """
        order = self._get_order(order_id)
        old_status = order.status
        new_status = update.status

        log = logger.bind(
            order_id=str(order_id),
            current_status=old_status,
            new_status=str(new_status),
            company_id=str(company_id) if company_id else None,
        )

        transition = self._state_machine.find(old_status, new_status)
        if transition is None:
            valid = self._state_machine.get_valid_next_statuses(old_status)
            log.warning("order.invalid_transition")
            raise InvalidStatusTransition(
                f"Invalid status transition from {old_status} to {new_status}. "
                f"Valid transitions: {', '.join(valid)}"
            )

        for field_name in transition.required_fields:
            if not getattr(update, field_name, None):
                alias = UpdateOrderStatusDTO.alias_for(field_name)
                log.warning("order.missing_required_field", field=alias)
                raise MissingRequiredField(
                    f"{alias} is required for this status transition",
                    field=alias,
                )

        patch = self._build_status_patch(update)
        if not self._order_repo.update(order.id, patch):
            raise OrderNotFound(f"Order {order_id} not found.")

        transition.hook.run(order, update)

        log.info("order.status_updated", fields=sorted(patch))
        self._event_bus.publish(
            OrderStatusChanged(
                aggregate_id=order.id,
                old_status=str(old_status),
                new_status=str(new_status),
            )
        )
        return self._get_order(order_id)

    def bulk_update_order_status(
        self,
        order_ids: Sequence[str],
        update: UpdateOrderStatusDTO,
        company_id: Optional[UUID] = None,
    ) -> List[Order]:
        """Apply ``update_order_status`` to each id, one after the other.

        A failing order is logged and skipped.  Returns the updated
        orders in input order.
        """
        log = logger.bind(new_status=str(update.status), requested=len(order_ids))
        updated: List[Order] = []
        for order_id in order_ids:
            try:
                updated.append(self.update_order_status(order_id, update, company_id))
            except Exception as exc:
                log.warning(
                    "order.bulk_update_failed",
                    order_id=str(order_id),
                    error=str(exc),
                    error_type=type(exc).__name__,
                )
        log.info("order.bulk_update_completed", updated=len(updated))
        return updated

    @transaction.atomic
    def update_order_nfe(
        self,
        order_id: str,
        update: UpdateOrderNfeDTO,
        requester: RequesterDTO,
    ) -> Order:
        """Correct the NF-e access key and/or URL of a shipped order.

        Raises:
            OrderNotFound: order does not exist.
            OrderAccessDenied: requester is neither admin nor the owner.
            InvalidOrderState: order is not shipped or delivered.
            EmptyNfePatch: neither field was supplied.
        """
        order = self._get_order(order_id)
        log = logger.bind(
            order_id=str(order_id),
            requester_company_id=str(requester.company_id),
            requester_role=str(requester.role),
        )

        if not requester.is_admin and order.company_id != requester.company_id:
            log.warning("order.nfe_access_denied")
            raise OrderAccessDenied("Access denied: you do not own this order")

        if order.status not in NFE_CORRECTABLE_STATUSES:
            log.warning("order.nfe_invalid_state", status=order.status)
            raise InvalidOrderState(
                "NF-e data can only be updated on orders with status "
                f"'shipped' or 'delivered'. Current status: {order.status}"
            )

        if update.is_empty:
            raise EmptyNfePatch(
                "At least one of nfeAccessKey or nfeUrl must be provided"
            )

        patch: Dict[str, Any] = {}
        if update.nfe_access_key:
            patch["nfe_access_key"] = update.nfe_access_key
        if update.nfe_url:
            patch["nfe_url"] = update.nfe_url

        if not self._order_repo.update(order.id, patch):
            raise OrderNotFound(f"Order {order_id} not found.")

        log.info("order.nfe_updated", fields=sorted(patch))
        self._event_bus.publish(
            OrderNfeCorrected(aggregate_id=order.id, fields=tuple(sorted(patch)))
        )
        return self._get_order(order_id)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_order(self, order_id: str) -> Order:
        """Retrieve a single order by ID.

        Raises:
            OrderNotFound: if the order does not exist.
        """
        return self._get_order(order_id)

    def get_order_history(self, order_id: str) -> OrderHistory:
        """Two-point timeline: creation, then the current status if it moved.

        Intermediate transitions are not persisted and so not shown.
        """
        order = self._get_order(order_id)
        timeline = [self._timeline_entry(OrderStatus.PENDING, order.created_at)]
        if order.status != OrderStatus.PENDING:
            timeline.append(self._timeline_entry(order.status, order.updated_at))
        return OrderHistory(order=order, timeline=timeline)

    def get_orders_by_status(
        self,
        status: Optional[str],
        filters: Optional[OrderFiltersDTO] = None,
    ) -> OrderPage:
        """One page of orders matching every supplied criterion, newest first.

        ``status=None`` matches every status.  ``OrderPage.total`` counts
        all matches, not just the returned page.
        """
        filters = filters or OrderFiltersDTO()
        where: Dict[str, Any] = {}
        if status:
            where["status"] = status
        if filters.company_id:
            where["company_id"] = filters.company_id
        if filters.buyer_id:
            where["quotation__buyer_id"] = filters.buyer_id
        if filters.created_at_range:
            where["created_at__range"] = filters.created_at_range

        orders, total = self._order_repo.find_where(
            where, limit=filters.limit, offset=filters.offset
        )
        return OrderPage(orders=orders, total=total)

    def get_order_status_stats(self) -> OrderStatusStatsDTO:
        """Counts per status, their total, and the mean days to delivery."""
        counts = {status.value: 0 for status in OrderStatus}
        for row in self._order_repo.count_by_status():
            if row["status"] in counts:
                counts[row["status"]] = int(row["count"])

        spans = [
            (row["updated_at"] - row["created_at"]).total_seconds() / SECONDS_PER_DAY
            for row in self._order_repo.list_timestamps(OrderStatus.DELIVERED)
        ]
        average = sum(spans) / len(spans) if spans else 0.0

        return OrderStatusStatsDTO(
            status_counts=counts,
            total_orders=sum(counts.values()),
            average_processing_time=average,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _get_order(self, order_id: str) -> Order:
        order = self._order_repo.get_by_id(order_id)
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.")
        return order

    def _build_status_patch(self, update: UpdateOrderStatusDTO) -> Dict[str, Any]:
        patch: Dict[str, Any] = {"status": update.status}
        if update.tracking_number:
            patch["tracking_number"] = update.tracking_number
        if update.nfe_access_key:
            patch["nfe_access_key"] = update.nfe_access_key
        if update.nfe_url:
            patch["nfe_url"] = update.nfe_url

        if update.estimated_delivery_date is not None:
            patch["estimated_delivery_date"] = update.estimated_delivery_date
        elif update.status == OrderStatus.SHIPPED:
            patch["estimated_delivery_date"] = calculate_estimated_delivery()
        return patch

    def _timeline_entry(self, status: str, date: datetime) -> TimelineEntryDTO:
        return TimelineEntryDTO(
            status=status,
            description=get_status_description(status),
            date=date,
            can_transition_to=self._state_machine.get_valid_next_statuses(status),
        )
