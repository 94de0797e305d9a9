"""Django ORM implementation of the Order repository.

Satisfies ``IOrderRepository`` using Django's QuerySet API.

``update`` issues a single ``UPDATE ... WHERE id = ?`` with exactly the
patched columns, so concurrent writers never overwrite fields they did
not touch.  Serializing concurrent writes to the same row is left to
the database.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

import structlog
from django.core.exceptions import ValidationError
from django.db.models import Count
from django.utils import timezone

from modules.orders.models import Order
from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def _base_queryset(self):
        return Order.objects.select_related("company", "quotation", "quotation__buyer")

    def get_by_id(self, id: str) -> Optional[Order]:
        """Retrieve an order with eager-loaded company and quotation.

        Returns ``None`` for non-existent or invalid IDs.
        """
        try:
            return self._base_queryset().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def find_where(
        self, filters: Dict[str, Any], limit: int, offset: int
    ) -> Tuple[List[Order], int]:
        """Page through orders matching ``filters``.

        Supported filter keys:
        - ``status``
        - ``company_id``
        - ``created_at__range``
        """
        queryset = self._base_queryset().filter(**filters).order_by("-created_at")
        total = queryset.count()
        rows = list(queryset[offset : offset + limit])
        return rows, total

    def count_by_status(self) -> List[Dict[str, Any]]:
        return list(
            Order.objects.values("status").annotate(count=Count("id")).order_by()
        )

    def list_timestamps(self, status: str) -> List[Dict[str, Any]]:
        return list(
            Order.objects.filter(status=status).values("created_at", "updated_at")
        )

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------

    def update(self, id: UUID, data: Dict[str, Any]) -> bool:
        """Persist a partial patch; returns ``False`` if no row matched."""
        try:
            rows = Order.objects.filter(id=id).update(
                **data, updated_at=timezone.now()
            )
        except (ValueError, ValidationError):
            return False
        logger.info(
            "order.updated", order_id=str(id), fields=sorted(data), matched=rows
        )
        return rows > 0
