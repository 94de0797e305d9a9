"""Order repository interface.

Extends ``IRepository[Order]`` with the read-side queries the order
lifecycle service needs: a paged conjunctive find, status counts and the
timestamps used to measure processing time.

The Service Layer depends exclusively on this contract (DIP).
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from datetime import datetime

    from modules.orders.models import Order


class IOrderRepository(IRepository["Order"]):
    """Repository contract for the Order aggregate root."""

    @abstractmethod
    def get_by_id(self, id: str) -> Optional[Order]:
        """Retrieve an order with its company and quotation loaded."""

    @abstractmethod
    def update(self, id: Any, data: Dict[str, Any]) -> bool:
        """Write exactly the fields in ``data`` and refresh ``updated_at``."""

    @abstractmethod
    def find_where(
        self, filters: Dict[str, Any], limit: int, offset: int
    ) -> Tuple[List[Order], int]:
        """Return one page of matching orders, newest first, and the total
        number of matches ignoring the page bounds."""

    @abstractmethod
    def count_by_status(self) -> List[Dict[str, Any]]:
        """Return ``{"status", "count"}`` rows, one per status present."""

    @abstractmethod
    def list_timestamps(self, status: str) -> List[Dict[str, datetime]]:
        """Return ``{"created_at", "updated_at"}`` for every order in *status*."""
