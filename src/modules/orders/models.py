"""Order model.

An order is created in ``pending`` by the ordering process and moves
along the status graph in ``modules.orders.state_machine``.  Shipment
fields (tracking number, NF-e data, estimated delivery) stay empty until
the order is shipped.

- ``company`` is the supplier fulfilling the order and drives NF-e
  ownership checks.
- ``quotation`` links back to the buyer's quotation; PROTECT preserves
  financial history.
"""

from __future__ import annotations

from decimal import Decimal

from django.db import models

from modules.core.models import BaseModel
from modules.orders.constants import NFE_ACCESS_KEY_LENGTH, OrderStatus
from modules.orders.state_machine import default_state_machine


class Order(BaseModel):
    """Order aggregate root.

    The status column is only written through the repository's partial
    update, never by saving a mutated instance.
    """

    company: models.ForeignKey = models.ForeignKey(
        "companies.Company",
        on_delete=models.PROTECT,
        related_name="supplied_orders",
    )
    quotation: models.ForeignKey = models.ForeignKey(
        "quotations.Quotation",
        on_delete=models.PROTECT,
        related_name="orders",
    )
    status: models.CharField = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.PENDING,
    )
    total_amount: models.DecimalField = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
    )
    tracking_number: models.CharField = models.CharField(  # noqa: DJ01
        max_length=100,
        null=True,
        blank=True,
    )
    nfe_access_key: models.CharField = models.CharField(  # noqa: DJ01
        max_length=NFE_ACCESS_KEY_LENGTH,
        null=True,
        blank=True,
    )
    nfe_url: models.URLField = models.URLField(  # noqa: DJ01
        max_length=500,
        null=True,
        blank=True,
    )
    estimated_delivery_date: models.DateTimeField = models.DateTimeField(
        null=True,
        blank=True,
    )

    class Meta:
        db_table = "orders"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="orders_status_idx"),
            models.Index(fields=["-created_at"], name="orders_created_idx"),
            models.Index(
                fields=["company", "status"], name="orders_company_status_idx"
            ),
        ]

    # ------------------------------------------------------------------
    # State Machine helpers
    # ------------------------------------------------------------------

    @property
    def is_terminal(self) -> bool:
        """Return ``True`` if the order is in a terminal state."""
        return default_state_machine.is_terminal(self.status)

    def can_transition_to(self, new_status: str) -> bool:
        """Check whether transitioning to *new_status* is valid."""
        return default_state_machine.is_valid_transition(self.status, new_status)

    def __str__(self) -> str:
        return f"Order {self.id} ({self.status})"
