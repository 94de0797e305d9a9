"""Quotation model.

A quotation is the buyer's request that a supplier priced; once
``processed`` it can be converted into an order.  The orders module only
reads it (``Order.quotation``) to project the originating request next to
the order.
"""

from __future__ import annotations

from decimal import Decimal

from django.db import models

from modules.core.models import BaseModel


class QuotationStatus(models.TextChoices):
    PENDING = "pending", "Pendente"
    PROCESSED = "processed", "Processada"
    COMPLETED = "completed", "Concluída"
    REJECTED = "rejected", "Rejeitada"


class Quotation(BaseModel):
    buyer = models.ForeignKey(
        "companies.Company",
        on_delete=models.PROTECT,
        related_name="quotations",
    )
    status = models.CharField(
        max_length=20,
        choices=QuotationStatus.choices,
        default=QuotationStatus.PENDING,
    )
    total_amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
    )
    valid_until = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "quotations"
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"Quotation {self.id} ({self.status})"
