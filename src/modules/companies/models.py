"""Company model: the marketplace participant behind a user account.

Every authenticated user acts on behalf of exactly one company.  The
company's ``role`` drives authorization in the orders module:

- ``admin``: marketplace operator, may act on any order.
- ``supplier``: owns the orders it fulfils (``Order.company``).
- ``customer``: buys through quotations, read-only on orders.
"""

from __future__ import annotations

import re

import structlog
from validate_docbr import CNPJ

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from modules.core.models import BaseModel

logger = structlog.get_logger(__name__)


class CompanyRole(models.TextChoices):
    ADMIN = "admin", "Administrador"
    SUPPLIER = "supplier", "Fornecedor"
    CUSTOMER = "customer", "Cliente"


class Company(BaseModel):
    """A buyer, supplier or operator registered in the marketplace.

    ``cnpj`` stores only digits (sanitised on save) and is validated with
    *validate-docbr* in ``clean()``.
    """

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="company",
    )
    name = models.CharField(max_length=255)
    cnpj = models.CharField(max_length=14, unique=True)
    role = models.CharField(
        max_length=20,
        choices=CompanyRole.choices,
        default=CompanyRole.CUSTOMER,
    )

    class Meta:
        db_table = "companies"
        ordering = ["name"]
        verbose_name_plural = "companies"

    @property
    def is_admin(self) -> bool:
        return self.role == CompanyRole.ADMIN

    @staticmethod
    def _sanitize_cnpj(value: str) -> str:
        return re.sub(r"\D", "", value)

    def clean(self) -> None:
        super().clean()
        if self.cnpj:
            self.cnpj = self._sanitize_cnpj(self.cnpj)
        if not CNPJ().validate(self.cnpj):
            logger.warning(
                "company.invalid_cnpj",
                cnpj_suffix=self.cnpj[-4:] if self.cnpj else "",
            )
            raise ValidationError({"cnpj": "Invalid CNPJ number."})

    def save(self, *args, **kwargs) -> None:
        if self.cnpj:
            self.cnpj = self._sanitize_cnpj(self.cnpj)
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.name} ({self.role})"
