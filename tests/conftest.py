from datetime import timedelta
from decimal import Decimal
from typing import Optional

import pytest
from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.utils import timezone
from rest_framework.test import APIClient

from modules.companies.models import Company, CompanyRole
from modules.orders.constants import OrderStatus
from modules.orders.models import Order
from modules.quotations.models import Quotation, QuotationStatus

User = get_user_model()

# Valid check digits for both documents.
ADMIN_CNPJ = "98765432000198"
SUPPLIER_CNPJ = "12345678000195"
OTHER_SUPPLIER_CNPJ = "11444777000161"
CUSTOMER_CNPJ = "11222333000181"

VALID_NFE_KEY = "35240312345678000195550010000014761000047680"
OTHER_VALID_NFE_KEY = "35260111222333000181550010000001231000001231"
INVALID_NFE_KEY = "35240312345678000195550010000014761000047681"


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture(autouse=True)
def _clear_cache():
    """Throttle counters live in the cache; start every test from zero."""
    cache.clear()
    yield
    cache.clear()


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def api_client_with_correlation(api_client):
    """APIClient pre-configured with a known correlation ID header."""
    cid = "test-correlation-id-fixture"
    api_client.defaults["HTTP_X_REQUEST_ID"] = cid
    return api_client, cid


# ---------------------------------------------------------------------------
# Companies
# ---------------------------------------------------------------------------


def _create_company(username: str, name: str, cnpj: str, role: str) -> Company:
    user = User.objects.create_user(username=username, password="testpass123")
    return Company.objects.create(user=user, name=name, cnpj=cnpj, role=role)


@pytest.fixture()
def admin_company():
    return _create_company("admin", "Marketplace Ops", ADMIN_CNPJ, CompanyRole.ADMIN)


@pytest.fixture()
def supplier_company():
    return _create_company(
        "alfa", "Distribuidora Alfa", SUPPLIER_CNPJ, CompanyRole.SUPPLIER
    )


@pytest.fixture()
def other_supplier_company():
    return _create_company(
        "beta", "Comercial Beta", OTHER_SUPPLIER_CNPJ, CompanyRole.SUPPLIER
    )


@pytest.fixture()
def customer_company():
    return _create_company("gama", "Mercado Gama", CUSTOMER_CNPJ, CompanyRole.CUSTOMER)


@pytest.fixture()
def client_for():
    """Build an APIClient authenticated as the user behind *company*."""

    def _client(company: Optional[Company] = None, user=None) -> APIClient:
        client = APIClient()
        client.force_authenticate(user=user or company.user)
        return client

    return _client


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------


@pytest.fixture()
def make_order(supplier_company, customer_company):
    """Create an order; ``age_days`` backdates ``created_at``.

    ``processing_days`` sets ``updated_at`` that many days after
    ``created_at``.
    """

    def _make(
        status: str = OrderStatus.PENDING,
        company: Optional[Company] = None,
        buyer: Optional[Company] = None,
        age_days: int = 0,
        processing_days: Optional[float] = None,
        **fields,
    ) -> Order:
        quotation = Quotation.objects.create(
            buyer=buyer or customer_company,
            status=QuotationStatus.COMPLETED,
            total_amount=Decimal("1500.00"),
        )
        order = Order.objects.create(
            company=company or supplier_company,
            quotation=quotation,
            status=status,
            total_amount=quotation.total_amount,
            **fields,
        )
        if age_days or processing_days is not None:
            created_at = timezone.now() - timedelta(days=age_days)
            updated_at = created_at + timedelta(days=processing_days or 0)
            Order.objects.filter(id=order.id).update(
                created_at=created_at, updated_at=updated_at
            )
            order.refresh_from_db()
        return order

    return _make
