"""Integration tests for PATCH /api/v1/orders/{id}/nfe/.

Ownership is checked before the order state, so a supplier probing
another supplier's pending order learns nothing about its status.
"""

from __future__ import annotations

from uuid import uuid4

import pytest

from modules.orders.constants import OrderStatus

pytestmark = pytest.mark.integration

VALID_NFE_KEY = "35240312345678000195550010000014761000047680"
OTHER_VALID_NFE_KEY = "35260111222333000181550010000001231000001231"
INVALID_NFE_KEY = "35240312345678000195550010000014761000047681"


def _nfe_url(order_id) -> str:
    return f"/api/v1/orders/{order_id}/nfe/"


@pytest.fixture()
def shipped_order(make_order):
    return make_order(
        status=OrderStatus.SHIPPED,
        tracking_number="BR123456789",
        nfe_access_key=VALID_NFE_KEY,
        nfe_url="https://nfe.example.com/old",
    )


class TestNfeCorrection:
    def test_owner_corrects_key_only(self, client_for, supplier_company, shipped_order):
        response = client_for(supplier_company).patch(
            _nfe_url(shipped_order.id),
            {"nfeAccessKey": OTHER_VALID_NFE_KEY},
            format="json",
        )

        assert response.status_code == 200
        body = response.json()
        assert body["nfeAccessKey"] == OTHER_VALID_NFE_KEY
        assert body["nfeUrl"] == "https://nfe.example.com/old"
        assert body["status"] == "shipped"
        assert body["trackingNumber"] == "BR123456789"

    def test_owner_corrects_url_on_delivered_order(
        self, client_for, supplier_company, make_order
    ):
        order = make_order(status=OrderStatus.DELIVERED, nfe_access_key=VALID_NFE_KEY)

        response = client_for(supplier_company).patch(
            _nfe_url(order.id), {"nfeUrl": "https://nfe.example.com/new"}, format="json"
        )

        assert response.status_code == 200
        order.refresh_from_db()
        assert order.nfe_url == "https://nfe.example.com/new"
        assert order.nfe_access_key == VALID_NFE_KEY

    def test_admin_may_correct_any_order(
        self, client_for, admin_company, shipped_order
    ):
        response = client_for(admin_company).patch(
            _nfe_url(shipped_order.id),
            {"nfeUrl": "https://nfe.example.com/admin"},
            format="json",
        )
        assert response.status_code == 200

    def test_other_supplier_is_denied(
        self, client_for, other_supplier_company, shipped_order
    ):
        response = client_for(other_supplier_company).patch(
            _nfe_url(shipped_order.id),
            {"nfeAccessKey": OTHER_VALID_NFE_KEY},
            format="json",
        )

        assert response.status_code == 403
        assert response.json()["detail"] == "Access denied: you do not own this order"
        shipped_order.refresh_from_db()
        assert shipped_order.nfe_access_key == VALID_NFE_KEY

    def test_ownership_is_checked_before_state(
        self, client_for, other_supplier_company, make_order
    ):
        order = make_order(status=OrderStatus.PENDING)

        response = client_for(other_supplier_company).patch(
            _nfe_url(order.id), {"nfeAccessKey": VALID_NFE_KEY}, format="json"
        )

        assert response.status_code == 403

    @pytest.mark.parametrize(
        "status", [OrderStatus.PENDING, OrderStatus.PROCESSING, OrderStatus.CANCELLED]
    )
    def test_unshipped_order_returns_400(
        self, client_for, supplier_company, make_order, status
    ):
        order = make_order(status=status)

        response = client_for(supplier_company).patch(
            _nfe_url(order.id), {"nfeAccessKey": VALID_NFE_KEY}, format="json"
        )

        assert response.status_code == 400
        assert response.json()["detail"].endswith(f"Current status: {status}")

    def test_empty_patch_returns_400(self, client_for, supplier_company, shipped_order):
        response = client_for(supplier_company).patch(
            _nfe_url(shipped_order.id), {}, format="json"
        )

        assert response.status_code == 400
        assert response.json()["detail"] == (
            "At least one of nfeAccessKey or nfeUrl must be provided"
        )

    def test_invalid_key_returns_400(self, client_for, supplier_company, shipped_order):
        response = client_for(supplier_company).patch(
            _nfe_url(shipped_order.id), {"nfeAccessKey": INVALID_NFE_KEY}, format="json"
        )

        assert response.status_code == 400
        assert "nfeAccessKey" in response.json()

    def test_invalid_url_returns_400(self, client_for, supplier_company, shipped_order):
        response = client_for(supplier_company).patch(
            _nfe_url(shipped_order.id), {"nfeUrl": "not a url"}, format="json"
        )
        assert response.status_code == 400

    def test_ftp_url_returns_400(self, client_for, supplier_company, shipped_order):
        response = client_for(supplier_company).patch(
            _nfe_url(shipped_order.id),
            {"nfeUrl": "ftp://nfe.example.com/a.xml"},
            format="json",
        )

        assert response.status_code == 400
        assert "nfeUrl" in response.json()
        shipped_order.refresh_from_db()
        assert shipped_order.nfe_url == "https://nfe.example.com/old"

    def test_customer_cannot_correct(self, client_for, customer_company, shipped_order):
        response = client_for(customer_company).patch(
            _nfe_url(shipped_order.id),
            {"nfeUrl": "https://x.example.com"},
            format="json",
        )
        assert response.status_code == 403

    def test_unknown_order_returns_404(self, client_for, supplier_company):
        response = client_for(supplier_company).patch(
            _nfe_url(uuid4()), {"nfeAccessKey": VALID_NFE_KEY}, format="json"
        )
        assert response.status_code == 404
