"""Integration tests for SimpleJWT authentication and the /me endpoint.

Validates:
  - /health is public (plain Django view, no DRF).
  - Protected DRF endpoints return 401 without a valid token.
  - A token obtained with company credentials resolves the company's role.
"""

import pytest

pytestmark = pytest.mark.integration


def _obtain_access_token(api_client, username: str) -> str:
    response = api_client.post(
        "/api/v1/auth/token/",
        {"username": username, "password": "testpass123"},
        format="json",
    )
    assert response.status_code == 200
    return response.json()["access"]


class TestPublicEndpoints:
    """Health check must remain accessible without credentials."""

    def test_health_is_public(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestProtectedEndpoints:
    """All DRF endpoints require a valid JWT by default (Fail Closed)."""

    @pytest.mark.parametrize(
        "path", ["/api/v1/me", "/api/v1/orders/", "/api/v1/orders/admin/stats/"]
    )
    def test_no_token_returns_401(self, api_client, path):
        response = api_client.get(path)
        assert response.status_code == 401

    def test_invalid_token_returns_401(self, api_client):
        api_client.credentials(HTTP_AUTHORIZATION="Bearer invalid.token.here")
        response = api_client.get("/api/v1/me")
        assert response.status_code == 401

    def test_malformed_auth_header_returns_401(self, api_client):
        api_client.credentials(HTTP_AUTHORIZATION="Token some-token")
        response = api_client.get("/api/v1/me")
        assert response.status_code == 401

    def test_401_includes_www_authenticate_header(self, api_client):
        response = api_client.get("/api/v1/orders/")
        assert response.status_code == 401
        assert "Bearer" in response.get("WWW-Authenticate", "")

    def test_wrong_password_is_rejected(self, api_client, supplier_company):
        response = api_client.post(
            "/api/v1/auth/token/",
            {"username": "alfa", "password": "wrong"},
            format="json",
        )
        assert response.status_code == 401


class TestMeEndpoint:
    def test_token_resolves_company_and_role(self, api_client, supplier_company):
        token = _obtain_access_token(api_client, "alfa")
        api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")

        response = api_client.get("/api/v1/me")

        assert response.status_code == 200
        body = response.json()
        assert body["user"] == "alfa"
        assert body["companyId"] == str(supplier_company.id)
        assert body["role"] == "supplier"

    def test_user_without_company(self, api_client, django_user_model):
        user = django_user_model.objects.create_user(
            username="loose", password="testpass123"
        )
        api_client.force_authenticate(user=user)

        response = api_client.get("/api/v1/me")

        assert response.status_code == 200
        assert response.json()["companyId"] is None
        assert response.json()["role"] is None

    def test_bearer_token_reaches_order_endpoints(self, api_client, admin_company):
        token = _obtain_access_token(api_client, "admin")
        api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")

        response = api_client.get("/api/v1/orders/admin/stats/")

        assert response.status_code == 200
        assert response.json()["totalOrders"] == 0
