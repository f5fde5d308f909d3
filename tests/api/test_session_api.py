"""
API tests for broker session and exchange rate endpoints.

Tests cover:
- Login, logout and session state
- Exchange rate read and invalidation
- Rate provider failures (502)
- Health and root endpoints
"""

from decimal import Decimal

from fastapi.testclient import TestClient

from fintrack import __version__
from fintrack.core.exceptions import RateFetchFailed


# =============================================================================
# AUTH TESTS
# =============================================================================


class TestAuthAPI:
    """Tests for /auth endpoints."""

    def test_login_then_logout(self, client: TestClient):
        assert client.get("/auth/session").json() == {"authenticated": False}

        response = client.post("/auth/login", json={"username": "user", "password": "secret"})

        assert response.status_code == 200
        assert response.json() == {"authenticated": True}
        assert client.get("/auth/session").json() == {"authenticated": True}

        assert client.post("/auth/logout").json() == {"authenticated": False}
        assert client.get("/auth/session").json() == {"authenticated": False}

    def test_bad_credentials_are_401(self, client: TestClient):
        response = client.post("/auth/login", json={"username": "user", "password": "wrong"})

        assert response.status_code == 401
        assert response.json()["error"] == "AUTHENTICATION_FAILED"

    def test_empty_credentials_are_422(self, client: TestClient):
        response = client.post("/auth/login", json={"username": "", "password": ""})

        assert response.status_code == 422


# =============================================================================
# EXCHANGE RATE TESTS
# =============================================================================


class TestExchangeRateAPI:
    """Tests for /exchange-rate."""

    def test_get_rate_is_cached(self, client: TestClient, rate_provider):
        first = client.get("/exchange-rate")
        second = client.get("/exchange-rate")

        assert first.status_code == 200
        assert Decimal(first.json()["buy_rate"]) == Decimal("1000")
        assert Decimal(first.json()["sell_rate"]) == Decimal("1050")
        assert second.json() == first.json()
        assert rate_provider.calls == 1

    def test_invalidate_forces_refetch(self, client: TestClient, rate_provider):
        client.get("/exchange-rate")

        assert client.delete("/exchange-rate").status_code == 204
        client.get("/exchange-rate")

        assert rate_provider.calls == 2

    def test_provider_failure_is_502(self, client: TestClient, rate_provider):
        rate_provider.error = RateFetchFailed("Exchange rate provider returned HTTP 503")

        response = client.get("/exchange-rate")

        assert response.status_code == 502
        assert response.json()["error"] == "RATE_FETCH_FAILED"


class TestMetaEndpoints:
    def test_health(self, client: TestClient):
        assert client.get("/health").json() == {"status": "healthy"}

    def test_root_reports_version(self, client: TestClient):
        assert client.get("/").json()["version"] == __version__
