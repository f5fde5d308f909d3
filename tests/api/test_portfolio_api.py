"""
API tests for portfolio endpoints.

Tests cover:
- Reconciliation passes through POST /portfolio/refresh
- Position listing
- Operations sync
- Snapshots, valuation history and performance
- Error mapping (401, 404, 502)
"""

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from fintrack.core.exceptions import AuthenticationFailed, BrokerRequestFailed
from fintrack.domain.models import Currency
from fintrack.domain.views import InstrumentInfo, SymbolFailure

from tests.conftest import broker_position, local_datetime, make_operation


# =============================================================================
# REFRESH TESTS
# =============================================================================


class TestRefreshAPI:
    """Tests for POST /portfolio/refresh."""

    def test_refresh_inserts_and_snapshots(self, client: TestClient, fake_broker):
        """
        GIVEN the broker reports GGAL with 20 shares at 55 ARS
        WHEN I POST /portfolio/refresh
        THEN GGAL is inserted and a 1100 ARS snapshot is returned
        """
        fake_broker.positions = [
            broker_position("GGAL", "20", last_ars="55", last_usd="0.55", cost_ars="50", cost_usd="0.5")
        ]

        response = client.post("/portfolio/refresh")

        assert response.status_code == 200
        data = response.json()
        assert data["inserted"] == ["GGAL"]
        assert data["is_partial"] is False
        assert Decimal(data["snapshot"]["total_value_ars"]) == Decimal("1100")
        assert Decimal(data["snapshot"]["total_value_usd"]) == Decimal("11")

    def test_refresh_without_snapshot(self, client: TestClient, fake_broker):
        fake_broker.positions = [broker_position("GGAL", "20", last_ars="55", last_usd="0.55")]

        response = client.post("/portfolio/refresh", params={"snapshot": "false"})

        assert response.status_code == 200
        assert response.json()["snapshot"] is None

    def test_partial_pass_reports_failures(self, client: TestClient, fake_broker):
        fake_broker.positions = [broker_position("GGAL", "20", last_ars="55", last_usd="0.55")]
        fake_broker.failures = [SymbolFailure("YPFD", "BROKER_PAYLOAD_INVALID", "missing 'cantidad'")]

        data = client.post("/portfolio/refresh").json()

        assert data["is_partial"] is True
        assert data["failures"][0]["symbol"] == "YPFD"

    def test_expired_session_is_401(self, client: TestClient, fake_broker):
        fake_broker.pull_error = AuthenticationFailed("No refresh token stored; please log in")

        response = client.post("/portfolio/refresh")

        assert response.status_code == 401
        assert response.json()["error"] == "AUTHENTICATION_FAILED"

    def test_broker_outage_is_502(self, client: TestClient, fake_broker):
        fake_broker.pull_error = BrokerRequestFailed("Request to /api/v2/portafolio/argentina returned HTTP 503")

        response = client.post("/portfolio/refresh")

        assert response.status_code == 502
        assert response.json()["error"] == "BROKER_REQUEST_FAILED"


# =============================================================================
# POSITIONS TESTS
# =============================================================================


class TestPositionsAPI:
    """Tests for GET /portfolio/positions."""

    def test_empty(self, client: TestClient):
        response = client.get("/portfolio/positions")

        assert response.status_code == 200
        assert response.json() == {"positions": [], "count": 0}

    def test_lists_positions_with_market_value(self, client: TestClient, fake_broker):
        fake_broker.positions = [
            broker_position("YPFD", "2", last_ars="20000", last_usd="20"),
            broker_position("GGAL", "10", last_ars="1100", last_usd="1.1"),
        ]
        client.post("/portfolio/refresh")

        data = client.get("/portfolio/positions").json()

        assert data["count"] == 2
        ggal, ypfd = data["positions"]
        assert ggal["symbol"] == "GGAL"
        assert Decimal(ggal["market_value_ars"]) == Decimal("11000")
        assert Decimal(ypfd["market_value_usd"]) == Decimal("40")
        assert ypfd["open_position"] is True


# =============================================================================
# OPERATIONS TESTS
# =============================================================================


class TestOperationsSyncAPI:
    """Tests for POST /portfolio/operations/sync."""

    def test_sync_applies_operations(self, client: TestClient, fake_broker):
        """
        GIVEN two AAPL buys at 100 and 130 USD in the broker history
        WHEN I POST /portfolio/operations/sync
        THEN both are applied and AAPL's average cost is 110 USD
        """
        fake_broker.instruments["AAPL"] = InstrumentInfo("AAPL", Currency.REFERENCE, "CEDEARS")
        fake_broker.operations = [
            make_operation("1", "Compra", "AAPL", "10", "100", date=local_datetime(2024, 6, 1)),
            make_operation("2", "Compra", "AAPL", "5", "130", date=local_datetime(2024, 6, 2)),
        ]

        response = client.post("/portfolio/operations/sync")

        assert response.status_code == 200
        data = response.json()
        assert [o["operation_id"] for o in data["applied"]] == ["1", "2"]
        assert data["applied"][1]["kind"] == "BUY"
        assert Decimal(data["applied"][1]["position"]["avg_cost_usd"]) == Decimal("110")

    def test_sync_with_explicit_since(self, client: TestClient, fake_broker):
        response = client.post("/portfolio/operations/sync", json={"since": "2024-01-01T00:00:00-03:00"})

        assert response.status_code == 200
        assert fake_broker.since_requests[0] == local_datetime(2024, 1, 1, 0, 0)

    def test_oversell_is_flagged(self, client: TestClient, fake_broker):
        fake_broker.instruments["GGAL"] = InstrumentInfo("GGAL", Currency.LOCAL, "ACCIONES")
        fake_broker.operations = [
            make_operation("1", "Compra", "GGAL", "10", "1050", date=local_datetime(2024, 6, 1)),
            make_operation("2", "Venta", "GGAL", "12", "1050", date=local_datetime(2024, 6, 2)),
        ]

        data = client.post("/portfolio/operations/sync").json()

        assert data["oversold"] == ["2"]
        assert Decimal(data["applied"][1]["position"]["quantity"]) == Decimal("0")


# =============================================================================
# VALUATION TESTS
# =============================================================================


class TestValuationsAPI:
    """Tests for snapshot, valuation and performance endpoints."""

    def test_no_valuation_is_404(self, client: TestClient):
        response = client.get("/portfolio/valuations/latest")

        assert response.status_code == 404
        assert response.json()["error"] == "NOT_FOUND"

    def test_previous_needs_two_snapshots(self, client: TestClient):
        client.post("/portfolio/snapshots")

        assert client.get("/portfolio/valuations/previous").status_code == 404

    def test_snapshot_then_history(self, client: TestClient, fake_broker):
        fake_broker.positions = [broker_position("GGAL", "10", last_ars="1000", last_usd="1")]
        client.post("/portfolio/refresh", params={"snapshot": "false"})

        first = client.post("/portfolio/snapshots")
        fake_broker.positions = [broker_position("GGAL", "10", last_ars="1200", last_usd="1.2")]
        client.post("/portfolio/refresh")

        assert first.status_code == 201
        history = client.get("/portfolio/valuations/history", params={"limit": 5}).json()
        assert history["count"] == 2
        assert [Decimal(v["total_value_ars"]) for v in history["valuations"]] == [
            Decimal("12000"),
            Decimal("10000"),
        ]

    def test_performance(self, client: TestClient, fake_broker):
        fake_broker.positions = [broker_position("GGAL", "10", last_ars="9500", last_usd="95")]
        client.post("/portfolio/refresh")
        fake_broker.positions = [broker_position("GGAL", "10", last_ars="10000", last_usd="100")]
        client.post("/portfolio/refresh")

        data = client.get("/portfolio/performance").json()

        assert Decimal(data["delta_ars"]) == Decimal("5000")
        assert Decimal(data["delta_usd"]) == Decimal("50")
        assert Decimal(data["percent_ars"]) == Decimal("5.26")

    @pytest.mark.parametrize("limit", [0, 1001])
    def test_history_limit_validated(self, client: TestClient, limit):
        response = client.get("/portfolio/valuations/history", params={"limit": limit})

        assert response.status_code == 422
