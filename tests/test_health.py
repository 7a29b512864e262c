"""Tests for the health check endpoint."""

from datetime import date, datetime, timedelta

from httpx import AsyncClient

from storeledger.api.health import get_uptime_seconds, set_app_start_time
from storeledger.core.db import get_db
from tests.factories import LedgerDayFactory


class TestHealthCheckEndpoint:
    """Test suite for /health endpoint."""

    async def test_health_endpoint_returns_200_when_db_ok(self, client: AsyncClient) -> None:
        response = await client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["uptime_seconds"] >= 0
        assert data["checks"]["database"]["status"] == "ok"
        assert isinstance(data["checks"]["database"]["response_time_ms"], int)

    async def test_health_endpoint_content_type(self, client: AsyncClient) -> None:
        response = await client.get("/health")

        assert "application/json" in response.headers["content-type"]

    def test_health_endpoint_uptime_tracking(self) -> None:
        """Uptime is measured from the start time set by the lifespan."""
        one_hour_ago = datetime.now() - timedelta(hours=1)
        set_app_start_time(one_hour_ago)

        uptime = get_uptime_seconds()

        assert 3590 <= uptime <= 3610, f"Expected ~3600 seconds, got {uptime}"


class TestHealthCheckDegradedStates:
    async def test_health_returns_degraded_when_db_fails(self, client: AsyncClient) -> None:
        class BrokenSession:
            async def execute(self, *args, **kwargs):
                raise ConnectionRefusedError("database is down")

        async def broken_db():
            yield BrokenSession()

        client.app.dependency_overrides[get_db] = broken_db

        response = await client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "degraded"
        assert data["checks"]["database"]["status"] == "down"
        assert data["checks"]["database"]["error"] == "ConnectionRefusedError"

    async def test_ledger_check_skipped_when_db_down(self, client: AsyncClient) -> None:
        class BrokenSession:
            async def execute(self, *args, **kwargs):
                raise ConnectionRefusedError("database is down")

        async def broken_db():
            yield BrokenSession()

        client.app.dependency_overrides[get_db] = broken_db

        response = await client.get("/health")

        assert "ledger" not in response.json()["checks"]


class TestHealthLedgerCheck:
    async def test_empty_ledger(self, client: AsyncClient) -> None:
        response = await client.get("/health")

        ledger = response.json()["checks"]["ledger"]
        assert ledger == {"status": "empty", "latest_day": None, "has_opening_balance": False}

    async def test_reports_latest_day_and_anchor(self, client: AsyncClient, db_session) -> None:
        await LedgerDayFactory.create(db_session, date=date(2024, 3, 1), is_opening_balance=True)
        await LedgerDayFactory.create(db_session, date=date(2024, 3, 5))

        response = await client.get("/health")

        ledger = response.json()["checks"]["ledger"]
        assert ledger["status"] == "ok"
        assert ledger["latest_day"] == "2024-03-05"
        assert ledger["has_opening_balance"] is True
