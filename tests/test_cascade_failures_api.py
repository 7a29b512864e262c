"""A cascade that fails mid-run surfaces as CASCADE_FAILED on every trigger endpoint."""

from datetime import date
from decimal import Decimal
from uuid import UUID

import pytest
from sqlalchemy import func, select

from storeledger.core import cascade as cascade_module
from storeledger.core.cascade import cascade_from
from storeledger.core.ledger_days import get_ledger_day
from storeledger.models import ManualLedgerEntry, Sale, SaleReturn
from storeledger.models.enums import ReturnStatus
from tests.factories import LedgerDayFactory, ProductFactory, RateFactory, SaleFactory


@pytest.fixture
def fail_cascade_on(monkeypatch):
    """Make the cascade raise when it reaches the given day."""
    real_recalculate_day = cascade_module.recalculate_day

    def _fail_on(failing_day: date) -> None:
        async def failing_recalculate_day(db, ledger_day):
            if ledger_day.date == failing_day:
                raise RuntimeError("disk full")
            return await real_recalculate_day(db, ledger_day)

        monkeypatch.setattr(cascade_module, "recalculate_day", failing_recalculate_day)

    return _fail_on


@pytest.fixture
async def sale(db_session):
    product = await ProductFactory.create(db_session)
    return await SaleFactory.create(
        db_session,
        product,
        date=date(2024, 3, 1),
        commission=Decimal("1500.00"),
        tax=Decimal("500.00"),
    )


def _assert_cascade_failed(response, failed_date: str, committed_dates: list[str]) -> None:
    assert response.status_code == 500
    data = response.json()
    assert data["code"] == "CASCADE_FAILED"
    assert failed_date in data["message"]
    assert data["details"] == {"failed_date": failed_date, "committed_dates": committed_dates}


class TestSalesCascadeFailure:
    async def test_create_sale(self, client, fail_cascade_on):
        product = await ProductFactory.create(client.db_session)
        await RateFactory.create(client.db_session)
        product_id = str(product.id)
        await LedgerDayFactory.create(client.db_session, date=date(2024, 3, 2))
        fail_cascade_on(date(2024, 3, 2))

        response = await client.post(
            "/sales",
            json={
                "date": "2024-03-01",
                "buyer": "Ana Gomez",
                "channel": "marketplace",
                "payment_method": "processor",
                "product_id": product_id,
                "gross_price": "10000.00",
            },
        )

        _assert_cascade_failed(response, "2024-03-02", ["2024-03-01"])
        sale_count = await client.db_session.scalar(select(func.count()).select_from(Sale))
        assert sale_count == 1
        day1 = await get_ledger_day(client.db_session, date(2024, 3, 1))
        day2 = await get_ledger_day(client.db_session, date(2024, 3, 2))
        assert day1.processor_pending == Decimal("8000.00")
        assert day2.processor_pending == Decimal("0.00")


class TestReturnsCascadeFailure:
    async def test_finalize_return(self, client, sale, fail_cascade_on):
        sale_id = str(sale.id)
        await LedgerDayFactory.create(client.db_session, date=date(2024, 3, 1))
        await LedgerDayFactory.create(client.db_session, date=date(2024, 3, 4))
        await cascade_from(client.db_session, date(2024, 3, 1))

        response = await client.post(
            "/returns", json={"sale_id": sale_id, "claim_date": "2024-03-02"}
        )
        return_id = response.json()["id"]
        fail_cascade_on(date(2024, 3, 4))

        response = await client.post(
            f"/returns/{return_id}/finalize",
            json={"status": "delivered_refund", "completed_date": "2024-03-03"},
        )

        _assert_cascade_failed(response, "2024-03-04", ["2024-03-03"])
        status = await client.db_session.scalar(
            select(SaleReturn.status).where(SaleReturn.id == UUID(return_id))
        )
        assert status == ReturnStatus.DELIVERED_REFUND
        day3 = await get_ledger_day(client.db_session, date(2024, 3, 3))
        day4 = await get_ledger_day(client.db_session, date(2024, 3, 4))
        assert day3.processor_available == Decimal("-8000.00")
        assert day3.processor_pending == Decimal("8000.00")
        assert day4.processor_available == Decimal("0.00")

    async def test_update_return(self, client, sale, fail_cascade_on):
        sale_id = str(sale.id)
        await LedgerDayFactory.create(client.db_session, date=date(2024, 3, 4))
        response = await client.post(
            "/returns", json={"sale_id": sale_id, "claim_date": "2024-03-02"}
        )
        return_id = response.json()["id"]
        fail_cascade_on(date(2024, 3, 4))

        response = await client.patch(
            f"/returns/{return_id}",
            json={"status": "delivered_refund", "completed_date": "2024-03-03"},
        )

        _assert_cascade_failed(response, "2024-03-04", ["2024-03-03"])

    async def test_delete_return(self, client, sale, fail_cascade_on):
        sale_id = str(sale.id)
        response = await client.post(
            "/returns",
            json={
                "sale_id": sale_id,
                "claim_date": "2024-03-02",
                "status": "delivered_refund",
                "completed_date": "2024-03-03",
            },
        )
        return_id = response.json()["id"]
        await LedgerDayFactory.create(client.db_session, date=date(2024, 3, 4))
        fail_cascade_on(date(2024, 3, 4))

        response = await client.delete(f"/returns/{return_id}")

        _assert_cascade_failed(response, "2024-03-04", ["2024-03-03"])
        return_count = await client.db_session.scalar(
            select(func.count()).select_from(SaleReturn)
        )
        assert return_count == 0
        day3 = await get_ledger_day(client.db_session, date(2024, 3, 3))
        assert day3.processor_available == Decimal("0.00")


class TestLedgerEntriesCascadeFailure:
    async def test_create_entry(self, client, fail_cascade_on):
        await LedgerDayFactory.create(client.db_session, date=date(2024, 3, 2))
        fail_cascade_on(date(2024, 3, 2))

        response = await client.post(
            "/ledger-entries",
            json={
                "date": "2024-03-01",
                "entry_type": "expense",
                "category": "Packaging",
                "amount": "1200.00",
            },
        )

        _assert_cascade_failed(response, "2024-03-02", ["2024-03-01"])
        entry_count = await client.db_session.scalar(
            select(func.count()).select_from(ManualLedgerEntry)
        )
        assert entry_count == 1
        day1 = await get_ledger_day(client.db_session, date(2024, 3, 1))
        assert day1.processor_available == Decimal("-1200.00")


class TestSettlementCascadeFailure:
    async def test_process_settlement(self, client, sale, fail_cascade_on):
        await LedgerDayFactory.create(client.db_session, date=date(2024, 3, 1))
        await LedgerDayFactory.create(client.db_session, date=date(2024, 3, 2))
        fail_cascade_on(date(2024, 3, 2))

        response = await client.post(
            "/ledger/settlements",
            json={"date": "2024-03-01", "processor_settled": "8000.00"},
        )

        _assert_cascade_failed(response, "2024-03-02", ["2024-03-01"])
        day1 = await get_ledger_day(client.db_session, date(2024, 3, 1))
        assert day1.processor_settled_today == Decimal("8000.00")
        assert day1.processor_available == Decimal("8000.00")
        assert day1.processor_pending == Decimal("0.00")
