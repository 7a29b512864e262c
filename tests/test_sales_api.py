"""Tests for the sales API and the ledger updates it triggers."""

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from storeledger.core.ledger_days import get_ledger_day
from storeledger.models import LedgerDay, Sale
from storeledger.models.enums import Channel, PaymentMethod
from tests.factories import ProductFactory, RateFactory, SaleFactory, SaleReturnFactory


def _sale_payload(product, **overrides) -> dict:
    payload = {
        "date": "2024-03-01",
        "buyer": "Ana Gomez",
        "channel": "marketplace",
        "payment_method": "processor",
        "product_id": str(product.id),
        "gross_price": "10000.00",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
async def product(db_session):
    return await ProductFactory.create(db_session)


@pytest.fixture
async def marketplace_rate(db_session):
    return await RateFactory.create(db_session)


class TestCreateSale:
    async def test_create_prices_and_updates_ledger(self, client, product, marketplace_rate):
        response = await client.post("/sales", json=_sale_payload(product))

        assert response.status_code == 201
        data = response.json()
        assert data["sale_code"].startswith("SL-")
        assert Decimal(data["commission"]) == Decimal("1500.00")
        assert Decimal(data["tax"]) == Decimal("500.00")
        assert Decimal(data["net_price"]) == Decimal("8000.00")
        assert Decimal(data["margin"]) == Decimal("6000.00")

        ledger_day = await get_ledger_day(client.db_session, date(2024, 3, 1))
        assert ledger_day.processor_pending == Decimal("8000.00")
        assert ledger_day.processor_available == Decimal("0.00")

    async def test_missing_rate_writes_nothing(self, client, product):
        response = await client.post("/sales", json=_sale_payload(product))

        assert response.status_code == 422
        data = response.json()
        assert data["code"] == "MISSING_DEPENDENCY"
        assert data["details"]["channel"] == "marketplace"

        sale_count = await client.db_session.scalar(select(func.count()).select_from(Sale))
        day_count = await client.db_session.scalar(select(func.count()).select_from(LedgerDay))
        assert sale_count == 0
        assert day_count == 0

    async def test_missing_product_is_rejected(self, client, marketplace_rate):
        payload = {
            "date": "2024-03-01",
            "buyer": "Ana Gomez",
            "channel": "marketplace",
            "payment_method": "processor",
            "product_id": "00000000-0000-0000-0000-000000000000",
            "gross_price": "10000.00",
        }

        response = await client.post("/sales", json=payload)

        assert response.status_code == 422
        assert response.json()["code"] == "MISSING_DEPENDENCY"

    async def test_future_date_is_rejected(self, client, product, marketplace_rate):
        response = await client.post("/sales", json=_sale_payload(product, date="2999-01-01"))

        assert response.status_code == 422

    async def test_cash_sale_does_not_move_balances(self, client, db_session, product):
        await RateFactory.create(
            db_session,
            channel=Channel.DIRECT,
            payment_method=PaymentMethod.CASH,
            commission_pct=Decimal("0"),
            tax_pct=Decimal("0"),
        )

        response = await client.post(
            "/sales",
            json=_sale_payload(product, channel="direct", payment_method="cash"),
        )

        assert response.status_code == 201
        ledger_day = await get_ledger_day(db_session, date(2024, 3, 1))
        assert ledger_day.processor_available == Decimal("0.00")
        assert ledger_day.processor_pending == Decimal("0.00")
        assert ledger_day.platform_pending == Decimal("0.00")


class TestUpdateSale:
    async def test_cosmetic_edit_keeps_balances(self, client, product, marketplace_rate):
        created = (await client.post("/sales", json=_sale_payload(product))).json()

        response = await client.patch(
            f"/sales/{created['id']}",
            json={"buyer": "Ana M. Gomez", "courier": "Andreani"},
        )

        assert response.status_code == 200
        assert response.json()["buyer"] == "Ana M. Gomez"
        assert response.json()["courier"] == "Andreani"
        ledger_day = await get_ledger_day(client.db_session, date(2024, 3, 1))
        assert ledger_day.processor_pending == Decimal("8000.00")

    async def test_price_change_reprices_and_cascades(self, client, product, marketplace_rate):
        created = (await client.post("/sales", json=_sale_payload(product))).json()

        response = await client.patch(f"/sales/{created['id']}", json={"gross_price": "20000.00"})

        assert response.status_code == 200
        assert Decimal(response.json()["net_price"]) == Decimal("16000.00")
        ledger_day = await get_ledger_day(client.db_session, date(2024, 3, 1))
        assert ledger_day.processor_pending == Decimal("16000.00")

    async def test_date_move_cascades_from_earlier_date(self, client, product, marketplace_rate):
        created = (await client.post("/sales", json=_sale_payload(product))).json()

        response = await client.patch(f"/sales/{created['id']}", json={"date": "2024-03-03"})

        assert response.status_code == 200
        old_day = await get_ledger_day(client.db_session, date(2024, 3, 1))
        new_day = await get_ledger_day(client.db_session, date(2024, 3, 3))
        assert old_day.processor_pending == Decimal("0.00")
        assert new_day.processor_pending == Decimal("8000.00")

    async def test_update_to_unpriced_combination_fails(self, client, product, marketplace_rate):
        created = (await client.post("/sales", json=_sale_payload(product))).json()

        response = await client.patch(
            f"/sales/{created['id']}",
            json={"channel": "storefront", "payment_method": "platform_pay"},
        )

        assert response.status_code == 422
        assert response.json()["code"] == "MISSING_DEPENDENCY"

    async def test_unknown_sale_returns_404(self, client):
        response = await client.patch(
            "/sales/00000000-0000-0000-0000-000000000000", json={"buyer": "x"}
        )

        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"


class TestDeleteSale:
    async def test_delete_removes_contribution(self, client, product, marketplace_rate):
        created = (await client.post("/sales", json=_sale_payload(product))).json()

        response = await client.delete(f"/sales/{created['id']}")

        assert response.status_code == 204
        ledger_day = await get_ledger_day(client.db_session, date(2024, 3, 1))
        assert ledger_day.processor_pending == Decimal("0.00")

    async def test_delete_with_returns_conflicts(self, client, db_session, product):
        sale = await SaleFactory.create(db_session, product)
        await SaleReturnFactory.create(db_session, sale)

        response = await client.delete(f"/sales/{sale.id}")

        assert response.status_code == 409
        assert response.json()["details"]["return_count"] == 1


class TestSaleQueries:
    async def test_preview_does_not_save(self, client, product, marketplace_rate):
        response = await client.post(
            "/sales/preview",
            json={
                "channel": "marketplace",
                "payment_method": "processor",
                "product_id": str(product.id),
                "gross_price": "10000.00",
                "shipping_cost": "700.00",
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert data["settlement_route"] == "processor_pending"
        assert Decimal(data["net_price"]) == Decimal("8000.00")
        assert Decimal(data["settlement_amount"]) == Decimal("7300.00")

        sale_count = await client.db_session.scalar(select(func.count()).select_from(Sale))
        assert sale_count == 0

    async def test_list_filters_by_channel(self, client, db_session, product):
        await SaleFactory.create(db_session, product, channel=Channel.MARKETPLACE)
        await SaleFactory.create(
            db_session,
            product,
            channel=Channel.DIRECT,
            payment_method=PaymentMethod.BANK_TRANSFER,
        )

        response = await client.get("/sales", params={"channel": "direct"})

        assert response.status_code == 200
        assert len(response.json()) == 1
        assert response.json()[0]["payment_method"] == "bank_transfer"

    async def test_list_rejects_inverted_range(self, client):
        response = await client.get(
            "/sales", params={"from_date": "2024-03-05", "to_date": "2024-03-01"}
        )

        assert response.status_code == 422
        assert response.json()["code"] == "VALIDATION_ERROR"
