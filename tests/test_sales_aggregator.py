"""Tests for channel routing and daily sales aggregation."""

from datetime import date
from decimal import Decimal

import pytest

from storeledger.core.sales_aggregator import (
    aggregate_sales,
    sales_impact_for_date,
    settlement_contribution,
    settlement_route,
)
from storeledger.models.enums import Channel, PaymentMethod, SettlementRoute
from storeledger.models.sale import Sale
from tests.factories import ProductFactory, SaleFactory


def _sale(channel, payment_method, gross="10000.00", commission="1500.00", vat="0.00",
          tax="500.00", shipping="0.00") -> Sale:
    return Sale(
        channel=channel,
        payment_method=payment_method,
        gross_price=Decimal(gross),
        commission=Decimal(commission),
        vat=Decimal(vat),
        tax=Decimal(tax),
        shipping_cost=Decimal(shipping),
    )


class TestSettlementRoute:
    """Which balance each channel/method lands in."""

    @pytest.mark.parametrize(
        "channel,method,expected",
        [
            (Channel.MARKETPLACE, PaymentMethod.PROCESSOR, SettlementRoute.PROCESSOR_PENDING),
            (Channel.MARKETPLACE, PaymentMethod.PLATFORM_PAY, SettlementRoute.PROCESSOR_PENDING),
            (Channel.STOREFRONT, PaymentMethod.PROCESSOR, SettlementRoute.PROCESSOR_PENDING),
            (Channel.STOREFRONT, PaymentMethod.PLATFORM_PAY, SettlementRoute.PLATFORM_PENDING),
            (Channel.STOREFRONT, PaymentMethod.BANK_TRANSFER, SettlementRoute.PLATFORM_PENDING),
            (Channel.DIRECT, PaymentMethod.BANK_TRANSFER, SettlementRoute.PROCESSOR_AVAILABLE),
            (Channel.DIRECT, PaymentMethod.CASH, SettlementRoute.NONE),
        ],
    )
    def test_routing_table(self, channel, method, expected):
        assert settlement_route(_sale(channel, method)) == expected


class TestSettlementContribution:
    """Net-to-channel amounts."""

    def test_marketplace_deducts_shipping(self):
        sale = _sale(Channel.MARKETPLACE, PaymentMethod.PROCESSOR, shipping="700.00")
        assert settlement_contribution(sale) == Decimal("7300.00")

    def test_storefront_processor_keeps_shipping(self):
        sale = _sale(Channel.STOREFRONT, PaymentMethod.PROCESSOR, shipping="700.00")
        assert settlement_contribution(sale) == Decimal("8000.00")

    def test_storefront_platform_deducts_vat(self):
        sale = _sale(Channel.STOREFRONT, PaymentMethod.PLATFORM_PAY, vat="315.00")
        assert settlement_contribution(sale) == Decimal("7685.00")

    def test_direct_transfer_only_deducts_tax(self):
        sale = _sale(Channel.DIRECT, PaymentMethod.BANK_TRANSFER, commission="0.00",
                     shipping="900.00")
        assert settlement_contribution(sale) == Decimal("9500.00")

    def test_direct_cash_contributes_nothing(self):
        sale = _sale(Channel.DIRECT, PaymentMethod.CASH)
        assert settlement_contribution(sale) == Decimal("0.00")


class TestAggregateSales:
    """Summing a day of sales into balance impacts."""

    def test_empty_day(self):
        impact = aggregate_sales([])

        assert impact.processor_available == Decimal("0.00")
        assert impact.processor_pending == Decimal("0.00")
        assert impact.platform_pending == Decimal("0.00")
        assert impact.sale_count == 0

    def test_mixed_channels(self):
        impact = aggregate_sales(
            [
                _sale(Channel.MARKETPLACE, PaymentMethod.PROCESSOR),
                _sale(Channel.STOREFRONT, PaymentMethod.PROCESSOR),
                _sale(Channel.STOREFRONT, PaymentMethod.PLATFORM_PAY),
                _sale(Channel.DIRECT, PaymentMethod.BANK_TRANSFER, commission="0.00"),
                _sale(Channel.DIRECT, PaymentMethod.CASH),
            ]
        )

        assert impact.processor_pending == Decimal("16000.00")
        assert impact.platform_pending == Decimal("8000.00")
        assert impact.processor_available == Decimal("9500.00")
        assert impact.sale_count == 5

    async def test_impact_for_date_only_reads_that_day(self, db_session):
        product = await ProductFactory.create(db_session)
        await SaleFactory.create(
            db_session, product, date=date(2024, 3, 1),
            commission=Decimal("1500.00"), tax=Decimal("500.00"),
        )
        await SaleFactory.create(
            db_session, product, date=date(2024, 3, 2),
            commission=Decimal("1500.00"), tax=Decimal("500.00"),
        )

        impact = await sales_impact_for_date(db_session, date(2024, 3, 1))

        assert impact.sale_count == 1
        assert impact.processor_pending == Decimal("8000.00")
