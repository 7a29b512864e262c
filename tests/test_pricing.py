"""Tests for sale pricing."""

from decimal import Decimal
from uuid import uuid4

import pytest

from storeledger.core.errors import MissingDependencyError
from storeledger.core.pricing import calculate_sale, generate_sale_code, get_rate, price_sale
from storeledger.models.enums import Channel, PaymentMethod, RateCondition
from storeledger.models.rate import Rate
from tests.factories import ProductFactory, RateFactory


def _rate(commission="15", vat="0", tax="5", fixed="0.00") -> Rate:
    return Rate(
        channel=Channel.MARKETPLACE,
        payment_method=PaymentMethod.PROCESSOR,
        condition=RateCondition.NORMAL,
        commission_pct=Decimal(commission),
        vat_pct=Decimal(vat),
        tax_pct=Decimal(tax),
        fixed_fee=Decimal(fixed),
    )


class TestCalculateSale:
    """Fee breakdown and margins."""

    def test_basic_breakdown(self):
        figures = calculate_sale(
            Decimal("10000.00"), Decimal("0.00"), Decimal("2000.00"), _rate()
        )

        assert figures.commission == Decimal("1500.00")
        assert figures.vat == Decimal("0.00")
        assert figures.tax == Decimal("500.00")
        assert figures.net_price == Decimal("8000.00")
        assert figures.margin == Decimal("6000.00")
        assert figures.margin_on_price == Decimal("0.6000")
        assert figures.margin_on_cost == Decimal("3.0000")

    def test_fixed_fee_and_vat_on_commission(self):
        """VAT is charged on the commission including the fixed fee."""
        figures = calculate_sale(
            Decimal("10000.00"),
            Decimal("800.00"),
            Decimal("3000.00"),
            _rate(commission="10", vat="21", tax="3", fixed="100.00"),
        )

        # commission = 1000 + 100; vat = 1100 * 21% = 231; tax = 300
        assert figures.commission == Decimal("1100.00")
        assert figures.vat == Decimal("231.00")
        assert figures.tax == Decimal("300.00")
        assert figures.net_price == Decimal("8369.00")
        # 8369 - 800 shipping - 3000 cost
        assert figures.margin == Decimal("4569.00")

    def test_rounding_half_up(self):
        figures = calculate_sale(
            Decimal("333.33"), Decimal("0"), Decimal("0"), _rate(commission="1.5", tax="0")
        )

        # 333.33 * 1.5% = 4.99995 -> 5.00
        assert figures.commission == Decimal("5.00")

    def test_zero_denominators_give_zero_ratios(self):
        figures = calculate_sale(Decimal("0"), Decimal("0"), Decimal("0"), _rate())

        assert figures.margin_on_price == Decimal("0")
        assert figures.margin_on_cost == Decimal("0")


class TestRateLookup:
    """Rate and product resolution."""

    async def test_missing_rate_raises(self, db_session):
        with pytest.raises(MissingDependencyError) as exc_info:
            await get_rate(
                db_session, Channel.STOREFRONT, PaymentMethod.CASH, RateCondition.NORMAL
            )

        assert exc_info.value.status_code == 422
        assert exc_info.value.details["channel"] == "storefront"

    async def test_price_sale_multiplies_cost_by_quantity(self, db_session):
        product = await ProductFactory.create(db_session, unit_cost=Decimal("1500.00"))
        await RateFactory.create(db_session)

        figures = await price_sale(
            db_session,
            channel=Channel.MARKETPLACE,
            payment_method=PaymentMethod.PROCESSOR,
            condition=RateCondition.NORMAL,
            product_id=product.id,
            quantity=2,
            gross_price=Decimal("10000.00"),
            shipping_cost=Decimal("0.00"),
        )

        assert figures.product_cost == Decimal("3000.00")
        assert figures.margin == Decimal("5000.00")

    async def test_price_sale_missing_product(self, db_session):
        await RateFactory.create(db_session)

        with pytest.raises(MissingDependencyError):
            await price_sale(
                db_session,
                channel=Channel.MARKETPLACE,
                payment_method=PaymentMethod.PROCESSOR,
                condition=RateCondition.NORMAL,
                product_id=uuid4(),
                quantity=1,
                gross_price=Decimal("100.00"),
                shipping_cost=Decimal("0.00"),
            )


def test_sale_codes_are_unique_and_prefixed():
    codes = {generate_sale_code() for _ in range(50)}

    assert len(codes) == 50
    assert all(code.startswith("SL-") for code in codes)
    assert all(len(code) <= 40 for code in codes)
