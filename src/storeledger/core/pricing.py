"""Sale pricing: fee breakdown and margins from the rate table."""

import secrets
import time
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from storeledger.core.errors import MissingDependencyError
from storeledger.models.enums import Channel, PaymentMethod, RateCondition
from storeledger.models.product import Product
from storeledger.models.rate import Rate
from storeledger.utils.money import ZERO, round_money, round_ratio, to_decimal

HUNDRED = Decimal("100")


class SaleFigures(BaseModel):
    """Computed amounts stored on a sale."""

    commission: Decimal
    vat: Decimal
    tax: Decimal
    net_price: Decimal
    product_cost: Decimal
    margin: Decimal
    margin_on_price: Decimal
    margin_on_cost: Decimal


def calculate_sale(
    gross_price: Decimal,
    shipping_cost: Decimal,
    product_cost: Decimal,
    rate: Rate,
) -> SaleFigures:
    """
    Price a sale against one rate-table entry.

    commission = gross * commission% + fixed fee
    vat        = commission * vat%
    tax        = gross * tax%
    net        = gross - commission - vat - tax
    margin     = net - shipping - product cost

    Margin ratios are 0 when their denominator is 0.
    """
    gross = to_decimal(gross_price)
    shipping = to_decimal(shipping_cost)
    cost = round_money(product_cost)

    commission = round_money(
        gross * to_decimal(rate.commission_pct) / HUNDRED + to_decimal(rate.fixed_fee)
    )
    vat = round_money(commission * to_decimal(rate.vat_pct) / HUNDRED)
    tax = round_money(gross * to_decimal(rate.tax_pct) / HUNDRED)
    net_price = round_money(gross - commission - vat - tax)
    margin = round_money(net_price - shipping - cost)

    margin_on_price = round_ratio(margin / gross) if gross > 0 else Decimal("0")
    margin_on_cost = round_ratio(margin / cost) if cost > 0 else Decimal("0")

    return SaleFigures(
        commission=commission,
        vat=vat,
        tax=tax,
        net_price=net_price,
        product_cost=cost,
        margin=margin,
        margin_on_price=margin_on_price,
        margin_on_cost=margin_on_cost,
    )


async def get_rate(
    db: AsyncSession,
    channel: Channel,
    payment_method: PaymentMethod,
    condition: RateCondition,
) -> Rate:
    """Look up the rate-table entry for a sale. Raises if there is none."""
    stmt = select(Rate).where(
        Rate.channel == channel,
        Rate.payment_method == payment_method,
        Rate.condition == condition,
    )
    rate = (await db.execute(stmt)).scalar_one_or_none()
    if rate is None:
        raise MissingDependencyError(
            f"No rate configured for {channel.value} / {payment_method.value} / {condition.value}",
            details={
                "channel": channel.value,
                "payment_method": payment_method.value,
                "condition": condition.value,
            },
        )
    return rate


async def get_product(db: AsyncSession, product_id: UUID) -> Product:
    product = await db.get(Product, product_id)
    if product is None:
        raise MissingDependencyError(
            f"Product {product_id} does not exist",
            details={"product_id": str(product_id)},
        )
    return product


async def price_sale(
    db: AsyncSession,
    *,
    channel: Channel,
    payment_method: PaymentMethod,
    condition: RateCondition,
    product_id: UUID,
    quantity: int,
    gross_price: Decimal,
    shipping_cost: Decimal,
) -> SaleFigures:
    """Resolve product and rate, then price. Reads only; nothing is written."""
    product = await get_product(db, product_id)
    rate = await get_rate(db, channel, payment_method, condition)
    product_cost = to_decimal(product.unit_cost) * quantity
    return calculate_sale(gross_price, shipping_cost or ZERO, product_cost, rate)


def generate_sale_code() -> str:
    """Short, sortable-ish unique code shown to humans, e.g. SL-M3K9ZQ1A-7F2C9B."""
    timestamp = _base36(int(time.time() * 1000))
    return f"SL-{timestamp}-{secrets.token_hex(3)}".upper()


def _base36(number: int) -> str:
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    out = ""
    while number:
        number, remainder = divmod(number, 36)
        out = digits[remainder] + out
    return out or "0"
