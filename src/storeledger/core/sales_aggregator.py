"""
Channel sales aggregation.

Classifies each sale into the settlement rail its money travels through and
sums one day's sales into per-balance impacts. Pure functions plus one
loader; nothing here writes.
"""

from datetime import date
from decimal import Decimal
from typing import Iterable

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from storeledger.models.enums import Channel, PaymentMethod, SettlementRoute
from storeledger.models.sale import Sale
from storeledger.utils.money import ZERO, round_money, to_decimal


class SalesImpact(BaseModel):
    """What a day's sales add to each balance."""

    processor_available: Decimal = ZERO
    processor_pending: Decimal = ZERO
    platform_pending: Decimal = ZERO
    sale_count: int = 0


def settlement_route(sale: Sale) -> SettlementRoute:
    """
    Which balance a sale's money lands in.

    - marketplace, any method: processor pending
    - storefront paid through the processor: processor pending
    - storefront, any other method: storefront platform pending
    - direct by bank transfer: processor available right away
    - direct in cash: never touches the ledger
    """
    if sale.channel == Channel.MARKETPLACE:
        return SettlementRoute.PROCESSOR_PENDING
    if sale.channel == Channel.STOREFRONT:
        if sale.payment_method == PaymentMethod.PROCESSOR:
            return SettlementRoute.PROCESSOR_PENDING
        return SettlementRoute.PLATFORM_PENDING
    if sale.channel == Channel.DIRECT and sale.payment_method == PaymentMethod.BANK_TRANSFER:
        return SettlementRoute.PROCESSOR_AVAILABLE
    return SettlementRoute.NONE


def settlement_contribution(sale: Sale) -> Decimal:
    """Net amount the channel settles for this sale (0 when it has no route)."""
    route = settlement_route(sale)
    if route == SettlementRoute.NONE:
        return ZERO

    gross = to_decimal(sale.gross_price)
    tax = to_decimal(sale.tax)

    if sale.channel == Channel.DIRECT:
        # Buyer pays shipping and there is no channel commission
        return round_money(gross - tax)

    amount = gross - to_decimal(sale.commission) - to_decimal(sale.vat) - tax
    if sale.channel == Channel.MARKETPLACE:
        # Marketplace withholds the shipping it charged us
        amount -= to_decimal(sale.shipping_cost)
    return round_money(amount)


def aggregate_sales(sales: Iterable[Sale]) -> SalesImpact:
    available = ZERO
    pending = ZERO
    platform = ZERO
    count = 0

    for sale in sales:
        count += 1
        route = settlement_route(sale)
        amount = settlement_contribution(sale)
        if route == SettlementRoute.PROCESSOR_PENDING:
            pending += amount
        elif route == SettlementRoute.PLATFORM_PENDING:
            platform += amount
        elif route == SettlementRoute.PROCESSOR_AVAILABLE:
            available += amount

    return SalesImpact(
        processor_available=round_money(available),
        processor_pending=round_money(pending),
        platform_pending=round_money(platform),
        sale_count=count,
    )


async def sales_impact_for_date(db: AsyncSession, day: date) -> SalesImpact:
    """Load every sale dated `day` and aggregate it."""
    result = await db.execute(select(Sale).where(Sale.date == day))
    return aggregate_sales(result.scalars().all())
