"""
Returns impact on the settlement ledger.

A terminal return produces one normalized ReturnLedgerDelta row dated on its
completion date. The row is recomputed from scratch every time the return or
its sale changes, and the day recalculator only ever sums these rows, so
recalculating a day any number of times never applies a refund twice.
"""

from datetime import date
from decimal import Decimal
from typing import Iterable
from uuid import UUID

from pydantic import BaseModel
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from storeledger.core.logging import get_logger
from storeledger.core.sales_aggregator import settlement_contribution, settlement_route
from storeledger.models.enums import Channel, ProcessorState, ReturnResolution, SettlementRoute
from storeledger.models.return_ledger_delta import ReturnLedgerDelta
from storeledger.models.sale import Sale
from storeledger.models.sale_return import SaleReturn
from storeledger.utils.money import ZERO, round_money, to_decimal

logger = get_logger(__name__)


class ReturnDelta(BaseModel):
    """Balance deltas of a single return. Amounts are subtracted, except held."""

    processor_available: Decimal = ZERO
    processor_pending: Decimal = ZERO
    processor_held: Decimal = ZERO
    platform_pending: Decimal = ZERO
    realized_loss: Decimal = ZERO


class ReturnsImpact(BaseModel):
    """Sum of a day's return deltas."""

    processor_available: Decimal = ZERO
    processor_pending: Decimal = ZERO
    processor_held: Decimal = ZERO
    platform_pending: Decimal = ZERO
    realized_loss: Decimal = ZERO
    return_count: int = 0


def refund_amount(sale_return: SaleReturn, sale: Sale) -> Decimal:
    """
    Explicit refunded amount when positive, else what the sale settled.

    A stored refunded_amount of 0 means "not entered", not "refunded
    nothing": it falls back to the full settlement. A return that gave no
    money back is recorded with the delivered_no_refund status instead.
    """
    explicit = to_decimal(sale_return.refunded_amount)
    if explicit > 0:
        return round_money(explicit)
    return settlement_contribution(sale)


def realized_loss(sale_return: SaleReturn, sale: Sale, product_cost: Decimal) -> Decimal:
    """
    Money lost on a return, for reporting.

    Product cost counts when the item can't be resold. Shipping legs count
    unless the marketplace absorbed them (return opened without a claim).
    A no-refund resolution loses nothing.
    """
    if sale_return.resolution in (None, ReturnResolution.NO_REFUND):
        return ZERO

    loss = ZERO
    if not sale_return.product_recoverable:
        loss += to_decimal(product_cost)

    absorbed_by_marketplace = sale.channel == Channel.MARKETPLACE and not sale_return.opened_as_claim
    if not absorbed_by_marketplace:
        loss += (
            to_decimal(sale_return.outbound_shipping_cost)
            + to_decimal(sale_return.return_shipping_cost)
            + to_decimal(sale_return.new_shipment_cost)
        )
    return round_money(loss)


def compute_return_delta(
    sale_return: SaleReturn,
    sale: Sale,
    product_cost: Decimal,
) -> ReturnDelta:
    """
    Balance deltas of one return. Provisional returns give an all-zero delta.

    Refund:
        processor_state AVAILABLE deducts from processor-available.
        processor_state PENDING deducts from the balance where the sale's
        money is still waiting (processor or platform pending; available
        for direct transfers).
        processor_retained also parks the amount in processor-held.
    Exchange on a storefront sale settled by the platform:
        only the return shipping comes out of platform-pending.
    Anything else moves no balance.
    """
    resolution = sale_return.resolution
    if resolution is None:
        return ReturnDelta()

    loss = realized_loss(sale_return, sale, product_cost)
    route = settlement_route(sale)

    if resolution == ReturnResolution.REFUND:
        # Cash sales never went through a settlement rail
        if route == SettlementRoute.NONE:
            return ReturnDelta(realized_loss=loss)

        amount = refund_amount(sale_return, sale)
        delta = ReturnDelta(realized_loss=loss)

        if sale_return.processor_state == ProcessorState.AVAILABLE:
            delta.processor_available = amount
        elif route == SettlementRoute.PROCESSOR_PENDING:
            delta.processor_pending = amount
        elif route == SettlementRoute.PLATFORM_PENDING:
            delta.platform_pending = amount
        else:
            delta.processor_available = amount

        if sale_return.processor_retained:
            delta.processor_held = amount
        return delta

    if (
        resolution.is_exchange
        and sale.channel == Channel.STOREFRONT
        and route == SettlementRoute.PLATFORM_PENDING
    ):
        return ReturnDelta(
            platform_pending=round_money(sale_return.return_shipping_cost),
            realized_loss=loss,
        )

    return ReturnDelta(realized_loss=loss)


def aggregate_return_deltas(rows: Iterable[ReturnLedgerDelta]) -> ReturnsImpact:
    impact = ReturnsImpact()
    for row in rows:
        impact.processor_available += to_decimal(row.processor_available)
        impact.processor_pending += to_decimal(row.processor_pending)
        impact.processor_held += to_decimal(row.processor_held)
        impact.platform_pending += to_decimal(row.platform_pending)
        impact.realized_loss += to_decimal(row.realized_loss)
        impact.return_count += 1

    impact.processor_available = round_money(impact.processor_available)
    impact.processor_pending = round_money(impact.processor_pending)
    impact.processor_held = round_money(impact.processor_held)
    impact.platform_pending = round_money(impact.platform_pending)
    impact.realized_loss = round_money(impact.realized_loss)
    return impact


async def sync_return_delta(db: AsyncSession, sale_return: SaleReturn) -> ReturnLedgerDelta | None:
    """
    Rewrite the normalized delta row of a return.

    The old row is deleted and, if the return is terminal with a completion
    date, a fresh one is inserted. Does NOT commit - caller is responsible.
    """
    await db.execute(
        delete(ReturnLedgerDelta).where(ReturnLedgerDelta.return_id == sale_return.id)
    )

    if not sale_return.impacts_ledger:
        logger.debug("returns.delta.cleared", return_id=str(sale_return.id))
        return None

    sale = await db.get(Sale, sale_return.sale_id)
    delta = compute_return_delta(sale_return, sale, to_decimal(sale.product_cost))

    row = ReturnLedgerDelta(
        return_id=sale_return.id,
        date=sale_return.completed_date,
        processor_available=delta.processor_available,
        processor_pending=delta.processor_pending,
        processor_held=delta.processor_held,
        platform_pending=delta.platform_pending,
        realized_loss=delta.realized_loss,
    )
    db.add(row)
    await db.flush()

    logger.debug(
        "returns.delta.synced",
        return_id=str(sale_return.id),
        date=sale_return.completed_date.isoformat(),
        processor_available=str(delta.processor_available),
        processor_pending=str(delta.processor_pending),
        processor_held=str(delta.processor_held),
        platform_pending=str(delta.platform_pending),
    )
    return row


async def sync_sale_return_deltas(db: AsyncSession, sale_id: UUID) -> list[date]:
    """Re-sync every return of a sale. Returns the completion dates touched."""
    result = await db.execute(select(SaleReturn).where(SaleReturn.sale_id == sale_id))
    touched: list[date] = []
    for sale_return in result.scalars().all():
        await sync_return_delta(db, sale_return)
        if sale_return.impacts_ledger:
            touched.append(sale_return.completed_date)
    return touched


async def returns_impact_for_date(db: AsyncSession, day: date) -> ReturnsImpact:
    result = await db.execute(select(ReturnLedgerDelta).where(ReturnLedgerDelta.date == day))
    return aggregate_return_deltas(result.scalars().all())
