"""
Settlement day recalculation.

A day's closing balances are the previous closing balances plus what
happened that day:

    processor_available = prior + entries.net + sales.processor_available
                          + processor_settled + platform_settled - tax_withheld
                          - returns.processor_available
    processor_pending   = prior + sales.processor_pending
                          - processor_settled - returns.processor_pending
    processor_held      = prior + returns.processor_held
    platform_pending    = prior + sales.platform_pending
                          - platform_settled - returns.platform_pending
"""

from datetime import date as date_type
from decimal import Decimal

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from storeledger.core.entries_aggregator import EntriesImpact, entries_impact_for_date
from storeledger.core.logging import get_logger
from storeledger.core.returns_impact import ReturnsImpact, returns_impact_for_date
from storeledger.core.sales_aggregator import SalesImpact, sales_impact_for_date
from storeledger.models.ledger_day import LedgerDay
from storeledger.utils.datetime import previous_day
from storeledger.utils.money import ZERO, round_money, to_decimal

logger = get_logger(__name__)


class LedgerBalances(BaseModel):
    """The four running balances of a ledger day."""

    processor_available: Decimal = ZERO
    processor_pending: Decimal = ZERO
    processor_held: Decimal = ZERO
    platform_pending: Decimal = ZERO

    @classmethod
    def from_day(cls, ledger_day: LedgerDay) -> "LedgerBalances":
        return cls(
            processor_available=to_decimal(ledger_day.processor_available),
            processor_pending=to_decimal(ledger_day.processor_pending),
            processor_held=to_decimal(ledger_day.processor_held),
            platform_pending=to_decimal(ledger_day.platform_pending),
        )


class ProcessedAmounts(BaseModel):
    """Payouts processed on the day, entered by hand."""

    processor_settled: Decimal = ZERO
    platform_settled: Decimal = ZERO
    tax_withheld: Decimal = ZERO

    @classmethod
    def from_day(cls, ledger_day: LedgerDay) -> "ProcessedAmounts":
        return cls(
            processor_settled=to_decimal(ledger_day.processor_settled_today),
            platform_settled=to_decimal(ledger_day.platform_settled_today),
            tax_withheld=to_decimal(ledger_day.tax_withheld_today),
        )


class DayComputation(BaseModel):
    """Every input behind a day's closing balances, plus the result."""

    date: date_type
    prior_date: date_type | None = None
    prior: LedgerBalances
    sales: SalesImpact
    entries: EntriesImpact
    returns: ReturnsImpact
    processed: ProcessedAmounts
    result: LedgerBalances
    is_opening_balance: bool = False


def recalculate_balances(
    prior: LedgerBalances,
    sales: SalesImpact,
    entries: EntriesImpact,
    returns: ReturnsImpact,
    processed: ProcessedAmounts,
) -> LedgerBalances:
    """Pure reducer: prior closing balances + one day of impacts."""
    available = (
        prior.processor_available
        + entries.net
        + sales.processor_available
        + processed.processor_settled
        + processed.platform_settled
        - processed.tax_withheld
        - returns.processor_available
    )
    pending = (
        prior.processor_pending
        + sales.processor_pending
        - processed.processor_settled
        - returns.processor_pending
    )
    held = prior.processor_held + returns.processor_held
    platform = (
        prior.platform_pending
        + sales.platform_pending
        - processed.platform_settled
        - returns.platform_pending
    )

    return LedgerBalances(
        processor_available=round_money(available),
        processor_pending=round_money(pending),
        processor_held=round_money(held),
        platform_pending=round_money(platform),
    )


async def get_prior_day(db: AsyncSession, day: date_type) -> LedgerDay | None:
    """Latest ledger day strictly before `day`."""
    stmt = select(LedgerDay).where(LedgerDay.date < day).order_by(LedgerDay.date.desc()).limit(1)
    return (await db.execute(stmt)).scalar_one_or_none()


async def compute_day(db: AsyncSession, ledger_day: LedgerDay) -> DayComputation:
    """Gather the inputs for a day and run the reducer. Reads only."""
    day = ledger_day.date
    prior_day = await get_prior_day(db, day)

    if prior_day is None:
        prior = LedgerBalances()
        logger.info("ledger.cold_start", date=day.isoformat())
    else:
        prior = LedgerBalances.from_day(prior_day)
        if prior_day.date != previous_day(day):
            logger.warning(
                "ledger.gap_detected",
                date=day.isoformat(),
                prior_date=prior_day.date.isoformat(),
                missing_days=(day - prior_day.date).days - 1,
            )

    sales = await sales_impact_for_date(db, day)
    entries = await entries_impact_for_date(db, day)
    returns = await returns_impact_for_date(db, day)
    processed = ProcessedAmounts.from_day(ledger_day)

    if ledger_day.is_opening_balance:
        result = LedgerBalances.from_day(ledger_day)
    else:
        result = recalculate_balances(prior, sales, entries, returns, processed)

    return DayComputation(
        date=day,
        prior_date=prior_day.date if prior_day is not None else None,
        prior=prior,
        sales=sales,
        entries=entries,
        returns=returns,
        processed=processed,
        result=result,
        is_opening_balance=ledger_day.is_opening_balance,
    )


async def recalculate_day(db: AsyncSession, ledger_day: LedgerDay) -> LedgerBalances:
    """
    Recompute and write one day's closing balances.

    Opening-balance days are authoritative and left untouched.
    Does NOT commit - the cascade commits after each day.
    """
    if ledger_day.is_opening_balance:
        logger.debug("ledger.day.opening_balance_kept", date=ledger_day.date.isoformat())
        return LedgerBalances.from_day(ledger_day)

    computation = await compute_day(db, ledger_day)
    balances = computation.result

    ledger_day.processor_available = balances.processor_available
    ledger_day.processor_pending = balances.processor_pending
    ledger_day.processor_held = balances.processor_held
    ledger_day.platform_pending = balances.platform_pending
    await db.flush()

    logger.info(
        "ledger.day.recalculated",
        date=ledger_day.date.isoformat(),
        sale_count=computation.sales.sale_count,
        return_count=computation.returns.return_count,
        processor_available=str(balances.processor_available),
        processor_pending=str(balances.processor_pending),
        processor_held=str(balances.processor_held),
        platform_pending=str(balances.platform_pending),
    )
    return balances
