"""Ledger day administration: lazy creation, settlements, opening balances."""

from datetime import date as date_type
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from storeledger.core.cascade import CascadeResult, cascade_from
from storeledger.core.day_recalculator import (
    DayComputation,
    LedgerBalances,
    compute_day,
    get_prior_day,
)
from storeledger.core.errors import NotFoundError
from storeledger.core.logging import get_logger
from storeledger.models.ledger_day import LedgerDay
from storeledger.utils.datetime import next_day
from storeledger.utils.money import round_money

logger = get_logger(__name__)


async def get_ledger_day(db: AsyncSession, day: date_type) -> LedgerDay:
    stmt = select(LedgerDay).where(LedgerDay.date == day)
    ledger_day = (await db.execute(stmt)).scalar_one_or_none()
    if ledger_day is None:
        raise NotFoundError("LedgerDay", day.isoformat())
    return ledger_day


async def list_ledger_days(
    db: AsyncSession,
    start_date: date_type | None = None,
    end_date: date_type | None = None,
) -> list[LedgerDay]:
    stmt = select(LedgerDay).order_by(LedgerDay.date.asc())
    if start_date is not None:
        stmt = stmt.where(LedgerDay.date >= start_date)
    if end_date is not None:
        stmt = stmt.where(LedgerDay.date <= end_date)
    return list((await db.execute(stmt)).scalars().all())


async def ensure_ledger_day(db: AsyncSession, day: date_type) -> LedgerDay:
    """
    Return the ledger day for `day`, creating it if missing.

    A new day starts from the latest earlier day's closing balances (zeros
    when there is none); the cascade fills in the real figures.
    Does NOT commit - caller is responsible.
    """
    stmt = select(LedgerDay).where(LedgerDay.date == day)
    ledger_day = (await db.execute(stmt)).scalar_one_or_none()
    if ledger_day is not None:
        return ledger_day

    prior = await get_prior_day(db, day)
    seed = LedgerBalances.from_day(prior) if prior is not None else LedgerBalances()

    ledger_day = LedgerDay(
        date=day,
        processor_available=seed.processor_available,
        processor_pending=seed.processor_pending,
        processor_held=seed.processor_held,
        platform_pending=seed.platform_pending,
        processor_settled_today=Decimal("0.00"),
        platform_settled_today=Decimal("0.00"),
        tax_withheld_today=Decimal("0.00"),
        is_opening_balance=False,
    )
    db.add(ledger_day)
    await db.flush()

    logger.info(
        "ledger.day.created",
        date=day.isoformat(),
        seeded_from=prior.date.isoformat() if prior is not None else None,
    )
    return ledger_day


async def process_settlement(
    db: AsyncSession,
    day: date_type,
    processor_settled: Decimal,
    platform_settled: Decimal,
    tax_withheld: Decimal,
    notes: str | None = None,
) -> tuple[LedgerDay, CascadeResult]:
    """
    Record the payouts processed on `day` and cascade.

    The amounts replace whatever was recorded for that day, so submitting
    the same settlement twice leaves the balances unchanged.
    """
    ledger_day = await ensure_ledger_day(db, day)
    ledger_day.processor_settled_today = round_money(processor_settled)
    ledger_day.platform_settled_today = round_money(platform_settled)
    ledger_day.tax_withheld_today = round_money(tax_withheld)
    if notes is not None:
        ledger_day.notes = notes
    await db.commit()

    logger.info(
        "ledger.settlement.processed",
        date=day.isoformat(),
        processor_settled=str(ledger_day.processor_settled_today),
        platform_settled=str(ledger_day.platform_settled_today),
        tax_withheld=str(ledger_day.tax_withheld_today),
    )

    result = await cascade_from(db, day)
    return ledger_day, result


async def update_processed_amounts(
    db: AsyncSession,
    ledger_day: LedgerDay,
    changes: dict,
) -> CascadeResult | None:
    """
    Apply a manual edit to a ledger day.

    Only the processed amounts feed the balances; a notes-only edit skips
    the cascade.
    """
    financial_fields = ("processor_settled_today", "platform_settled_today", "tax_withheld_today")
    financial_change = False

    for field, value in changes.items():
        if field in financial_fields:
            value = round_money(value)
            if value != round_money(getattr(ledger_day, field)):
                financial_change = True
        setattr(ledger_day, field, value)
    await db.commit()

    logger.info(
        "ledger.day.updated",
        date=ledger_day.date.isoformat(),
        fields=sorted(changes.keys()),
        financial_change=financial_change,
    )

    if not financial_change:
        return None
    return await cascade_from(db, ledger_day.date)


async def set_opening_balances(
    db: AsyncSession,
    day: date_type,
    balances: LedgerBalances,
    notes: str | None = None,
) -> tuple[LedgerDay, CascadeResult]:
    """
    Pin the four balances of `day` as an authoritative opening position.

    The cascade never recomputes an opening-balance day; every later day
    builds on it.
    """
    ledger_day = await ensure_ledger_day(db, day)
    ledger_day.processor_available = round_money(balances.processor_available)
    ledger_day.processor_pending = round_money(balances.processor_pending)
    ledger_day.processor_held = round_money(balances.processor_held)
    ledger_day.platform_pending = round_money(balances.platform_pending)
    ledger_day.is_opening_balance = True
    if notes is not None:
        ledger_day.notes = notes
    await db.commit()

    logger.info(
        "ledger.opening_balances.set",
        date=day.isoformat(),
        processor_available=str(ledger_day.processor_available),
        processor_pending=str(ledger_day.processor_pending),
        processor_held=str(ledger_day.processor_held),
        platform_pending=str(ledger_day.platform_pending),
    )

    result = await cascade_from(db, day)
    return ledger_day, result


async def delete_ledger_day(db: AsyncSession, day: date_type) -> CascadeResult:
    """Administrative delete of one day; later days are rebuilt without it."""
    ledger_day = await get_ledger_day(db, day)
    await db.delete(ledger_day)
    await db.commit()

    logger.warning("ledger.day.deleted", date=day.isoformat())

    return await cascade_from(db, next_day(day))


async def find_ledger_gaps(db: AsyncSession) -> list[date_type]:
    """Dates without a ledger day between the first and the last one."""
    result = await db.execute(select(LedgerDay.date).order_by(LedgerDay.date.asc()))
    dates = list(result.scalars().all())

    gaps: list[date_type] = []
    for earlier, later in zip(dates, dates[1:]):
        missing = next_day(earlier)
        while missing < later:
            gaps.append(missing)
            missing = next_day(missing)
    return gaps


async def day_breakdown(db: AsyncSession, day: date_type) -> DayComputation:
    """Inputs behind a day's closing balances, recomputed without writing."""
    ledger_day = await get_ledger_day(db, day)
    return await compute_day(db, ledger_day)

