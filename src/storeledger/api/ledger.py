"""Settlement ledger API endpoints."""

from datetime import date as date_type

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from storeledger.core.cascade import CascadeResult, cascade_from
from storeledger.core.day_recalculator import DayComputation, LedgerBalances
from storeledger.core.db import get_db
from storeledger.core.errors import ValidationError
from storeledger.core.ledger_days import (
    day_breakdown,
    delete_ledger_day,
    find_ledger_gaps,
    get_ledger_day,
    list_ledger_days,
    process_settlement,
    set_opening_balances,
    update_processed_amounts,
)
from storeledger.core.logging import get_logger
from storeledger.models.ledger_schemas import (
    CascadeResultRead,
    LedgerDayRead,
    LedgerDayUpdate,
    LedgerGaps,
    OpeningBalancesCreate,
    RecalculateRequest,
    SettlementCreate,
    SettlementResult,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/ledger", tags=["ledger"])


def _cascade_read(result: CascadeResult) -> CascadeResultRead:
    return CascadeResultRead(
        from_date=result.from_date,
        committed_dates=result.committed_dates,
        opening_balance_dates=result.opening_balance_dates,
    )


@router.get("/days", response_model=list[LedgerDayRead])
async def list_days(
    from_date: date_type | None = Query(None),
    to_date: date_type | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    if from_date and to_date and from_date > to_date:
        raise ValidationError("from_date must be on or before to_date")
    return await list_ledger_days(db, from_date, to_date)


@router.get("/days/{day}", response_model=LedgerDayRead)
async def get_day(day: date_type, db: AsyncSession = Depends(get_db)):
    return await get_ledger_day(db, day)


@router.patch("/days/{day}", response_model=LedgerDayRead)
async def update_day(
    day: date_type,
    day_update: LedgerDayUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Edit processed amounts or notes by hand. Amount changes cascade from the day."""
    ledger_day = await get_ledger_day(db, day)
    changes = day_update.model_dump(exclude_unset=True)
    changes = {k: v for k, v in changes.items() if v is not None or k == "notes"}

    result = await update_processed_amounts(db, ledger_day, changes)
    if result is not None:
        result.raise_for_failure()
    return await get_ledger_day(db, day)


@router.delete("/days/{day}", response_model=CascadeResultRead)
async def delete_day(day: date_type, db: AsyncSession = Depends(get_db)):
    """Administrative delete. Later days are rebuilt from the previous day."""
    result = await delete_ledger_day(db, day)
    result.raise_for_failure()
    return _cascade_read(result)


@router.get("/days/{day}/breakdown", response_model=DayComputation)
async def get_day_breakdown(day: date_type, db: AsyncSession = Depends(get_db)):
    """Prior balances, sales, entries, returns and payouts behind a day."""
    return await day_breakdown(db, day)


@router.post("/settlements", response_model=SettlementResult)
async def create_settlement(settlement: SettlementCreate, db: AsyncSession = Depends(get_db)):
    """
    Record the payouts processed on a day.

    Replaces any amounts already recorded for that day, so re-submitting
    the same settlement is harmless.
    """
    ledger_day, result = await process_settlement(
        db,
        settlement.date,
        processor_settled=settlement.processor_settled,
        platform_settled=settlement.platform_settled,
        tax_withheld=settlement.tax_withheld,
        notes=settlement.notes,
    )
    result.raise_for_failure()
    ledger_day = await get_ledger_day(db, settlement.date)
    return SettlementResult(
        ledger_day=LedgerDayRead.model_validate(ledger_day),
        cascade=_cascade_read(result),
    )


@router.post("/opening-balances", response_model=SettlementResult)
async def create_opening_balances(
    opening: OpeningBalancesCreate,
    db: AsyncSession = Depends(get_db),
):
    """Pin authoritative balances on a day; later days build on them."""
    ledger_day, result = await set_opening_balances(
        db,
        opening.date,
        LedgerBalances(
            processor_available=opening.processor_available,
            processor_pending=opening.processor_pending,
            processor_held=opening.processor_held,
            platform_pending=opening.platform_pending,
        ),
        notes=opening.notes,
    )
    result.raise_for_failure()
    ledger_day = await get_ledger_day(db, opening.date)
    return SettlementResult(
        ledger_day=LedgerDayRead.model_validate(ledger_day),
        cascade=_cascade_read(result),
    )


@router.post("/recalculate", response_model=CascadeResultRead)
async def recalculate(request: RecalculateRequest, db: AsyncSession = Depends(get_db)):
    """Run the cascade by hand from a date."""
    logger.info("ledger.recalculate.requested", from_date=request.from_date.isoformat())
    result = await cascade_from(db, request.from_date)
    result.raise_for_failure()
    return _cascade_read(result)


@router.get("/gaps", response_model=LedgerGaps)
async def get_gaps(db: AsyncSession = Depends(get_db)):
    """Dates with no ledger day between the first and last recorded day."""
    days = await list_ledger_days(db)
    missing = await find_ledger_gaps(db)
    return LedgerGaps(
        first_date=days[0].date if days else None,
        last_date=days[-1].date if days else None,
        missing_dates=missing,
    )
