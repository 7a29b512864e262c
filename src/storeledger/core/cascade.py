"""
Ledger cascade.

Any change that lands on a date invalidates that day's closing balances and
every later day's, because each day starts from the previous closing. The
cascade walks every ledger day on or after the changed date in ascending
order and recalculates each one, committing after every day. A failure stops
the walk; the days already written stay committed and the caller gets the
failing date back. There is no retry.
"""

from datetime import date as date_type

from pydantic import BaseModel, Field
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from storeledger.core.day_recalculator import recalculate_day
from storeledger.core.errors import CascadeError
from storeledger.core.logging import get_logger
from storeledger.models.ledger_day import LedgerDay

logger = get_logger(__name__)


class CascadeResult(BaseModel):
    """Outcome of one cascade run."""

    from_date: date_type
    committed_dates: list[date_type] = Field(default_factory=list)
    opening_balance_dates: list[date_type] = Field(default_factory=list)
    failed_date: date_type | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.failed_date is None

    def raise_for_failure(self) -> "CascadeResult":
        """Raise CascadeError if the run stopped on a failing day."""
        if self.failed_date is not None:
            raise CascadeError(
                failed_date=self.failed_date,
                error=self.error or "unknown error",
                committed_dates=self.committed_dates,
            )
        return self


async def cascade_from(db: AsyncSession, from_date: date_type) -> CascadeResult:
    """
    Recalculate every ledger day on or after `from_date`, oldest first.

    Commits after each day. Callers should commit their own changes before
    calling, since the first per-day commit will include them anyway.
    """
    stmt = select(LedgerDay).where(LedgerDay.date >= from_date).order_by(LedgerDay.date.asc())
    days = (await db.execute(stmt)).scalars().all()
    result = CascadeResult(from_date=from_date)

    logger.info("ledger.cascade.start", from_date=from_date.isoformat(), day_count=len(days))

    for ledger_day in days:
        day = ledger_day.date
        try:
            await recalculate_day(db, ledger_day)
            await db.commit()
        except Exception as e:
            await db.rollback()
            result.failed_date = day
            result.error = str(e) or type(e).__name__
            logger.error(
                "ledger.cascade.failed",
                from_date=from_date.isoformat(),
                failed_date=day.isoformat(),
                committed_count=len(result.committed_dates),
                error=result.error,
                exc_info=True,
            )
            return result

        if ledger_day.is_opening_balance:
            result.opening_balance_dates.append(day)
        else:
            result.committed_dates.append(day)

    logger.info(
        "ledger.cascade.complete",
        from_date=from_date.isoformat(),
        recalculated=len(result.committed_dates),
        opening_balances_kept=len(result.opening_balance_dates),
    )
    return result
