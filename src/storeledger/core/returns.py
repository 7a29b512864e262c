"""Return lifecycle and the losses report."""

from collections import defaultdict
from datetime import date as date_type
from decimal import Decimal

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from storeledger.core.cascade import CascadeResult, cascade_from
from storeledger.core.errors import NotFoundError, ValidationError
from storeledger.core.ledger_days import ensure_ledger_day
from storeledger.core.logging import get_logger
from storeledger.core.returns_impact import sync_return_delta
from storeledger.models.return_ledger_delta import ReturnLedgerDelta
from storeledger.models.return_schemas import (
    ReturnLossReport,
    ReturnLossRow,
    SaleReturnCreate,
    SaleReturnFinalize,
    SaleReturnUpdate,
)
from storeledger.models.sale import Sale
from storeledger.models.sale_return import SaleReturn
from storeledger.utils.datetime import earliest
from storeledger.utils.money import ZERO, round_money

logger = get_logger(__name__)

# Fields that feed the return's ledger delta or realized loss
RETURN_LEDGER_FIELDS = (
    "status",
    "completed_date",
    "refunded_amount",
    "outbound_shipping_cost",
    "return_shipping_cost",
    "new_shipment_cost",
    "product_recoverable",
    "opened_as_claim",
    "processor_state",
    "processor_retained",
)

RETURN_CLEARABLE_FIELDS = ("completed_date", "refunded_amount", "reason", "notes")


def _ledger_date(sale_return: SaleReturn) -> date_type | None:
    return sale_return.completed_date if sale_return.impacts_ledger else None


async def _resync_and_cascade(
    db: AsyncSession,
    sale_return: SaleReturn,
    old_ledger_date: date_type | None,
) -> CascadeResult | None:
    new_ledger_date = _ledger_date(sale_return)
    await sync_return_delta(db, sale_return)
    if new_ledger_date is not None:
        await ensure_ledger_day(db, new_ledger_date)
    await db.commit()
    await db.refresh(sale_return)

    from_date = earliest(old_ledger_date, new_ledger_date)
    if from_date is None:
        return None
    return await cascade_from(db, from_date)


async def create_return(
    db: AsyncSession, data: SaleReturnCreate
) -> tuple[SaleReturn, CascadeResult | None]:
    sale = await db.get(Sale, data.sale_id)
    if sale is None:
        raise NotFoundError("Sale", str(data.sale_id))

    sale_return = SaleReturn(**data.model_dump())
    db.add(sale_return)
    await db.flush()

    logger.info(
        "return.created",
        return_id=str(sale_return.id),
        sale_id=str(sale.id),
        status=sale_return.status.value,
    )

    result = await _resync_and_cascade(db, sale_return, None)
    return sale_return, result


async def update_return(
    db: AsyncSession,
    sale_return: SaleReturn,
    data: SaleReturnUpdate | SaleReturnFinalize,
) -> tuple[SaleReturn, CascadeResult | None]:
    """
    Apply a partial update (or a finalize).

    The ledger is only touched when a field that feeds the return's delta
    changed; the cascade starts at the earlier of the old and new
    completion dates.
    """
    changes = data.model_dump(exclude_unset=True)
    old_ledger_date = _ledger_date(sale_return)

    claim_date = changes.get("claim_date") or sale_return.claim_date
    completed_date = changes.get("completed_date", sale_return.completed_date)
    if completed_date is not None and completed_date < claim_date:
        raise ValidationError(
            "completed_date cannot be before claim_date",
            details={
                "claim_date": claim_date.isoformat(),
                "completed_date": completed_date.isoformat(),
            },
        )

    ledger_change = False
    for field, value in changes.items():
        if value is None and field not in RETURN_CLEARABLE_FIELDS:
            continue
        if field in RETURN_LEDGER_FIELDS and value != getattr(sale_return, field):
            ledger_change = True
        setattr(sale_return, field, value)

    logger.info(
        "return.updated",
        return_id=str(sale_return.id),
        fields=sorted(changes.keys()),
        status=sale_return.status.value,
        ledger_change=ledger_change,
    )

    if not ledger_change:
        await db.commit()
        await db.refresh(sale_return)
        return sale_return, None

    result = await _resync_and_cascade(db, sale_return, old_ledger_date)
    return sale_return, result


async def finalize_return(
    db: AsyncSession, sale_return: SaleReturn, data: SaleReturnFinalize
) -> tuple[SaleReturn, CascadeResult | None]:
    """
    Move a return to a terminal status on the day it really completed.

    A failed cascade rolls the session back and expires `sale_return`, so
    the log fields come from the request, not the instance.
    """
    return_id = str(sale_return.id)
    sale_return, result = await update_return(db, sale_return, data)
    logger.info(
        "return.finalized",
        return_id=return_id,
        resolution=data.status.resolution.value,
        completed_date=data.completed_date.isoformat(),
        cascade_ok=result is None or result.ok,
    )
    return sale_return, result


async def delete_return(db: AsyncSession, sale_return: SaleReturn) -> CascadeResult | None:
    old_ledger_date = _ledger_date(sale_return)
    return_id = str(sale_return.id)

    await db.execute(
        delete(ReturnLedgerDelta).where(ReturnLedgerDelta.return_id == sale_return.id)
    )
    await db.delete(sale_return)
    await db.commit()

    logger.info("return.deleted", return_id=return_id)

    if old_ledger_date is None:
        return None
    return await cascade_from(db, old_ledger_date)


async def returns_loss_report(
    db: AsyncSession, start_date: date_type, end_date: date_type
) -> ReturnLossReport:
    """Realized losses of terminal returns completed in [start_date, end_date]."""
    stmt = (
        select(ReturnLedgerDelta, SaleReturn, Sale)
        .join(SaleReturn, SaleReturn.id == ReturnLedgerDelta.return_id)
        .join(Sale, Sale.id == SaleReturn.sale_id)
        .where(ReturnLedgerDelta.date >= start_date, ReturnLedgerDelta.date <= end_date)
        .order_by(ReturnLedgerDelta.date.asc())
    )
    rows = (await db.execute(stmt)).all()

    by_resolution: dict[str, Decimal] = defaultdict(lambda: ZERO)
    report_rows = []
    total = ZERO
    for delta, sale_return, sale in rows:
        loss = round_money(delta.realized_loss)
        total += loss
        by_resolution[sale_return.resolution.value] += loss
        report_rows.append(
            ReturnLossRow(
                return_id=sale_return.id,
                sale_id=sale.id,
                sale_code=sale.sale_code,
                completed_date=delta.date,
                resolution=sale_return.resolution,
                realized_loss=loss,
            )
        )

    return ReturnLossReport(
        start_date=start_date,
        end_date=end_date,
        return_count=len(report_rows),
        total_loss=round_money(total),
        by_resolution={k: round_money(v) for k, v in by_resolution.items()},
        returns=report_rows,
    )
