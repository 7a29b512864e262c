"""Returns API endpoints."""

from datetime import date as date_type
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from storeledger.core.db import get_db
from storeledger.core.errors import NotFoundError, ValidationError
from storeledger.core.returns import (
    create_return,
    delete_return,
    finalize_return,
    returns_loss_report,
    update_return,
)
from storeledger.models import SaleReturn
from storeledger.models.enums import ReturnStatus
from storeledger.models.return_schemas import (
    ReturnLossReport,
    SaleReturnCreate,
    SaleReturnFinalize,
    SaleReturnRead,
    SaleReturnUpdate,
)

router = APIRouter(prefix="/returns", tags=["returns"])


async def _get_return_or_404(db: AsyncSession, return_id: UUID) -> SaleReturn:
    sale_return = await db.get(SaleReturn, return_id)
    if sale_return is None:
        raise NotFoundError("SaleReturn", str(return_id))
    return sale_return


@router.get("", response_model=list[SaleReturnRead])
async def list_returns(
    sale_id: UUID | None = Query(None),
    return_status: ReturnStatus | None = Query(None, alias="status"),
    from_date: date_type | None = Query(None, description="Filter on claim date"),
    to_date: date_type | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    stmt = select(SaleReturn)
    if sale_id is not None:
        stmt = stmt.where(SaleReturn.sale_id == sale_id)
    if return_status is not None:
        stmt = stmt.where(SaleReturn.status == return_status)
    if from_date is not None:
        stmt = stmt.where(SaleReturn.claim_date >= from_date)
    if to_date is not None:
        stmt = stmt.where(SaleReturn.claim_date <= to_date)
    stmt = stmt.order_by(SaleReturn.claim_date.desc())

    result = await db.execute(stmt)
    return result.scalars().all()


@router.get("/losses", response_model=ReturnLossReport)
async def get_return_losses(
    from_date: date_type = Query(...),
    to_date: date_type = Query(...),
    db: AsyncSession = Depends(get_db),
):
    """Realized losses of returns completed in the range, by resolution."""
    if from_date > to_date:
        raise ValidationError("from_date must be on or before to_date")
    return await returns_loss_report(db, from_date, to_date)


@router.post("", response_model=SaleReturnRead, status_code=status.HTTP_201_CREATED)
async def create_return_endpoint(sale_return: SaleReturnCreate, db: AsyncSession = Depends(get_db)):
    return_obj, result = await create_return(db, sale_return)
    if result is not None:
        result.raise_for_failure()
    return return_obj


@router.get("/{return_id}", response_model=SaleReturnRead)
async def get_return(return_id: UUID, db: AsyncSession = Depends(get_db)):
    return await _get_return_or_404(db, return_id)


@router.patch("/{return_id}", response_model=SaleReturnRead)
async def update_return_endpoint(
    return_id: UUID,
    return_update: SaleReturnUpdate,
    db: AsyncSession = Depends(get_db),
):
    sale_return = await _get_return_or_404(db, return_id)
    sale_return, result = await update_return(db, sale_return, return_update)
    if result is not None:
        result.raise_for_failure()
    return sale_return


@router.post("/{return_id}/finalize", response_model=SaleReturnRead)
async def finalize_return_endpoint(
    return_id: UUID,
    finalize: SaleReturnFinalize,
    db: AsyncSession = Depends(get_db),
):
    """Close a return with a delivered_* status on its real completion date."""
    sale_return = await _get_return_or_404(db, return_id)
    sale_return, result = await finalize_return(db, sale_return, finalize)
    if result is not None:
        result.raise_for_failure()
    return sale_return


@router.delete("/{return_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_return_endpoint(return_id: UUID, db: AsyncSession = Depends(get_db)):
    sale_return = await _get_return_or_404(db, return_id)
    result = await delete_return(db, sale_return)
    if result is not None:
        result.raise_for_failure()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
