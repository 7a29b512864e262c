"""Manual ledger entries (expenses and incomes) API endpoints."""

from datetime import date as date_type
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from storeledger.core.db import get_db
from storeledger.core.errors import NotFoundError
from storeledger.core.ledger_entries import create_entry, delete_entry, update_entry
from storeledger.models import ManualLedgerEntry
from storeledger.models.enums import EntryType
from storeledger.models.ledger_entry_schemas import (
    LedgerEntryCreate,
    LedgerEntryRead,
    LedgerEntryUpdate,
)

router = APIRouter(prefix="/ledger-entries", tags=["ledger-entries"])


async def _get_entry_or_404(db: AsyncSession, entry_id: UUID) -> ManualLedgerEntry:
    entry = await db.get(ManualLedgerEntry, entry_id)
    if entry is None:
        raise NotFoundError("ManualLedgerEntry", str(entry_id))
    return entry


@router.get("", response_model=list[LedgerEntryRead])
async def list_entries(
    from_date: date_type | None = Query(None),
    to_date: date_type | None = Query(None),
    entry_type: EntryType | None = Query(None),
    is_personal: bool | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    stmt = select(ManualLedgerEntry)
    if from_date is not None:
        stmt = stmt.where(ManualLedgerEntry.date >= from_date)
    if to_date is not None:
        stmt = stmt.where(ManualLedgerEntry.date <= to_date)
    if entry_type is not None:
        stmt = stmt.where(ManualLedgerEntry.entry_type == entry_type)
    if is_personal is not None:
        stmt = stmt.where(ManualLedgerEntry.is_personal == is_personal)
    stmt = stmt.order_by(ManualLedgerEntry.date.desc(), ManualLedgerEntry.created_at.desc())

    result = await db.execute(stmt)
    return result.scalars().all()


@router.post("", response_model=LedgerEntryRead, status_code=status.HTTP_201_CREATED)
async def create_entry_endpoint(entry: LedgerEntryCreate, db: AsyncSession = Depends(get_db)):
    entry_obj, result = await create_entry(db, entry)
    result.raise_for_failure()
    return entry_obj


@router.get("/{entry_id}", response_model=LedgerEntryRead)
async def get_entry(entry_id: UUID, db: AsyncSession = Depends(get_db)):
    return await _get_entry_or_404(db, entry_id)


@router.patch("/{entry_id}", response_model=LedgerEntryRead)
async def update_entry_endpoint(
    entry_id: UUID,
    entry_update: LedgerEntryUpdate,
    db: AsyncSession = Depends(get_db),
):
    entry = await _get_entry_or_404(db, entry_id)
    entry, result = await update_entry(db, entry, entry_update)
    if result is not None:
        result.raise_for_failure()
    return entry


@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_entry_endpoint(entry_id: UUID, db: AsyncSession = Depends(get_db)):
    entry = await _get_entry_or_404(db, entry_id)
    result = await delete_entry(db, entry)
    result.raise_for_failure()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
