"""Manual ledger entry lifecycle."""

from sqlalchemy.ext.asyncio import AsyncSession

from storeledger.core.cascade import CascadeResult, cascade_from
from storeledger.core.ledger_days import ensure_ledger_day
from storeledger.core.logging import get_logger
from storeledger.models.ledger_entry import ManualLedgerEntry
from storeledger.models.ledger_entry_schemas import LedgerEntryCreate, LedgerEntryUpdate
from storeledger.utils.datetime import earliest

logger = get_logger(__name__)

ENTRY_FINANCIAL_FIELDS = ("date", "amount", "entry_type")


async def create_entry(
    db: AsyncSession, data: LedgerEntryCreate
) -> tuple[ManualLedgerEntry, CascadeResult]:
    entry = ManualLedgerEntry(**data.model_dump())
    db.add(entry)
    await ensure_ledger_day(db, entry.date)
    await db.commit()
    await db.refresh(entry)

    logger.info(
        "ledger_entry.created",
        entry_id=str(entry.id),
        date=entry.date.isoformat(),
        entry_type=entry.entry_type.value,
        is_personal=entry.is_personal,
        amount=str(entry.amount),
    )

    result = await cascade_from(db, entry.date)
    return entry, result


async def update_entry(
    db: AsyncSession, entry: ManualLedgerEntry, data: LedgerEntryUpdate
) -> tuple[ManualLedgerEntry, CascadeResult | None]:
    """Cascade only when date, amount or type changed."""
    changes = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}
    if "description" in data.model_fields_set:
        changes["description"] = data.description

    old_date = entry.date
    financial_change = any(
        field in changes and changes[field] != getattr(entry, field)
        for field in ENTRY_FINANCIAL_FIELDS
    )

    for field, value in changes.items():
        setattr(entry, field, value)
    if financial_change:
        await ensure_ledger_day(db, entry.date)
    await db.commit()
    await db.refresh(entry)

    logger.info(
        "ledger_entry.updated",
        entry_id=str(entry.id),
        fields=sorted(changes.keys()),
        financial_change=financial_change,
    )

    if not financial_change:
        return entry, None
    result = await cascade_from(db, earliest(old_date, entry.date))
    return entry, result


async def delete_entry(db: AsyncSession, entry: ManualLedgerEntry) -> CascadeResult:
    entry_date = entry.date
    entry_id = str(entry.id)
    await db.delete(entry)
    await db.commit()

    logger.info("ledger_entry.deleted", entry_id=entry_id, date=entry_date.isoformat())

    return await cascade_from(db, entry_date)
