"""Manual ledger entry aggregation: net effect of expenses and incomes."""

from datetime import date
from decimal import Decimal
from typing import Iterable

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from storeledger.models.enums import EntryType
from storeledger.models.ledger_entry import ManualLedgerEntry
from storeledger.utils.money import ZERO, round_money, to_decimal


class EntriesImpact(BaseModel):
    """
    Net effect of a day's manual entries on processor-available.

    `expense_total` covers business expenses only; personal expenses are
    reported separately but both are subtracted from `net`.
    """

    net: Decimal = ZERO
    income_total: Decimal = ZERO
    expense_total: Decimal = ZERO
    personal_expense_total: Decimal = ZERO


def aggregate_entries(entries: Iterable[ManualLedgerEntry]) -> EntriesImpact:
    income = ZERO
    expense = ZERO
    personal = ZERO

    for entry in entries:
        amount = to_decimal(entry.amount)
        if entry.entry_type == EntryType.INCOME:
            income += amount
        elif entry.is_personal:
            personal += amount
        else:
            expense += amount

    return EntriesImpact(
        net=round_money(income - expense - personal),
        income_total=round_money(income),
        expense_total=round_money(expense),
        personal_expense_total=round_money(personal),
    )


async def entries_impact_for_date(db: AsyncSession, day: date) -> EntriesImpact:
    result = await db.execute(select(ManualLedgerEntry).where(ManualLedgerEntry.date == day))
    return aggregate_entries(result.scalars().all())
