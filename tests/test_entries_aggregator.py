"""Tests for manual ledger entry aggregation."""

from datetime import date
from decimal import Decimal

from storeledger.core.entries_aggregator import aggregate_entries, entries_impact_for_date
from storeledger.models.enums import EntryType
from storeledger.models.ledger_entry import ManualLedgerEntry
from tests.factories import LedgerEntryFactory


def _entry(entry_type: EntryType, amount: str, is_personal: bool = False) -> ManualLedgerEntry:
    return ManualLedgerEntry(
        entry_type=entry_type,
        amount=Decimal(amount),
        is_personal=is_personal,
        category="Test",
    )


class TestAggregateEntries:
    def test_no_entries_is_zero(self):
        impact = aggregate_entries([])

        assert impact.net == Decimal("0.00")
        assert impact.income_total == Decimal("0.00")

    def test_income_adds_expenses_subtract(self):
        impact = aggregate_entries(
            [
                _entry(EntryType.INCOME, "1000.00"),
                _entry(EntryType.EXPENSE, "300.00"),
                _entry(EntryType.EXPENSE, "150.50", is_personal=True),
            ]
        )

        assert impact.net == Decimal("549.50")
        assert impact.income_total == Decimal("1000.00")
        assert impact.expense_total == Decimal("300.00")
        assert impact.personal_expense_total == Decimal("150.50")

    async def test_impact_for_date(self, db_session):
        await LedgerEntryFactory.create(db_session, date=date(2024, 3, 1), amount=Decimal("200.00"))
        await LedgerEntryFactory.create(
            db_session, date=date(2024, 3, 1), entry_type=EntryType.INCOME, amount=Decimal("50.00")
        )
        await LedgerEntryFactory.create(db_session, date=date(2024, 3, 2), amount=Decimal("999.00"))

        impact = await entries_impact_for_date(db_session, date(2024, 3, 1))

        assert impact.net == Decimal("-150.00")
