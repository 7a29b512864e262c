"""Manual expense/income entries that move processor-available funds."""

import uuid
from datetime import date as date_type
from datetime import datetime
from decimal import Decimal

from sqlalchemy import Enum as SQLEnum
from sqlalchemy import Numeric, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from storeledger.core.db import Base
from storeledger.models.enums import EntryChannel, EntryType
from storeledger.utils.datetime import now_utc


class ManualLedgerEntry(Base):
    """
    A manual expense or income record.

    Attributes:
        entry_type: EXPENSE subtracts from processor-available, INCOME adds
        is_personal: Personal expenses are reported apart from business ones
            but still come out of the same processor-available balance
        category: Free-form label ("Advertising", "Packaging", ...)
        channel: Channel tag for reporting; does not change ledger routing
    """

    __tablename__ = "manual_ledger_entries"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    date: Mapped[date_type] = mapped_column(nullable=False, index=True)

    entry_type: Mapped[EntryType] = mapped_column(
        SQLEnum(EntryType, name="entry_type"),
        nullable=False,
        index=True,
    )

    is_personal: Mapped[bool] = mapped_column(nullable=False, default=False)

    category: Mapped[str] = mapped_column(String(100), nullable=False)

    description: Mapped[str | None] = mapped_column(String(255), nullable=True)

    amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)

    channel: Mapped[EntryChannel] = mapped_column(
        SQLEnum(EntryChannel, name="entry_channel"),
        nullable=False,
        default=EntryChannel.GENERAL,
    )

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=now_utc)

    updated_at: Mapped[datetime] = mapped_column(
        nullable=False,
        default=now_utc,
        onupdate=now_utc,
    )

    def __repr__(self) -> str:
        return (
            f"<ManualLedgerEntry(id={self.id}, date={self.date}, "
            f"entry_type={self.entry_type}, amount={self.amount})>"
        )
