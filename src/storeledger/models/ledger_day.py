"""LedgerDay model: closing settlement balances for one calendar date."""

import uuid
from datetime import date as date_type
from datetime import datetime
from decimal import Decimal

from sqlalchemy import Numeric, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from storeledger.core.db import Base
from storeledger.utils.datetime import now_utc


class LedgerDay(Base):
    """
    One row per calendar date.

    The four balances are a prefix sum over time: each day's closing
    balances are the latest earlier day's closing balances plus that day's
    sales, returns, manual entries and settlements. Only the cascade
    writes them, except on opening-balance days, whose balances are
    entered by hand and act as the anchor for every later day.

    The three *_today columns are entered by hand when a payout is
    processed; the cascade reads them but never changes them.
    """

    __tablename__ = "ledger_days"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    date: Mapped[date_type] = mapped_column(
        nullable=False,
        unique=True,
        index=True,
    )

    # Closing balances
    processor_available: Mapped[Decimal] = mapped_column(
        Numeric(14, 2), nullable=False, default=Decimal("0.00")
    )
    processor_pending: Mapped[Decimal] = mapped_column(
        Numeric(14, 2), nullable=False, default=Decimal("0.00")
    )
    processor_held: Mapped[Decimal] = mapped_column(
        Numeric(14, 2), nullable=False, default=Decimal("0.00")
    )
    platform_pending: Mapped[Decimal] = mapped_column(
        Numeric(14, 2), nullable=False, default=Decimal("0.00")
    )

    # Same-day processed amounts
    processor_settled_today: Mapped[Decimal] = mapped_column(
        Numeric(14, 2), nullable=False, default=Decimal("0.00")
    )
    platform_settled_today: Mapped[Decimal] = mapped_column(
        Numeric(14, 2), nullable=False, default=Decimal("0.00")
    )
    tax_withheld_today: Mapped[Decimal] = mapped_column(
        Numeric(14, 2), nullable=False, default=Decimal("0.00")
    )

    is_opening_balance: Mapped[bool] = mapped_column(nullable=False, default=False)

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=now_utc)

    updated_at: Mapped[datetime] = mapped_column(
        nullable=False,
        default=now_utc,
        onupdate=now_utc,
    )

    @property
    def processor_total(self) -> Decimal:
        """Everything at the processor: available + pending."""
        return self.processor_available + self.processor_pending

    @property
    def grand_total(self) -> Decimal:
        """Available funds plus what the storefront platform still owes."""
        return self.processor_available + self.platform_pending

    @property
    def net_day_movement(self) -> Decimal:
        """Funds that became available today through processed payouts."""
        return (
            self.processor_settled_today
            + self.platform_settled_today
            - self.tax_withheld_today
        )

    def __repr__(self) -> str:
        return (
            f"<LedgerDay(date={self.date}, available={self.processor_available}, "
            f"pending={self.processor_pending}, held={self.processor_held}, "
            f"platform_pending={self.platform_pending})>"
        )
