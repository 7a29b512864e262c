"""Normalized ledger delta of one terminal return."""

import uuid
from datetime import date as date_type
from datetime import datetime
from decimal import Decimal

from sqlalchemy import ForeignKey, Numeric, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from storeledger.core.db import Base
from storeledger.utils.datetime import now_utc


class ReturnLedgerDelta(Base):
    """
    Balance deltas a terminal return causes on its completion date.

    One row per return. The row is replaced whenever the return or its sale
    changes and summed fresh for a date on every cascade pass, so running
    the cascade again never applies a return twice.

    All four balance columns are amounts to SUBTRACT from the matching
    balance, except `processor_held`, which is ADDED to the held balance.
    """

    __tablename__ = "return_ledger_deltas"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    return_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("sale_returns.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )

    date: Mapped[date_type] = mapped_column(nullable=False, index=True)

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

    # Reporting only, never moves a balance
    realized_loss: Mapped[Decimal] = mapped_column(
        Numeric(14, 2), nullable=False, default=Decimal("0.00")
    )

    computed_at: Mapped[datetime] = mapped_column(nullable=False, default=now_utc)

    def __repr__(self) -> str:
        return f"<ReturnLedgerDelta(return_id={self.return_id}, date={self.date})>"
