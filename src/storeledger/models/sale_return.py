"""SaleReturn model: a reversal tied to exactly one sale."""

import uuid
from datetime import date as date_type
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import Enum as SQLEnum
from sqlalchemy import ForeignKey, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from storeledger.core.db import Base
from storeledger.models.enums import ProcessorState, ReturnResolution, ReturnStatus
from storeledger.utils.datetime import now_utc

if TYPE_CHECKING:
    from storeledger.models.sale import Sale


class SaleReturn(Base):
    """
    A return (claim) against a sale.

    Only terminal returns (status DELIVERED_*) with a completion date move
    ledger balances, and only on `completed_date`, which is not
    necessarily the day the return was closed in the system.
    """

    __tablename__ = "sale_returns"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    sale_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("sales.id"),
        nullable=False,
        index=True,
    )

    sale: Mapped["Sale"] = relationship("Sale", lazy="selectin")

    claim_date: Mapped[date_type] = mapped_column(nullable=False)

    completed_date: Mapped[date_type | None] = mapped_column(nullable=True, index=True)

    status: Mapped[ReturnStatus] = mapped_column(
        SQLEnum(ReturnStatus, name="return_status"),
        nullable=False,
        default=ReturnStatus.PENDING,
        index=True,
    )

    reason: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # None means "use what the sale actually contributed to settlement"
    refunded_amount: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)

    outbound_shipping_cost: Mapped[Decimal] = mapped_column(
        Numeric(14, 2), nullable=False, default=Decimal("0.00")
    )
    return_shipping_cost: Mapped[Decimal] = mapped_column(
        Numeric(14, 2), nullable=False, default=Decimal("0.00")
    )
    new_shipment_cost: Mapped[Decimal] = mapped_column(
        Numeric(14, 2), nullable=False, default=Decimal("0.00")
    )

    product_recoverable: Mapped[bool] = mapped_column(nullable=False, default=True)

    # Marketplace returns opened without a claim don't charge us shipping
    opened_as_claim: Mapped[bool] = mapped_column(nullable=False, default=True)

    processor_state: Mapped[ProcessorState] = mapped_column(
        SQLEnum(ProcessorState, name="processor_state"),
        nullable=False,
        default=ProcessorState.AVAILABLE,
    )

    processor_retained: Mapped[bool] = mapped_column(nullable=False, default=False)

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=now_utc)

    updated_at: Mapped[datetime] = mapped_column(
        nullable=False,
        default=now_utc,
        onupdate=now_utc,
    )

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @property
    def resolution(self) -> ReturnResolution | None:
        return self.status.resolution

    @property
    def impacts_ledger(self) -> bool:
        """Terminal with a completion date: the ledger sees it on that date."""
        return self.is_terminal and self.completed_date is not None

    def __repr__(self) -> str:
        return (
            f"<SaleReturn(id={self.id}, sale_id={self.sale_id}, status={self.status}, "
            f"completed_date={self.completed_date})>"
        )
