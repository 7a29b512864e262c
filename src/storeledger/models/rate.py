"""Rate table: commission and tax percentages per channel/method/condition."""

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import Enum as SQLEnum
from sqlalchemy import Numeric, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from storeledger.core.db import Base
from storeledger.models.enums import Channel, PaymentMethod, RateCondition
from storeledger.utils.datetime import now_utc


class Rate(Base):
    """
    One row of the rate table.

    Attributes:
        commission_pct: Channel commission over the gross price (0-100)
        vat_pct: VAT charged on top of the commission (0-100)
        tax_pct: Gross-income tax withheld over the gross price (0-100)
        fixed_fee: Flat fee per operation, added to the commission
    """

    __tablename__ = "rates"
    __table_args__ = (
        UniqueConstraint("channel", "payment_method", "condition", name="uq_rate_lookup"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    channel: Mapped[Channel] = mapped_column(
        SQLEnum(Channel, name="channel"),
        nullable=False,
    )

    payment_method: Mapped[PaymentMethod] = mapped_column(
        SQLEnum(PaymentMethod, name="payment_method"),
        nullable=False,
    )

    condition: Mapped[RateCondition] = mapped_column(
        SQLEnum(RateCondition, name="rate_condition"),
        nullable=False,
        default=RateCondition.NORMAL,
    )

    commission_pct: Mapped[Decimal] = mapped_column(Numeric(7, 4), nullable=False, default=0)
    vat_pct: Mapped[Decimal] = mapped_column(Numeric(7, 4), nullable=False, default=0)
    tax_pct: Mapped[Decimal] = mapped_column(Numeric(7, 4), nullable=False, default=0)
    fixed_fee: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=now_utc)

    updated_at: Mapped[datetime] = mapped_column(
        nullable=False,
        default=now_utc,
        onupdate=now_utc,
    )

    def __repr__(self) -> str:
        return (
            f"<Rate(channel={self.channel}, payment_method={self.payment_method}, "
            f"condition={self.condition}, commission_pct={self.commission_pct})>"
        )
