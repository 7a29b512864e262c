"""Sale model: one transaction on one channel."""

import uuid
from datetime import date as date_type
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import Enum as SQLEnum
from sqlalchemy import ForeignKey, Numeric, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from storeledger.core.db import Base
from storeledger.models.enums import (
    Channel,
    PaymentMethod,
    RateCondition,
    ShippingStatus,
)
from storeledger.utils.datetime import now_utc

if TYPE_CHECKING:
    from storeledger.models.product import Product


class Sale(Base):
    """
    A single sale.

    The fee breakdown (commission, vat, tax) and margin figures are written
    from the rate table when the sale is created or edited, so later rate
    changes never rewrite history.
    """

    __tablename__ = "sales"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    sale_code: Mapped[str] = mapped_column(
        String(40),
        nullable=False,
        unique=True,
    )

    date: Mapped[date_type] = mapped_column(nullable=False, index=True)

    buyer: Mapped[str] = mapped_column(String(200), nullable=False)

    channel: Mapped[Channel] = mapped_column(
        SQLEnum(Channel, name="channel"),
        nullable=False,
        index=True,
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

    product_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("products.id"),
        nullable=False,
        index=True,
    )

    product: Mapped["Product"] = relationship("Product", lazy="selectin")

    quantity: Mapped[int] = mapped_column(nullable=False, default=1)

    # Amounts entered by the user
    gross_price: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    shipping_cost: Mapped[Decimal] = mapped_column(
        Numeric(14, 2), nullable=False, default=Decimal("0.00")
    )

    # Calculated from the rate table
    commission: Mapped[Decimal] = mapped_column(
        Numeric(14, 2), nullable=False, default=Decimal("0.00")
    )
    vat: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    tax: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    net_price: Mapped[Decimal] = mapped_column(
        Numeric(14, 2), nullable=False, default=Decimal("0.00")
    )
    product_cost: Mapped[Decimal] = mapped_column(
        Numeric(14, 2), nullable=False, default=Decimal("0.00")
    )
    margin: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    margin_on_price: Mapped[Decimal] = mapped_column(
        Numeric(9, 4), nullable=False, default=Decimal("0")
    )
    margin_on_cost: Mapped[Decimal] = mapped_column(
        Numeric(9, 4), nullable=False, default=Decimal("0")
    )

    # Logistics
    shipping_status: Mapped[ShippingStatus] = mapped_column(
        SQLEnum(ShippingStatus, name="shipping_status"),
        nullable=False,
        default=ShippingStatus.PENDING,
    )
    tracking_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    courier: Mapped[str | None] = mapped_column(String(100), nullable=True)
    external_order_id: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=now_utc)

    updated_at: Mapped[datetime] = mapped_column(
        nullable=False,
        default=now_utc,
        onupdate=now_utc,
    )

    def __repr__(self) -> str:
        return (
            f"<Sale(id={self.id}, date={self.date}, channel={self.channel}, "
            f"payment_method={self.payment_method}, gross_price={self.gross_price})>"
        )
