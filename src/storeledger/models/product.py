"""Product model: inventory items sold across channels."""

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import Numeric, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from storeledger.core.db import Base
from storeledger.utils.datetime import now_utc


class Product(Base):
    """
    An inventory item.

    Sales and returns read `unit_cost` for margin and loss figures; they
    never own the product. Stock is tracked in two locations: own
    warehouse and the marketplace fulfillment center.
    """

    __tablename__ = "products"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    sku: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        unique=True,
        index=True,
    )

    model: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
    )

    unit_cost: Mapped[Decimal] = mapped_column(
        Numeric(14, 2),
        nullable=False,
        default=Decimal("0.00"),
    )

    sale_price: Mapped[Decimal] = mapped_column(
        Numeric(14, 2),
        nullable=False,
        default=Decimal("0.00"),
    )

    stock_own: Mapped[int] = mapped_column(nullable=False, default=0)

    stock_fulfillment: Mapped[int] = mapped_column(nullable=False, default=0)

    is_active: Mapped[bool] = mapped_column(
        default=True,
        nullable=False,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=now_utc)

    updated_at: Mapped[datetime] = mapped_column(
        nullable=False,
        default=now_utc,
        onupdate=now_utc,
    )

    @property
    def total_stock(self) -> int:
        return (self.stock_own or 0) + (self.stock_fulfillment or 0)

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, sku={self.sku}, model={self.model})>"
