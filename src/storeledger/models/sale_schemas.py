"""Pydantic schemas for Sale API."""

from datetime import date as date_type
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from storeledger.core.validators import sanitize_text, validate_currency, validate_no_future_date
from storeledger.models.enums import (
    Channel,
    PaymentMethod,
    RateCondition,
    SettlementRoute,
    ShippingStatus,
)


class SaleCreate(BaseModel):
    """Schema for creating a sale. Fees and margins are computed server-side."""

    date: date_type
    buyer: str = Field(..., min_length=1, max_length=200)
    channel: Channel
    payment_method: PaymentMethod
    condition: RateCondition = RateCondition.NORMAL
    product_id: UUID
    quantity: int = Field(1, ge=1)
    gross_price: Decimal = Field(..., ge=0, decimal_places=2)
    shipping_cost: Decimal = Field(Decimal("0.00"), ge=0, decimal_places=2)
    shipping_status: ShippingStatus = ShippingStatus.PENDING
    tracking_url: str | None = Field(None, max_length=500)
    courier: str | None = Field(None, max_length=100)
    external_order_id: str | None = Field(None, max_length=100)

    @field_validator("buyer")
    @classmethod
    def validate_buyer(cls, v: str) -> str:
        cleaned = sanitize_text(v, max_length=200)
        if cleaned is None:
            raise ValueError("Buyer cannot be empty")
        return cleaned

    @field_validator("gross_price", "shipping_cost")
    @classmethod
    def validate_amounts(cls, v: Decimal) -> Decimal:
        return validate_currency(v)

    @field_validator("date")
    @classmethod
    def validate_date(cls, v: date_type) -> date_type:
        """Ensure date is not in the future."""
        return validate_no_future_date(v, "Sale date")


class SaleUpdate(BaseModel):
    """
    Schema for updating a sale (partial update allowed).

    Any change to the financial fields (date, channel, payment method,
    condition, product, quantity, gross price, shipping) reprices the sale
    and recalculates the ledger; logistics fields do not.
    """

    date: date_type | None = None
    buyer: str | None = Field(None, min_length=1, max_length=200)
    channel: Channel | None = None
    payment_method: PaymentMethod | None = None
    condition: RateCondition | None = None
    product_id: UUID | None = None
    quantity: int | None = Field(None, ge=1)
    gross_price: Decimal | None = Field(None, ge=0, decimal_places=2)
    shipping_cost: Decimal | None = Field(None, ge=0, decimal_places=2)
    shipping_status: ShippingStatus | None = None
    tracking_url: str | None = Field(None, max_length=500)
    courier: str | None = Field(None, max_length=100)
    external_order_id: str | None = Field(None, max_length=100)

    @field_validator("buyer")
    @classmethod
    def validate_buyer(cls, v: str | None) -> str | None:
        if v is None:
            return None
        cleaned = sanitize_text(v, max_length=200)
        if cleaned is None:
            raise ValueError("Buyer cannot be empty")
        return cleaned

    @field_validator("gross_price", "shipping_cost")
    @classmethod
    def validate_amounts(cls, v: Decimal | None) -> Decimal | None:
        if v is None:
            return None
        return validate_currency(v)

    @field_validator("date")
    @classmethod
    def validate_date(cls, v: date_type | None) -> date_type | None:
        if v is None:
            return None
        return validate_no_future_date(v, "Sale date")


class SalePreviewRequest(BaseModel):
    """Inputs needed to price a sale without saving it."""

    channel: Channel
    payment_method: PaymentMethod
    condition: RateCondition = RateCondition.NORMAL
    product_id: UUID
    quantity: int = Field(1, ge=1)
    gross_price: Decimal = Field(..., ge=0, decimal_places=2)
    shipping_cost: Decimal = Field(Decimal("0.00"), ge=0, decimal_places=2)

    @field_validator("gross_price", "shipping_cost")
    @classmethod
    def validate_amounts(cls, v: Decimal) -> Decimal:
        return validate_currency(v)


class SalePreview(BaseModel):
    """Fee breakdown and margin for a prospective sale."""

    commission: Decimal
    vat: Decimal
    tax: Decimal
    net_price: Decimal
    product_cost: Decimal
    margin: Decimal
    margin_on_price: Decimal
    margin_on_cost: Decimal
    settlement_route: SettlementRoute
    settlement_amount: Decimal


class SaleRead(BaseModel):
    """Schema for reading a sale."""

    id: UUID
    sale_code: str
    date: date_type
    buyer: str
    channel: Channel
    payment_method: PaymentMethod
    condition: RateCondition
    product_id: UUID
    quantity: int
    gross_price: Decimal
    shipping_cost: Decimal
    commission: Decimal
    vat: Decimal
    tax: Decimal
    net_price: Decimal
    product_cost: Decimal
    margin: Decimal
    margin_on_price: Decimal
    margin_on_cost: Decimal
    shipping_status: ShippingStatus
    tracking_url: str | None
    courier: str | None
    external_order_id: str | None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
