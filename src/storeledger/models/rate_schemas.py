"""Pydantic schemas for the rate table API."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from storeledger.core.validators import validate_currency, validate_percentage
from storeledger.models.enums import Channel, PaymentMethod, RateCondition


class RateCreate(BaseModel):
    """Schema for creating a rate-table entry."""

    channel: Channel
    payment_method: PaymentMethod
    condition: RateCondition = RateCondition.NORMAL
    commission_pct: Decimal = Field(Decimal("0"), description="Commission over gross, 0-100")
    vat_pct: Decimal = Field(Decimal("0"), description="VAT over the commission, 0-100")
    tax_pct: Decimal = Field(Decimal("0"), description="Gross-income tax over gross, 0-100")
    fixed_fee: Decimal = Field(Decimal("0.00"), ge=0, decimal_places=2)

    @field_validator("commission_pct", "vat_pct", "tax_pct")
    @classmethod
    def validate_percentages(cls, v: Decimal) -> Decimal:
        return validate_percentage(v)

    @field_validator("fixed_fee")
    @classmethod
    def validate_fixed_fee(cls, v: Decimal) -> Decimal:
        return validate_currency(v)


class RateUpdate(BaseModel):
    """Only the numbers change; the lookup key is fixed once created."""

    commission_pct: Decimal | None = None
    vat_pct: Decimal | None = None
    tax_pct: Decimal | None = None
    fixed_fee: Decimal | None = Field(None, ge=0, decimal_places=2)

    @field_validator("commission_pct", "vat_pct", "tax_pct")
    @classmethod
    def validate_percentages(cls, v: Decimal | None) -> Decimal | None:
        if v is None:
            return None
        return validate_percentage(v)

    @field_validator("fixed_fee")
    @classmethod
    def validate_fixed_fee(cls, v: Decimal | None) -> Decimal | None:
        if v is None:
            return None
        return validate_currency(v)


class RateRead(BaseModel):
    id: UUID
    channel: Channel
    payment_method: PaymentMethod
    condition: RateCondition
    commission_pct: Decimal
    vat_pct: Decimal
    tax_pct: Decimal
    fixed_fee: Decimal
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
