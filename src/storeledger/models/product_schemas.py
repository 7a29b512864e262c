"""Pydantic schemas for Product API."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from storeledger.core.validators import sanitize_text, validate_currency, validate_sku


class ProductBase(BaseModel):
    """Base schema with common product fields."""

    sku: str = Field(..., min_length=1, max_length=64)
    model: str = Field(..., min_length=1, max_length=200)
    unit_cost: Decimal = Field(Decimal("0.00"), ge=0, decimal_places=2)
    sale_price: Decimal = Field(Decimal("0.00"), ge=0, decimal_places=2)
    stock_own: int = Field(0, ge=0)
    stock_fulfillment: int = Field(0, ge=0)

    @field_validator("sku")
    @classmethod
    def validate_sku_format(cls, v: str) -> str:
        return validate_sku(v)

    @field_validator("model")
    @classmethod
    def validate_model(cls, v: str) -> str:
        """Strip markup from the model name."""
        cleaned = sanitize_text(v, max_length=200)
        if cleaned is None:
            raise ValueError("Model cannot be empty")
        return cleaned

    @field_validator("unit_cost", "sale_price")
    @classmethod
    def validate_amounts(cls, v: Decimal) -> Decimal:
        return validate_currency(v)


class ProductCreate(ProductBase):
    """Schema for creating a new product."""

    pass


class ProductUpdate(BaseModel):
    """Schema for updating a product (partial update allowed)."""

    model: str | None = Field(None, min_length=1, max_length=200)
    unit_cost: Decimal | None = Field(None, ge=0, decimal_places=2)
    sale_price: Decimal | None = Field(None, ge=0, decimal_places=2)
    stock_own: int | None = Field(None, ge=0)
    stock_fulfillment: int | None = Field(None, ge=0)
    is_active: bool | None = None

    @field_validator("model")
    @classmethod
    def validate_model(cls, v: str | None) -> str | None:
        if v is None:
            return None
        cleaned = sanitize_text(v, max_length=200)
        if cleaned is None:
            raise ValueError("Model cannot be empty")
        return cleaned

    @field_validator("unit_cost", "sale_price")
    @classmethod
    def validate_amounts(cls, v: Decimal | None) -> Decimal | None:
        if v is None:
            return None
        return validate_currency(v)


class ProductRead(ProductBase):
    """Schema for reading a product from the database."""

    id: UUID
    is_active: bool
    total_stock: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
