"""Pydantic schemas for manual ledger entries."""

from datetime import date as date_type
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from storeledger.core.validators import sanitize_text, validate_currency, validate_no_future_date
from storeledger.models.enums import EntryChannel, EntryType


class LedgerEntryCreate(BaseModel):
    """Schema for recording an expense or income."""

    date: date_type
    entry_type: EntryType
    is_personal: bool = False
    category: str = Field(..., min_length=1, max_length=100)
    description: str | None = Field(None, max_length=255)
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    channel: EntryChannel = EntryChannel.GENERAL

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v: Decimal) -> Decimal:
        return validate_currency(v)

    @field_validator("category")
    @classmethod
    def validate_category(cls, v: str) -> str:
        cleaned = sanitize_text(v, max_length=100)
        if cleaned is None:
            raise ValueError("Category cannot be empty")
        return cleaned

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: str | None) -> str | None:
        return sanitize_text(v)

    @field_validator("date")
    @classmethod
    def validate_date(cls, v: date_type) -> date_type:
        return validate_no_future_date(v, "Entry date")


class LedgerEntryUpdate(BaseModel):
    """Schema for updating an entry (partial update allowed)."""

    date: date_type | None = None
    entry_type: EntryType | None = None
    is_personal: bool | None = None
    category: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = Field(None, max_length=255)
    amount: Decimal | None = Field(None, gt=0, decimal_places=2)
    channel: EntryChannel | None = None

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v: Decimal | None) -> Decimal | None:
        if v is None:
            return None
        return validate_currency(v)

    @field_validator("category")
    @classmethod
    def validate_category(cls, v: str | None) -> str | None:
        if v is None:
            return None
        cleaned = sanitize_text(v, max_length=100)
        if cleaned is None:
            raise ValueError("Category cannot be empty")
        return cleaned

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: str | None) -> str | None:
        return sanitize_text(v)

    @field_validator("date")
    @classmethod
    def validate_date(cls, v: date_type | None) -> date_type | None:
        if v is None:
            return None
        return validate_no_future_date(v, "Entry date")


class LedgerEntryRead(BaseModel):
    id: UUID
    date: date_type
    entry_type: EntryType
    is_personal: bool
    category: str
    description: str | None
    amount: Decimal
    channel: EntryChannel
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
