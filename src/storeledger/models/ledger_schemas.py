"""Pydantic schemas for the settlement ledger API."""

from datetime import date as date_type
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from storeledger.core.validators import sanitize_text, validate_currency, validate_no_future_date


class LedgerDayRead(BaseModel):
    """A ledger day with its derived totals."""

    id: UUID
    date: date_type
    processor_available: Decimal
    processor_pending: Decimal
    processor_held: Decimal
    platform_pending: Decimal
    processor_settled_today: Decimal
    platform_settled_today: Decimal
    tax_withheld_today: Decimal
    processor_total: Decimal
    grand_total: Decimal
    net_day_movement: Decimal
    is_opening_balance: bool
    notes: str | None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class LedgerDayUpdate(BaseModel):
    """Manual edit of a day's processed amounts or notes."""

    processor_settled_today: Decimal | None = Field(None, ge=0, decimal_places=2)
    platform_settled_today: Decimal | None = Field(None, ge=0, decimal_places=2)
    tax_withheld_today: Decimal | None = Field(None, ge=0, decimal_places=2)
    notes: str | None = Field(None, max_length=2000)

    @field_validator("processor_settled_today", "platform_settled_today", "tax_withheld_today")
    @classmethod
    def validate_amounts(cls, v: Decimal | None) -> Decimal | None:
        if v is None:
            return None
        return validate_currency(v)

    @field_validator("notes")
    @classmethod
    def validate_notes(cls, v: str | None) -> str | None:
        return sanitize_text(v, max_length=2000)


class SettlementCreate(BaseModel):
    """Payouts processed on one day."""

    date: date_type
    processor_settled: Decimal = Field(Decimal("0.00"), ge=0, decimal_places=2)
    platform_settled: Decimal = Field(Decimal("0.00"), ge=0, decimal_places=2)
    tax_withheld: Decimal = Field(Decimal("0.00"), ge=0, decimal_places=2)
    notes: str | None = Field(None, max_length=2000)

    @field_validator("processor_settled", "platform_settled", "tax_withheld")
    @classmethod
    def validate_amounts(cls, v: Decimal) -> Decimal:
        return validate_currency(v)

    @field_validator("date")
    @classmethod
    def validate_date(cls, v: date_type) -> date_type:
        return validate_no_future_date(v, "Settlement date")

    @field_validator("notes")
    @classmethod
    def validate_notes(cls, v: str | None) -> str | None:
        return sanitize_text(v, max_length=2000)


class OpeningBalancesCreate(BaseModel):
    """
    Authoritative starting balances.

    Balances may be negative (e.g. platform owing less than was refunded).
    """

    date: date_type
    processor_available: Decimal = Field(Decimal("0.00"), decimal_places=2)
    processor_pending: Decimal = Field(Decimal("0.00"), decimal_places=2)
    processor_held: Decimal = Field(Decimal("0.00"), decimal_places=2)
    platform_pending: Decimal = Field(Decimal("0.00"), decimal_places=2)
    notes: str | None = Field(None, max_length=2000)

    @field_validator("notes")
    @classmethod
    def validate_notes(cls, v: str | None) -> str | None:
        return sanitize_text(v, max_length=2000)


class RecalculateRequest(BaseModel):
    from_date: date_type


class CascadeResultRead(BaseModel):
    from_date: date_type
    committed_dates: list[date_type]
    opening_balance_dates: list[date_type]


class SettlementResult(BaseModel):
    ledger_day: LedgerDayRead
    cascade: CascadeResultRead


class LedgerGaps(BaseModel):
    first_date: date_type | None
    last_date: date_type | None
    missing_dates: list[date_type]
