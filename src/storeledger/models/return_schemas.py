"""Pydantic schemas for SaleReturn API."""

from datetime import date as date_type
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from storeledger.core.validators import sanitize_text, validate_currency, validate_no_future_date
from storeledger.models.enums import ProcessorState, ReturnResolution, ReturnStatus


class SaleReturnCreate(BaseModel):
    """Schema for opening a return against a sale."""

    sale_id: UUID
    claim_date: date_type
    completed_date: date_type | None = None
    status: ReturnStatus = ReturnStatus.PENDING
    reason: str | None = Field(None, max_length=255)
    refunded_amount: Decimal | None = Field(None, ge=0, decimal_places=2)
    outbound_shipping_cost: Decimal = Field(Decimal("0.00"), ge=0, decimal_places=2)
    return_shipping_cost: Decimal = Field(Decimal("0.00"), ge=0, decimal_places=2)
    new_shipment_cost: Decimal = Field(Decimal("0.00"), ge=0, decimal_places=2)
    product_recoverable: bool = True
    opened_as_claim: bool = True
    processor_state: ProcessorState = ProcessorState.AVAILABLE
    processor_retained: bool = False
    notes: str | None = Field(None, max_length=2000)

    @field_validator(
        "refunded_amount", "outbound_shipping_cost", "return_shipping_cost", "new_shipment_cost"
    )
    @classmethod
    def validate_amounts(cls, v: Decimal | None) -> Decimal | None:
        if v is None:
            return None
        return validate_currency(v)

    @field_validator("claim_date", "completed_date")
    @classmethod
    def validate_dates(cls, v: date_type | None) -> date_type | None:
        if v is None:
            return None
        return validate_no_future_date(v, "Return date")

    @field_validator("reason")
    @classmethod
    def validate_reason(cls, v: str | None) -> str | None:
        return sanitize_text(v)

    @field_validator("notes")
    @classmethod
    def validate_notes(cls, v: str | None) -> str | None:
        return sanitize_text(v, max_length=2000)

    @model_validator(mode="after")
    def validate_completion(self) -> "SaleReturnCreate":
        if self.completed_date is not None and self.completed_date < self.claim_date:
            raise ValueError("completed_date cannot be before claim_date")
        return self


class SaleReturnUpdate(BaseModel):
    """Schema for updating a return (partial update allowed)."""

    claim_date: date_type | None = None
    completed_date: date_type | None = None
    status: ReturnStatus | None = None
    reason: str | None = Field(None, max_length=255)
    refunded_amount: Decimal | None = Field(None, ge=0, decimal_places=2)
    outbound_shipping_cost: Decimal | None = Field(None, ge=0, decimal_places=2)
    return_shipping_cost: Decimal | None = Field(None, ge=0, decimal_places=2)
    new_shipment_cost: Decimal | None = Field(None, ge=0, decimal_places=2)
    product_recoverable: bool | None = None
    opened_as_claim: bool | None = None
    processor_state: ProcessorState | None = None
    processor_retained: bool | None = None
    notes: str | None = Field(None, max_length=2000)

    @field_validator(
        "refunded_amount", "outbound_shipping_cost", "return_shipping_cost", "new_shipment_cost"
    )
    @classmethod
    def validate_amounts(cls, v: Decimal | None) -> Decimal | None:
        if v is None:
            return None
        return validate_currency(v)

    @field_validator("claim_date", "completed_date")
    @classmethod
    def validate_dates(cls, v: date_type | None) -> date_type | None:
        if v is None:
            return None
        return validate_no_future_date(v, "Return date")

    @field_validator("reason")
    @classmethod
    def validate_reason(cls, v: str | None) -> str | None:
        return sanitize_text(v)

    @field_validator("notes")
    @classmethod
    def validate_notes(cls, v: str | None) -> str | None:
        return sanitize_text(v, max_length=2000)


class SaleReturnFinalize(BaseModel):
    """Close a return with a terminal status on the day it really completed."""

    status: ReturnStatus
    completed_date: date_type
    refunded_amount: Decimal | None = Field(None, ge=0, decimal_places=2)
    processor_state: ProcessorState | None = None
    processor_retained: bool | None = None
    product_recoverable: bool | None = None

    @field_validator("status")
    @classmethod
    def validate_terminal(cls, v: ReturnStatus) -> ReturnStatus:
        if not v.is_terminal:
            raise ValueError("Finalize requires a delivered_* status")
        return v

    @field_validator("completed_date")
    @classmethod
    def validate_completed_date(cls, v: date_type) -> date_type:
        return validate_no_future_date(v, "Completion date")

    @field_validator("refunded_amount")
    @classmethod
    def validate_refunded_amount(cls, v: Decimal | None) -> Decimal | None:
        if v is None:
            return None
        return validate_currency(v)


class SaleReturnRead(BaseModel):
    id: UUID
    sale_id: UUID
    claim_date: date_type
    completed_date: date_type | None
    status: ReturnStatus
    resolution: ReturnResolution | None
    reason: str | None
    refunded_amount: Decimal | None
    outbound_shipping_cost: Decimal
    return_shipping_cost: Decimal
    new_shipment_cost: Decimal
    product_recoverable: bool
    opened_as_claim: bool
    processor_state: ProcessorState
    processor_retained: bool
    notes: str | None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ReturnLossRow(BaseModel):
    """One terminal return in the losses report."""

    return_id: UUID
    sale_id: UUID
    sale_code: str
    completed_date: date_type
    resolution: ReturnResolution
    realized_loss: Decimal


class ReturnLossReport(BaseModel):
    start_date: date_type
    end_date: date_type
    return_count: int
    total_loss: Decimal
    by_resolution: dict[str, Decimal]
    returns: list[ReturnLossRow]
