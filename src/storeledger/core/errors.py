"""Application errors and the JSON body they render to."""

from datetime import date
from typing import Any, Optional

from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: Optional[dict[str, Any]] = Field(None, description="Additional context")


class AppError(Exception):
    """
    Base for errors the API turns into an ErrorDetail response.

    Subclasses set `code` and `status_code` as class attributes; the
    exception handler reads them off the instance.
    """

    code = "INTERNAL_ERROR"
    status_code = 500

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorDetail:
        return ErrorDetail(code=self.code, message=self.message, details=self.details or None)


class ValidationError(AppError):
    """Input that passed schema validation but breaks a ledger rule."""

    code = "VALIDATION_ERROR"
    status_code = 422


class NotFoundError(AppError):
    code = "NOT_FOUND"
    status_code = 404

    def __init__(self, resource: str, resource_id: str):
        super().__init__(
            f"{resource} with ID {resource_id} not found",
            details={"resource": resource, "resource_id": resource_id},
        )


class ConflictError(AppError):
    """Duplicate keys, or a delete that would orphan returns."""

    code = "CONFLICT"
    status_code = 409


class MissingDependencyError(AppError):
    """
    A sale names a product or a channel/payment/condition combination with
    no rate-table entry. Raised before anything is written.
    """

    code = "MISSING_DEPENDENCY"
    status_code = 422


class CascadeError(AppError):
    """A cascade stopped on a failing day; earlier days stay committed."""

    code = "CASCADE_FAILED"
    status_code = 500

    def __init__(self, failed_date: date, error: str, committed_dates: list[date]):
        self.failed_date = failed_date
        self.committed_dates = committed_dates
        super().__init__(
            f"Ledger recalculation failed on {failed_date.isoformat()}: {error}",
            details={
                "failed_date": failed_date.isoformat(),
                "committed_dates": [d.isoformat() for d in committed_dates],
            },
        )
