"""Tests for logging and error handling."""

from datetime import date

from storeledger.core.errors import (
    CascadeError,
    ConflictError,
    ErrorDetail,
    MissingDependencyError,
    NotFoundError,
    ValidationError,
)
from storeledger.core.logging import get_request_id, set_request_id


class TestErrorClasses:
    """Test custom exception classes."""

    def test_validation_error_creates_correct_response(self):
        exc = ValidationError("Invalid amount", details={"field": "amount"})

        assert exc.code == "VALIDATION_ERROR"
        assert exc.status_code == 422
        assert exc.details == {"field": "amount"}

        response = exc.to_response()
        assert isinstance(response, ErrorDetail)
        assert response.code == "VALIDATION_ERROR"

    def test_not_found_error_includes_resource_context(self):
        exc = NotFoundError(resource="LedgerDay", resource_id="2024-03-01")

        assert exc.code == "NOT_FOUND"
        assert exc.status_code == 404
        assert exc.details["resource"] == "LedgerDay"
        assert exc.details["resource_id"] == "2024-03-01"

    def test_conflict_error_creates_correct_response(self):
        exc = ConflictError("SKU already exists", details={"sku": "GB-001"})

        assert exc.code == "CONFLICT"
        assert exc.status_code == 409
        assert exc.details == {"sku": "GB-001"}

    def test_missing_dependency_error(self):
        exc = MissingDependencyError("No rate configured", details={"channel": "direct"})

        assert exc.code == "MISSING_DEPENDENCY"
        assert exc.status_code == 422
        assert exc.to_response().details == {"channel": "direct"}

    def test_cascade_error_reports_failing_day(self):
        exc = CascadeError(
            failed_date=date(2024, 3, 2),
            error="boom",
            committed_dates=[date(2024, 3, 1)],
        )

        assert exc.code == "CASCADE_FAILED"
        assert exc.status_code == 500
        assert "2024-03-02" in exc.message
        assert exc.details == {
            "failed_date": "2024-03-02",
            "committed_dates": ["2024-03-01"],
        }

    def test_empty_details_are_omitted(self):
        response = ValidationError("Bad input").to_response()

        assert response.details is None


class TestRequestIDContext:
    """Test request ID injection."""

    def test_set_and_get_request_id(self):
        set_request_id("test-request-123")

        assert get_request_id() == "test-request-123"

    def test_request_id_default(self):
        set_request_id("no-request-id")

        assert get_request_id() == "no-request-id"


class TestErrorHandling:
    """Test global error handlers."""

    async def test_request_id_header_in_response(self, client):
        response = await client.get("/health", headers={"X-Request-ID": "external-123"})

        assert response.headers.get("X-Request-ID") == "external-123"

    async def test_request_id_generated_when_missing(self, client):
        response = await client.get("/health")

        assert len(response.headers["X-Request-ID"]) > 0

    async def test_app_error_renders_as_json(self, client):
        response = await client.get("/ledger/days/2024-03-01")

        assert response.status_code == 404
        assert response.json() == {
            "code": "NOT_FOUND",
            "message": "LedgerDay with ID 2024-03-01 not found",
            "details": {"resource": "LedgerDay", "resource_id": "2024-03-01"},
        }

    async def test_unknown_route_returns_json_404(self, client):
        response = await client.get("/does-not-exist")

        assert response.status_code == 404
        assert response.json() == {"detail": "Not Found"}


class TestAppErrorBase:
    def test_subclass_codes_are_class_level(self):
        assert ValidationError.code == "VALIDATION_ERROR"
        assert CascadeError.status_code == 500

    def test_cascade_error_keeps_failure_attributes(self):
        exc = CascadeError(failed_date=date(2024, 3, 5), error="boom", committed_dates=[])

        assert exc.failed_date == date(2024, 3, 5)
        assert exc.committed_dates == []
        assert str(exc) == "Ledger recalculation failed on 2024-03-05: boom"
