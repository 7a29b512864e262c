"""Field validators shared by the request schemas."""

import re
from datetime import date
from decimal import Decimal, InvalidOperation

from storeledger.utils.datetime import today_local

# Largest value a Numeric(14, 2) column holds
MAX_AMOUNT = Decimal("999999999999.99")

TAG_RE = re.compile(r"<[^>]+>")
SKU_RE = re.compile(r"^[A-Z0-9_\-]+$")


def _to_decimal(value: Decimal | float | str, label: str) -> Decimal:
    # str() first so 0.1 stays 0.1 instead of its binary expansion
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise ValueError(f"Invalid {label} format: {value}") from e


def validate_currency(value: Decimal | float | str, max_value: Decimal = MAX_AMOUNT) -> Decimal:
    """
    Money amounts: prices, costs, fees, balances.

    Never negative; direction (expense vs income, refund vs sale) is carried
    by the record type, not the sign.
    """
    amount = _to_decimal(value, "currency")
    if amount < 0:
        raise ValueError("Currency value cannot be negative")
    if amount > max_value:
        raise ValueError(f"Currency value exceeds maximum allowed: {max_value}")
    return amount


def validate_percentage(value: Decimal | float | str, field_name: str = "Percentage") -> Decimal:
    """Rates are stored as 0-100, not as fractions."""
    pct = _to_decimal(value, field_name.lower())
    if not Decimal("0") <= pct <= Decimal("100"):
        raise ValueError(f"{field_name} must be between 0 and 100")
    return pct


def validate_no_future_date(value: date, field_name: str = "Date") -> date:
    if value > today_local():
        raise ValueError(f"{field_name} cannot be in the future")
    return value


def sanitize_text(value: str | None, max_length: int = 255) -> str | None:
    """Strip markup and whitespace; blank input becomes None."""
    cleaned = TAG_RE.sub("", value or "").strip()
    if not cleaned:
        return None
    if len(cleaned) > max_length:
        raise ValueError(f"Text cannot exceed {max_length} characters")
    return cleaned


def validate_sku(value: str) -> str:
    sku = value.strip().upper()
    if not sku:
        raise ValueError("SKU cannot be empty")
    if not SKU_RE.match(sku):
        raise ValueError("SKU can only contain letters, digits, - and _")
    return sku
