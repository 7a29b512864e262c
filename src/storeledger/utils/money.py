"""Decimal helpers for money amounts (2 decimals, half-up)."""

from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_decimal(value: Decimal | int | float | str | None) -> Decimal:
    """Coerce a stored or user value to Decimal; None counts as zero."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    # str() first so floats keep their printed value, not binary noise
    return Decimal(str(value))


def round_money(value: Decimal | int | float | str | None) -> Decimal:
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def round_ratio(value: Decimal) -> Decimal:
    """Round a ratio (margin over price/cost) to 4 decimals."""
    return value.quantize(Decimal("0.0001"), rounding=ROUND_HALF_UP)
