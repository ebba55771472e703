"""Decimal helpers for currency amounts"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

ZERO = Decimal("0")
_TWO_PLACES = Decimal("0.01")


def to_decimal(value) -> Decimal:
    """Convert ints, strings and Decimals to Decimal. Floats go through str() to avoid binary noise."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise ValueError("Boolean is not an amount")
    if isinstance(value, float):
        value = str(value)
    try:
        return Decimal(value)
    except (InvalidOperation, TypeError) as e:
        raise ValueError(f"Invalid amount: {value!r}") from e


def round_money(amount: Decimal) -> Decimal:
    """Round for display: 2 places, ROUND_HALF_UP. Non-finite values pass through."""
    if not amount.is_finite():
        return amount
    return amount.quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)
