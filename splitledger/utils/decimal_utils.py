"""Decimal arithmetic helpers"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Iterable

ZERO = Decimal("0")
CENT = Decimal("0.01")
HUNDRED = Decimal("100")


def to_decimal(value: Any) -> Decimal:
    """
    Convert a numeric value to Decimal without binary float artifacts.

    Args:
        value: int, float, str or Decimal

    Returns:
        Decimal value

    Raises:
        ValueError: If the value is not numeric
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise ValueError(f"Not a numeric amount: {value!r}")
    try:
        result = Decimal(str(value))
    except (InvalidOperation, TypeError) as e:
        raise ValueError(f"Not a numeric amount: {value!r}") from e
    if not result.is_finite():
        raise ValueError(f"Amount must be finite, got {value!r}")
    return result


def round_decimal(value: Decimal, decimal_places: int = 2) -> Decimal:
    """
    Round a decimal value to specified decimal places.

    Args:
        value: Decimal value to round
        decimal_places: Number of decimal places (default 2)

    Returns:
        Rounded decimal value
    """
    quantize_value = Decimal(10) ** -decimal_places
    return value.quantize(quantize_value, rounding=ROUND_HALF_UP)


def sum_decimals(values: Iterable[Decimal]) -> Decimal:
    """
    Sum decimal values.

    Args:
        values: Decimal values

    Returns:
        Sum of all values
    """
    return sum(values, ZERO)


def is_within_tolerance(value: Decimal, tolerance: Decimal = CENT) -> bool:
    """Check that a value is zero within the given tolerance"""
    return abs(value) <= tolerance
