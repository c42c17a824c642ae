"""
Numeric Utilities - Centralized numeric value handling.

Provider payloads mix floats, stringified numbers ("123.45"), percent strings
("1.25%"), the literal "None", empty strings and NaN. Every adapter goes
through these helpers so that anything that is not a finite number becomes
None instead of an exception.
"""

import math
from typing import Any, Optional


def clean_numeric(value: Any) -> Optional[float]:
    """
    Clean a numeric value, returning None for invalid values.

    Args:
        value: Raw value (float, int, numeric string, or None/NaN/"None"/"-")

    Returns:
        Float value if valid, None if value is missing/invalid

    Examples:
        >>> clean_numeric("42.5")
        42.5
        >>> clean_numeric("None")
        >>> clean_numeric(float('inf'))
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, str):
        value = value.strip().replace(',', '')
        if value in ('', '-', 'None', 'null', 'N/A', 'NaN'):
            return None

    try:
        float_value = float(value)
    except (ValueError, TypeError):
        return None

    if math.isnan(float_value) or math.isinf(float_value):
        return None
    return float_value


def clean_non_negative(value: Any) -> Optional[float]:
    """clean_numeric that also rejects negatives (prices, volumes, caps)."""
    cleaned = clean_numeric(value)
    if cleaned is None or cleaned < 0:
        return None
    return cleaned


def clean_percent(value: Any) -> Optional[float]:
    """
    Parse a percentage given as a whole number ("1.25%", 1.25) into a
    decimal fraction (0.0125).
    """
    if isinstance(value, str):
        value = value.strip().rstrip('%')
    cleaned = clean_numeric(value)
    return None if cleaned is None else cleaned / 100.0


def clamp(value: float, lower: float, upper: float) -> float:
    """Clamp value into [lower, upper]."""
    return max(lower, min(upper, value))


def safe_divide(
    numerator: Any,
    denominator: Any,
    default: Optional[float] = None
) -> Optional[float]:
    """
    Safely perform division, handling None/NaN/zero denominators.

    Examples:
        >>> safe_divide(10, 2)
        5.0
        >>> safe_divide(10, 0)
        >>> safe_divide(None, 5)
    """
    clean_num = clean_numeric(numerator)
    clean_den = clean_numeric(denominator)

    if clean_num is None or clean_den is None or clean_den == 0:
        return default

    return clean_num / clean_den


def safe_mean(values) -> float:
    """Arithmetic mean; the mean of an empty sequence is 0.0, not NaN."""
    values = [v for v in values if v is not None]
    if not values:
        return 0.0
    return sum(values) / len(values)


def round_half_up(value: float) -> int:
    """
    Round to the nearest integer with .5 going up (70.5 -> 71).

    Python's round() is banker's rounding (70.5 -> 70). Weighted sums such
    as 30 * 0.15 carry binary noise, so the value is first snapped to 9
    decimals.
    """
    return int(math.floor(round(value, 9) + 0.5))


def round_optional(value: Optional[float], digits: int = 2) -> Optional[float]:
    """round() that passes None through."""
    return None if value is None else round(value, digits)
