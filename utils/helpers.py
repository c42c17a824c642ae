"""
Common helper utilities for the application.
"""

from typing import Any, Optional
import pandas as pd


def safe_int(value: Any, default: int = 0) -> int:
    """
    Safely convert value to integer.

    Args:
        value: Value to convert (numeric strings accepted)
        default: Default value if conversion fails

    Returns:
        Integer value or default
    """
    try:
        if value is None or pd.isna(value):
            return default
        return int(float(value))
    except (ValueError, TypeError):
        return default


def format_large_number(value: Optional[float], decimals: int = 2) -> str:
    """
    Format large numbers with appropriate suffix (K, M, B, T).

    Args:
        value: Number to format
        decimals: Number of decimal places

    Returns:
        Formatted string (e.g., '1.23B'), 'N/A' for None
    """
    if value is None:
        return "N/A"
    if abs(value) >= 1e12:
        return f"{value / 1e12:.{decimals}f}T"
    elif abs(value) >= 1e9:
        return f"{value / 1e9:.{decimals}f}B"
    elif abs(value) >= 1e6:
        return f"{value / 1e6:.{decimals}f}M"
    elif abs(value) >= 1e3:
        return f"{value / 1e3:.{decimals}f}K"
    else:
        return f"{value:.{decimals}f}"


def parse_timestamp(value: Any) -> Optional[str]:
    """
    Normalize a provider timestamp to an ISO-8601 UTC string.

    Handles Alpha Vantage compact stamps ('20251222T143000'), plain dates
    ('2025-12-22'), ISO strings and Unix epoch seconds (Finnhub).

    Args:
        value: Raw timestamp

    Returns:
        ISO string (e.g. '2025-12-22T14:30:00+00:00') or None if unparseable
    """
    if value is None or value == '':
        return None

    try:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            if value <= 0:
                return None
            ts = pd.to_datetime(value, unit='s', utc=True)
        else:
            text = str(value).strip()
            if len(text) == 15 and text[8] == 'T' and text.replace('T', '').isdigit():
                ts = pd.to_datetime(text, format='%Y%m%dT%H%M%S', utc=True)
            else:
                ts = pd.to_datetime(text, utc=True)
    except (ValueError, TypeError, OverflowError):
        return None

    if pd.isna(ts):
        return None
    return ts.isoformat()
