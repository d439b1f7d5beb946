"""Decoding of ESPN's inconsistently encoded numeric values."""

from typing import Any, Optional

PLACEHOLDERS = frozenset({"", "-", "N/A"})


def coerce_espn_number(value: Any) -> float:
    """
    Decode a JSON number or string into a float. Never raises.

    - numbers pass through
    - "", "-", "N/A" → 0.0
    - plain decimals ("15.5", "-5.2") are parsed
    - "66.7%" → 66.7 (not divided by 100)
    - anything else → 0.0
    """
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if not isinstance(value, str):
        return 0.0

    text = value.strip()
    if text in PLACEHOLDERS:
        return 0.0
    parsed = _parse_decimal(text)
    if parsed is not None:
        return parsed
    if text.endswith('%'):
        parsed = _parse_decimal(text[:-1].strip())
        if parsed is not None:
            return parsed
    return 0.0


def _parse_decimal(text: str) -> Optional[float]:
    try:
        result = float(text)
    except ValueError:
        return None
    # float() accepts "nan"/"inf", which ESPN never means
    if result != result or result in (float("inf"), float("-inf")):
        return None
    return result


def clean_numeric_string(value: Optional[str]) -> Optional[float]:
    """
    Clean a stat string like "1,234" or "  7.5 " and convert it to float.

    Returns None for None or blank input. Raises ValueError when the cleaned
    string is not numeric.
    """
    if value is None:
        return None
    cleaned = str(value).replace(',', '').strip()
    if not cleaned:
        return None
    result = _parse_decimal(cleaned)
    if result is None:
        raise ValueError(f"Not a numeric value: {value!r}")
    return result


def parse_int(value: Optional[str]) -> Optional[int]:
    """Integer stat value with comma stripping; None when absent or not an integer."""
    if value is None:
        return None
    cleaned = str(value).replace(',', '').strip()
    if not cleaned:
        return None
    try:
        return int(cleaned)
    except ValueError:
        return None


def parse_float(value: Optional[str]) -> Optional[float]:
    """Decimal stat value with comma stripping; None when absent or unparseable."""
    try:
        return clean_numeric_string(value)
    except ValueError:
        return None
