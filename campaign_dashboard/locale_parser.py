"""
Locale helpers for the Brazilian spreadsheet export.

Numbers arrive as "1.234,56" ("." thousands, "," decimal) and dates as
DD/MM/YYYY. Parsing never raises: bad numbers read as 0 and bad dates read
as ``INVALID_DATE``.
"""
import math
import re
from datetime import date, timedelta

INVALID_DATE = date.min

_FLOAT_PREFIX = re.compile(r"^\s*[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_INT_PREFIX = re.compile(r"^\s*[+-]?[0-9]+")


def parse_brazilian_number(value: str | None) -> float:
    """Parse "1.234,56" into 1234.56.

    Reads the leading numeric prefix after normalizing separators, so
    "12,5 BRL" gives 12.5 and "abc" gives 0.
    """
    if not value:
        return 0.0
    cleaned = value.replace(".", "").replace(",", ".", 1)
    match = _FLOAT_PREFIX.match(cleaned)
    if not match:
        return 0.0
    number = float(match.group(0))
    # overlong digit runs overflow to inf
    return number if math.isfinite(number) and number != 0 else 0.0


def parse_int_or_default(value: str | None, default: int = 0) -> int:
    if not value:
        return default
    match = _INT_PREFIX.match(value)
    if not match:
        return default
    try:
        return int(match.group(0)) or default
    except ValueError:
        # digit run longer than the int conversion limit
        return default


def parse_date(value: str | None) -> date:
    """Parse DD/MM/YYYY with calendar rollover.

    Out-of-range days and months roll into the neighbouring month or year
    (31/02/2024 -> 02/03/2024, 00/03/2024 -> 29/02/2024). Non-numeric parts
    give ``INVALID_DATE``.
    """
    parts = (value or "").split("/")
    if len(parts) != 3:
        return INVALID_DATE
    try:
        day, month, year = (int(p) for p in parts)
    except ValueError:
        return INVALID_DATE

    # month is 1-based; shift so month 0 is December of the previous year
    year += (month - 1) // 12
    month = (month - 1) % 12 + 1
    try:
        return date(year, month, 1) + timedelta(days=day - 1)
    except (ValueError, OverflowError):
        return INVALID_DATE


def format_brazilian_number(value: float, decimals: int = 2) -> str:
    """Format 1234567.891 as "1.234.567,89"."""
    text = f"{value:,.{decimals}f}"
    return text.replace(",", "X").replace(".", ",").replace("X", ".")


def format_currency(value: float) -> str:
    return f"R$ {format_brazilian_number(value)}"


def format_date(value: date) -> str:
    return value.strftime("%d/%m/%Y")
