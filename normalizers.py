"""
Value normalization for raw spreadsheet cells.

Every function here is pure and never raises: dates that cannot be read
come back as None, money that cannot be read comes back as zero, and codes
that are not in a lookup table pass through lower-cased.
"""
import math
import re
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal, InvalidOperation
from numbers import Number
from typing import Any, Mapping, Optional, Union

import pandas as pd

# Day zero of the Excel 1900 date system (accounts for the 1900 leap-year bug)
EXCEL_EPOCH = date(1899, 12, 30)

_CURRENCY_PREFIX = re.compile(r"R\$\s*")
_LEADING_NUMBER = re.compile(r"^\s*[-+]?(?:\d+(?:\.\d*)?|\.\d+)")
_BR_DATE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{2,4})")

Amount = Union[int, float, Decimal]


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def clean_text(value: Any) -> str:
    """Render a raw cell as trimmed text; missing cells become ``""``."""
    if _is_missing(value):
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def normalize_handle(value: Any) -> str:
    """Trimmed, lower-cased row identifier (``""`` when blank)."""
    return clean_text(value).lower()


def _from_excel_serial(serial: float) -> Optional[date]:
    if not math.isfinite(serial) or serial <= 0:
        return None
    try:
        return EXCEL_EPOCH + timedelta(days=int(serial))
    except OverflowError:
        return None


def _parse_text_date(text: str) -> Optional[date]:
    try:
        if "/" in text:
            return datetime.strptime(text, "%d/%m/%Y").date()
        parsed = datetime.fromisoformat(text)
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone(timezone.utc)
        return parsed.date()
    except ValueError:
        return None


def _parse_brazilian_date(text: str) -> Optional[date]:
    """Second attempt: day/month/year with optional time suffix and short year."""
    match = _BR_DATE.match(text)
    if not match:
        return None
    day, month, year = (int(part) for part in match.groups())
    if year < 100:
        year += 2000
    try:
        return date(year, month, day)
    except ValueError:
        return None


def normalize_date(value: Any) -> Optional[date]:
    """
    Convert a raw cell into a calendar date.

    Native date cells keep their calendar date as-is (no timezone shift).
    Text is tried as ``dd/mm/yyyy`` when it contains a slash, otherwise as
    ISO (a UTC offset is converted to UTC before taking the date); failing
    that, a lenient Brazilian day/month/year reading is tried.

    Args:
        value: Raw cell value (datetime, pandas Timestamp, Excel serial or text)

    Returns:
        The date, or None when the value is empty or unreadable
    """
    if _is_missing(value):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, Number) and not isinstance(value, bool):
        return _from_excel_serial(float(value))

    text = str(value).strip()
    if not text:
        return None
    return _parse_text_date(text) or _parse_brazilian_date(text)


def parse_decimal(value: Any) -> Amount:
    """
    Read a monetary value written in Brazilian notation.

    ``"R$ 1.234,56"`` becomes ``Decimal("1234.56")``. Numbers pass through
    unchanged and anything unreadable becomes zero.
    """
    if isinstance(value, bool) or value is None:
        return Decimal("0")
    if isinstance(value, Number):
        return Decimal("0") if _is_missing(value) else value
    if not isinstance(value, str):
        return Decimal("0")

    text = _CURRENCY_PREFIX.sub("", value)
    text = text.replace(".", "").replace(",", ".", 1)
    match = _LEADING_NUMBER.match(text)
    if not match:
        return Decimal("0")
    try:
        return Decimal(match.group(0).strip())
    except InvalidOperation:
        return Decimal("0")


def lookup_code(value: Any, table: Mapping[str, str]) -> str:
    """Map a label through ``table``; unknown labels fall back to their lower-cased text."""
    text = clean_text(value)
    return table.get(text.upper(), text.lower())
