"""
Date resolution for ledger exports and PDF statements.

The CSV/XLSX exports write slash dates as day/month, while the PDF
statement prints month/day. Both conventions are kept on purpose:
``parse_ledger_date`` serves the exports, ``parse_statement_date`` the PDF.
"""
import math
import numbers
import re
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any, Optional

# Spreadsheet serial day 1 is 1900-01-01. Serials above 60 carry the
# phantom 1900-02-29, so they count from 1899-12-30 instead.
_SERIAL_EARLY_EPOCH = date(1899, 12, 31)
_SERIAL_EPOCH = date(1899, 12, 30)
_SERIAL_LEAP_BUG = 60

_NUMERIC_TEXT = re.compile(r"^\d+(\.\d+)?$")
_STATEMENT_DATE = re.compile(r"^(\d{2})/(\d{2})/(\d{4})$")

# Tried in order; first match wins. Day-first for slash dates.
LEDGER_DATE_FORMATS = (
    "%d/%m/%Y",
    "%m/%d/%Y",
    "%d-%m-%Y",
    # ISO, as written by workbook_to_csv
    "%Y-%m-%d",
)


def serial_to_date(serial) -> Optional[date]:
    """
    Converts a spreadsheet date serial into a calendar date.

    Examples:
        45307 -> date(2024, 1, 16)
        45307.75 -> date(2024, 1, 16)   # time of day ignored
        0 -> None
    """
    try:
        days = math.floor(serial)
    except (TypeError, ValueError, OverflowError):
        return None

    if days < 1:
        return None

    try:
        if days <= _SERIAL_LEAP_BUG:
            return _SERIAL_EARLY_EPOCH + timedelta(days=days)
        return _SERIAL_EPOCH + timedelta(days=days)
    except OverflowError:
        return None


def parse_ledger_date(value: Any) -> Optional[date]:
    """
    Resolves a ledger cell into a date.

    Accepts date/datetime values, spreadsheet serials (numbers or numeric
    strings) and text in one of LEDGER_DATE_FORMATS. "7/3/2024" is 7 March.
    Never raises.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        return value.date()

    if isinstance(value, date):
        return value

    if isinstance(value, (numbers.Real, Decimal)):
        if isinstance(value, numbers.Real) and not math.isfinite(value):
            return None
        return serial_to_date(value)

    raw = str(value).strip()
    if not raw:
        return None

    if _NUMERIC_TEXT.match(raw):
        return serial_to_date(float(raw))

    for fmt in LEDGER_DATE_FORMATS:
        try:
            return datetime.strptime(raw, fmt).date()
        except ValueError:
            continue

    return None


def parse_statement_date(value: Any) -> Optional[date]:
    """
    Strict MM/DD/YYYY parser for PDF statement rows.
    """
    s = str(value or "").strip()
    m = _STATEMENT_DATE.match(s)
    if not m:
        return None

    month, day, year = (int(g) for g in m.groups())
    try:
        return date(year, month, day)
    except ValueError:
        return None
