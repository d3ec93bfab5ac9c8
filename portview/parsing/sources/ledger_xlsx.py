"""
Ledger Workbook Parser

Parses the broker's spreadsheet export (.xlsx, .xlsm or legacy .xls) from its
first worksheet, and converts worksheets to CSV text.
"""
import math
from datetime import date, datetime
from io import BytesIO
from typing import Any, List, Optional, Sequence, Union

import pandas as pd

from portview.common.logging_config import get_logger
from portview.common.models import CanonicalRow
from ..base import BaseLedgerParser, rows_to_canonical
from ..exceptions import MissingDataError

logger = get_logger(__name__)

SheetRef = Union[str, int, None]


# Legacy .xls files are OLE2 compound documents; .xlsx/.xlsm are zip archives.
OLE2_SIGNATURE = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"


def workbook_engine(content: bytes) -> str:
    return 'xlrd' if bytes(content[:8]) == OLE2_SIGNATURE else 'openpyxl'


def _open_workbook(content: bytes) -> pd.ExcelFile:
    try:
        return pd.ExcelFile(BytesIO(content), engine=workbook_engine(content))
    except Exception as e:
        raise MissingDataError(f"Could not read workbook: {e}") from e


def resolve_sheet_name(sheet_names: Sequence[str], sheet: SheetRef = None) -> str:
    """
    Picks a worksheet by name or 0-based index; defaults to the first sheet.
    """
    names = list(sheet_names)
    if not names:
        raise MissingDataError("Workbook has no sheets")

    if isinstance(sheet, str) and sheet.strip():
        name = sheet.strip()
        if name not in names:
            raise MissingDataError(f"Sheet not found: {name}")
        return name

    if isinstance(sheet, int) and not isinstance(sheet, bool):
        if sheet < 0 or sheet >= len(names):
            raise MissingDataError(f"Sheet index out of range: {sheet}")
        return names[sheet]

    return names[0]


def _raw_cell(value: Any) -> Any:
    # pandas pads empty cells with NaN/NaT
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    return value


def read_sheet_rows(content: bytes, sheet: SheetRef = None) -> List[List[Any]]:
    """
    Reads one worksheet into a list of rows holding raw cell values.

    Numbers stay numbers and date cells arrive as datetimes; nothing is
    stringified here so serial dates survive until coercion.
    """
    workbook = _open_workbook(content)
    sheet_name = resolve_sheet_name(workbook.sheet_names, sheet)

    df = pd.read_excel(workbook, sheet_name=sheet_name, header=None, dtype=object)
    rows = [[_raw_cell(v) for v in row] for row in df.itertuples(index=False, name=None)]
    logger.debug("Worksheet read", sheet=sheet_name, rows=len(rows))
    return rows


def parse_ledger_rows_from_sheet(rows: Sequence[Sequence[Any]]) -> List[CanonicalRow]:
    """
    Converts an in-memory sheet (list of cell rows) into canonical rows.
    """
    if not rows:
        return []
    return rows_to_canonical(rows)


def csv_escape(value: Any) -> str:
    """
    Renders one cell for CSV output.

    Examples:
        None             -> ''
        date(2024, 3, 7) -> '2024-03-07'
        True             -> 'TRUE'
        'a,b'            -> '"a,b"'
    """
    if value is None:
        return ''
    if isinstance(value, bool):
        return 'TRUE' if value else 'FALSE'
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, float):
        if not math.isfinite(value):
            return ''
        return str(int(value)) if value.is_integer() else str(value)
    if isinstance(value, int):
        return str(value)

    s = str(value)
    if not s:
        return ''
    if any(ch in s for ch in '",\n\r'):
        return '"' + s.replace('"', '""') + '"'
    return s


def workbook_to_csv(content: bytes, sheet: SheetRef = None) -> str:
    """
    Converts a worksheet to CSV text. Every line is padded to the widest row.
    """
    if not isinstance(content, (bytes, bytearray)):
        raise TypeError("content must be bytes")

    rows = read_sheet_rows(bytes(content), sheet)
    width = max((len(r) for r in rows), default=0)

    lines = []
    for row in rows:
        cells = list(row) + [None] * (width - len(row))
        lines.append(','.join(csv_escape(v) for v in cells))
    return '\n'.join(lines)


class LedgerWorkbookParser(BaseLedgerParser):
    """
    Parser for spreadsheet ledger exports.

    Args:
        sheet: Worksheet name or index (defaults to the first sheet)
    """

    extensions = ('xlsx', 'xlsm', 'xls')
    name = "xlsx"

    def __init__(self, sheet: Optional[Union[str, int]] = None):
        self.sheet = sheet

    def load_rows(self, content) -> List[CanonicalRow]:
        rows = parse_ledger_rows_from_sheet(read_sheet_rows(content, self.sheet))
        logger.debug("Parsed ledger workbook", rows=len(rows))
        return rows
