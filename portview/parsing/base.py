"""
Base Classes for Parsing Module

Shared header handling and row coercion for the tabular ledger sources,
plus the abstract parser every ingestion source implements.
"""
from abc import ABC, abstractmethod
from decimal import Decimal
import numbers
import re
from typing import Any, List, Mapping, Optional, Sequence

from portview.common.logging_config import get_logger
from portview.common.models import CanonicalRow, REPORTING_CURRENCY, ZERO
from .amounts import parse_amount
from .dates import parse_ledger_date
from .exceptions import SchemaError

logger = get_logger(__name__)

# Column that marks the header row and must be filled on every data row.
CODE_COLUMN = 'CD'

# Normalized export header -> canonical field.
HEADER_FIELD_MAP = {
    'CD': 'transaction_code',
    'NUMBER': 'reference_number',
    'DATE': 'date',
    'DUE_DATE': 'due_date',
    'PARTICULARS': 'particulars',
    'SECURITY': 'security',
    'NO_OF_SHARES': 'number_of_shares',
    'CURRENCY': 'currency',
    'UNIT_PRICE': 'unit_price',
    'FX_AMT': 'fx_amount',
    'FX_RUNNING_BAL': 'fx_running_balance',
    'PHP_DEBIT': 'debit_amount',
    'PHP_CREDIT': 'credit_amount',
    'PHP_RUNNING_BAL': 'running_balance',
}

# Letter-spaced headers produced by the broker's export tooling.
SPACED_HEADERS = {
    'PHP D E B I T': 'PHP_DEBIT',
    'PHP C R E D I T': 'PHP_CREDIT',
}


def normalize_header_cell(value: Any) -> str:
    """
    Normalizes a header cell.

    Examples:
        " No. of  Shares " -> "NO_OF_SHARES"
        "PHP D E B I T"    -> "PHP_DEBIT"
    """
    raw = clean_text(value)
    if not raw:
        return ''

    upper = re.sub(r"\s+", " ", raw).upper()
    if upper in SPACED_HEADERS:
        return SPACED_HEADERS[upper]

    normalized = upper.replace('.', '')
    normalized = re.sub(r"\s+", "_", normalized)
    return re.sub(r"__+", "_", normalized)


def clean_text(value: Any) -> str:
    """Stringifies a cell; whole floats from spreadsheets lose their '.0'."""
    if value is None:
        return ''
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def find_header_index(rows: Sequence[Sequence[Any]]) -> int:
    """
    Returns the index of the first row holding the code column marker.
    Anything above it (titles, account metadata) is preamble.
    """
    for idx, row in enumerate(rows):
        if not row:
            continue
        if any(clean_text(cell).upper() == CODE_COLUMN for cell in row):
            logger.debug("Ledger header row located", index=idx)
            return idx

    raise SchemaError(f"Could not find header row ({CODE_COLUMN}, NUMBER, DATE, ...) in ledger")


def _magnitude(value: Any) -> Decimal:
    amount = parse_amount(value)
    if amount is None:
        return ZERO
    return abs(amount)


def coerce_ledger_row(record: Mapping[str, Any], present_fields: frozenset) -> CanonicalRow:
    """
    Builds a CanonicalRow from a record keyed by canonical field name.
    Raw values (numbers included) must reach this point untouched so date
    serials can still be told apart from text.
    """
    return CanonicalRow(
        transaction_code=clean_text(record.get('transaction_code')),
        reference_number=clean_text(record.get('reference_number')),
        date=parse_ledger_date(record.get('date')),
        due_date=parse_ledger_date(record.get('due_date')),
        particulars=clean_text(record.get('particulars')),
        security=clean_text(record.get('security')),
        number_of_shares=parse_amount(record.get('number_of_shares')),
        currency=clean_text(record.get('currency')) or REPORTING_CURRENCY,
        unit_price=parse_amount(record.get('unit_price')),
        fx_amount=parse_amount(record.get('fx_amount')),
        fx_running_balance=parse_amount(record.get('fx_running_balance')),
        debit_amount=_magnitude(record.get('debit_amount')),
        credit_amount=_magnitude(record.get('credit_amount')),
        running_balance=parse_amount(record.get('running_balance')),
        present_fields=present_fields,
    )


def rows_to_canonical(rows: Sequence[Sequence[Any]]) -> List[CanonicalRow]:
    """
    Header-driven conversion shared by the sheet and CSV sources.

    Locates the header, maps known columns to canonical fields (unknown
    columns are ignored) and skips rows whose code column is blank.
    """
    header_index = find_header_index(rows)
    headers = [normalize_header_cell(cell) for cell in rows[header_index]]

    # column index -> canonical field; first occurrence of a header wins
    columns = {}
    for col, header in enumerate(headers):
        name = HEADER_FIELD_MAP.get(header)
        if name and name not in columns.values():
            columns[col] = name
    present_fields = frozenset(columns.values())

    parsed = []
    skipped = 0
    for row in rows[header_index + 1:]:
        if not row:
            continue

        record = {name: (row[col] if col < len(row) else None) for col, name in columns.items()}
        if not clean_text(record.get('transaction_code')):
            skipped += 1
            continue

        parsed.append(coerce_ledger_row(record, present_fields))

    logger.debug("Ledger rows coerced", rows=len(parsed), skipped=skipped, columns=sorted(present_fields))
    return parsed


class BaseLedgerParser(ABC):
    """
    Abstract Base Class for all ledger sources.

    Subclasses declare the file extensions they accept and convert raw
    upload bytes into CanonicalRow sequences.
    """

    extensions: tuple = ()
    name: str = "ledger"

    @abstractmethod
    def load_rows(self, content) -> List[CanonicalRow]:
        """
        Parses raw content into canonical rows.
        Must be implemented by subclasses.
        """
        raise NotImplementedError

    def accepts(self, extension: Optional[str]) -> bool:
        return (extension or '').lower() in self.extensions
