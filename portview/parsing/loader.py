"""
Ledger Loader

Dispatches an upload to the matching source parser by file extension (or a
declared kind) and checks the result carries the fields the cashflow
report needs.
"""
import os
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from portview.common.logging_config import get_logger
from portview.common.models import CanonicalRow
from .base import BaseLedgerParser
from .exceptions import MissingDataError, SchemaError, UnsupportedFormatError
from .sources.ledger_csv import LedgerCSVParser
from .sources.ledger_pdf import LedgerPDFParser, StatementTextFileParser
from .sources.ledger_xlsx import LedgerWorkbookParser

logger = get_logger(__name__)

# Only the fields the cashflow report reads are required.
REQUIRED_FIELDS = ('transaction_code', 'date', 'particulars', 'debit_amount', 'credit_amount')

# Export column names, for error messages users can act on.
REQUIRED_COLUMN_LABELS = {
    'transaction_code': 'CD',
    'date': 'DATE',
    'particulars': 'PARTICULARS',
    'debit_amount': 'PHP_DEBIT',
    'credit_amount': 'PHP_CREDIT',
}


def get_extension(filename: Optional[str]) -> str:
    """'Ledger.2024.CSV' -> 'csv'; names without a dot give ''."""
    name = str(filename or '')
    idx = name.rfind('.')
    return '' if idx == -1 else name[idx + 1:].lower()


def validate_ledger_schema(rows: Sequence[CanonicalRow], filename: Optional[str] = None) -> None:
    """
    Requires the key columns to be present (not necessarily filled) on the
    first row. Raises SchemaError listing whatever is missing.
    """
    if not rows:
        raise SchemaError("No ledger rows found", filename=filename)

    sample = rows[0]
    missing = [REQUIRED_COLUMN_LABELS[f] for f in REQUIRED_FIELDS if f not in sample.present_fields]
    if missing:
        raise SchemaError(f"Missing required columns: {', '.join(missing)}", missing_fields=missing, filename=filename)


class LedgerLoader:
    """
    Entry point from raw upload bytes to validated canonical rows.

    Args:
        parsers: Source parsers to dispatch to (defaults to CSV, workbook,
            PDF statement and pre-extracted statement text)
    """

    def __init__(self, parsers: Optional[List[BaseLedgerParser]] = None):
        self.parsers = parsers or [
            LedgerCSVParser(),
            LedgerWorkbookParser(),
            LedgerPDFParser(),
            StatementTextFileParser(),
        ]

    def supported_extensions(self) -> List[str]:
        return [ext for p in self.parsers for ext in p.extensions]

    def get_parser(self, extension: str) -> Optional[BaseLedgerParser]:
        for parser in self.parsers:
            if parser.accepts(extension):
                return parser
        return None

    def _kind_index(self) -> Dict[str, BaseLedgerParser]:
        return {p.name: p for p in self.parsers}

    def load_rows(self, filename: Optional[str], content: bytes, kind: Optional[str] = None) -> List[CanonicalRow]:
        """
        Parses ``content`` with the parser chosen by ``kind`` (parser name or
        extension) or else by ``filename``'s extension.
        """
        if not content:
            raise MissingDataError("Missing file data", filename=filename)

        if kind:
            key = kind.strip().lower()
            parser = self._kind_index().get(key) or self.get_parser(key)
            extension = key
        else:
            extension = get_extension(filename)
            parser = self.get_parser(extension)

        if parser is None:
            accepted = ', '.join(f'.{e}' for e in self.supported_extensions())
            raise UnsupportedFormatError(
                f"Unsupported file type. Upload one of: {accepted}",
                extension=extension,
                filename=filename,
            )

        rows = parser.load_rows(content)
        validate_ledger_schema(rows, filename=filename)

        logger.info("Ledger loaded", parser=parser.name, rows=len(rows), filename=filename)
        return rows


def load_ledger_rows(filename: Optional[str], content: bytes, kind: Optional[str] = None) -> List[CanonicalRow]:
    return LedgerLoader().load_rows(filename, content, kind=kind)


def load_ledger_rows_from_path(path) -> List[CanonicalRow]:
    p = Path(path)
    return load_ledger_rows(os.path.basename(p), p.read_bytes())
