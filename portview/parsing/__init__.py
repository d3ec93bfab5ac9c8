"""
Ledger Parsing Module

- Cell parsers (amounts, dates)
- Source parsers (CSV export, XLSX export, PDF statement)
- Loader with extension dispatch and schema check
"""

# Cell parsers
from .amounts import parse_amount
from .dates import parse_ledger_date, parse_statement_date

# Base
from .base import BaseLedgerParser

# Configuration
from .config.layout import StatementLayout

# Sources
from .sources.ledger_csv import LedgerCSVParser
from .sources.ledger_xlsx import LedgerWorkbookParser
from .sources.ledger_pdf import LedgerPDFParser, StatementTextFileParser, parse_statement_text

# Loader
from .loader import LedgerLoader, load_ledger_rows, validate_ledger_schema

# Errors
from .exceptions import MissingDataError, SchemaError, UnsupportedFormatError

__all__ = [
    'parse_amount',
    'parse_ledger_date',
    'parse_statement_date',
    'BaseLedgerParser',
    'StatementLayout',
    'LedgerCSVParser',
    'LedgerWorkbookParser',
    'LedgerPDFParser',
    'StatementTextFileParser',
    'parse_statement_text',
    'LedgerLoader',
    'load_ledger_rows',
    'validate_ledger_schema',
    'MissingDataError',
    'SchemaError',
    'UnsupportedFormatError',
]
