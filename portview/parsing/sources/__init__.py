# Source parsers
from .ledger_csv import LedgerCSVParser
from .ledger_xlsx import LedgerWorkbookParser
from .ledger_pdf import LedgerPDFParser, StatementTextFileParser

__all__ = ['LedgerCSVParser', 'LedgerWorkbookParser', 'LedgerPDFParser', 'StatementTextFileParser']
