"""
Ledger CSV Parser

Parses the broker's delimited-text ledger export.
"""
import re
from typing import List, Union

from portview.common.logging_config import get_logger
from portview.common.models import CanonicalRow
from ..base import BaseLedgerParser, rows_to_canonical

logger = get_logger(__name__)


def split_csv_line(line: str) -> List[str]:
    '''
    Splits one CSV line into fields.

    Double quotes delimit fields, a doubled quote inside them is a literal
    quote, and commas inside quotes are not separators.

    Examples:
        'a,"b,c",d'      -> ['a', 'b,c', 'd']
        '"say ""hi"""'   -> ['say "hi"']
    '''
    out = []
    current = []
    in_quotes = False
    i = 0

    while i < len(line):
        ch = line[i]

        if in_quotes:
            if ch == '"':
                if i + 1 < len(line) and line[i + 1] == '"':
                    current.append('"')
                    i += 2
                    continue
                in_quotes = False
            else:
                current.append(ch)
        elif ch == ',':
            out.append(''.join(current))
            current = []
        elif ch == '"':
            in_quotes = True
        else:
            current.append(ch)
        i += 1

    out.append(''.join(current))
    return out


def decode_text(content: Union[bytes, str]) -> str:
    if isinstance(content, bytes):
        return content.decode('utf-8-sig', errors='replace')
    return str(content or '')


def parse_ledger_rows_from_csv_text(text: str) -> List[CanonicalRow]:
    """
    Parses ledger CSV text; blank lines are dropped before the header scan.
    """
    lines = [line for line in re.split(r"\r?\n", text) if line.strip()]
    rows = [split_csv_line(line) for line in lines]
    return rows_to_canonical(rows)


class LedgerCSVParser(BaseLedgerParser):
    """
    Parser for the delimited-text ledger export.
    """

    extensions = ('csv',)
    name = "csv"

    def load_rows(self, content) -> List[CanonicalRow]:
        rows = parse_ledger_rows_from_csv_text(decode_text(content))
        logger.debug("Parsed ledger CSV", rows=len(rows))
        return rows
