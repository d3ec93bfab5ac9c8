"""
Ledger PDF Statement Parser

Recovers transactions from the linearized text of the broker's PDF
statement. Rows wrap over several lines, so the parser accumulates a block
per transaction (from one dated start line to the next) and finalizes each
block into a CanonicalRow.
"""
import re
from decimal import Decimal
from enum import Enum
from io import BytesIO
from typing import Callable, List, NamedTuple, Optional, Tuple

import pdfplumber

from portview.common.logging_config import get_logger
from portview.common.models import CanonicalRow, LEDGER_FIELDS, ZERO
from ..amounts import parse_amount
from ..base import BaseLedgerParser
from ..config.layout import StatementLayout
from ..dates import parse_statement_date
from ..exceptions import MissingDataError
from .ledger_csv import decode_text

logger = get_logger(__name__)

DEFAULT_LAYOUT = StatementLayout()

_SEPARATOR_LINE = re.compile(r"^[=\-]{6,}$")
_SEPARATOR_FRAGMENT = re.compile(r"\s*[=\-]{6,}\s*")
_NUMERIC_LINE = re.compile(r"^[\d\s,().-]+$")
_TRAILING_FRACTION = re.compile(r"\s+0\.\d{2,4}\s*$")


# =============================================================================
# PDF TEXT
# =============================================================================

def extract_pdf_text(content: bytes) -> str:
    """
    Linearizes every page of a PDF, keeping line breaks and horizontal
    spacing so column offsets stay meaningful.
    """
    if not content:
        raise MissingDataError("Missing PDF data")

    try:
        with pdfplumber.open(BytesIO(content)) as pdf:
            pages = [page.extract_text(layout=True) or "" for page in pdf.pages]
    except Exception as e:
        logger.error(f"PDF text extraction failed: {e}", error_type=type(e).__name__)
        raise MissingDataError(f"Failed to extract PDF text: {e}") from e

    logger.debug("PDF text extracted", pages=len(pages))
    return "\n".join(pages)


# =============================================================================
# TOKENS
# =============================================================================

class MoneyToken(NamedTuple):
    value: str
    index: int


def parse_reference(reference: str) -> Tuple[str, str]:
    """
    Splits a statement reference into (code, number).

    Examples:
        "OR-12345" -> ("OR", "12345")
        "CM"       -> ("CM", "")
    """
    raw = str(reference or '').strip()
    if not raw:
        return '', ''

    m = re.match(r"^([A-Z]{1,6})-(\d+)$", raw)
    if m:
        return m.group(1), m.group(2)

    idx = raw.find('-')
    if idx == -1:
        return raw, ''
    return raw[:idx].strip(), raw[idx + 1:].strip()


def find_money_tokens(line: str, layout: StatementLayout = DEFAULT_LAYOUT) -> List[MoneyToken]:
    s = str(line or '').replace('\f', '')
    return [MoneyToken(m.group(0), m.start()) for m in re.finditer(layout.money_pattern, s)]


def _has_currency_marker(line: str, layout: StatementLayout) -> bool:
    return re.search(rf"\b{re.escape(layout.currency_marker)}\b", line, re.IGNORECASE) is not None


def extract_movement_amount(block_lines: List[str], layout: StatementLayout = DEFAULT_LAYOUT) -> Optional[Decimal]:
    """
    Finds the movement amount, scanning upward from the block's last line
    for a line carrying the currency marker.

    Such lines read ``<quantity> <movement> PHP <balance>``: the last token
    is the running balance, so the second-to-last one is taken.
    """
    for line in reversed(block_lines):
        line = str(line or '')
        if not _has_currency_marker(line, layout):
            continue

        tokens = find_money_tokens(line, layout)
        if not tokens:
            continue

        pick = tokens[-2] if len(tokens) >= 2 else tokens[0]
        movement = parse_amount(pick.value)
        if movement is None:
            continue
        return abs(movement)

    return None


def extract_particulars(block_lines: List[str], first_line_remainder: str = '',
                        layout: StatementLayout = DEFAULT_LAYOUT) -> str:
    """
    Joins the descriptive text of a block, leaving out amount lines,
    table rules and a trailing stray fraction such as "0.0000".
    """
    parts = []
    if first_line_remainder:
        parts.append(first_line_remainder.strip())

    for line in block_lines[1:]:
        line = str(line or '')
        trimmed = line.strip()
        if not trimmed:
            continue

        if _has_currency_marker(line, layout):
            continue
        if find_money_tokens(line, layout) and _NUMERIC_LINE.match(trimmed):
            continue
        if _SEPARATOR_LINE.match(trimmed):
            continue

        parts.append(trimmed)

    joined = re.sub(r"\s+", " ", ' '.join(parts)).strip()
    without_separators = re.sub(r"\s+", " ", _SEPARATOR_FRAGMENT.sub(' ', joined)).strip()
    return _TRAILING_FRACTION.sub('', without_separators).strip()


# =============================================================================
# DEBIT / CREDIT RULES
# =============================================================================

class MovementSide(Enum):
    NEUTRAL = "neutral"
    CREDIT = "credit"
    DEBIT = "debit"


class SideRule(NamedTuple):
    name: str
    predicate: Callable[[str, str], bool]
    side: MovementSide


def _is_trade(code: str, text: str) -> bool:
    return code in ('BI', 'SI')


def _is_stock_dividend(code: str, text: str) -> bool:
    return code == 'IN' and 'STOCK DIVIDEND' in text


def _is_bond_purchase(code: str, text: str) -> bool:
    return code == 'DM' and ('PURCHASE OF RTB' in text or 'PHILIPPINE GOVERNMENT' in text or 'BOND ' in text)


def _is_cash_dividend(code: str, text: str) -> bool:
    return code == 'CM' and 'CASH DIVIDEND' in text


def _is_coupon_payment(code: str, text: str) -> bool:
    return code == 'CM' and 'COUPON PAYMENT' in text


def _is_future_transaction(code: str, text: str) -> bool:
    return code == 'OR' and text.startswith('FUTURE TRANSACTION')


# Evaluated top-down on upper-cased code/particulars; first match wins.
SIDE_RULES = (
    SideRule('trade', _is_trade, MovementSide.NEUTRAL),
    SideRule('stock dividend', _is_stock_dividend, MovementSide.NEUTRAL),
    SideRule('bond purchase', _is_bond_purchase, MovementSide.NEUTRAL),
    SideRule('cash dividend', _is_cash_dividend, MovementSide.CREDIT),
    SideRule('coupon payment', _is_coupon_payment, MovementSide.CREDIT),
    SideRule('future transaction', _is_future_transaction, MovementSide.CREDIT),
)
DEFAULT_SIDE = MovementSide.DEBIT


def infer_movement_side(code: str, particulars: str) -> MovementSide:
    code_upper = str(code or '').strip().upper()
    text_upper = str(particulars or '').strip().upper()
    for rule in SIDE_RULES:
        if rule.predicate(code_upper, text_upper):
            return rule.side
    return DEFAULT_SIDE


# =============================================================================
# BLOCKS
# =============================================================================

def parse_transaction_block(block_lines: List[str], debit_col_index: Optional[int] = None,
                            layout: StatementLayout = DEFAULT_LAYOUT) -> Optional[CanonicalRow]:
    """
    Finalizes one accumulated block. Returns None when the first line has
    no valid MM/DD/YYYY date.
    """
    if not block_lines:
        return None

    first = str(block_lines[0])
    m = re.match(layout.first_line_pattern, first)
    if not m:
        return None

    txn_date = parse_statement_date(m.group(1))
    if txn_date is None:
        return None

    reference = m.group(2)
    code, number = parse_reference(reference)

    remainder = m.group(3) or ''
    # Stop at the DEBIT column so numeric cells stay out of the description
    if debit_col_index and debit_col_index > 0 and len(first) > debit_col_index:
        start = first.index(reference) + len(reference)
        remainder = first[start:debit_col_index].strip()

    particulars = extract_particulars(block_lines, remainder, layout)
    movement = extract_movement_amount(block_lines, layout)

    debit = ZERO
    credit = ZERO
    if movement:
        side = infer_movement_side(code, particulars)
        if side is MovementSide.CREDIT:
            credit = movement
        elif side is MovementSide.DEBIT:
            debit = movement

    return CanonicalRow(
        transaction_code=code.strip(),
        reference_number=number.strip(),
        date=txn_date,
        particulars=particulars,
        currency=layout.currency_marker,
        debit_amount=debit,
        credit_amount=credit,
        present_fields=frozenset(LEDGER_FIELDS),
    )


class StatementTextParser:
    """
    Line-driven state machine over linearized statement text.

    While no block is open the parser is scanning; a transaction start line
    opens a block and every later line (blank ones included) joins it until
    the next start line or a section-end banner. After a banner nothing
    more is read.
    """

    def __init__(self, layout: Optional[StatementLayout] = None):
        self.layout = layout or DEFAULT_LAYOUT
        self._start = re.compile(self.layout.start_pattern)
        self._end = [re.compile(p, re.IGNORECASE) for p in self.layout.end_patterns]

    def is_transaction_start_line(self, line: str) -> bool:
        return self._start.match(str(line or '')) is not None

    def is_section_end(self, line: str) -> bool:
        return any(p.search(line) for p in self._end)

    def parse(self, text: str) -> List[CanonicalRow]:
        lines = re.split(r"\r?\n", str(text or '').replace('\f', ''))

        rows: List[CanonicalRow] = []
        debit_col_index = None
        credit_col_index = None
        block: Optional[List[str]] = None
        discarded = 0

        def flush():
            nonlocal discarded
            if not block:
                return
            row = parse_transaction_block(block, debit_col_index, self.layout)
            if row is not None and row.transaction_code:
                rows.append(row)
            else:
                discarded += 1

        for line in lines:
            if block is not None and self.is_section_end(line):
                flush()
                block = None
                break

            if all(marker in line for marker in self.layout.debit_header_markers):
                debit_col_index = line.index(self.layout.debit_header_markers[-1])
                continue

            if all(marker in line for marker in self.layout.credit_header_markers):
                credit_col_index = line.index(self.layout.credit_header_markers[0])
                continue

            if self.is_transaction_start_line(line):
                flush()
                block = [line]
                continue

            if block is not None:
                block.append(line)

        flush()

        logger.debug(
            "Statement text parsed",
            rows=len(rows),
            discarded_blocks=discarded,
            debit_col=debit_col_index,
            credit_col=credit_col_index,
        )
        return rows


def parse_statement_text(text: str, layout: Optional[StatementLayout] = None) -> List[CanonicalRow]:
    return StatementTextParser(layout).parse(text)


class LedgerPDFParser(BaseLedgerParser):
    """
    Parser for the broker's PDF statement.
    """

    extensions = ('pdf',)
    name = "pdf"

    def __init__(self, layout: Optional[StatementLayout] = None):
        self.layout = layout

    def load_rows(self, content) -> List[CanonicalRow]:
        return parse_statement_text(extract_pdf_text(content), self.layout)


class StatementTextFileParser(BaseLedgerParser):
    """
    Parser for statement text that was already linearized (e.g. by pdftotext).
    """

    extensions = ('txt',)
    name = "statement-text"

    def __init__(self, layout: Optional[StatementLayout] = None):
        self.layout = layout

    def load_rows(self, content) -> List[CanonicalRow]:
        return parse_statement_text(decode_text(content), self.layout)
