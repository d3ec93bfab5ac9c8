"""
Statement Layout Configuration

Markers the statement-text parser relies on, with the broker's defaults.
"""
from dataclasses import dataclass, field
from typing import List


@dataclass
class StatementLayout:
    """
    Configuration for the broker PDF statement text.

    Attributes:
        currency_marker: Word printed on the line carrying the movement amount
        start_pattern: Regex for a transaction's first line (date + reference)
        money_pattern: Regex for a 2-decimal money token, optionally (negative)
        debit_header_markers: Both present => header line with the DEBIT column
        credit_header_markers: Both present => header line with the CREDIT column
        end_patterns: Banners after which the transaction table is over
    """
    currency_marker: str = "PHP"
    start_pattern: str = r"^\s*\d{2}/\d{2}/\d{4}\s+\S+"
    first_line_pattern: str = r"^\s*(\d{2}/\d{2}/\d{4})\s+(\S+)\s*(.*)$"
    money_pattern: str = r"\(?-?\d{1,3}(?:,\d{3})*(?:\.\d{2})\)?"
    debit_header_markers: List[str] = field(default_factory=lambda: ["PRICE", "DEBIT"])
    credit_header_markers: List[str] = field(default_factory=lambda: ["CREDIT", "BALANCE"])
    end_patterns: List[str] = field(default_factory=lambda: [
        r"ENDING\s+SECURITY\s+POSITION",
        r"\bL\s*E\s*G\s*E\s*N\s*D\b",
        r"This is a computer generated statement",
    ])
