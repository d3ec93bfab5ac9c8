"""
Monthly Cashflow

Classifies canonical ledger rows and buckets them into calendar months.

Rules (first match wins):
1. Dividend - code CM with "cash dividend"/"coupon payment" in particulars;
   the credit goes to dividends.
2. Trade - codes BI/SI; excluded from cashflow.
3. Deposit - code OR with particulars starting "FUTURE TRANSACTION";
   the credit goes to deposit.
Any row that is neither dividend nor trade adds its debit to withdraw,
including a deposit row that also carries a debit.
"""
from decimal import Decimal
from enum import Enum
from typing import Callable, Dict, Iterable, List, NamedTuple, Optional

from portview.common.logging_config import get_logger
from portview.common.models import (
    CanonicalRow,
    CashflowSummary,
    CashflowTotals,
    MONTH_LABELS,
    MonthlyBucket,
    ZERO,
)

logger = get_logger(__name__)


class CashflowCategory(Enum):
    DIVIDEND = "dividend"
    TRADE = "trade"
    DEPOSIT = "deposit"
    OTHER = "other"


class CashflowRule(NamedTuple):
    category: CashflowCategory
    predicate: Callable[[CanonicalRow], bool]


def _code(row: CanonicalRow) -> str:
    return (row.transaction_code or '').strip().upper()


def is_dividend_row(row: CanonicalRow) -> bool:
    # CM covers both cash dividends and bond coupon payments
    particulars = (row.particulars or '').lower()
    return _code(row) == 'CM' and ('cash dividend' in particulars or 'coupon payment' in particulars)


def is_trade_row(row: CanonicalRow) -> bool:
    return _code(row) in ('BI', 'SI')


def is_deposit_row(row: CanonicalRow) -> bool:
    particulars = (row.particulars or '').strip().upper()
    return _code(row) == 'OR' and particulars.startswith('FUTURE TRANSACTION')


CLASSIFICATION_RULES = (
    CashflowRule(CashflowCategory.DIVIDEND, is_dividend_row),
    CashflowRule(CashflowCategory.TRADE, is_trade_row),
    CashflowRule(CashflowCategory.DEPOSIT, is_deposit_row),
)
DEFAULT_CATEGORY = CashflowCategory.OTHER


def classify_row(row: CanonicalRow) -> CashflowCategory:
    for rule in CLASSIFICATION_RULES:
        if rule.predicate(row):
            return rule.category
    return DEFAULT_CATEGORY


class _MonthAccumulator:
    def __init__(self, month_index: int):
        self.month_index = month_index
        self.deposit = ZERO
        self.withdraw = ZERO
        self.dividends = ZERO

    def freeze(self) -> MonthlyBucket:
        return MonthlyBucket(
            month_index=self.month_index,
            month_label=MONTH_LABELS[self.month_index],
            deposit=self.deposit,
            withdraw=self.withdraw,
            dividends=self.dividends,
        )


def _amount(value: Optional[Decimal]) -> Decimal:
    return value if value else ZERO


def compute_monthly_cashflow(rows: Iterable[CanonicalRow], year: Optional[int] = None) -> List[MonthlyBucket]:
    """
    Buckets rows by month. With ``year`` set, rows from other years are
    dropped and all 12 months are returned; otherwise only months with
    at least one row, in calendar order. Rows without a date never count.
    """
    by_month: Dict[int, _MonthAccumulator] = {}
    counts = {category: 0 for category in CashflowCategory}
    skipped = 0

    for row in rows:
        row_date = row.date
        if row_date is None or (year and row_date.year != year):
            skipped += 1
            continue

        month_index = row_date.month - 1
        current = by_month.get(month_index)
        if current is None:
            current = by_month[month_index] = _MonthAccumulator(month_index)

        category = classify_row(row)
        counts[category] += 1

        if category is CashflowCategory.DIVIDEND:
            current.dividends += _amount(row.credit_amount)
            continue

        if category is CashflowCategory.TRADE:
            continue

        if category is CashflowCategory.DEPOSIT:
            current.deposit += _amount(row.credit_amount)

        current.withdraw += _amount(row.debit_amount)

    logger.debug(
        "Cashflow rows classified",
        year=year,
        skipped=skipped,
        **{category.value: n for category, n in counts.items()},
    )

    if year:
        return [(by_month.get(m) or _MonthAccumulator(m)).freeze() for m in range(12)]

    return [by_month[m].freeze() for m in sorted(by_month)]


def compute_cashflow_totals(months: Iterable[MonthlyBucket]) -> CashflowTotals:
    deposit = withdraw = dividends = ZERO
    for m in months:
        deposit += m.deposit
        withdraw += m.withdraw
        dividends += m.dividends
    return CashflowTotals(deposit=deposit, withdraw=withdraw, dividends=dividends)


def aggregate_cashflow(rows: Iterable[CanonicalRow], year: Optional[int] = None) -> CashflowSummary:
    months = compute_monthly_cashflow(rows, year=year)
    return CashflowSummary(months=tuple(months), totals=compute_cashflow_totals(months), year=year)
