from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

REPORTING_CURRENCY = "PHP"

MONTH_LABELS = ('Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun', 'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec')

ZERO = Decimal("0")

# Canonical field names, in the order the broker export lists them.
LEDGER_FIELDS = (
    'transaction_code',
    'reference_number',
    'date',
    'due_date',
    'particulars',
    'security',
    'number_of_shares',
    'currency',
    'unit_price',
    'fx_amount',
    'fx_running_balance',
    'debit_amount',
    'credit_amount',
    'running_balance',
)


@dataclass(frozen=True)
class CanonicalRow:
    """
    Canonical representation of one broker ledger transaction.
    Every ingestion source (sheet, CSV, PDF statement) converges on this shape.

    ``debit_amount``/``credit_amount`` are non-negative magnitudes in the
    reporting currency; the side is conveyed by which one is populated.
    ``present_fields`` lists the canonical fields the source had a column for.
    """
    transaction_code: str
    date: Optional[date]
    particulars: str = ""
    reference_number: str = ""
    due_date: Optional[date] = None
    security: str = ""
    number_of_shares: Optional[Decimal] = None
    currency: str = REPORTING_CURRENCY
    unit_price: Optional[Decimal] = None
    fx_amount: Optional[Decimal] = None
    fx_running_balance: Optional[Decimal] = None
    debit_amount: Decimal = ZERO
    credit_amount: Decimal = ZERO
    running_balance: Optional[Decimal] = None
    present_fields: frozenset = field(default=frozenset(LEDGER_FIELDS), compare=False, repr=False)

    def to_dict(self) -> Dict[str, Any]:
        return {name: getattr(self, name) for name in LEDGER_FIELDS}


@dataclass(frozen=True)
class MonthlyBucket:
    """Aggregated cashflow for one calendar month (``month_index`` is 0-11)."""
    month_index: int
    month_label: str
    deposit: Decimal = ZERO
    withdraw: Decimal = ZERO
    dividends: Decimal = ZERO


@dataclass(frozen=True)
class CashflowTotals:
    deposit: Decimal = ZERO
    withdraw: Decimal = ZERO
    dividends: Decimal = ZERO


@dataclass(frozen=True)
class CashflowSummary:
    """
    Chronological month buckets plus field-wise totals.
    Produced once per report; never persisted.
    """
    months: Tuple[MonthlyBucket, ...]
    totals: CashflowTotals
    year: Optional[int] = None

    def to_records(self) -> List[Dict[str, Any]]:
        """Month rows followed by a 'Total' row, ready for tabular output."""
        records = [
            {
                'month': m.month_label,
                'deposit': m.deposit,
                'withdraw': m.withdraw,
                'dividends': m.dividends,
            }
            for m in self.months
        ]
        records.append({
            'month': 'Total',
            'deposit': self.totals.deposit,
            'withdraw': self.totals.withdraw,
            'dividends': self.totals.dividends,
        })
        return records

    def to_payload(self) -> Dict[str, Any]:
        """JSON-safe dict; amounts travel as strings so no precision is lost."""
        return {
            'year': self.year,
            'months': [
                {
                    'month_index': m.month_index,
                    'month_label': m.month_label,
                    'deposit': str(m.deposit),
                    'withdraw': str(m.withdraw),
                    'dividends': str(m.dividends),
                }
                for m in self.months
            ],
            'totals': {
                'deposit': str(self.totals.deposit),
                'withdraw': str(self.totals.withdraw),
                'dividends': str(self.totals.dividends),
            },
        }

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "CashflowSummary":
        months = tuple(
            MonthlyBucket(
                month_index=int(m['month_index']),
                month_label=m['month_label'],
                deposit=Decimal(m['deposit']),
                withdraw=Decimal(m['withdraw']),
                dividends=Decimal(m['dividends']),
            )
            for m in payload.get('months', [])
        )
        totals = payload['totals']
        return cls(
            months=months,
            totals=CashflowTotals(
                deposit=Decimal(totals['deposit']),
                withdraw=Decimal(totals['withdraw']),
                dividends=Decimal(totals['dividends']),
            ),
            year=payload.get('year'),
        )

    def to_dataframe(self):
        import pandas as pd

        df = pd.DataFrame(self.to_records(), columns=['month', 'deposit', 'withdraw', 'dividends'])
        return df.set_index('month')
