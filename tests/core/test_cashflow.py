"""
Tests for monthly cashflow classification and aggregation
"""
from datetime import date
from decimal import Decimal

import pytest

from portview.core.cashflow import (
    CashflowCategory,
    aggregate_cashflow,
    classify_row,
    compute_cashflow_totals,
    compute_monthly_cashflow,
)
from conftest import make_row


# =============================================================================
# TEST: classification
# =============================================================================

class TestClassifyRow:

    @pytest.mark.parametrize("code,particulars,expected", [
        ("CM", "CASH DIVIDEND XYZ", CashflowCategory.DIVIDEND),
        ("cm", "Coupon Payment RTB", CashflowCategory.DIVIDEND),
        ("BI", "BUY XYZ", CashflowCategory.TRADE),
        ("SI", "SELL XYZ", CashflowCategory.TRADE),
        ("OR", "  future transaction - deposit", CashflowCategory.DEPOSIT),
        ("OR", "OFFICIAL RECEIPT", CashflowCategory.OTHER),
        ("CM", "ADJUSTMENT", CashflowCategory.OTHER),
        ("DM", "WITHDRAWAL", CashflowCategory.OTHER),
    ])
    def test_categories(self, code, particulars, expected):
        assert classify_row(make_row(code, particulars)) is expected

    def test_categories_are_exclusive(self):
        # a CM row can never count as a deposit, whatever its text says
        row = make_row("CM", "FUTURE TRANSACTION CASH DIVIDEND", credit=10)
        assert classify_row(row) is CashflowCategory.DIVIDEND


# =============================================================================
# TEST: aggregation
# =============================================================================

class TestMonthlyCashflow:

    def test_end_to_end_scenario(self, scenario_rows):
        summary = aggregate_cashflow(scenario_rows)

        assert [m.month_label for m in summary.months] == ["Jan", "Feb"]
        jan, feb = summary.months
        assert (jan.deposit, jan.withdraw, jan.dividends) == (Decimal("10000"), 0, 0)
        assert (feb.deposit, feb.withdraw, feb.dividends) == (0, 0, Decimal("250"))
        assert summary.totals.deposit == Decimal("10000")
        assert summary.totals.withdraw == 0
        assert summary.totals.dividends == Decimal("250")

    def test_trade_rows_never_count(self):
        months = compute_monthly_cashflow([make_row("SI", "SELL", debit=10, credit=20)])

        assert len(months) == 1
        assert (months[0].deposit, months[0].withdraw, months[0].dividends) == (0, 0, 0)

    def test_dividend_debit_is_ignored(self):
        [month] = compute_monthly_cashflow([make_row("CM", "CASH DIVIDEND", debit=5, credit=100)])

        assert month.dividends == Decimal("100")
        assert month.withdraw == 0

    def test_other_credit_is_ignored(self):
        [month] = compute_monthly_cashflow([make_row("DM", "WITHDRAWAL", debit=300, credit=40)])

        assert month.withdraw == Decimal("300")
        assert month.deposit == 0

    def test_deposit_debit_also_counts_as_withdraw(self):
        row = make_row("OR", "FUTURE TRANSACTION - REVERSAL", debit=75, credit=500)

        [month] = compute_monthly_cashflow([row])

        assert month.deposit == Decimal("500")
        assert month.withdraw == Decimal("75")

    def test_decimal_precision(self):
        rows = [make_row("OR", "FUTURE TRANSACTION", credit="0.10") for _ in range(3)]

        [month] = compute_monthly_cashflow(rows)

        assert month.deposit == Decimal("0.30")

    def test_year_gives_twelve_months(self, scenario_rows):
        months = compute_monthly_cashflow(scenario_rows, year=2024)

        assert len(months) == 12
        assert [m.month_index for m in months] == list(range(12))
        assert months[0].deposit == Decimal("10000")
        assert months[1].dividends == Decimal("250")
        assert all((m.deposit, m.withdraw, m.dividends) == (0, 0, 0) for m in months[2:])
        assert months[11].month_label == "Dec"
        assert months[11].deposit == 0

    def test_other_years_are_dropped(self, scenario_rows):
        rows = scenario_rows + [make_row("DM", "WITHDRAWAL", debit=99, on=date(2023, 1, 5))]

        summary = aggregate_cashflow(rows, year=2024)

        assert summary.totals.withdraw == 0
        assert summary.year == 2024

    def test_year_without_rows(self):
        months = compute_monthly_cashflow([make_row("DM", debit=1, on=date(2020, 5, 1))], year=2024)

        assert len(months) == 12
        assert all(m.withdraw == 0 for m in months)

    def test_months_are_sorted_without_year(self):
        rows = [
            make_row("DM", debit=1, on=date(2024, 11, 1)),
            make_row("DM", debit=2, on=date(2024, 3, 1)),
            make_row("DM", debit=3, on=date(2023, 3, 9)),
        ]

        months = compute_monthly_cashflow(rows)

        assert [m.month_label for m in months] == ["Mar", "Nov"]
        # same calendar month of different years shares a bucket
        assert months[0].withdraw == Decimal("5")

    def test_undated_rows_are_excluded(self):
        months = compute_monthly_cashflow([make_row("DM", debit=50, on=None)])
        assert months == []

    def test_empty_input(self):
        summary = aggregate_cashflow([])

        assert summary.months == ()
        assert summary.totals.deposit == 0

    def test_aggregation_is_repeatable(self, scenario_rows):
        assert aggregate_cashflow(scenario_rows) == aggregate_cashflow(scenario_rows)

    def test_totals_sum_months(self, scenario_rows):
        months = compute_monthly_cashflow(scenario_rows + [make_row("DM", debit=12.5, on=date(2024, 4, 1))])

        totals = compute_cashflow_totals(months)

        assert totals.withdraw == Decimal("12.5")
        assert totals.deposit == sum(m.deposit for m in months)


class TestSummaryOutput:

    def test_to_records_ends_with_total(self, scenario_rows):
        records = aggregate_cashflow(scenario_rows).to_records()

        assert [r["month"] for r in records] == ["Jan", "Feb", "Total"]
        assert records[-1]["deposit"] == Decimal("10000")
        assert set(records[0]) == {"month", "deposit", "withdraw", "dividends"}

    def test_to_dataframe(self, scenario_rows):
        df = aggregate_cashflow(scenario_rows).to_dataframe()

        assert list(df.columns) == ["deposit", "withdraw", "dividends"]
        assert list(df.index) == ["Jan", "Feb", "Total"]
        assert df.loc["Feb", "dividends"] == Decimal("250")

    def test_payload_keeps_exact_amounts(self, scenario_rows):
        summary = aggregate_cashflow(scenario_rows + [make_row("DM", debit="0.10", on=date(2024, 3, 1))], year=2024)

        restored = type(summary).from_payload(summary.to_payload())

        assert restored == summary
        assert restored.totals.withdraw == Decimal("0.10")
