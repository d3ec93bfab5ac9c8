"""
Tests for the Excel cashflow exporter
"""
from io import BytesIO

import pandas as pd

from portview.core.cashflow import aggregate_cashflow
from portview.exporters.excel_exporter import CashflowExcelExporter


def _read_back(content):
    return pd.read_excel(BytesIO(content), sheet_name="Cashflow", header=None, engine="openpyxl")


def _table(df):
    """Rows from the header ('Month') row down."""
    header_idx = df.index[df[0] == "Month"][0]
    return df.loc[header_idx:].reset_index(drop=True)


def test_layout(scenario_rows):
    content = CashflowExcelExporter("Cashflow 2024", "ledger.csv").generate(aggregate_cashflow(scenario_rows))
    df = _read_back(content)
    table = _table(df)

    assert df.iloc[0, 0] == "Cashflow 2024"
    assert df.iloc[1, 0] == "ledger.csv"
    assert list(table.iloc[0]) == ["Month", "Deposit", "Withdraw", "Dividends"]
    assert list(table.iloc[1:, 0]) == ["Jan", "Feb", "Total"]


def test_values(scenario_rows):
    content = CashflowExcelExporter("t").generate(aggregate_cashflow(scenario_rows))
    table = _table(_read_back(content))

    total = table.iloc[-1]
    assert total[0] == "Total"
    assert total[1] == 10000
    assert total[2] == 0
    assert total[3] == 250


def test_full_year_has_twelve_month_rows(scenario_rows):
    content = CashflowExcelExporter("t").generate(aggregate_cashflow(scenario_rows, year=2024))
    table = _table(_read_back(content))

    assert len(table) == 14
