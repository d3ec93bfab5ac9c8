"""
Tests for the workbook ledger source
"""
from datetime import date, datetime
from decimal import Decimal
from io import BytesIO
from unittest.mock import patch

import pandas as pd
import pytest

from portview.parsing.exceptions import MissingDataError
from portview.parsing.sources.ledger_xlsx import (
    OLE2_SIGNATURE,
    LedgerWorkbookParser,
    csv_escape,
    parse_ledger_rows_from_sheet,
    resolve_sheet_name,
    workbook_engine,
    workbook_to_csv,
)
from portview.parsing.sources.ledger_csv import LedgerCSVParser

HEADER = ["CD", "NUMBER", "DATE", "PARTICULARS", "PHP D E B I T", "PHP C R E D I T", "PHP RUNNING BAL"]


def build_workbook(sheets):
    """sheets: {name: list of rows}; written without header or index."""
    buf = BytesIO()
    with pd.ExcelWriter(buf, engine="openpyxl") as writer:
        for name, rows in sheets.items():
            pd.DataFrame(rows).to_excel(writer, sheet_name=name, header=False, index=False)
    return buf.getvalue()


@pytest.fixture
def ledger_workbook():
    rows = [
        ["FIRST METRO SECURITIES", None, None, None, None, None, None],
        ["Account", "12345", None, None, None, None, None],
        HEADER,
        ["OR", 1001, 45307, "FUTURE TRANSACTION - DEPOSIT", None, 10000, 10000],
        [None, None, None, None, None, None, None],
        ["CM", 2002, "5/2/2024", "CASH DIVIDEND XYZ CORP", "-", "250.00", 10250],
        ["DM", 4004, datetime(2024, 3, 1), "WITHDRAWAL TO BANK", 1000.5, None, 9249.5],
    ]
    return build_workbook({"Ledger": rows, "Notes": [["nothing here"]]})


class TestLedgerWorkbookParser:

    def test_parses_first_sheet(self, ledger_workbook):
        rows = LedgerWorkbookParser().load_rows(ledger_workbook)

        assert [r.transaction_code for r in rows] == ["OR", "CM", "DM"]

    def test_numeric_serial_date(self, ledger_workbook):
        deposit = LedgerWorkbookParser().load_rows(ledger_workbook)[0]

        assert deposit.date == date(2024, 1, 16)
        assert deposit.reference_number == "1001"
        assert deposit.credit_amount == Decimal("10000")

    def test_text_and_datetime_dates(self, ledger_workbook):
        rows = LedgerWorkbookParser().load_rows(ledger_workbook)

        assert rows[1].date == date(2024, 2, 5)
        assert rows[2].date == date(2024, 3, 1)

    def test_amount_cells(self, ledger_workbook):
        rows = LedgerWorkbookParser().load_rows(ledger_workbook)

        assert rows[1].debit_amount == 0
        assert rows[1].credit_amount == Decimal("250.00")
        assert rows[2].debit_amount == Decimal("1000.5")

    def test_named_sheet_without_header_raises(self, ledger_workbook):
        from portview.parsing.exceptions import SchemaError

        with pytest.raises(SchemaError):
            LedgerWorkbookParser(sheet="Notes").load_rows(ledger_workbook)

    def test_unknown_sheet(self, ledger_workbook):
        with pytest.raises(MissingDataError, match="Sheet not found: Missing"):
            LedgerWorkbookParser(sheet="Missing").load_rows(ledger_workbook)

    def test_not_a_workbook(self):
        with pytest.raises(MissingDataError, match="Could not read workbook"):
            LedgerWorkbookParser().load_rows(b"definitely not a zip file")


class TestSheetHelpers:

    def test_empty_sheet_gives_no_rows(self):
        assert parse_ledger_rows_from_sheet([]) == []

    def test_resolve_sheet_name(self):
        names = ["A", "B"]
        assert resolve_sheet_name(names) == "A"
        assert resolve_sheet_name(names, 1) == "B"
        assert resolve_sheet_name(names, " B ") == "B"

    def test_resolve_sheet_index_out_of_range(self):
        with pytest.raises(MissingDataError, match="Sheet index out of range: 2"):
            resolve_sheet_name(["A", "B"], 2)

    def test_resolve_without_sheets(self):
        with pytest.raises(MissingDataError):
            resolve_sheet_name([])


class TestWorkbookToCsv:

    @pytest.mark.parametrize("value,expected", [
        (None, ""),
        (True, "TRUE"),
        (False, "FALSE"),
        (date(2024, 3, 7), "2024-03-07"),
        (datetime(2024, 3, 7, 10, 30), "2024-03-07"),
        (3.0, "3"),
        (2.5, "2.5"),
        (float("nan"), ""),
        ("a,b", '"a,b"'),
        ('say "hi"', '"say ""hi"""'),
        ("plain", "plain"),
    ])
    def test_csv_escape(self, value, expected):
        assert csv_escape(value) == expected

    def test_rows_are_padded_to_widest(self):
        content = build_workbook({"S": [["CD", "DATE", "PARTICULARS"], ["OR", "1/1/2024", None]]})

        lines = workbook_to_csv(content).split("\n")

        assert lines == ["CD,DATE,PARTICULARS", "OR,1/1/2024,"]

    def test_requires_bytes(self):
        with pytest.raises(TypeError):
            workbook_to_csv("not bytes")

    def test_csv_output_parses_like_the_workbook(self, ledger_workbook):
        direct = LedgerWorkbookParser().load_rows(ledger_workbook)
        via_csv = LedgerCSVParser().load_rows(workbook_to_csv(ledger_workbook).encode("utf-8"))

        assert [r.date for r in via_csv] == [r.date for r in direct]
        assert via_csv[2].date == date(2024, 3, 1)
        assert [r.credit_amount for r in via_csv] == [r.credit_amount for r in direct]


class TestLegacyWorkbook:

    def test_engine_follows_file_signature(self, ledger_workbook):
        assert workbook_engine(ledger_workbook) == "openpyxl"
        assert workbook_engine(OLE2_SIGNATURE + b"\x00" * 504) == "xlrd"
        assert workbook_engine(b"") == "openpyxl"

    def test_xls_is_opened_with_xlrd(self):
        content = OLE2_SIGNATURE + b"\x00" * 504

        with patch("portview.parsing.sources.ledger_xlsx.pd.ExcelFile", side_effect=ValueError("corrupt")) as opener:
            with pytest.raises(MissingDataError, match="Could not read workbook: corrupt"):
                LedgerWorkbookParser().load_rows(content)

        assert opener.call_args[1]["engine"] == "xlrd"

    def test_accepts_xls_extension(self):
        assert LedgerWorkbookParser().accepts("xls")
