from datetime import date
from decimal import Decimal

import pytest

from portview.common.models import CanonicalRow


def make_row(code, particulars="", debit=0, credit=0, on=date(2024, 1, 15), **kwargs):
    """Builds a CanonicalRow with Decimal amounts."""
    return CanonicalRow(
        transaction_code=code,
        date=on,
        particulars=particulars,
        debit_amount=Decimal(str(debit)),
        credit_amount=Decimal(str(credit)),
        **kwargs,
    )


@pytest.fixture
def scenario_rows():
    """Deposit in January, dividend and a buy in February."""
    return [
        make_row("OR", "FUTURE TRANSACTION - DEPOSIT", credit=10000, on=date(2024, 1, 16)),
        make_row("CM", "CASH DIVIDEND XYZ CORP", credit=250, on=date(2024, 2, 5)),
        make_row("BI", "BUY XYZ CORP", debit=5000, on=date(2024, 2, 10)),
    ]


LEDGER_CSV = "\n".join([
    "FIRST METRO SECURITIES",
    "Account Ledger,,,",
    "",
    "CD,NUMBER,DATE,DUE DATE,PARTICULARS,SECURITY,NO. OF SHARES,CURRENCY,UNIT PRICE,"
    "FX AMT,FX RUNNING BAL,PHP D E B I T,PHP C R E D I T,PHP RUNNING BAL",
    'OR,1001,16/1/2024,16/1/2024,"FUTURE TRANSACTION - DEPOSIT, BDO",,,PHP,,,,-,"10,000.00","10,000.00"',
    ",,,,,,,,,,,,,",
    'CM,2002,5/2/2024,,CASH DIVIDEND XYZ CORP,XYZ,,PHP,,,,-,250.00,"10,250.00"',
    'BI,3003,10-2-2024,13-2-2024,BUY XYZ CORP,XYZ,100,PHP,50.00,,,"5,000.00",-,"5,250.00"',
    'DM,4004,1/3/2024,,WITHDRAWAL TO BANK,,,PHP,,,,"1,000.00",-,"4,250.00"',
])


@pytest.fixture
def ledger_csv_bytes():
    return LEDGER_CSV.encode("utf-8")


STATEMENT_TEXT = "\n".join([
    "                         STATEMENT OF ACCOUNT",
    "DATE       REFERENCE     PARTICULARS                        PRICE          DEBIT",
    "                                                                   CREDIT         BALANCE",
    "01/16/2024 OR-1001       FUTURE TRANSACTION - DEPOSIT",
    "                                                   0.0000   10,000.00 PHP   10,000.00",
    "02/05/2024 CM-2002       CASH DIVIDEND XYZ CORP",
    "",
    "                                                   0.0000      250.00 PHP   10,250.00",
    "02/10/2024 BI-3003       BUY XYZ CORP",
    "                         100 SHS @ 50.00",
    "                                                   0.0000    5,000.00 PHP    5,250.00",
    "03/01/2024 DM-4004       WITHDRAWAL TO BANK",
    "                                                   0.0000    1,000.00 PHP    4,250.00",
    "========================================================================",
    "                      ENDING SECURITY POSITION",
    "04/01/2024 OR-9999       FUTURE TRANSACTION - AFTER BANNER",
    "                                                   0.0000      999.00 PHP    5,249.00",
])


@pytest.fixture
def statement_text():
    return STATEMENT_TEXT
