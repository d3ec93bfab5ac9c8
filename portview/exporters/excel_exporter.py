"""
Excel export of the monthly cashflow summary.
"""
from io import BytesIO

import pandas as pd

from portview.common.models import CashflowSummary, REPORTING_CURRENCY


class CashflowExcelExporter:
    """Writes a CashflowSummary to a single formatted worksheet."""

    COLORS = {
        'header_bg': '#1e293b',
        'header_text': '#ffffff',
        'zebra_light': '#f8fafc',
        'accent': '#6366f1',
        'total_bg': '#cbd5e1',
    }

    SHEET_NAME = 'Cashflow'

    def __init__(self, title, subtitle="", currency=REPORTING_CURRENCY):
        self.title = title
        self.subtitle = subtitle
        self.currency = currency
        self.buffer = BytesIO()
        self.workbook = None
        self.formats = {}

    def _create_formats(self):
        money = f'"{self.currency}" #,##0.00'

        self.formats['title'] = self.workbook.add_format({
            'bold': True,
            'font_size': 16,
            'font_color': self.COLORS['accent'],
        })
        self.formats['subtitle'] = self.workbook.add_format({
            'font_size': 11,
            'font_color': '#64748b',
            'italic': True,
        })
        self.formats['header'] = self.workbook.add_format({
            'bold': True,
            'font_color': self.COLORS['header_text'],
            'bg_color': self.COLORS['header_bg'],
            'border': 1,
            'align': 'center',
        })
        self.formats['cell'] = self.workbook.add_format({
            'border': 1,
            'border_color': '#e2e8f0',
        })
        self.formats['money'] = self.workbook.add_format({
            'num_format': money,
            'border': 1,
            'border_color': '#e2e8f0',
        })
        self.formats['money_zebra'] = self.workbook.add_format({
            'num_format': money,
            'border': 1,
            'border_color': '#e2e8f0',
            'bg_color': self.COLORS['zebra_light'],
        })
        self.formats['total_label'] = self.workbook.add_format({
            'bold': True,
            'border': 2,
            'bg_color': self.COLORS['total_bg'],
        })
        self.formats['total'] = self.workbook.add_format({
            'bold': True,
            'border': 2,
            'bg_color': self.COLORS['total_bg'],
            'num_format': money,
        })

    def _write_sheet(self, summary: CashflowSummary):
        sheet = self.workbook.add_worksheet(self.SHEET_NAME)
        sheet.set_column(0, 0, 12)
        sheet.set_column(1, 3, 18)

        sheet.write(0, 0, str(self.title or ''), self.formats['title'])
        sheet.write(1, 0, str(self.subtitle or ''), self.formats['subtitle'])

        header_row = 3
        for col, label in enumerate(['Month', 'Deposit', 'Withdraw', 'Dividends']):
            sheet.write(header_row, col, label, self.formats['header'])

        row_idx = header_row
        for i, m in enumerate(summary.months):
            row_idx = header_row + 1 + i
            money_format = self.formats['money_zebra'] if i % 2 else self.formats['money']
            sheet.write(row_idx, 0, m.month_label, self.formats['cell'])
            sheet.write_number(row_idx, 1, float(m.deposit), money_format)
            sheet.write_number(row_idx, 2, float(m.withdraw), money_format)
            sheet.write_number(row_idx, 3, float(m.dividends), money_format)

        # Totals are written as values so they match the PDF exactly
        total_row = row_idx + 1
        totals = summary.totals
        sheet.write(total_row, 0, 'Total', self.formats['total_label'])
        sheet.write_number(total_row, 1, float(totals.deposit), self.formats['total'])
        sheet.write_number(total_row, 2, float(totals.withdraw), self.formats['total'])
        sheet.write_number(total_row, 3, float(totals.dividends), self.formats['total'])

        sheet.freeze_panes(header_row + 1, 0)

    def generate(self, summary: CashflowSummary) -> bytes:
        """
        Returns the .xlsx bytes.
        """
        writer = pd.ExcelWriter(self.buffer, engine='xlsxwriter')
        self.workbook = writer.book
        self._create_formats()
        self._write_sheet(summary)
        writer.close()

        self.buffer.seek(0)
        return self.buffer.getvalue()
