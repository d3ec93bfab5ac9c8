"""
ReportLab rendition of the monthly cashflow report.

Draws the same header block, month table and totals row as the HTML
markup, without needing WeasyPrint's native libraries.
"""
from io import BytesIO
from datetime import datetime
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import cm
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer

from portview.common.models import CashflowSummary, REPORTING_CURRENCY
from .html_renderer import format_money


class CashflowPDFExporter:
    """PDF exporter for a CashflowSummary."""

    COLORS = {
        'primary': colors.HexColor('#6366f1'),
        'deposit': colors.HexColor('#10b981'),
        'withdraw': colors.HexColor('#ef4444'),
        'dividends': colors.HexColor('#f59e0b'),
        'dark': colors.HexColor('#1e293b'),
        'text': colors.HexColor('#334155'),
        'light': colors.HexColor('#f8fafc'),
        'border': colors.HexColor('#e2e8f0'),
    }

    def __init__(self, title, subtitle="", currency=REPORTING_CURRENCY):
        """
        Args:
            title: Report title
            subtitle: Line under the title (usually the source file name)
            currency: Currency label for the summary cards
        """
        self.title = title
        self.subtitle = subtitle
        self.currency = currency
        self.buffer = BytesIO()
        self.elements = []
        self.styles = getSampleStyleSheet()
        self._setup_styles()

    def _setup_styles(self):
        if 'CashflowTitle' not in self.styles:
            self.styles.add(ParagraphStyle(
                name='CashflowTitle',
                parent=self.styles['Heading1'],
                fontSize=18,
                textColor=self.COLORS['dark'],
                alignment=TA_CENTER,
                spaceAfter=6,
                fontName='Helvetica-Bold',
            ))

        if 'CashflowSubtitle' not in self.styles:
            self.styles.add(ParagraphStyle(
                name='CashflowSubtitle',
                parent=self.styles['Normal'],
                fontSize=11,
                textColor=colors.grey,
                alignment=TA_CENTER,
                spaceAfter=18,
                fontName='Helvetica-Oblique',
            ))

        if 'CashflowSection' not in self.styles:
            self.styles.add(ParagraphStyle(
                name='CashflowSection',
                parent=self.styles['Heading2'],
                fontSize=13,
                textColor=self.COLORS['primary'],
                spaceAfter=10,
                spaceBefore=12,
                fontName='Helvetica-Bold',
            ))

    def _create_metric_card(self, label, value, color):
        t = Table([[label], [value]], colWidths=[5 * cm])
        t.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (-1, 0), color),
            ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
            ('ALIGN', (0, 0), (-1, -1), 'CENTER'),
            ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
            ('FONTNAME', (0, 0), (-1, -1), 'Helvetica-Bold'),
            ('FONTSIZE', (0, 0), (-1, 0), 9),
            ('FONTSIZE', (0, 1), (-1, 1), 12),
            ('BACKGROUND', (0, 1), (-1, 1), self.COLORS['light']),
            ('TEXTCOLOR', (0, 1), (-1, 1), color),
            ('TOPPADDING', (0, 1), (-1, 1), 10),
            ('BOTTOMPADDING', (0, 1), (-1, 1), 10),
            ('BOX', (0, 0), (-1, -1), 1.5, color),
        ]))
        return t

    def _create_summary_section(self, summary):
        totals = summary.totals
        cur = self.currency
        cards = [[
            self._create_metric_card('Deposits', f"{cur} {format_money(totals.deposit)}", self.COLORS['deposit']),
            self._create_metric_card('Withdrawals', f"{cur} {format_money(totals.withdraw)}", self.COLORS['withdraw']),
            self._create_metric_card('Dividends', f"{cur} {format_money(totals.dividends)}", self.COLORS['dividends']),
        ]]

        t = Table(cards, colWidths=[5.5 * cm] * 3)
        t.setStyle(TableStyle([
            ('ALIGN', (0, 0), (-1, -1), 'CENTER'),
            ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
        ]))

        self.elements.append(Paragraph("Cashflow Summary", self.styles['CashflowSection']))
        self.elements.append(t)
        self.elements.append(Spacer(1, 18))

    def _create_month_table(self, summary):
        data = [['Month', 'Deposit', 'Withdraw', 'Dividends']]
        for m in summary.months:
            data.append([m.month_label, format_money(m.deposit), format_money(m.withdraw), format_money(m.dividends)])

        totals = summary.totals
        data.append(['Total', format_money(totals.deposit), format_money(totals.withdraw), format_money(totals.dividends)])

        t = Table(data, colWidths=[4 * cm, 4.3 * cm, 4.3 * cm, 4.3 * cm], repeatRows=1)

        table_style = [
            ('BACKGROUND', (0, 0), (-1, 0), self.COLORS['dark']),
            ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('FONTSIZE', (0, 0), (-1, -1), 9),
            ('ALIGN', (1, 0), (-1, -1), 'RIGHT'),
            ('TEXTCOLOR', (0, 1), (-1, -2), self.COLORS['text']),
            ('FONTNAME', (0, -1), (-1, -1), 'Helvetica-Bold'),
            ('BACKGROUND', (0, -1), (-1, -1), colors.HexColor('#cbd5e1')),
            ('GRID', (0, 0), (-1, -1), 0.5, self.COLORS['border']),
            ('TOPPADDING', (0, 0), (-1, -1), 6),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 6),
            ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
        ]

        # zebra striping on month rows only
        for i in range(2, len(data) - 1, 2):
            table_style.append(('BACKGROUND', (0, i), (-1, i), self.COLORS['light']))

        t.setStyle(TableStyle(table_style))
        self.elements.append(t)

    def _add_footer(self, canvas, doc):
        canvas.saveState()
        canvas.setFont('Helvetica', 8)
        canvas.setFillColor(colors.grey)
        canvas.drawString(2 * cm, 1.5 * cm, f"Generated {datetime.now().strftime('%Y-%m-%d %H:%M')}")
        canvas.drawRightString(A4[0] - 2 * cm, 1.5 * cm, f"Page {doc.page}")
        canvas.restoreState()

    def generate(self, summary: CashflowSummary) -> bytes:
        """
        Builds the PDF and returns its bytes.
        """
        # Paragraph text is markup; escape user-supplied strings
        self.elements.append(Paragraph(escape(str(self.title or '')), self.styles['CashflowTitle']))
        self.elements.append(Paragraph(escape(str(self.subtitle or '')), self.styles['CashflowSubtitle']))

        self._create_summary_section(summary)
        self._create_month_table(summary)

        doc = SimpleDocTemplate(
            self.buffer,
            pagesize=A4,
            rightMargin=2 * cm,
            leftMargin=2 * cm,
            topMargin=2 * cm,
            bottomMargin=2.5 * cm,
            title=str(self.title or ''),
        )
        doc.build(self.elements, onFirstPage=self._add_footer, onLaterPages=self._add_footer)

        self.buffer.seek(0)
        return self.buffer.getvalue()
