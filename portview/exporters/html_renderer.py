"""
HTML markup for the monthly cashflow report.
The markup is self-contained so the PDF backend needs no other assets.
"""
import html
from decimal import Decimal, ROUND_HALF_UP

from portview.common.models import CashflowSummary, REPORTING_CURRENCY

_CENTS = Decimal("0.01")

REPORT_CSS = """
      @page { size: A4; margin: 24px; }
      body { font-family: Arial, Helvetica, sans-serif; color: #111; font-size: 12px; }
      h1 { font-size: 18px; margin: 0 0 4px; }
      .sub { margin: 0 0 14px; color: #444; }
      .meta { margin: 10px 0 18px; }
      table { width: 100%; border-collapse: collapse; }
      th, td { border: 1px solid #ddd; padding: 8px; }
      th { text-align: left; background: #f5f5f5; }
      td.num { text-align: right; font-variant-numeric: tabular-nums; }
      tfoot td { font-weight: 700; background: #fafafa; }"""


def format_money(amount) -> str:
    """
    Two fraction digits with comma grouping, rounded half-up.

    Examples:
        Decimal("1234.5") -> "1,234.50"
        None              -> "0.00"
    """
    value = Decimal(str(amount)) if amount is not None else Decimal(0)
    return f"{value.quantize(_CENTS, rounding=ROUND_HALF_UP):,.2f}"


def escape_html(text) -> str:
    return html.escape(str(text if text is not None else ''), quote=True)


def render_cashflow_html(summary: CashflowSummary, title: str, subtitle: str = '',
                         currency: str = REPORTING_CURRENCY) -> str:
    """
    Renders the summary as an HTML document: header block, per-month
    table and a totals footer.
    """
    totals = summary.totals
    cur = escape_html(currency)

    body_rows = ''.join(
        f"""
        <tr>
          <td>{escape_html(m.month_label)}</td>
          <td class="num">{format_money(m.deposit)}</td>
          <td class="num">{format_money(m.withdraw)}</td>
          <td class="num">{format_money(m.dividends)}</td>
        </tr>"""
        for m in summary.months
    )

    return f"""<!doctype html>
<html>
  <head>
    <meta charset="utf-8" />
    <title>{escape_html(title)}</title>
    <style>{REPORT_CSS}
    </style>
  </head>
  <body>
    <h1>{escape_html(title)}</h1>
    <p class="sub">{escape_html(subtitle)}</p>

    <div class="meta">
      <strong>Cashflow Summary</strong><br />
      Deposits: {cur} {format_money(totals.deposit)}<br />
      Withdrawals: {cur} {format_money(totals.withdraw)}<br />
      Dividends: {cur} {format_money(totals.dividends)}
    </div>

    <table>
      <thead>
        <tr>
          <th>Month</th>
          <th class="num">Deposit</th>
          <th class="num">Withdraw</th>
          <th class="num">Dividends</th>
        </tr>
      </thead>
      <tbody>{body_rows}
      </tbody>
      <tfoot>
        <tr>
          <td>Total</td>
          <td class="num">{format_money(totals.deposit)}</td>
          <td class="num">{format_money(totals.withdraw)}</td>
          <td class="num">{format_money(totals.dividends)}</td>
        </tr>
      </tfoot>
    </table>
  </body>
</html>"""
