"""
Cashflow report generation.

Parsing, classification and aggregation run synchronously; the blocking
steps (file parsing, document rendering) are pushed off the event loop so
several reports can be produced concurrently.
"""
import asyncio
import os
from pathlib import Path
from typing import Iterable, Optional

from portview.common.logging_config import get_logger, set_request_id, setup_logging
from portview.common.models import CanonicalRow, CashflowSummary
from portview.common.settings import Settings
from portview.core.cashflow import aggregate_cashflow
from portview.exporters.html_pdf import PageOptions, render_pdf_from_html, render_pdf_with_reportlab
from portview.exporters.html_renderer import render_cashflow_html
from portview.parsing.loader import load_ledger_rows

logger = get_logger(__name__)

DEFAULT_TITLE = "Portfolio Cashflow Report"

_logging_configured = False


def configure(settings: Optional[Settings] = None, force: bool = False) -> Settings:
    """
    Loads settings (from the environment unless given) and installs the
    JSON logging they describe. Logging is set up once per process unless
    ``force`` is set.
    """
    global _logging_configured

    settings = settings or Settings.from_env()
    if force or not _logging_configured:
        setup_logging(settings.log_level, settings.log_file)
        _logging_configured = True
    return settings


def default_title(year: Optional[int] = None) -> str:
    return f"{DEFAULT_TITLE} ({year})" if year else DEFAULT_TITLE


def default_subtitle(filename: Optional[str]) -> str:
    return os.path.basename(filename) if filename else ''


def build_cashflow_report_model(rows: Iterable[CanonicalRow], year: Optional[int] = None) -> CashflowSummary:
    return aggregate_cashflow(rows, year=year)


async def render_summary_pdf(summary: CashflowSummary, title: str, subtitle: str = '',
                             settings: Optional[Settings] = None,
                             page_options: Optional[PageOptions] = None) -> bytes:
    """
    Renders a summary to PDF with the configured backend.
    """
    settings = settings or configure()

    if settings.pdf_backend == "reportlab":
        return await render_pdf_with_reportlab(
            summary, title, subtitle, currency=settings.report_currency, timeout=settings.render_timeout,
        )

    markup = render_cashflow_html(summary, title=title, subtitle=subtitle, currency=settings.report_currency)
    return await render_pdf_from_html(markup, page_options, timeout=settings.render_timeout)


async def generate_cashflow_pdf_from_rows(rows: Iterable[CanonicalRow], year: Optional[int] = None,
                                          title: Optional[str] = None, subtitle: Optional[str] = None,
                                          filename: Optional[str] = None,
                                          settings: Optional[Settings] = None) -> bytes:
    summary = build_cashflow_report_model(rows, year=year)

    resolved_title = title if title is not None else default_title(year)
    resolved_subtitle = subtitle if subtitle is not None else default_subtitle(filename)

    return await render_summary_pdf(summary, resolved_title, resolved_subtitle, settings=settings)


async def generate_cashflow_pdf(filename: str, content: bytes, year: Optional[int] = None,
                                title: Optional[str] = None, subtitle: Optional[str] = None,
                                kind: Optional[str] = None,
                                settings: Optional[Settings] = None) -> bytes:
    """
    Upload bytes -> PDF report bytes.

    Raises:
        MissingDataError, UnsupportedFormatError, SchemaError: bad input
        DocumentRenderError: broken rendering environment
    """
    settings = settings or configure()
    request_id = set_request_id()
    logger.info("Cashflow report requested", filename=filename, year=year, output="pdf", request_id=request_id)

    rows = await asyncio.to_thread(load_ledger_rows, filename, content, kind)
    pdf_bytes = await generate_cashflow_pdf_from_rows(
        rows, year=year, title=title, subtitle=subtitle, filename=filename, settings=settings,
    )

    logger.info("Cashflow report generated", rows=len(rows), size=len(pdf_bytes))
    return pdf_bytes


async def generate_cashflow_pdf_from_path(path, year: Optional[int] = None, title: Optional[str] = None,
                                          subtitle: Optional[str] = None,
                                          settings: Optional[Settings] = None) -> bytes:
    p = Path(path)
    content = await asyncio.to_thread(p.read_bytes)
    return await generate_cashflow_pdf(p.name, content, year=year, title=title, subtitle=subtitle, settings=settings)


async def generate_cashflow_workbook(filename: str, content: bytes, year: Optional[int] = None,
                                     title: Optional[str] = None, subtitle: Optional[str] = None,
                                     kind: Optional[str] = None,
                                     settings: Optional[Settings] = None) -> bytes:
    """
    Upload bytes -> .xlsx report bytes.

    Raises:
        MissingDataError, UnsupportedFormatError, SchemaError: bad input
    """
    from portview.exporters.excel_exporter import CashflowExcelExporter

    settings = settings or configure()
    request_id = set_request_id()
    logger.info("Cashflow report requested", filename=filename, year=year, output="xlsx", request_id=request_id)

    rows = await asyncio.to_thread(load_ledger_rows, filename, content, kind)
    summary = build_cashflow_report_model(rows, year=year)

    exporter = CashflowExcelExporter(
        title if title is not None else default_title(year),
        subtitle if subtitle is not None else default_subtitle(filename),
        currency=settings.report_currency,
    )
    workbook = await asyncio.to_thread(exporter.generate, summary)

    logger.info("Cashflow report generated", rows=len(rows), size=len(workbook))
    return workbook
