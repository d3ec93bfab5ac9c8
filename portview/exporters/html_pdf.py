"""
PDF rasterization in short-lived child processes.

Each render runs a worker module (WeasyPrint for the HTML markup, ReportLab
for the summary table) with a bounded timeout. The child is killed on every
exit path, so a stuck render never outlives its request.
"""
import asyncio
import json
import sys
from dataclasses import dataclass
from typing import List, Optional

from portview.common.logging_config import get_logger
from portview.common.models import CashflowSummary, REPORTING_CURRENCY
from portview.parsing.exceptions import DocumentRenderError
from .weasyprint_worker import EXIT_MISSING_DEPENDENCY

logger = get_logger(__name__)

WORKER_MODULE = "portview.exporters.weasyprint_worker"
REPORTLAB_WORKER_MODULE = "portview.exporters.reportlab_worker"

MISSING_WEASYPRINT_MESSAGE = (
    "WeasyPrint is required to render PDF reports "
    "(install weasyprint and its Pango libraries, or set PORTVIEW_PDF_BACKEND=reportlab)"
)
MISSING_REPORTLAB_MESSAGE = "ReportLab is required for the reportlab PDF backend (install reportlab)"


@dataclass
class PageOptions:
    page_size: str = "A4"
    margin: str = "24px"
    print_background: bool = True

    def to_css(self) -> str:
        css = f"@page {{ size: {self.page_size}; margin: {self.margin}; }}"
        if not self.print_background:
            css += " * { background: transparent !important; }"
        return css


async def run_pdf_worker(module: str, worker_args: List[str], payload: bytes, timeout: float,
                         backend: str, missing_message: str) -> bytes:
    """
    Runs ``python -m module`` with ``payload`` on stdin and returns its stdout.

    Raises:
        DocumentRenderError: backend missing, timeout, or worker failure
    """
    try:
        proc = await asyncio.create_subprocess_exec(
            sys.executable, "-m", module, *worker_args,
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        logger.error(f"Could not start PDF worker: {e}", exc_info=True, backend=backend)
        raise DocumentRenderError(f"Could not start PDF worker: {e}", backend=backend) from e

    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(payload), timeout)
    except asyncio.TimeoutError as e:
        logger.error("PDF rendering timed out", timeout=timeout, backend=backend)
        raise DocumentRenderError(f"PDF rendering timed out after {timeout:g}s", backend=backend) from e
    finally:
        if proc.returncode is None:
            proc.kill()
            await proc.wait()

    if proc.returncode == EXIT_MISSING_DEPENDENCY:
        logger.error("PDF backend unavailable in worker", backend=backend,
                     detail=stderr.decode("utf-8", "replace").strip())
        raise DocumentRenderError(missing_message, backend=backend)

    if proc.returncode != 0 or not stdout:
        detail = stderr.decode("utf-8", "replace").strip() or f"exit code {proc.returncode}"
        logger.error("PDF worker failed", backend=backend, returncode=proc.returncode, detail=detail)
        raise DocumentRenderError(f"PDF rendering failed: {detail}", backend=backend)

    logger.debug("PDF rendered", backend=backend, size=len(stdout))
    return stdout


async def render_pdf_from_html(markup: str, options: Optional[PageOptions] = None, timeout: float = 60.0) -> bytes:
    """
    Renders an HTML document to PDF bytes with WeasyPrint.
    """
    options = options or PageOptions()
    return await run_pdf_worker(
        WORKER_MODULE, ["--page-css", options.to_css()], markup.encode("utf-8"), timeout,
        backend="weasyprint", missing_message=MISSING_WEASYPRINT_MESSAGE,
    )


async def render_pdf_with_reportlab(summary: CashflowSummary, title: str, subtitle: str = '',
                                    currency: str = REPORTING_CURRENCY, timeout: float = 60.0) -> bytes:
    """
    Renders a summary to PDF bytes with ReportLab.
    """
    request = {
        "title": title,
        "subtitle": subtitle,
        "currency": currency,
        "summary": summary.to_payload(),
    }
    return await run_pdf_worker(
        REPORTLAB_WORKER_MODULE, [], json.dumps(request).encode("utf-8"), timeout,
        backend="reportlab", missing_message=MISSING_REPORTLAB_MESSAGE,
    )
