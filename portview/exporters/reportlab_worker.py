"""
Child-process entry point for the ReportLab backend: reads a JSON report
request on stdin, writes PDF bytes to stdout.

    {"title": "...", "subtitle": "...", "currency": "PHP", "summary": {...}}
"""
import argparse
import json
import sys

from portview.common.models import CashflowSummary, REPORTING_CURRENCY
from .weasyprint_worker import EXIT_MISSING_DEPENDENCY


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Render a cashflow summary from stdin to PDF on stdout.")
    parser.parse_args(argv)

    try:
        from portview.exporters.pdf_renderer import CashflowPDFExporter
    except ImportError as e:
        sys.stderr.write(f"{type(e).__name__}: {e}\n")
        return EXIT_MISSING_DEPENDENCY

    request = json.loads(sys.stdin.buffer.read().decode("utf-8"))
    summary = CashflowSummary.from_payload(request["summary"])

    exporter = CashflowPDFExporter(
        request.get("title", ""),
        request.get("subtitle", ""),
        currency=request.get("currency") or REPORTING_CURRENCY,
    )
    pdf_bytes = exporter.generate(summary)

    sys.stdout.buffer.write(pdf_bytes)
    sys.stdout.buffer.flush()
    return 0


if __name__ == "__main__":
    sys.exit(main())
