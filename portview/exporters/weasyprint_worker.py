"""
Child-process entry point: reads HTML on stdin, writes PDF bytes to stdout.

    python -m portview.exporters.weasyprint_worker --page-css "@page { size: A4; }"
"""
import argparse
import sys

# Exit code when weasyprint (or its native libraries) cannot load.
EXIT_MISSING_DEPENDENCY = 3


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Render HTML from stdin to PDF on stdout.")
    parser.add_argument("--page-css", default="", help="Extra CSS for @page rules")
    args = parser.parse_args(argv)

    try:
        from weasyprint import CSS, HTML
    except (ImportError, OSError) as e:
        sys.stderr.write(f"{type(e).__name__}: {e}\n")
        return EXIT_MISSING_DEPENDENCY

    markup = sys.stdin.buffer.read().decode("utf-8")
    stylesheets = [CSS(string=args.page_css)] if args.page_css else None
    pdf_bytes = HTML(string=markup).write_pdf(stylesheets=stylesheets)

    sys.stdout.buffer.write(pdf_bytes)
    sys.stdout.buffer.flush()
    return 0


if __name__ == "__main__":
    sys.exit(main())
