"""
Runtime settings for report generation.

Values come from ``PORTVIEW_*`` environment variables; anything missing or
malformed falls back to the defaults below.
"""
import os
from dataclasses import dataclass
from typing import Optional

PDF_BACKENDS = ("weasyprint", "reportlab")


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value > 0 else default


@dataclass
class Settings:
    """
    Attributes:
        log_level: Root logging level name
        log_file: Optional path for the JSON log file
        pdf_backend: Document backend ('weasyprint' or 'reportlab')
        render_timeout: Seconds allowed for one document rasterization
        report_currency: Currency label printed next to amounts
    """
    log_level: str = "INFO"
    log_file: Optional[str] = None
    pdf_backend: str = "weasyprint"
    render_timeout: float = 60.0
    report_currency: str = "PHP"

    @classmethod
    def from_env(cls) -> "Settings":
        backend = (os.getenv("PORTVIEW_PDF_BACKEND") or cls.pdf_backend).strip().lower()
        if backend not in PDF_BACKENDS:
            backend = cls.pdf_backend

        return cls(
            log_level=(os.getenv("PORTVIEW_LOG_LEVEL") or cls.log_level).strip().upper(),
            log_file=os.getenv("PORTVIEW_LOG_FILE") or None,
            pdf_backend=backend,
            render_timeout=_env_float("PORTVIEW_RENDER_TIMEOUT", cls.render_timeout),
            report_currency=(os.getenv("PORTVIEW_REPORT_CURRENCY") or cls.report_currency).strip(),
        )
