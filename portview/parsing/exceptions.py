"""
Errors surfaced to callers of the ledger pipeline.

Row-level problems (bad dates, bad amounts, malformed statement blocks) are
never raised; they degrade to absent values or excluded rows.
"""
from typing import Iterable, Optional


class LedgerError(Exception):
    """
    Base class for fatal ledger ingestion errors.

    The message stays human readable; optional context (filename) is
    appended on its own line.
    """

    def __init__(self, message: str, filename: Optional[str] = None):
        self.message = message
        self.filename = filename

        full_message = f"{message}\nFile: {filename}" if filename else message
        super().__init__(full_message)


class MissingDataError(LedgerError):
    """No usable input bytes or text were provided."""


class UnsupportedFormatError(LedgerError):
    """The file extension (or declared kind) has no matching adapter."""

    def __init__(self, message: str, extension: str = "", filename: Optional[str] = None):
        self.extension = extension
        super().__init__(message, filename=filename)


class SchemaError(LedgerError):
    """
    The parsed ledger lacks its header row or required canonical fields.
    ``missing_fields`` lists the absent columns when applicable.
    """

    def __init__(self, message: str, missing_fields: Iterable[str] = (), filename: Optional[str] = None):
        self.missing_fields = list(missing_fields)
        super().__init__(message, filename=filename)


class DocumentRenderError(Exception):
    """
    Raised when the document backend fails.
    Distinct from LedgerError so operators can tell a broken rendering
    environment apart from a bad upload.
    """

    def __init__(self, message: str, backend: Optional[str] = None):
        self.backend = backend
        super().__init__(message)
