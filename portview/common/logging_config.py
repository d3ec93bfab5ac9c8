import logging
import json
import os
import uuid
import datetime
from contextvars import ContextVar
from typing import Any, Optional

# Context for the current report request (safe across asyncio tasks)
_request_id: ContextVar[Optional[str]] = ContextVar("portview_request_id", default=None)


class JSONFormatter(logging.Formatter):
    """
    Custom formatter that outputs JSON records.
    """
    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "request_id": _request_id.get() or "GLOBAL",
        }

        # Add extra fields if they exist
        if hasattr(record, "extra_fields") and isinstance(record.extra_fields, dict):
            log_data.update(record.extra_fields)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, ensure_ascii=False, default=str)


def setup_logging(log_level=logging.INFO, log_file: Optional[str] = None):
    """
    Configure global logging settings.

    ``log_level`` accepts either a logging constant or a level name.
    """
    if isinstance(log_level, str):
        log_level = logging.getLevelName(log_level.upper())
        if not isinstance(log_level, int):
            log_level = logging.INFO

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Clear existing handlers
    if root_logger.handlers:
        root_logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(JSONFormatter())
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setFormatter(JSONFormatter())
        root_logger.addHandler(file_handler)

    logging.info("Logging infrastructure initialized.", extra={"extra_fields": {"status": "ready"}})


def set_request_id(request_id: Optional[str] = None) -> str:
    """Set the current request ID in context. Generates one when omitted."""
    request_id = request_id or str(uuid.uuid4())
    _request_id.set(request_id)
    return request_id


def get_request_id() -> str:
    """Get the current request ID from context."""
    return _request_id.get() or "GLOBAL"


class PortviewLoggerAdapter(logging.LoggerAdapter):
    """
    Adapter that allows passing extra context easily.

    ``logger.info("Parsed", rows=12)`` emits ``rows`` as a top-level JSON key.
    """
    def process(self, msg: Any, kwargs: Any) -> tuple[Any, Any]:
        extra = dict(kwargs.get("extra") or {})
        extra_fields = dict(extra.get("extra_fields") or {})

        standard_args = {'exc_info', 'stack_info', 'stacklevel', 'extra'}
        new_kwargs = {}
        for key, value in kwargs.items():
            if key in standard_args:
                new_kwargs[key] = value
            else:
                extra_fields[key] = value

        extra["extra_fields"] = extra_fields
        new_kwargs["extra"] = extra
        return msg, new_kwargs


def get_logger(name: str) -> PortviewLoggerAdapter:
    """
    Return a structured logger for the given name.
    """
    return PortviewLoggerAdapter(logging.getLogger(name), {})
