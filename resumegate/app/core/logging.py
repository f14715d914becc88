"""Logging setup for the analysis gateway.

Everything goes through the standard library ``logging`` package configured
with ``dictConfig``. Three output formats are available via ``LOG_FORMAT``:

- ``text``: plain ``asctime - name - level - message`` lines
- ``structured``: text lines with the request id, analysis kind and stage
- ``json``: one JSON object per record, for log shippers

Pipeline code attaches context with ``extra=get_log_context(...)``; the
request id is picked up from the async context set by the request id
middleware, so it never needs to be passed around explicitly.
"""

import json
import logging
import logging.config
import sys
import traceback
from contextvars import ContextVar
from datetime import datetime
from typing import Any, Dict, Optional

from resumegate.app.core.config import settings

# Request ID of the request currently being served, set by RequestIdMiddleware
_request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

# Per-record context understood by the formatters
CONTEXT_FIELDS = (
    "request_id",
    "identity",      # hashed rate limit identity
    "kind",          # job_match | resume_optimize
    "provider",
    "stage",         # last pipeline stage reached
    "cache_hit",
    "path",
    "method",
    "status_code",
    "duration_ms",
)

_TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_STRUCTURED_FORMAT = _TEXT_FORMAT + " - request_id=%(request_id)s - kind=%(kind)s - stage=%(stage)s"


def set_current_request_id(request_id: Optional[str]) -> None:
    """Bind a request ID to the current async context."""
    _request_id_var.set(request_id)


def get_current_request_id() -> Optional[str]:
    """Return the request ID bound to the current async context, if any."""
    return _request_id_var.get()


class JSONFormatter(logging.Formatter):
    """Render each record as a single JSON object.

    Known context fields are emitted at the top level when set; any other
    attribute passed through ``extra`` is collected under ``"extra"``.
    """

    # LogRecord attributes that never go to the "extra" object
    _RESERVED = frozenset((
        "name", "msg", "args", "levelname", "levelno", "pathname",
        "filename", "module", "exc_info", "exc_text", "stack_info",
        "lineno", "funcName", "created", "msecs", "relativeCreated",
        "thread", "threadName", "processName", "process", "message",
        "asctime", "taskName",
    ))

    def format(self, record: logging.LogRecord) -> str:
        record.message = record.getMessage()
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created).astimezone().isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.message,
            "source": {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            },
        }

        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                payload[field] = value

        extra = {
            key: value
            for key, value in record.__dict__.items()
            if key not in self._RESERVED and key not in CONTEXT_FIELDS
        }
        if extra:
            payload["extra"] = extra

        if record.exc_info and record.exc_info[0] is not None:
            payload["exception"] = traceback.format_exception(*record.exc_info)

        return json.dumps(payload, default=str, ensure_ascii=False)


class ContextFilter(logging.Filter):
    """Make every context field present on the record.

    Missing fields default to None so the ``structured`` format string never
    fails; the request ID falls back to the one bound to the async context.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        for field in CONTEXT_FIELDS:
            if not hasattr(record, field):
                setattr(record, field, None)
        if record.request_id is None:
            record.request_id = get_current_request_id()
        return True


def _handler(stream, level: str, formatter: str) -> Dict[str, Any]:
    return {
        "class": "logging.StreamHandler",
        "level": level,
        "formatter": formatter,
        "stream": stream,
        "filters": ["context"],
    }


def get_logging_config() -> Dict[str, Any]:
    """Build the ``dictConfig`` mapping from the current settings."""
    log_format = getattr(settings, "log_format", "text").lower()
    log_level = getattr(settings, "log_level", "INFO").upper()

    formatters: Dict[str, Any] = {
        "standard": {"format": _TEXT_FORMAT},
        "structured": {"format": _STRUCTURED_FORMAT},
        "json": {"()": "resumegate.app.core.logging.JSONFormatter"},
    }
    formatter = log_format if log_format in ("structured", "json") else "standard"

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": formatters,
        "filters": {"context": {"()": "resumegate.app.core.logging.ContextFilter"}},
        "handlers": {
            "console": _handler(sys.stdout, log_level, formatter),
            "error_console": _handler(sys.stderr, "ERROR", formatter),
        },
        "loggers": {
            "resumegate": {
                "level": log_level,
                "handlers": ["console", "error_console"],
                "propagate": False,
            },
            "uvicorn": {"level": log_level, "handlers": ["console"], "propagate": False},
        },
        "root": {"level": log_level, "handlers": ["console"]},
    }


def setup_logging() -> None:
    """Configure logging for the application."""
    logging.config.dictConfig(get_logging_config())

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


def get_logger(name: str = "resumegate") -> logging.Logger:
    return logging.getLogger(name)


def get_log_context(
    request_id: Optional[str] = None,
    identity: Optional[str] = None,
    kind: Optional[str] = None,
    provider: Optional[str] = None,
    stage: Optional[str] = None,
    **extra
) -> Dict[str, Any]:
    """Create a log context dictionary for use with extra parameter.

    None values are dropped so they never shadow filter defaults.

    Example:
        >>> logger.info(
        ...     "Analysis served",
        ...     extra=get_log_context(kind="job_match", stage="done")
        ... )
    """
    context = {
        "request_id": request_id,
        "identity": identity,
        "kind": kind,
        "provider": provider,
        "stage": stage,
    }
    context.update(extra)
    return {k: v for k, v in context.items() if v is not None}
