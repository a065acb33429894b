"""Structured Logging - JSON formatter, trace correlation and setup.

Invariants:
    - All logs include timestamp, level, logger name, and message
    - Extra fields (trace_id, span_id, user_id, error_code, request fields) surfaced when present
    - JSON format in production, human-readable text otherwise
    - setup_logging is idempotent: it replaces its own handler, never stacks a second one
"""

import json
import logging
from datetime import datetime, timezone

from user_api.infrastructure.tracing import current_span_id, current_trace_id

EXTRA_FIELDS = (
    "trace_id", "span_id", "user_id", "error_code",
    "method", "path", "status", "duration_ms", "client",
)

_HANDLER_NAME = "user_api"


class JSONFormatter(logging.Formatter):
    """Format logs as JSON for structured logging in production."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in EXTRA_FIELDS:
            val = record.__dict__.get(key)
            if val is not None and val != "":
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False)


class TraceContextFilter(logging.Filter):
    """Stamp the active span's trace_id/span_id onto every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "trace_id", None):
            record.trace_id = current_trace_id()
        if not getattr(record, "span_id", None):
            record.span_id = current_span_id()
        return True


def setup_logging(level: str = "INFO", fmt: str = "json") -> logging.Handler:
    """Configure logging for the application."""
    for existing in list(logging.root.handlers):
        if existing.get_name() == _HANDLER_NAME:
            logging.root.removeHandler(existing)

    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    handler.addFilter(TraceContextFilter())
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s trace_id=%(trace_id)s - %(message)s",
        ))
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
    return handler
