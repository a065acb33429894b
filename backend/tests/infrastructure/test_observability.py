"""Structured Logging - JSON formatter fields, trace correlation, idempotent setup.

Tests:
    - JSON output has timestamp/level/logger/message and present extras only
    - TraceContextFilter stamps trace_id inside a span
    - setup_logging replaces its own handler instead of stacking
"""

import json
import logging

from opentelemetry.sdk.trace import TracerProvider

from user_api.infrastructure.observability import (
    JSONFormatter,
    TraceContextFilter,
    setup_logging,
)


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        "user_api.test", logging.INFO, __file__, 1, "hello %s", ("world",), None,
    )
    record.__dict__.update(extra)
    return record


def test_json_formatter_core_fields():
    payload = json.loads(JSONFormatter().format(_record(user_id="user-1", trace_id="")))
    assert payload["level"] == "INFO"
    assert payload["logger"] == "user_api.test"
    assert payload["message"] == "hello world"
    assert payload["user_id"] == "user-1"
    assert "trace_id" not in payload
    assert "timestamp" in payload


def test_trace_filter_inside_span():
    tracer = TracerProvider().get_tracer("test")
    record = _record()
    with tracer.start_as_current_span("op"):
        TraceContextFilter().filter(record)
    assert len(record.trace_id) == 32
    assert len(record.span_id) == 16


def test_trace_filter_outside_span_is_empty():
    record = _record()
    TraceContextFilter().filter(record)
    assert record.trace_id == ""


def test_setup_logging_is_idempotent():
    before = list(logging.root.handlers)
    level = logging.root.level
    try:
        first = setup_logging("DEBUG", "json")
        second = setup_logging("INFO", "text")
        ours = [h for h in logging.root.handlers if h.get_name() == "user_api"]
        assert ours == [second]
        assert first not in logging.root.handlers
        assert logging.root.level == logging.INFO
    finally:
        for handler in list(logging.root.handlers):
            if handler not in before:
                logging.root.removeHandler(handler)
        logging.root.setLevel(level)
