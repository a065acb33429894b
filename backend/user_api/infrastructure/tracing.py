"""OpenTelemetry initialization and span helpers for the user API.

Invariants:
    - The global TracerProvider is installed at most once per process
    - An app stopping only flushes the provider; later apps keep exporting to it
    - Disabled tracing installs nothing; the API's no-op tracer is used instead
    - current_trace_id()/current_span_id() return "" outside a valid span
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SpanExporter,
)
from opentelemetry.sdk.trace.sampling import (
    ALWAYS_OFF,
    ALWAYS_ON,
    ParentBased,
    Sampler,
    TraceIdRatioBased,
)
from opentelemetry.trace import Span, Status, StatusCode

from user_api.config import Settings

logger = logging.getLogger(__name__)
_PROVIDER: Optional[TracerProvider] = None

# Span attribute keys
ATTR_USER_ID = "user.id"
ATTR_USER_EMAIL = "user.email"
ATTR_USER_FIRST_NAME = "user.first_name"
ATTR_USER_LAST_NAME = "user.last_name"
ATTR_USERS_COUNT = "users.count"
ATTR_DB_OPERATION = "db.operation"
ATTR_DB_TABLE = "db.table"
ATTR_ERROR_TYPE = "error.type"
ATTR_ERROR_MESSAGE = "error.message"
ATTR_OPERATION_RESULT = "operation.result"
ATTR_HTTP_CLIENT_IP = "http.client_ip"
ATTR_HTTP_USER_AGENT = "http.user_agent"
ATTR_HTTP_REQUEST_SIZE = "http.request.size"


def setup_tracing(settings: Settings, app: Optional[FastAPI] = None) -> Optional[TracerProvider]:
    """Install the tracer provider and instrument FastAPI if requested."""

    global _PROVIDER
    if not settings.tracing_enabled:
        logger.info("Tracing is disabled")
        return None

    if _PROVIDER is None:
        resource = Resource.create(
            {
                "service.name": settings.service_name,
                "service.version": settings.service_version,
                "deployment.environment": settings.environment,
            }
        )
        provider = TracerProvider(
            resource=resource,
            sampler=build_sampler(settings.tracing_sampling_rate),
        )
        exporter = build_exporter(settings)
        provider.add_span_processor(BatchSpanProcessor(exporter))
        trace.set_tracer_provider(provider)
        _PROVIDER = provider
        logger.info(
            "OpenTelemetry tracing initialized with %s exporter, sampling rate %.2f",
            exporter.__class__.__name__,
            settings.tracing_sampling_rate,
        )

    if app is not None:
        FastAPIInstrumentor.instrument_app(app)
    return _PROVIDER


def flush_tracing() -> None:
    """Export pending spans; the provider stays installed until process exit."""

    if _PROVIDER is not None:
        _PROVIDER.force_flush()


def build_sampler(rate: float) -> Sampler:
    if rate >= 1.0:
        return ALWAYS_ON
    if rate <= 0.0:
        return ALWAYS_OFF
    return ParentBased(TraceIdRatioBased(rate))


def build_exporter(settings: Settings) -> SpanExporter:
    exporter_type = settings.tracing_exporter
    if exporter_type == "console":
        return ConsoleSpanExporter()
    if exporter_type == "otlp":
        logger.info("Using OTLP trace exporter with endpoint: %s", settings.tracing_otlp_endpoint)
        return OTLPSpanExporter(endpoint=settings.tracing_otlp_endpoint)
    raise ValueError(f"unsupported exporter type: {exporter_type}")


def get_tracer(name: str) -> trace.Tracer:
    return trace.get_tracer(name)


def record_error(span: Span, exc: BaseException, error_type: str) -> None:
    """Mark a span as failed with the given error.type."""

    span.record_exception(exc)
    span.set_status(Status(StatusCode.ERROR, str(exc)))
    span.set_attribute(ATTR_ERROR_TYPE, error_type)


def current_trace_id() -> str:
    ctx = trace.get_current_span().get_span_context()
    if not ctx.is_valid:
        return ""
    return trace.format_trace_id(ctx.trace_id)


def current_span_id() -> str:
    ctx = trace.get_current_span().get_span_context()
    if not ctx.is_valid:
        return ""
    return trace.format_span_id(ctx.span_id)


__all__ = [
    "setup_tracing",
    "flush_tracing",
    "build_sampler",
    "build_exporter",
    "get_tracer",
    "record_error",
    "current_trace_id",
    "current_span_id",
]
