"""Tracing - verifies store/service spans, sampler selection and exporter selection.

Tests:
    - Store spans carry db.* attributes and error.type on failure
    - Service create span records validation/email-check/repository events
    - build_sampler maps rates to always-on / always-off / ratio
    - build_exporter rejects unknown exporter names
    - setup_tracing is a no-op when disabled
    - A provider survives an app stopping and is reused by the next app
    - current_trace_id() is empty outside a span and hex inside one
"""

import pytest
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import ConsoleSpanExporter, SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
from opentelemetry.sdk.trace.sampling import ALWAYS_OFF, ALWAYS_ON, ParentBased
from opentelemetry.trace import StatusCode

from user_api.config import Settings
from user_api.core.errors import ConflictError, UserValidationError
from user_api.core.user_record import CreationRequest
from user_api.infrastructure import tracing as tracing_module
from user_api.infrastructure.tracing import (
    build_exporter,
    build_sampler,
    current_span_id,
    current_trace_id,
    flush_tracing,
    setup_tracing,
)
from user_api.infrastructure.user_store import InMemoryUserStore
from user_api.services.user_service import UserService


@pytest.fixture
def exporter():
    return InMemorySpanExporter()


@pytest.fixture
def tracer(exporter):
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(exporter))
    return provider.get_tracer("test")


def _spans_by_name(exporter):
    return {span.name: span for span in exporter.get_finished_spans()}


# ─── store spans ─────────────────────────────────────────────────

def test_store_create_span_attributes(tracer, exporter, record_factory):
    store = InMemoryUserStore(tracer=tracer)
    store.create(record_factory("user-1", "a@example.com"))

    span = _spans_by_name(exporter)["InMemoryUserStore.Create"]
    assert span.attributes["db.operation"] == "create"
    assert span.attributes["db.table"] == "users"
    assert span.attributes["user.id"] == "user-1"
    assert span.attributes["operation.result"] == "success"


def test_store_duplicate_marks_span_error(tracer, exporter, record_factory):
    store = InMemoryUserStore(tracer=tracer)
    store.create(record_factory("user-1", "a@example.com"))
    with pytest.raises(ConflictError):
        store.create(record_factory("user-2", "a@example.com"))

    failed = exporter.get_finished_spans()[-1]
    assert failed.status.status_code == StatusCode.ERROR
    assert failed.attributes["error.type"] == "duplicate_email"
    assert any(event.name == "exception" for event in failed.events)


def test_store_get_all_counts(tracer, exporter, record_factory):
    store = InMemoryUserStore(tracer=tracer)
    store.create(record_factory("user-1", "a@example.com"))
    store.create(record_factory("user-2", "b@example.com"))
    store.get_all()
    assert _spans_by_name(exporter)["InMemoryUserStore.GetAll"].attributes["users.count"] == 2


# ─── service spans ───────────────────────────────────────────────

def test_service_create_span_events(tracer, exporter):
    service = UserService(InMemoryUserStore(tracer=tracer), tracer=tracer)
    service.create_user(
        CreationRequest(first_name="John", last_name="Doe", email="john@example.com"),
    )

    spans = _spans_by_name(exporter)
    create_span = spans["UserService.CreateUser"]
    events = [event.name for event in create_span.events]
    assert events == [
        "validation.start",
        "validation.success",
        "email_check.start",
        "email_check.success",
        "repository.create.start",
        "repository.create.success",
        "user.created",
    ]
    store_span = spans["InMemoryUserStore.Create"]
    assert store_span.parent.span_id == create_span.context.span_id


def test_service_validation_failure_recorded(tracer, exporter):
    service = UserService(InMemoryUserStore(tracer=tracer), tracer=tracer)
    with pytest.raises(UserValidationError):
        service.create_user(CreationRequest(email="invalid-email"))

    span = _spans_by_name(exporter)["UserService.CreateUser"]
    assert span.status.status_code == StatusCode.ERROR
    assert span.attributes["error.type"] == "validation_error"


# ─── setup helpers ───────────────────────────────────────────────

def test_build_sampler_bounds():
    assert build_sampler(1.0) is ALWAYS_ON
    assert build_sampler(2.5) is ALWAYS_ON
    assert build_sampler(0.0) is ALWAYS_OFF
    assert build_sampler(-1) is ALWAYS_OFF
    assert isinstance(build_sampler(0.1), ParentBased)


def test_build_exporter_console():
    settings = Settings(tracing_enabled=True, tracing_exporter="console")
    assert isinstance(build_exporter(settings), ConsoleSpanExporter)


def test_build_exporter_rejects_unknown():
    settings = Settings(tracing_enabled=True, tracing_exporter="zipkin")
    with pytest.raises(ValueError, match="unsupported exporter type: zipkin"):
        build_exporter(settings)


def test_setup_tracing_disabled_is_noop():
    assert setup_tracing(Settings(tracing_enabled=False)) is None


def test_trace_ids_empty_outside_span():
    assert current_trace_id() == ""
    assert current_span_id() == ""


def test_trace_ids_inside_span(tracer):
    with tracer.start_as_current_span("outer"):
        trace_id = current_trace_id()
        span_id = current_span_id()
    assert len(trace_id) == 32
    assert len(span_id) == 16
    int(trace_id, 16)


def test_provider_reused_after_flush(monkeypatch):
    installed = []
    monkeypatch.setattr(tracing_module, "_PROVIDER", None)
    monkeypatch.setattr(tracing_module.trace, "set_tracer_provider", installed.append)
    settings = Settings(environment="test", tracing_enabled=True, tracing_exporter="console")

    first = setup_tracing(settings)
    flush_tracing()
    second = setup_tracing(settings)

    assert second is first
    assert installed == [first]

    exporter = InMemorySpanExporter()
    second.add_span_processor(SimpleSpanProcessor(exporter))
    second.get_tracer("test").start_span("after-flush").end()
    assert [s.name for s in exporter.get_finished_spans()] == ["after-flush"]
