"""Unit tests for observability module."""

import json
import logging

from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
from opentelemetry.trace import StatusCode
from prometheus_client import Histogram
import pytest

from search_indexing.observability import (
    INDEX_MUTATIONS,
    JsonFormatter,
    configure_logging,
    create_span,
    get_metrics,
    get_metrics_content_type,
    get_trace_context,
    index_context,
    init_tracing,
    set_trace_context,
    track_latency,
)
from search_indexing.observability import tracing as tracing_module
from search_indexing.observability.context import update_span_id


def make_record(msg: str = "test message", level: int = logging.INFO) -> logging.LogRecord:
    return logging.LogRecord(
        name="search_indexing.registry",
        level=level,
        pathname="registry.py",
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )


@pytest.fixture
def span_exporter(monkeypatch) -> InMemorySpanExporter:
    exporter = InMemorySpanExporter()
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(exporter))
    monkeypatch.setitem(tracing_module._tracer_holder, "tracer", provider.get_tracer("test"))
    return exporter


@pytest.mark.unit
class TestJsonFormatter:
    def test_format_includes_trace_context(self):
        data = json.loads(JsonFormatter().format(make_record()))

        assert data["message"] == "test message"
        assert data["level"] == "INFO"
        assert data["component"] == "registry"
        assert "trace_id" in data
        assert "span_id" in data

    def test_format_includes_index_name(self):
        with index_context("profiles"):
            data = json.loads(JsonFormatter().format(make_record()))
        assert data["index"] == "profiles"

    def test_index_context_resets(self):
        set_trace_context("ab" * 16, "cd" * 8)
        with index_context("profiles"):
            pass
        assert "index" not in get_trace_context()

    def test_format_includes_extra_fields(self):
        record = make_record(level=logging.ERROR)
        record.doc_id = "u1"
        data = json.loads(JsonFormatter().format(record))
        assert data["doc_id"] == "u1"

    def test_format_truncates_and_redacts(self):
        record = make_record("x" * 5000)
        record.token = "secret"
        data = json.loads(JsonFormatter().format(record))

        assert data["message"].endswith("...")
        assert data["token"] == "[REDACTED]"

    def test_json_default_handles_set_and_bytes(self):
        formatter = JsonFormatter()
        assert formatter._json_default(frozenset({"b", "a"})) == ["a", "b"]
        assert formatter._json_default(b"ok") == "ok"


@pytest.mark.unit
class TestConfigureLogging:
    def test_installs_single_handler(self):
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level
        try:
            configure_logging("debug", json_output=True, logger_levels={"search_indexing.search": "warning"})

            assert len(root.handlers) == 1
            assert isinstance(root.handlers[0].formatter, JsonFormatter)
            assert root.level == logging.DEBUG
            assert logging.getLogger("search_indexing.search").level == logging.WARNING
        finally:
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)
            logging.getLogger("search_indexing.search").setLevel(logging.NOTSET)


@pytest.mark.unit
class TestTraceContext:
    def test_get_trace_context_generates_ids(self):
        ctx = get_trace_context()
        assert len(ctx["trace_id"]) == 32
        assert len(ctx["span_id"]) == 16

    def test_update_span_id_preserves_trace_id(self):
        set_trace_context("aa" * 16, "bb" * 8, index="profiles")
        update_span_id("cc" * 8)
        ctx = get_trace_context()
        assert ctx["trace_id"] == "aa" * 16
        assert ctx["span_id"] == "cc" * 8
        assert ctx["index"] == "profiles"


@pytest.mark.unit
class TestTracing:
    def test_init_tracing_applies_resource_attributes(self):
        provider = init_tracing("test-service", resource_attributes={"service.version": "2.0.0"})
        assert provider.resource.attributes["service.version"] == "2.0.0"

    def test_create_span_records_attributes(self, span_exporter):
        with create_span("index.search", attributes={"search.index": "profiles"}):
            pass

        (span,) = span_exporter.get_finished_spans()
        assert span.name == "index.search"
        assert span.attributes["search.index"] == "profiles"

    def test_create_span_records_errors(self, span_exporter):
        with pytest.raises(ValueError), create_span("index.import"):
            raise ValueError("bad payload")

        (span,) = span_exporter.get_finished_spans()
        assert span.status.status_code == StatusCode.ERROR

    def test_create_span_restores_parent_span_id(self, span_exporter):
        set_trace_context("aa" * 16, "bb" * 8)

        with create_span("index.export") as span:
            inner = get_trace_context()["span_id"]
        with pytest.raises(ValueError), create_span("index.import"):
            raise ValueError("bad payload")

        assert inner == format(span.get_span_context().span_id, "016x")
        assert inner != "bb" * 8
        assert get_trace_context() == {"trace_id": "aa" * 16, "span_id": "bb" * 8}

    def test_registry_search_emits_span(self, span_exporter, profiles_registry):
        profiles_registry.search("profiles", "go", fuzzy=True)

        (span,) = span_exporter.get_finished_spans()
        assert span.attributes["search.results"] == 1
        assert span.attributes["search.fuzzy"] is True


@pytest.mark.unit
class TestMetrics:
    def test_track_latency_observes(self):
        histogram = Histogram("test_latency_seconds", "test", ["op"], registry=None)
        with track_latency(histogram, op="unit"):
            pass
        assert histogram.labels(op="unit")._sum.get() >= 0

    def test_mutations_counted(self, profiles_registry):
        before = INDEX_MUTATIONS.labels(index="profiles", operation="remove")._value.get()

        profiles_registry.remove_document("profiles", "u1")

        assert INDEX_MUTATIONS.labels(index="profiles", operation="remove")._value.get() == before + 1

    def test_metrics_exposition(self):
        assert b"index_mutations_total" in get_metrics()
        assert get_metrics_content_type().startswith("text/plain")
