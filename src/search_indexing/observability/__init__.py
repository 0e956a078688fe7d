"""Observability module for tracing, metrics and structured logging."""

from search_indexing.observability.context import get_trace_context, index_context, set_trace_context, trace_context
from search_indexing.observability.logging import JsonFormatter, configure_logging
from search_indexing.observability.metrics import (
    INDEX_DOC_COUNT,
    INDEX_MUTATIONS,
    SEARCH_LATENCY,
    SEARCH_REQUESTS,
    SEARCH_RESULTS,
    get_metrics,
    get_metrics_content_type,
    track_latency,
)
from search_indexing.observability.tracing import create_span, get_tracer, init_tracing


__all__ = [
    "INDEX_DOC_COUNT",
    "INDEX_MUTATIONS",
    "SEARCH_LATENCY",
    "SEARCH_REQUESTS",
    "SEARCH_RESULTS",
    "JsonFormatter",
    "configure_logging",
    "create_span",
    "get_metrics",
    "get_metrics_content_type",
    "get_trace_context",
    "get_tracer",
    "index_context",
    "init_tracing",
    "set_trace_context",
    "trace_context",
    "track_latency",
]
