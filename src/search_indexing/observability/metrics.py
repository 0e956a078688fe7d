"""Prometheus metrics for search and indexing golden signals."""

from __future__ import annotations

from contextlib import contextmanager
import time
from typing import TYPE_CHECKING

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, Histogram, generate_latest


if TYPE_CHECKING:
    from collections.abc import Generator


SEARCH_LATENCY = Histogram(
    "search_latency_seconds",
    "Search query latency",
    ["index", "fuzzy"],
    buckets=(0.0005, 0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5),
)

SEARCH_RESULTS = Histogram(
    "search_results_returned",
    "Number of documents returned per search",
    ["index"],
    buckets=(0, 1, 5, 10, 25, 50, 100),
)

SEARCH_REQUESTS = Counter(
    "search_requests_total",
    "Total search calls, including unknown indexes",
    ["index", "status"],
)

INDEX_MUTATIONS = Counter(
    "index_mutations_total",
    "Index mutations by operation",
    ["index", "operation"],
)

INDEX_DOC_COUNT = Gauge(
    "index_document_count",
    "Documents in index",
    ["index"],
)


@contextmanager
def track_latency(histogram: Histogram, **labels: str) -> Generator[None, None, None]:
    """Context manager to track operation latency."""
    start = time.perf_counter()
    try:
        yield
    finally:
        histogram.labels(**labels).observe(time.perf_counter() - start)


def get_metrics() -> bytes:
    """Generate Prometheus metrics output."""
    return generate_latest()


def get_metrics_content_type() -> str:
    return CONTENT_TYPE_LATEST
