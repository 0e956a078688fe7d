"""Per-task trace context shared by log records and spans.

The context is a plain dict in a ContextVar: ``trace_id``, ``span_id`` and,
while an index is being searched or mutated, ``index``.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token
import secrets


trace_context: ContextVar[dict | None] = ContextVar("search_trace_context", default=None)


def generate_trace_id() -> str:
    return secrets.token_hex(16)


def generate_span_id() -> str:
    return secrets.token_hex(8)


def get_trace_context() -> dict:
    """Return the active context, starting a fresh trace when there is none."""
    ctx = trace_context.get()
    if not ctx or not ctx.get("trace_id"):
        ctx = {"trace_id": generate_trace_id(), "span_id": generate_span_id()}
        trace_context.set(ctx)
    return ctx


def set_trace_context(trace_id: str, span_id: str, **extra: object) -> None:
    trace_context.set({"trace_id": trace_id, "span_id": span_id, **extra})


def update_span_id(span_id: str) -> Token:
    """Point log records at ``span_id``; reset the returned token to undo."""
    return trace_context.set({**(trace_context.get() or {}), "span_id": span_id})


@contextmanager
def index_context(index_name: str) -> Iterator[None]:
    """Tag log records emitted inside the block with ``index_name``."""
    token = trace_context.set({**get_trace_context(), "index": index_name})
    try:
        yield
    finally:
        trace_context.reset(token)
