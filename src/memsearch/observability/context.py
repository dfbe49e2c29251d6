"""Trace ids used to correlate log lines.

Inside a span the ids come from the active OpenTelemetry span. Outside one,
each thread keeps its own ids in a context variable: worker threads do not
inherit the submitter's context, so they mint fresh ids the first time they
log.
"""

from __future__ import annotations

from contextvars import ContextVar
from uuid import uuid4

from opentelemetry import trace


trace_context: ContextVar[dict[str, str] | None] = ContextVar("memsearch_trace_context", default=None)


def _new_ids() -> dict[str, str]:
    return {"trace_id": uuid4().hex, "span_id": uuid4().hex[:16]}


def get_trace_context() -> dict[str, str]:
    """Return ``trace_id`` and ``span_id`` for the current span or thread."""
    span_context = trace.get_current_span().get_span_context()
    if span_context.is_valid:
        return {
            "trace_id": format(span_context.trace_id, "032x"),
            "span_id": format(span_context.span_id, "016x"),
        }

    ctx = trace_context.get()
    if ctx is None or not ctx.get("trace_id"):
        ctx = _new_ids()
        trace_context.set(ctx)
    return ctx


def set_trace_context(trace_id: str, span_id: str) -> None:
    trace_context.set({"trace_id": trace_id, "span_id": span_id})
