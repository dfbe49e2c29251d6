"""Observability module for OpenTelemetry-aligned tracing, metrics, and logging."""

from memsearch.observability.context import get_trace_context, set_trace_context, trace_context
from memsearch.observability.logging import JsonFormatter, configure_logging
from memsearch.observability.metrics import (
    DOCUMENTS_INDEXED,
    PAGES_FETCHED,
    SEARCH_LATENCY,
    TASKS_COMPLETED,
    get_metrics,
    get_metrics_content_type,
    init_metrics,
    track_latency,
)
from memsearch.observability.tracing import create_span, get_tracer, init_tracing


__all__ = [
    "DOCUMENTS_INDEXED",
    "PAGES_FETCHED",
    "SEARCH_LATENCY",
    "TASKS_COMPLETED",
    "JsonFormatter",
    "configure_logging",
    "create_span",
    "get_metrics",
    "get_metrics_content_type",
    "get_trace_context",
    "get_tracer",
    "init_metrics",
    "init_tracing",
    "set_trace_context",
    "trace_context",
    "track_latency",
]
