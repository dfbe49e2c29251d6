"""OpenTelemetry tracing helpers for indexing, crawling and search."""

from __future__ import annotations

from contextlib import contextmanager
import logging
import threading
from typing import TYPE_CHECKING, Any

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.trace import SpanKind, Status, StatusCode


if TYPE_CHECKING:
    from collections.abc import Generator

    from opentelemetry.trace import Span, Tracer

logger = logging.getLogger(__name__)

_tracer_holder: dict[str, Tracer | None] = {"tracer": None}
_tracer_lock = threading.Lock()


def init_tracing(
    service_name: str = "memsearch",
    resource_attributes: dict[str, str] | None = None,
) -> TracerProvider:
    """Install an SDK tracer provider so spans are recorded in-process."""
    attributes = {"service.name": service_name, **(resource_attributes or {})}
    provider = TracerProvider(resource=Resource.create(attributes))
    with _tracer_lock:
        trace.set_tracer_provider(provider)
        _tracer_holder["tracer"] = trace.get_tracer(__name__)
    logger.debug(f"Tracing initialized for service: {service_name}")
    return provider


def get_tracer() -> Tracer:
    """Return the memsearch tracer, installing a provider on first use."""
    if _tracer_holder["tracer"] is None:
        init_tracing()
    return _tracer_holder["tracer"]  # type: ignore[return-value]


@contextmanager
def create_span(
    name: str,
    kind: SpanKind = SpanKind.INTERNAL,
    attributes: dict[str, Any] | None = None,
) -> Generator[Span, None, None]:
    """Run the block inside a span; an escaping exception marks the span as failed."""
    tracer = get_tracer()
    with tracer.start_as_current_span(
        name,
        kind=kind,
        attributes=attributes,
        record_exception=False,
        set_status_on_exception=False,
    ) as span:
        try:
            yield span
        except Exception as exc:
            span.set_status(Status(StatusCode.ERROR, str(exc)))
            span.record_exception(exc)
            raise
