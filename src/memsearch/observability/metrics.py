"""Prometheus metrics for crawling, indexing and search, mirrored to OpenTelemetry.

Every metric is recorded twice: in the default Prometheus registry (scraped
through :func:`get_metrics`) and on an OpenTelemetry instrument created
lazily on first use. Work queue threads record concurrently, so instrument
creation is guarded by a lock.
"""

from __future__ import annotations

from contextlib import contextmanager
import threading
import time
from typing import TYPE_CHECKING, Any

from opentelemetry import metrics as otel_metrics
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.resources import Resource
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest


if TYPE_CHECKING:
    from collections.abc import Generator, Sequence


_meter_holder: dict[str, Any] = {"meter": None, "provider": None}
_meter_lock = threading.Lock()


def init_metrics(
    service_name: str = "memsearch",
    resource_attributes: dict[str, str] | None = None,
) -> MeterProvider:
    """Install the OpenTelemetry meter provider once per process."""
    with _meter_lock:
        provider = _meter_holder.get("provider")
        if isinstance(provider, MeterProvider):
            return provider

        attributes = {"service.name": service_name, **(resource_attributes or {})}
        provider = MeterProvider(resource=Resource.create(attributes))
        otel_metrics.set_meter_provider(provider)
        _meter_holder["provider"] = provider
        _meter_holder["meter"] = otel_metrics.get_meter(__name__)
        return provider


def _get_meter():
    if _meter_holder.get("meter") is None:
        init_metrics()
    return _meter_holder["meter"]


class _BoundMetric:
    def __init__(self, bridge: MetricBridge, labels: dict[str, str]) -> None:
        self._bridge = bridge
        self._labels = labels

    def inc(self, amount: float = 1.0) -> None:
        self._bridge.inc(self._labels, amount)

    def observe(self, value: float) -> None:
        self._bridge.observe(self._labels, value)


class MetricBridge:
    """A Prometheus counter or histogram paired with an OpenTelemetry instrument."""

    def __init__(self, prom_metric: Counter | Histogram, *, name: str, description: str, kind: str) -> None:
        if kind not in ("counter", "histogram"):
            raise ValueError(f"Unknown metric kind: {kind}")
        self._prom_metric = prom_metric
        self.name = name
        self.description = description
        self.kind = kind
        self._otel_instrument = None
        self._lock = threading.Lock()

    @classmethod
    def counter(cls, name: str, description: str, labels: Sequence[str]) -> MetricBridge:
        return cls(Counter(name, description, list(labels)), name=name, description=description, kind="counter")

    @classmethod
    def histogram(
        cls,
        name: str,
        description: str,
        labels: Sequence[str],
        buckets: Sequence[float],
    ) -> MetricBridge:
        prom_metric = Histogram(name, description, list(labels), buckets=tuple(buckets))
        return cls(prom_metric, name=name, description=description, kind="histogram")

    def labels(self, **labels: str) -> _BoundMetric:
        return _BoundMetric(self, labels)

    def _instrument(self):
        with self._lock:
            if self._otel_instrument is None:
                meter = _get_meter()
                if self.kind == "counter":
                    self._otel_instrument = meter.create_counter(self.name, description=self.description)
                else:
                    self._otel_instrument = meter.create_histogram(self.name, description=self.description)
            return self._otel_instrument

    def inc(self, labels: dict[str, str], amount: float) -> None:
        self._prom_metric.labels(**labels).inc(amount)
        self._instrument().add(amount, labels)

    def observe(self, labels: dict[str, str], value: float) -> None:
        self._prom_metric.labels(**labels).observe(value)
        self._instrument().record(value, labels)


PAGES_FETCHED = MetricBridge.counter(
    "memsearch_pages_fetched_total",
    "Crawler fetch attempts by outcome",
    ["status"],
)

TASKS_COMPLETED = MetricBridge.counter(
    "memsearch_tasks_completed_total",
    "Work queue tasks run by outcome",
    ["status"],
)

DOCUMENTS_INDEXED = MetricBridge.counter(
    "memsearch_documents_indexed_total",
    "Files and pages added to an index",
    ["source"],
)

SEARCH_LATENCY = MetricBridge.histogram(
    "memsearch_search_latency_seconds",
    "Time to answer one distinct query",
    ["mode"],
    buckets=(0.0005, 0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5),
)


@contextmanager
def track_latency(histogram: MetricBridge, **labels: str) -> Generator[None, None, None]:
    """Observe the wall time of the block, including blocks that raise."""
    start = time.perf_counter()
    try:
        yield
    finally:
        histogram.labels(**labels).observe(time.perf_counter() - start)


def get_metrics() -> bytes:
    """Prometheus text exposition of the default registry."""
    return generate_latest()


def get_metrics_content_type() -> str:
    return CONTENT_TYPE_LATEST
