"""Prometheus metrics mirrored into OpenTelemetry instruments.

Every metric is declared once through ``_declare`` which creates the
Prometheus collector scraped at ``/metrics`` and lazily the OTel instrument
of the same name. Gauges have no direct OTel synchronous counterpart, so they
are mirrored as up/down counters fed with the delta of each ``set``.
"""

from __future__ import annotations

from collections.abc import Sequence
from contextlib import contextmanager
import threading
import time
from typing import TYPE_CHECKING, Any, Literal

from opentelemetry import metrics as otel_metrics
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.resources import Resource
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, Histogram, generate_latest


if TYPE_CHECKING:
    from collections.abc import Generator


SERVICE_NAME = "corpus-search-server"

MetricKind = Literal["counter", "histogram", "gauge"]

_PROM_TYPES = {"counter": Counter, "histogram": Histogram, "gauge": Gauge}

_state: dict[str, Any] = {"provider": None, "meter": None}


def init_metrics(
    service_name: str = SERVICE_NAME,
    resource_attributes: dict[str, str] | None = None,
) -> MeterProvider:
    """Install the process-wide meter provider; later calls return the first one."""
    if isinstance(_state["provider"], MeterProvider):
        return _state["provider"]

    provider = MeterProvider(resource=Resource.create({"service.name": service_name, **(resource_attributes or {})}))
    otel_metrics.set_meter_provider(provider)
    _state["provider"] = provider
    _state["meter"] = otel_metrics.get_meter(__name__)
    return provider


def _meter():
    if _state["meter"] is None:
        init_metrics()
    return _state["meter"]


class LabeledMetric:
    """A ``MetricBridge`` with its label values fixed."""

    __slots__ = ("_bridge", "_labels")

    def __init__(self, bridge: MetricBridge, labels: dict[str, str]) -> None:
        self._bridge = bridge
        self._labels = labels

    def inc(self, amount: float = 1.0) -> None:
        self._bridge.record(self._labels, amount)

    def observe(self, value: float) -> None:
        self._bridge.record(self._labels, value)

    def set(self, value: float) -> None:
        self._bridge.record(self._labels, value)


class MetricBridge:
    """One logical metric recorded to Prometheus and OpenTelemetry together."""

    def __init__(
        self, kind: MetricKind, name: str, collector: Counter | Histogram | Gauge, description: str
    ) -> None:
        self.kind = kind
        self.name = name
        self.collector = collector
        self.description = description
        self._instrument = None
        self._gauge_values: dict[tuple[tuple[str, str], ...], float] = {}
        self._lock = threading.Lock()

    def labels(self, **labels: str) -> LabeledMetric:
        return LabeledMetric(self, labels)

    def _otel(self):
        if self._instrument is None:
            meter = _meter()
            if self.kind == "counter":
                self._instrument = meter.create_counter(self.name, description=self.description)
            elif self.kind == "histogram":
                self._instrument = meter.create_histogram(self.name, description=self.description)
            else:
                self._instrument = meter.create_up_down_counter(self.name, description=self.description)
        return self._instrument

    def record(self, labels: dict[str, str], value: float) -> None:
        child = self.collector.labels(**labels)
        if self.kind == "counter":
            child.inc(value)
            self._otel().add(value, labels)
        elif self.kind == "histogram":
            child.observe(value)
            self._otel().record(value, labels)
        else:
            child.set(value)
            key = tuple(sorted(labels.items()))
            with self._lock:
                delta = value - self._gauge_values.get(key, 0.0)
                self._gauge_values[key] = value
            if delta:
                self._otel().add(delta, labels)


def _declare(
    kind: MetricKind,
    name: str,
    description: str,
    labelnames: Sequence[str],
    buckets: Sequence[float] | None = None,
) -> MetricBridge:
    options: dict[str, Any] = {"buckets": tuple(buckets)} if buckets else {}
    collector = _PROM_TYPES[kind](name, description, list(labelnames), **options)
    return MetricBridge(kind, name, collector, description)


REQUEST_LATENCY = _declare(
    "histogram",
    "corpus_search_request_latency_seconds",
    "HTTP request latency in seconds",
    ["route"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)
REQUEST_COUNT = _declare("counter", "corpus_search_requests", "Total HTTP requests", ["route", "status"])
SEARCH_LATENCY = _declare(
    "histogram",
    "corpus_search_query_latency_seconds",
    "Search latency in seconds, split by cache outcome",
    ["cache"],
    buckets=(0.0005, 0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5),
)
CACHE_LOOKUPS = _declare("counter", "corpus_search_cache_lookups", "Result cache lookups", ["result"])
CORPUS_SIZE = _declare("gauge", "corpus_search_corpus_size", "Size of the loaded corpus", ["kind"])


@contextmanager
def track_latency(histogram: MetricBridge, **labels: str) -> Generator[None, None, None]:
    """Observe the wall time of the ``with`` block into ``histogram``."""
    started = time.perf_counter()
    try:
        yield
    finally:
        histogram.labels(**labels).observe(time.perf_counter() - started)


def get_metrics() -> bytes:
    return generate_latest()


def get_metrics_content_type() -> str:
    return CONTENT_TYPE_LATEST
