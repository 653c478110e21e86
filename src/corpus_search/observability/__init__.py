"""Observability: correlated JSON logs, OpenTelemetry spans and Prometheus metrics."""

from corpus_search.observability.context import TraceIds, bind_span, bind_trace, clear_trace, current_trace
from corpus_search.observability.logging import JsonFormatter, configure_logging
from corpus_search.observability.metrics import (
    CACHE_LOOKUPS,
    CORPUS_SIZE,
    REQUEST_COUNT,
    REQUEST_LATENCY,
    SEARCH_LATENCY,
    get_metrics,
    get_metrics_content_type,
    init_metrics,
    track_latency,
)
from corpus_search.observability.tracing import (
    TraceContextMiddleware,
    create_span,
    get_tracer,
    init_tracing,
    trace_request,
)


__all__ = [
    "CACHE_LOOKUPS",
    "CORPUS_SIZE",
    "REQUEST_COUNT",
    "REQUEST_LATENCY",
    "SEARCH_LATENCY",
    "JsonFormatter",
    "TraceContextMiddleware",
    "TraceIds",
    "bind_span",
    "bind_trace",
    "clear_trace",
    "configure_logging",
    "create_span",
    "current_trace",
    "get_metrics",
    "get_metrics_content_type",
    "get_tracer",
    "init_metrics",
    "init_tracing",
    "trace_request",
    "track_latency",
]
