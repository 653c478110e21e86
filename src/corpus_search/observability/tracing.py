"""OpenTelemetry spans for queries and HTTP requests."""

from __future__ import annotations

from contextlib import contextmanager
import logging
from typing import TYPE_CHECKING, Any

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.trace import SpanKind, Status, StatusCode
from starlette.routing import Match

from corpus_search.observability.context import bind_span, bind_trace
from corpus_search.observability.metrics import REQUEST_COUNT, REQUEST_LATENCY, SERVICE_NAME, track_latency


if TYPE_CHECKING:
    from collections.abc import Iterator

    from opentelemetry.trace import Span, Tracer
    from starlette.requests import Request
    from starlette.responses import Response
    from starlette.types import ASGIApp, Receive, Scope, Send

logger = logging.getLogger(__name__)

TRACE_HEADER = b"x-trace-id"

_provider_state: dict[str, TracerProvider | None] = {"provider": None}


def init_tracing(
    service_name: str = SERVICE_NAME,
    resource_attributes: dict[str, str] | None = None,
) -> TracerProvider:
    """Install an SDK tracer provider once per process and return it."""
    provider = _provider_state["provider"]
    if provider is None:
        provider = TracerProvider(resource=Resource.create({"service.name": service_name, **(resource_attributes or {})}))
        trace.set_tracer_provider(provider)
        _provider_state["provider"] = provider
        logger.info("Tracing initialized for service: %s", service_name)
    return provider


def get_tracer() -> Tracer:
    return trace.get_tracer("corpus_search")


def _fail(span: Span, exc: BaseException) -> None:
    span.set_status(Status(StatusCode.ERROR, str(exc)))
    span.record_exception(exc)


@contextmanager
def create_span(
    name: str,
    kind: SpanKind = SpanKind.INTERNAL,
    attributes: dict[str, Any] | None = None,
) -> Iterator[Span]:
    """Open a span and expose its ID to log records emitted inside it."""
    with get_tracer().start_as_current_span(
        name, kind=kind, attributes=attributes, record_exception=False, set_status_on_exception=False
    ) as span:
        span_context = span.get_span_context()
        if span_context.is_valid:
            bind_span(format(span_context.span_id, "016x"))
        try:
            yield span
        except Exception as exc:
            _fail(span, exc)
            raise


class TraceContextMiddleware:
    """ASGI middleware binding fresh correlation IDs to every HTTP request.

    A caller-supplied ``x-trace-id`` header is kept as the trace ID.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http":
            supplied = next((value for key, value in scope.get("headers", []) if key == TRACE_HEADER), b"")
            bind_trace(supplied.decode("latin-1") or None, route=scope.get("path", ""))
        await self.app(scope, receive, send)


def route_template(request: Request) -> str:
    """Path template of the matching route, keeping metric labels low-cardinality."""
    for route in getattr(request.app, "routes", []):
        match, _ = route.matches(request.scope)
        if match is Match.FULL:
            return getattr(route, "path", "") or "/"
    return "unmatched"


async def trace_request(request: Request, call_next: Any) -> Response:
    """HTTP middleware function: one server span plus request metrics per call."""
    route = route_template(request)
    attributes = {"http.method": request.method, "http.route": route, "http.target": request.url.path}
    status = "500"
    with (
        create_span(f"{request.method} {route}", kind=SpanKind.SERVER, attributes=attributes) as span,
        track_latency(REQUEST_LATENCY, route=route),
    ):
        try:
            response: Response = await call_next(request)
            status = str(response.status_code)
            span.set_attribute("http.status_code", response.status_code)
            if response.status_code >= 500:
                span.set_status(Status(StatusCode.ERROR, f"HTTP {response.status_code}"))
            return response
        finally:
            REQUEST_COUNT.labels(route=route, status=status).inc()
