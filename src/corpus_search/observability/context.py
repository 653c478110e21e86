"""Request-scoped correlation IDs shared by log records and spans."""

from __future__ import annotations

from contextvars import ContextVar
from dataclasses import dataclass, replace
import secrets


@dataclass(frozen=True)
class TraceIds:
    trace_id: str
    span_id: str
    route: str = ""


_current: ContextVar[TraceIds | None] = ContextVar("corpus_search_trace_ids", default=None)


def new_trace_id() -> str:
    return secrets.token_hex(16)


def new_span_id() -> str:
    return secrets.token_hex(8)


def current_trace() -> TraceIds:
    """IDs bound to the running task; unbound tasks get a fresh trace on first use."""
    ids = _current.get()
    if ids is None:
        ids = TraceIds(trace_id=new_trace_id(), span_id=new_span_id())
        _current.set(ids)
    return ids


def bind_trace(trace_id: str | None = None, *, route: str = "") -> TraceIds:
    """Start a new span scope, reusing ``trace_id`` when a caller supplied one."""
    ids = TraceIds(trace_id=trace_id or new_trace_id(), span_id=new_span_id(), route=route)
    _current.set(ids)
    return ids


def bind_span(span_id: str) -> None:
    _current.set(replace(current_trace(), span_id=span_id))


def clear_trace() -> None:
    _current.set(None)
