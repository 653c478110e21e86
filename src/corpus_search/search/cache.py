"""Bounded result cache with TTL expiry and least-recently-used eviction."""

from __future__ import annotations

from collections import OrderedDict
from collections.abc import Callable, Hashable
from dataclasses import dataclass
import logging
import threading
import time
from typing import Generic, TypeVar


logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 5 * 60
DEFAULT_MAX_ENTRIES = 120

V = TypeVar("V")


@dataclass(frozen=True)
class _Entry(Generic[V]):
    value: V
    created_at: float


class ResultCache(Generic[V]):
    """Thread-safe ordered cache.

    Insertion order doubles as recency order: a live hit is moved to the
    end, and inserts evict from the front once ``max_entries`` is exceeded.
    Entries older than ``ttl_seconds`` are dropped when read.
    """

    def __init__(
        self,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.max_entries = max_entries
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._data: OrderedDict[Hashable, _Entry[V]] = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: Hashable) -> V | None:
        with self._lock:
            entry = self._data.get(key)
            if entry is None:
                return None
            if self._clock() - entry.created_at >= self.ttl_seconds:
                del self._data[key]
                return None
            self._data.move_to_end(key)
            return entry.value

    def put(self, key: Hashable, value: V) -> None:
        with self._lock:
            self._data[key] = _Entry(value, self._clock())
            self._data.move_to_end(key)
            while len(self._data) > self.max_entries:
                evicted, _ = self._data.popitem(last=False)
                logger.debug("Evicted cached result list %r", evicted)

    def clear(self) -> None:
        with self._lock:
            self._data.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)
