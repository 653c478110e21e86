"""Health endpoint factory."""

from __future__ import annotations

from typing import TYPE_CHECKING

from starlette.responses import JSONResponse


if TYPE_CHECKING:
    from starlette.requests import Request

    from corpus_search.search.engine import SearchEngine


def build_health_endpoint(engine: SearchEngine):
    """Return a coroutine function reporting the published corpus.

    An empty corpus is reported as ``degraded``: the service answers every
    query, but with no results.
    """

    async def health_check(request: Request) -> JSONResponse:
        stats = engine.stats()
        status = "healthy" if stats.documents > 0 else "degraded"
        return JSONResponse({"status": status, "corpus": stats.to_wire()})

    return health_check
