"""Composable builder for the corpus search HTTP service."""

from __future__ import annotations

from contextlib import asynccontextmanager
import logging
from pathlib import Path
from typing import TYPE_CHECKING

import anyio.to_thread
from starlette.applications import Starlette
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse, Response
from starlette.routing import Mount, Route
from starlette.staticfiles import StaticFiles

from corpus_search.config import Settings
from corpus_search.corpus.loader import load_corpus
from corpus_search.observability import (
    configure_logging,
    get_metrics,
    get_metrics_content_type,
    init_metrics,
    init_tracing,
)
from corpus_search.observability.metrics import SERVICE_NAME
from corpus_search.observability.tracing import TraceContextMiddleware, trace_request
from corpus_search.runtime.health import build_health_endpoint
from corpus_search.search.engine import SearchEngine


if TYPE_CHECKING:
    from starlette.requests import Request


logger = logging.getLogger(__name__)


def parse_int(value: str | None, default: int | None = None) -> int | None:
    """Integer query parameter; anything non-numeric yields ``default``."""
    if value is None:
        return default
    try:
        return int(value.strip())
    except ValueError:
        return default


def parse_base_indexes(value: str | None) -> list[int] | None:
    """Comma-separated document IDs.

    A missing or blank parameter means no restriction. Entries that are not
    integers are dropped, so a list with no valid entry restricts to nothing.
    """
    if value is None or not value.strip():
        return None
    indexes: list[int] = []
    for part in value.split(","):
        parsed = parse_int(part)
        if parsed is not None:
            indexes.append(parsed)
    return indexes


class AppBuilder:
    """Builds the ASGI app around one ``SearchEngine``."""

    def __init__(self, settings: Settings | None = None, engine: SearchEngine | None = None) -> None:
        self.settings = settings or Settings()
        self.engine = engine or SearchEngine(self.settings)

    def build(self) -> Starlette:
        """Build and return the Starlette application."""
        configure_logging(level=self.settings.log_level, json_output=self.settings.log_json)
        init_metrics(service_name=SERVICE_NAME)
        init_tracing(service_name=SERVICE_NAME)

        app = Starlette(
            debug=self.settings.log_level.lower() == "debug",
            routes=self._build_routes(),
            lifespan=self._build_lifespan_manager(),
        )
        app.state.engine = self.engine
        app.add_middleware(
            CORSMiddleware,
            allow_origins=self.settings.get_cors_allow_origins(),
            allow_methods=["GET"],
            allow_headers=["*"],
        )
        app.add_middleware(BaseHTTPMiddleware, dispatch=trace_request)
        app.add_middleware(TraceContextMiddleware)
        return app

    def _build_routes(self) -> list[Route | Mount]:
        routes: list[Route | Mount] = [
            Route("/api/search", endpoint=self._build_search_endpoint(), methods=["GET"]),
            Route("/api/filters", endpoint=self._build_filters_endpoint(), methods=["GET"]),
            Route("/api/content/{index}", endpoint=self._build_content_endpoint(), methods=["GET"]),
            Route("/health", endpoint=build_health_endpoint(self.engine), methods=["GET"]),
            Route("/metrics", endpoint=self._build_metrics_endpoint(), methods=["GET"]),
        ]
        static_dir = self.settings.static_dir
        if static_dir:
            if Path(static_dir).is_dir():
                routes.append(Mount("/", app=StaticFiles(directory=static_dir, html=True), name="static"))
            else:
                logger.warning("Static directory %s does not exist, not serving static files", static_dir)
        return routes

    def _build_search_endpoint(self):
        engine = self.engine

        async def search_endpoint(request: Request) -> Response:
            params = request.query_params
            result = engine.search(
                params.get("keyword", ""),
                title_only=params.get("titleOnly") == "true",
                page=parse_int(params.get("page"), 1),
                page_size=parse_int(params.get("pageSize")),
                base_indexes=parse_base_indexes(params.get("baseIndexes")),
                category=params.get("category"),
            )
            return JSONResponse(result.to_wire())

        return search_endpoint

    def _build_filters_endpoint(self):
        engine = self.engine

        async def filters_endpoint(_: Request) -> Response:
            return JSONResponse(engine.list_categories().to_wire())

        return filters_endpoint

    def _build_content_endpoint(self):
        engine = self.engine

        async def content_endpoint(request: Request) -> Response:
            doc_id = parse_int(request.path_params["index"])
            document = engine.get_document(doc_id) if doc_id is not None else None
            if document is None:
                return JSONResponse({"error": "Content not found"}, status_code=404)
            return JSONResponse(document.to_wire())

        return content_endpoint

    def _build_metrics_endpoint(self):
        async def metrics_endpoint(_: Request) -> Response:
            return Response(content=get_metrics(), media_type=get_metrics_content_type())

        return metrics_endpoint

    def _build_lifespan_manager(self):
        engine = self.engine
        data_path = self.settings.data_path

        @asynccontextmanager
        async def lifespan(app: Starlette):
            count = await anyio.to_thread.run_sync(load_corpus, engine, data_path)
            logger.info("Corpus search server ready with %d documents", count)
            yield
            logger.info("Corpus search server shutting down")

        return lifespan


def create_app(settings: Settings | None = None, engine: SearchEngine | None = None) -> Starlette:
    """Create the ASGI application.

    Args:
        settings: Service configuration (defaults to environment-driven ``Settings``)
        engine: Engine to serve; a fresh one is created when omitted

    Returns:
        Starlette application that loads the corpus on startup
    """
    return AppBuilder(settings, engine).build()


def run_server(settings: Settings) -> None:
    """Serve the application with uvicorn until interrupted."""
    import uvicorn

    app = create_app(settings)
    logger.info("Starting corpus search server on %s:%d (data: %s)", settings.host, settings.port, settings.data_path)
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        log_config=None,  # Don't let uvicorn override our logging config
    )


def main() -> None:
    """Main entry point for the corpus search server."""
    run_server(Settings())


if __name__ == "__main__":
    main()
