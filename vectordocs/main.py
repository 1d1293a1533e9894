"""vectordocs FastAPI application entry point.

Wires providers, services and routes together via dependency injection.
Configuration comes from the environment / ``.env`` (see
:class:`~vectordocs.config.settings.Settings`); logging is configured once
here.  A built frontend in ``frontend/dist`` is served at ``/`` when present.

Run with ``python -m vectordocs.main`` or ``uvicorn vectordocs.main:app``.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

import httpx
import structlog
import uvicorn
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from vectordocs import __version__
from vectordocs.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from vectordocs.api.routes import router as api_router
from vectordocs.config.settings import Settings
from vectordocs.providers.embedding.ollama_embedding_provider import OllamaEmbeddingProvider
from vectordocs.providers.vector_store.chroma_http_provider import ChromaHTTPProvider
from vectordocs.services.collection_resolver import CollectionResolver
from vectordocs.services.file_deleter import FileDeleter
from vectordocs.services.ingestion.ingestion_service import IngestionService
from vectordocs.services.ingestion.page_extractor import PageExtractor
from vectordocs.services.search_service import SearchService
from vectordocs.services.stats_aggregator import StatsAggregator
from vectordocs.utils.logging import configure_logging, get_logger

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_FRONTEND_DIR = Path(__file__).resolve().parent.parent / "frontend" / "dist"

# ---------------------------------------------------------------------------
# Module-level settings & logging
# ---------------------------------------------------------------------------

settings = Settings()

configure_logging(
    log_level=settings.log_level,
    json_output=(settings.app_env == "production"),
)
_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# DI assembly
# ---------------------------------------------------------------------------


def _build_all(app_settings: Settings) -> dict[str, Any]:
    """Construct every provider and service instance for the application.

    Returns a flat dict of named components to be stored on ``app.state``.
    """
    http_client = httpx.AsyncClient(timeout=app_settings.http_timeout_seconds)

    embedding_provider = OllamaEmbeddingProvider(settings=app_settings, http_client=http_client)
    vector_store = ChromaHTTPProvider(settings=app_settings, http_client=http_client)
    resolver = CollectionResolver(vector_store=vector_store)
    collection = app_settings.collection_name

    ingestion_service = IngestionService(
        page_extractor=PageExtractor(page_timeout=app_settings.page_timeout_seconds),
        embedding_provider=embedding_provider,
        vector_store=vector_store,
        resolver=resolver,
        collection_name=collection,
        failure_policy=app_settings.chunk_failure_policy,
        max_concurrent=app_settings.max_concurrent_uploads,
    )

    return {
        "settings": app_settings,
        "http_client": http_client,
        "embedding_provider": embedding_provider,
        "vector_store": vector_store,
        "collection_resolver": resolver,
        "ingestion_service": ingestion_service,
        "search_service": SearchService(
            embedding_provider=embedding_provider,
            vector_store=vector_store,
            resolver=resolver,
            collection_name=collection,
            top_k=app_settings.search_top_k,
        ),
        "stats_aggregator": StatsAggregator(
            vector_store=vector_store, resolver=resolver, collection_name=collection
        ),
        "file_deleter": FileDeleter(
            vector_store=vector_store, resolver=resolver, collection_name=collection
        ),
    }


# ---------------------------------------------------------------------------
# Application lifespan (startup / shutdown)
# ---------------------------------------------------------------------------


@asynccontextmanager
async def _lifespan(application: FastAPI):  # noqa: ANN201
    """Initialise all providers and services on startup, clean up on shutdown."""
    components = _build_all(settings)

    for key, value in components.items():
        setattr(application.state, key, value)

    _logger.info(
        "app_startup",
        version=__version__,
        environment=settings.app_env,
        ollama_url=settings.ollama_url,
        chroma_url=settings.chroma_url,
        embedding_model=settings.embedding_model,
        collection=settings.collection_name,
    )

    yield

    http_client: httpx.AsyncClient = components["http_client"]
    await http_client.aclose()
    _logger.info("app_shutdown", message="HTTP client closed")


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app() -> FastAPI:
    """Build and configure the FastAPI application."""
    application = FastAPI(
        title="vectordocs API",
        version=__version__,
        description=(
            "Upload PDFs, split them into overlapping word windows, embed each "
            "window and store it in a vector database for semantic search."
        ),
        lifespan=_lifespan,
    )

    # -- Middleware (order matters: last added = first executed) --
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(application)

    application.include_router(api_router)

    # Mounted last so /api routes take precedence.
    if _FRONTEND_DIR.exists():
        application.mount(
            "/",
            StaticFiles(directory=str(_FRONTEND_DIR), html=True),
            name="frontend",
        )

    return application


app = create_app()

# ---------------------------------------------------------------------------
# Server entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    uvicorn.run(
        "vectordocs.main:app",
        host=settings.host,
        port=settings.port,
        reload=(settings.app_env == "development"),
    )
