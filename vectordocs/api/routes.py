"""FastAPI routes for the vectordocs document pipeline.

Service dependencies are resolved from ``app.state`` (populated at startup
by ``main._build_all``) via ``Depends`` using the ``Annotated`` pattern.

    Endpoint                 Method     Description
    ------------------------------------------------------------------
    /api/health              GET        Liveness + backend reachability
    /api/reset               GET|POST   Drop the collection (lazily recreated)
    /api/upload              POST       PDF upload -> NDJSON progress stream
    /api/search?q=...        GET        Top-k nearest chunks, raw
    /api/stats               GET        Chunk / file counts
    /api/files/{filename}    DELETE     Remove every chunk of one file
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import AsyncIterator
from typing import Annotated, Any

import structlog
from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, Request, UploadFile
from fastapi.responses import StreamingResponse

from vectordocs import __version__
from vectordocs.api.schemas import (
    DeleteResponse,
    ErrorResponse,
    HealthResponse,
    ResetResponse,
    SearchResponse,
    StatsResponse,
)
from vectordocs.config.settings import Settings
from vectordocs.interfaces.embedding_provider import IEmbeddingProvider
from vectordocs.interfaces.vector_store_provider import IVectorStoreProvider
from vectordocs.models.document import UploadedDocument
from vectordocs.models.ingestion import ChunkingOptions, IngestionEvent, IngestionPhase
from vectordocs.services.collection_resolver import CollectionResolver
from vectordocs.services.file_deleter import FileDeleter
from vectordocs.services.ingestion.ingestion_service import IngestionService
from vectordocs.services.search_service import SearchService
from vectordocs.services.stats_aggregator import StatsAggregator
from vectordocs.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

router = APIRouter(prefix="/api")

_SERVICE_NAME = "vectordocs"

# Uploads are read in 64 KB increments so oversized files are rejected
# without buffering the whole payload.
_UPLOAD_CHUNK_SIZE = 64 * 1024

# Running ingestion tasks.  The event loop only keeps weak references to
# tasks, and an upload keeps going after its client disconnects.
_INGESTION_TASKS: set[asyncio.Task[None]] = set()


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------


def _get_settings(request: Request) -> Settings:
    return request.app.state.settings


def _get_ingestion_service(request: Request) -> IngestionService:
    return request.app.state.ingestion_service


def _get_search_service(request: Request) -> SearchService:
    return request.app.state.search_service


def _get_stats_aggregator(request: Request) -> StatsAggregator:
    return request.app.state.stats_aggregator


def _get_file_deleter(request: Request) -> FileDeleter:
    return request.app.state.file_deleter


def _get_resolver(request: Request) -> CollectionResolver:
    return request.app.state.collection_resolver


def _get_embedding_provider(request: Request) -> IEmbeddingProvider:
    return request.app.state.embedding_provider


def _get_vector_store(request: Request) -> IVectorStoreProvider:
    return request.app.state.vector_store


SettingsDep = Annotated[Settings, Depends(_get_settings)]
IngestionDep = Annotated[IngestionService, Depends(_get_ingestion_service)]
SearchDep = Annotated[SearchService, Depends(_get_search_service)]
StatsDep = Annotated[StatsAggregator, Depends(_get_stats_aggregator)]
DeleterDep = Annotated[FileDeleter, Depends(_get_file_deleter)]
ResolverDep = Annotated[CollectionResolver, Depends(_get_resolver)]
EmbeddingDep = Annotated[IEmbeddingProvider, Depends(_get_embedding_provider)]
VectorStoreDep = Annotated[IVectorStoreProvider, Depends(_get_vector_store)]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _positive_int(raw: str | None, default: int) -> int:
    """Parse a form value as a positive int, falling back to *default*."""
    try:
        value = int(raw) if raw is not None else default
    except (TypeError, ValueError):
        return default
    return value if value > 0 else default


async def _read_limited(file: UploadFile, max_bytes: int) -> bytes:
    """Read *file* fully, raising 413 once it grows past *max_bytes*."""
    pieces: list[bytes] = []
    total = 0
    while True:
        piece = await file.read(_UPLOAD_CHUNK_SIZE)
        if not piece:
            break
        total += len(piece)
        if total > max_bytes:
            raise HTTPException(
                status_code=413,
                detail=f"File too large. Maximum size: {max_bytes // (1024 * 1024)} MB",
            )
        pieces.append(piece)
    return b"".join(pieces)


def _ndjson(payload: dict[str, Any]) -> str:
    return json.dumps(payload) + "\n"


async def _progress_stream(
    ingestion: IngestionService,
    document: UploadedDocument,
    options: ChunkingOptions,
) -> AsyncIterator[str]:
    """Run the ingestion in a task and yield its events as NDJSON lines.

    The stream ends with either the ``completed`` summary or the
    ``{"error": ...}`` line produced by the failed run.
    """
    queue: asyncio.Queue[dict[str, Any] | None] = asyncio.Queue()

    def _on_event(event: IngestionEvent) -> None:
        # The completed line carries the run summary and is queued below.
        if event.phase is not IngestionPhase.COMPLETED:
            queue.put_nowait(event.to_wire())

    async def _produce() -> None:
        try:
            result = await ingestion.ingest(document, options, listener=_on_event)
            queue.put_nowait(result.to_wire())
        except Exception as exc:  # noqa: BLE001
            # Already logged and reported on the stream by the service.
            _logger.debug("upload_stream_failed", filename=document.filename, error=str(exc))
        finally:
            queue.put_nowait(None)

    task = asyncio.create_task(_produce())
    _INGESTION_TASKS.add(task)
    task.add_done_callback(_INGESTION_TASKS.discard)

    while True:
        item = await queue.get()
        if item is None:
            break
        yield _ndjson(item)


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health(embedding: EmbeddingDep, vector_store: VectorStoreDep) -> HealthResponse:
    """Report liveness and whether each backend answers its probe."""
    embedding_up, store_up = await asyncio.gather(
        embedding.is_available(), vector_store.is_available()
    )
    return HealthResponse(
        service=_SERVICE_NAME,
        version=__version__,
        providers={
            embedding.get_provider_name(): embedding_up,
            vector_store.get_provider_name(): store_up,
        },
    )


@router.api_route(
    "/reset",
    methods=["GET", "POST"],
    response_model=ResetResponse,
    responses={502: {"model": ErrorResponse}},
    summary="Drop the document collection",
)
async def reset_collection(resolver: ResolverDep, settings: SettingsDep) -> ResetResponse:
    """Drop the collection; the next operation recreates it empty."""
    await resolver.drop(settings.collection_name)
    _logger.info("collection_reset", collection=settings.collection_name)
    return ResetResponse(collection=settings.collection_name)


@router.post(
    "/upload",
    responses={400: {"model": ErrorResponse}, 413: {"model": ErrorResponse}},
    summary="Upload a PDF and stream ingestion progress",
)
async def upload_document(
    ingestion: IngestionDep,
    settings: SettingsDep,
    file: Annotated[UploadFile | None, File()] = None,
    chunk_size: Annotated[str | None, Form(alias="chunkSize")] = None,
    chunk_stride: Annotated[str | None, Form(alias="chunkStride")] = None,
) -> StreamingResponse:
    """Accept a PDF and stream newline-delimited JSON progress objects."""
    if file is None or not file.filename:
        raise HTTPException(status_code=400, detail="Missing PDF file in form field 'file'")

    content = await _read_limited(file, settings.max_upload_bytes)
    document = UploadedDocument(filename=file.filename, content=content)
    options = ChunkingOptions(
        chunk_size=_positive_int(chunk_size, settings.default_chunk_size),
        chunk_stride=_positive_int(chunk_stride, settings.default_chunk_stride),
    )
    _logger.info(
        "upload_received",
        filename=document.filename,
        size=document.size,
        chunk_size=options.chunk_size,
        chunk_stride=options.chunk_stride,
    )
    return StreamingResponse(
        _progress_stream(ingestion, document, options),
        media_type="application/x-ndjson",
    )


@router.get(
    "/search",
    response_model=SearchResponse,
    responses={400: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
    summary="Semantic search over stored chunks",
)
async def search_documents(
    search: SearchDep,
    q: Annotated[str, Query(description="Free-text query")] = "",
) -> SearchResponse:
    result = await search.search(q)
    return SearchResponse.from_result(result)


@router.get(
    "/stats",
    response_model=StatsResponse,
    responses={502: {"model": ErrorResponse}},
    summary="Collection statistics",
)
async def collection_stats(stats: StatsDep) -> StatsResponse:
    return StatsResponse.from_stats(await stats.collect())


@router.delete(
    "/files/{filename:path}",
    response_model=DeleteResponse,
    responses={502: {"model": ErrorResponse}},
    summary="Delete every chunk of one file",
)
async def delete_file(filename: str, deleter: DeleterDep) -> DeleteResponse:
    summary = await deleter.delete(filename)
    return DeleteResponse(status=summary.status, filename=summary.filename)
