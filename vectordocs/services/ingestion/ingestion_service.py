"""Orchestrator for ingesting one uploaded PDF.

Pipeline stages: **extract -> chunk -> resolve -> embed -> store**.

The :class:`IngestionService` coordinates the page extractor, the text
chunker, the collection resolver, the embedding provider and the vector
store without any of them knowing about each other.  Every stage reports
progress as :class:`~vectordocs.models.ingestion.IngestionEvent` objects
through an optional listener, which the upload route turns into the
newline-delimited JSON progress stream.

Chunk-level failures during embedding do not fail the run under the
default :attr:`ChunkFailurePolicy.CONTINUE`; they are logged and the
chunk is dropped.  Failures before the embedding loop (unreadable PDF,
no text, no chunks, no collection) always fail the run.
"""

from __future__ import annotations

import asyncio
import time
import uuid
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

import structlog

from vectordocs.models.document import Chunk, UploadedDocument
from vectordocs.models.ingestion import (
    ChunkFailurePolicy,
    ChunkingOptions,
    IngestionEvent,
    IngestionPhase,
    IngestionResult,
)
from vectordocs.services.ingestion.chunker import TextChunker
from vectordocs.utils.errors import (
    EmptyContentError,
    NoChunksError,
    PerChunkError,
    VectorDocsError,
)
from vectordocs.utils.logging import bind_log_context, clear_log_context

if TYPE_CHECKING:
    from vectordocs.interfaces.embedding_provider import IEmbeddingProvider
    from vectordocs.interfaces.vector_store_provider import IVectorStoreProvider
    from vectordocs.services.collection_resolver import CollectionResolver
    from vectordocs.services.ingestion.page_extractor import PageExtractor

logger = structlog.get_logger(logger_name=__name__)

# Receives each IngestionEvent; may be sync or async.
IngestionListener = Callable[[IngestionEvent], Any]


class IngestionService:
    """Runs uploads through extract -> chunk -> embed -> store.

    Parameters
    ----------
    page_extractor:
        Pulls per-page text out of the PDF bytes.
    embedding_provider:
        Generates one embedding per chunk.
    vector_store:
        Stores chunk records.
    resolver:
        Resolves ``collection_name`` to the store's collection identifier.
    collection_name:
        Logical name of the destination collection.
    failure_policy:
        What to do when a single chunk fails to embed or store.
    max_concurrent:
        Number of uploads allowed through the pipeline at once.  Others
        wait their turn and are told so on their progress stream.
    """

    def __init__(
        self,
        page_extractor: PageExtractor,
        embedding_provider: IEmbeddingProvider,
        vector_store: IVectorStoreProvider,
        resolver: CollectionResolver,
        collection_name: str,
        failure_policy: ChunkFailurePolicy = ChunkFailurePolicy.CONTINUE,
        max_concurrent: int = 1,
    ) -> None:
        self._page_extractor = page_extractor
        self._embedding_provider = embedding_provider
        self._vector_store = vector_store
        self._resolver = resolver
        self._collection_name = collection_name
        self._failure_policy = failure_policy
        self._semaphore = asyncio.Semaphore(max_concurrent)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def ingest(
        self,
        document: UploadedDocument,
        options: ChunkingOptions | None = None,
        listener: IngestionListener | None = None,
    ) -> IngestionResult:
        """Ingest *document* and return a summary of the run.

        Parameters
        ----------
        document:
            The uploaded PDF.
        options:
            Chunk size and stride; defaults to 100 words with stride 80.
        listener:
            Receives every progress event, including a final ``FAILED``
            event carrying the error message when the run fails.

        Raises
        ------
        VectorDocsError
            Any fatal pipeline error, after the ``FAILED`` event was sent.
        """
        options = options or ChunkingOptions()

        if self._semaphore.locked():
            await self._emit(
                listener, IngestionPhase.RECEIVED, "Waiting for another upload to finish..."
            )

        async with self._semaphore:
            bind_log_context(upload=document.filename)
            try:
                return await self._run(document, options, listener)
            except Exception as exc:
                message = exc.message if isinstance(exc, VectorDocsError) else str(exc)
                logger.error(
                    "ingestion_failed",
                    filename=document.filename,
                    error_type=type(exc).__name__,
                    error=str(exc),
                )
                await self._emit(listener, IngestionPhase.FAILED, message)
                raise
            finally:
                clear_log_context("upload")

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    async def _run(
        self,
        document: UploadedDocument,
        options: ChunkingOptions,
        listener: IngestionListener | None,
    ) -> IngestionResult:
        start = time.monotonic()
        logger.info(
            "ingestion_started",
            filename=document.filename,
            size=document.size,
            chunk_size=options.chunk_size,
            chunk_stride=options.chunk_stride,
        )

        # 1. Extract
        await self._emit(listener, IngestionPhase.RECEIVED, "Reading PDF file...")

        async def _page_progress(message: str) -> None:
            await self._emit(listener, IngestionPhase.EXTRACTING, message)

        extraction = await self._page_extractor.extract(document, on_progress=_page_progress)
        await self._emit(
            listener,
            IngestionPhase.EXTRACTING,
            f"Extracted {len(extraction.text)} characters from PDF",
        )
        if not extraction.text.strip():
            raise EmptyContentError()

        # 2. Chunk
        await self._emit(listener, IngestionPhase.CHUNKING, "Splitting text into chunks...")
        chunks = TextChunker.from_options(options).chunk(extraction.text, document.filename)
        if not chunks:
            raise NoChunksError()

        # 3. Resolve the destination once; failure here is fatal.
        collection_id = await self._resolver.resolve(self._collection_name)

        # 4. Embed + store
        total = len(chunks)
        await self._emit(
            listener,
            IngestionPhase.EMBEDDING,
            f"Created {total} chunks - Starting embedding...",
        )
        stored = 0
        failed = 0
        for chunk in chunks:
            await self._emit(
                listener,
                IngestionPhase.EMBEDDING,
                f"Processing chunk {chunk.sequence_number}/{total}",
            )
            try:
                await self._store_chunk(collection_id, chunk)
            except Exception as exc:  # noqa: BLE001
                reason = exc.message if isinstance(exc, VectorDocsError) else str(exc)
                if self._failure_policy is ChunkFailurePolicy.ABORT:
                    raise PerChunkError(
                        message=f"chunk {chunk.sequence_number} failed: {reason}",
                        provider_name=getattr(exc, "provider_name", None),
                        chunk_num=chunk.sequence_number,
                    ) from exc
                failed += 1
                logger.warning(
                    "chunk_failed",
                    filename=document.filename,
                    chunk_num=chunk.sequence_number,
                    error=str(exc),
                    error_type=type(exc).__name__,
                )
                continue
            stored += 1

        result = IngestionResult(
            filename=document.filename,
            chunk_size=options.chunk_size,
            chunk_stride=options.chunk_stride,
            chunks_total=total,
            chunks_stored=stored,
            chunks_failed=failed,
            pages_total=extraction.total_pages,
            duration=round(time.monotonic() - start, 3),
        )
        logger.info(
            "ingestion_completed",
            filename=document.filename,
            pages=extraction.total_pages,
            pages_skipped=extraction.pages_skipped,
            chunks_total=total,
            chunks_stored=stored,
            chunks_failed=failed,
            duration=result.duration,
        )
        await self._emit(listener, IngestionPhase.COMPLETED, "completed")
        return result

    async def _store_chunk(self, collection_id: str, chunk: Chunk) -> None:
        embedding = await self._embedding_provider.embed_single(chunk.text)
        await self._vector_store.add(
            collection_id,
            ids=[str(uuid.uuid4())],
            documents=[chunk.text],
            metadatas=[chunk.to_metadata()],
            embeddings=[embedding],
        )

    # ------------------------------------------------------------------
    # Listener notification
    # ------------------------------------------------------------------

    @staticmethod
    async def _emit(
        listener: IngestionListener | None,
        phase: IngestionPhase,
        message: str,
    ) -> None:
        """Send one event to *listener*; listener errors are logged, not raised."""
        logger.debug("ingestion_progress", phase=phase.value, message=message)
        if listener is None:
            return
        try:
            result = listener(IngestionEvent(phase=phase, message=message))
            if asyncio.iscoroutine(result):
                await result
        except Exception as exc:  # noqa: BLE001
            logger.warning("ingestion_listener_error", phase=phase.value, error=str(exc))
