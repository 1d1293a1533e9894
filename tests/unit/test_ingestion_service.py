"""Unit tests for IngestionService orchestration, progress events and failure policy."""

from __future__ import annotations

import asyncio
import uuid
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from vectordocs.models.document import ExtractionResult, UploadedDocument
from vectordocs.models.ingestion import (
    ChunkFailurePolicy,
    ChunkingOptions,
    IngestionEvent,
    IngestionPhase,
)
from vectordocs.services.collection_resolver import CollectionResolver
from vectordocs.services.ingestion.ingestion_service import IngestionService
from vectordocs.services.ingestion.page_extractor import PageExtractor
from vectordocs.utils.errors import (
    BackendStatusError,
    CollectionResolutionError,
    DocumentOpenError,
    EmptyContentError,
    NoChunksError,
    PerChunkError,
    TransportError,
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_TEN_WORDS = "one two three four five six seven eight nine ten"


def _extractor(text: str = _TEN_WORDS, pages: int = 1) -> MagicMock:
    extractor = MagicMock(spec=PageExtractor)

    async def _extract(document, on_progress=None):  # noqa: ANN001, ANN202
        if on_progress is not None:
            for i in range(1, pages + 1):
                await on_progress(f"Reading PDF page {i}/{pages}")
        return ExtractionResult(
            text=text, total_pages=pages, pages_extracted=pages, pages_skipped=0
        )

    extractor.extract = AsyncMock(side_effect=_extract)
    return extractor


def _service(
    extractor: MagicMock,
    embedding: MagicMock,
    store: MagicMock,
    policy: ChunkFailurePolicy = ChunkFailurePolicy.CONTINUE,
    max_concurrent: int = 1,
) -> IngestionService:
    return IngestionService(
        page_extractor=extractor,
        embedding_provider=embedding,
        vector_store=store,
        resolver=CollectionResolver(vector_store=store),
        collection_name="documents",
        failure_policy=policy,
        max_concurrent=max_concurrent,
    )


def _doc(name: str = "report.pdf") -> UploadedDocument:
    return UploadedDocument(filename=name, content=b"%PDF")


# ---------------------------------------------------------------------------
# Happy path
# ---------------------------------------------------------------------------


class TestIngestSuccess:
    @pytest.mark.asyncio
    async def test_stores_every_chunk_with_metadata(
        self, mock_embedding_provider: MagicMock, mock_vector_store: MagicMock
    ) -> None:
        service = _service(_extractor(), mock_embedding_provider, mock_vector_store)

        result = await service.ingest(_doc(), ChunkingOptions(chunk_size=4, chunk_stride=3))

        assert result.chunks_total == 3
        assert result.chunks_stored == 3
        assert result.chunks_failed == 0
        assert mock_embedding_provider.embed_single.await_count == 3
        assert mock_vector_store.add.await_count == 3

        first = mock_vector_store.add.await_args_list[0]
        assert first.args[0] == "coll-1"
        assert first.kwargs["documents"] == ["one two three four"]
        assert first.kwargs["embeddings"] == [[0.1, 0.2, 0.3]]
        metadata = first.kwargs["metadatas"][0]
        assert metadata["source"] == "pdf"
        assert metadata["filename"] == "report.pdf"
        assert metadata["chunk_num"] == 1
        assert "uploaded_at" in metadata
        uuid.UUID(first.kwargs["ids"][0])

        last = mock_vector_store.add.await_args_list[-1]
        assert last.kwargs["documents"] == ["seven eight nine ten"]
        assert last.kwargs["metadatas"][0]["chunk_num"] == 3

    @pytest.mark.asyncio
    async def test_record_ids_are_unique(
        self, mock_embedding_provider: MagicMock, mock_vector_store: MagicMock
    ) -> None:
        service = _service(_extractor(), mock_embedding_provider, mock_vector_store)

        await service.ingest(_doc(), ChunkingOptions(chunk_size=2, chunk_stride=2))

        ids = [call.kwargs["ids"][0] for call in mock_vector_store.add.await_args_list]
        assert len(ids) == len(set(ids)) == 5

    @pytest.mark.asyncio
    async def test_progress_events_in_order(
        self, mock_embedding_provider: MagicMock, mock_vector_store: MagicMock
    ) -> None:
        events: list[IngestionEvent] = []
        service = _service(_extractor(pages=2), mock_embedding_provider, mock_vector_store)

        await service.ingest(
            _doc(), ChunkingOptions(chunk_size=4, chunk_stride=3), listener=events.append
        )

        assert [e.message for e in events] == [
            "Reading PDF file...",
            "Reading PDF page 1/2",
            "Reading PDF page 2/2",
            f"Extracted {len(_TEN_WORDS)} characters from PDF",
            "Splitting text into chunks...",
            "Created 3 chunks - Starting embedding...",
            "Processing chunk 1/3",
            "Processing chunk 2/3",
            "Processing chunk 3/3",
            "completed",
        ]
        assert events[0].phase is IngestionPhase.RECEIVED
        assert events[1].phase is IngestionPhase.EXTRACTING
        assert events[4].phase is IngestionPhase.CHUNKING
        assert events[5].phase is IngestionPhase.EMBEDDING
        assert events[-1].phase is IngestionPhase.COMPLETED

    @pytest.mark.asyncio
    async def test_async_listener_is_awaited(
        self, mock_embedding_provider: MagicMock, mock_vector_store: MagicMock
    ) -> None:
        received: list[str] = []

        async def _listener(event: IngestionEvent) -> None:
            received.append(event.message)

        service = _service(_extractor(), mock_embedding_provider, mock_vector_store)
        await service.ingest(_doc(), listener=_listener)

        assert received[0] == "Reading PDF file..."
        assert received[-1] == "completed"

    @pytest.mark.asyncio
    async def test_broken_listener_does_not_fail_run(
        self, mock_embedding_provider: MagicMock, mock_vector_store: MagicMock
    ) -> None:
        def _listener(event: IngestionEvent) -> None:
            raise RuntimeError("client went away")

        service = _service(_extractor(), mock_embedding_provider, mock_vector_store)
        result = await service.ingest(_doc(), listener=_listener)

        assert result.chunks_stored == 1

    @pytest.mark.asyncio
    async def test_collection_resolved_once_before_embedding(
        self, mock_embedding_provider: MagicMock, mock_vector_store: MagicMock
    ) -> None:
        service = _service(_extractor(), mock_embedding_provider, mock_vector_store)

        await service.ingest(_doc(), ChunkingOptions(chunk_size=2, chunk_stride=2))

        mock_vector_store.get_collection.assert_awaited_once_with("documents")

    @pytest.mark.asyncio
    async def test_result_wire_format(
        self, mock_embedding_provider: MagicMock, mock_vector_store: MagicMock
    ) -> None:
        service = _service(_extractor(), mock_embedding_provider, mock_vector_store)

        result = await service.ingest(_doc(), ChunkingOptions(chunk_size=120, chunk_stride=90))

        assert result.to_wire() == {
            "status": "completed",
            "filename": "report.pdf",
            "chunkSize": 120,
            "chunkStride": 90,
        }


# ---------------------------------------------------------------------------
# Chunk failures
# ---------------------------------------------------------------------------


class TestChunkFailures:
    @pytest.mark.asyncio
    async def test_continue_policy_drops_failed_chunks(
        self, mock_embedding_provider: MagicMock, mock_vector_store: MagicMock
    ) -> None:
        mock_embedding_provider.embed_single = AsyncMock(
            side_effect=[
                [0.1],
                BackendStatusError("status 500", provider_name="ollama", upstream_status=500),
                TransportError("connection refused", provider_name="ollama"),
            ]
        )
        service = _service(_extractor(), mock_embedding_provider, mock_vector_store)

        result = await service.ingest(_doc(), ChunkingOptions(chunk_size=4, chunk_stride=3))

        assert result.chunks_total == 3
        assert result.chunks_stored == 1
        assert result.chunks_failed == 2
        stored_nums = [
            call.kwargs["metadatas"][0]["chunk_num"]
            for call in mock_vector_store.add.await_args_list
        ]
        assert stored_nums == [1]

    @pytest.mark.asyncio
    async def test_store_failure_also_counts_as_chunk_failure(
        self, mock_embedding_provider: MagicMock, mock_vector_store: MagicMock
    ) -> None:
        mock_vector_store.add = AsyncMock(
            side_effect=[None, BackendStatusError("status 422", provider_name="chroma")]
        )
        service = _service(_extractor("a b c d"), mock_embedding_provider, mock_vector_store)

        result = await service.ingest(_doc(), ChunkingOptions(chunk_size=2, chunk_stride=2))

        assert result.chunks_stored == 1
        assert result.chunks_failed == 1

    @pytest.mark.asyncio
    async def test_every_chunk_failing_still_completes(
        self, mock_embedding_provider: MagicMock, mock_vector_store: MagicMock
    ) -> None:
        mock_embedding_provider.embed_single = AsyncMock(
            side_effect=TransportError("down", provider_name="ollama")
        )
        events: list[IngestionEvent] = []
        service = _service(_extractor(), mock_embedding_provider, mock_vector_store)

        result = await service.ingest(_doc(), listener=events.append)

        assert result.chunks_stored == 0
        assert events[-1].phase is IngestionPhase.COMPLETED

    @pytest.mark.asyncio
    async def test_abort_policy_fails_on_first_bad_chunk(
        self, mock_embedding_provider: MagicMock, mock_vector_store: MagicMock
    ) -> None:
        mock_embedding_provider.embed_single = AsyncMock(
            side_effect=[[0.1], TransportError("down", provider_name="ollama"), [0.3]]
        )
        service = _service(
            _extractor(),
            mock_embedding_provider,
            mock_vector_store,
            policy=ChunkFailurePolicy.ABORT,
        )

        with pytest.raises(PerChunkError) as exc_info:
            await service.ingest(_doc(), ChunkingOptions(chunk_size=4, chunk_stride=3))

        assert exc_info.value.chunk_num == 2
        assert mock_vector_store.add.await_count == 1

    @pytest.mark.asyncio
    async def test_unmapped_provider_exception_is_a_chunk_failure(
        self, mock_embedding_provider: MagicMock, mock_vector_store: MagicMock
    ) -> None:
        mock_embedding_provider.embed_single = AsyncMock(
            side_effect=[httpx.InvalidURL("bad host"), [0.2], RuntimeError("boom")]
        )
        events: list[IngestionEvent] = []
        service = _service(_extractor(), mock_embedding_provider, mock_vector_store)

        result = await service.ingest(
            _doc(), ChunkingOptions(chunk_size=4, chunk_stride=3), listener=events.append
        )

        assert result.chunks_stored == 1
        assert result.chunks_failed == 2
        assert events[-1].phase is IngestionPhase.COMPLETED

    @pytest.mark.asyncio
    async def test_abort_policy_wraps_unmapped_exception(
        self, mock_embedding_provider: MagicMock, mock_vector_store: MagicMock
    ) -> None:
        mock_vector_store.add = AsyncMock(side_effect=ValueError("unexpected payload"))
        service = _service(
            _extractor(),
            mock_embedding_provider,
            mock_vector_store,
            policy=ChunkFailurePolicy.ABORT,
        )

        with pytest.raises(PerChunkError) as exc_info:
            await service.ingest(_doc())

        assert exc_info.value.chunk_num == 1
        assert exc_info.value.message == "chunk 1 failed: unexpected payload"
        assert exc_info.value.provider_name is None


# ---------------------------------------------------------------------------
# Fatal failures
# ---------------------------------------------------------------------------


class TestFatalFailures:
    @pytest.mark.asyncio
    async def test_blank_text_is_empty_content(
        self, mock_embedding_provider: MagicMock, mock_vector_store: MagicMock
    ) -> None:
        events: list[IngestionEvent] = []
        service = _service(_extractor("  \n \n"), mock_embedding_provider, mock_vector_store)

        with pytest.raises(EmptyContentError):
            await service.ingest(_doc(), listener=events.append)

        assert events[-2].message == "Extracted 5 characters from PDF"
        assert events[-1].phase is IngestionPhase.FAILED
        assert events[-1].to_wire() == {
            "error": "no text content extracted from PDF (file might be scanned or image-based)"
        }
        mock_embedding_provider.embed_single.assert_not_awaited()
        mock_vector_store.add.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_open_failure_is_reported(
        self, mock_embedding_provider: MagicMock, mock_vector_store: MagicMock
    ) -> None:
        extractor = MagicMock(spec=PageExtractor)
        extractor.extract = AsyncMock(
            side_effect=DocumentOpenError("failed to read PDF: not a PDF")
        )
        events: list[IngestionEvent] = []
        service = _service(extractor, mock_embedding_provider, mock_vector_store)

        with pytest.raises(DocumentOpenError):
            await service.ingest(_doc(), listener=events.append)

        assert [e.to_wire() for e in events] == [
            {"status": "Reading PDF file..."},
            {"error": "failed to read PDF: not a PDF"},
        ]

    def test_no_chunks_error_message(self) -> None:
        assert NoChunksError().message == "resulted in 0 chunks (text might be too short)"

    @pytest.mark.asyncio
    async def test_unresolvable_collection_is_fatal(
        self, mock_embedding_provider: MagicMock, mock_vector_store: MagicMock
    ) -> None:
        mock_vector_store.get_collection = AsyncMock(
            side_effect=BackendStatusError("not found", upstream_status=404)
        )
        mock_vector_store.create_collection = AsyncMock(
            side_effect=TransportError("refused", provider_name="chroma")
        )
        service = _service(_extractor(), mock_embedding_provider, mock_vector_store)

        with pytest.raises(CollectionResolutionError):
            await service.ingest(_doc())

        mock_embedding_provider.embed_single.assert_not_awaited()


# ---------------------------------------------------------------------------
# Upload serialization
# ---------------------------------------------------------------------------


class TestSerialization:
    @pytest.mark.asyncio
    async def test_second_upload_waits_for_the_first(
        self, mock_embedding_provider: MagicMock, mock_vector_store: MagicMock
    ) -> None:
        release = asyncio.Event()
        calls = 0

        async def _embed(text: str) -> list[float]:
            nonlocal calls
            calls += 1
            if calls == 1:
                await release.wait()
            return [0.5]

        mock_embedding_provider.embed_single = AsyncMock(side_effect=_embed)
        service = _service(_extractor("solo"), mock_embedding_provider, mock_vector_store)

        first = asyncio.create_task(service.ingest(_doc("a.pdf")))
        while calls == 0:
            await asyncio.sleep(0)

        second_events: list[IngestionEvent] = []
        second = asyncio.create_task(service.ingest(_doc("b.pdf"), listener=second_events.append))
        await asyncio.sleep(0.01)

        assert [e.message for e in second_events] == ["Waiting for another upload to finish..."]

        release.set()
        results = await asyncio.gather(first, second)

        assert [r.filename for r in results] == ["a.pdf", "b.pdf"]
        assert second_events[1].message == "Reading PDF file..."
