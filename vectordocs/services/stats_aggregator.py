"""Collection statistics derived from stored chunk metadata.

Counts come straight from the vector store.  File names are recovered by
bulk-reading every record's metadata and collecting the string
``filename`` values, so the cost grows with the size of the collection.
"""

from __future__ import annotations

from collections import Counter
from typing import TYPE_CHECKING

import structlog

from vectordocs.models.store import CollectionStats
from vectordocs.utils.errors import CollectionResolutionError, VectorDocsError

if TYPE_CHECKING:
    from vectordocs.interfaces.vector_store_provider import IVectorStoreProvider
    from vectordocs.services.collection_resolver import CollectionResolver

logger = structlog.get_logger(logger_name=__name__)


class StatsAggregator:
    """Reports chunk and distinct-file counts for the document collection."""

    def __init__(
        self,
        vector_store: IVectorStoreProvider,
        resolver: CollectionResolver,
        collection_name: str,
    ) -> None:
        self._vector_store = vector_store
        self._resolver = resolver
        self._collection_name = collection_name

    async def collect(self) -> CollectionStats:
        """Return current collection statistics.

        A collection that cannot be resolved reports zero everywhere.  A
        failed count propagates; a failed bulk read is logged and reports
        no files.
        """
        try:
            collection_id = await self._resolver.resolve(self._collection_name)
        except CollectionResolutionError as exc:
            logger.warning("stats_collection_unavailable", error=str(exc))
            return CollectionStats()

        total_chunks = await self._vector_store.count(collection_id)
        if total_chunks == 0:
            return CollectionStats()

        try:
            metadatas = await self._vector_store.get(
                collection_id, limit=total_chunks, include=["metadatas"]
            )
        except VectorDocsError as exc:
            logger.warning("stats_metadata_read_failed", error=str(exc))
            metadatas = []

        per_file: Counter[str] = Counter(
            metadata["filename"]
            for metadata in metadatas
            if isinstance(metadata, dict) and isinstance(metadata.get("filename"), str)
        )
        files = sorted(per_file)
        return CollectionStats(
            total_chunks=total_chunks,
            total_files=len(files),
            files=files,
            file_chunk_counts=dict(per_file),
        )
