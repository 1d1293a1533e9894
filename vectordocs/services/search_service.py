"""Semantic search over the document collection.

Embeds the query with the same provider used at ingestion time and asks
the vector store for the nearest chunks.  The store's raw result is
returned as-is: no re-ranking, filtering or deduplication.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from vectordocs.models.store import QueryResult
from vectordocs.utils.errors import EmptyQueryError

if TYPE_CHECKING:
    from vectordocs.interfaces.embedding_provider import IEmbeddingProvider
    from vectordocs.interfaces.vector_store_provider import IVectorStoreProvider
    from vectordocs.services.collection_resolver import CollectionResolver

logger = structlog.get_logger(logger_name=__name__)


class SearchService:
    """Answers free-text queries with the top-k nearest stored chunks."""

    def __init__(
        self,
        embedding_provider: IEmbeddingProvider,
        vector_store: IVectorStoreProvider,
        resolver: CollectionResolver,
        collection_name: str,
        top_k: int = 5,
    ) -> None:
        self._embedding_provider = embedding_provider
        self._vector_store = vector_store
        self._resolver = resolver
        self._collection_name = collection_name
        self._top_k = top_k

    async def search(self, query: str, top_k: int | None = None) -> QueryResult:
        """Return up to *top_k* nearest chunks for *query*.

        Raises
        ------
        EmptyQueryError
            If *query* is empty or whitespace only.
        """
        if not query or not query.strip():
            raise EmptyQueryError()

        n_results = top_k or self._top_k
        embedding = await self._embedding_provider.embed_single(query)
        collection_id = await self._resolver.resolve(self._collection_name)
        result = await self._vector_store.query(collection_id, embedding, n_results)

        logger.info(
            "search_completed",
            query=query[:80],
            n_results=n_results,
            hits=len(result.ids[0]) if result.ids else 0,
        )
        return result
