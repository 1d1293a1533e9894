"""Abstract base class for vector-store service providers.

Defines the thin contract the pipeline needs from an external vector
database: collection lookup/creation/removal plus add, query, count, bulk
get and delete-by-filter on a resolved collection.  Storage and indexing
internals stay entirely on the backend side.

Collection *names* are logical; every record-level operation takes the
backend's opaque collection *identifier*, obtained via
:class:`~vectordocs.services.collection_resolver.CollectionResolver`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from vectordocs.models.store import QueryResult


# Concrete implementation: ChromaHTTPProvider (vectordocs/providers/vector_store/)
class IVectorStoreProvider(ABC):
    """Contract for vector-store services used by the pipeline.

    All methods are async; implementations raise
    :class:`~vectordocs.utils.errors.TransportError` for network failures
    and :class:`~vectordocs.utils.errors.BackendStatusError` for
    non-success responses.
    """

    # ------------------------------------------------------------------
    # Collection lifecycle
    # ------------------------------------------------------------------

    @abstractmethod
    async def get_collection(self, name: str) -> str:
        """Look up a collection by name and return its identifier.

        Raises
        ------
        vectordocs.utils.errors.BackendStatusError
            If the collection does not exist (or any non-200 status).
        """

    @abstractmethod
    async def create_collection(self, name: str) -> str:
        """Create (or get, if it already exists) a collection and return its identifier.

        The returned identifier may be empty if the backend misbehaves; the
        resolver treats that as a hard failure.
        """

    @abstractmethod
    async def delete_collection(self, name: str) -> None:
        """Drop a collection by name.  Dropping a missing collection is not an error."""

    # ------------------------------------------------------------------
    # Record operations
    # ------------------------------------------------------------------

    @abstractmethod
    async def add(
        self,
        collection_id: str,
        ids: list[str],
        documents: list[str],
        metadatas: list[dict[str, Any]],
        embeddings: list[list[float]],
    ) -> None:
        """Store records.  All four lists correspond positionally."""

    @abstractmethod
    async def query(
        self,
        collection_id: str,
        embedding: list[float],
        n_results: int,
    ) -> QueryResult:
        """Return the *n_results* nearest records to *embedding*, unmodified."""

    @abstractmethod
    async def count(self, collection_id: str) -> int:
        """Return the number of records in the collection."""

    @abstractmethod
    async def get(
        self,
        collection_id: str,
        limit: int,
        include: list[str] | None = None,
    ) -> list[dict[str, Any] | None]:
        """Bulk-read up to *limit* records and return their metadata dicts."""

    @abstractmethod
    async def delete(self, collection_id: str, where: dict[str, Any]) -> None:
        """Delete every record whose metadata matches the *where* filter."""

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"chroma"``."""

    @abstractmethod
    async def is_available(self) -> bool:
        """Return ``True`` if the vector store answers its heartbeat."""
