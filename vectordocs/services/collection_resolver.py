"""Resolve logical collection names to vector-store collection identifiers.

Resolution is get-or-create: a lookup by name is tried first and, if it
fails for any reason, the collection is created.  Nothing is cached, so
every caller sees a collection that was dropped and recreated in between.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from vectordocs.utils.errors import CollectionResolutionError, VectorDocsError

if TYPE_CHECKING:
    from vectordocs.interfaces.vector_store_provider import IVectorStoreProvider

logger = structlog.get_logger(logger_name=__name__)


class CollectionResolver:
    """Maps collection names to identifiers, creating collections on demand."""

    def __init__(self, vector_store: IVectorStoreProvider) -> None:
        self._vector_store = vector_store

    async def resolve(self, name: str) -> str:
        """Return the identifier of collection *name*, creating it if needed.

        Raises
        ------
        CollectionResolutionError
            If creation fails or the backend returns an empty identifier.
        """
        try:
            collection_id = await self._vector_store.get_collection(name)
            if collection_id:
                return collection_id
        except VectorDocsError as exc:
            logger.debug("collection_lookup_failed", collection=name, error=str(exc))

        try:
            collection_id = await self._vector_store.create_collection(name)
        except VectorDocsError as exc:
            raise CollectionResolutionError(
                message=f"failed to create collection {name!r}: {exc.message}",
                provider_name=exc.provider_name,
            ) from exc

        if not collection_id:
            raise CollectionResolutionError(
                message=f"collection {name!r} created but no ID returned",
                provider_name=self._vector_store.get_provider_name(),
            )
        return collection_id

    async def drop(self, name: str) -> None:
        """Remove collection *name*; it is recreated on the next resolve."""
        await self._vector_store.delete_collection(name)
        logger.info("collection_dropped", collection=name)
