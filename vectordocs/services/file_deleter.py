"""Delete every stored chunk of one file, matched by metadata filename."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from vectordocs.models.store import DeletionSummary

if TYPE_CHECKING:
    from vectordocs.interfaces.vector_store_provider import IVectorStoreProvider
    from vectordocs.services.collection_resolver import CollectionResolver

logger = structlog.get_logger(logger_name=__name__)


class FileDeleter:
    """Removes all chunks whose ``filename`` metadata equals a given name.

    Deleting a name that matches nothing is not an error.  Files that were
    uploaded more than once under the same name are removed together.
    """

    def __init__(
        self,
        vector_store: IVectorStoreProvider,
        resolver: CollectionResolver,
        collection_name: str,
    ) -> None:
        self._vector_store = vector_store
        self._resolver = resolver
        self._collection_name = collection_name

    async def delete(self, filename: str) -> DeletionSummary:
        collection_id = await self._resolver.resolve(self._collection_name)
        await self._vector_store.delete(collection_id, where={"filename": filename})
        logger.info("file_deleted", filename=filename, collection=self._collection_name)
        return DeletionSummary(filename=filename)
