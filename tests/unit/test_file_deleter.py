"""Unit tests for FileDeleter."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from vectordocs.services.collection_resolver import CollectionResolver
from vectordocs.services.file_deleter import FileDeleter
from vectordocs.utils.errors import BackendStatusError


def _deleter(store: MagicMock, resolver: CollectionResolver) -> FileDeleter:
    return FileDeleter(vector_store=store, resolver=resolver, collection_name="documents")


class TestDelete:
    @pytest.mark.asyncio
    async def test_deletes_by_filename_filter(
        self, mock_vector_store: MagicMock, resolver: CollectionResolver
    ) -> None:
        summary = await _deleter(mock_vector_store, resolver).delete("report.pdf")

        assert summary.status == "deleted"
        assert summary.filename == "report.pdf"
        mock_vector_store.delete.assert_awaited_once_with(
            "coll-1", where={"filename": "report.pdf"}
        )

    @pytest.mark.asyncio
    async def test_unknown_filename_still_succeeds(
        self, mock_vector_store: MagicMock, resolver: CollectionResolver
    ) -> None:
        summary = await _deleter(mock_vector_store, resolver).delete("never-uploaded.pdf")

        assert summary.filename == "never-uploaded.pdf"

    @pytest.mark.asyncio
    async def test_backend_rejection_propagates(
        self, mock_vector_store: MagicMock, resolver: CollectionResolver
    ) -> None:
        mock_vector_store.delete = AsyncMock(
            side_effect=BackendStatusError("status 500", provider_name="chroma")
        )

        with pytest.raises(BackendStatusError):
            await _deleter(mock_vector_store, resolver).delete("report.pdf")
