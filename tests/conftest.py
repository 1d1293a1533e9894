"""Shared pytest fixtures for the vectordocs test suite."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from vectordocs.config.settings import Settings
from vectordocs.interfaces.embedding_provider import IEmbeddingProvider
from vectordocs.interfaces.vector_store_provider import IVectorStoreProvider
from vectordocs.models.store import QueryResult
from vectordocs.services.collection_resolver import CollectionResolver

# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


@pytest.fixture
def settings() -> Settings:
    """Settings with explicit values so the host environment cannot leak in."""
    return Settings(
        _env_file=None,
        ollama_url="http://ollama.test:11434",
        chroma_url="http://chroma.test:8000",
        embedding_model="test-embed",
        collection_name="documents",
        page_timeout_seconds=0.5,
    )


# ---------------------------------------------------------------------------
# Mock providers
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_embedding_provider() -> MagicMock:
    """An IEmbeddingProvider mock returning a fixed 3-dim vector."""
    provider = MagicMock(spec=IEmbeddingProvider)
    provider.embed_single = AsyncMock(return_value=[0.1, 0.2, 0.3])
    provider.is_available = AsyncMock(return_value=True)
    provider.get_provider_name.return_value = "ollama"
    return provider


@pytest.fixture
def mock_vector_store() -> MagicMock:
    """An IVectorStoreProvider mock backed by an existing collection ``coll-1``."""
    store = MagicMock(spec=IVectorStoreProvider)
    store.get_collection = AsyncMock(return_value="coll-1")
    store.create_collection = AsyncMock(return_value="coll-1")
    store.delete_collection = AsyncMock(return_value=None)
    store.add = AsyncMock(return_value=None)
    store.query = AsyncMock(
        return_value=QueryResult(ids=[[]], documents=[[]], metadatas=[[]], distances=[[]])
    )
    store.count = AsyncMock(return_value=0)
    store.get = AsyncMock(return_value=[])
    store.delete = AsyncMock(return_value=None)
    store.is_available = AsyncMock(return_value=True)
    store.get_provider_name.return_value = "chroma"
    return store


@pytest.fixture
def resolver(mock_vector_store: MagicMock) -> CollectionResolver:
    return CollectionResolver(vector_store=mock_vector_store)


# ---------------------------------------------------------------------------
# httpx helpers
# ---------------------------------------------------------------------------


def _make_response(status_code: int = 200, json_data: Any = None, text: str = "") -> MagicMock:
    """Build a MagicMock shaped like an ``httpx.Response``."""
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    if isinstance(json_data, Exception):
        response.json.side_effect = json_data
    else:
        response.json.return_value = json_data
    return response


@pytest.fixture
def make_response():  # noqa: ANN201
    """Return a factory for fake ``httpx.Response`` objects."""
    return _make_response


@pytest.fixture
def mock_http_client() -> AsyncMock:
    """An ``httpx.AsyncClient`` stand-in; tests set ``request``/``get``/``post``."""
    return AsyncMock()
