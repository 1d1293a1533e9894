"""Abstract provider interfaces (adapter pattern) for external services."""

from vectordocs.interfaces.embedding_provider import IEmbeddingProvider
from vectordocs.interfaces.vector_store_provider import IVectorStoreProvider

__all__ = [
    "IEmbeddingProvider",
    "IVectorStoreProvider",
]
