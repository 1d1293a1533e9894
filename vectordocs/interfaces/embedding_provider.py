"""Abstract base class for text-embedding service providers.

Defines the contract for turning text into an embedding vector.  Ingestion
and search must use the same provider (and model) so stored chunk vectors
and query vectors live in the same embedding space.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


# Concrete implementation: OllamaEmbeddingProvider (vectordocs/providers/embedding/)
class IEmbeddingProvider(ABC):
    """Contract for text-embedding services used by ingestion and search."""

    @abstractmethod
    async def embed_single(self, text: str) -> list[float]:
        """Generate an embedding vector for a single text string.

        Parameters
        ----------
        text:
            The chunk text or query string to embed.

        Returns
        -------
        list[float]
            The embedding vector.  Its dimension is a property of the
            backend model; it is not validated here.

        Raises
        ------
        vectordocs.utils.errors.TransportError
            If the embedding service cannot be reached.
        vectordocs.utils.errors.BackendStatusError
            If the service answers with a non-success status.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"ollama"``."""

    @abstractmethod
    async def is_available(self) -> bool:
        """Return ``True`` if the embedding service is reachable."""
