"""Ollama embedding provider adapter.

Implements :class:`IEmbeddingProvider` against Ollama's native
``POST /api/embeddings`` endpoint (``{"model", "prompt"}`` in,
``{"embedding": [...]}`` out).  The embedding model defaults to
``embeddinggemma:300m`` and is configured with ``EMBEDDING_MODEL``.

Setup: install Ollama (https://ollama.ai), then
``ollama pull embeddinggemma:300m`` and set ``OLLAMA_URL`` if the server
is not on ``http://localhost:11434``.
"""

from __future__ import annotations

import httpx
import structlog

from vectordocs.config.settings import Settings
from vectordocs.interfaces.embedding_provider import IEmbeddingProvider
from vectordocs.utils.errors import BackendStatusError, ResponseDecodeError, TransportError

logger = structlog.get_logger(logger_name=__name__)

_HEALTH_TIMEOUT = 3.0


class OllamaEmbeddingProvider(IEmbeddingProvider):
    """Embedding provider backed by a local (or remote) Ollama server.

    Parameters
    ----------
    settings:
        Supplies ``ollama_url`` and ``embedding_model``.
    http_client:
        Injected ``httpx.AsyncClient`` shared with the vector-store provider.
    """

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient) -> None:
        self._base_url = settings.ollama_url.rstrip("/")
        self._model = settings.embedding_model
        self._http = http_client

    # ------------------------------------------------------------------
    # IEmbeddingProvider implementation
    # ------------------------------------------------------------------

    async def embed_single(self, text: str) -> list[float]:
        """Embed *text* with the configured model."""
        try:
            response = await self._http.post(
                f"{self._base_url}/api/embeddings",
                json={"model": self._model, "prompt": text},
            )
        except httpx.HTTPError as exc:
            raise TransportError(
                message=f"Ollama request failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        if response.status_code != 200:
            raise BackendStatusError(
                message=f"Ollama error (status {response.status_code}): {response.text}",
                provider_name=self.get_provider_name(),
                upstream_status=response.status_code,
                body=response.text,
            )

        try:
            embedding = response.json()["embedding"]
        except (ValueError, KeyError, TypeError) as exc:
            raise ResponseDecodeError(
                message=f"Unexpected Ollama embedding response: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        if not isinstance(embedding, list):
            raise ResponseDecodeError(
                message="Ollama embedding response is not a list",
                provider_name=self.get_provider_name(),
            )

        logger.debug("ollama_embedding", model=self._model, dimension=len(embedding))
        return embedding

    def get_provider_name(self) -> str:
        return "ollama"

    async def is_available(self) -> bool:
        """Return ``True`` if ``GET /api/tags`` answers 200."""
        try:
            response = await self._http.get(
                f"{self._base_url}/api/tags", timeout=_HEALTH_TIMEOUT
            )
            return response.status_code == 200
        except httpx.HTTPError:
            return False
