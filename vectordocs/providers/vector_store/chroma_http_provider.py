"""Chroma vector store provider adapter (v2 REST API over httpx).

Implements :class:`IVectorStoreProvider` by talking to a Chroma server's
tenant/database-scoped collections API::

    GET    {base}/{name}          -> collection (id)
    POST   {base}                 -> create collection
    DELETE {base}/{name}          -> drop collection
    POST   {base}/{id}/add        -> store records
    POST   {base}/{id}/query      -> nearest neighbours
    GET    {base}/{id}/count      -> record count
    POST   {base}/{id}/get        -> bulk read
    POST   {base}/{id}/delete     -> delete by metadata filter

where ``base`` is ``{CHROMA_URL}/api/v2/tenants/{tenant}/databases/{db}/collections``.
Embeddings are always supplied by the caller; the server never embeds.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from vectordocs.config.settings import Settings
from vectordocs.interfaces.vector_store_provider import IVectorStoreProvider
from vectordocs.models.store import QueryResult
from vectordocs.utils.errors import BackendStatusError, ResponseDecodeError, TransportError

logger = structlog.get_logger(logger_name=__name__)

_HEALTH_TIMEOUT = 3.0
_QUERY_INCLUDE = ["documents", "metadatas", "distances"]


class ChromaHTTPProvider(IVectorStoreProvider):
    """Vector store provider backed by a remote Chroma server.

    Parameters
    ----------
    settings:
        Supplies ``chroma_url`` plus tenant and database names.
    http_client:
        Injected ``httpx.AsyncClient`` for connection pooling and testability.
    """

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient) -> None:
        self._root_url = settings.chroma_url.rstrip("/")
        self._base_url = f"{self._root_url}{settings.collections_path}"
        self._http = http_client

    # -- Private helpers -------------------------------------------------------

    async def _request(
        self,
        method: str,
        url: str,
        json_body: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """Send one request, mapping network failures to TransportError."""
        try:
            return await self._http.request(method, url, json=json_body)
        except httpx.HTTPError as exc:
            raise TransportError(
                message=f"Chroma request failed ({method} {url}): {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

    def _check_status(
        self,
        response: httpx.Response,
        operation: str,
        accepted: tuple[int, ...] | None = None,
    ) -> None:
        """Raise BackendStatusError unless the status is accepted.

        With no explicit *accepted* tuple any status below 300 passes.
        """
        status = response.status_code
        ok = status in accepted if accepted is not None else status < 300
        if not ok:
            raise BackendStatusError(
                message=f"Chroma {operation} error (status {status}): {response.text}",
                provider_name=self.get_provider_name(),
                upstream_status=status,
                body=response.text,
            )

    def _decode(self, response: httpx.Response, operation: str) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise ResponseDecodeError(
                message=f"Chroma {operation} returned invalid JSON: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

    def _collection_id(self, payload: Any, operation: str) -> str:
        if not isinstance(payload, dict):
            raise ResponseDecodeError(
                message=f"Chroma {operation} returned an unexpected body",
                provider_name=self.get_provider_name(),
            )
        return str(payload.get("id") or "")

    # ------------------------------------------------------------------
    # IVectorStoreProvider implementation -- collection lifecycle
    # ------------------------------------------------------------------

    async def get_collection(self, name: str) -> str:
        response = await self._request("GET", f"{self._base_url}/{name}")
        self._check_status(response, "get collection", accepted=(200,))
        return self._collection_id(self._decode(response, "get collection"), "get collection")

    async def create_collection(self, name: str) -> str:
        response = await self._request(
            "POST", self._base_url, json_body={"name": name, "get_or_create": True}
        )
        self._check_status(response, "create collection", accepted=(200, 201))
        collection_id = self._collection_id(
            self._decode(response, "create collection"), "create collection"
        )
        logger.info("chroma_collection_created", collection=name, collection_id=collection_id)
        return collection_id

    async def delete_collection(self, name: str) -> None:
        response = await self._request("DELETE", f"{self._base_url}/{name}")
        self._check_status(response, "delete collection", accepted=(200, 204, 404))
        logger.info("chroma_collection_deleted", collection=name, status=response.status_code)

    # ------------------------------------------------------------------
    # IVectorStoreProvider implementation -- records
    # ------------------------------------------------------------------

    async def add(
        self,
        collection_id: str,
        ids: list[str],
        documents: list[str],
        metadatas: list[dict[str, Any]],
        embeddings: list[list[float]],
    ) -> None:
        response = await self._request(
            "POST",
            f"{self._base_url}/{collection_id}/add",
            json_body={
                "ids": ids,
                "embeddings": embeddings,
                "documents": documents,
                "metadatas": metadatas,
            },
        )
        self._check_status(response, "add")

    async def query(
        self,
        collection_id: str,
        embedding: list[float],
        n_results: int,
    ) -> QueryResult:
        response = await self._request(
            "POST",
            f"{self._base_url}/{collection_id}/query",
            json_body={
                "query_embeddings": [embedding],
                "n_results": n_results,
                "include": _QUERY_INCLUDE,
            },
        )
        self._check_status(response, "query")
        payload = self._decode(response, "query")
        if not isinstance(payload, dict):
            raise ResponseDecodeError(
                message="Chroma query returned an unexpected body",
                provider_name=self.get_provider_name(),
            )
        return QueryResult(
            ids=payload.get("ids") or [],
            documents=payload.get("documents") or [],
            metadatas=payload.get("metadatas") or [],
            distances=payload.get("distances") or [],
        )

    async def count(self, collection_id: str) -> int:
        response = await self._request("GET", f"{self._base_url}/{collection_id}/count")
        self._check_status(response, "count")
        payload = self._decode(response, "count")
        if isinstance(payload, bool) or not isinstance(payload, int):
            raise ResponseDecodeError(
                message=f"Chroma count returned a non-integer body: {payload!r}",
                provider_name=self.get_provider_name(),
            )
        return payload

    async def get(
        self,
        collection_id: str,
        limit: int,
        include: list[str] | None = None,
    ) -> list[dict[str, Any] | None]:
        response = await self._request(
            "POST",
            f"{self._base_url}/{collection_id}/get",
            json_body={"limit": limit, "include": include or ["metadatas"]},
        )
        self._check_status(response, "get")
        payload = self._decode(response, "get")
        if not isinstance(payload, dict):
            raise ResponseDecodeError(
                message="Chroma get returned an unexpected body",
                provider_name=self.get_provider_name(),
            )
        return list(payload.get("metadatas") or [])

    async def delete(self, collection_id: str, where: dict[str, Any]) -> None:
        response = await self._request(
            "POST",
            f"{self._base_url}/{collection_id}/delete",
            json_body={"where": where},
        )
        self._check_status(response, "delete")
        logger.info("chroma_records_deleted", collection_id=collection_id, where=where)

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    def get_provider_name(self) -> str:
        return "chroma"

    async def is_available(self) -> bool:
        """Return ``True`` if ``GET /api/v2/heartbeat`` answers 200."""
        try:
            response = await self._http.get(
                f"{self._root_url}/api/v2/heartbeat", timeout=_HEALTH_TIMEOUT
            )
            return response.status_code == 200
        except httpx.HTTPError:
            return False
