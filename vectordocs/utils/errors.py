"""Custom exception hierarchy for vectordocs.

Every error raised by the package derives from :class:`VectorDocsError`.
Errors coming from a backend name it in ``provider_name`` ("ollama" or
"chroma"); pipeline errors leave it unset.

The hierarchy is organized by where the failure happens:

    VectorDocsError  (base -- catch-all for any vectordocs error)
    +-- TransportError            (backend unreachable / connection dropped)
    +-- BackendStatusError        (backend answered with a non-success status)
    +-- ResponseDecodeError       (backend answered with an unexpected body)
    +-- CollectionResolutionError (no destination collection could be resolved)
    +-- DocumentOpenError         (uploaded bytes are not a readable PDF)
    +-- EmptyContentError         (PDF yielded no text at all)
    +-- NoChunksError             (text produced zero chunks)
    +-- PerChunkError             (one chunk failed to embed or store)
    +-- PageTimeoutError          (one page exceeded the extraction deadline)
    +-- EmptyQueryError           (search called with a blank query)
    +-- ConfigurationError        (startup / invalid settings)

Every class declares the HTTP ``status_code`` the API middleware uses when
the error escapes a route handler.
"""


class VectorDocsError(Exception):
    """Base exception for all vectordocs errors.

    ``message`` is the text clients see in ``{"error": ...}`` lines and
    error bodies.  ``str()`` adds the backend name in brackets for logs and
    the CLI, e.g. ``[chroma] status 500: boom``.
    """

    status_code: int = 500

    def __init__(
        self,
        message: str = "vectordocs error",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# External service errors
# ---------------------------------------------------------------------------

class TransportError(VectorDocsError):
    """Raised when a backend cannot be reached (connection refused, timeout)."""

    status_code = 502

    def __init__(
        self,
        message: str = "Backend service is unreachable",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class BackendStatusError(VectorDocsError):
    """Raised when a backend responds with a non-success HTTP status.

    The upstream status code and response body are kept so callers (and
    the logs) can see exactly what the backend said.
    """

    status_code = 502

    def __init__(
        self,
        message: str = "Backend returned an error status",
        provider_name: str | None = None,
        upstream_status: int | None = None,
        body: str = "",
    ) -> None:
        self._upstream_status = upstream_status
        self._body = body
        super().__init__(message=message, provider_name=provider_name)

    @property
    def upstream_status(self) -> int | None:
        return self._upstream_status

    @property
    def body(self) -> str:
        return self._body


class ResponseDecodeError(VectorDocsError):
    """Raised when a backend response body is not the JSON we expect."""

    status_code = 502

    def __init__(
        self,
        message: str = "Failed to decode backend response",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class CollectionResolutionError(VectorDocsError):
    """Raised when a collection name cannot be resolved to an identifier."""

    status_code = 502

    def __init__(
        self,
        message: str = "Failed to resolve collection",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Ingestion errors
# ---------------------------------------------------------------------------

class DocumentOpenError(VectorDocsError):
    """Raised when the uploaded bytes cannot be opened as a PDF."""

    status_code = 400

    def __init__(
        self,
        message: str = "Failed to open PDF document",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class EmptyContentError(VectorDocsError):
    """Raised when a PDF yields no text (typically a scanned, image-only file)."""

    status_code = 422

    def __init__(
        self,
        message: str = (
            "no text content extracted from PDF "
            "(file might be scanned or image-based)"
        ),
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class NoChunksError(VectorDocsError):
    """Raised when chunking the extracted text produces zero chunks."""

    status_code = 422

    def __init__(
        self,
        message: str = "resulted in 0 chunks (text might be too short)",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class PerChunkError(VectorDocsError):
    """Raised when embedding or storing a single chunk fails.

    Under the default ``ChunkFailurePolicy.CONTINUE`` this error is logged
    and the chunk is dropped; it only escapes the ingestion loop under
    ``ChunkFailurePolicy.ABORT``.
    """

    def __init__(
        self,
        message: str = "Chunk processing failed",
        provider_name: str | None = None,
        chunk_num: int = 0,
    ) -> None:
        self._chunk_num = chunk_num
        super().__init__(message=message, provider_name=provider_name)

    @property
    def chunk_num(self) -> int:
        return self._chunk_num


class PageTimeoutError(VectorDocsError):
    """Raised internally when one page exceeds the extraction deadline."""

    def __init__(
        self,
        message: str = "Page extraction timed out",
        provider_name: str | None = None,
        page: int = 0,
    ) -> None:
        self._page = page
        super().__init__(message=message, provider_name=provider_name)

    @property
    def page(self) -> int:
        return self._page


# ---------------------------------------------------------------------------
# Request / configuration errors
# ---------------------------------------------------------------------------

class EmptyQueryError(VectorDocsError):
    """Raised when a search is attempted with a blank query string."""

    status_code = 400

    def __init__(
        self,
        message: str = "Missing query parameter 'q'",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ConfigurationError(VectorDocsError):
    """Raised when environment settings fail validation."""

    def __init__(
        self,
        message: str = "invalid settings",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
