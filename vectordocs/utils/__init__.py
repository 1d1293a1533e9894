"""Utility modules for vectordocs.

- **errors** -- Exception hierarchy rooted at VectorDocsError; each failure
  site raises its own subclass carrying the HTTP status the API reports.
- **logging** -- structlog setup: coloured console output in development,
  structured JSON in production.
"""

from vectordocs.utils.errors import (
    BackendStatusError,
    CollectionResolutionError,
    ConfigurationError,
    DocumentOpenError,
    EmptyContentError,
    EmptyQueryError,
    NoChunksError,
    PageTimeoutError,
    PerChunkError,
    ResponseDecodeError,
    TransportError,
    VectorDocsError,
)
from vectordocs.utils.logging import (
    bind_log_context,
    clear_log_context,
    configure_logging,
    get_logger,
)

__all__ = [
    "BackendStatusError",
    "CollectionResolutionError",
    "ConfigurationError",
    "DocumentOpenError",
    "EmptyContentError",
    "EmptyQueryError",
    "NoChunksError",
    "PageTimeoutError",
    "PerChunkError",
    "ResponseDecodeError",
    "TransportError",
    "VectorDocsError",
    "bind_log_context",
    "clear_log_context",
    "configure_logging",
    "get_logger",
]
