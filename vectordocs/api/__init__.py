"""vectordocs API layer: routes, schemas and middleware."""

from vectordocs.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from vectordocs.api.routes import router
from vectordocs.api.schemas import (
    DeleteResponse,
    ErrorResponse,
    HealthResponse,
    ResetResponse,
    SearchResponse,
    StatsResponse,
)

__all__ = [
    "ErrorHandlingMiddleware",
    "RequestLoggingMiddleware",
    "configure_cors",
    "router",
    "DeleteResponse",
    "ErrorResponse",
    "HealthResponse",
    "ResetResponse",
    "SearchResponse",
    "StatsResponse",
]
