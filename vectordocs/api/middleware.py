"""HTTP middleware for the vectordocs API.

``create_app`` adds the error mapper first and the request logger second.
Starlette runs the most recently added middleware outermost, so a request
passes through::

    CORS -> RequestLogging -> ErrorHandling -> route

and the access log records the status the error mapper chose.
"""

from __future__ import annotations

import time
import uuid

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from vectordocs.api.schemas import ErrorResponse
from vectordocs.utils.errors import BackendStatusError, VectorDocsError
from vectordocs.utils.logging import bind_log_context, clear_log_context, get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


def configure_cors(app: FastAPI, *, allowed_origins: list[str] | None = None) -> None:
    """Allow browser clients from *allowed_origins* (any origin by default).

    Credentials are only allowed with an explicit origin list; browsers
    reject credentialed requests against a wildcard.
    """
    origins = allowed_origins or ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=origins != ["*"],
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER],
    )


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """One ``http_request`` event per request, tagged with a request id.

    The id is taken from an incoming ``X-Request-ID`` header or generated,
    bound to the log context for everything the route logs, and echoed on
    the response.  For streamed uploads the duration ends when the headers
    go out.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        bind_log_context(request_id=request_id)
        started = time.perf_counter()
        status = 500
        try:
            response = await call_next(request)
            status = response.status_code
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            _logger.info(
                "http_request",
                method=request.method,
                path=request.url.path,
                status=status,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )
            clear_log_context("request_id")


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Map an escaping :class:`VectorDocsError` to ``{error, detail}`` JSON.

    The HTTP status is the exception class's ``status_code``.  Anything
    else is left to FastAPI's default 500 handling.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        try:
            return await call_next(request)
        except VectorDocsError as exc:
            log_fields = {
                "error_type": type(exc).__name__,
                "provider": exc.provider_name,
                "path": request.url.path,
            }
            if isinstance(exc, BackendStatusError):
                log_fields["upstream_status"] = exc.upstream_status
            log = _logger.warning if exc.status_code < 500 else _logger.error
            log("request_failed", error=exc.message, **log_fields)

            return JSONResponse(
                status_code=exc.status_code,
                content=ErrorResponse(error=type(exc).__name__, detail=exc.message).model_dump(),
            )
