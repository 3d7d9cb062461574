"""API middleware: CORS, request logging, and error handling.

Starlette middleware is a stack (last added, first executed).  In
``main.py``::

    app.add_middleware(ErrorHandlingMiddleware)     # inner
    app.add_middleware(RequestLoggingMiddleware)    # outer

so the request log sees the final status code even when the error
handler replaced an exception with a JSON body.
"""

from __future__ import annotations

import time
import uuid

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from mindmarks.api.schemas import ErrorResponse
from mindmarks.utils.errors import MindmarksError, RateLimitedError
from mindmarks.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
_MAX_REQUEST_ID_LENGTH = 64


# ---------------------------------------------------------------------------
# CORS
# ---------------------------------------------------------------------------


def configure_cors(app: FastAPI, *, allowed_origins: list[str] | None = None) -> None:
    """Add CORS middleware; defaults to ``["*"]`` for development."""
    origins = allowed_origins or ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Retry-After", "X-Cache", REQUEST_ID_HEADER],
    )


# ---------------------------------------------------------------------------
# Request Logging
# ---------------------------------------------------------------------------


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every HTTP request with method, path, status code, and duration.

    A request id (the caller's ``X-Request-ID`` when it is usable, a fresh
    one otherwise) is bound into the structlog context for the duration of
    the request and echoed back in the response header.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        start = time.perf_counter()
        response: Response | None = None
        incoming = request.headers.get(REQUEST_ID_HEADER, "").strip()
        request_id = incoming if 0 < len(incoming) <= _MAX_REQUEST_ID_LENGTH else uuid.uuid4().hex[:16]

        with structlog.contextvars.bound_contextvars(request_id=request_id):
            try:
                response = await call_next(request)
                response.headers[REQUEST_ID_HEADER] = request_id
                return response
            finally:
                duration_ms = round((time.perf_counter() - start) * 1000, 2)
                status_code = response.status_code if response else 500
                _logger.info(
                    "http_request",
                    method=request.method,
                    path=str(request.url.path),
                    status=status_code,
                    duration_ms=duration_ms,
                )


# ---------------------------------------------------------------------------
# Error Handling
# ---------------------------------------------------------------------------


def error_response(exc: MindmarksError) -> JSONResponse:
    """Render a :class:`MindmarksError` as its JSON error body."""
    headers: dict[str, str] = {}
    body = ErrorResponse(error=exc.message, detail=type(exc).__name__)
    if isinstance(exc, RateLimitedError):
        headers["Retry-After"] = str(exc.retry_after_seconds)
        body = ErrorResponse(
            error=exc.message,
            detail=type(exc).__name__,
            retry_after=exc.retry_after_seconds,
        )
    return JSONResponse(
        status_code=exc.status_code,
        content=body.model_dump(by_alias=True, exclude_none=True),
        headers=headers,
    )


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Convert exceptions into structured JSON error responses.

    ``MindmarksError`` subclasses answer with their own status code and
    message.  Anything else is an internal fault: the stack trace is
    logged server-side and the client gets a generic 500.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        try:
            return await call_next(request)
        except MindmarksError as exc:
            log = _logger.error if exc.status_code >= 500 else _logger.info
            log(
                "application_error",
                error_type=type(exc).__name__,
                message=exc.message,
                provider=exc.provider_name,
                status=exc.status_code,
                path=str(request.url.path),
            )
            return error_response(exc)
        except Exception:
            _logger.exception("unhandled_error", path=str(request.url.path))
            body = ErrorResponse(error="Internal server error")
            return JSONResponse(status_code=500, content=body.model_dump(exclude_none=True))


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    first = exc.errors()[0] if exc.errors() else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    detail = f"{location}: {first.get('msg', 'invalid value')}" if location else first.get("msg")
    _logger.info("request_validation_failed", path=str(request.url.path), detail=detail)
    body = ErrorResponse(error="Invalid request", detail=detail)
    return JSONResponse(status_code=400, content=body.model_dump(exclude_none=True))


def install_exception_handlers(app: FastAPI) -> None:
    """Answer malformed request bodies with 400 instead of FastAPI's 422."""
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
