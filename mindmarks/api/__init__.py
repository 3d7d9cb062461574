"""Mindmarks API layer: routes, schemas, auth, and middleware."""

from mindmarks.api.auth import create_access_token, get_current_user_id, verify_access_token
from mindmarks.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
    install_exception_handlers,
)
from mindmarks.api.routes import router
from mindmarks.api.schemas import (
    AnalyzeRequest,
    AnalyzeResponse,
    ErrorResponse,
    HealthResponse,
    SearchRequest,
    SearchResponse,
    UpdateEmbeddingRequest,
    UpdateEmbeddingResponse,
)

__all__ = [
    "AnalyzeRequest",
    "AnalyzeResponse",
    "ErrorHandlingMiddleware",
    "ErrorResponse",
    "HealthResponse",
    "RequestLoggingMiddleware",
    "SearchRequest",
    "SearchResponse",
    "UpdateEmbeddingRequest",
    "UpdateEmbeddingResponse",
    "configure_cors",
    "create_access_token",
    "get_current_user_id",
    "install_exception_handlers",
    "router",
    "verify_access_token",
]
