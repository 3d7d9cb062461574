"""FastAPI routes for Mindmarks.

Service dependencies are resolved from ``app.state`` via FastAPI's
``Depends`` using the ``Annotated`` pattern.

# ─── API ROUTE MAP ────────────────────────────────────────────────────
#
# Endpoint              Method  Description
# ─────────────────────────────────────────────────────────────────────
# /api/analyze          POST    Summary + concept graph for note content
# /api/search           POST    Text-first search with semantic fallback
# /api/search/update    POST    Recompute a note/bookmark embedding
# /api/health           GET     Health check + live capabilities
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from typing import Annotated, Any

import structlog
from fastapi import APIRouter, Depends, Request, Response

from mindmarks import __version__
from mindmarks.api.auth import CurrentUserDep
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
from mindmarks.models.search import SearchMode
from mindmarks.services.analysis_service import AnalysisOrchestrator
from mindmarks.services.search_service import SearchOrchestrator
from mindmarks.utils.errors import InvalidContentError
from mindmarks.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

router = APIRouter(prefix="/api")


def _get_analysis_service(request: Request) -> AnalysisOrchestrator:
    """Return the analysis orchestrator from application state."""
    return request.app.state.analysis_service


def _get_search_service(request: Request) -> SearchOrchestrator:
    """Return the search orchestrator from application state."""
    return request.app.state.search_service


AnalysisDep = Annotated[AnalysisOrchestrator, Depends(_get_analysis_service)]
SearchDep = Annotated[SearchOrchestrator, Depends(_get_search_service)]

_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


@router.post(
    "/analyze",
    response_model=AnalyzeResponse,
    response_model_exclude_none=True,
    responses={**_ERROR_RESPONSES, 413: {"model": ErrorResponse}, 429: {"model": ErrorResponse}},
    summary="Summarise note content and extract a concept graph",
)
async def analyze(
    body: AnalyzeRequest,
    response: Response,
    user_id: CurrentUserDep,
    service: AnalysisDep,
) -> AnalyzeResponse:
    """Analyse note content; provider failures degrade to simulated output."""
    outcome = await service.analyze(body.content, user_id, note_id=body.note_id)
    response.headers["X-Cache"] = outcome.cache_status.value
    return AnalyzeResponse(
        summary=outcome.result.summary,
        graph_data=outcome.result.concept_graph.to_wire(),
        notice=outcome.notice,
    )


@router.post(
    "/search",
    response_model=SearchResponse,
    response_model_exclude_none=True,
    responses=_ERROR_RESPONSES,
    summary="Search notes and bookmarks",
)
async def search(
    body: SearchRequest,
    user_id: CurrentUserDep,
    service: SearchDep,
) -> SearchResponse:
    """Text match first; semantic similarity only when text finds nothing."""
    if body.query is None:
        raise InvalidContentError("Invalid query")
    result = await service.search(body.query, user_id, body.type)
    return SearchResponse(
        query=result.query,
        notes=result.notes,
        bookmarks=result.bookmarks,
        mode=result.mode.value,
        text_search=True if result.mode is SearchMode.TEXT else None,
        fallback=True if result.mode is SearchMode.FALLBACK else None,
    )


@router.post(
    "/search/update",
    response_model=UpdateEmbeddingResponse,
    responses={**_ERROR_RESPONSES, 404: {"model": ErrorResponse}},
    summary="Recompute the stored embedding of a note or bookmark",
)
async def update_embedding(
    body: UpdateEmbeddingRequest,
    user_id: CurrentUserDep,
    service: SearchDep,
) -> UpdateEmbeddingResponse:
    """Refresh one entity's embedding so semantic search can find it."""
    if not body.id or not body.content or body.type is None:
        raise InvalidContentError("Missing required fields")
    await service.update_embedding(
        entity_id=body.id,
        content=body.content,
        entity_type=body.type,
        user_id=user_id,
        title=body.title,
    )
    return UpdateEmbeddingResponse(success=True)


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Application health check",
)
async def health_check(request: Request) -> HealthResponse:
    """Return application health, version, and live capabilities."""
    capabilities: dict[str, bool] = dict(getattr(request.app.state, "capabilities", {}))
    status = "healthy" if capabilities.get("llm", False) else "degraded"
    return HealthResponse(status=status, version=__version__, capabilities=capabilities)
