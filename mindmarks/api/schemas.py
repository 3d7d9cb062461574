"""Pydantic request/response schemas for the Mindmarks API.

Field names are snake_case in Python; JSON names follow the public wire
contract through aliases (``graphData``, ``noteId``, ``textSearch``,
``retryAfter``).  Request fields are typed loosely (mostly optional) so
that missing or empty input reaches the services, which answer with the
domain's own 400 messages.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from mindmarks.models.search import EntityType, SearchHit, SearchScope


class AnalyzeRequest(BaseModel):
    """Body of ``POST /api/analyze``."""

    model_config = ConfigDict(populate_by_name=True)

    content: str | None = None
    note_id: str | None = Field(default=None, alias="noteId")


class AnalyzeResponse(BaseModel):
    """Summary plus concept graph; ``notice`` only when output was simulated."""

    model_config = ConfigDict(populate_by_name=True)

    summary: str
    graph_data: dict[str, Any] = Field(alias="graphData")
    notice: str | None = None


class SearchRequest(BaseModel):
    """Body of ``POST /api/search``."""

    query: str | None = None
    type: SearchScope = SearchScope.ALL


class SearchResponse(BaseModel):
    """Search hits; ``textSearch``/``fallback`` flag which stage answered."""

    model_config = ConfigDict(populate_by_name=True)

    query: str
    notes: list[SearchHit] = Field(default_factory=list)
    bookmarks: list[SearchHit] = Field(default_factory=list)
    mode: str
    text_search: bool | None = Field(default=None, alias="textSearch")
    fallback: bool | None = None


class UpdateEmbeddingRequest(BaseModel):
    """Body of ``POST /api/search/update``."""

    id: str | None = None
    content: str | None = None
    type: EntityType | None = None
    title: str | None = None


class UpdateEmbeddingResponse(BaseModel):
    success: bool = True


class HealthResponse(BaseModel):
    """Application health check response."""

    status: str
    version: str
    capabilities: dict[str, bool]


class ErrorResponse(BaseModel):
    """Standard error response body."""

    model_config = ConfigDict(populate_by_name=True)

    error: str
    detail: str | None = None
    retry_after: int | None = Field(default=None, alias="retryAfter")
