"""Search request/result models shared by the search service and the API."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from mindmarks.models.cache import CacheStatus


class SearchScope(str, Enum):
    """Which entity tables a search covers."""

    ALL = "all"
    NOTES = "notes"
    BOOKMARKS = "bookmarks"

    def includes_notes(self) -> bool:
        return self in (SearchScope.ALL, SearchScope.NOTES)

    def includes_bookmarks(self) -> bool:
        return self in (SearchScope.ALL, SearchScope.BOOKMARKS)


class SearchMode(str, Enum):
    """Which stage of the search pipeline produced the results."""

    TEXT = "text"
    SEMANTIC = "semantic"
    FALLBACK = "fallback"


class EntityType(str, Enum):
    """Entity kinds that carry searchable embeddings."""

    NOTE = "note"
    BOOKMARK = "bookmark"

    @property
    def table(self) -> str:
        return "notes" if self is EntityType.NOTE else "bookmarks"


class MatchTier(float, Enum):
    """Fixed confidence assigned to each text-match tier."""

    EXACT_TITLE = 0.95
    PARTIAL_TITLE = 0.85
    BODY = 0.7


class SearchHit(BaseModel):
    """One note or bookmark in a search result list."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str | None = None
    content: str | None = None
    url: str | None = None
    created_at: str | None = None
    similarity: float = Field(ge=-1.0, le=1.0)


class SearchResult(BaseModel):
    """Outcome of a search, tagged with the stage that produced it."""

    model_config = ConfigDict(frozen=True)

    query: str
    notes: list[SearchHit] = Field(default_factory=list)
    bookmarks: list[SearchHit] = Field(default_factory=list)
    mode: SearchMode = SearchMode.TEXT

    @property
    def has_results(self) -> bool:
        return bool(self.notes or self.bookmarks)


class EmbeddingOutcome(BaseModel):
    """A vector plus the cache key it is stored under and how it was obtained."""

    model_config = ConfigDict(frozen=True)

    vector: list[float]
    cache_key: str
    cache_status: CacheStatus = CacheStatus.MISS
