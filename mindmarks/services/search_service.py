"""Text-first search over notes and bookmarks with a semantic fallback.

Stage 1 (text)
    Case-insensitive matching against the caller's rows, one tier at a
    time: exact title (0.95), partial title (0.85), body (0.7, content for
    notes, url for bookmarks).  Each entity keeps its best tier.  Any hit
    ends the search with ``mode=text``.

Stage 2 (semantic)
    Only when stage 1 found nothing: the query's embedding (cache-backed,
    see :mod:`mindmarks.services.embedding_service`) is compared by cosine
    similarity with every stored entity embedding; scores at or above the
    threshold are returned best-first, capped at ``max_results``.

Stage 3 (fallback)
    Nothing matched semantically either: the empty text result is
    returned tagged ``mode=fallback``.

The write side, :meth:`SearchOrchestrator.update_embedding`, refreshes the
vector stored on a note or bookmark row through the same embedding path.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import structlog

from mindmarks.interfaces.row_store import IRowStore
from mindmarks.models.search import (
    EmbeddingOutcome,
    EntityType,
    MatchTier,
    SearchHit,
    SearchMode,
    SearchResult,
    SearchScope,
)
from mindmarks.services.embedding_service import EmbeddingService
from mindmarks.utils.errors import EntityNotFoundError, InvalidContentError
from mindmarks.utils.logging import get_logger
from mindmarks.utils.vectors import cosine_similarity

_NOTE_COLUMNS = ["id", "title", "content", "created_at"]
_BOOKMARK_COLUMNS = ["id", "title", "url", "created_at"]


def _body_column(entity_type: EntityType) -> str:
    return "content" if entity_type is EntityType.NOTE else "url"


def _columns(entity_type: EntityType) -> list[str]:
    return list(_NOTE_COLUMNS if entity_type is EntityType.NOTE else _BOOKMARK_COLUMNS)


def _hit(row: dict[str, Any], similarity: float) -> SearchHit:
    return SearchHit(
        id=str(row["id"]),
        title=row.get("title"),
        content=row.get("content"),
        url=row.get("url"),
        created_at=row.get("created_at"),
        similarity=round(similarity, 6),
    )


class SearchOrchestrator:
    """Runs the text -> semantic -> fallback search pipeline."""

    def __init__(
        self,
        row_store: IRowStore,
        embeddings: EmbeddingService,
        similarity_threshold: float = 0.45,
        max_results: int = 10,
    ) -> None:
        self._rows = row_store
        self._embeddings = embeddings
        self._threshold = similarity_threshold
        self._max_results = max_results
        self._logger: structlog.BoundLogger = get_logger(__name__)

    async def search(
        self,
        query: str,
        user_id: str,
        scope: SearchScope = SearchScope.ALL,
    ) -> SearchResult:
        """Search the caller's notes and/or bookmarks for *query*."""
        if not isinstance(query, str) or not query.strip():
            raise InvalidContentError("Invalid query")

        entity_types = self._entity_types(scope)

        text_hits = {t: await self._text_search(t, query, user_id) for t in entity_types}
        result = self._result(query, text_hits, SearchMode.TEXT)
        if not result.has_results:
            outcome = await self._embeddings.get_embedding(query)
            semantic_hits = {
                t: await self._semantic_search(t, outcome.vector, user_id) for t in entity_types
            }
            result = self._result(query, semantic_hits, SearchMode.SEMANTIC)
            if not result.has_results:
                result = self._result(query, text_hits, SearchMode.FALLBACK)

        self._logger.info(
            "search_mode_selected",
            user_id=user_id,
            mode=result.mode.value,
            notes=len(result.notes),
            bookmarks=len(result.bookmarks),
        )
        return result

    async def update_embedding(
        self,
        entity_id: str,
        content: str,
        entity_type: EntityType,
        user_id: str,
        title: str | None = None,
    ) -> EmbeddingOutcome:
        """Recompute and store the embedding of one owned note or bookmark.

        Notes embed ``"{title} {content}"`` so title words are searchable;
        bookmarks embed *content* as supplied.

        Raises
        ------
        InvalidContentError
            If *entity_id* or *content* is empty.
        EntityNotFoundError
            If the caller owns no such row.
        """
        if not entity_id or not isinstance(content, str) or not content:
            raise InvalidContentError("Missing required fields")

        text = f"{title or ''} {content}".strip() if entity_type is EntityType.NOTE else content
        outcome = await self._embeddings.get_embedding(text)

        updated = await self._rows.update(
            entity_type.table,
            user_id,
            entity_id,
            {
                "embedding": outcome.vector,
                "embedding_cache_key": outcome.cache_key,
                "embedding_updated_at": datetime.now(timezone.utc).isoformat(),
            },
        )
        if not updated:
            raise EntityNotFoundError(f"No {entity_type.value} with id {entity_id}")

        self._logger.info(
            "embedding_refreshed",
            entity_type=entity_type.value,
            entity_id=entity_id,
            cache_status=outcome.cache_status.value,
        )
        return outcome

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _entity_types(scope: SearchScope) -> list[EntityType]:
        types: list[EntityType] = []
        if scope.includes_notes():
            types.append(EntityType.NOTE)
        if scope.includes_bookmarks():
            types.append(EntityType.BOOKMARK)
        return types

    async def _text_search(self, entity_type: EntityType, query: str, user_id: str) -> list[SearchHit]:
        needle = query.strip().lower()
        table = entity_type.table
        columns = _columns(entity_type)
        tiers = [
            (MatchTier.EXACT_TITLE, {"equals_ci": {"title": needle}}),
            (MatchTier.PARTIAL_TITLE, {"contains": {"title": needle}}),
            (MatchTier.BODY, {"contains": {_body_column(entity_type): needle}}),
        ]

        hits: list[SearchHit] = []
        seen: set[str] = set()
        for tier, criteria in tiers:
            rows = await self._rows.select(
                table, user_id, columns=columns, limit=self._max_results, **criteria
            )
            for row in rows:
                row_id = str(row["id"])
                if row_id in seen:
                    continue
                seen.add(row_id)
                hits.append(_hit(row, tier.value))
        return hits[: self._max_results]

    async def _semantic_search(
        self,
        entity_type: EntityType,
        query_vector: list[float],
        user_id: str,
    ) -> list[SearchHit]:
        rows = await self._rows.select(
            entity_type.table,
            user_id,
            columns=[*_columns(entity_type), "embedding"],
        )
        scored: list[tuple[float, dict[str, Any]]] = []
        for row in rows:
            embedding = row.get("embedding")
            if not embedding:
                continue
            score = cosine_similarity(query_vector, embedding)
            if score >= self._threshold:
                scored.append((score, row))
        scored.sort(key=lambda item: item[0], reverse=True)
        return [_hit(row, score) for score, row in scored[: self._max_results]]

    @staticmethod
    def _result(query: str, hits: dict[EntityType, list[SearchHit]], mode: SearchMode) -> SearchResult:
        return SearchResult(
            query=query,
            notes=hits.get(EntityType.NOTE, []),
            bookmarks=hits.get(EntityType.BOOKMARK, []),
            mode=mode,
        )
