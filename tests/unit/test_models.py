"""Unit tests for the domain models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from mindmarks.models.analysis import (
    AnalysisResult,
    Concept,
    ConceptGraph,
    Relationship,
    Theme,
    clamp_importance,
)
from mindmarks.models.cache import CacheEntry, CacheSource
from mindmarks.models.rate_limit import AdmissionDecision
from mindmarks.models.search import EntityType, MatchTier, SearchHit, SearchResult, SearchScope


class TestTheme:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("technology", Theme.TECHNOLOGY),
            ("  Science ", Theme.SCIENCE),
            ("finance", Theme.BUSINESS),
            ("Personal growth", Theme.PERSONAL),
            (Theme.PHILOSOPHY, Theme.PHILOSOPHY),
        ],
    )
    def test_coerce(self, raw: object, expected: Theme) -> None:
        assert Theme.coerce(raw) is expected

    @pytest.mark.parametrize("raw", ["astrology", "", None, 3])
    def test_coerce_rejects(self, raw: object) -> None:
        assert Theme.coerce(raw) is None


class TestConceptGraph:
    def test_importance_clamped_on_construction(self) -> None:
        concept = Concept(id="c", label="L", theme=Theme.HEALTH, importance=7)
        assert concept.importance == 3

    @pytest.mark.parametrize(
        "value, expected",
        [(2.6, 3), (0, 1), ("2", 2), (None, 1), (1e308, 3), (float("inf"), 1), (float("-inf"), 1), (float("nan"), 1)],
    )
    def test_clamp_importance(self, value: object, expected: int) -> None:
        assert clamp_importance(value) == expected

    def test_dangling_edge_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ConceptGraph(
                concepts=[Concept(id="a", label="A", theme=Theme.SCIENCE)],
                relationships=[Relationship(source_id="a", target_id="b")],
            )

    def test_wire_format_uses_source_and_target(self) -> None:
        graph = ConceptGraph(
            concepts=[
                Concept(id="a", label="A", theme=Theme.SCIENCE),
                Concept(id="b", label="B", theme=Theme.SCIENCE),
            ],
            relationships=[Relationship(source_id="a", target_id="b", label="part of")],
        )
        wire = graph.to_wire()
        assert wire["relationships"] == [{"source": "a", "target": "b", "label": "part of"}]
        assert wire["concepts"][0] == {"id": "a", "label": "A", "theme": "science", "importance": 1}

    def test_analysis_result_round_trips_through_wire(self) -> None:
        result = AnalysisResult(
            summary="s",
            concept_graph=ConceptGraph(concepts=[Concept(id="a", label="A", theme=Theme.BUSINESS)]),
        )
        assert AnalysisResult.model_validate(result.to_wire()) == result


class TestSmallModels:
    def test_cache_entry_freshness(self) -> None:
        entry = CacheEntry(payload=1, created_at=100.0, expires_at=200.0, source=CacheSource.FALLBACK)
        assert entry.is_fresh(150.0) is True
        assert entry.is_fresh(200.0) is False
        assert entry.age_seconds(250.0) == 150.0

    def test_rejection_retry_after_is_at_least_one(self) -> None:
        assert AdmissionDecision.reject(0, reason="cooldown").retry_after_seconds == 1

    def test_scope_membership(self) -> None:
        assert SearchScope.ALL.includes_notes() and SearchScope.ALL.includes_bookmarks()
        assert not SearchScope.NOTES.includes_bookmarks()
        assert not SearchScope.BOOKMARKS.includes_notes()

    def test_entity_tables(self) -> None:
        assert EntityType.NOTE.table == "notes"
        assert EntityType.BOOKMARK.table == "bookmarks"

    def test_search_hit_similarity_bounds(self) -> None:
        assert SearchHit(id="x", similarity=MatchTier.EXACT_TITLE.value).similarity == 0.95
        with pytest.raises(ValidationError):
            SearchHit(id="x", similarity=1.5)

    def test_search_result_has_results(self) -> None:
        assert not SearchResult(query="q").has_results
        assert SearchResult(query="q", bookmarks=[SearchHit(id="b", similarity=0.7)]).has_results
