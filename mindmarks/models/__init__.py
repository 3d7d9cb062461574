"""Mindmarks domain models -- re-exports all public model classes.

The models are organized across four submodules by domain concern:
    - analysis.py    -- Concept graph and analysis result payloads
    - cache.py       -- Result-cache entries, purposes and provenance
    - rate_limit.py  -- Per-user rate state and admission decisions
    - search.py      -- Search scopes, modes, hits and results
"""

from __future__ import annotations

from mindmarks.models.analysis import (
    AnalysisOutcome,
    AnalysisResult,
    Concept,
    ConceptGraph,
    Relationship,
    Theme,
    clamp_importance,
)
from mindmarks.models.cache import CacheEntry, CachePurpose, CacheSource, CacheStatus
from mindmarks.models.rate_limit import AdmissionDecision, RateState
from mindmarks.models.search import (
    EmbeddingOutcome,
    EntityType,
    MatchTier,
    SearchHit,
    SearchMode,
    SearchResult,
    SearchScope,
)

__all__ = [
    "AdmissionDecision",
    "AnalysisOutcome",
    "AnalysisResult",
    "CacheEntry",
    "CachePurpose",
    "CacheSource",
    "CacheStatus",
    "Concept",
    "ConceptGraph",
    "EmbeddingOutcome",
    "EntityType",
    "MatchTier",
    "RateState",
    "Relationship",
    "SearchHit",
    "SearchMode",
    "SearchResult",
    "SearchScope",
    "Theme",
    "clamp_importance",
]
