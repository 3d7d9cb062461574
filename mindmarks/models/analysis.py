"""Concept-graph and analysis result models.

A note analysis produces two independent pieces: a prose summary and a
concept graph.  The graph is a small set of labelled nodes (concepts) and
labelled edges (relationships) between them:

    - Concept      = a node, tagged with a theme and an importance 1..3
    - Relationship = a directed, labelled edge between two concept ids
    - ConceptGraph = the complete graph; validated for referential integrity
    - AnalysisResult = summary + graph, the cached payload of /analyze

All models are frozen.  Wire names follow the HTTP contract
(``source``/``target`` on edges, ``graphData`` on the response) via aliases.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from mindmarks.models.cache import CacheStatus


class Theme(str, Enum):
    """Closed set of themes a concept can be tagged with."""

    TECHNOLOGY = "technology"
    BUSINESS = "business"
    SCIENCE = "science"
    PHILOSOPHY = "philosophy"
    PERSONAL = "personal"
    HEALTH = "health"

    @classmethod
    def coerce(cls, value: object) -> "Theme | None":
        """Map a free-form provider value onto the closed set.

        Accepts exact values case-insensitively, a handful of common
        synonyms, and any string that merely contains a theme name
        (``"Health & Wellness"``).  Returns ``None`` when nothing matches.
        """
        if isinstance(value, Theme):
            return value
        if not isinstance(value, str):
            return None
        normalized = value.strip().lower()
        if not normalized:
            return None
        for theme in cls:
            if normalized == theme.value:
                return theme
        synonym = _THEME_SYNONYMS.get(normalized)
        if synonym is not None:
            return synonym
        for theme in cls:
            if theme.value in normalized:
                return theme
        return None


_THEME_SYNONYMS: dict[str, Theme] = {
    "tech": Theme.TECHNOLOGY,
    "engineering": Theme.TECHNOLOGY,
    "software": Theme.TECHNOLOGY,
    "finance": Theme.BUSINESS,
    "economics": Theme.BUSINESS,
    "work": Theme.BUSINESS,
    "research": Theme.SCIENCE,
    "math": Theme.SCIENCE,
    "mathematics": Theme.SCIENCE,
    "ethics": Theme.PHILOSOPHY,
    "life": Theme.PERSONAL,
    "family": Theme.PERSONAL,
    "wellness": Theme.HEALTH,
    "fitness": Theme.HEALTH,
    "medicine": Theme.HEALTH,
}

MIN_IMPORTANCE = 1
MAX_IMPORTANCE = 3


def clamp_importance(value: object) -> int:
    """Clamp a numeric importance into [1, 3]; non-numeric values become 1."""
    try:
        number = int(round(float(value)))  # type: ignore[arg-type]
    except (TypeError, ValueError, OverflowError):
        return MIN_IMPORTANCE
    return max(MIN_IMPORTANCE, min(MAX_IMPORTANCE, number))


class Concept(BaseModel):
    """A node in the concept graph."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    label: str
    theme: Theme
    importance: int = Field(default=MIN_IMPORTANCE, ge=MIN_IMPORTANCE, le=MAX_IMPORTANCE)

    @field_validator("importance", mode="before")
    @classmethod
    def _clamp(cls, value: object) -> int:
        return clamp_importance(value)


class Relationship(BaseModel):
    """A directed, labelled edge between two concepts."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    source_id: str = Field(alias="source")
    target_id: str = Field(alias="target")
    label: str = "relates to"


class ConceptGraph(BaseModel):
    """Concepts plus the relationships between them.

    Every relationship endpoint must name a concept id present in
    ``concepts``; a graph violating this is rejected at construction.
    """

    model_config = ConfigDict(frozen=True)

    concepts: list[Concept] = Field(default_factory=list)
    relationships: list[Relationship] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_referential_integrity(self) -> "ConceptGraph":
        ids = {concept.id for concept in self.concepts}
        for edge in self.relationships:
            if edge.source_id not in ids or edge.target_id not in ids:
                msg = f"Relationship {edge.source_id}->{edge.target_id} references an unknown concept"
                raise ValueError(msg)
        return self

    def to_wire(self) -> dict:
        """Serialise using the HTTP contract's edge names (``source``/``target``)."""
        return self.model_dump(mode="json", by_alias=True)


class AnalysisResult(BaseModel):
    """The cacheable payload of a note analysis."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    summary: str
    concept_graph: ConceptGraph = Field(alias="graphData")

    def to_wire(self) -> dict:
        return {"summary": self.summary, "graphData": self.concept_graph.to_wire()}


class AnalysisOutcome(BaseModel):
    """What the analysis orchestrator hands back to the HTTP layer.

    ``notice`` is set whenever any part of ``result`` was produced locally
    instead of by the AI provider; ``cache_status`` feeds ``X-Cache``.
    """

    model_config = ConfigDict(frozen=True)

    result: AnalysisResult
    notice: str | None = None
    cache_status: CacheStatus = CacheStatus.MISS
