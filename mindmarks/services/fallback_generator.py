"""Deterministic local stand-ins for AI output.

Used whenever the external provider times out, fails, returns garbage or
is not configured.  Nothing here touches the network.

Randomness (topic, theme, importance, edge count and label) comes from a
``random.Random`` seeded with ``"{seed}:{content}"``, so the same content
and seed always produce the same output.  With ``seed=None`` a fresh
random seed is drawn once per generator instance.
"""

from __future__ import annotations

import random
import re
from typing import Sequence

from mindmarks.models.analysis import (
    MAX_IMPORTANCE,
    MIN_IMPORTANCE,
    Concept,
    ConceptGraph,
    Relationship,
    Theme,
)
from mindmarks.utils.vectors import text_to_vector

DEFAULT_SUMMARY_TOPICS: tuple[str, ...] = (
    "organization",
    "productivity",
    "creativity",
    "learning",
    "problem-solving",
)

DEFAULT_RELATIONSHIP_LABELS: tuple[str, ...] = (
    "relates to",
    "influences",
    "depends on",
    "part of",
    "type of",
    "leads to",
)

_MAX_CONCEPTS = 10
_MIN_WORD_LENGTH = 5
_MAX_EDGES_PER_CONCEPT = 3
_SHORT_CONTENT = 50
_MEDIUM_CONTENT = 200
_NON_WORD_RE = re.compile(r"[^\w\s]")


class LocalFallbackGenerator:
    """Synthesises summaries, concept graphs and vectors from raw text.

    Parameters
    ----------
    seed:
        Base seed mixed with the content for every call.
    topics:
        Vocabulary for the long-content summary.
    relationship_labels:
        Edge labels used in generated graphs.
    """

    def __init__(
        self,
        seed: int | None = None,
        topics: Sequence[str] | None = None,
        relationship_labels: Sequence[str] | None = None,
    ) -> None:
        self._seed = seed if seed is not None else random.SystemRandom().randrange(2**32)
        self._topics = tuple(topics or DEFAULT_SUMMARY_TOPICS)
        self._relationship_labels = tuple(relationship_labels or DEFAULT_RELATIONSHIP_LABELS)

    def _rng_for(self, content: str) -> random.Random:
        return random.Random(f"{self._seed}:{content}")

    def summarize(self, content: str) -> str:
        """Return a canned, length-aware summary of *content*."""
        if len(content) < _SHORT_CONTENT:
            return (
                "This note is quite brief. Consider adding more details to "
                "develop your thoughts further."
            )
        if len(content) < _MEDIUM_CONTENT:
            return (
                "This is a short note that covers the basics. You might want to "
                "expand on key points to make it more comprehensive."
            )
        word_count = len(content.split())
        topic = self._rng_for(content).choice(self._topics)
        return (
            f"This is a well-developed note with approximately {word_count} words. "
            f"The content appears to focus on {topic}. Consider organizing your "
            "thoughts into sections for better clarity. The main ideas are clear, "
            "but you could strengthen your note by adding specific examples or "
            "action items."
        )

    def concept_graph(self, content: str) -> ConceptGraph:
        """Build a concept graph from the longer words of *content*.

        Each concept gets 1-3 outgoing edges to the concepts that follow
        it (wrapping around), never to itself and never twice to the same
        target.  Content without eligible words yields an empty graph.
        """
        rng = self._rng_for(content)
        labels: list[str] = []
        seen: set[str] = set()
        for word in content.split():
            if len(word) < _MIN_WORD_LENGTH:
                continue
            label = _NON_WORD_RE.sub("", word)
            if not label or label in seen:
                continue
            seen.add(label)
            labels.append(label)
            if len(labels) == _MAX_CONCEPTS:
                break

        themes = list(Theme)
        concepts = [
            Concept(
                id=f"concept-{index}",
                label=label,
                theme=rng.choice(themes),
                importance=rng.randint(MIN_IMPORTANCE, MAX_IMPORTANCE),
            )
            for index, label in enumerate(labels)
        ]

        relationships: list[Relationship] = []
        count = len(concepts)
        for index, concept in enumerate(concepts):
            edges = min(rng.randint(1, _MAX_EDGES_PER_CONCEPT), count - 1)
            for offset in range(edges):
                target = concepts[(index + offset + 1) % count]
                relationships.append(
                    Relationship(
                        source_id=concept.id,
                        target_id=target.id,
                        label=rng.choice(self._relationship_labels),
                    )
                )
        return ConceptGraph(concepts=concepts, relationships=relationships)

    def embedding(self, text: str, dimension: int) -> list[float]:
        """Fold *text* directly into a unit vector (no LLM digest)."""
        return text_to_vector(text, dimension)
