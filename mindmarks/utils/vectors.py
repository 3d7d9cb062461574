"""Vector helpers shared by the embedding providers and semantic search."""

from __future__ import annotations

from typing import Sequence

import numpy as np


def text_to_vector(text: str, dimension: int) -> list[float]:
    """Fold *text* into a fixed-length, L2-normalised vector.

    Each character's code point (scaled by 1/255) is accumulated at
    position ``i % dimension``.  Empty text yields the zero vector.
    """
    if dimension <= 0:
        raise ValueError("dimension must be positive")
    vector = np.zeros(dimension, dtype=np.float64)
    if text:
        codes = np.fromiter((ord(ch) for ch in text), dtype=np.float64, count=len(text)) / 255.0
        positions = np.arange(len(text)) % dimension
        np.add.at(vector, positions, codes)
    return normalize(vector).tolist()


def normalize(vector: np.ndarray) -> np.ndarray:
    """Return *vector* scaled to unit length; the zero vector is returned as-is."""
    magnitude = float(np.linalg.norm(vector))
    if magnitude == 0.0:
        return vector
    return vector / magnitude


def cosine_similarity(query: Sequence[float], candidate: Sequence[float]) -> float:
    """Cosine similarity in [-1, 1]; 0.0 for zero or mismatched vectors."""
    a = np.asarray(query, dtype=np.float64)
    b = np.asarray(candidate, dtype=np.float64)
    if a.shape != b.shape or a.size == 0:
        return 0.0
    denom = float(np.linalg.norm(a) * np.linalg.norm(b))
    if denom == 0.0:
        return 0.0
    return float(np.clip(np.dot(a, b) / denom, -1.0, 1.0))
