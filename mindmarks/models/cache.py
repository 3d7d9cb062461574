"""Result-cache models.

A :class:`CacheEntry` wraps a previously computed AI result (analysis
payload or embedding vector) with its provenance and freshness window.
Entries are keyed by content fingerprint + :class:`CachePurpose`.

``expires_at`` is the *logical* expiry: after it the entry is stale and the
caller should recompute, but it may still be served if recomputation
fails.  Physical deletion happens later, governed by the backing store's
retention TTL.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict


class CacheSource(str, Enum):
    """Where a cached payload came from."""

    PROVIDER = "provider"
    FALLBACK = "fallback"


class CachePurpose(str, Enum):
    """Purpose tag that namespaces cache keys for the same fingerprint."""

    ANALYSIS = "summary+graph"
    EMBEDDING = "embedding"


class CacheStatus(str, Enum):
    """How a response payload was obtained (reported as ``X-Cache``)."""

    HIT = "HIT"
    MISS = "MISS"
    STALE = "STALE"
    FALLBACK = "FALLBACK"


class CacheEntry(BaseModel):
    """A cached AI result plus provenance and freshness metadata."""

    model_config = ConfigDict(frozen=True)

    payload: Any
    created_at: float
    expires_at: float
    source: CacheSource = CacheSource.PROVIDER

    def is_fresh(self, now: float) -> bool:
        return now < self.expires_at

    def age_seconds(self, now: float) -> float:
        return max(0.0, now - self.created_at)
