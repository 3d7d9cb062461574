"""Rate-limiter state and admission decision models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class RateState(BaseModel):
    """Snapshot of one user's rate-limit counters.

    ``request_count`` only grows within a window and restarts from zero
    once the window key has expired.  ``last_request_at`` moves on every
    admitted request regardless of window state.
    """

    model_config = ConfigDict(frozen=True)

    request_count: int = 0
    window_expires_at: float | None = None
    last_request_at: float | None = None


class AdmissionDecision(BaseModel):
    """Outcome of :meth:`RateLimiter.admit`."""

    model_config = ConfigDict(frozen=True)

    allowed: bool
    retry_after_seconds: int = Field(default=0, ge=0)
    reason: str | None = None

    @classmethod
    def allow(cls) -> "AdmissionDecision":
        return cls(allowed=True)

    @classmethod
    def reject(cls, retry_after_seconds: int, reason: str) -> "AdmissionDecision":
        return cls(allowed=False, retry_after_seconds=max(1, retry_after_seconds), reason=reason)
