"""Per-user admission control for AI requests.

Two independent gates must both pass before a request may proceed:

QUOTA GATE
    At most ``max_requests`` admitted requests per fixed window.  The
    counter key is created by the first admitted request and expires with
    the window, which resets the count to zero.

COOLDOWN GATE
    At least ``min_interval_seconds`` between consecutive admitted
    requests from the same user.

Counter keys live in an :class:`ICounterStore` so that several processes
share one view of each user's budget.  The store's atomic ``INCR`` is what
keeps racing requests from under-counting: the quota check is repeated on
the post-increment value, so two requests that both saw ``count == MAX-1``
cannot both be admitted.

The limiter is a cost-control device.  When disabled it admits every
request, and when the counter store itself fails it logs and admits
rather than turning a store outage into user-facing errors.
"""

from __future__ import annotations

import math
import time
from typing import Callable

import structlog

from mindmarks.interfaces.counter_store import ICounterStore
from mindmarks.models.rate_limit import AdmissionDecision, RateState
from mindmarks.utils.errors import StoreError
from mindmarks.utils.logging import get_logger


class RateLimiter:
    """Quota + cooldown admission control backed by a counter store."""

    def __init__(
        self,
        store: ICounterStore | None,
        enabled: bool = True,
        max_requests: int = 10,
        window_seconds: int = 3600,
        min_interval_seconds: int = 10,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._enabled = enabled and store is not None
        self._max_requests = max_requests
        self._window_seconds = window_seconds
        self._min_interval_seconds = min_interval_seconds
        self._clock = clock
        self._logger: structlog.BoundLogger = get_logger(__name__)

    @property
    def enabled(self) -> bool:
        return self._enabled

    @staticmethod
    def _count_key(user_id: str) -> str:
        return f"user:{user_id}:request_count"

    @staticmethod
    def _last_request_key(user_id: str) -> str:
        return f"user:{user_id}:last_request_time"

    async def admit(self, user_id: str) -> AdmissionDecision:
        """Decide whether *user_id* may make a request now.

        On admission the window counter is incremented (creating the
        window if needed) and the last-request timestamp is updated.
        Gate rejections leave all state untouched.  A request that loses
        the increment race is rejected after its INCR, so the counter
        keeps that unit and the last-request timestamp is left alone.
        """
        if not self._enabled:
            return AdmissionDecision.allow()
        try:
            return await self._admit(user_id)
        except StoreError as exc:
            self._logger.warning("rate_limit_store_unavailable", user_id=user_id, error=str(exc))
            return AdmissionDecision.allow()

    async def _admit(self, user_id: str) -> AdmissionDecision:
        assert self._store is not None
        count_key = self._count_key(user_id)
        last_key = self._last_request_key(user_id)
        now = self._clock()

        raw_count = await self._store.get(count_key)
        count = int(raw_count) if raw_count else 0
        if count >= self._max_requests:
            return await self._reject_quota(user_id, count)

        raw_last = await self._store.get(last_key)
        if raw_last:
            elapsed = now - float(raw_last)
            if elapsed < self._min_interval_seconds:
                retry_after = math.ceil(self._min_interval_seconds - elapsed)
                self._logger.info(
                    "rate_limit_rejected",
                    user_id=user_id,
                    gate="cooldown",
                    retry_after=retry_after,
                )
                return AdmissionDecision.reject(retry_after, reason="cooldown")

        new_count = await self._store.incr(count_key)
        # NX keeps the window anchored at its first request; also repairs a
        # counter left without expiry by a crash between INCR and EXPIRE.
        await self._store.expire(count_key, self._window_seconds, only_if_unset=True)
        if new_count > self._max_requests:
            return await self._reject_quota(user_id, new_count)

        await self._store.set(
            last_key,
            now,
            ttl=max(self._window_seconds, self._min_interval_seconds),
        )
        self._logger.debug("rate_limit_admitted", user_id=user_id, request_count=new_count)
        return AdmissionDecision.allow()

    async def _reject_quota(self, user_id: str, count: int) -> AdmissionDecision:
        assert self._store is not None
        remaining = await self._store.ttl(self._count_key(user_id))
        retry_after = remaining if remaining else self._window_seconds
        self._logger.info(
            "rate_limit_rejected",
            user_id=user_id,
            gate="quota",
            request_count=count,
            retry_after=retry_after,
        )
        return AdmissionDecision.reject(retry_after, reason="quota")

    async def get_state(self, user_id: str) -> RateState:
        """Return the current counters for *user_id* (empty when disabled)."""
        if not self._enabled:
            return RateState()
        assert self._store is not None
        raw_count = await self._store.get(self._count_key(user_id))
        remaining = await self._store.ttl(self._count_key(user_id))
        raw_last = await self._store.get(self._last_request_key(user_id))
        return RateState(
            request_count=int(raw_count) if raw_count else 0,
            window_expires_at=self._clock() + remaining if remaining is not None else None,
            last_request_at=float(raw_last) if raw_last else None,
        )
