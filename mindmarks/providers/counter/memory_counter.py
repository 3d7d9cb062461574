"""In-process counter store with expiring keys.

Mimics the subset of Redis semantics the rate limiter needs (GET, SET EX,
INCR, EXPIRE [NX], TTL) for development and single-process deployments.
An ``asyncio.Lock`` makes read-modify-write sequences atomic within the
event loop; multi-process deployments must use :class:`RedisCounterStore`.
"""

from __future__ import annotations

import asyncio
import math
import time
from typing import Callable

import structlog

from mindmarks.interfaces.counter_store import ICounterStore

logger = structlog.get_logger(logger_name=__name__)


class MemoryCounterStore(ICounterStore):
    """Dictionary-backed counter store.

    Parameters
    ----------
    clock:
        Wall-clock source in epoch seconds; injectable so tests can move
        time forward without sleeping.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._values: dict[str, tuple[str, float | None]] = {}
        self._lock = asyncio.Lock()

    def _live(self, key: str) -> tuple[str, float | None] | None:
        item = self._values.get(key)
        if item is None:
            return None
        expires_at = item[1]
        if expires_at is not None and self._clock() >= expires_at:
            del self._values[key]
            return None
        return item

    async def get(self, key: str) -> str | None:
        item = self._live(key)
        return item[0] if item else None

    async def set(self, key: str, value: str | int | float, ttl: int | None = None) -> None:
        async with self._lock:
            expires_at = self._clock() + ttl if ttl is not None else None
            self._values[key] = (str(value), expires_at)

    async def incr(self, key: str) -> int:
        async with self._lock:
            item = self._live(key)
            current = int(item[0]) if item else 0
            expires_at = item[1] if item else None
            new_value = current + 1
            self._values[key] = (str(new_value), expires_at)
            return new_value

    async def expire(self, key: str, ttl: int, only_if_unset: bool = False) -> None:
        async with self._lock:
            item = self._live(key)
            if item is None:
                return
            if only_if_unset and item[1] is not None:
                return
            self._values[key] = (item[0], self._clock() + ttl)

    async def ttl(self, key: str) -> int | None:
        item = self._live(key)
        if item is None or item[1] is None:
            return None
        return max(0, math.ceil(item[1] - self._clock()))

    def get_provider_name(self) -> str:
        return "memory_counter"
