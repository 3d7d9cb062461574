"""Abstract base class for expiring counter stores.

The rate limiter keeps its per-user state in a store with Redis-like
semantics: integer counters with atomic increment, plain values, and
per-key TTLs.  Concurrent requests from the same user race on the same
keys, so :meth:`incr` must be atomic in the backing store; the limiter
itself holds no locks.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


# Concrete implementations: MemoryCounterStore, RedisCounterStore
# Located in: mindmarks/providers/counter/
class ICounterStore(ABC):
    """Contract for counter/value stores with expiring keys."""

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the raw value under *key*, or ``None`` if absent or expired."""

    @abstractmethod
    async def set(self, key: str, value: str | int | float, ttl: int | None = None) -> None:
        """Store *value* under *key*, optionally expiring after *ttl* seconds."""

    @abstractmethod
    async def incr(self, key: str) -> int:
        """Atomically increment the integer under *key* and return the new value.

        A missing (or expired) key is treated as ``0`` before incrementing.
        The key's existing TTL is preserved.
        """

    @abstractmethod
    async def expire(self, key: str, ttl: int, only_if_unset: bool = False) -> None:
        """Set *key* to expire after *ttl* seconds.

        When ``only_if_unset`` is true, an existing TTL is left untouched
        (Redis ``EXPIRE ... NX``).
        """

    @abstractmethod
    async def ttl(self, key: str) -> int | None:
        """Return the remaining TTL of *key* in seconds.

        ``None`` when the key is absent or has no expiry.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this store."""
