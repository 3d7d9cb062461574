"""Abstract base class for cache service providers.

Defines the contract for key-value caching of AI results (analysis
payloads and embedding vectors).  Implementations may use an in-memory
TLRU cache or Redis.  Values are JSON-compatible (dict, list, str,
numbers) so every backend can serialise them.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class ICacheProvider(ABC):
    """Contract for key-value cache services.

    All operations are async to allow for network-backed stores (e.g. Redis)
    without blocking the event loop.
    """

    @abstractmethod
    async def get(self, key: str) -> Any | None:
        """Return the value stored under *key*, or ``None`` if absent or expired."""

    @abstractmethod
    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        """Store *value* under *key*.

        Parameters
        ----------
        key:
            The cache key.
        value:
            A JSON-compatible value.
        ttl:
            Time-to-live in seconds after which the backend may drop the
            entry.  ``None`` means the backend's default TTL.
        """

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove the entry stored under *key* (no-op if absent)."""

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Return ``True`` if *key* is present in the cache and not expired."""
