"""Fingerprint-keyed cache of AI results with a stale-but-served tier.

Each stored value is a :class:`CacheEntry` carrying its own *logical*
expiry.  The backing :class:`ICacheProvider` is asked to keep the value
for ``ttl * stale_retention_factor`` seconds, so after the logical expiry
an entry lingers as a stale copy that callers may serve when a fresh
computation fails.

Write policy:

- provider-sourced entries always overwrite
- fallback-sourced entries live for ``ttl * fallback_ttl_factor`` and
  never overwrite a fresh provider entry for the same key

A cache outage is never fatal: store errors are logged and treated as a
miss (on read) or a no-op (on write).
"""

from __future__ import annotations

import math
import time
from typing import Any, Callable

import structlog
from pydantic import ValidationError

from mindmarks.interfaces.cache_provider import ICacheProvider
from mindmarks.models.cache import CacheEntry, CachePurpose, CacheSource
from mindmarks.utils.errors import StoreError
from mindmarks.utils.logging import get_logger


class ResultCache:
    """Content-addressed AI result cache.

    Parameters
    ----------
    cache:
        Backing key/value store; ``None`` disables caching.
    enabled:
        Capability flag resolved at startup.
    clock:
        Wall-clock source in epoch seconds.
    stale_retention_factor:
        Multiple of the logical TTL for which expired entries are kept.
    fallback_ttl_factor:
        Multiple of the logical TTL applied to fallback-sourced entries.
    """

    def __init__(
        self,
        cache: ICacheProvider | None,
        enabled: bool = True,
        clock: Callable[[], float] = time.time,
        stale_retention_factor: float = 4.0,
        fallback_ttl_factor: float = 0.5,
    ) -> None:
        self._cache = cache
        self._enabled = enabled and cache is not None
        self._clock = clock
        self._stale_retention_factor = max(1.0, stale_retention_factor)
        self._fallback_ttl_factor = fallback_ttl_factor
        self._logger: structlog.BoundLogger = get_logger(__name__)

    @property
    def enabled(self) -> bool:
        return self._enabled

    @staticmethod
    def key_for(fingerprint: str, purpose: CachePurpose) -> str:
        return f"{purpose.value}:{fingerprint}"

    def is_fresh(self, entry: CacheEntry) -> bool:
        return entry.is_fresh(self._clock())

    async def get(
        self,
        fingerprint: str,
        purpose: CachePurpose,
        allow_stale: bool = False,
    ) -> CacheEntry | None:
        """Return the entry for *fingerprint*/*purpose*.

        Expired entries are returned only when *allow_stale* is set; use
        :meth:`is_fresh` to tell them apart.
        """
        if not self._enabled:
            return None
        assert self._cache is not None
        key = self.key_for(fingerprint, purpose)
        try:
            raw = await self._cache.get(key)
        except StoreError as exc:
            self._logger.warning("result_cache_read_failed", purpose=purpose.value, error=str(exc))
            return None
        if raw is None:
            return None
        try:
            entry = CacheEntry.model_validate(raw)
        except ValidationError:
            self._logger.warning("result_cache_entry_invalid", purpose=purpose.value)
            return None
        if not allow_stale and not self.is_fresh(entry):
            return None
        return entry

    async def put(
        self,
        fingerprint: str,
        purpose: CachePurpose,
        payload: Any,
        source: CacheSource,
        ttl: int,
    ) -> CacheEntry | None:
        """Store *payload* and return the written entry.

        Returns ``None`` when caching is disabled, the store failed, or a
        fallback write was refused because a fresh provider entry exists.
        """
        if not self._enabled:
            return None
        assert self._cache is not None

        if source is CacheSource.FALLBACK:
            existing = await self.get(fingerprint, purpose)
            if existing is not None and existing.source is CacheSource.PROVIDER:
                self._logger.debug("fallback_write_skipped", purpose=purpose.value)
                return None
            ttl = max(1, int(ttl * self._fallback_ttl_factor))

        now = self._clock()
        entry = CacheEntry(payload=payload, created_at=now, expires_at=now + ttl, source=source)
        retention = math.ceil(ttl * self._stale_retention_factor)
        try:
            await self._cache.set(
                self.key_for(fingerprint, purpose),
                entry.model_dump(mode="json"),
                ttl=retention,
            )
        except StoreError as exc:
            self._logger.warning("result_cache_write_failed", purpose=purpose.value, error=str(exc))
            return None
        self._logger.debug(
            "result_cache_put",
            purpose=purpose.value,
            source=source.value,
            ttl=ttl,
            retention=retention,
        )
        return entry
