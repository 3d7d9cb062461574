"""Redis-backed cache provider.

Stores JSON-serialised values with ``SET key value EX ttl`` so every
process behind the load balancer shares the same analysis and embedding
results.  Uses the asyncio client from ``redis``.
"""

from __future__ import annotations

import json
from typing import Any

import redis.asyncio as aioredis
import structlog
from redis.exceptions import RedisError

from mindmarks.interfaces.cache_provider import ICacheProvider
from mindmarks.utils.errors import StoreError

logger = structlog.get_logger(logger_name=__name__)

_KEY_PREFIX = "mindmarks:cache:"


class RedisCacheProvider(ICacheProvider):
    """Cache provider backed by a Redis server.

    Parameters
    ----------
    client:
        A ``redis.asyncio.Redis`` client created with
        ``decode_responses=True``.  Use :meth:`from_url` in production.
    ttl:
        Default time-to-live in seconds for entries stored without one.
    """

    def __init__(self, client: aioredis.Redis, ttl: int = 3600) -> None:
        self._client = client
        self._default_ttl = ttl

    @classmethod
    def from_url(cls, url: str, ttl: int = 3600, socket_timeout: float = 2.0) -> "RedisCacheProvider":
        client = aioredis.Redis.from_url(url, decode_responses=True, socket_timeout=socket_timeout)
        return cls(client=client, ttl=ttl)

    async def get(self, key: str) -> Any | None:
        try:
            raw = await self._client.get(_KEY_PREFIX + key)
        except RedisError as exc:
            raise StoreError(f"Redis GET failed: {exc}", provider_name="redis") from exc
        if raw is None:
            logger.debug("cache_miss", key=key)
            return None
        logger.debug("cache_hit", key=key)
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("cache_value_undecodable", key=key)
            return None

    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        effective_ttl = ttl if ttl is not None else self._default_ttl
        try:
            await self._client.set(_KEY_PREFIX + key, json.dumps(value), ex=max(1, int(effective_ttl)))
        except RedisError as exc:
            raise StoreError(f"Redis SET failed: {exc}", provider_name="redis") from exc
        logger.debug("cache_set", key=key, ttl=effective_ttl)

    async def delete(self, key: str) -> None:
        try:
            await self._client.delete(_KEY_PREFIX + key)
        except RedisError as exc:
            raise StoreError(f"Redis DEL failed: {exc}", provider_name="redis") from exc

    async def exists(self, key: str) -> bool:
        try:
            return bool(await self._client.exists(_KEY_PREFIX + key))
        except RedisError as exc:
            raise StoreError(f"Redis EXISTS failed: {exc}", provider_name="redis") from exc

    async def close(self) -> None:
        await self._client.aclose()
