"""Redis-backed counter store.

``INCR`` is atomic on the server, so concurrent requests from the same
user never under-count a rate-limit window even across processes.
"""

from __future__ import annotations

import redis.asyncio as aioredis
import structlog
from redis.exceptions import RedisError

from mindmarks.interfaces.counter_store import ICounterStore
from mindmarks.utils.errors import StoreError

logger = structlog.get_logger(logger_name=__name__)


class RedisCounterStore(ICounterStore):
    """Counter store backed by a Redis server.

    Parameters
    ----------
    client:
        A ``redis.asyncio.Redis`` client created with ``decode_responses=True``.
    """

    def __init__(self, client: aioredis.Redis) -> None:
        self._client = client

    @classmethod
    def from_url(cls, url: str, socket_timeout: float = 2.0) -> "RedisCounterStore":
        client = aioredis.Redis.from_url(url, decode_responses=True, socket_timeout=socket_timeout)
        return cls(client=client)

    async def get(self, key: str) -> str | None:
        try:
            return await self._client.get(key)
        except RedisError as exc:
            raise StoreError(f"Redis GET failed: {exc}", provider_name="redis") from exc

    async def set(self, key: str, value: str | int | float, ttl: int | None = None) -> None:
        try:
            await self._client.set(key, value, ex=ttl)
        except RedisError as exc:
            raise StoreError(f"Redis SET failed: {exc}", provider_name="redis") from exc

    async def incr(self, key: str) -> int:
        try:
            return int(await self._client.incr(key))
        except RedisError as exc:
            raise StoreError(f"Redis INCR failed: {exc}", provider_name="redis") from exc

    async def expire(self, key: str, ttl: int, only_if_unset: bool = False) -> None:
        try:
            if only_if_unset:
                await self._client.expire(key, ttl, nx=True)
            else:
                await self._client.expire(key, ttl)
        except RedisError as exc:
            raise StoreError(f"Redis EXPIRE failed: {exc}", provider_name="redis") from exc

    async def ttl(self, key: str) -> int | None:
        try:
            remaining = await self._client.ttl(key)
        except RedisError as exc:
            raise StoreError(f"Redis TTL failed: {exc}", provider_name="redis") from exc
        # -2: key missing, -1: key without expiry.
        if remaining is None or remaining < 0:
            return None
        return int(remaining)

    def get_provider_name(self) -> str:
        return "redis_counter"

    async def close(self) -> None:
        await self._client.aclose()
