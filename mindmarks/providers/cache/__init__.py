"""Cache provider adapters.

Two concrete implementations of ICacheProvider
(mindmarks/interfaces/cache_provider.py):
    - MemoryCacheProvider -- cachetools TLRUCache, single process
    - RedisCacheProvider  -- shared Redis server, JSON values
"""

from mindmarks.providers.cache.memory_cache import MemoryCacheProvider
from mindmarks.providers.cache.redis_cache import RedisCacheProvider

__all__ = ["MemoryCacheProvider", "RedisCacheProvider"]
