"""Counter store adapters for rate limiting.

Two concrete implementations of ICounterStore
(mindmarks/interfaces/counter_store.py):
    - MemoryCounterStore -- lock-guarded dict, single process
    - RedisCounterStore  -- atomic INCR on a shared Redis server
"""

from mindmarks.providers.counter.memory_counter import MemoryCounterStore
from mindmarks.providers.counter.redis_counter import RedisCounterStore

__all__ = ["MemoryCounterStore", "RedisCounterStore"]
