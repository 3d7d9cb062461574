"""Public interface definitions for all external collaborators.

Every external service Mindmarks depends on -- AI providers, the counter
store behind rate limiting, the result cache, and the relational row
store -- is accessed exclusively through the abstract base classes in this
package.  Concrete adapters live in ``mindmarks/providers/`` and are
constructed once in ``mindmarks/main.py``, then injected into the services.

CONCRETE PROVIDER MAP:
    Interface            ->  Concrete implementations (in mindmarks/providers/)
    -------------------------------------------------------------------------
    ILLMProvider         ->  OpenAILLMProvider, AnthropicLLMProvider
    IEmbeddingProvider   ->  OpenAIEmbeddingProvider, LLMDigestEmbeddingProvider
    ICacheProvider       ->  MemoryCacheProvider, RedisCacheProvider
    ICounterStore        ->  MemoryCounterStore, RedisCounterStore
    IRowStore            ->  SQLiteRowStore
"""

from mindmarks.interfaces.cache_provider import ICacheProvider
from mindmarks.interfaces.counter_store import ICounterStore
from mindmarks.interfaces.embedding_provider import IEmbeddingProvider
from mindmarks.interfaces.llm_provider import ILLMProvider
from mindmarks.interfaces.row_store import IRowStore

__all__ = [
    "ICacheProvider",
    "ICounterStore",
    "IEmbeddingProvider",
    "ILLMProvider",
    "IRowStore",
]
