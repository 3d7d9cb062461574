"""Embedding provider adapters.

    - OpenAIEmbeddingProvider    -- true embedding endpoint
    - LLMDigestEmbeddingProvider -- hashes an LLM concept digest into a vector
"""

from mindmarks.providers.embedding.llm_digest_embedding_provider import LLMDigestEmbeddingProvider
from mindmarks.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider

__all__ = ["LLMDigestEmbeddingProvider", "OpenAIEmbeddingProvider"]
