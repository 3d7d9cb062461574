"""Utility modules for Mindmarks.

- **errors** -- Domain exception hierarchy rooted at MindmarksError; each
  class carries the HTTP status the API layer should answer with.
- **json_extract** -- Best-effort parser that pulls the first JSON object
  out of noisy LLM output (fences, prose, trailing commas).
- **logging** -- structlog setup with a dual-renderer pattern: coloured
  console output in development, structured JSON in production.
- **vectors** -- numpy helpers: text folding into unit vectors and cosine
  similarity.
"""

from mindmarks.utils.errors import (
    AuthenticationError,
    ClientError,
    ConfigurationError,
    ContentTooLargeError,
    EmbeddingError,
    EntityNotFoundError,
    InvalidContentError,
    LLMError,
    MalformedOutputError,
    MindmarksError,
    ProviderError,
    ProviderTimeoutError,
    ProviderUnavailableError,
    QuotaError,
    RateLimitedError,
    StoreError,
)
from mindmarks.utils.json_extract import extract_json_object
from mindmarks.utils.logging import configure_logging, get_logger
from mindmarks.utils.vectors import cosine_similarity, text_to_vector

__all__ = [
    "AuthenticationError",
    "ClientError",
    "ConfigurationError",
    "ContentTooLargeError",
    "EmbeddingError",
    "EntityNotFoundError",
    "InvalidContentError",
    "LLMError",
    "MalformedOutputError",
    "MindmarksError",
    "ProviderError",
    "ProviderTimeoutError",
    "ProviderUnavailableError",
    "QuotaError",
    "RateLimitedError",
    "StoreError",
    "configure_logging",
    "cosine_similarity",
    "extract_json_object",
    "get_logger",
    "text_to_vector",
]
