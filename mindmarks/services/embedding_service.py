"""Cache-backed embedding generation.

Applies the same two-tier degradation as note analysis, to vectors:
live cache -> embedding provider -> stale cache -> local folded vector.
Locally generated vectors are cached as ``fallback`` entries, which the
result cache keeps for half the normal TTL so a recovered provider
replaces them sooner.
"""

from __future__ import annotations

import asyncio

import structlog

from mindmarks.interfaces.embedding_provider import IEmbeddingProvider
from mindmarks.models.cache import CachePurpose, CacheSource, CacheStatus
from mindmarks.models.search import EmbeddingOutcome
from mindmarks.services.fallback_generator import LocalFallbackGenerator
from mindmarks.services.fingerprint import ContentFingerprinter
from mindmarks.services.result_cache import ResultCache
from mindmarks.utils.errors import (
    EmbeddingError,
    ProviderError,
    ProviderTimeoutError,
    ProviderUnavailableError,
)
from mindmarks.utils.logging import get_logger


class EmbeddingService:
    """Fetch-or-compute embeddings keyed by normalised text."""

    def __init__(
        self,
        result_cache: ResultCache,
        fallback: LocalFallbackGenerator,
        embedding_provider: IEmbeddingProvider | None = None,
        fingerprinter: ContentFingerprinter | None = None,
        dimension: int = 1536,
        timeout_seconds: float = 20.0,
        cache_ttl: int = 7 * 24 * 60 * 60,
    ) -> None:
        self._cache = result_cache
        self._fallback = fallback
        self._provider = embedding_provider
        self._fingerprinter = fingerprinter or ContentFingerprinter()
        self._dimension = (
            embedding_provider.get_dimension() if embedding_provider is not None else dimension
        )
        self._timeout = timeout_seconds
        self._cache_ttl = cache_ttl
        self._logger: structlog.BoundLogger = get_logger(__name__)

    @property
    def dimension(self) -> int:
        return self._dimension

    def cache_key_for(self, text: str) -> str:
        return self._fingerprinter.fingerprint(text, scope="emb", normalize=True)

    async def get_embedding(self, text: str) -> EmbeddingOutcome:
        """Return a vector for *text*; never raises for provider failures."""
        cache_key = self.cache_key_for(text)
        entry = await self._cache.get(cache_key, CachePurpose.EMBEDDING, allow_stale=True)

        if entry is not None and self._cache.is_fresh(entry):
            self._logger.debug("embedding_cache_hit", cache_key=cache_key[:16], source=entry.source.value)
            return EmbeddingOutcome(vector=entry.payload, cache_key=cache_key, cache_status=CacheStatus.HIT)

        try:
            vector = await self._embed(text)
        except ProviderError as exc:
            self._logger.warning(
                "provider_call_failed",
                piece="embedding",
                error_type=type(exc).__name__,
                error=exc.message,
                provider=exc.provider_name,
            )
        else:
            await self._cache.put(
                cache_key, CachePurpose.EMBEDDING, vector, CacheSource.PROVIDER, self._cache_ttl
            )
            return EmbeddingOutcome(vector=vector, cache_key=cache_key, cache_status=CacheStatus.MISS)

        if entry is not None and entry.source is CacheSource.PROVIDER:
            self._logger.info("stale_cache_served", piece="embedding", cache_key=cache_key[:16])
            return EmbeddingOutcome(vector=entry.payload, cache_key=cache_key, cache_status=CacheStatus.STALE)

        vector = self._fallback.embedding(text, self._dimension)
        self._logger.info("fallback_used", piece="embedding", cache_key=cache_key[:16], text_length=len(text))
        await self._cache.put(
            cache_key, CachePurpose.EMBEDDING, vector, CacheSource.FALLBACK, self._cache_ttl
        )
        return EmbeddingOutcome(vector=vector, cache_key=cache_key, cache_status=CacheStatus.FALLBACK)

    async def _embed(self, text: str) -> list[float]:
        if self._provider is None or not self._provider.is_available():
            raise ProviderUnavailableError("No embedding provider configured")
        try:
            vector = await asyncio.wait_for(self._provider.embed_single(text), timeout=self._timeout)
        except asyncio.TimeoutError as exc:
            raise ProviderTimeoutError(
                f"Embedding call exceeded {self._timeout}s",
                provider_name=self._provider.get_provider_name(),
            ) from exc
        if len(vector) != self._dimension:
            raise EmbeddingError(
                f"Expected {self._dimension} dimensions, got {len(vector)}",
                provider_name=self._provider.get_provider_name(),
            )
        return [float(v) for v in vector]
