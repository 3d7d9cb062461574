"""Unit tests for EmbeddingService cache-backed vector generation."""

from __future__ import annotations

import asyncio
from typing import Any
from unittest.mock import AsyncMock

import pytest

from conftest import TEST_DIMENSION
from mindmarks.models.cache import CachePurpose, CacheSource, CacheStatus
from mindmarks.services.embedding_service import EmbeddingService
from mindmarks.utils.errors import EmbeddingError
from mindmarks.utils.vectors import text_to_vector


@pytest.fixture()
def service(result_cache, fallback_generator, mock_embedding_provider) -> EmbeddingService:
    return EmbeddingService(
        result_cache=result_cache,
        fallback=fallback_generator,
        embedding_provider=mock_embedding_provider,
        cache_ttl=1000,
    )


class TestEmbeddingService:
    def test_dimension_comes_from_provider(self, service: EmbeddingService) -> None:
        assert service.dimension == TEST_DIMENSION

    def test_dimension_without_provider(self, result_cache, fallback_generator) -> None:
        service = EmbeddingService(result_cache=result_cache, fallback=fallback_generator, dimension=64)
        assert service.dimension == 64

    def test_cache_key_is_normalized(self, service: EmbeddingService) -> None:
        assert service.cache_key_for("  Python ") == service.cache_key_for("python")
        assert service.cache_key_for("python").startswith("emb:")

    @pytest.mark.asyncio
    async def test_miss_then_hit(self, service: EmbeddingService, mock_embedding_provider) -> None:
        first = await service.get_embedding("Python")
        second = await service.get_embedding("  python  ")

        assert first.cache_status is CacheStatus.MISS
        assert second.cache_status is CacheStatus.HIT
        assert second.vector == first.vector
        assert second.cache_key == first.cache_key
        mock_embedding_provider.embed_single.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_provider_failure_uses_local_vector(
        self, service: EmbeddingService, mock_embedding_provider, result_cache
    ) -> None:
        mock_embedding_provider.embed_single = AsyncMock(side_effect=EmbeddingError("quota", "mock"))

        outcome = await service.get_embedding("rust ownership")

        assert outcome.cache_status is CacheStatus.FALLBACK
        assert outcome.vector == text_to_vector("rust ownership", TEST_DIMENSION)
        entry = await result_cache.get(outcome.cache_key, CachePurpose.EMBEDDING)
        assert entry is not None
        assert entry.source is CacheSource.FALLBACK

    @pytest.mark.asyncio
    async def test_timeout_uses_local_vector(
        self, result_cache, fallback_generator, mock_embedding_provider
    ) -> None:
        async def _slow(_text: str) -> list[float]:
            await asyncio.sleep(5)
            return [0.0] * TEST_DIMENSION

        mock_embedding_provider.embed_single = AsyncMock(side_effect=_slow)
        service = EmbeddingService(
            result_cache=result_cache,
            fallback=fallback_generator,
            embedding_provider=mock_embedding_provider,
            timeout_seconds=0.05,
        )

        outcome = await service.get_embedding("slow text")

        assert outcome.cache_status is CacheStatus.FALLBACK

    @pytest.mark.asyncio
    async def test_wrong_dimension_is_rejected(self, service: EmbeddingService, mock_embedding_provider) -> None:
        mock_embedding_provider.embed_single = AsyncMock(return_value=[1.0, 0.0])

        outcome = await service.get_embedding("short vector")

        assert outcome.cache_status is CacheStatus.FALLBACK
        assert len(outcome.vector) == TEST_DIMENSION

    @pytest.mark.asyncio
    async def test_stale_provider_vector_preferred_over_fallback(
        self, service: EmbeddingService, mock_embedding_provider, clock
    ) -> None:
        fresh = await service.get_embedding("graph databases")
        clock.advance(1500)
        mock_embedding_provider.embed_single = AsyncMock(side_effect=EmbeddingError("down", "mock"))

        outcome = await service.get_embedding("graph databases")

        assert outcome.cache_status is CacheStatus.STALE
        assert outcome.vector == fresh.vector

    @pytest.mark.asyncio
    async def test_recovered_provider_replaces_fallback_vector(
        self, service: EmbeddingService, mock_embedding_provider, clock
    ) -> None:
        original: Any = mock_embedding_provider.embed_single.side_effect
        mock_embedding_provider.embed_single = AsyncMock(side_effect=EmbeddingError("down", "mock"))
        await service.get_embedding("vector clocks")

        # Fallback entries live for half the TTL.
        clock.advance(501)
        mock_embedding_provider.embed_single = AsyncMock(side_effect=original)
        outcome = await service.get_embedding("vector clocks")

        assert outcome.cache_status is CacheStatus.MISS

    @pytest.mark.asyncio
    async def test_no_provider_always_falls_back(self, result_cache, fallback_generator) -> None:
        service = EmbeddingService(result_cache=result_cache, fallback=fallback_generator, dimension=8)

        outcome = await service.get_embedding("anything")

        assert outcome.cache_status is CacheStatus.FALLBACK
        assert len(outcome.vector) == 8
