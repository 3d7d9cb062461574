"""Shared pytest fixtures for the Mindmarks test suite."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from mindmarks.interfaces.embedding_provider import IEmbeddingProvider
from mindmarks.interfaces.llm_provider import ILLMProvider
from mindmarks.providers.cache.memory_cache import MemoryCacheProvider
from mindmarks.providers.counter.memory_counter import MemoryCounterStore
from mindmarks.providers.store.sqlite_row_store import SQLiteRowStore
from mindmarks.services.fallback_generator import LocalFallbackGenerator
from mindmarks.services.rate_limiter import RateLimiter
from mindmarks.services.result_cache import ResultCache
from mindmarks.utils.vectors import text_to_vector

TEST_DIMENSION = 16

SAMPLE_SUMMARY = "The note compares event sourcing with CRUD persistence."

SAMPLE_GRAPH: dict[str, Any] = {
    "concepts": [
        {"id": "concept-1", "label": "Event sourcing", "theme": "technology", "importance": 3},
        {"id": "concept-2", "label": "Audit trail", "theme": "business", "importance": 2},
        {"id": "concept-3", "label": "Storage cost", "theme": "business", "importance": 1},
    ],
    "relationships": [
        {"source": "concept-1", "target": "concept-2", "label": "enables"},
        {"source": "concept-1", "target": "concept-3", "label": "increases"},
    ],
}


class FakeClock:
    """Manually advanced wall clock (epoch seconds)."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_scripted_llm(
    summary: str | Exception = SAMPLE_SUMMARY,
    graph: str | Exception | None = None,
) -> MagicMock:
    """Mock ILLMProvider answering summary and concept-map prompts separately.

    The concept-map prompt is recognised by its JSON instructions; any
    other prompt gets the summary.  Exceptions are raised instead of
    returned.
    """
    graph_reply: str | Exception = json.dumps(SAMPLE_GRAPH) if graph is None else graph

    async def _complete(system_prompt: str, user_prompt: str, **_: Any) -> str:
        reply = graph_reply if "JSON" in system_prompt else summary
        if isinstance(reply, Exception):
            raise reply
        return reply

    mock = MagicMock(spec=ILLMProvider)
    mock.get_provider_name.return_value = "mock-llm"
    mock.is_available.return_value = True
    mock.complete = AsyncMock(side_effect=_complete)
    return mock


# ---------------------------------------------------------------------------
# Clock and stores
# ---------------------------------------------------------------------------


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def counter_store(clock: FakeClock) -> MemoryCounterStore:
    return MemoryCounterStore(clock=clock)


@pytest.fixture()
def cache_provider(clock: FakeClock) -> MemoryCacheProvider:
    return MemoryCacheProvider(max_size=500, ttl=3600, timer=clock)


@pytest.fixture()
def rate_limiter(counter_store: MemoryCounterStore, clock: FakeClock) -> RateLimiter:
    return RateLimiter(
        store=counter_store,
        enabled=True,
        max_requests=10,
        window_seconds=3600,
        min_interval_seconds=10,
        clock=clock,
    )


@pytest.fixture()
def result_cache(cache_provider: MemoryCacheProvider, clock: FakeClock) -> ResultCache:
    return ResultCache(
        cache=cache_provider,
        enabled=True,
        clock=clock,
        stale_retention_factor=4.0,
        fallback_ttl_factor=0.5,
    )


@pytest.fixture()
def fallback_generator() -> LocalFallbackGenerator:
    return LocalFallbackGenerator(seed=42)


@pytest.fixture()
async def row_store(tmp_path: Path) -> SQLiteRowStore:
    """SQLiteRowStore backed by a temp-file database."""
    store = SQLiteRowStore(db_path=tmp_path / "mindmarks-test.db")
    await store.initialize()
    return store


# ---------------------------------------------------------------------------
# Mock providers
# ---------------------------------------------------------------------------


@pytest.fixture()
def mock_llm_provider() -> MagicMock:
    """Scripted LLM returning SAMPLE_SUMMARY and SAMPLE_GRAPH."""
    return make_scripted_llm()


@pytest.fixture()
def mock_embedding_provider() -> MagicMock:
    """Mock IEmbeddingProvider folding text into TEST_DIMENSION-length vectors."""

    async def _embed_single(text: str) -> list[float]:
        return text_to_vector(text.lower(), TEST_DIMENSION)

    mock = MagicMock(spec=IEmbeddingProvider)
    mock.get_provider_name.return_value = "mock-embedding"
    mock.is_available.return_value = True
    mock.get_dimension.return_value = TEST_DIMENSION
    mock.embed_single = AsyncMock(side_effect=_embed_single)
    return mock
