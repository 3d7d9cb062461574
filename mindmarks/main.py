"""Mindmarks FastAPI application entry point.

Wires together all providers, services, and routes via dependency
injection.  Loads configuration from ``.env`` and ``config/config.yaml``
and configures structured logging.

Capability flags (rate limiting, caching) are resolved once in
:func:`build_services`; the services receive plain ``enabled`` booleans.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import httpx
import structlog
import uvicorn
from fastapi import FastAPI

from mindmarks import __version__
from mindmarks.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
    install_exception_handlers,
)
from mindmarks.api.routes import router as api_router
from mindmarks.config.loader import load_config
from mindmarks.config.settings import Settings
from mindmarks.interfaces.cache_provider import ICacheProvider
from mindmarks.interfaces.counter_store import ICounterStore
from mindmarks.interfaces.embedding_provider import IEmbeddingProvider
from mindmarks.interfaces.llm_provider import ILLMProvider
from mindmarks.providers.cache.memory_cache import MemoryCacheProvider
from mindmarks.providers.cache.redis_cache import RedisCacheProvider
from mindmarks.providers.counter.memory_counter import MemoryCounterStore
from mindmarks.providers.counter.redis_counter import RedisCounterStore
from mindmarks.providers.embedding.llm_digest_embedding_provider import LLMDigestEmbeddingProvider
from mindmarks.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider
from mindmarks.providers.llm.anthropic_provider import AnthropicLLMProvider
from mindmarks.providers.llm.openai_provider import OpenAILLMProvider
from mindmarks.providers.store.sqlite_row_store import SQLiteRowStore
from mindmarks.services.analysis_service import AnalysisOrchestrator
from mindmarks.services.embedding_service import EmbeddingService
from mindmarks.services.fallback_generator import LocalFallbackGenerator
from mindmarks.services.fingerprint import ContentFingerprinter
from mindmarks.services.rate_limiter import RateLimiter
from mindmarks.services.result_cache import ResultCache
from mindmarks.services.search_service import SearchOrchestrator
from mindmarks.utils.logging import configure_logging, get_logger

# ---------------------------------------------------------------------------
# Module-level settings & logging
# ---------------------------------------------------------------------------

settings = Settings()
config = load_config(settings=settings)

configure_logging(
    log_level=settings.log_level,
    json_output=(settings.app_env == "production"),
)
_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Provider selection
# ---------------------------------------------------------------------------


def _build_llm_provider(
    app_settings: Settings,
    http_client: httpx.AsyncClient | None = None,
) -> ILLMProvider | None:
    """Select the first configured LLM provider.

    Priority order: Anthropic -> OpenAI.  Returns ``None`` when neither
    has a key, in which case every analysis is produced locally.
    """
    if app_settings.anthropic_api_key:
        return AnthropicLLMProvider(settings=app_settings, http_client=http_client)
    if app_settings.openai_api_key:
        return OpenAILLMProvider(settings=app_settings, http_client=http_client)
    return None


def _build_embedding_provider(
    app_settings: Settings,
    llm_provider: ILLMProvider | None,
    http_client: httpx.AsyncClient | None = None,
) -> IEmbeddingProvider | None:
    """Select the embedding provider.

    Priority: OpenAI embeddings (if an OpenAI key is set) -> LLM digest
    pseudo-embeddings (if any LLM is configured) -> ``None``.
    """
    if app_settings.openai_api_key:
        return OpenAIEmbeddingProvider(settings=app_settings, http_client=http_client)
    if llm_provider is not None:
        return LLMDigestEmbeddingProvider(llm=llm_provider, dimension=app_settings.embedding_dimension)
    return None


def _build_stores(app_settings: Settings) -> tuple[ICounterStore, ICacheProvider]:
    """Shared Redis stores when ``REDIS_URL`` is set, in-process stores otherwise."""
    if app_settings.redis_url:
        return (
            RedisCounterStore.from_url(app_settings.redis_url),
            RedisCacheProvider.from_url(app_settings.redis_url, ttl=app_settings.analysis_cache_ttl),
        )
    return (
        MemoryCounterStore(),
        MemoryCacheProvider(
            max_size=app_settings.memory_cache_max_size,
            ttl=app_settings.analysis_cache_ttl,
        ),
    )


# ---------------------------------------------------------------------------
# Full DI assembly for the FastAPI application
# ---------------------------------------------------------------------------


def build_services(app_settings: Settings, app_config: dict | None = None) -> dict[str, Any]:
    """Construct every provider and service instance for the application.

    Returns a flat dict of named components to be stored on ``app.state``.
    """
    app_config = app_config or {}
    llm_config = app_config.get("llm", {})
    fallback_config = app_config.get("fallback", {})

    # -- Shared resources --
    http_client = httpx.AsyncClient(timeout=app_settings.provider_timeout_seconds)
    row_store = SQLiteRowStore(db_path=app_settings.database_path)
    counter_store, cache_provider = _build_stores(app_settings)

    # -- AI providers --
    llm_provider = _build_llm_provider(app_settings, http_client)
    embedding_provider = _build_embedding_provider(app_settings, llm_provider, http_client)

    # -- Capability flags (resolved once) --
    capabilities = {
        "rate_limiting": app_settings.rate_limiting_enabled,
        "caching": app_settings.caching_enabled,
        "llm": llm_provider is not None and llm_provider.is_available(),
        "embeddings": embedding_provider is not None and embedding_provider.is_available(),
    }

    # -- Services --
    fingerprinter = ContentFingerprinter()
    fallback = LocalFallbackGenerator(
        topics=fallback_config.get("summary_topics"),
        relationship_labels=fallback_config.get("relationship_labels"),
    )
    rate_limiter = RateLimiter(
        store=counter_store,
        enabled=capabilities["rate_limiting"],
        max_requests=app_settings.max_requests_per_window,
        window_seconds=app_settings.rate_window_seconds,
        min_interval_seconds=app_settings.min_request_interval_seconds,
    )
    result_cache = ResultCache(
        cache=cache_provider,
        enabled=capabilities["caching"],
        stale_retention_factor=app_settings.stale_retention_factor,
        fallback_ttl_factor=app_settings.fallback_ttl_factor,
    )
    analysis_service = AnalysisOrchestrator(
        rate_limiter=rate_limiter,
        result_cache=result_cache,
        fallback=fallback,
        llm_provider=llm_provider,
        row_store=row_store,
        fingerprinter=fingerprinter,
        max_content_length=app_settings.max_content_length,
        timeout_seconds=app_settings.provider_timeout_seconds,
        cache_ttl=app_settings.analysis_cache_ttl,
        temperature=float(llm_config.get("temperature", 0.3)),
        max_tokens=int(llm_config.get("max_tokens", 2000)),
    )
    embedding_service = EmbeddingService(
        result_cache=result_cache,
        fallback=fallback,
        embedding_provider=embedding_provider,
        fingerprinter=fingerprinter,
        dimension=app_settings.embedding_dimension,
        timeout_seconds=app_settings.provider_timeout_seconds,
        cache_ttl=app_settings.embedding_cache_ttl,
    )
    search_service = SearchOrchestrator(
        row_store=row_store,
        embeddings=embedding_service,
        similarity_threshold=app_settings.search_similarity_threshold,
        max_results=app_settings.search_max_results,
    )

    return {
        "http_client": http_client,
        "row_store": row_store,
        "counter_store": counter_store,
        "cache_provider": cache_provider,
        "llm_provider": llm_provider,
        "embedding_provider": embedding_provider,
        "rate_limiter": rate_limiter,
        "result_cache": result_cache,
        "analysis_service": analysis_service,
        "embedding_service": embedding_service,
        "search_service": search_service,
        "capabilities": capabilities,
    }


# ---------------------------------------------------------------------------
# Application lifespan (startup / shutdown)
# ---------------------------------------------------------------------------


@asynccontextmanager
async def _lifespan(application: FastAPI):  # noqa: ANN201
    """Initialise all providers and services on startup, clean up on shutdown."""
    app_settings: Settings = application.state.settings
    components = build_services(app_settings, config)

    for key, value in components.items():
        setattr(application.state, key, value)

    await components["row_store"].initialize()

    _logger.info(
        "app_startup",
        version=__version__,
        environment=app_settings.app_env,
        llm=components["llm_provider"].get_provider_name() if components["llm_provider"] else None,
        capabilities=components["capabilities"],
    )

    yield

    # -- Shutdown: close shared clients --
    for name in ("counter_store", "cache_provider"):
        close = getattr(components[name], "close", None)
        if close is not None:
            await close()
    http_client: httpx.AsyncClient = components["http_client"]
    await http_client.aclose()
    _logger.info("app_shutdown", message="Clients closed")


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app(app_settings: Settings | None = None) -> FastAPI:
    """Build and configure the FastAPI application."""
    application = FastAPI(
        title="Mindmarks API",
        version=__version__,
        description=(
            "AI summaries and concept graphs for notes, plus text-first "
            "semantic search over notes and bookmarks."
        ),
        lifespan=_lifespan,
    )
    application.state.settings = app_settings or settings

    # -- Middleware (order matters: last added = first executed) --
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(application, allowed_origins=config.get("app", {}).get("cors_origins"))
    install_exception_handlers(application)

    # -- API routes --
    application.include_router(api_router)

    return application


app = create_app()

# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    uvicorn.run(
        "mindmarks.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=(settings.app_env == "development"),
    )
