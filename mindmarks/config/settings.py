"""Application settings loaded from environment variables via pydantic-settings.

Values are read from (highest priority first):

  1. Environment variables, e.g. ``OPENAI_API_KEY=sk-abc123``
  2. The ``.env`` file in the working directory
  3. The defaults declared on the fields below

Field ``openai_api_key`` maps to env var ``OPENAI_API_KEY``; pydantic-settings
matches case-insensitively.  ``.env`` is git-ignored; ``.env.example``
lists every supported variable.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Mindmarks application settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === AI Providers ===
    # Empty string = "not configured"; the builder in main.py skips
    # providers with empty keys and the orchestrators fall back locally.
    openai_api_key: str = ""
    openai_base_url: str = ""
    openai_text_model: str = ""
    openai_embedding_model: str = ""
    anthropic_api_key: str = ""
    anthropic_model: str = ""
    provider_timeout_seconds: float = 20.0

    # === Stores ===
    # REDIS_URL set -> shared Redis counters and cache; unset -> in-process stores.
    redis_url: str = ""
    database_path: str = "data/mindmarks.db"

    # === Capability flags ===
    rate_limiting_enabled: bool = True
    caching_enabled: bool = True

    # === Admission control ===
    max_requests_per_window: int = 10
    rate_window_seconds: int = 3600
    min_request_interval_seconds: int = 10
    max_content_length: int = 10000

    # === Result cache ===
    analysis_cache_ttl: int = 24 * 60 * 60
    embedding_cache_ttl: int = 7 * 24 * 60 * 60
    # Fallback-sourced entries live for ttl * factor.
    fallback_ttl_factor: float = 0.5
    # Entries are physically retained for ttl * factor so stale copies
    # remain available when the provider fails.
    stale_retention_factor: float = 4.0
    memory_cache_max_size: int = 5000

    # === Search ===
    search_similarity_threshold: float = 0.45
    search_max_results: int = 10
    embedding_dimension: int = 1536

    # === Auth ===
    # Empty secret = development mode: the X-User-Id header is trusted.
    auth_secret: str = ""
    auth_token_ttl_hours: int = 168

    # === App Config ===
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    app_env: str = "development"
    log_level: str = "INFO"

    def get_available_llm_providers(self) -> list[str]:
        """Return LLM provider names that have non-empty API keys configured."""
        providers: list[str] = []
        if self.anthropic_api_key:
            providers.append("anthropic")
        if self.openai_api_key:
            providers.append("openai")
        return providers
