"""YAML configuration loader with environment variable overrides.

Configuration is loaded in layers (later layers override earlier):

  1. config/config.yaml  -- static defaults checked into the repo
  2. .env file           -- local developer overrides (not committed)
  3. Environment vars    -- set at deploy time

``load_config()`` reads the YAML file first, then deep-merges the
Settings-derived values on top, so an env var always wins over YAML.
"""

from pathlib import Path

import yaml

from mindmarks.config.settings import Settings


def load_config(path: str = "config/config.yaml", settings: Settings | None = None) -> dict:
    """Load YAML config and merge with environment-based Settings.

    Args:
        path: Path to the YAML configuration file.
        settings: Settings to overlay; a fresh ``Settings()`` when omitted.

    Returns:
        Fully resolved configuration dictionary.
    """
    config_path = Path(path)
    if config_path.exists():
        with open(config_path) as f:
            yaml_config = yaml.safe_load(f) or {}
    else:
        yaml_config = {}

    settings = settings or Settings()
    env_overrides = {
        "app": {
            "host": settings.app_host,
            "port": settings.app_port,
            "env": settings.app_env,
        },
        "llm": {
            "available_providers": settings.get_available_llm_providers(),
            "timeout_seconds": settings.provider_timeout_seconds,
        },
        "rate_limit": {
            "enabled": settings.rate_limiting_enabled,
            "max_requests": settings.max_requests_per_window,
            "window_seconds": settings.rate_window_seconds,
            "min_interval_seconds": settings.min_request_interval_seconds,
        },
        "cache": {
            "enabled": settings.caching_enabled,
            "backend": "redis" if settings.redis_url else "memory",
            "analysis_ttl": settings.analysis_cache_ttl,
            "embedding_ttl": settings.embedding_cache_ttl,
        },
        "search": {
            "similarity_threshold": settings.search_similarity_threshold,
            "max_results": settings.search_max_results,
        },
        "logging": {
            "level": settings.log_level,
        },
    }

    _deep_merge(yaml_config, env_overrides)
    return yaml_config


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
