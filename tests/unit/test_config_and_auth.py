"""Unit tests for settings, YAML config loading and bearer tokens."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from mindmarks.api.auth import create_access_token, verify_access_token
from mindmarks.config.loader import load_config
from mindmarks.config.settings import Settings


class TestSettings:
    def test_env_overrides_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MAX_REQUESTS_PER_WINDOW", "25")
        monkeypatch.setenv("RATE_LIMITING_ENABLED", "false")

        settings = Settings(_env_file=None)

        assert settings.max_requests_per_window == 25
        assert settings.rate_limiting_enabled is False

    def test_available_llm_providers(self) -> None:
        settings = Settings(_env_file=None, anthropic_api_key="a", openai_api_key="o")
        assert settings.get_available_llm_providers() == ["anthropic", "openai"]
        assert Settings(_env_file=None, anthropic_api_key="", openai_api_key="").get_available_llm_providers() == []


class TestLoadConfig:
    def test_yaml_values_with_settings_overlay(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            "app:\n  name: mindmarks\n  cors_origins: ['https://app.example']\n"
            "rate_limit:\n  max_requests: 3\n"
            "fallback:\n  summary_topics: [focus]\n"
        )
        settings = Settings(_env_file=None, max_requests_per_window=7, redis_url="redis://localhost:6379/0")

        config = load_config(str(config_file), settings=settings)

        assert config["app"]["name"] == "mindmarks"
        assert config["app"]["cors_origins"] == ["https://app.example"]
        assert config["rate_limit"]["max_requests"] == 7
        assert config["cache"]["backend"] == "redis"
        assert config["fallback"]["summary_topics"] == ["focus"]

    def test_shipped_yaml_holds_no_settings_backed_keys(self) -> None:
        config_file = Path(__file__).resolve().parents[2] / "config" / "config.yaml"
        raw = yaml.safe_load(config_file.read_text())

        merged = load_config(str(config_file), settings=Settings(_env_file=None))

        for section, values in raw.items():
            for key, value in values.items():
                assert merged[section][key] == value, f"{section}.{key} is overwritten by Settings"

    @pytest.mark.asyncio
    async def test_yaml_values_reach_services(self, tmp_path: Path) -> None:
        from mindmarks.main import build_services

        settings = Settings(
            _env_file=None,
            openai_api_key="",
            anthropic_api_key="",
            redis_url="",
            database_path=str(tmp_path / "app.db"),
        )
        components = build_services(settings, {"fallback": {"summary_topics": ["focus"]}})
        try:
            outcome = await components["analysis_service"].analyze("word " * 60, "u1")
        finally:
            await components["http_client"].aclose()

        assert "focus on focus" in outcome.result.summary

    def test_missing_file_uses_settings_only(self, tmp_path: Path) -> None:
        config = load_config(str(tmp_path / "absent.yaml"), settings=Settings(_env_file=None, redis_url=""))
        assert config["cache"]["backend"] == "memory"
        assert "fallback" not in config


class TestAccessTokens:
    SECRET = "s3cret"

    def test_round_trip(self) -> None:
        token = create_access_token("user-1", self.SECRET, issued_at=1_000)
        assert verify_access_token(token, self.SECRET, now=1_000 + 60) == "user-1"

    def test_user_id_may_contain_colons(self) -> None:
        token = create_access_token("tenant:user", self.SECRET, issued_at=1_000)
        assert verify_access_token(token, self.SECRET, now=1_001) == "tenant:user"

    def test_expired(self) -> None:
        token = create_access_token("user-1", self.SECRET, issued_at=1_000)
        assert verify_access_token(token, self.SECRET, ttl_hours=1, now=1_000 + 3601) is None

    def test_wrong_secret(self) -> None:
        token = create_access_token("user-1", self.SECRET, issued_at=1_000)
        assert verify_access_token(token, "other", now=1_001) is None

    def test_tampered_user(self) -> None:
        token = create_access_token("user-1", self.SECRET, issued_at=1_000)
        forged = "user-2" + token[len("user-1"):]
        assert verify_access_token(forged, self.SECRET, now=1_001) is None

    @pytest.mark.parametrize("token", ["", "garbage", "a:b", "u:notanumber:abc", ":1000:abc"])
    def test_malformed(self, token: str) -> None:
        assert verify_access_token(token, self.SECRET, now=1_001) is None


class TestProviderSelection:
    def test_anthropic_preferred_over_openai(self) -> None:
        from mindmarks.main import _build_embedding_provider, _build_llm_provider
        from mindmarks.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider
        from mindmarks.providers.llm.anthropic_provider import AnthropicLLMProvider

        settings = Settings(_env_file=None, anthropic_api_key="a", openai_api_key="o")

        llm = _build_llm_provider(settings)

        assert isinstance(llm, AnthropicLLMProvider)
        assert isinstance(_build_embedding_provider(settings, llm), OpenAIEmbeddingProvider)

    def test_openai_used_alone_and_digest_embeddings_without_openai(self) -> None:
        from mindmarks.main import _build_embedding_provider, _build_llm_provider
        from mindmarks.providers.embedding.llm_digest_embedding_provider import LLMDigestEmbeddingProvider
        from mindmarks.providers.llm.anthropic_provider import AnthropicLLMProvider
        from mindmarks.providers.llm.openai_provider import OpenAILLMProvider

        openai_only = Settings(_env_file=None, anthropic_api_key="", openai_api_key="o")
        anthropic_only = Settings(_env_file=None, anthropic_api_key="a", openai_api_key="")
        neither = Settings(_env_file=None, anthropic_api_key="", openai_api_key="")

        assert isinstance(_build_llm_provider(openai_only), OpenAILLMProvider)
        llm = _build_llm_provider(anthropic_only)
        assert isinstance(llm, AnthropicLLMProvider)
        assert isinstance(_build_embedding_provider(anthropic_only, llm), LLMDigestEmbeddingProvider)
        assert _build_llm_provider(neither) is None
        assert _build_embedding_provider(neither, None) is None
