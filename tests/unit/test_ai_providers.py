"""Unit tests for the LLM and embedding provider adapters."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import anthropic
import httpx
import openai
import pytest

from conftest import make_scripted_llm
from mindmarks.config.settings import Settings
from mindmarks.providers.embedding.llm_digest_embedding_provider import LLMDigestEmbeddingProvider
from mindmarks.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider
from mindmarks.providers.llm.anthropic_provider import AnthropicLLMProvider
from mindmarks.providers.llm.openai_provider import OpenAILLMProvider
from mindmarks.utils.errors import (
    EmbeddingError,
    LLMError,
    ProviderTimeoutError,
    ProviderUnavailableError,
)
from mindmarks.utils.vectors import text_to_vector

_REQUEST = httpx.Request("POST", "https://api.test/v1")


# ======================================================================
# Shared helpers
# ======================================================================


def _settings(**overrides) -> Settings:
    defaults = {
        "openai_api_key": "sk-test",
        "openai_base_url": "",
        "openai_text_model": "",
        "openai_embedding_model": "",
        "anthropic_api_key": "test-anthropic",
        "anthropic_model": "",
        "provider_timeout_seconds": 5.0,
    }
    defaults.update(overrides)
    return Settings(**defaults)


def _chat_response(content: str | None) -> MagicMock:
    response = MagicMock()
    response.choices = [MagicMock(message=MagicMock(content=content))]
    response.usage = MagicMock(total_tokens=100)
    return response


# ======================================================================
# OpenAI LLM Provider
# ======================================================================


class TestOpenAILLMProvider:
    def test_provider_name_reflects_base_url(self) -> None:
        assert OpenAILLMProvider(_settings()).get_provider_name() == "openai"
        custom = OpenAILLMProvider(_settings(openai_base_url="http://localhost:8001/v1"))
        assert custom.get_provider_name() == "openai-compatible"

    def test_is_available(self) -> None:
        assert OpenAILLMProvider(_settings()).is_available() is True
        assert OpenAILLMProvider(_settings(openai_api_key="")).is_available() is False

    @pytest.mark.asyncio
    async def test_complete_success(self) -> None:
        mock_client = AsyncMock()
        mock_client.chat.completions.create = AsyncMock(return_value=_chat_response("A summary."))

        with patch("mindmarks.providers.llm.openai_provider.openai.AsyncOpenAI", return_value=mock_client):
            provider = OpenAILLMProvider(_settings())
            result = await provider.complete("system prompt", "user prompt", temperature=0.1, max_tokens=50)

        assert result == "A summary."
        kwargs = mock_client.chat.completions.create.await_args.kwargs
        assert kwargs["model"] == "gpt-4o-mini"
        assert kwargs["messages"][0] == {"role": "system", "content": "system prompt"}
        assert kwargs["temperature"] == 0.1
        assert kwargs["max_tokens"] == 50

    @pytest.mark.asyncio
    async def test_client_built_without_retries(self) -> None:
        with patch("mindmarks.providers.llm.openai_provider.openai.AsyncOpenAI") as mock_cls:
            OpenAILLMProvider(_settings(openai_base_url="http://local/v1"))

        kwargs = mock_cls.call_args.kwargs
        assert kwargs["max_retries"] == 0
        assert kwargs["base_url"] == "http://local/v1"

    @pytest.mark.asyncio
    async def test_api_error_becomes_llm_error(self) -> None:
        mock_client = AsyncMock()
        mock_client.chat.completions.create = AsyncMock(
            side_effect=openai.APIError(message="Rate limit exceeded", request=_REQUEST, body=None)
        )

        with patch("mindmarks.providers.llm.openai_provider.openai.AsyncOpenAI", return_value=mock_client):
            provider = OpenAILLMProvider(_settings())
            with pytest.raises(LLMError) as exc_info:
                await provider.complete("system", "user")

        assert exc_info.value.provider_name == "openai"

    @pytest.mark.asyncio
    async def test_timeout_becomes_provider_timeout(self) -> None:
        mock_client = AsyncMock()
        mock_client.chat.completions.create = AsyncMock(side_effect=openai.APITimeoutError(request=_REQUEST))

        with patch("mindmarks.providers.llm.openai_provider.openai.AsyncOpenAI", return_value=mock_client):
            provider = OpenAILLMProvider(_settings())
            with pytest.raises(ProviderTimeoutError):
                await provider.complete("system", "user")

    @pytest.mark.asyncio
    async def test_empty_content_is_an_error(self) -> None:
        mock_client = AsyncMock()
        mock_client.chat.completions.create = AsyncMock(return_value=_chat_response(""))

        with patch("mindmarks.providers.llm.openai_provider.openai.AsyncOpenAI", return_value=mock_client):
            provider = OpenAILLMProvider(_settings())
            with pytest.raises(LLMError):
                await provider.complete("system", "user")

    @pytest.mark.asyncio
    async def test_missing_key_fails_without_network(self) -> None:
        mock_client = AsyncMock()
        with patch("mindmarks.providers.llm.openai_provider.openai.AsyncOpenAI", return_value=mock_client):
            provider = OpenAILLMProvider(_settings(openai_api_key=""))
            with pytest.raises(ProviderUnavailableError):
                await provider.complete("system", "user")
        mock_client.chat.completions.create.assert_not_awaited()


# ======================================================================
# Anthropic LLM Provider
# ======================================================================


class TestAnthropicLLMProvider:
    def test_provider_name(self) -> None:
        assert AnthropicLLMProvider(_settings()).get_provider_name() == "anthropic"

    def test_is_available_without_key(self) -> None:
        assert AnthropicLLMProvider(_settings(anthropic_api_key="")).is_available() is False

    @pytest.mark.asyncio
    async def test_complete_joins_text_blocks(self) -> None:
        mock_response = MagicMock()
        mock_response.content = [
            MagicMock(type="text", text="First part."),
            MagicMock(type="tool_use"),
            MagicMock(type="text", text="Second part."),
        ]
        mock_response.usage = MagicMock(input_tokens=10, output_tokens=20)
        mock_client = AsyncMock()
        mock_client.messages.create = AsyncMock(return_value=mock_response)

        with patch("mindmarks.providers.llm.anthropic_provider.anthropic.AsyncAnthropic", return_value=mock_client):
            provider = AnthropicLLMProvider(_settings(anthropic_model="claude-test"))
            result = await provider.complete("sys", "user")

        assert result == "First part.\nSecond part."
        kwargs = mock_client.messages.create.await_args.kwargs
        assert kwargs["system"] == "sys"
        assert kwargs["model"] == "claude-test"

    @pytest.mark.asyncio
    async def test_no_text_blocks_is_an_error(self) -> None:
        mock_response = MagicMock()
        mock_response.content = []
        mock_client = AsyncMock()
        mock_client.messages.create = AsyncMock(return_value=mock_response)

        with patch("mindmarks.providers.llm.anthropic_provider.anthropic.AsyncAnthropic", return_value=mock_client):
            provider = AnthropicLLMProvider(_settings())
            with pytest.raises(LLMError):
                await provider.complete("sys", "user")

    @pytest.mark.asyncio
    async def test_timeout_becomes_provider_timeout(self) -> None:
        mock_client = AsyncMock()
        mock_client.messages.create = AsyncMock(side_effect=anthropic.APITimeoutError(request=_REQUEST))

        with patch("mindmarks.providers.llm.anthropic_provider.anthropic.AsyncAnthropic", return_value=mock_client):
            provider = AnthropicLLMProvider(_settings())
            with pytest.raises(ProviderTimeoutError):
                await provider.complete("sys", "user")

    @pytest.mark.asyncio
    async def test_api_error_becomes_llm_error(self) -> None:
        mock_client = AsyncMock()
        mock_client.messages.create = AsyncMock(
            side_effect=anthropic.APIError(message="overloaded", request=_REQUEST, body=None)
        )

        with patch("mindmarks.providers.llm.anthropic_provider.anthropic.AsyncAnthropic", return_value=mock_client):
            provider = AnthropicLLMProvider(_settings())
            with pytest.raises(LLMError):
                await provider.complete("sys", "user")


# ======================================================================
# OpenAI Embedding Provider
# ======================================================================


class TestOpenAIEmbeddingProvider:
    def test_known_model_dimension(self) -> None:
        provider = OpenAIEmbeddingProvider(_settings(openai_embedding_model="text-embedding-3-large"))
        assert provider.get_dimension() == 3072

    def test_unknown_model_uses_configured_dimension(self) -> None:
        provider = OpenAIEmbeddingProvider(
            _settings(openai_embedding_model="custom-embedder", embedding_dimension=384)
        )
        assert provider.get_dimension() == 384

    @pytest.mark.asyncio
    async def test_embed_single(self) -> None:
        mock_response = MagicMock()
        mock_response.data = [MagicMock(embedding=[0.1, 0.2, 0.3])]
        mock_response.usage = MagicMock(total_tokens=3)
        mock_client = AsyncMock()
        mock_client.embeddings.create = AsyncMock(return_value=mock_response)

        with patch(
            "mindmarks.providers.embedding.openai_embedding_provider.openai.AsyncOpenAI",
            return_value=mock_client,
        ):
            provider = OpenAIEmbeddingProvider(_settings())
            vector = await provider.embed_single("hello")

        assert vector == [0.1, 0.2, 0.3]
        assert mock_client.embeddings.create.await_args.kwargs["model"] == "text-embedding-3-small"

    @pytest.mark.asyncio
    async def test_embed_empty_list(self) -> None:
        assert await OpenAIEmbeddingProvider(_settings()).embed([]) == []

    @pytest.mark.asyncio
    async def test_api_error_becomes_embedding_error(self) -> None:
        mock_client = AsyncMock()
        mock_client.embeddings.create = AsyncMock(
            side_effect=openai.APIError(message="bad", request=_REQUEST, body=None)
        )

        with patch(
            "mindmarks.providers.embedding.openai_embedding_provider.openai.AsyncOpenAI",
            return_value=mock_client,
        ):
            provider = OpenAIEmbeddingProvider(_settings())
            with pytest.raises(EmbeddingError):
                await provider.embed_single("hello")

    @pytest.mark.asyncio
    async def test_missing_key(self) -> None:
        provider = OpenAIEmbeddingProvider(_settings(openai_api_key=""))
        assert provider.is_available() is False
        with pytest.raises(ProviderUnavailableError):
            await provider.embed_single("hello")


# ======================================================================
# LLM Digest Embedding Provider
# ======================================================================


class TestLLMDigestEmbeddingProvider:
    @pytest.mark.asyncio
    async def test_vector_is_folded_digest(self) -> None:
        llm = make_scripted_llm(summary="caching, invalidation")
        provider = LLMDigestEmbeddingProvider(llm=llm, dimension=32)

        vector = await provider.embed_single("Cache invalidation is hard.")

        assert vector == text_to_vector("caching, invalidation", 32)
        assert llm.complete.await_args.kwargs["temperature"] == 0.0

    def test_name_and_dimension(self) -> None:
        provider = LLMDigestEmbeddingProvider(llm=make_scripted_llm(), dimension=64)
        assert provider.get_provider_name() == "llm_digest:mock-llm"
        assert provider.get_dimension() == 64
        assert provider.is_available() is True

    @pytest.mark.asyncio
    async def test_llm_failure_becomes_embedding_error(self) -> None:
        llm = make_scripted_llm(summary=LLMError("down", provider_name="mock-llm"))
        provider = LLMDigestEmbeddingProvider(llm=llm, dimension=8)

        with pytest.raises(EmbeddingError):
            await provider.embed_single("text")

    @pytest.mark.asyncio
    async def test_blank_digest_is_an_error(self) -> None:
        provider = LLMDigestEmbeddingProvider(llm=make_scripted_llm(summary="   "), dimension=8)
        with pytest.raises(EmbeddingError):
            await provider.embed_single("text")

    @pytest.mark.asyncio
    async def test_embed_batch(self) -> None:
        provider = LLMDigestEmbeddingProvider(llm=make_scripted_llm(summary="digest"), dimension=8)
        vectors = await provider.embed(["a", "b"])
        assert len(vectors) == 2
