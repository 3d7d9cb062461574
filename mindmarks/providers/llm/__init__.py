"""LLM provider adapters (Anthropic, OpenAI-compatible)."""

from mindmarks.providers.llm.anthropic_provider import AnthropicLLMProvider
from mindmarks.providers.llm.openai_provider import OpenAILLMProvider

__all__ = ["AnthropicLLMProvider", "OpenAILLMProvider"]
