"""Abstract base class for LLM service providers.

Defines the contract for any large-language-model backend used to
summarise notes and extract concept graphs.  Implementations may wrap the
Anthropic API, OpenAI, or any OpenAI-compatible server.  Call sites stay
provider-agnostic and apply their own timeouts around :meth:`complete`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


# Concrete implementations: AnthropicLLMProvider, OpenAILLMProvider
# Located in: mindmarks/providers/llm/
class ILLMProvider(ABC):
    """Contract for text-generation services used by the analysis pipeline."""

    @abstractmethod
    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.3,
        max_tokens: int = 2000,
    ) -> str:
        """Generate a text completion from the model.

        Parameters
        ----------
        system_prompt:
            The system/instruction message that sets the model's behaviour.
        user_prompt:
            The user-facing prompt containing the note content.
        temperature:
            Sampling temperature (0.0 = deterministic, 1.0 = creative).
        max_tokens:
            Upper bound on the number of tokens in the response.

        Returns
        -------
        str
            The model's text response.

        Raises
        ------
        mindmarks.utils.errors.ProviderError
            If the API call fails, times out, or returns an empty response.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this LLM provider."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the provider is configured.

        Implementations verify that credentials are present without making
        an inference call.
        """
