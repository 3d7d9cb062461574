"""Abstract base class for text-embedding service providers.

Defines the contract for generating embedding vectors from text.
Implementations may wrap a true embedding endpoint (OpenAI
``text-embedding-3-small``) or derive a pseudo-embedding from LLM output.
The search service only sees this interface, so a real embedding model
can replace a pseudo one without touching search logic.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


# Concrete implementations:
#   OpenAIEmbeddingProvider     -- text-embedding-3-small (requires API key)
#   LLMDigestEmbeddingProvider  -- hashes an LLM concept digest into a vector
# Located in: mindmarks/providers/embedding/
class IEmbeddingProvider(ABC):
    """Contract for text-embedding services used by semantic search."""

    @abstractmethod
    async def embed(self, texts: list[str]) -> list[list[float]]:
        """Generate embedding vectors for a batch of texts.

        Returns
        -------
        list[list[float]]
            Vectors corresponding positionally to *texts*, each of length
            :meth:`get_dimension`.

        Raises
        ------
        mindmarks.utils.errors.EmbeddingError
            If the embedding API call fails.
        """

    @abstractmethod
    async def embed_single(self, text: str) -> list[float]:
        """Generate an embedding vector for a single text string."""

    @abstractmethod
    def get_dimension(self) -> int:
        """Return the (constant) dimensionality of the embedding vectors."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this embedding provider."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the provider is configured."""
