"""Pseudo-embedding provider built on top of an LLM.

Asks the LLM for a digest of the key concepts in a text, then folds the
digest's characters into a fixed-length unit vector with
:func:`mindmarks.utils.vectors.text_to_vector`.  Similarity scores between
such vectors are low-fidelity; this provider exists for deployments that
have a text-generation key but no embedding endpoint.
"""

from __future__ import annotations

import structlog

from mindmarks.interfaces.embedding_provider import IEmbeddingProvider
from mindmarks.interfaces.llm_provider import ILLMProvider
from mindmarks.utils.errors import EmbeddingError, ProviderError
from mindmarks.utils.vectors import text_to_vector

logger = structlog.get_logger(logger_name=__name__)

_DIGEST_SYSTEM_PROMPT = (
    "You condense text into its key concepts. Reply with a short, plain "
    "list of the main concepts and their meaning. No preamble."
)


class LLMDigestEmbeddingProvider(IEmbeddingProvider):
    """Derives vectors from an LLM concept digest.

    Parameters
    ----------
    llm:
        Text-generation provider used to produce the digest.
    dimension:
        Length of the produced vectors.
    """

    def __init__(self, llm: ILLMProvider, dimension: int = 1536) -> None:
        self._llm = llm
        self._dimension = dimension

    async def embed(self, texts: list[str]) -> list[list[float]]:
        return [await self.embed_single(text) for text in texts]

    async def embed_single(self, text: str) -> list[float]:
        try:
            digest = await self._llm.complete(
                system_prompt=_DIGEST_SYSTEM_PROMPT,
                user_prompt=f"Extract the key concepts and semantic meaning from this text: {text}",
                temperature=0.0,
                max_tokens=400,
            )
        except ProviderError as exc:
            raise EmbeddingError(
                message=f"Concept digest failed: {exc.message}",
                provider_name=self.get_provider_name(),
            ) from exc
        if not digest.strip():
            raise EmbeddingError(
                message="Concept digest was empty",
                provider_name=self.get_provider_name(),
            )
        logger.debug("digest_embedding", digest_length=len(digest), dimension=self._dimension)
        return text_to_vector(digest, self._dimension)

    def get_dimension(self) -> int:
        return self._dimension

    def get_provider_name(self) -> str:
        return f"llm_digest:{self._llm.get_provider_name()}"

    def is_available(self) -> bool:
        return self._llm.is_available()
