"""AI analysis orchestration: admission, caching, provider calls, fallback.

Request flow for :meth:`AnalysisOrchestrator.analyze`::

    validate input            -> InvalidContentError / ContentTooLargeError
    rate limiter admission    -> RateLimitedError (no cache or provider I/O)
    fresh cache entry?        -> return it (X-Cache: HIT)
    summary + graph calls     -> two independent provider calls, each under
                                 a hard timeout, run concurrently
    per failed piece          -> stale provider entry if one is retained,
                                 otherwise LocalFallbackGenerator
    cache write               -> provider entries on full success,
                                 fallback entries (shorter TTL) otherwise

Provider failures of any kind (timeout, API error, malformed JSON, missing
credential) are recovered here and never propagate to the HTTP layer.
"""

from __future__ import annotations

import asyncio
from typing import Any

import structlog
from pydantic import ValidationError

from mindmarks.interfaces.llm_provider import ILLMProvider
from mindmarks.interfaces.row_store import IRowStore
from mindmarks.models.analysis import (
    AnalysisOutcome,
    AnalysisResult,
    Concept,
    ConceptGraph,
    Relationship,
    Theme,
)
from mindmarks.models.cache import CacheEntry, CachePurpose, CacheSource, CacheStatus
from mindmarks.services.fallback_generator import LocalFallbackGenerator
from mindmarks.services.fingerprint import ContentFingerprinter
from mindmarks.services.rate_limiter import RateLimiter
from mindmarks.services.result_cache import ResultCache
from mindmarks.utils.errors import (
    ContentTooLargeError,
    InvalidContentError,
    LLMError,
    MalformedOutputError,
    MindmarksError,
    ProviderError,
    ProviderTimeoutError,
    ProviderUnavailableError,
    RateLimitedError,
    StoreError,
)
from mindmarks.utils.json_extract import extract_json_object
from mindmarks.utils.logging import get_logger

FALLBACK_NOTICE = "Using simulated analysis due to API error"

_SUMMARY_SYSTEM_PROMPT = (
    "You are an expert note summarizer. Your task is to read user-provided notes "
    "and generate concise, informative summaries that capture the key points and "
    "main ideas. Focus on extracting the most important information, identifying "
    "the core topics discussed, and presenting them clearly and understandably. "
    "The response should be the summary itself, starting immediately with the most "
    "salient information. Aim for brevity while retaining essential details and "
    "context. Do not include personal opinions or information not explicitly "
    "present in the note. The summary should be self-contained and accurately "
    "reflect the content of the original note."
)

_GRAPH_SYSTEM_PROMPT = """\
You analyze notes and extract a concept map. Identify:
1. Main concepts (5-10 key ideas)
2. Relationships between concepts
3. Theme categorization for concepts (technology, business, science, philosophy, personal, health)
4. Importance level for each concept (1-3, with 3 being most important)

Format your response as a JSON object with exactly this structure:
{
  "concepts": [
    {"id": "concept-1", "label": "concept name", "theme": "theme name", "importance": 2}
  ],
  "relationships": [
    {"source": "concept-1", "target": "concept-2", "label": "relationship description"}
  ]
}

Only respond with valid JSON. No explanations or additional text."""

_PROVIDER = "provider"
_STALE = "stale"
_FALLBACK = "fallback"


def graph_from_payload(data: dict[str, Any], provider_name: str | None = None) -> ConceptGraph:
    """Coerce a provider's concept-map JSON into a valid :class:`ConceptGraph`.

    Concepts without a label or with a theme outside the closed set are
    dropped, duplicate ids keep their first occurrence, importance is
    clamped, and edges pointing at missing concepts (or at themselves)
    are discarded.

    Raises
    ------
    MalformedOutputError
        If no usable concept remains.
    """
    raw_concepts = data.get("concepts")
    if not isinstance(raw_concepts, list):
        raise MalformedOutputError("Concept map has no concepts list", provider_name=provider_name)

    concepts: list[Concept] = []
    ids: set[str] = set()
    for index, item in enumerate(raw_concepts):
        if not isinstance(item, dict):
            continue
        label = str(item.get("label") or "").strip()
        theme = Theme.coerce(item.get("theme"))
        concept_id = str(item.get("id") or f"concept-{index}").strip()
        if not label or theme is None or not concept_id or concept_id in ids:
            continue
        ids.add(concept_id)
        concepts.append(
            Concept(id=concept_id, label=label, theme=theme, importance=item.get("importance"))
        )
    if not concepts:
        raise MalformedOutputError("Concept map contained no usable concepts", provider_name=provider_name)

    relationships: list[Relationship] = []
    raw_edges = data.get("relationships")
    for item in raw_edges if isinstance(raw_edges, list) else []:
        if not isinstance(item, dict):
            continue
        source = str(item.get("source") or item.get("source_id") or "")
        target = str(item.get("target") or item.get("target_id") or "")
        if source not in ids or target not in ids or source == target:
            continue
        label = str(item.get("label") or "").strip() or "relates to"
        relationships.append(Relationship(source_id=source, target_id=target, label=label))

    return ConceptGraph(concepts=concepts, relationships=relationships)


class AnalysisOrchestrator:
    """Produces a summary and concept graph for note content.

    Parameters
    ----------
    rate_limiter:
        Admission control consulted before any cache or provider work.
    result_cache:
        Fingerprint-keyed cache of previous analyses.
    fallback:
        Local generator substituted for failed provider pieces.
    llm_provider:
        Text-generation backend; ``None`` means every analysis is local.
    row_store:
        Optional store used to persist summaries onto note rows.
    """

    def __init__(
        self,
        rate_limiter: RateLimiter,
        result_cache: ResultCache,
        fallback: LocalFallbackGenerator,
        llm_provider: ILLMProvider | None = None,
        row_store: IRowStore | None = None,
        fingerprinter: ContentFingerprinter | None = None,
        max_content_length: int = 10000,
        timeout_seconds: float = 20.0,
        cache_ttl: int = 24 * 60 * 60,
        temperature: float = 0.3,
        max_tokens: int = 2000,
    ) -> None:
        self._rate_limiter = rate_limiter
        self._cache = result_cache
        self._fallback = fallback
        self._llm = llm_provider
        self._row_store = row_store
        self._fingerprinter = fingerprinter or ContentFingerprinter()
        self._max_content_length = max_content_length
        self._timeout = timeout_seconds
        self._cache_ttl = cache_ttl
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._logger: structlog.BoundLogger = get_logger(__name__)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def analyze(
        self,
        content: str,
        user_id: str,
        note_id: str | None = None,
    ) -> AnalysisOutcome:
        """Analyse *content* on behalf of *user_id*.

        Raises
        ------
        InvalidContentError
            If *content* is not a non-blank string.
        ContentTooLargeError
            If *content* exceeds the configured maximum length.
        RateLimitedError
            If the rate limiter rejects the request.
        """
        self._validate(content)

        decision = await self._rate_limiter.admit(user_id)
        if not decision.allowed:
            message = (
                "Please wait before making another request"
                if decision.reason == "cooldown"
                else "Rate limit exceeded. Try again later."
            )
            raise RateLimitedError(decision.retry_after_seconds, message=message)

        fingerprint = self._fingerprinter.fingerprint(content)
        with structlog.contextvars.bound_contextvars(fingerprint=fingerprint[:12]):
            return await self._serve(content, fingerprint, user_id, note_id)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _serve(
        self,
        content: str,
        fingerprint: str,
        user_id: str,
        note_id: str | None,
    ) -> AnalysisOutcome:
        """Fresh cache, then provider with stale/fallback recovery."""
        cached = await self._cache.get(fingerprint, CachePurpose.ANALYSIS, allow_stale=True)
        cached_result = self._result_from_entry(cached)

        if cached is not None and cached_result is not None and self._cache.is_fresh(cached):
            self._logger.info(
                "analysis_cache_hit",
                user_id=user_id,
                fingerprint=fingerprint[:12],
                source=cached.source.value,
            )
            outcome = AnalysisOutcome(
                result=cached_result,
                notice=FALLBACK_NOTICE if cached.source is CacheSource.FALLBACK else None,
                cache_status=CacheStatus.HIT,
            )
            await self._persist_summary(user_id, note_id, cached_result.summary)
            return outcome

        stale = (
            cached_result
            if cached is not None and cached.source is CacheSource.PROVIDER
            else None
        )
        outcome = await self._compute(content, fingerprint, user_id, stale)
        await self._persist_summary(user_id, note_id, outcome.result.summary)
        return outcome

    def _validate(self, content: object) -> None:
        if not isinstance(content, str) or not content.strip():
            raise InvalidContentError("Invalid content")
        if len(content) > self._max_content_length:
            raise ContentTooLargeError(
                f"Content too large. Maximum {self._max_content_length} characters allowed."
            )

    async def _compute(
        self,
        content: str,
        fingerprint: str,
        user_id: str,
        stale: AnalysisResult | None,
    ) -> AnalysisOutcome:
        summary_result, graph_result = await asyncio.gather(
            self._provider_summary(content),
            self._provider_graph(content),
            return_exceptions=True,
        )

        summary: str
        graph: ConceptGraph
        sources: dict[str, str] = {}

        if isinstance(summary_result, str):
            summary, sources["summary"] = summary_result, _PROVIDER
        else:
            self._log_failure("summary", summary_result, fingerprint)
            if stale is not None:
                summary, sources["summary"] = stale.summary, _STALE
            else:
                summary, sources["summary"] = self._fallback.summarize(content), _FALLBACK

        if isinstance(graph_result, ConceptGraph):
            graph, sources["graph"] = graph_result, _PROVIDER
        else:
            self._log_failure("graph", graph_result, fingerprint)
            if stale is not None:
                graph, sources["graph"] = stale.concept_graph, _STALE
            else:
                graph, sources["graph"] = self._fallback.concept_graph(content), _FALLBACK

        result = AnalysisResult(summary=summary, concept_graph=graph)
        used = set(sources.values())

        if used == {_PROVIDER}:
            await self._cache.put(
                fingerprint, CachePurpose.ANALYSIS, result.to_wire(), CacheSource.PROVIDER, self._cache_ttl
            )
            return AnalysisOutcome(result=result, cache_status=CacheStatus.MISS)

        if _FALLBACK not in used:
            self._logger.info(
                "stale_cache_served",
                user_id=user_id,
                fingerprint=fingerprint[:12],
                pieces=sorted(k for k, v in sources.items() if v == _STALE),
            )
            return AnalysisOutcome(result=result, cache_status=CacheStatus.STALE)

        self._logger.info(
            "fallback_used",
            user_id=user_id,
            fingerprint=fingerprint[:12],
            pieces=sorted(k for k, v in sources.items() if v == _FALLBACK),
        )
        await self._cache.put(
            fingerprint, CachePurpose.ANALYSIS, result.to_wire(), CacheSource.FALLBACK, self._cache_ttl
        )
        return AnalysisOutcome(result=result, notice=FALLBACK_NOTICE, cache_status=CacheStatus.FALLBACK)

    async def _call_llm(self, system_prompt: str, user_prompt: str) -> str:
        """Run one provider completion under the hard timeout."""
        if self._llm is None or not self._llm.is_available():
            raise ProviderUnavailableError("No AI provider configured")
        try:
            return await asyncio.wait_for(
                self._llm.complete(
                    system_prompt=system_prompt,
                    user_prompt=user_prompt,
                    temperature=self._temperature,
                    max_tokens=self._max_tokens,
                ),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError as exc:
            raise ProviderTimeoutError(
                f"Provider call exceeded {self._timeout}s",
                provider_name=self._llm.get_provider_name(),
            ) from exc

    async def _provider_summary(self, content: str) -> str:
        text = await self._call_llm(_SUMMARY_SYSTEM_PROMPT, content)
        summary = text.strip()
        if not summary:
            raise LLMError("Provider returned an empty summary")
        return summary

    async def _provider_graph(self, content: str) -> ConceptGraph:
        text = await self._call_llm(
            _GRAPH_SYSTEM_PROMPT,
            f"Note content to analyze:\n{content}",
        )
        provider_name = self._llm.get_provider_name() if self._llm else None
        try:
            return graph_from_payload(extract_json_object(text, provider_name=provider_name), provider_name)
        except MindmarksError:
            raise
        except Exception as exc:
            raise MalformedOutputError(
                f"Concept map could not be parsed: {exc}", provider_name=provider_name
            ) from exc

    def _log_failure(self, piece: str, error: BaseException, fingerprint: str) -> None:
        if not isinstance(error, ProviderError):
            raise error
        self._logger.warning(
            "provider_call_failed",
            piece=piece,
            error_type=type(error).__name__,
            error=error.message,
            provider=error.provider_name,
            fingerprint=fingerprint[:12],
        )

    def _result_from_entry(self, entry: CacheEntry | None) -> AnalysisResult | None:
        if entry is None:
            return None
        try:
            return AnalysisResult.model_validate(entry.payload)
        except ValidationError:
            self._logger.warning("analysis_cache_payload_invalid")
            return None

    async def _persist_summary(self, user_id: str, note_id: str | None, summary: str) -> None:
        if not note_id or self._row_store is None:
            return
        try:
            updated = await self._row_store.update("notes", user_id, note_id, {"summary": summary})
        except StoreError as exc:
            self._logger.warning("summary_persist_failed", note_id=note_id, error=str(exc))
            return
        if not updated:
            self._logger.warning("summary_persist_skipped", note_id=note_id, reason="note_not_found")
