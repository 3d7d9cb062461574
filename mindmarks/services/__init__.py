"""Request-path services.

    - ContentFingerprinter   -- stable cache keys from text
    - RateLimiter            -- per-user quota + cooldown admission
    - ResultCache            -- fingerprint-keyed results with a stale tier
    - LocalFallbackGenerator -- deterministic offline summaries/graphs/vectors
    - AnalysisOrchestrator   -- summary + concept graph with degradation
    - EmbeddingService       -- cache-backed query/entity vectors
    - SearchOrchestrator     -- text -> semantic -> fallback search
"""

from mindmarks.services.analysis_service import AnalysisOrchestrator
from mindmarks.services.embedding_service import EmbeddingService
from mindmarks.services.fallback_generator import LocalFallbackGenerator
from mindmarks.services.fingerprint import ContentFingerprinter
from mindmarks.services.rate_limiter import RateLimiter
from mindmarks.services.result_cache import ResultCache
from mindmarks.services.search_service import SearchOrchestrator

__all__ = [
    "AnalysisOrchestrator",
    "ContentFingerprinter",
    "EmbeddingService",
    "LocalFallbackGenerator",
    "RateLimiter",
    "ResultCache",
    "SearchOrchestrator",
]
