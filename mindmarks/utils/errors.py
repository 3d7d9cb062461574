"""Custom exception hierarchy for Mindmarks.

All application exceptions inherit from :class:`MindmarksError`, which
carries an optional ``provider_name`` so error handlers can identify which
external service (e.g. "openai", "redis", "sqlite") caused the failure, and
an HTTP ``status_code`` used by the API layer when the error escapes a
service.

The hierarchy is organized by how callers must react:

    MindmarksError  (base -- catch-all for any mindmarks error)
    +-- ClientError              (bad input; 4xx, never retried)
    |   +-- InvalidContentError      (400)
    |   +-- ContentTooLargeError     (413)
    |   +-- AuthenticationError      (401)
    |   +-- EntityNotFoundError      (404)
    +-- QuotaError               (rate / cooldown budget exhausted)
    |   +-- RateLimitedError         (429, carries retry_after_seconds)
    +-- ProviderError            (external AI provider misbehaved)
    |   +-- ProviderTimeoutError
    |   +-- MalformedOutputError
    |   +-- ProviderUnavailableError
    |   +-- LLMError
    |   +-- EmbeddingError
    +-- StoreError               (row / counter / cache store unreachable)
    +-- ConfigurationError       (startup / missing config)

ProviderError subclasses are always recovered inside the orchestrators and
never reach the HTTP layer; only StoreError and unexpected exceptions are
allowed to produce a 5xx.
"""

from __future__ import annotations


class MindmarksError(Exception):
    """Base exception for all Mindmarks errors.

    The ``__str__`` method prefixes the provider name in brackets for
    structured log output, e.g. ``[openai] Request timed out``.
    """

    status_code: int = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Client errors (non-retryable)
# ---------------------------------------------------------------------------

class ClientError(MindmarksError):
    """Raised when the caller supplied input the service cannot accept."""

    status_code = 400

    def __init__(
        self,
        message: str = "Invalid request",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class InvalidContentError(ClientError):
    """Raised when submitted content is missing, empty, or not a string."""

    status_code = 400

    def __init__(
        self,
        message: str = "Invalid content",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ContentTooLargeError(ClientError):
    """Raised when submitted content exceeds the configured maximum length."""

    status_code = 413

    def __init__(
        self,
        message: str = "Content too large",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class AuthenticationError(ClientError):
    """Raised when a request carries no valid user identity."""

    status_code = 401

    def __init__(
        self,
        message: str = "Unauthorized",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class EntityNotFoundError(ClientError):
    """Raised when a note or bookmark does not exist for the requesting user."""

    status_code = 404

    def __init__(
        self,
        message: str = "Entity not found",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Quota errors (retryable after a delay)
# ---------------------------------------------------------------------------

class QuotaError(MindmarksError):
    """Raised when a per-user request budget is exhausted."""

    status_code = 429

    def __init__(
        self,
        message: str = "Request quota exhausted",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class RateLimitedError(QuotaError):
    """Raised when the rate limiter rejects a request.

    ``retry_after_seconds`` is always at least 1 so clients that honour
    ``Retry-After`` never spin.
    """

    def __init__(
        self,
        retry_after_seconds: int,
        message: str = "Rate limit exceeded. Try again later.",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
        self._retry_after_seconds = max(1, int(retry_after_seconds))

    @property
    def retry_after_seconds(self) -> int:
        return self._retry_after_seconds


# ---------------------------------------------------------------------------
# External provider errors (always recovered locally)
# ---------------------------------------------------------------------------

class ProviderError(MindmarksError):
    """Raised when an external AI provider fails in any way."""

    status_code = 502

    def __init__(
        self,
        message: str = "External provider failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ProviderTimeoutError(ProviderError):
    """Raised when a provider call exceeds its hard timeout."""

    def __init__(
        self,
        message: str = "Provider call timed out",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class MalformedOutputError(ProviderError):
    """Raised when provider output cannot be parsed into the expected shape."""

    def __init__(
        self,
        message: str = "Provider returned malformed output",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ProviderUnavailableError(ProviderError):
    """Raised when a provider is unconfigured (no credential) or unreachable."""

    def __init__(
        self,
        message: str = "External service is unavailable",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class LLMError(ProviderError):
    """Raised when an LLM API call fails or returns an empty response."""

    def __init__(
        self,
        message: str = "LLM API call failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class EmbeddingError(ProviderError):
    """Raised when an embedding API call fails."""

    def __init__(
        self,
        message: str = "Embedding generation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Internal errors (the only 5xx sources)
# ---------------------------------------------------------------------------

class StoreError(MindmarksError):
    """Raised when a backing store (rows, counters, cache) cannot be reached."""

    status_code = 500

    def __init__(
        self,
        message: str = "Backing store operation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ConfigurationError(MindmarksError):
    """Raised when configuration is invalid or missing at startup."""

    status_code = 500

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
