from __future__ import annotations


class ArticleGenerationError(RuntimeError):
    """Base class for failures surfaced to API callers."""


class ClientInputError(ArticleGenerationError):
    """Raised when request fields are missing or empty."""


class ConfigurationError(ArticleGenerationError):
    """Raised when a provider credential is not configured for this deployment."""


class GenerationFailedError(ArticleGenerationError):
    """Raised when generation fails after input and configuration checks passed."""

    def __init__(self, details: str) -> None:
        super().__init__(details)
        self.details = details


class UpstreamError(GenerationFailedError):
    """Raised when a provider answers with a non-success status or an unusable payload."""

    def __init__(self, details: str, status_code: int | None = None) -> None:
        super().__init__(details)
        self.status_code = status_code
