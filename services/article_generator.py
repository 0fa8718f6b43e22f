from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from services.article_parsing import make_excerpt
from services.errors import (
    ArticleGenerationError,
    ClientInputError,
    ConfigurationError,
    GenerationFailedError,
)
from services.generation_providers import (
    PROVIDERS,
    GenerationProvider,
    Language,
    ProviderCredentials,
    ProviderName,
    ProviderOutput,
    redact,
)

logger = logging.getLogger(__name__)

MISSING_PROMPT_MESSAGE = "موضوع مقاله الزامی است"
MISSING_CREDENTIAL_MESSAGE = "{label} تنظیم نشده است ({env})"


@dataclass(frozen=True)
class GenerationRequest:
    prompt: str | None
    provider: ProviderName = ProviderName.gapgpt
    model: str | None = None
    language: Language = Language.fa


@dataclass(frozen=True)
class GenerationResult:
    title: str
    excerpt: str
    content: str
    provider: str
    model: str


def _filled(value: str | None) -> str | None:
    if value is None or not value.strip():
        return None
    return value


def normalize_output(output: ProviderOutput, prompt: str, provider: ProviderName, model: str) -> GenerationResult:
    """Fill in whatever the provider could not extract.

    Title falls back to the prompt and excerpt to the head of the content, so
    neither is ever empty.
    """
    fields = output.fields
    content = fields.content if fields.content is not None else output.text
    return GenerationResult(
        title=_filled(fields.title) or prompt,
        excerpt=_filled(fields.excerpt) or make_excerpt(content),
        content=content,
        provider=provider.value,
        model=model,
    )


class ArticleGeneratorService:
    """Generate article drafts through one of the configured upstream providers."""

    def __init__(
        self,
        credentials: ProviderCredentials,
        timeout: float = 60.0,
        base_urls: dict[ProviderName, str] | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._credentials = credentials
        self._timeout = timeout
        self._base_urls = base_urls or {}
        self._http_client = http_client

    def _provider(self, name: ProviderName) -> GenerationProvider:
        provider_cls = PROVIDERS[name]
        api_key = self._credentials.for_provider(name)
        if not api_key:
            raise ConfigurationError(
                MISSING_CREDENTIAL_MESSAGE.format(
                    label=provider_cls.credential_label,
                    env=provider_cls.credential_env,
                )
            )
        return provider_cls(
            api_key=api_key,
            base_url=self._base_urls.get(name, provider_cls.default_base_url),
            timeout=self._timeout,
            http_client=self._http_client,
        )

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        prompt = (request.prompt or "").strip()
        if not prompt:
            raise ClientInputError(MISSING_PROMPT_MESSAGE)

        provider = self._provider(request.provider)
        model = (request.model or "").strip() or provider.default_model

        try:
            output = await provider.generate(prompt, request.language, model)
            return normalize_output(output, prompt, request.provider, model)
        except ArticleGenerationError:
            raise
        except Exception as exc:  # noqa: BLE001 - surface any failure as a generation error
            details = redact(str(exc) or type(exc).__name__, self._credentials.secrets())
            logger.exception("Article generation via %s failed: %s", request.provider.value, details)
            raise GenerationFailedError(details) from exc
