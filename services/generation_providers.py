from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Iterable

import httpx
from openai import APIStatusError, APITimeoutError, AsyncOpenAI

from services.article_parsing import (
    ArticleFields,
    find_heading_title,
    find_labeled_title,
    make_excerpt,
    parse_structured_article,
)
from services.errors import UpstreamError

logger = logging.getLogger(__name__)

TEMPERATURE = 0.7
MAX_OUTPUT_TOKENS = 4000
REDACTED = "***"

ARTICLE_BRIEF_FA = """
شما یک نویسنده حرفه‌ای مقاله هستید. درباره موضوعی که کاربر می‌دهد یک مقاله کامل و جامع بنویسید.

مقاله باید این بخش‌ها را داشته باشد:
1. عنوانی جذاب و خلاقانه
2. خلاصه‌ای کوتاه (150 تا 200 کلمه)
3. متن اصلی مقاله (دست‌کم 1500 کلمه)
4. سرفصل‌ها و زیرعنوان‌ها
5. قالب مارک‌داون

محتوا باید دقیق و قابل اعتماد و زبان آن رسمی و ادبی باشد.
""".strip()

ARTICLE_BRIEF_EN = """
You are a professional article writer. Write a complete, comprehensive article on the topic the user gives.

The article must include:
1. An attention-grabbing, creative title
2. A short summary (150-200 words)
3. The main body (at least 1500 words)
4. Headings and subheadings
5. Markdown formatting

The content must be accurate and reliable, and the language formal and literary.
""".strip()

JSON_REQUEST_FA = "پاسخ را فقط به صورت JSON با کلیدهای title و excerpt و content برگردانید."
JSON_REQUEST_EN = "Return only JSON with the keys: title, excerpt, content."

HEADING_REQUEST_FA = "عنوان مقاله را در نخستین خط و به صورت سرفصل مارک‌داون (#) بنویسید."
HEADING_REQUEST_EN = "Put the article title on the first line as a markdown heading (#)."


class ProviderName(str, Enum):
    gapgpt = "gapgpt"
    gemini = "gemini"


class Language(str, Enum):
    fa = "fa"
    en = "en"


def redact(message: str, secrets: Iterable[str]) -> str:
    for secret in secrets:
        if secret:
            message = message.replace(secret, REDACTED)
    return message


@dataclass(frozen=True)
class ProviderCredentials:
    gapgpt_api_key: str | None = None
    gemini_api_key: str | None = None

    def for_provider(self, provider: ProviderName) -> str | None:
        if provider is ProviderName.gapgpt:
            return self.gapgpt_api_key
        return self.gemini_api_key

    def secrets(self) -> tuple[str, ...]:
        return tuple(key for key in (self.gapgpt_api_key, self.gemini_api_key) if key)


@dataclass(frozen=True)
class ProviderOutput:
    text: str
    fields: ArticleFields


class GenerationProvider(ABC):
    """One upstream text-generation API.

    Subclasses differ in how the request is sent and in how article fields
    are recovered from the returned text.
    """

    name: ProviderName
    default_model: str
    default_base_url: str
    credential_env: str
    credential_label: str

    def __init__(
        self,
        api_key: str,
        base_url: str,
        timeout: float = 60.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._http_client = http_client

    def system_instruction(self, language: Language) -> str:
        if language is Language.en:
            return f"{ARTICLE_BRIEF_EN}\n\n{self._format_request(language)}"
        return f"{ARTICLE_BRIEF_FA}\n\n{self._format_request(language)}"

    async def generate(self, prompt: str, language: Language, model: str) -> ProviderOutput:
        instruction = self.system_instruction(language)
        logger.info("Requesting article from %s (model=%s)", self.name.value, model)
        text = await self.complete(prompt, instruction, model)
        return ProviderOutput(text=text, fields=self.extract(text))

    @abstractmethod
    def _format_request(self, language: Language) -> str: ...

    @abstractmethod
    async def complete(self, prompt: str, system_instruction: str, model: str) -> str: ...

    @abstractmethod
    def extract(self, text: str) -> ArticleFields: ...


class GapGPTProvider(GenerationProvider):
    """OpenAI-compatible chat completions; asked to answer with a JSON object."""

    name = ProviderName.gapgpt
    default_model = "gpt-4o"
    default_base_url = "https://api.gapgpt.app/v1"
    credential_env = "ARTICLEGEN_GAPGPT_API_KEY"
    credential_label = "کلید API گپ جی‌پی‌تی"

    def _format_request(self, language: Language) -> str:
        return JSON_REQUEST_EN if language is Language.en else JSON_REQUEST_FA

    async def complete(self, prompt: str, system_instruction: str, model: str) -> str:
        client = AsyncOpenAI(
            api_key=self._api_key,
            base_url=self._base_url,
            timeout=self._timeout,
            max_retries=0,
            http_client=self._http_client,
        )
        try:
            response = await client.chat.completions.create(
                model=model,
                messages=[
                    {"role": "system", "content": system_instruction},
                    {"role": "user", "content": prompt},
                ],
                temperature=TEMPERATURE,
                max_tokens=MAX_OUTPUT_TOKENS,
            )
        except APITimeoutError as exc:
            raise UpstreamError("GapGPT API request timed out.") from exc
        except APIStatusError as exc:
            raise UpstreamError(
                f"GapGPT API Error: {exc.status_code}",
                status_code=exc.status_code,
            ) from exc
        finally:
            if self._http_client is None:
                await client.close()

        if not response.choices:
            raise UpstreamError("GapGPT API returned no choices.")
        return response.choices[0].message.content or ""

    def extract(self, text: str) -> ArticleFields:
        parsed = parse_structured_article(text)
        if parsed is not None:
            return parsed

        logger.info("GapGPT output is not a JSON object; extracting fields heuristically")
        return ArticleFields(
            title=find_labeled_title(text),
            excerpt=make_excerpt(text),
            content=text,
        )


class GeminiProvider(GenerationProvider):
    """Google Generative Language API; returns markdown prose only."""

    name = ProviderName.gemini
    default_model = "gemini-2.0-flash"
    default_base_url = "https://generativelanguage.googleapis.com/v1beta"
    credential_env = "ARTICLEGEN_GEMINI_API_KEY"
    credential_label = "کلید API جمینی"

    def _format_request(self, language: Language) -> str:
        return HEADING_REQUEST_EN if language is Language.en else HEADING_REQUEST_FA

    async def _post(self, url: str, payload: dict[str, object]) -> httpx.Response:
        headers = {"x-goog-api-key": self._api_key}
        if self._http_client is not None:
            return await self._http_client.post(
                url, json=payload, headers=headers, timeout=self._timeout
            )
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            return await client.post(url, json=payload, headers=headers)

    async def complete(self, prompt: str, system_instruction: str, model: str) -> str:
        url = f"{self._base_url}/models/{model}:generateContent"
        payload: dict[str, object] = {
            "systemInstruction": {"parts": [{"text": system_instruction}]},
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": TEMPERATURE,
                "maxOutputTokens": MAX_OUTPUT_TOKENS,
            },
        }

        try:
            response = await self._post(url, payload)
        except httpx.TimeoutException as exc:
            raise UpstreamError("Gemini API request timed out.") from exc

        if not response.is_success:
            raise UpstreamError(
                f"Gemini API Error: {response.status_code}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
            parts = data["candidates"][0]["content"]["parts"]
            return "".join(part.get("text", "") for part in parts)
        except (ValueError, KeyError, IndexError, TypeError, AttributeError) as exc:
            raise UpstreamError("Gemini API returned no usable candidates.") from exc

    def extract(self, text: str) -> ArticleFields:
        return ArticleFields(
            title=find_heading_title(text),
            excerpt=make_excerpt(text),
            content=text,
        )


PROVIDERS: dict[ProviderName, type[GenerationProvider]] = {
    ProviderName.gapgpt: GapGPTProvider,
    ProviderName.gemini: GeminiProvider,
}
