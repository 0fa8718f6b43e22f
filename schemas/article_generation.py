from __future__ import annotations

from pydantic import BaseModel

from services.generation_providers import Language, ProviderName


class ArticleGenerationRequest(BaseModel):
    prompt: str | None = None
    provider: ProviderName = ProviderName.gapgpt
    model: str | None = None
    language: Language = Language.fa


class ArticleGenerationResponse(BaseModel):
    title: str
    excerpt: str
    content: str
    provider: str
    model: str


class ErrorResponse(BaseModel):
    error: str
    details: str | None = None
