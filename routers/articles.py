from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.core.config import Settings, get_settings
from schemas.article_generation import (
    ArticleGenerationRequest,
    ArticleGenerationResponse,
    ErrorResponse,
)
from schemas.article_metadata import ArticleMetadataRequest, ArticleMetadataResponse
from services.article_generator import ArticleGeneratorService, GenerationRequest
from services.article_metadata import ArticleMetadataService
from services.errors import ClientInputError, ConfigurationError, GenerationFailedError, UpstreamError
from services.generation_providers import ProviderName

logger = logging.getLogger(__name__)

GENERATION_FAILED_MESSAGE = "خطا در تولید مقاله با هوش مصنوعی"

router = APIRouter(tags=["articles"])


def get_article_generator(settings: Settings = Depends(get_settings)) -> ArticleGeneratorService:
    return ArticleGeneratorService(
        credentials=settings.provider_credentials(),
        timeout=settings.upstream_timeout_seconds,
        base_urls={
            ProviderName.gapgpt: settings.gapgpt_base_url,
            ProviderName.gemini: settings.gemini_base_url,
        },
    )


def error_response(status_code: int, message: str, details: str | None = None) -> JSONResponse:
    content: dict[str, str] = {"error": message}
    if details is not None:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


@router.post(
    "/ai-article-generator",
    response_model=ArticleGenerationResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def generate_article(
    payload: ArticleGenerationRequest,
    service: ArticleGeneratorService = Depends(get_article_generator),
) -> ArticleGenerationResponse | JSONResponse:
    request = GenerationRequest(
        prompt=payload.prompt,
        provider=payload.provider,
        model=payload.model,
        language=payload.language,
    )
    try:
        result = await service.generate(request)
    except ClientInputError as exc:
        return error_response(400, str(exc))
    except ConfigurationError as exc:
        logger.error("Article generator misconfigured: %s", exc)
        return error_response(500, str(exc))
    except UpstreamError as exc:
        logger.warning(
            "Upstream %s failed (status=%s): %s",
            payload.provider.value,
            exc.status_code,
            exc.details,
        )
        return error_response(500, GENERATION_FAILED_MESSAGE, details=exc.details)
    except GenerationFailedError as exc:
        return error_response(500, GENERATION_FAILED_MESSAGE, details=exc.details)

    return ArticleGenerationResponse(
        title=result.title,
        excerpt=result.excerpt,
        content=result.content,
        provider=result.provider,
        model=result.model,
    )


@router.post(
    "/article-metadata",
    response_model=ArticleMetadataResponse,
    responses={400: {"model": ErrorResponse}},
)
async def build_article_metadata(
    payload: ArticleMetadataRequest,
) -> ArticleMetadataResponse | JSONResponse:
    service = ArticleMetadataService()
    try:
        metadata = service.build(title=payload.title, content=payload.content, tags=payload.tags)
    except ClientInputError as exc:
        return error_response(400, str(exc))

    return ArticleMetadataResponse(
        slug=metadata.slug,
        reading_time=metadata.reading_time,
        tags=metadata.tags,
    )
