from __future__ import annotations

from pydantic import BaseModel, Field


class ArticleMetadataRequest(BaseModel):
    title: str = Field(max_length=300)
    content: str = ""
    tags: list[str] = Field(default_factory=list, max_length=50)


class ArticleMetadataResponse(BaseModel):
    slug: str
    reading_time: int
    tags: list[str]
