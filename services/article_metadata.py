from __future__ import annotations

import math
import re
import time
from dataclasses import dataclass
from typing import Iterable

from services.errors import ClientInputError

WORDS_PER_MINUTE = 200
MISSING_TITLE_MESSAGE = "عنوان مقاله الزامی است"

_WHITESPACE = re.compile(r"\s+")
_NON_SLUG_CHARS = re.compile(r"[^\w\-]+")
_REPEATED_DASHES = re.compile(r"-{2,}")


@dataclass(frozen=True)
class ArticleMetadata:
    slug: str
    reading_time: int
    tags: list[str]


def estimate_reading_time(content: str, words_per_minute: int = WORDS_PER_MINUTE) -> int:
    """Minutes needed to read ``content``, never less than one."""
    words = len(content.split())
    return max(1, math.ceil(words / words_per_minute))


def slugify(title: str, suffix: str | int | None = None) -> str:
    # \w is Unicode-aware, so Persian letters survive
    slug = _WHITESPACE.sub("-", title.strip().lower())
    slug = _NON_SLUG_CHARS.sub("", slug)
    slug = _REPEATED_DASHES.sub("-", slug).strip("-")
    if suffix is None:
        suffix = int(time.time() * 1000)
    return f"{slug}-{suffix}" if slug else str(suffix)


def normalize_tags(tags: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    normalized: list[str] = []
    for tag in tags:
        cleaned = tag.strip()
        if not cleaned or cleaned in seen:
            continue
        seen.add(cleaned)
        normalized.append(cleaned)
    return normalized


class ArticleMetadataService:
    """Derive the fields the editor stores next to a draft."""

    def build(self, title: str, content: str, tags: Iterable[str]) -> ArticleMetadata:
        if not title.strip():
            raise ClientInputError(MISSING_TITLE_MESSAGE)

        return ArticleMetadata(
            slug=slugify(title),
            reading_time=estimate_reading_time(content),
            tags=normalize_tags(tags),
        )
