"""Best-effort extraction of article fields from model output.

Everything here is pure: raw text in, candidate fields out. Nothing raises on
malformed input, callers decide what to fall back to.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass

EXCERPT_LENGTH = 300
ELLIPSIS = "..."

_TITLE_LABEL = re.compile(r"^\W*(?:title|عنوان)\W*:", re.IGNORECASE)

_CODE_FENCE = re.compile(r"^```[\w-]*\s*\n(?P<body>.*?)\n?```\s*$", re.DOTALL)


@dataclass(frozen=True)
class ArticleFields:
    title: str | None = None
    excerpt: str | None = None
    content: str | None = None


def _strip_code_fence(text: str) -> str:
    match = _CODE_FENCE.match(text.strip())
    if match:
        return match.group("body")
    return text


def _string_field(payload: dict[str, object], key: str) -> str | None:
    value = payload.get(key)
    if isinstance(value, str):
        return value
    return None


def parse_structured_article(text: str) -> ArticleFields | None:
    """Parse a JSON object with title/excerpt/content keys.

    Returns ``None`` when the text is not a JSON object. Models often wrap
    JSON in a markdown code fence, which is removed first.
    """
    try:
        payload = json.loads(_strip_code_fence(text))
    except (TypeError, ValueError):
        return None

    if not isinstance(payload, dict):
        return None

    return ArticleFields(
        title=_string_field(payload, "title"),
        excerpt=_string_field(payload, "excerpt"),
        content=_string_field(payload, "content"),
    )


def find_labeled_title(text: str) -> str | None:
    """Return the value of the first line that starts with a title label.

    ``**Title:** Foo``, ``## Title: Foo`` and ``عنوان: فو`` all yield ``Foo``.
    Lines that merely mention the word are ignored.
    """
    for line in text.splitlines():
        match = _TITLE_LABEL.match(line)
        if match is None:
            continue
        value = line[match.end() :].strip().lstrip("#*").rstrip("*").strip()
        return value or None
    return None


def find_heading_title(text: str) -> str | None:
    for line in text.splitlines():
        if line.startswith("#"):
            value = line.lstrip("#").strip()
            return value or None
    return None


def make_excerpt(text: str, limit: int = EXCERPT_LENGTH) -> str:
    return text[:limit] + ELLIPSIS
