from __future__ import annotations

import json
from collections.abc import AsyncIterator, Iterator

import httpx
import pytest
from fastapi.testclient import TestClient

from app.main import create_app
from routers.articles import get_article_generator
from services.article_generator import ArticleGeneratorService
from services.generation_providers import ProviderCredentials

GAPGPT_KEY = "sk-test-gapgpt-7f3a"
GEMINI_KEY = "gm-test-gemini-91bc"


class FakeUpstream:
    """Stand-in for both providers; records every outbound request."""

    def __init__(self) -> None:
        self.calls: list[httpx.Request] = []
        self.status_code = 200
        self.text = ""
        self.error: Exception | None = None
        self.body: dict[str, object] | None = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        request.read()
        self.calls.append(request)
        if self.error is not None:
            raise self.error

        if self.status_code >= 400:
            return httpx.Response(
                self.status_code,
                json={"error": {"message": "upstream unavailable"}},
            )

        if self.body is not None:
            return httpx.Response(200, json=self.body)

        if request.url.path.endswith(":generateContent"):
            return httpx.Response(
                200,
                json={"candidates": [{"content": {"role": "model", "parts": [{"text": self.text}]}}]},
            )

        return httpx.Response(
            200,
            json={
                "id": "chatcmpl-test",
                "object": "chat.completion",
                "created": 0,
                "model": json.loads(request.content)["model"],
                "choices": [
                    {
                        "index": 0,
                        "finish_reason": "stop",
                        "message": {"role": "assistant", "content": self.text},
                    }
                ],
            },
        )

    def last_json(self) -> dict[str, object]:
        return json.loads(self.calls[-1].content)


@pytest.fixture()
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture()
def credentials() -> dict[str, str | None]:
    return {"gapgpt_api_key": GAPGPT_KEY, "gemini_api_key": GEMINI_KEY}


@pytest.fixture()
def client(upstream: FakeUpstream, credentials: dict[str, str | None]) -> Iterator[TestClient]:
    app = create_app()

    async def override_generator() -> AsyncIterator[ArticleGeneratorService]:
        transport = httpx.MockTransport(upstream.handler)
        async with httpx.AsyncClient(transport=transport) as http_client:
            yield ArticleGeneratorService(
                credentials=ProviderCredentials(**credentials),
                timeout=5.0,
                http_client=http_client,
            )

    app.dependency_overrides[get_article_generator] = override_generator
    with TestClient(app) as test_client:
        yield test_client
