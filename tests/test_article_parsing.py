from __future__ import annotations

import asyncio

from services.article_generator import ArticleGeneratorService, GenerationRequest, normalize_output
from services.article_parsing import (
    ArticleFields,
    find_heading_title,
    find_labeled_title,
    make_excerpt,
    parse_structured_article,
)
from services.generation_providers import (
    GapGPTProvider,
    GeminiProvider,
    Language,
    ProviderCredentials,
    ProviderName,
    ProviderOutput,
    redact,
)


def test_parse_structured_article_reads_string_fields():
    parsed = parse_structured_article('{"title": "T", "excerpt": "E", "content": "C"}')

    assert parsed == ArticleFields(title="T", excerpt="E", content="C")


def test_parse_structured_article_strips_code_fence():
    text = '```json\n{"title": "عنوان", "excerpt": "خلاصه", "content": "متن"}\n```'

    assert parse_structured_article(text) == ArticleFields(
        title="عنوان",
        excerpt="خلاصه",
        content="متن",
    )


def test_parse_structured_article_ignores_non_string_fields():
    parsed = parse_structured_article('{"title": 42, "content": ["a"]}')

    assert parsed == ArticleFields()


def test_parse_structured_article_rejects_non_objects():
    assert parse_structured_article("not json at all") is None
    assert parse_structured_article('["title", "excerpt"]') is None
    assert parse_structured_article("") is None


def test_find_labeled_title_persian_label():
    text = "مقدمه\nعنوان: آینده انرژی‌های تجدیدپذیر\nمتن اصلی"

    assert find_labeled_title(text) == "آینده انرژی‌های تجدیدپذیر"


def test_find_labeled_title_is_case_insensitive_and_keeps_later_colons():
    assert find_labeled_title("TITLE: Part 1: Basics") == "Part 1: Basics"


def test_find_labeled_title_strips_markdown_around_label():
    assert find_labeled_title("## Title: **Solar Power**") == "Solar Power"
    assert find_labeled_title("**عنوان:** انرژی خورشیدی") == "انرژی خورشیدی"


def test_find_labeled_title_skips_lines_that_only_mention_the_word():
    text = "# Heading Title\nThis title is about energy: cheap and clean\nTitle: Labeled Title"

    assert find_labeled_title(text) == "Labeled Title"


def test_find_labeled_title_without_label():
    assert find_labeled_title("# Heading\nplain body") is None


def test_find_heading_title_strips_markers():
    assert find_heading_title("intro\n##   Deep Dive  \n# Later") == "Deep Dive"
    assert find_heading_title("#\nbody") is None
    assert find_heading_title("no heading here") is None


def test_make_excerpt_truncates_and_appends_ellipsis():
    assert make_excerpt("x" * 500) == "x" * 300 + "..."
    assert make_excerpt("short") == "short..."


def test_redact_masks_every_secret():
    assert redact("a=k1 b=k2", ("k1", "k2", "")) == "a=*** b=***"


def test_normalize_output_falls_back_per_field():
    output = ProviderOutput(text="raw body", fields=ArticleFields(title="", excerpt=None, content=None))

    result = normalize_output(output, "prompt", ProviderName.gapgpt, "gpt-4o")

    assert result.title == "prompt"
    assert result.content == "raw body"
    assert result.excerpt == "raw body..."
    assert result.provider == "gapgpt"


def test_provider_variants_extract_differently():
    text = "# Heading Title\nTitle: Labeled Title"
    gapgpt = GapGPTProvider(api_key="k", base_url="https://example.test/v1")
    gemini = GeminiProvider(api_key="k", base_url="https://example.test/v1beta")

    assert gapgpt.extract(text).title == "Labeled Title"
    assert gemini.extract(text).title == "Heading Title"


def test_system_instruction_follows_language():
    gemini = GeminiProvider(api_key="k", base_url="https://example.test")

    assert "professional article writer" in gemini.system_instruction(Language.en)
    assert "نویسنده حرفه‌ای" in gemini.system_instruction(Language.fa)
    assert "JSON" not in gemini.system_instruction(Language.en)


def test_service_default_model_comes_from_provider():
    class StubProvider(GeminiProvider):
        async def complete(self, prompt, system_instruction, model):
            return "# Stub\nbody"

    service = ArticleGeneratorService(credentials=ProviderCredentials(gemini_api_key="k"))
    service._provider = lambda name: StubProvider(api_key="k", base_url="https://example.test")

    result = asyncio.run(service.generate(GenerationRequest(prompt="p", provider=ProviderName.gemini)))

    assert result.model == "gemini-2.0-flash"
    assert result.title == "Stub"


def test_normalize_output_treats_blank_fields_as_missing():
    output = ProviderOutput(
        text="raw",
        fields=ArticleFields(title=" \n ", excerpt="\t", content="body"),
    )

    result = normalize_output(output, "prompt", ProviderName.gapgpt, "gpt-4o")

    assert result.title == "prompt"
    assert result.excerpt == "body..."
