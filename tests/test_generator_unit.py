"""Unit tests for the generation service, providers and prompts (no network)."""

import asyncio
import base64
import json
import os
import sys
from typing import Optional

import httpx
import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from lib.errors import FatalGenerationError, InvalidLatexError, ProviderError
from lib.generator import StudyBuddyGenerator
from lib.mock_responses import MOCK_PAPER
from lib.models import PaperOptions, QuestionsByType
from lib.prompt_templates import (
    EXTRACTION_PROMPT,
    PATTERN_ANALYSIS_PROMPT,
    build_question_breakdown,
    build_question_paper_prompt,
    truncate_for_prompt,
)
from lib.providers import (
    Document,
    GenerationConfig,
    GenerationResult,
    GoogleProvider,
    ProviderCapability,
    ProviderRouter,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class FakeProvider:
    """Returns canned text per prompt and records every call."""

    def __init__(self, responses: dict[str, str], default: str = MOCK_PAPER):
        self.responses = responses
        self.default = default
        self.calls: list[tuple[str, list[Document]]] = []
        self.capabilities = {ProviderCapability.TEXT, ProviderCapability.DOCUMENTS}

    async def generate(self, prompt, config=None) -> GenerationResult:
        return await self.generate_with_documents(prompt, [], config)

    async def generate_with_documents(self, prompt, documents, config=None) -> GenerationResult:
        self.calls.append((prompt, documents))
        text = self.responses.get(prompt, self.default)
        return GenerationResult(
            text=text,
            model="fake",
            provider="fake",
            usage={"promptTokens": 10, "outputTokens": 5, "totalTokens": 15},
        )

    def supports(self, capability: ProviderCapability) -> bool:
        return capability in self.capabilities

    async def close(self):
        pass


class FakeRouter:
    def __init__(self, provider: FakeProvider):
        self.provider = provider

    def get_provider(self, model_name: Optional[str] = None):
        return self.provider

    async def close_all(self):
        pass


def _generator(responses: Optional[dict[str, str]] = None, default: str = MOCK_PAPER):
    provider = FakeProvider(responses or {}, default)
    return StudyBuddyGenerator(router=FakeRouter(provider)), provider


def _gemini_body(text: str) -> dict:
    return {
        "candidates": [{"content": {"parts": [{"text": text}]}}],
        "usageMetadata": {"promptTokenCount": 7, "candidatesTokenCount": 3, "totalTokenCount": 10},
    }


def _run_google(handler, prompt="Hi", documents=None):
    async def run():
        provider = GoogleProvider(api_key="test-key", transport=httpx.MockTransport(handler))
        try:
            return await provider.generate_with_documents(prompt, documents or [], GenerationConfig())
        finally:
            await provider.close()

    return asyncio.run(run())


# ---------------------------------------------------------------------------
# StudyBuddyGenerator
# ---------------------------------------------------------------------------

class TestGenerateQuestionPaper:

    def test_direct_mode_sends_pdf(self):
        generator, provider = _generator()
        latex, stats = asyncio.run(generator.generate_question_paper(b"%PDF", PaperOptions()))

        assert latex.startswith("\\documentclass")
        assert len(provider.calls) == 1
        _, documents = provider.calls[0]
        assert documents[0].data == b"%PDF"
        assert stats.generation.total_tokens == 15
        assert stats.total.total_tokens == 15
        assert stats.extraction.total_tokens == 0

    def test_pattern_mode_extracts_then_generates_from_text(self):
        generator, provider = _generator({
            EXTRACTION_PROMPT: "Chapter 1 text [EXERCISE - Chapter 1]",
            PATTERN_ANALYSIS_PROMPT: "Q1 (2 marks): MCQ",
        })
        latex, stats = asyncio.run(generator.generate_question_paper(b"%PDF-book", PaperOptions(), b"%PDF-pattern"))

        prompts = [prompt for prompt, _ in provider.calls]
        assert set(prompts[:2]) == {EXTRACTION_PROMPT, PATTERN_ANALYSIS_PROMPT}
        final_prompt, final_documents = provider.calls[2]
        assert final_documents == []
        assert "Chapter 1 text" in final_prompt
        assert "Q1 (2 marks): MCQ" in final_prompt
        assert stats.total.total_tokens == 45
        assert latex.startswith("\\documentclass")

    def test_not_latex_raises(self):
        generator, _ = _generator(default="I cannot help with that.")
        with pytest.raises(InvalidLatexError):
            asyncio.run(generator.generate_question_paper(b"%PDF", PaperOptions()))

    def test_text_only_provider_rejected(self):
        generator, provider = _generator()
        provider.capabilities = {ProviderCapability.TEXT}
        with pytest.raises(FatalGenerationError, match="cannot read PDF"):
            asyncio.run(generator.generate_question_paper(b"%PDF", PaperOptions()))
        assert provider.calls == []

    def test_empty_extraction_is_fatal(self):
        generator, _ = _generator({EXTRACTION_PROMPT: "   "})
        with pytest.raises(FatalGenerationError):
            asyncio.run(generator.generate_question_paper(b"%PDF", PaperOptions(), b"%PDF-pattern"))


class TestGenerateCheatsheets:

    def test_bare_content_is_wrapped(self):
        generator, _ = _generator(default="```latex\n\\section{Motion}\nVelocity.\n```")
        latex, usage = asyncio.run(generator.generate_cheatsheet(b"%PDF", "physics", "11"))
        assert latex.startswith("\\documentclass")
        assert "\\section{Motion}" in latex
        assert "Class 11" in latex
        assert usage.total_tokens == 15

    def test_hindi_uses_devanagari_labels(self):
        generator, _ = _generator(default="\\section{गति}")
        latex, _ = asyncio.run(generator.generate_hindi_cheatsheet(b"%PDF", "science", "9"))
        assert "कक्षा 9" in latex
        assert "fontspec" in latex


# ---------------------------------------------------------------------------
# GoogleProvider
# ---------------------------------------------------------------------------

class TestGoogleProvider:

    def test_sends_documents_inline_before_prompt(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=_gemini_body("done"))

        result = _run_google(handler, "Make a paper", [Document(b"%PDF-1.4")])

        parts = seen["body"]["contents"][0]["parts"]
        assert parts[0]["inline_data"]["mime_type"] == "application/pdf"
        assert base64.b64decode(parts[0]["inline_data"]["data"]) == b"%PDF-1.4"
        assert parts[1] == {"text": "Make a paper"}
        assert "gemini-2.0-flash:generateContent" in seen["url"]
        assert result.text == "done"
        assert result.usage == {"promptTokens": 7, "outputTokens": 3, "totalTokens": 10}

    def test_text_only_generate(self):
        seen = {}

        def handler(request):
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=_gemini_body("plain"))

        async def run():
            provider = GoogleProvider(api_key="test-key", transport=httpx.MockTransport(handler))
            try:
                return await provider.generate("Summarise", GenerationConfig(temperature=0.0))
            finally:
                await provider.close()

        result = asyncio.run(run())
        assert seen["body"]["contents"][0]["parts"] == [{"text": "Summarise"}]
        assert seen["body"]["generationConfig"]["temperature"] == 0.0
        assert result.text == "plain"

    def test_rate_limit_keeps_status(self):
        def handler(request):
            return httpx.Response(429, json={"error": {"message": "Resource has been exhausted"}})

        with pytest.raises(ProviderError) as exc_info:
            _run_google(handler)
        assert exc_info.value.status_code == 429

    def test_bad_api_key_is_fatal(self):
        def handler(request):
            return httpx.Response(400, json={"error": {"message": "API key not valid. Please pass a valid API key."}})

        with pytest.raises(FatalGenerationError):
            _run_google(handler)

    def test_empty_document_is_fatal(self):
        with pytest.raises(FatalGenerationError, match="empty"):
            _run_google(lambda request: httpx.Response(200, json=_gemini_body("x")), documents=[Document(b"")])

    def test_empty_text_raises(self):
        with pytest.raises(ProviderError, match="empty response"):
            _run_google(lambda request: httpx.Response(200, json=_gemini_body("  ")))


class TestProviderRouter:

    def test_missing_key_is_fatal(self, monkeypatch):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
        with pytest.raises(FatalGenerationError):
            ProviderRouter().get_provider()

    def test_supports_model(self):
        router = ProviderRouter(gemini_api_key="k")
        assert router.supports_model("gemini-2.5-flash")
        assert not router.supports_model("gpt-9")

    def test_unknown_model(self):
        with pytest.raises(ValueError):
            ProviderRouter(gemini_api_key="k").get_provider("gpt-9")

    def test_provider_cached(self):
        router = ProviderRouter(gemini_api_key="k")
        assert router.get_provider("gemini-2.5-pro") is router.get_provider("Gemini 2.5 Pro")
        assert router.get_provider("gemini-2.5-pro").model == "gemini-2.5-pro"
        asyncio.run(router.close_all())


# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------

class TestPrompts:

    def test_truncate_keeps_both_ends(self):
        text = "A" * 600 + "B" * 400
        truncated, was_truncated, original = truncate_for_prompt(text, 100, "TEXTBOOK")
        assert was_truncated
        assert original == 1000
        assert truncated.startswith("A" * 55)
        assert truncated.endswith("B" * 45)
        assert "TEXTBOOK TRUNCATED" in truncated

    def test_truncate_short_text_unchanged(self):
        assert truncate_for_prompt("short", 100, "X") == ("short", False, 5)

    def test_breakdown(self):
        options = PaperOptions(
            questions_by_type=QuestionsByType(mcq=4, true_false=2),
            questions_by_marks={"5": 2, "2": 3, "3": 0},
        )
        breakdown = build_question_breakdown(options)
        assert "- 4 Multiple Choice Questions (MCQ)" in breakdown
        assert "- 2 True/False questions" in breakdown
        assert breakdown.index("3 questions of 2 marks") < breakdown.index("2 questions of 5 marks")
        assert "of 3 marks" not in breakdown

    def test_paper_prompt_mentions_markers_and_instructions(self):
        options = PaperOptions(subject="physics", custom_instructions="Only chapter 3")
        prompt = build_question_paper_prompt(options)
        assert "START SOLUTION" in prompt
        assert "Only chapter 3" in prompt
        assert "the attached PDF textbook" in prompt
