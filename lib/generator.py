"""
Generation service - turns uploaded textbook PDFs into LaTeX documents.

Three products:
- question papers (optionally replicating a sample paper's pattern)
- English cheatsheets
- Hindi cheatsheets

Every model call runs under a hard timeout and the retry policy from
lib.retry; token usage is reported per stage.
"""

import asyncio
import logging
from typing import Optional

from lib.errors import FatalGenerationError
from lib.latex_templates import wrap_cheatsheet, wrap_hindi_cheatsheet
from lib.models.generation import PaperOptions, TokenStats, TokenUsage
from lib.prompt_templates import (
    EXTRACTION_PROMPT,
    PATTERN_ANALYSIS_PROMPT,
    build_cheatsheet_prompt,
    build_hindi_cheatsheet_prompt,
    build_question_paper_prompt,
    class_label,
    hindi_class_label,
    hindi_subject_label,
    subject_label,
)
from lib.providers import Document, GenerationConfig, GenerationResult, ProviderCapability, ProviderRouter
from lib.retry import EXTRACTION_TIMEOUT_S, GENERATION_TIMEOUT_S, with_retry, with_timeout
from lib.sanitize.response import extract_cheatsheet, extract_question_paper

logger = logging.getLogger(__name__)

CHEATSHEET_CONFIG = GenerationConfig(temperature=0.3, max_tokens=65536)
PAPER_CONFIG = GenerationConfig(temperature=0.3, max_tokens=65536)
EXTRACTION_CONFIG = GenerationConfig(temperature=0.0, max_tokens=65536)


def _usage(result: GenerationResult) -> TokenUsage:
    return TokenUsage(
        prompt_tokens=result.usage.get("promptTokens", 0),
        output_tokens=result.usage.get("outputTokens", 0),
        total_tokens=result.usage.get("totalTokens", 0),
    )


class StudyBuddyGenerator:
    """Runs the model calls behind the generation endpoints."""

    def __init__(self, router: Optional[ProviderRouter] = None, model: Optional[str] = None):
        self.router = router or ProviderRouter()
        self.model = model

    async def _call(
        self,
        prompt: str,
        documents: list[Document],
        config: GenerationConfig,
        timeout: float,
        timeout_message: str,
        label: str,
        max_retries: int,
        base_delay: float,
    ) -> GenerationResult:
        provider = self.router.get_provider(self.model)
        if documents and not provider.supports(ProviderCapability.DOCUMENTS):
            raise FatalGenerationError(f"Model {self.model or 'default'} cannot read PDF files")

        async def attempt() -> GenerationResult:
            if documents:
                request = provider.generate_with_documents(prompt, documents, config)
            else:
                request = provider.generate(prompt, config)
            return await with_timeout(
                request,
                timeout,
                timeout_message,
            )

        return await with_retry(attempt, max_retries=max_retries, base_delay=base_delay, label=label)

    async def extract_text(self, pdf: bytes) -> tuple[str, TokenUsage]:
        """Extract the textbook's text (exercise sections marked)."""
        result = await self._call(
            EXTRACTION_PROMPT,
            [Document(pdf)],
            EXTRACTION_CONFIG,
            EXTRACTION_TIMEOUT_S,
            "PDF text extraction timed out after 2 minutes. Try a smaller PDF or split it into chapters.",
            label="text-extraction",
            max_retries=2,
            base_delay=3.0,
        )
        if not result.text.strip():
            raise FatalGenerationError("No text could be extracted from the PDF")
        logger.info("Extracted %d characters from PDF", len(result.text))
        return result.text, _usage(result)

    async def analyze_pattern(self, pdf: bytes) -> tuple[str, TokenUsage]:
        """Describe the structure of a sample question paper."""
        result = await self._call(
            PATTERN_ANALYSIS_PROMPT,
            [Document(pdf)],
            EXTRACTION_CONFIG,
            EXTRACTION_TIMEOUT_S,
            "Pattern analysis timed out after 2 minutes. Try a smaller pattern file.",
            label="pattern-analysis",
            max_retries=2,
            base_delay=4.0,
        )
        if not result.text.strip():
            raise FatalGenerationError(
                "Could not analyze the pattern PDF structure. The file may be image-only; try a text-based PDF."
            )
        logger.info("Pattern structure analysis complete: %d chars", len(result.text))
        return result.text, _usage(result)

    async def generate_question_paper(
        self,
        pdf: bytes,
        options: PaperOptions,
        pattern_pdf: Optional[bytes] = None,
    ) -> tuple[str, TokenStats]:
        """
        Generate a question paper with solutions.

        Without a pattern the textbook PDF is sent directly with the prompt.
        With a pattern, text extraction and pattern analysis run concurrently
        and the paper is generated from the extracted text.

        Returns:
            (latex, token stats per stage)

        Raises:
            InvalidLatexError: If the response holds no LaTeX document
        """
        stats = TokenStats()

        if pattern_pdf:
            logger.info("Extracting textbook text and analyzing pattern concurrently...")
            (source_text, stats.extraction), (pattern_text, stats.pattern) = await asyncio.gather(
                self.extract_text(pdf),
                self.analyze_pattern(pattern_pdf),
            )
            prompt = build_question_paper_prompt(options, pattern_text=pattern_text, source_text=source_text)
            documents = []
        else:
            prompt = build_question_paper_prompt(options)
            documents = [Document(pdf)]

        result = await self._call(
            prompt,
            documents,
            PAPER_CONFIG,
            GENERATION_TIMEOUT_S,
            "Question generation timed out. Try with a smaller PDF or fewer questions.",
            label="question-generation",
            max_retries=1,
            base_delay=5.0,
        )
        stats.generation = _usage(result)
        stats.compute_total()
        logger.info("Total token usage: %s", stats.total.model_dump(by_alias=True))

        return extract_question_paper(result.text), stats

    async def generate_cheatsheet(self, pdf: bytes, subject: str, student_class: str) -> tuple[str, TokenUsage]:
        """Generate an English chapter-wise cheatsheet."""
        result = await self._call(
            build_cheatsheet_prompt(subject, student_class),
            [Document(pdf)],
            CHEATSHEET_CONFIG,
            GENERATION_TIMEOUT_S,
            "Cheatsheet generation timed out. Try with a smaller PDF.",
            label="cheatsheet-generation",
            max_retries=2,
            base_delay=3.0,
        )
        latex = extract_cheatsheet(
            result.text,
            lambda content: wrap_cheatsheet(content, subject_label(subject), class_label(student_class)),
        )
        return latex, _usage(result)

    async def generate_hindi_cheatsheet(self, pdf: bytes, subject: str, student_class: str) -> tuple[str, TokenUsage]:
        """Generate a Devanagari cheatsheet for LuaLaTeX."""
        result = await self._call(
            build_hindi_cheatsheet_prompt(subject, student_class),
            [Document(pdf)],
            CHEATSHEET_CONFIG,
            GENERATION_TIMEOUT_S,
            "Hindi cheatsheet generation timed out. Try with a smaller PDF.",
            label="hindi-cheatsheet-generation",
            max_retries=2,
            base_delay=3.0,
        )
        latex = extract_cheatsheet(
            result.text,
            lambda content: wrap_hindi_cheatsheet(
                content, hindi_subject_label(subject), hindi_class_label(student_class)
            ),
        )
        return latex, _usage(result)

    async def close(self):
        await self.router.close_all()


_generator: Optional[StudyBuddyGenerator] = None


def get_generator() -> StudyBuddyGenerator:
    """Get or create the generator singleton."""
    global _generator
    if _generator is None:
        _generator = StudyBuddyGenerator()
    return _generator
