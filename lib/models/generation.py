"""Models for the generation endpoints (question papers and cheatsheets)."""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class QuestionsByType(BaseModel):
    """Counts of one-mark questions per question type."""
    model_config = ConfigDict(populate_by_name=True)

    mcq: int = Field(0, ge=0)
    fill_in_blanks: int = Field(0, ge=0, alias="fillInBlanks")
    true_false: int = Field(0, ge=0, alias="trueFalse")
    column_matching: int = Field(0, ge=0, alias="columnMatching")
    general: int = Field(0, ge=0)


class PaperOptions(BaseModel):
    """Everything the question paper prompt is built from."""
    subject: str = Field("mathematics", description="Subject slug, e.g. 'physics'")
    question_types: list[str] = Field(
        default_factory=lambda: ["problem-solving", "conceptual", "application"],
    )
    difficulty: str = Field("mixed", description="easy, medium, hard or mixed")
    custom_instructions: Optional[str] = None
    questions_by_type: Optional[QuestionsByType] = None
    # marks value ("2", "3", ...) -> number of questions
    questions_by_marks: Optional[dict[str, int]] = None


class TokenUsage(BaseModel):
    """Token counts reported by the model for one call."""
    model_config = ConfigDict(populate_by_name=True)

    prompt_tokens: int = Field(0, alias="promptTokens")
    output_tokens: int = Field(0, alias="outputTokens")
    total_tokens: int = Field(0, alias="totalTokens")

    def __add__(self, other: "TokenUsage") -> "TokenUsage":
        return TokenUsage(
            prompt_tokens=self.prompt_tokens + other.prompt_tokens,
            output_tokens=self.output_tokens + other.output_tokens,
            total_tokens=self.total_tokens + other.total_tokens,
        )


class TokenStats(BaseModel):
    """Token usage per pipeline stage for a question paper."""
    extraction: TokenUsage = Field(default_factory=TokenUsage)
    pattern: TokenUsage = Field(default_factory=TokenUsage)
    generation: TokenUsage = Field(default_factory=TokenUsage)
    total: TokenUsage = Field(default_factory=TokenUsage)

    def compute_total(self) -> "TokenStats":
        self.total = self.extraction + self.pattern + self.generation
        return self


class UploadResponse(BaseModel):
    """Response from /api/upload."""
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    latex: str = Field(..., description="Generated LaTeX question paper")
    token_usage: TokenStats = Field(default_factory=TokenStats, alias="tokenUsage")
    mode: str = Field("prod", description="Response mode: 'mock' or 'prod'")


class CheatsheetResponse(BaseModel):
    """Response from the cheatsheet endpoints."""
    model_config = ConfigDict(populate_by_name=True)

    latex: str = Field(..., description="Generated LaTeX cheatsheet")
    token_usage: TokenUsage = Field(default_factory=TokenUsage, alias="tokenUsage")
    mode: str = Field("prod", description="Response mode: 'mock' or 'prod'")
