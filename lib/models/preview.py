"""Models for the /api/preview endpoint."""

from typing import Optional
from pydantic import BaseModel, Field


class PreviewRequest(BaseModel):
    latex: str = Field("", description="LaTeX question paper")


class QuestionCardModel(BaseModel):
    """One question of the paper with its solution."""
    number: int
    question: str
    solution: str = ""
    marks: Optional[str] = None


class PreviewResponse(BaseModel):
    questions: list[QuestionCardModel] = Field(default_factory=list)
    count: int = 0
