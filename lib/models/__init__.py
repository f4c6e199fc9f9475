"""Pydantic models for the StudyBuddy endpoints."""

from .generation import (
    QuestionsByType,
    PaperOptions,
    TokenUsage,
    TokenStats,
    UploadResponse,
    CheatsheetResponse,
)
from .download import DownloadPdfRequest, DownloadHindiPdfRequest, DownloadLatexRequest
from .preview import PreviewRequest, QuestionCardModel, PreviewResponse

__all__ = [
    # Generation
    "QuestionsByType",
    "PaperOptions",
    "TokenUsage",
    "TokenStats",
    "UploadResponse",
    "CheatsheetResponse",
    # Download
    "DownloadPdfRequest",
    "DownloadHindiPdfRequest",
    "DownloadLatexRequest",
    # Preview
    "PreviewRequest",
    "QuestionCardModel",
    "PreviewResponse",
]
