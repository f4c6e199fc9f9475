"""Models for the download endpoints."""

from pydantic import BaseModel, ConfigDict, Field


class DownloadPdfRequest(BaseModel):
    """Request body for /api/download-pdf."""
    model_config = ConfigDict(populate_by_name=True)

    latex: str = Field("", description="LaTeX question paper to compile")
    include_solutions: bool = Field(
        True, alias="includeSolutions",
        description="Move solutions into an answer key instead of deleting them",
    )
    subject: str = Field("subject")
    student_class: str = Field("class", alias="studentClass")


class DownloadHindiPdfRequest(BaseModel):
    """Request body for /api/download-hindi-pdf."""
    model_config = ConfigDict(populate_by_name=True)

    latex: str = Field("", description="LaTeX Hindi cheatsheet to compile")
    subject: str = Field("subject")
    student_class: str = Field("class", alias="studentClass")


class DownloadLatexRequest(BaseModel):
    """Request body for /api/download-latex."""
    latex: str = Field("", description="LaTeX source, returned unmodified")
