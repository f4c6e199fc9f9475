"""Exception types shared by the generation and compilation services."""

from typing import Optional

from fastapi import HTTPException


class StudyBuddyError(Exception):
    """Base class for service errors."""


class ProviderError(StudyBuddyError):
    """The generative AI service returned an error."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class FatalGenerationError(StudyBuddyError):
    """A generation failure that retrying cannot fix (bad key, bad file)."""


class GenerationTimeoutError(StudyBuddyError):
    """A generation call exceeded its wall-clock budget."""


class InvalidLatexError(StudyBuddyError):
    """The model response did not contain a LaTeX document."""


class CompileError(StudyBuddyError):
    """Every compiler in the fallback list rejected the document."""

    def __init__(self, message: str, last_error: str = ""):
        super().__init__(message)
        self.last_error = last_error


RATE_LIMIT_MESSAGE = "AI service rate limit reached. Please wait a minute and try again."
TIMEOUT_MESSAGE = "Generation timed out. Try with a smaller textbook PDF."


def http_error_for(error: Exception) -> HTTPException:
    """Map a service error to the HTTP error returned to the client."""
    if isinstance(error, CompileError):
        return HTTPException(status_code=500, detail=f"PDF generation failed: {error}")
    if isinstance(error, GenerationTimeoutError):
        return HTTPException(status_code=504, detail=str(error) or TIMEOUT_MESSAGE)

    message = str(error)
    lower = message.lower()
    if isinstance(error, ProviderError):
        if error.status_code == 429 or "quota" in lower or "rate" in lower:
            return HTTPException(status_code=429, detail=RATE_LIMIT_MESSAGE)
        if error.status_code == 504 or "timed out" in lower:
            return HTTPException(status_code=504, detail=TIMEOUT_MESSAGE)
        return HTTPException(status_code=500, detail=f"AI generation failed: {message}")
    return HTTPException(status_code=500, detail=message or "Internal server error")
