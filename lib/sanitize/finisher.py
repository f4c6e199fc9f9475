"""Final pass before a document is handed to the compiler."""

import re
from dataclasses import dataclass
from datetime import date
from typing import Optional

from lib.sanitize.balancer import balance
from lib.sanitize.response import ensure_document_end

_FILENAME_UNSAFE_RE = re.compile(r"[^a-z0-9]+")


@dataclass
class FinishedDocument:
    """Sanitized LaTeX plus what the compiler step needs to know."""
    latex: str
    filename: str
    compilers: list[str]


def sanitize_filename_part(value: str) -> str:
    return _FILENAME_UNSAFE_RE.sub("", (value or "").lower())


def pdf_filename(
    subject: str,
    student_class: str,
    prefix: str = "studdybuddy",
    on: Optional[date] = None,
) -> str:
    """studdybuddy_<subject>_<class>_<YYYY-MM-DD>.pdf"""
    on = on or date.today()
    return (
        f"{prefix}_{sanitize_filename_part(subject)}_"
        f"{sanitize_filename_part(student_class)}_{on.isoformat()}.pdf"
    )


def finish(latex: str, filename: str, compilers: list[str]) -> FinishedDocument:
    latex = ensure_document_end(latex)
    latex = balance(latex)
    return FinishedDocument(latex=latex, filename=filename, compilers=list(compilers))
