"""
LaTeX sanitization pipeline.

Runs AI-generated LaTeX through:
  protect -> escape -> restore -> balance -> solutions -> finish

The pipeline is a pure function of its input: every call gets its own
TokenAllocator, and malformed LaTeX is patched rather than rejected.
"""

import logging
from datetime import date
from enum import Enum
from typing import Optional

from lib.sanitize.balancer import balance
from lib.sanitize.escaper import escape
from lib.sanitize.finisher import FinishedDocument, finish, pdf_filename
from lib.sanitize.fixups import fix_common_commands, fix_hindi_document
from lib.sanitize.protector import TokenAllocator, protect, restore
from lib.sanitize.response import ensure_document_end
from lib.sanitize.solutions import process_solutions

logger = logging.getLogger(__name__)


class Profile(str, Enum):
    """Document families with different repairs and compilers."""
    PAPER = "paper"
    HINDI = "hindi"


COMPILERS = {
    Profile.PAPER: ["pdflatex", "lualatex"],
    # fontspec + Devanagari needs a Unicode engine
    Profile.HINDI: ["lualatex", "xelatex"],
}

FILENAME_PREFIX = {
    Profile.PAPER: "studdybuddy",
    Profile.HINDI: "hindi_cheatsheet",
}


def escape_document(latex: str) -> str:
    """Protect, escape and restore."""
    tokenized, allocator = protect(latex, TokenAllocator())
    escaped = escape(tokenized)
    return restore(escaped, allocator)


def sanitize_latex(
    latex: str,
    include_solutions: bool = True,
    profile: Profile = Profile.PAPER,
) -> str:
    """Return the repaired LaTeX source."""
    text = ensure_document_end(latex)
    text = fix_common_commands(text)
    if profile == Profile.HINDI:
        text = fix_hindi_document(text)

    text = escape_document(text)
    text = balance(text)

    if profile == Profile.PAPER:
        text = process_solutions(text, include_solutions)

    return text


def sanitize_document(
    latex: str,
    include_solutions: bool = True,
    profile: Profile = Profile.PAPER,
    subject: str = "subject",
    student_class: str = "class",
    on: Optional[date] = None,
) -> FinishedDocument:
    """Run the full pipeline and attach compile metadata.

    ``subject`` and ``student_class`` only affect the output filename.
    """
    text = sanitize_latex(latex, include_solutions=include_solutions, profile=profile)
    filename = pdf_filename(subject, student_class, prefix=FILENAME_PREFIX[profile], on=on)

    logger.info(
        "Sanitized LaTeX: %d -> %d chars, profile=%s, include_solutions=%s",
        len(latex), len(text), profile.value, include_solutions,
    )
    return finish(text, filename, COMPILERS[profile])
