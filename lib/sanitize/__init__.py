"""LaTeX sanitization pipeline for AI-generated documents."""

from .balancer import balance, brace_depth, environment_counts
from .escaper import escape
from .finisher import FinishedDocument, pdf_filename
from .pipeline import Profile, sanitize_document, sanitize_latex
from .protector import TokenAllocator, protect, restore
from .solutions import relocate_solutions, remove_solutions

__all__ = [
    "balance",
    "brace_depth",
    "environment_counts",
    "escape",
    "FinishedDocument",
    "pdf_filename",
    "Profile",
    "sanitize_document",
    "sanitize_latex",
    "TokenAllocator",
    "protect",
    "restore",
    "relocate_solutions",
    "remove_solutions",
]
