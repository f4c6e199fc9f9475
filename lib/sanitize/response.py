"""Pull a LaTeX document out of a model response."""

import re

from lib.errors import InvalidLatexError

_QUESTION_FENCE_RE = re.compile(r"```(?:latex)?\s*\n(.*?)\n```", re.IGNORECASE | re.DOTALL)
_CHEATSHEET_FENCE_RE = re.compile(r"```(?:latex|tex)?\s*\n?(.*?)```", re.DOTALL)
_LEADING_FENCE_RE = re.compile(r"^```(?:latex)?\s*\n?", re.IGNORECASE)
_TRAILING_FENCE_RE = re.compile(r"\n?```\s*$", re.IGNORECASE)
_DOCUMENTCLASS_RE = re.compile(r"\\documentclass.*", re.DOTALL)


def ensure_document_end(latex: str) -> str:
    """Close a document that was cut off before \\end{document}."""
    if "\\begin{document}" in latex and "\\end{document}" not in latex:
        return latex + "\n\\end{document}\n"
    return latex


def extract_question_paper(response_text: str) -> str:
    """Extract the question paper document from a model response.

    Drops chatter and markdown fences and starts at \\documentclass.

    Raises:
        InvalidLatexError: If no \\documentclass is found
    """
    latex = response_text
    fenced = _QUESTION_FENCE_RE.search(latex)
    if fenced:
        latex = fenced.group(1)
    else:
        latex = _LEADING_FENCE_RE.sub("", latex)
        latex = _TRAILING_FENCE_RE.sub("", latex)

    doc = _DOCUMENTCLASS_RE.search(latex)
    if doc:
        latex = doc.group(0)
    latex = latex.strip()

    if "\\documentclass" not in latex:
        raise InvalidLatexError("Generated content is not valid LaTeX")
    return ensure_document_end(latex)


def extract_cheatsheet(response_text: str, wrap) -> str:
    """Extract a cheatsheet, wrapping bare content with ``wrap(content)``."""
    latex = response_text
    fenced = _CHEATSHEET_FENCE_RE.search(latex)
    if fenced:
        latex = fenced.group(1).strip()

    if "\\documentclass" not in latex:
        latex = wrap(latex)
    return ensure_document_end(latex)
