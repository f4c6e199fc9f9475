"""Solution removal and relocation.

Question papers come back from the model with a worked solution after every
question. Depending on the download options the solutions are either deleted
or moved into an answer key at the end of the document.
"""

import logging
import re
from dataclasses import dataclass

from lib.sanitize.balancer import balance, insert_before_end

logger = logging.getLogger(__name__)


@dataclass
class SolutionBlock:
    """A worked solution lifted out of the question body."""
    number: str
    body: str
    start_line: int = -1
    end_line: int = -1


_START_MARKER_RE = re.compile(r"^%\s*START\s+SOLUTION", re.IGNORECASE)
_END_MARKER_RE = re.compile(r"^%\s*END\s+SOLUTION", re.IGNORECASE)
# A marker written after other content on the same line
_INLINE_MARKER_RE = re.compile(r"(?<=\S)[ \t]*(%\s*(?:START|END)\s+SOLUTION)", re.IGNORECASE)
_MARKER_LINE_RE = re.compile(r"^[ \t]*%[ \t]*(?:START|END)[ \t]+SOLUTION[^\n]*\n?", re.IGNORECASE | re.MULTILINE)
_STRAY_MARKER_RE = re.compile(r"[ \t]*%[ \t]*(?:START|END)[ \t]+SOLUTION[^\n]*", re.IGNORECASE)

# Where a solution block stops when it has no explicit end marker
_NEXT_QUESTION = (
    r"(?=\\noindent\s*\\textbf\{(?:Q|Question)"
    r"|\\subsection\*\{(?:Question|Q)"
    r"|\\textbf\{(?:Q\.|Question)"
    r"|\\section\*"
    r"|\\end\{document\}"
    r"|\Z)"
)

MARKED_SOLUTION_RE = re.compile(r"%\s*START\s+SOLUTION.*?%\s*END\s+SOLUTION[^\n]*", re.IGNORECASE | re.DOTALL)
# Headed solution blocks, most specific first
HEADED_SOLUTION_RES = [
    re.compile(r"\\subsection\*\{Solution\}.*?" + _NEXT_QUESTION, re.IGNORECASE | re.DOTALL),
    re.compile(r"\\noindent\s*\\textbf\{Solution:\}.*?" + _NEXT_QUESTION, re.IGNORECASE | re.DOTALL),
    re.compile(r"\\textbf\{Solution[:.]?\}.*?" + _NEXT_QUESTION, re.IGNORECASE | re.DOTALL),
    re.compile(r"\n[ \t]*Solution:.*?" + _NEXT_QUESTION, re.IGNORECASE | re.DOTALL),
]

# Question headings, in priority order for tie-breaks
QUESTION_HEADING_RES = [
    re.compile(r"\\subsection\*\{(?:Question|Q\.?)\s*(\d+)"),
    re.compile(r"\\textbf\{(?:Question|Q\.?)\s*(\d+)"),
    re.compile(r"\\noindent\s*\\textbf\{(?:Question|Q\.?)\s*(\d+)"),
    re.compile(r"\\item\s*\[Q\.?\s*(\d+)"),
    re.compile(r"\\textbf\{(\d+)\."),
    re.compile(r"\\noindent\s*(\d+)\.\s*\\textbf"),
    re.compile(r"\\section\*\{(?:Question|Q\.?)\s*(\d+)"),
]

_BODY_HEADER_RES = [
    re.compile(r"^\\subsection\*\{Solution[^}]*\}\s*", re.IGNORECASE),
    re.compile(r"^\\textbf\{Solution[^}]*\}\s*", re.IGNORECASE),
    re.compile(r"^\\noindent\s*\\textbf\{Solution[^}]*\}\s*", re.IGNORECASE),
    re.compile(r"^\s*\\paragraph\*?\{Solution[^}]*\}\s*", re.IGNORECASE),
    re.compile(r"^\s*Solution[:.]?\s*", re.IGNORECASE),
]

_ORPHAN_HEADER_RES = [
    re.compile(r"\\subsection\*\{Solution\}", re.IGNORECASE),
    re.compile(r"\\noindent\s*\\textbf\{Solution[:.]?\}", re.IGNORECASE),
    re.compile(r"\\textbf\{Solution[:.]?\}", re.IGNORECASE),
]

_VSPACE_RUN_RE = re.compile(r"(?:\\vspace\{[^}]*\}\s*){2,}")
_RULE_RUN_RE = re.compile(r"(?:\\noindent\\rule\{[^}]*\}\{[^}]*\}\s*){2,}")
_BLANK_LINES_RE = re.compile(r"\n{4,}")

ANSWER_KEY_HEADER = (
    "\\newpage\n"
    "\\begin{center}\n"
    "{\\Large \\textbf{ANSWER KEY \\& SOLUTIONS}}\\\\[0.3cm]\n"
    "\\rule{\\textwidth}{0.4pt}\n"
    "\\end{center}\n"
    "\\vspace{0.5cm}\n"
)


def find_question_number(text_before: str) -> str | None:
    """Number of the nearest question heading in the preceding text.

    The match with the highest start index wins regardless of pattern; on a
    tie the earlier pattern wins.
    """
    best_index = -1
    best_number = None
    for pattern in QUESTION_HEADING_RES:
        for match in pattern.finditer(text_before):
            if match.start() > best_index:
                best_index = match.start()
                best_number = match.group(1)
    return best_number


def _clean_body(body: str) -> str:
    for pattern in _BODY_HEADER_RES:
        body = pattern.sub("", body, count=1)
    return body.strip()


def _isolate_markers(latex: str) -> str:
    return _INLINE_MARKER_RE.sub(lambda m: "\n" + m.group(1), latex)


def collect_solutions(lines: list[str]) -> list[SolutionBlock]:
    """Scan lines for START/END marker pairs and number each solution."""
    blocks: list[SolutionBlock] = []
    in_solution = False
    start_line = -1
    body_lines: list[str] = []

    for i, line in enumerate(lines):
        trimmed = line.strip()
        if _START_MARKER_RE.match(trimmed):
            in_solution = True
            start_line = i
            body_lines = []
            continue
        if _END_MARKER_RE.match(trimmed):
            if in_solution:
                blocks.append(SolutionBlock(
                    number="",
                    body="\n".join(body_lines).strip(),
                    start_line=start_line,
                    end_line=i,
                ))
            in_solution = False
            continue
        if in_solution:
            body_lines.append(line)

    for count, block in enumerate(blocks):
        text_before = "\n".join(lines[:block.start_line])
        block.number = find_question_number(text_before) or str(count + 1)
        block.body = _clean_body(block.body)

    return blocks


def _remove_headed_solutions(latex: str) -> str:
    for pattern in HEADED_SOLUTION_RES:
        latex = pattern.sub("", latex)
    return latex


def _strip_orphans(latex: str) -> str:
    for pattern in _ORPHAN_HEADER_RES:
        latex = pattern.sub("", latex)
    latex = _MARKER_LINE_RE.sub("", latex)
    return _STRAY_MARKER_RE.sub("", latex)


def _collapse_vspace(latex: str) -> str:
    return _VSPACE_RUN_RE.sub(lambda m: "\\vspace{0.5cm}\n", latex)


def render_answer_key(solutions: list[SolutionBlock]) -> str:
    parts = [
        f"\\subsection*{{Answer {sol.number}}}\n{sol.body}\n\n\\vspace{{0.4cm}}"
        for sol in solutions
    ]
    return ANSWER_KEY_HEADER + "\n" + "\n\n".join(parts) + "\n"


def remove_solutions(latex: str) -> str:
    """Delete every recognizable solution span."""
    latex = MARKED_SOLUTION_RE.sub("", latex)
    latex = _remove_headed_solutions(latex)

    latex = _collapse_vspace(latex)
    latex = _RULE_RUN_RE.sub(lambda m: "\\noindent\\rule{0.5\\textwidth}{0.3pt}\n", latex)
    latex = _strip_orphans(latex)

    return balance(latex)


def relocate_solutions(latex: str) -> str:
    """Move marked solutions into an answer key at the end of the document.

    Answers keep the order their markers appear in, which is not necessarily
    numeric order.
    """
    lines = _isolate_markers(latex).split("\n")
    solutions = collect_solutions(lines)

    for block in solutions:
        for i in range(block.start_line, block.end_line + 1):
            lines[i] = ""

    questions_only = "\n".join(lines)
    questions_only = _remove_headed_solutions(questions_only)
    questions_only = _strip_orphans(questions_only)
    questions_only = _collapse_vspace(questions_only)
    questions_only = _BLANK_LINES_RE.sub("\n\n\n", questions_only)

    if solutions:
        logger.info("Relocating %d solutions to answer key", len(solutions))
        questions_only = insert_before_end(questions_only, render_answer_key(solutions))

    return balance(questions_only)


def process_solutions(latex: str, include_solutions: bool) -> str:
    if include_solutions:
        return relocate_solutions(latex)
    return remove_solutions(latex)
