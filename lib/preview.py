"""
Question paper preview parser.

Splits a generated question paper into question cards (number, marks,
question text, solution text) so a client can render the paper without
compiling it. Question heading styles vary between generations, so a list
of patterns is tried in order and the first one that yields questions wins.
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

_END = r"(?=\\end\{document\}|\Z)"

# Narrow the search to the body of the paper, most explicit marker first
SECTION_MARKERS = [
    re.compile(
        r"(?:SECTION:\s*QUESTIONS|Questions Section|QUESTIONS|BEGIN QUESTIONS)(.*?)" + _END,
        re.IGNORECASE | re.DOTALL,
    ),
    # after the header tables
    re.compile(r"\\end\{tabular\}.*?\\end\{tabular\}(.*?)" + _END, re.DOTALL),
    # after the instructions list
    re.compile(
        r"\\end\{enumerate\}.{0,200}?(\\textbf\{Q|\\noindent.*?Q\.|^\s*\d+\.)",
        re.DOTALL | re.MULTILINE,
    ),
]

_MARKED_SOLUTION_RE = re.compile(r"(.*?)%\s*START SOLUTION(.*?)%\s*END SOLUTION", re.DOTALL)

_INSTRUCTION_PHRASES = (
    "instructions to candidates",
    "general instructions",
    "examination paper",
)


@dataclass
class QuestionPattern:
    """A question heading style and where its solution starts."""
    name: str
    question: re.Pattern
    solution: re.Pattern


def _next(heading: str) -> str:
    return rf"(?={heading}|\\end\{{document\}}|\Z)"


QUESTION_PATTERNS = [
    QuestionPattern(
        "noindent_bold_hfill",
        re.compile(
            r"\\noindent\\textbf\{Q\.(?P<number>\d+)\}\s*\\hfill\s*\\textbf\{\[(?P<marks>[^\]]+)\]\}(?P<body>.*?)"
            + _next(r"\\noindent\\textbf\{Q\.\d+\}"),
            re.DOTALL,
        ),
        re.compile(r"(.*?)\\noindent\\textbf\{Solution:\}(.*?)(?=\\noindent\\rule|\Z)", re.DOTALL),
    ),
    QuestionPattern(
        "bold_hfill",
        re.compile(
            r"\\textbf\{Q\.(?P<number>\d+)\}\s*\\hfill\s*\\textbf\{\[(?P<marks>[^\]]+)\]\}(?P<body>.*?)"
            + _next(r"\\textbf\{Q\.\d+\}"),
            re.DOTALL,
        ),
        re.compile(r"(.*?)(?:\\textbf\{)?Solution[:.]?(?:\})?(.*)", re.DOTALL),
    ),
    QuestionPattern(
        "bold_marks",
        re.compile(
            r"\\textbf\{Q\.(?P<number>\d+)\}.*?\[(?P<marks>[^\]]+)\](?P<body>.*?)"
            + _next(r"\\textbf\{Q\.\d+\}"),
            re.DOTALL,
        ),
        re.compile(r"(.*?)(?:\\textbf\{)?(?:Solution|Ans)[:.)]?(?:\})?(.*)", re.DOTALL),
    ),
    QuestionPattern(
        "subsection",
        re.compile(
            r"\\subsection\*\{(?:Q\.|Question)\s*(?P<number>\d+)\s*\[(?P<marks>[^\]]+)\]\}(?P<body>.*?)"
            + _next(r"\\subsection\*\{(?:Q\.|Question)"),
            re.DOTALL,
        ),
        re.compile(r"(.*?)\\subsection\*\{Solution\}(.*?)(?=\\vspace|\Z)", re.DOTALL),
    ),
    QuestionPattern(
        "numbered",
        re.compile(
            r"(?:^|\\noindent\s*)(?:\\textbf\{)?(?:Q\.?|Question)\s*(?P<number>\d+)\}?"
            r"(?:\s*[(\[]?(?P<marks>[^\])\n]*?marks?)[\])]?)?[:.)]?\s*(?P<body>.*?)"
            + _next(r"(?:^|\\noindent\s*)(?:\\textbf\{)?(?:Q\.?|Question)\s*\d+"),
            re.DOTALL | re.MULTILINE,
        ),
        re.compile(r"(.*?)(?:\\textbf\{)?(?:Solution|Answer|Ans)[:.)]?(?:\})?(.*)", re.DOTALL),
    ),
    QuestionPattern(
        "section",
        re.compile(
            r"\\section\*\{(?:Question\s+)?(?P<number>\d+)(?:\s*\[(?P<marks>[^\]]+)\])?\}(?P<body>.*?)"
            + _next(r"\\section\*\{"),
            re.DOTALL,
        ),
        re.compile(r"(.*?)\\section\*\{Solution\}(.*)", re.DOTALL),
    ),
    QuestionPattern(
        "plain_numbered",
        re.compile(
            r"(?:^|\n)\s*(?P<number>\d+)[.)]\s*(?P<body>.*?)" + _next(r"(?:^|\n)\s*\d+[.)]"),
            re.DOTALL | re.MULTILINE,
        ),
        re.compile(r"(.*?)(?:Solution|Answer|Ans)[:.)]?\s*(.*)", re.DOTALL),
    ),
]


@dataclass
class QuestionCard:
    number: int
    question: str
    solution: str = ""
    marks: Optional[str] = None


def questions_section(latex: str) -> str:
    """Return the part of the document that holds the questions."""
    start = latex.find("\\begin{document}")
    content = latex[start:] if start != -1 else latex

    for marker in SECTION_MARKERS:
        match = marker.search(content)
        if match:
            return match.group(1) or match.group(0)
    return content


def is_instruction_block(body: str) -> bool:
    lower = body.lower()
    if any(phrase in lower for phrase in _INSTRUCTION_PHRASES):
        return True
    if "answer any" in lower and len(body) < 100:
        return True
    return "duration:" in lower and "maximum marks:" in lower


def split_solution(body: str, pattern: QuestionPattern) -> tuple[str, str]:
    """Split a question body into (question, solution).

    Explicit solution markers win over the pattern's own solution heading.
    """
    marked = _MARKED_SOLUTION_RE.search(body)
    if marked:
        return marked.group(1).strip(), marked.group(2).strip()

    headed = pattern.solution.search(body)
    if headed:
        return headed.group(1).strip(), (headed.group(2) or "").strip()
    return body.strip(), ""


def _parse_with(content: str, pattern: QuestionPattern) -> list[QuestionCard]:
    cards = []
    for match in pattern.question.finditer(content):
        body = match.group("body")
        if not body or len(body.strip()) < 5:
            continue
        if is_instruction_block(body):
            continue

        question, solution = split_solution(body, pattern)
        if len(question) <= 5:
            continue

        marks = match.groupdict().get("marks")
        cards.append(QuestionCard(
            number=int(match.group("number")),
            question=question,
            solution=solution,
            marks=marks.strip() if marks else None,
        ))
    return cards


def parse_questions(latex: str) -> list[QuestionCard]:
    """
    Parse a question paper into question cards.

    Args:
        latex: Full LaTeX document as returned by the generator

    Returns:
        Cards sorted by question number, one per number (the last one seen wins)
    """
    content = questions_section(latex)

    cards: list[QuestionCard] = []
    for pattern in QUESTION_PATTERNS:
        cards = _parse_with(content, pattern)
        if cards:
            logger.debug("Preview matched %d questions with pattern %s", len(cards), pattern.name)
            break

    unique = {card.number: card for card in cards}
    return [unique[number] for number in sorted(unique)]
