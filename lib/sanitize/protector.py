"""Span protection for LaTeX escaping.

Replaces math, verbatim, tabular and comment spans with placeholder tokens so
that global text substitutions cannot corrupt them, then puts them back.
"""

import re
from dataclasses import dataclass, field

# Not touched by escaping, and stops a following digit from joining the index
TOKEN_END = ";"


@dataclass
class ProtectedSpan:
    """A span of the document replaced by a placeholder token."""
    token: str
    original: str


@dataclass
class TokenAllocator:
    """Per-invocation placeholder registry.

    Math, verbatim, tabular and preamble placeholders share one counter;
    comment lines have their own.
    """
    spans: dict[str, ProtectedSpan] = field(default_factory=dict)
    comments: dict[str, ProtectedSpan] = field(default_factory=dict)
    _counter: int = 0
    _comment_counter: int = 0

    def allocate(self, prefix: str, original: str) -> str:
        token = f"{prefix}{self._counter}{TOKEN_END}"
        self._counter += 1
        self.spans[token] = ProtectedSpan(token=token, original=original)
        return token

    def allocate_comment(self, original: str) -> str:
        token = f"LATEXCOMMENT{self._comment_counter}{TOKEN_END}"
        self._comment_counter += 1
        self.comments[token] = ProtectedSpan(token=token, original=original)
        return token

    def lookup(self, token: str) -> ProtectedSpan | None:
        return self.spans.get(token) or self.comments.get(token)

    def __len__(self) -> int:
        return len(self.spans) + len(self.comments)


# Everything up to and including \begin{document}
_PREAMBLE_RE = re.compile(r"\A.*?\\begin\{document\}", re.DOTALL)

# Alignment environments use & and \\ which must survive escaping
_TABULAR_ENVS = ("tabular", "tabularx", "tabular\\*", "longtable", "array")
_MATH_ENVS = (
    "equation", "align", "alignat", "gather", "multline", "eqnarray", "flalign",
)

_INLINE_MATH_RE = re.compile(r"(?<!\\)\$[^$]+?\$")
_DISPLAY_MATH_RE = re.compile(r"(?<!\\)\\\[.*?\\\]", re.DOTALL)
_DOUBLE_DOLLAR_RE = re.compile(r"(?<!\\)\$\$.*?\$\$", re.DOTALL)
_VERB_RE = re.compile(r"\\verb\*?([^\sA-Za-z*])[^\n]*?\1")
_COMMENT_LINE_RE = re.compile(r"^[ \t]*%.*$", re.MULTILINE)

_TOKEN_RE = re.compile(r"(?:MATHBLOCK|VERBBLOCK|TABULARBLOCK|PREAMBLEBLOCK|LATEXCOMMENT)\d+;")


def _marker_re(name: str) -> re.Pattern:
    return re.compile(rf"\\(begin|end)\{{({name})\}}")


_TABULAR_MARKERS = [_marker_re(name) for name in _TABULAR_ENVS]
_MATH_ENV_MARKERS = [_marker_re(rf"{name}\*?") for name in _MATH_ENVS]


def _replace_environments(marker: re.Pattern, text: str, allocator: TokenAllocator, prefix: str) -> str:
    """Replace each outermost environment span, counting nested ones of the same name.

    An environment that is never closed is left in place.
    """
    pieces = []
    pos = 0
    start = None
    open_name = None
    depth = 0
    for m in marker.finditer(text):
        kind, name = m.groups()
        if start is None:
            if kind == "begin":
                start, open_name, depth = m.start(), name, 1
            continue
        if name != open_name:
            continue
        depth += 1 if kind == "begin" else -1
        if depth == 0:
            pieces.append(text[pos:start])
            pieces.append(allocator.allocate(prefix, text[start:m.end()]))
            pos = m.end()
            start = None
    pieces.append(text[pos:])
    return "".join(pieces)


def _replace(pattern: re.Pattern, text: str, allocator: TokenAllocator, prefix: str) -> str:
    return pattern.sub(lambda m: allocator.allocate(prefix, m.group(0)), text)


def protect(latex: str, allocator: TokenAllocator | None = None) -> tuple[str, TokenAllocator]:
    """Replace protected spans with placeholders.

    Each step scans the output of the previous one, so a span that contains an
    earlier placeholder (an array inside inline math, say) stores the
    placeholder, not the raw text.

    Returns:
        (tokenized text, allocator holding the originals)
    """
    allocator = allocator or TokenAllocator()
    text = latex

    text = _replace(_PREAMBLE_RE, text, allocator, "PREAMBLEBLOCK")

    # Before any math rule, so a $ in a comment cannot pair with one in the body
    text = _COMMENT_LINE_RE.sub(lambda m: allocator.allocate_comment(m.group(0)), text)

    for marker in _TABULAR_MARKERS:
        text = _replace_environments(marker, text, allocator, "TABULARBLOCK")
    for marker in _MATH_ENV_MARKERS:
        text = _replace_environments(marker, text, allocator, "MATHBLOCK")

    # $$ first, or the inline rule would take the inner $ ... $
    text = _replace(_DOUBLE_DOLLAR_RE, text, allocator, "MATHBLOCK")
    text = _replace(_DISPLAY_MATH_RE, text, allocator, "MATHBLOCK")
    text = _replace(_INLINE_MATH_RE, text, allocator, "MATHBLOCK")
    text = _replace(_VERB_RE, text, allocator, "VERBBLOCK")

    return text, allocator


def restore(text: str, allocator: TokenAllocator) -> str:
    """Substitute every registered placeholder back to its original text.

    Tokens end with a terminator, so MATHBLOCK1 followed by a literal digit
    never reads as MATHBLOCK12.
    Nested placeholders are expanded recursively, which gives the same result
    as restoring in descending index order.
    """
    def _expand(match: re.Match) -> str:
        span = allocator.lookup(match.group(0))
        if span is None:
            return match.group(0)
        return _TOKEN_RE.sub(_expand, span.original)

    return _TOKEN_RE.sub(_expand, text)
