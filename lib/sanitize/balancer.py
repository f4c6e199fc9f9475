"""Brace and environment balancing.

Appends the closers a truncated or sloppy AI document is missing, just before
\\end{document}. Nothing is ever removed, so extra closers are left alone.
"""

import re
from collections import Counter

END_DOCUMENT = "\\end{document}"

_ENV_RE = re.compile(r"\\(begin|end)\{([\w*]+)\}")
# Unescaped % up to end of line
_COMMENT_RE = re.compile(r"(?<!\\)%.*$", re.MULTILINE)


def brace_depth(latex: str) -> int:
    """Net count of unescaped { minus } outside comments."""
    depth = 0
    in_comment = False
    prev = ""
    for ch in latex:
        if ch == "\n":
            in_comment = False
        elif not in_comment:
            if ch == "%" and prev != "\\":
                in_comment = True
            elif ch == "{" and prev != "\\":
                depth += 1
            elif ch == "}" and prev != "\\":
                depth -= 1
        prev = ch
    return depth


def _strip_comments(latex: str) -> str:
    return _COMMENT_RE.sub("", latex)


def environment_counts(latex: str) -> Counter:
    """Signed begin/end count per environment name, ignoring document."""
    counts: Counter = Counter()
    for kind, name in _ENV_RE.findall(_strip_comments(latex)):
        if name == "document":
            continue
        counts[name] += 1 if kind == "begin" else -1
    return counts


def unclosed_environments(latex: str) -> list[str]:
    """Names that need an \\end, innermost first.

    The per-name net count decides how many closers each environment gets;
    the open stack decides their order.
    """
    counts = environment_counts(latex)
    stack: list[str] = []
    for kind, name in _ENV_RE.findall(_strip_comments(latex)):
        if name == "document":
            continue
        if kind == "begin":
            stack.append(name)
            continue
        for i in range(len(stack) - 1, -1, -1):
            if stack[i] == name:
                del stack[i]
                break

    needed = {name: n for name, n in counts.items() if n > 0}
    closers = []
    for name in reversed(stack):
        if needed.get(name, 0) > 0:
            closers.append(name)
            needed[name] -= 1
    return closers


def insert_before_end(latex: str, insertion: str) -> str:
    """Insert text on its own line before the first \\end{document}.

    Appends at the end when the document has no \\end{document}.
    """
    idx = latex.find(END_DOCUMENT)
    if idx == -1:
        sep = "" if latex.endswith("\n") or not latex else "\n"
        return f"{latex}{sep}{insertion}\n"
    return f"{latex[:idx]}{insertion}\n{latex[idx:]}"


def balance(latex: str) -> str:
    """Close unbalanced braces, then unclosed environments."""
    fixed = latex

    depth = brace_depth(fixed)
    if depth > 0:
        fixed = insert_before_end(fixed, "}" * depth)

    closers = unclosed_environments(fixed)
    if closers:
        fixed = insert_before_end(fixed, "\n".join(f"\\end{{{name}}}" for name in closers))

    return fixed
