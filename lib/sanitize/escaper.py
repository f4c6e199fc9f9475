"""Character escaping for the unprotected remainder of a LaTeX document.

Only ever applied to tokenized text, so math, verbatim, tabular and comment
spans are never touched.
"""

import re

# Single underscore that is not already escaped and not part of a run
_UNDERSCORE_RE = re.compile(r"(?<![\\_])_(?![_\s])")
_AMPERSAND_RE = re.compile(r"(?<!\\)&")
_HASH_RE = re.compile(r"(?<!\\)#")
_CARET_RE = re.compile(r"(?<!\\)\^")
# "50%" meant literally; a comment % is never preceded by a digit
_NUMERIC_PERCENT_RE = re.compile(r"(?<=\d)%(?=\s|$)")

_ESCAPED_UNDERSCORE_RUN_RE = re.compile(r"(?:\\_){2,}")
_RAW_UNDERSCORE_RUN_RE = re.compile(r"(?<!\\)_{2,}")

MAX_BLANK_CM = 4


def blank_widget(length_cm: float) -> str:
    """Fill-in-the-blank line of the given width."""
    length_cm = round(min(length_cm, MAX_BLANK_CM), 2)
    return f"\\underline{{\\hspace{{{length_cm:g}cm}}}}"


def escape_specials(text: str) -> str:
    text = _UNDERSCORE_RE.sub(r"\\_", text)
    text = _AMPERSAND_RE.sub(r"\\&", text)
    text = _HASH_RE.sub(r"\\#", text)
    text = _CARET_RE.sub(r"\\^{}", text)
    text = _NUMERIC_PERCENT_RE.sub(r"\\%", text)
    return text


def collapse_blanks(text: str) -> str:
    """Turn underscore runs into underline widgets.

    Lengths count characters, so an escaped run (two characters per
    underscore) and a raw run both come out at 0.3cm per underscore.
    """
    text = _ESCAPED_UNDERSCORE_RUN_RE.sub(
        lambda m: blank_widget(len(m.group(0)) * 0.15), text
    )
    text = _RAW_UNDERSCORE_RUN_RE.sub(
        lambda m: blank_widget(len(m.group(0)) * 0.3), text
    )
    return text


def escape(text: str) -> str:
    """Apply all escaping rules, then collapse blanks."""
    return collapse_blanks(escape_specials(text))
