"""Targeted repairs for constructs the model commonly gets wrong.

These run on the raw document before span protection.
"""

import re

# enumitem wants label=..., the model writes the short form
_ENUMERATE_LABELS = [
    (re.compile(r"\\begin\{enumerate\}\[\(a\)\]"), "\\begin{enumerate}[label=(\\alph*)]"),
    (re.compile(r"\\begin\{enumerate\}\[\(i\)\]"), "\\begin{enumerate}[label=(\\roman*)]"),
    (re.compile(r"\\begin\{enumerate\}\[\(1\)\]"), "\\begin{enumerate}[label=(\\arabic*)]"),
    (re.compile(r"\\begin\{enumerate\}\[a\)\]"), "\\begin{enumerate}[label=\\alph*)]"),
    (re.compile(r"\\begin\{enumerate\}\[1\)\]"), "\\begin{enumerate}[label=\\arabic*)]"),
]

_TEXTBF_SPACE_RE = re.compile(r"\\textbf\s+\{")
_TEXTIT_SPACE_RE = re.compile(r"\\textit\s+\{")

# mhchem is not loaded in the Hindi preamble
_CE_RE = re.compile(r"\\ce\{([^}]*)\}")
_TCOLORBOX_BEGIN_RE = re.compile(r"\\begin\{tcolorbox\}(?:\[[^\]]*\])?")
_TCOLORBOX_END_RE = re.compile(r"\\end\{tcolorbox\}")
_MULTICOLS_BEGIN_RE = re.compile(r"\\begin\{multicols\}\{[^}]*\}")
_MULTICOLS_END_RE = re.compile(r"\\end\{multicols\}")

# polyglossia + Noto fonts render English as boxes; FreeSerif covers both scripts
_POLYGLOSSIA_RES = [
    re.compile(r"\\usepackage\{polyglossia\}\s*"),
    re.compile(r"\\setdefaultlanguage\{[^}]*\}\s*"),
    re.compile(r"\\setotherlanguage\{[^}]*\}\s*"),
    re.compile(r"\\newfontfamily\\hindifont\{[^}]*\}(?:\[[^\]]*\])?\s*"),
    re.compile(r"\\newfontfamily\\englishfont\{[^}]*\}(?:\[[^\]]*\])?\s*"),
    re.compile(r"\\newfontfamily\\devanagarifont\{[^}]*\}(?:\[[^\]]*\])?\s*"),
]
_SETMAINFONT_RE = re.compile(r"\\setmainfont\{[^}]*\}(?:\[[^\]]*\])?")
_TEXTENGLISH_RE = re.compile(r"\\textenglish\{([^}]*)\}")
_TEXTHINDI_RE = re.compile(r"\\texthi(?:ndi)?\{([^}]*)\}")
_DOCUMENTCLASS_RE = re.compile(r"\\documentclass(?:\[[^\]]*\])?\{[^}]*\}")

HINDI_MAIN_FONT = "FreeSerif"


def fix_common_commands(latex: str) -> str:
    for pattern, replacement in _ENUMERATE_LABELS:
        latex = pattern.sub(lambda m, r=replacement: r, latex)
    latex = _TEXTBF_SPACE_RE.sub(lambda m: "\\textbf{", latex)
    latex = _TEXTIT_SPACE_RE.sub(lambda m: "\\textit{", latex)
    return latex


def fix_hindi_fonts(latex: str) -> str:
    """Swap the polyglossia font setup for fontspec with a single font."""
    for pattern in _POLYGLOSSIA_RES:
        latex = pattern.sub("", latex)
    latex = _SETMAINFONT_RE.sub(lambda m: f"\\setmainfont{{{HINDI_MAIN_FONT}}}", latex)

    latex = _TEXTENGLISH_RE.sub(lambda m: m.group(1), latex)
    latex = _TEXTHINDI_RE.sub(lambda m: m.group(1), latex)
    latex = latex.replace("\\begin{english}", "").replace("\\end{english}", "")

    if "\\usepackage{fontspec}" not in latex:
        latex = _DOCUMENTCLASS_RE.sub(
            lambda m: f"{m.group(0)}\n\\usepackage{{fontspec}}\n\\setmainfont{{{HINDI_MAIN_FONT}}}",
            latex,
            count=1,
        )
    if "\\setmainfont" not in latex:
        latex = latex.replace(
            "\\usepackage{fontspec}",
            f"\\usepackage{{fontspec}}\n\\setmainfont{{{HINDI_MAIN_FONT}}}",
            1,
        )
    return latex


def fix_hindi_document(latex: str) -> str:
    """Repairs for LuaLaTeX Devanagari cheatsheets."""
    latex = _CE_RE.sub(lambda m: f"$\\text{{{m.group(1)}}}$", latex)

    latex = _TCOLORBOX_BEGIN_RE.sub(lambda m: "\\begin{center}\\rule{\\textwidth}{0.4pt}", latex)
    latex = _TCOLORBOX_END_RE.sub(lambda m: "\\rule{\\textwidth}{0.4pt}\\end{center}", latex)
    latex = _MULTICOLS_BEGIN_RE.sub("", latex)
    latex = _MULTICOLS_END_RE.sub("", latex)

    return fix_hindi_fonts(latex)
