"""
LaTeX document templates for cheatsheets.

Used when the model returns bare chapter content instead of a full document.
"""

from lib.sanitize.fixups import HINDI_MAIN_FONT


CHEATSHEET_PREAMBLE = r"""\documentclass[10pt,a4paper]{{article}}
\usepackage[margin=1.5cm]{{geometry}}
\usepackage{{amsmath,amssymb,amsfonts}}
\usepackage{{enumitem}}
\usepackage{{array}}
\usepackage{{tabularx}}
\usepackage{{booktabs}}
\usepackage{{xcolor}}
\usepackage{{titlesec}}
\usepackage{{fancyhdr}}
\usepackage{{multicol}}
"""

HINDI_CHEATSHEET_PREAMBLE = r"""\documentclass[10pt,a4paper]{{article}}
\usepackage{{fontspec}}
\setmainfont{{{main_font}}}
\usepackage[margin=1.5cm]{{geometry}}
\usepackage{{amsmath,amssymb}}
\usepackage{{enumitem}}
\usepackage{{array}}
\usepackage{{tabularx}}
\usepackage{{booktabs}}
\usepackage{{xcolor}}
\usepackage{{titlesec}}
\usepackage{{fancyhdr}}
"""

# Shared colours, header and section styling
CHEATSHEET_STYLE = r"""
\definecolor{{chaptercolor}}{{RGB}}{{25,25,112}}
\definecolor{{sectioncolor}}{{RGB}}{{0,100,0}}
\definecolor{{formulacolor}}{{RGB}}{{139,0,0}}
\definecolor{{tipcolor}}{{RGB}}{{184,134,11}}
\definecolor{{defcolor}}{{RGB}}{{75,0,130}}

\pagestyle{{fancy}}
\fancyhf{{}}
\fancyhead[L]{{\textbf{{{header_left}}}}}
\fancyhead[R]{{\textit{{{header_right}}}}}
\fancyfoot[C]{{\thepage}}
\renewcommand{{\headrulewidth}}{{1pt}}

\titleformat{{\section}}{{\Large\bfseries\color{{chaptercolor}}}}{{\thesection}}{{1em}}{{}}[\titlerule]
\titleformat{{\subsection}}{{\large\bfseries\color{{sectioncolor}}}}{{\thesubsection}}{{0.5em}}{{}}

\begin{{document}}

\begin{{center}}
{{\Huge\bfseries\color{{chaptercolor}} {title}}}\\[6pt]
{{\Large {subtitle}}}\\[4pt]
{{\small {tagline}}}\\[2pt]
\rule{{\textwidth}}{{1.5pt}}
\end{{center}}

\vspace{{0.5cm}}

{content}

\end{{document}}
"""


def wrap_cheatsheet(content: str, subject_label: str, class_label: str) -> str:
    """Wrap bare cheatsheet content in the English document template."""
    return CHEATSHEET_PREAMBLE.format() + CHEATSHEET_STYLE.format(
        header_left=f"{subject_label} - {class_label} Cheatsheet",
        header_right="Quick Revision Notes",
        title=f"{subject_label} Cheatsheet",
        subtitle=f"{class_label} -- Quick Revision Notes",
        tagline="Comprehensive chapter-wise summary for exam preparation",
        content=content,
    )


def wrap_hindi_cheatsheet(content: str, subject_label: str, class_label: str) -> str:
    """Wrap bare cheatsheet content in the Devanagari (LuaLaTeX) template."""
    return HINDI_CHEATSHEET_PREAMBLE.format(main_font=HINDI_MAIN_FONT) + CHEATSHEET_STYLE.format(
        header_left=f"{subject_label} -- {class_label} चीटशीट",
        header_right="त्वरित पुनरावृत्ति नोट्स",
        title=f"{subject_label} चीटशीट",
        subtitle=f"{class_label} -- त्वरित पुनरावृत्ति नोट्स",
        tagline="परीक्षा की तैयारी के लिए संपूर्ण अध्यायवार सारांश",
        content=content,
    )
