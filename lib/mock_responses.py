"""
Mock Responses - Predefined model output for testing without hitting the real API.

Each entry is raw model text; the endpoints run it through the same LaTeX
extraction as production responses.
"""

from typing import Optional

MOCK_PAPER = r"""\documentclass[12pt,a4paper]{article}
\usepackage{amsmath}
\usepackage{amssymb}
\usepackage{geometry}
\usepackage{enumitem}
\geometry{margin=0.75in}

\begin{document}

\begin{center}
{\Large \textbf{EXAMINATION PAPER}}\\[0.3cm]
{\large \textbf{Subject: Mathematics}}
\end{center}

\section*{QUESTIONS}

\subsection*{Question 1 [2 marks]}
Solve for $x$: $3x^2 - 7x + 2 = 0$.

% START SOLUTION
\subsection*{Solution}
Factorising, $(3x - 1)(x - 2) = 0$, so $x = \frac{1}{3}$ or $x = 2$.
% END SOLUTION

\vspace{0.5cm}

\subsection*{Question 2 [3 marks]}
A shop offers a 50% discount on a jacket priced at Rs. 1200. Find the sale price & the amount saved.

% START SOLUTION
\subsection*{Solution}
Amount saved $= 0.5 \times 1200 = 600$. Sale price $= 1200 - 600 = 600$.
% END SOLUTION

\vspace{0.5cm}

\subsection*{Question 3 [1 marks]}
Fill in the blank: the sum of the angles of a triangle is ________ degrees.

% START SOLUTION
\subsection*{Solution}
$180$.
% END SOLUTION

\end{document}
"""

MOCK_CHEATSHEET = r"""\documentclass[10pt,a4paper]{article}
\usepackage[margin=1.5cm]{geometry}
\usepackage{amsmath,amssymb,amsfonts}
\usepackage{enumitem}

\begin{document}

\section{Quadratic Equations}

\subsection*{Key Topics \& Concepts}
\begin{itemize}[leftmargin=1.5em, itemsep=2pt]
  \item A quadratic equation has the form $ax^2 + bx + c = 0$ with $a \neq 0$.
  \item The discriminant $D = b^2 - 4ac$ decides the nature of the roots.
\end{itemize}

\subsection*{Formulas \& Equations}
\[ x = \frac{-b \pm \sqrt{b^2 - 4ac}}{2a} \]

\end{document}
"""

MOCK_HINDI_CHEATSHEET = r"""\documentclass[10pt,a4paper]{article}
\usepackage{fontspec}
\usepackage{polyglossia}
\setdefaultlanguage{hindi}
\setotherlanguage{english}
\newfontfamily\hindifont{Noto Sans Devanagari}[Script=Devanagari]
\setmainfont{Noto Sans Devanagari}[Script=Devanagari]
\usepackage[margin=1.5cm]{geometry}
\usepackage{amsmath,amssymb}
\usepackage{enumitem}

\begin{document}

\section{द्विघात समीकरण}

\subsection*{मुख्य विषय एवं अवधारणाएं}
\begin{itemize}[leftmargin=1.5em, itemsep=2pt]
  \item द्विघात समीकरण का सामान्य रूप $ax^2 + bx + c = 0$ है।
  \item \textenglish{Discriminant} $D = b^2 - 4ac$ मूलों की प्रकृति बताता है।
\end{itemize}

\end{document}
"""

# Mock responses by endpoint
MOCK_RESPONSES = {
    "upload": MOCK_PAPER,
    "cheatsheet": MOCK_CHEATSHEET,
    "hindi-cheatsheet": MOCK_HINDI_CHEATSHEET,
}

# Scenario-specific responses (used with X-Mock-Scenario header)
SCENARIO_RESPONSES = {
    "fenced": "Here is your question paper:\n\n```latex\n" + MOCK_PAPER + "```\n\nGood luck!",
    "truncated": MOCK_PAPER.split("\\subsection*{Question 3")[0],
    "inline_markers": (
        "\\documentclass{article}\n\\begin{document}\n"
        "\\subsection*{Question 1 [2 marks]}\nWhat is $2+2$?\n"
        "Some text % START SOLUTION\nThe answer is $4$.\n% END SOLUTION\n"
        "\\end{document}\n"
    ),
    "bare_cheatsheet": (
        "\\section{Trigonometry}\n\\begin{itemize}\n"
        "  \\item $\\sin^2\\theta + \\cos^2\\theta = 1$\n\\end{itemize}\n"
    ),
    "not_latex": "I'm sorry, I couldn't read the attached file.",
}


def get_mock_response(
    endpoint: str,
    scenario: Optional[str] = None,
) -> str:
    """
    Get a mock model response for testing.

    Args:
        endpoint: "upload", "cheatsheet" or "hindi-cheatsheet"
        scenario: Optional specific scenario from X-Mock-Scenario header

    Returns:
        Mock model response text
    """
    # If a specific scenario is requested, use it
    if scenario and scenario in SCENARIO_RESPONSES:
        return SCENARIO_RESPONSES[scenario]

    return MOCK_RESPONSES.get(endpoint, MOCK_PAPER)
