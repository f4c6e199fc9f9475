"""Prompt templates for question paper and cheatsheet generation."""

import re
from typing import Optional

from lib.models.generation import PaperOptions

# Characters of extracted textbook text that fit comfortably in one prompt
SOURCE_TEXT_BUDGET = 400_000
PATTERN_TEXT_BUDGET = 60_000

STEM_SUBJECTS = {
    "mathematics", "physics", "chemistry", "biology",
    "physical-science", "life-science", "computer-science",
    "engineering", "medical-science", "statistics",
    "environmental-science", "science",
}
LANGUAGE_SUBJECTS = {"english", "hindi"}
COMMERCE_SUBJECTS = {"accountancy", "business-studies", "commerce", "economics"}

HINDI_SUBJECT_NAMES = {
    "mathematics": "गणित",
    "physics": "भौतिक विज्ञान",
    "chemistry": "रसायन विज्ञान",
    "biology": "जीव विज्ञान",
    "physical-science": "भौतिक विज्ञान",
    "life-science": "जीव विज्ञान",
    "hindi": "हिंदी",
    "english": "अंग्रेज़ी",
    "history": "इतिहास",
    "geography": "भूगोल",
    "economics": "अर्थशास्त्र",
    "computer-science": "कम्प्यूटर विज्ञान",
    "environmental-science": "पर्यावरण विज्ञान",
    "political-science": "राजनीति विज्ञान",
    "accountancy": "लेखाशास्त्र",
    "business-studies": "व्यवसाय अध्ययन",
    "psychology": "मनोविज्ञान",
    "sociology": "समाजशास्त्र",
    "statistics": "सांख्यिकी",
    "science": "विज्ञान",
    "social-science": "सामाजिक विज्ञान",
    "others": "सामान्य",
}


def subject_type(subject: str) -> str:
    """Classify a subject slug as stem, language, commerce or humanities."""
    if subject in STEM_SUBJECTS:
        return "stem"
    if subject in LANGUAGE_SUBJECTS:
        return "language"
    if subject in COMMERCE_SUBJECTS:
        return "commerce"
    return "humanities"


def subject_label(subject: str) -> str:
    """'physical-science' -> 'Physical Science'"""
    return re.sub(r"\b\w", lambda m: m.group(0).upper(), subject.replace("-", " "))


def class_label(student_class: str) -> str:
    return "College/University" if student_class == "college" else f"Class {student_class}"


def hindi_subject_label(subject: str) -> str:
    return HINDI_SUBJECT_NAMES.get(subject, subject.replace("-", " "))


def hindi_class_label(student_class: str) -> str:
    return "कॉलेज/विश्वविद्यालय" if student_class == "college" else f"कक्षा {student_class}"


def truncate_for_prompt(text: str, max_chars: int, label: str) -> tuple[str, bool, int]:
    """
    Fit text into a prompt budget, keeping both ends.

    Exercise sections usually sit at the end of chapters, so the tail keeps
    45% of the budget.

    Returns:
        (text, truncated, original_length)
    """
    original_length = len(text)
    if original_length <= max_chars:
        return text, False, original_length

    head_len = int(max_chars * 0.55)
    tail_len = max_chars - head_len
    truncated = (
        f"{text[:head_len]}\n\n...[{label} TRUNCATED: kept first {head_len} + last {tail_len} "
        f"chars out of {original_length}]...\n\n{text[-tail_len:]}"
    )
    return truncated, True, original_length


# =============================================================================
# Question papers
# =============================================================================

SUBJECT_GUIDELINES = {
    "mathematics": """MATHEMATICS - QUESTION QUALITY RULES:
Do NOT generate basic definition questions like "Define polynomial".
- 50% NUMERICAL/COMPUTATIONAL: problems requiring step-by-step calculation
- 20% APPLICATION/WORD PROBLEMS: real-world scenarios requiring modelling
- 15% PROOF/DERIVATION: prove theorems, derive formulas, verify identities
- 10% CONCEPTUAL (not definitions): questions testing deep understanding
- 5% MCQ: with numerical options
Every math question must involve numbers, equations or logical reasoning.""",

    "physics": """PHYSICS - QUESTION QUALITY RULES:
Prioritize numerical problems with real values and SI units.
- 50% NUMERICAL PROBLEMS with given data and calculated answers
- 20% DERIVATION
- 15% APPLICATION/CONCEPTUAL: why/how questions requiring physical reasoning
- 10% DIAGRAM-BASED: ray, circuit and force diagrams
- 5% MCQ with calculated options""",

    "chemistry": """CHEMISTRY - QUESTION QUALITY RULES:
- 35% NUMERICAL: stoichiometry, molarity, pH, electrochemistry
- 25% REACTIONS & MECHANISMS: balanced equations, products, mechanisms
- 20% CONCEPTUAL/ANALYTICAL: trends, comparisons, predictions
- 10% STRUCTURE/DIAGRAM
- 10% MCQ/SHORT
Use accurate molar masses and proper chemical notation.""",

    "biology": """BIOLOGY - QUESTION QUALITY RULES:
- 30% ANALYTICAL: cause-effect, compare-contrast, explain why
- 25% APPLICATION/CASE-STUDY
- 20% DIAGRAM-BASED
- 15% DESCRIPTIVE (specific processes in detail)
- 10% NUMERICAL: genetics ratios, population ecology""",

    "history": """HISTORY - QUESTION QUALITY RULES:
Generate analytical questions, not recall of dates and names.
- 35% ANALYTICAL/CAUSE-EFFECT
- 25% COMPARATIVE
- 20% SIGNIFICANCE/IMPACT
- 10% SOURCE-BASED/PASSAGE
- 10% CHRONOLOGICAL (combined with analysis)""",

    "english": """ENGLISH - QUESTION QUALITY RULES:
- 30% COMPREHENSION with actual passages and inferential questions
- 25% LITERATURE ANALYSIS
- 20% GRAMMAR IN CONTEXT
- 15% CREATIVE WRITING with specific prompts
- 10% VOCABULARY IN CONTEXT""",

    "economics": """ECONOMICS - QUESTION QUALITY RULES:
- 40% NUMERICAL: demand-supply, GDP, inflation, elasticity, national income
- 25% ANALYTICAL with real-world examples
- 20% GRAPHICAL: draw and interpret curves
- 15% CASE STUDY""",

    "accountancy": """ACCOUNTANCY - QUESTION QUALITY RULES:
- 70% NUMERICAL: journal entries, ledgers, trial balance, final accounts, ratios
- 15% PRACTICAL SCENARIOS
- 10% THEORETICAL with examples
- 5% MCQ
Every numerical must have complete data and a step-by-step solution.""",

    "computer-science": """COMPUTER SCIENCE - QUESTION QUALITY RULES:
- 40% CODE/PROGRAM: write, trace, debug, complete programs
- 25% ALGORITHM/LOGIC: design algorithms, analyze complexity
- 20% CONCEPTUAL (how things work internally)
- 15% MCQ/SHORT with reasoning""",
}

GENERAL_GUIDELINES = """GENERAL SUBJECT - QUESTION QUALITY RULES:
- 35% ANALYTICAL: why/how questions requiring reasoning
- 25% APPLICATION: real-world scenarios and case studies
- 20% COMPARATIVE
- 15% DESCRIPTIVE (specific processes, not bare definitions)
- 5% MCQ/SHORT testing understanding
Cover ALL chapters/topics from the textbook equally."""

QUALITY_DIRECTIVE = """QUESTION GENERATION STANDARDS (HIGHEST PRIORITY):

1. MODERATE-TO-DIFFICULT, EXAM-IMPORTANT QUESTIONS ONLY
- Never generate "Define X", "What is X?" or "State the formula for X" as standalone questions
- Never generate questions only from the first pages or the introduction
- Generate questions requiring analysis, calculation, reasoning and multi-step thinking

DIFFICULTY DISTRIBUTION ({difficulty} level):
- EASY: 30% medium-easy, 50% medium, 20% moderate-hard
- MEDIUM: 15% easy, 50% medium, 35% hard
- HARD: 50% hard, 40% medium, 10% easy
- MIXED: 30% hard, 50% medium, 20% easy

2. ALL-CHAPTERS COVERAGE
- Identify every chapter of the textbook and distribute questions evenly (+/-1) across them
- No chapter may be left out

3. QUESTION SOURCE
- Prioritize exercise/practice sections, solved examples and review questions
- Modify numbers or context so questions are not exact copies

4. SOLUTIONS
- Every question must have a complete step-by-step solution
- Wrap every solution in:
  % START SOLUTION
  ...
  % END SOLUTION"""

PAPER_SKELETON = r"""\documentclass[12pt,a4paper]{{article}}
\usepackage{{amsmath}}
\usepackage{{amssymb}}
\usepackage{{geometry}}
\usepackage{{enumitem}}
\usepackage{{fancyhdr}}
\usepackage{{graphicx}}
\geometry{{margin=0.75in, top=1in, bottom=1in}}

\pagestyle{{fancy}}
\fancyhf{{}}
\fancyhead[L]{{\textbf{{{subject} Examination}}}}
\fancyhead[R]{{\textbf{{Page \thepage}}}}
\fancyfoot[C]{{\small All questions carry marks as indicated}}

\begin{{document}}

\begin{{center}}
{{\Large \textbf{{EXAMINATION PAPER}}}}\\[0.3cm]
{{\large \textbf{{Subject: {subject}}}}}\\[0.2cm]
{{\textbf{{Difficulty Level: {difficulty}}}}}\\[0.2cm]
\rule{{\textwidth}}{{0.4pt}}
\end{{center}}

\section*{{QUESTIONS}}

[Generate each question as:
\subsection*{{Question N [X marks]}}
[Question text]

% START SOLUTION
\subsection*{{Solution}}
[Detailed solution]
% END SOLUTION

\vspace{{0.5cm}}
]

\end{{document}}"""

PAPER_FORMATTING_RULES = r"""CRITICAL FORMATTING:
- Use \subsection*{Question N [X marks]} for each question
- Wrap EVERY solution with % START SOLUTION and % END SOLUTION
- Use $...$ for inline math, \[...\] for display math
- For MCQs: (a), (b), (c), (d) format with plausible distractors
- For Fill in Blanks: \underline{\hspace{3cm}}
- For Column Matching: LaTeX tabular with shuffled Column B
- Number questions consecutively starting from 1

IMPORTANT: Output ONLY the complete LaTeX document. No markdown, no explanations, no code fences."""

_TYPE_LABELS = [
    ("mcq", "Multiple Choice Questions (MCQ)"),
    ("fill_in_blanks", "Fill in the Blanks questions"),
    ("true_false", "True/False questions"),
    ("column_matching", "Column Matching questions"),
    ("general", "General questions"),
]


def build_question_breakdown(options: PaperOptions) -> str:
    """Describe the requested question counts, or '' if none were given."""
    breakdown = ""
    if options.questions_by_type:
        parts = [
            f"{getattr(options.questions_by_type, attr)} {label}"
            for attr, label in _TYPE_LABELS
            if getattr(options.questions_by_type, attr) > 0
        ]
        if parts:
            breakdown += "\n\n1 Mark Questions:\n" + "\n".join(f"- {p}" for p in parts)

    if options.questions_by_marks:
        parts = [
            f"{count} questions of {marks} marks each"
            for marks, count in sorted(options.questions_by_marks.items(), key=lambda kv: _marks_key(kv[0]))
            if count > 0
        ]
        if parts:
            breakdown += "\n\nQuestions by Marks:\n" + "\n".join(f"- {p}" for p in parts)

    return breakdown


def _marks_key(marks: str) -> float:
    try:
        return float(marks)
    except ValueError:
        return float("inf")


def build_question_paper_prompt(
    options: PaperOptions,
    pattern_text: Optional[str] = None,
    source_text: Optional[str] = None,
) -> str:
    """
    Build the question paper generation prompt.

    Args:
        options: Subject, difficulty, question counts and custom instructions
        pattern_text: Structure analysis of a sample paper to replicate
        source_text: Extracted textbook text; when None the textbook PDF is
            attached to the request instead

    Returns:
        Prompt text
    """
    subject = options.subject or "mathematics"
    difficulty = options.difficulty or "mixed"
    guidelines = SUBJECT_GUIDELINES.get(subject, GENERAL_GUIDELINES)
    directive = QUALITY_DIRECTIVE.format(difficulty=difficulty)

    custom = ""
    if options.custom_instructions:
        custom = (
            "\n\nCUSTOM INSTRUCTIONS (HIGHEST PRIORITY - these override other settings):\n"
            f"{options.custom_instructions}"
        )

    if source_text is not None:
        source_text, _, _ = truncate_for_prompt(source_text, SOURCE_TEXT_BUDGET, "TEXTBOOK")
        source_section = f"\n\n=== TEXTBOOK CONTENT ===\n{source_text}\n=== END OF TEXTBOOK CONTENT ==="
        source_ref = "the textbook content below"
    else:
        source_section = ""
        source_ref = "the attached PDF textbook"

    if pattern_text:
        pattern_text, _, _ = truncate_for_prompt(pattern_text, PATTERN_TEXT_BUDGET, "PATTERN")
        return f"""You are an expert {subject} educator and professional LaTeX exam paper creator.

TASK: Generate a NEW exam question paper that EXACTLY replicates the structure and format described in the pattern analysis below, using ONLY content from {source_ref}.

{directive}

{guidelines}

=== QUESTION PAPER PATTERN ANALYSIS ===
{pattern_text}
=== END OF PATTERN ANALYSIS ==={source_section}{custom}

GENERATION RULES:
1. Create a COMPLETE, compilable LaTeX document (\\documentclass through \\end{{document}})
2. For every question in the pattern, generate the SAME type at the SAME position
3. Match the pattern's sections, question counts and marks distribution exactly
4. Generate NEW questions inspired by the textbook exercises; do NOT copy pattern questions
5. Difficulty level: {difficulty} (never below moderate for secondary/higher-secondary)
6. Distribute questions equally across ALL chapters
7. For EVERY question, include a solution wrapped in % START SOLUTION / % END SOLUTION
8. Use proper LaTeX: amsmath, amssymb, geometry, enumitem, fancyhdr

{PAPER_FORMATTING_RULES}"""

    skeleton = PAPER_SKELETON.format(
        subject=subject_label(subject),
        difficulty=difficulty.capitalize(),
    )
    question_types = ", ".join(options.question_types)
    breakdown = build_question_breakdown(options)

    return f"""You are an expert {subject} educator and LaTeX document formatter.

{directive}

{guidelines}

Read {source_ref} thoroughly from the first page to the last.
STEP 1: Identify ALL chapters, units and sections.
STEP 2: For EACH chapter, read the exercise/practice section and the solved examples.
STEP 3: Generate questions inspired by those exercises from EVERY chapter.

Then generate high-quality {subject} questions covering ALL chapters with equal distribution.{breakdown}{custom}{source_section}

Question Requirements:
- Question types: {question_types}
- Difficulty level: {difficulty}
- At least 70% of questions inspired by exercise/practice problems
- Detailed step-by-step solutions with full working

Format your response ENTIRELY in LaTeX using this structure:

{skeleton}

{PAPER_FORMATTING_RULES}"""


PATTERN_ANALYSIS_PROMPT = """You are an expert exam paper analyst. Analyze this examination question paper PDF and extract its COMPLETE structure and format.

Return your analysis in this EXACT format:

PAPER HEADER:
[Exact text of the paper title, institution name, subject, exam name as shown]

PAPER DETAILS:
- Duration: [time duration]
- Total Marks: [total marks]
- Date/Year: [if shown]

GENERAL INSTRUCTIONS:
[List ALL instructions exactly as written in the paper]

QUESTION-BY-QUESTION BREAKDOWN:
For EVERY question in the paper, in order:

Q[number] ([marks] marks):
- Type: [MCQ / Fill-in-blank / True-False / Column-Matching / Numerical / Short-Answer / Long-Answer / Assertion-Reason / Diagram-based / Proof / Case-study]
- Sub-parts: [type and brief description of each sub-part, if any]
- Section: [which section this belongs to]
- Has OR/choice: [Yes/No]
- Sample text: [actual question text, math in $...$]

SECTION SUMMARY:
For EACH section: name, instructions, question number range, marks per question, numbering format, marks display format, MCQ option format.

FORMATTING NOTES:
- Paper layout style, header/footer content, visual elements

Be extremely precise about the TYPE of each question and sub-part. This analysis will be used to generate a new paper where each question MUST be the same type as the original."""

EXTRACTION_PROMPT = """Extract ALL text content from this PDF document, from the FIRST page to the LAST page, including ALL chapters, units and sections.

PRIORITY SECTIONS (do NOT skip these):
1. Exercise / Practice / Solved Examples sections at the end of each chapter. Extract EVERY question.
2. Review Questions / Chapter-end Questions / Miscellaneous Exercises, verbatim.
3. Important formulas, theorems, derivations and key concepts.
4. Table of Contents, so the chapter structure is clear.
5. In-text examples that demonstrate problem-solving.

Return ONLY the extracted text without commentary. Preserve the structure, chapter headings and order of the text.
Mark exercise sections with headers like [EXERCISE - Chapter X]."""


# =============================================================================
# Cheatsheets
# =============================================================================

_SUBJECT_EXTRAS = {
    "chemistry": """CHEMISTRY - EXTRA MANDATORY SECTIONS:
For EACH chapter include an "Important Chemical Equations" subsection listing ALL
reactions in balanced form, grouped by type, with conditions (catalyst, temperature, pressure).""",
    "mathematics": """MATHEMATICS - EXTRA MANDATORY SECTIONS:
For EACH chapter include a formula bank with every identity and theorem, its conditions,
and calculation shortcuts.""",
    "physics": """PHYSICS - EXTRA MANDATORY SECTIONS:
For EACH chapter include every formula with units and sign conventions, and a
"which formula when" guide.""",
}
_SUBJECT_EXTRAS["physical-science"] = _SUBJECT_EXTRAS["chemistry"]

_TYPE_EXTRAS = {
    "stem": "Prioritize formulas, tricks, shortcuts and problem-solving tips. Skip comparison tables unless comparing methods.",
    "humanities": "Prioritize timelines, dates, cause-effect chains and comparison tables.",
    "language": "Focus on grammar, formats and literary devices. No formulas needed.",
    "commerce": "Both formulas and comparison tables are important.",
}


def subject_specific_instructions(subject: str) -> str:
    kind = subject_type(subject)
    extra = _SUBJECT_EXTRAS.get(subject, "")
    return f"{_TYPE_EXTRAS[kind]}\n\n{extra}".strip()


CHEATSHEET_FORMATTING_RULES = r"""FORMATTING RULES:
1. Use \section{} for chapter names and \subsection*{} for headings within chapters
2. All math MUST be in math mode ($...$ inline, \[ \] display)
3. Use \textbf{} for terms being defined and \textbf{(IMP)} for frequently examined items
4. Tables must use tabularx with \hline borders
5. Do NOT use Unicode emoji, \tcolorbox or undefined commands
6. Ensure EVERY \begin{} has a matching \end{} and EVERY { has a matching }
7. Use \newpage between chapters

IMPORTANT: The output must be a COMPLETE, DIRECTLY COMPILABLE LaTeX document.
Do NOT wrap it in markdown code blocks.
Start directly with \documentclass and end with \end{document}."""


def build_cheatsheet_prompt(subject: str, student_class: str) -> str:
    """Build the English cheatsheet prompt."""
    return f"""You are an expert academic content creator and exam preparation specialist. Analyze this ENTIRE textbook PDF from cover to cover and create the most comprehensive exam cheatsheet possible.

SUBJECT: {subject_label(subject)}
CLASS: {class_label(student_class)}

MANDATORY RULES:
1. TEXTBOOK-ONLY: extract content ONLY from this PDF.
2. ALL CHAPTERS: cover every single chapter, grouped chapter by chapter in textbook order.
3. BE EXHAUSTIVE: each chapter needs at least 15-25 bullet points of real content.

FOR EACH CHAPTER INCLUDE:
- Key Topics & Concepts (3-5 line explanation each)
- Important Definitions (\\textbf{{Term}}: definition)
- Formulas, Equations & Expressions with variable meanings and units (STEM/Commerce)
- Key Facts & Points to Remember (10-15 per chapter, exam traps, exceptions)
- Important Tables & Comparisons (where useful for the subject)
- Quick Revision bullets (8-12 per chapter)
- 5 Marks Important Notes: 2-4 exam-ready notes of 80-120 words, formatted as
  \\noindent\\textbf{{1. Topic Title}} \\hfill \\textit{{\\small [5 Marks]}}

{subject_specific_instructions(subject)}

{CHEATSHEET_FORMATTING_RULES}"""


def build_hindi_cheatsheet_prompt(subject: str, student_class: str) -> str:
    """Build the Hindi (Devanagari) cheatsheet prompt."""
    return f"""You are an expert academic content creator. Analyze this ENTIRE textbook PDF and create a COMPREHENSIVE cheatsheet in HINDI (Devanagari script).

SUBJECT: {hindi_subject_label(subject)} ({subject_label(subject)})
CLASS: {hindi_class_label(student_class)} ({class_label(student_class)})

MANDATORY RULES:
1. ALL text content MUST be written in HINDI (Devanagari script). Technical terms can have English in parentheses.
2. Cover EVERY SINGLE chapter from the PDF.
3. Each chapter MUST have at least 15-25 bullet points across all sections.
4. ALL math formulas MUST be in LaTeX math mode: $...$ for inline, \\[ \\] for display.
5. The output MUST be a COMPLETE LaTeX document that compiles with LuaLaTeX using fontspec.
   Do NOT use polyglossia, \\ce{{}}, tcolorbox or multicols.

FOR EACH CHAPTER INCLUDE:
- मुख्य विषय एवं अवधारणाएं (Key Topics & Concepts)
- महत्वपूर्ण परिभाषाएं (Important Definitions): \\textbf{{शब्द (English Term):}} परिभाषा
- सूत्र एवं समीकरण (Formulas & Equations), important ones marked \\textbf{{(परीक्षा महत्वपूर्ण)}}
- याद रखने योग्य बिंदु (Key Points to Remember)
- तुलनात्मक तालिका (Comparison Tables) where applicable
- त्वरित पुनरावृत्ति (Quick Revision)
- 5 अंक महत्वपूर्ण नोट्स (5 Marks Important Notes): \\textbf{{विषय का नाम}} \\hfill \\textit{{[5 अंक]}}

{subject_specific_instructions(subject)}

{CHEATSHEET_FORMATTING_RULES}"""
