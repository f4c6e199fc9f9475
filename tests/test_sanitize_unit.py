"""Unit tests for the LaTeX sanitization pipeline (no network)."""

import sys
import os
from datetime import date

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from lib.mock_responses import MOCK_HINDI_CHEATSHEET, MOCK_PAPER
from lib.sanitize import (
    Profile,
    TokenAllocator,
    balance,
    brace_depth,
    environment_counts,
    escape,
    pdf_filename,
    protect,
    relocate_solutions,
    remove_solutions,
    restore,
    sanitize_document,
    sanitize_latex,
)
from lib.sanitize.balancer import unclosed_environments
from lib.sanitize.escaper import blank_widget
from lib.sanitize.fixups import fix_common_commands, fix_hindi_document
from lib.sanitize.solutions import find_question_number


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _doc(body: str) -> str:
    """Minimal document around a body."""
    return "\\documentclass{article}\n\\begin{document}\n" + body + "\n\\end{document}\n"


def _escape_document(latex: str) -> str:
    text, allocator = protect(latex)
    return restore(escape(text), allocator)


# ---------------------------------------------------------------------------
# protect / restore
# ---------------------------------------------------------------------------

class TestProtector:

    def test_inline_math_replaced_with_token(self):
        text, allocator = protect("Find $x_1 + x_2$ now")
        assert "$" not in text
        assert [span.original for span in allocator.spans.values()] == ["$x_1 + x_2$"]

    def test_display_math_forms(self):
        text, allocator = protect("a \\[ a_1 \\] b $$ b_2 $$ c")
        originals = [span.original for span in allocator.spans.values()]
        assert "\\[ a_1 \\]" in originals
        assert "$$ b_2 $$" in originals
        assert "_" not in text

    def test_line_break_with_spacing_is_not_display_math(self):
        _, allocator = protect("Title\\\\[0.3cm] next $y$ line")
        originals = [span.original for span in allocator.spans.values()]
        assert originals == ["$y$"]

    def test_verb_protected(self):
        _, allocator = protect("Use \\verb|a_b & c| here")
        assert [span.original for span in allocator.spans.values()] == ["\\verb|a_b & c|"]

    def test_tabular_protected(self):
        table = "\\begin{tabular}{|c|c|}\na & b \\\\\n\\end{tabular}"
        text, allocator = protect("Before\n" + table + "\nAfter")
        assert "&" not in text
        assert any(span.original == table for span in allocator.spans.values())

    def test_nested_tabular_protected_whole(self):
        table = "\\begin{tabular}{cc}\n\\begin{tabular}{c} x \\end{tabular} & b \\\\\nc & d\n\\end{tabular}"
        text, allocator = protect("Before\n" + table + "\nAfter")
        assert "&" not in text
        assert [span.original for span in allocator.spans.values()] == [table]

    def test_unclosed_tabular_left_in_place(self):
        text, allocator = protect("\\begin{tabular}{c} a & b")
        assert text == "\\begin{tabular}{c} a & b"
        assert len(allocator) == 0

    def test_comment_lines_use_own_counter(self):
        text, allocator = protect("$a$\n% first note\n$b$\n  % second note")
        assert list(allocator.comments) == ["LATEXCOMMENT0;", "LATEXCOMMENT1;"]
        assert len(allocator.spans) == 2
        assert "note" not in text

    def test_preamble_protected(self):
        latex = _doc("body")
        text, allocator = protect(latex)
        assert text.startswith("PREAMBLEBLOCK0;")
        assert "\\documentclass" not in text

    def test_restore_round_trip_without_escaping(self):
        latex = _doc("Text $a^2$ and \\[ b_1 \\]\n% keep me\n\\verb|x_y|")
        text, allocator = protect(latex)
        assert restore(text, allocator) == latex

    def test_token_followed_by_digit_restores_correctly(self):
        spans = " ".join(f"${i}$" for i in range(12))
        text, allocator = protect(f"{spans} $x$2")
        restored = restore(text, allocator)
        assert restored.endswith("$x$2")
        assert restored.startswith("$0$ $1$")

    def test_allocator_is_per_invocation(self):
        _, first = protect("$a$")
        _, second = protect("$b$")
        assert list(first.spans) == list(second.spans) == ["MATHBLOCK0;"]

    def test_shared_allocator_continues_numbering(self):
        allocator = TokenAllocator()
        protect("$a$", allocator)
        protect("$b$", allocator)
        assert len(allocator.spans) == 2
        assert "MATHBLOCK1;" in allocator.spans


# ---------------------------------------------------------------------------
# escape
# ---------------------------------------------------------------------------

class TestEscaper:

    def test_specials_escaped(self):
        assert escape("a_b & c # d ^ e") == "a\\_b \\& c \\# d \\^{} e"

    def test_already_escaped_left_alone(self):
        assert escape("a\\_b \\& c \\# d") == "a\\_b \\& c \\# d"

    def test_underscore_before_space_not_escaped(self):
        assert escape("word_ next") == "word_ next"

    def test_numeric_percent_escaped(self):
        assert escape("50% discount") == "50\\% discount"
        assert escape("rate is 5%") == "rate is 5\\%"

    def test_non_numeric_percent_untouched(self):
        assert escape("text % comment") == "text % comment"
        assert escape("50%discount") == "50%discount"

    def test_raw_underscore_run_becomes_blank(self):
        assert escape("is ________ degrees") == "is " + blank_widget(2.4) + " degrees"
        assert blank_widget(2.4) == "\\underline{\\hspace{2.4cm}}"

    def test_escaped_underscore_run_becomes_blank(self):
        assert escape("fill \\_\\_\\_\\_ here") == "fill \\underline{\\hspace{1.2cm}} here"

    def test_blank_width_capped(self):
        assert escape("_" * 40) == "\\underline{\\hspace{4cm}}"


# ---------------------------------------------------------------------------
# protect -> escape -> restore
# ---------------------------------------------------------------------------

class TestProtectionRoundTrip:

    def test_protected_spans_byte_identical(self):
        spans = ["$x_1^2 & y$", "\\[ a_b \\# c \\]", "\\verb|p_q|", "$$ \\sum_{i} x^i $$"]
        body = "Intro_text & more: " + " then ".join(spans) + "\n% note_with # chars"
        result = _escape_document(_doc(body))
        for span in spans:
            assert span in result
        assert "% note_with # chars" in result
        assert "Intro\\_text \\& more" in result

    def test_surrounding_text_escaped_as_if_spans_absent(self):
        result = _escape_document("A_1 $m_1$ B#2")
        assert result == "A\\_1 $m_1$ B\\#2"

    def test_percent_example_keeps_comment_line(self):
        latex = _doc("% this is a note\nA 50% discount on everything.")
        result = _escape_document(latex)
        assert "50\\% discount" in result
        assert "\n% this is a note\n" in result

    def test_nested_tabular_survives_escaping(self):
        table = "\\begin{tabular}{cc}\n\\begin{tabular}{c} x \\end{tabular} & b \\\\\nc & d\n\\end{tabular}"
        result = _escape_document(_doc(table))
        assert table in result
        assert "\\&" not in result

    def test_dollar_in_comment_does_not_pair_with_body_math(self):
        result = _escape_document(_doc("% cost in $\nA & B $y$ C & D"))
        assert "\n% cost in $\n" in result
        assert "A \\& B $y$ C \\& D" in result

    def test_preamble_not_escaped(self):
        latex = "\\documentclass{article}\n\\newcommand{\\half}{\\frac{1}{2}}\n\\def\\x#1{#1}\n\\begin{document}\nbody\n\\end{document}"
        result = _escape_document(latex)
        assert "\\def\\x#1{#1}" in result


# ---------------------------------------------------------------------------
# balance
# ---------------------------------------------------------------------------

class TestBalancer:

    def test_brace_depth_ignores_escaped_and_comments(self):
        assert brace_depth("\\{ { } % {{{\n}") == -1
        assert brace_depth("{a{b}") == 1

    def test_environment_counts_ignore_document(self):
        counts = environment_counts(_doc("\\begin{itemize}\n\\item a"))
        assert counts["itemize"] == 1
        assert "document" not in counts

    def test_unclosed_itemize_closed_before_end_document(self):
        latex = "\\begin{document}\n\\begin{itemize}\n\\item a\n\\end{document}"
        result = balance(latex)
        assert result.endswith("\\end{itemize}\n\\end{document}")

    def test_missing_braces_added(self):
        result = balance(_doc("\\textbf{unfinished"))
        assert brace_depth(result) == 0
        assert "}\n\\end{document}" in result

    def test_closers_innermost_first(self):
        latex = _doc("\\begin{enumerate}\n\\item \\begin{itemize}\n\\item x")
        assert unclosed_environments(latex) == ["itemize", "enumerate"]
        result = balance(latex)
        assert result.index("\\end{itemize}") < result.index("\\end{enumerate}")

    def test_invariants_hold_after_balance(self):
        latex = _doc("{\\begin{center}{\\begin{itemize}\\begin{itemize}\n\\item a\\end{itemize}")
        result = balance(latex)
        assert brace_depth(result) == 0
        assert all(n == 0 for n in environment_counts(result).values())

    def test_idempotent(self):
        latex = _doc("{{\\begin{align}\\begin{cases} x")
        once = balance(latex)
        assert balance(once) == once

    def test_appends_when_no_end_document(self):
        assert balance("\\begin{itemize}\n\\item a") == "\\begin{itemize}\n\\item a\n\\end{itemize}\n"

    def test_environment_names_with_digits_counted(self):
        result = balance(_doc("\\begin{env2}\nx"))
        assert "\\end{env2}\n\\end{document}" in result

    def test_balanced_input_unchanged(self):
        latex = _doc("\\begin{itemize}\n\\item {a}\n\\end{itemize}")
        assert balance(latex) == latex


# ---------------------------------------------------------------------------
# solutions
# ---------------------------------------------------------------------------

class TestSolutions:

    def test_find_question_number_highest_index_wins(self):
        text = "\\subsection*{Question 1 [2 marks]}\nfoo\n\\textbf{Q.4} bar\n"
        assert find_question_number(text) == "4"
        assert find_question_number("no headings here") is None

    def test_relocation_example(self):
        latex = "Q.1 $x^2 + 1$ % START SOLUTION\nx=\\pm i\n% END SOLUTION\n\\end{document}"
        result = sanitize_latex(latex, include_solutions=True)
        assert result.startswith("Q.1 $x^2 + 1$")
        assert "START SOLUTION" not in result
        answer = result.index("\\subsection*{Answer 1}")
        assert result.index("x=\\pm i") > answer
        assert result.rstrip().endswith("\\end{document}")

    def test_relocation_completeness(self):
        result = relocate_solutions(MOCK_PAPER)
        for n in (1, 2, 3):
            assert result.count(f"\\subsection*{{Answer {n}}}") == 1
        body = result[:result.index("ANSWER KEY")]
        assert "SOLUTION" not in body
        assert "Factorising" not in body
        assert "\\newpage" in result

    def test_answer_key_in_collection_order(self):
        latex = _doc(
            "\\subsection*{Question 2 [1 marks]}\nB?\n% START SOLUTION\nb\n% END SOLUTION\n"
            "\\subsection*{Question 1 [1 marks]}\nA?\n% START SOLUTION\na\n% END SOLUTION"
        )
        result = relocate_solutions(latex)
        assert result.index("Answer 2") < result.index("Answer 1")

    def test_fallback_numbers_are_sequential(self):
        latex = _doc(
            "First?\n% START SOLUTION\none\n% END SOLUTION\n"
            "Second?\n% START SOLUTION\ntwo\n% END SOLUTION"
        )
        result = relocate_solutions(latex)
        assert "\\subsection*{Answer 1}\none" in result
        assert "\\subsection*{Answer 2}\ntwo" in result

    def test_solution_heading_stripped_from_answer(self):
        result = relocate_solutions(MOCK_PAPER)
        key = result[result.index("ANSWER KEY"):]
        assert "\\subsection*{Solution}" not in key

    def test_no_markers_no_answer_key(self):
        latex = _doc("\\subsection*{Question 1 [1 marks]}\nWhat?")
        assert "ANSWER KEY" not in relocate_solutions(latex)

    def test_remove_solutions_exclusivity(self):
        extra = (
            "\\noindent\\textbf{Q.4} Extra?\n\\noindent\\textbf{Solution:} gone\n"
            "\\textbf{Q.5} More?\n\\textbf{Solution.} also gone\n"
            "\\subsection*{Question 6 [1 marks]}\nLast?\nSolution: plain gone\n"
        )
        latex = MOCK_PAPER.replace("\\end{document}", extra + "\\end{document}")
        result = remove_solutions(latex)
        assert "START SOLUTION" not in result
        assert "END SOLUTION" not in result
        assert "\\subsection*{Solution}" not in result
        assert "\\textbf{Solution" not in result
        assert "Solution:" not in result
        assert "gone" not in result
        assert "Solve for $x$" in result
        assert "Last?" in result

    def test_remove_collapses_vspace_runs(self):
        latex = _doc("Q?\n\\vspace{0.5cm}\n\\vspace{0.5cm}\n\\vspace{1cm}\nNext")
        result = remove_solutions(latex)
        assert result.count("\\vspace") == 1


# ---------------------------------------------------------------------------
# fixups
# ---------------------------------------------------------------------------

class TestFixups:

    def test_enumerate_labels(self):
        assert fix_common_commands("\\begin{enumerate}[(a)]") == "\\begin{enumerate}[label=(\\alph*)]"

    def test_textbf_space(self):
        assert fix_common_commands("\\textbf {x} \\textit  {y}") == "\\textbf{x} \\textit{y}"

    def test_hindi_polyglossia_replaced(self):
        result = fix_hindi_document(MOCK_HINDI_CHEATSHEET)
        assert "polyglossia" not in result
        assert "\\setdefaultlanguage" not in result
        assert "\\hindifont" not in result
        assert "\\setmainfont{FreeSerif}" in result
        assert "\\textenglish" not in result
        assert "Discriminant" in result

    def test_hindi_fontspec_added(self):
        result = fix_hindi_document("\\documentclass{article}\n\\begin{document}\nनमस्ते\n\\end{document}")
        assert "\\usepackage{fontspec}\n\\setmainfont{FreeSerif}" in result

    def test_hindi_tcolorbox_and_ce(self):
        result = fix_hindi_document("\\begin{tcolorbox}[title=x]\n\\ce{H2O}\n\\end{tcolorbox}")
        assert "tcolorbox" not in result
        assert "$\\text{H2O}$" in result


# ---------------------------------------------------------------------------
# full pipeline
# ---------------------------------------------------------------------------

class TestPipeline:

    def test_mock_paper_with_solutions(self):
        result = sanitize_latex(MOCK_PAPER, include_solutions=True)
        assert "50\\% discount" in result
        assert "price \\& the" in result
        assert "\\underline{\\hspace{2.4cm}}" in result
        assert "$3x^2 - 7x + 2 = 0$" in result
        assert result.count("\\subsection*{Answer") == 3

    def test_mock_paper_without_solutions(self):
        result = sanitize_latex(MOCK_PAPER, include_solutions=False)
        assert "Factorising" not in result
        assert "ANSWER KEY" not in result
        assert "\\subsection*{Question 3 [1 marks]}" in result

    def test_truncated_paper_is_closed(self):
        latex = "\\documentclass{article}\n\\begin{document}\n\\begin{enumerate}\n\\item {\\bf cut"
        result = sanitize_latex(latex)
        assert result.rstrip().endswith("\\end{document}")
        assert brace_depth(result) == 0
        assert environment_counts(result)["enumerate"] == 0

    def test_hindi_profile_keeps_solutions_untouched(self):
        latex = _doc("नोट % START SOLUTION\nx\n% END SOLUTION")
        result = sanitize_latex(latex, profile=Profile.HINDI)
        assert "ANSWER KEY" not in result

    def test_sanitize_document_metadata(self):
        document = sanitize_document(
            MOCK_PAPER, subject="Social Science", student_class="Class 10", on=date(2024, 5, 1),
        )
        assert document.filename == "studdybuddy_socialscience_class10_2024-05-01.pdf"
        assert document.compilers == ["pdflatex", "lualatex"]

    def test_hindi_document_metadata(self):
        document = sanitize_document(MOCK_HINDI_CHEATSHEET, profile=Profile.HINDI, on=date(2024, 5, 1))
        assert document.filename.startswith("hindi_cheatsheet_")
        assert document.compilers[0] == "lualatex"

    def test_pure_function(self):
        assert sanitize_latex(MOCK_PAPER) == sanitize_latex(MOCK_PAPER)

    def test_pdf_filename_strips_unsafe(self):
        assert pdf_filename("Maths & Stats!", "X-A", on=date(2025, 1, 2)) == "studdybuddy_mathsstats_xa_2025-01-02.pdf"
