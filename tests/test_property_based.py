from __future__ import annotations

import string

from hypothesis import assume, given
from hypothesis import strategies as st

from literate_listing.config import build_comment_pattern
from literate_listing.models import Dialect
from literate_listing.transformer import strip_comment, transform_lines, transform_source

PATTERN = build_comment_pattern("//")

# Excludes characters str.splitlines would treat as line boundaries
line_text = st.text(alphabet=string.ascii_letters + string.digits + " \t(){}[];:=+-*/.,'\"", max_size=40)
prose_lines = line_text.map(lambda text: f"// {text}")
code_lines = line_text.filter(lambda text: not PATTERN.match(text))


@given(st.lists(prose_lines, max_size=20))
def test_prose_only_emits_no_code_markup(lines):
    markdown = transform_lines(lines, "f.go", PATTERN)
    latex = transform_lines(lines, "f.go", PATTERN, Dialect.LATEX_VERBATIM)

    assert not any(line.startswith("\t") for line in markdown.split("\n"))
    assert "\\begin{verbatim}" not in latex
    assert "\\end{verbatim}" not in latex


@given(st.lists(code_lines, min_size=1, max_size=20))
def test_code_only_is_delimited_once(lines):
    for dialect, begin, end in [
        (Dialect.LATEX_VERBATIM, "\\begin{verbatim}", "\\end{verbatim}"),
        (Dialect.LATEX_LISTING, "\\begin{lstlisting}", "\\end{lstlisting}"),
    ]:
        output = transform_lines(lines, "f.go", PATTERN, dialect)
        assert output.count(begin) == 1
        assert output.count(end) == 1
        assert output.index(begin) < output.index(end)


@given(st.lists(code_lines, min_size=1, max_size=20))
def test_code_only_markdown_lines_have_one_tab(lines):
    output = transform_lines(lines, "f.go", PATTERN)

    body = output.split("\n")[3:-1]
    assert body == [f"\t{line}" for line in lines]


@given(st.integers(min_value=0, max_value=12), st.integers(min_value=0, max_value=12))
def test_marker_stripping_ignores_whitespace(before, after):
    line = " " * before + "//" + " " * after + "hello world"

    assert strip_comment(line, PATTERN) == "hello world"


@given(st.lists(st.one_of(prose_lines, code_lines), max_size=30))
def test_latex_blocks_are_balanced(lines):
    output = transform_lines(lines, "f.go", PATTERN, Dialect.LATEX_LISTING)

    assert output.count("\\begin{lstlisting}") == output.count("\\end{lstlisting}")
    assert output.endswith("\\end{document}\n")


@given(st.lists(st.one_of(prose_lines, code_lines), max_size=30), st.integers(1, 16))
def test_buffer_size_does_not_change_output(lines, buffer_size):
    content = "".join(f"{line}\n" for line in lines)

    assert transform_source(content, "f.go", PATTERN, buffer_size=buffer_size) == transform_source(
        content, "f.go", PATTERN
    )


@given(st.lists(st.one_of(prose_lines, code_lines), max_size=30))
def test_transformation_is_deterministic(lines):
    assume(lines)

    assert transform_lines(lines, "f.go", PATTERN) == transform_lines(lines, "f.go", PATTERN)
