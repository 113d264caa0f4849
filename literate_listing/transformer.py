"""Source-to-markup conversion."""

from __future__ import annotations

import io
import re
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path

from .config import (
    ConfigError,
    ListingConfig,
    build_comment_pattern,
    normalize_config,
    resolve_dialect,
    validate_config,
)
from .constants import DEFAULT_READ_BUFFER_SIZE, DIALECT_MARKUP, LATEX_PREAMBLE
from .exceptions import ListingError, ReadError
from .filesystem import safe_read
from .models import Dialect, DialectMarkup, LineKind, TransformerContext
from .reader import LineReader

_LATEX_SPECIALS = {
    "\\": r"\textbackslash{}",
    "&": r"\&",
    "%": r"\%",
    "$": r"\$",
    "#": r"\#",
    "_": r"\_",
    "{": r"\{",
    "}": r"\}",
    "~": r"\textasciitilde{}",
    "^": r"\textasciicircum{}",
}


def escape_latex(text: str) -> str:
    """Escape characters that LaTeX treats specially.

    Examples:
        escape_latex("my_file.go")  # "my\\_file.go"
    """
    return "".join(_LATEX_SPECIALS.get(character, character) for character in text)


def render_timestamp(date_format: str, now: datetime | None = None) -> str | None:
    """Format the listing timestamp.

    Args:
        date_format: ``strftime`` format string. An empty string disables the
            timestamp.
        now: Moment to format; defaults to the current local time.

    Returns:
        str | None: Formatted timestamp, or None when disabled.

    Examples:
        render_timestamp("%Y-%m-%d", datetime(2024, 1, 2))  # "2024-01-02"
    """
    if not date_format:
        return None
    moment = now if now is not None else datetime.now().astimezone()
    return moment.strftime(date_format).strip()


def classify_line(line: str, comment_pattern: re.Pattern[str]) -> LineKind:
    """Return `LineKind.PROSE` when the line matches the comment pattern."""
    return LineKind.PROSE if comment_pattern.match(line) else LineKind.CODE


def strip_comment(line: str, comment_pattern: re.Pattern[str]) -> str:
    """Remove the leading comment marker and the whitespace around it.

    Examples:
        strip_comment("//   hello world", build_comment_pattern("//"))  # "hello world"
    """
    return comment_pattern.sub("", line, count=1)


def _render_header(filename: str, dialect: Dialect, timestamp: str | None) -> str:
    if dialect is Dialect.MARKDOWN:
        header = f"## {filename}\n"
        if timestamp:
            header += f"<small>{timestamp}</small>\n"
        return header + "\n"

    return LATEX_PREAMBLE % {
        "title": escape_latex(filename),
        "date": escape_latex(timestamp) if timestamp else "",
    }


def _enter_prose(ctx: TransformerContext, markup: DialectMarkup, out: list[str]) -> None:
    """Close the open code run, if any, before a prose line."""
    if ctx.in_prose:
        return
    out.append(markup.code_close)
    out.append(markup.prose_break)
    ctx.in_prose = True


def _enter_code(ctx: TransformerContext, markup: DialectMarkup, out: list[str]) -> None:
    """Open a code run, if one is not already open, before a code line."""
    if not ctx.in_prose:
        return
    out.append(markup.code_open)
    ctx.in_prose = False


def transform_lines(
    lines: Iterable[str],
    filename: str,
    comment_pattern: re.Pattern[str],
    dialect: Dialect = Dialect.MARKDOWN,
    timestamp: str | None = None,
) -> str:
    """Convert logical source lines into a complete markup document.

    Lines matching `comment_pattern` become prose with the marker stripped;
    every other line is copied verbatim into a code run. Each run of code is
    delimited exactly once, and a document ending in code is closed before the
    footer.

    Args:
        lines: Logical lines without line terminators.
        filename: Title for the document header.
        comment_pattern: Compiled prose matcher from `build_comment_pattern`.
        dialect: Markup dialect to emit.
        timestamp: Optional generation time shown in the header.

    Returns:
        str: The finished document.

    Examples:
        transform_lines(["// Title", "func main() {}"], "main.go", build_comment_pattern("//"))
    """
    markup = DIALECT_MARKUP[dialect]
    ctx = TransformerContext()
    out = [_render_header(filename, dialect, timestamp)]

    for line in lines:
        if classify_line(line, comment_pattern) is LineKind.PROSE:
            _enter_prose(ctx, markup, out)
            out.append(strip_comment(line, comment_pattern))
        else:
            _enter_code(ctx, markup, out)
            out.append(markup.code_prefix)
            out.append(line)
        out.append("\n")

    # A trailing code run has no prose line to close it
    if not ctx.in_prose:
        out.append(markup.code_close)

    out.append(markup.footer)
    return "".join(out)


def transform_source(
    content: str,
    filename: str,
    comment_pattern: re.Pattern[str],
    dialect: Dialect = Dialect.MARKDOWN,
    timestamp: str | None = None,
    buffer_size: int = DEFAULT_READ_BUFFER_SIZE,
) -> str:
    """Convert in-memory source text; see `transform_lines`."""
    # Universal newlines, matching how `safe_read` opens files
    reader = LineReader(io.StringIO(content, newline=None), buffer_size)
    return transform_lines(reader, filename, comment_pattern, dialect, timestamp)


class ListingFileError(ListingError):
    """Raised when a source file cannot be converted."""


def transform_file(
    filepath: Path,
    config: ListingConfig | None = None,
    dialect: Dialect | None = None,
    timestamp: str | None = None,
    comment_pattern: re.Pattern[str] | None = None,
) -> str:
    """Convert a source file into a markup document.

    Args:
        filepath: Source file to read.
        config: Run configuration; defaults to a new `ListingConfig`.
        dialect: Markup dialect; defaults to the one implied by `config`.
        timestamp: Optional generation time shown in the header.
        comment_pattern: Precompiled prose matcher; compiled from `config`
            when omitted.

    Returns:
        str: The finished document. Never a partial result.

    Raises:
        ListingFileError: If the configuration is invalid, or the file cannot
            be opened, decoded, or read to the end.

    Examples:
        markdown = transform_file(Path("main.go"), ListingConfig(language="go"))
    """
    try:
        config = normalize_config(config or ListingConfig())
        validate_config(config)
        if dialect is None:
            dialect = resolve_dialect(config)
        if comment_pattern is None:
            comment_pattern = build_comment_pattern(config.line_comment)
    except ConfigError as error:
        raise ListingFileError(str(error)) from error

    try:
        with safe_read(filepath) as file:
            reader = LineReader(file, config.read_buffer_size)
            return transform_lines(reader, str(filepath), comment_pattern, dialect, timestamp)
    except ReadError as error:
        if isinstance(error.cause, UnicodeDecodeError):
            line_number = _locate_decode_error(filepath) or error.line_number
            error_message = (
                f"Invalid UTF-8 sequence in {filepath} at line {line_number}: {error.cause}"
            )
        else:
            error_message = f"Error reading {filepath} at line {error.line_number}: {error.cause}"
        raise ListingFileError(error_message) from error
    except IOError as error:
        raise ListingFileError(str(error)) from error


def _locate_decode_error(filepath: Path) -> int | None:
    """Return the one-based line holding the first invalid UTF-8 sequence.

    The text reader only reports where its decoder gave up, which can be many
    lines before the bad byte.
    """
    try:
        raw = filepath.read_bytes()
    except OSError:
        return None

    # bytes.splitlines() breaks on \n, \r\n and \r, like universal newlines
    for line_number, raw_line in enumerate(raw.splitlines(), start=1):
        try:
            raw_line.decode("utf-8")
        except UnicodeDecodeError:
            return line_number
    return None
