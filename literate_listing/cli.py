"""
Produces readable listings from source files.
Lines that match the comment pattern become prose; every other line is
rendered as code in the selected output format.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterator
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from pathlib import Path

import click
from .config import (
    ConfigError,
    ListingConfig,
    build_comment_pattern,
    build_config,
    resolve_dialect,
    resolve_output_format,
    supported_languages,
    supported_output_formats,
)
from .constants import LATEX_STYLES, OUTPUT_FORMAT_ALIASES, OUTPUT_FORMAT_DESCRIPTIONS
from .exceptions import ListingError, RenderError
from .filesystem import (
    collect_file_stat,
    enforce_file_size,
    get_max_file_size,
    normalize_filepath,
    resolve_output_directory,
)
from .models import Dialect, OutputFormat
from .transformer import render_timestamp, transform_file
from .writers import PandocRenderer, write_listing

__all__ = ["cli"]

CONVERSION_ERRORS = (ValueError, OSError, ListingError)

Conversion = tuple[str | None, Exception | None]


def _format_help() -> str:
    lines = ["\b", "Supported formats:"]
    for output_format, description in OUTPUT_FORMAT_DESCRIPTIONS.items():
        lines.append(f"  {output_format.value:<8} {description}")
    return "\n".join(lines)


def _echo_languages() -> None:
    click.echo("Currently supported languages:")
    for language in supported_languages():
        click.echo(f"\t{language}")


def _report_failure(source: str, error: Exception) -> None:
    click.echo(f"[!] couldn't convert {source} to listing: {error}", err=True)
    if isinstance(error, RenderError) and error.output.strip():
        click.echo(f"[!] renderer output:\n{error.output.rstrip()}", err=True)


def convert_source(
    raw_path: str,
    config: ListingConfig,
    dialect: Dialect,
    comment_pattern: re.Pattern[str],
    max_file_size: int,
) -> str:
    """Validate one source path and convert it into markup.

    Raises:
        ValueError: If the path does not name a regular file.
        IOError: If the file is too large or cannot be inspected.
        ListingError: If the file cannot be read to the end.
    """
    filepath = normalize_filepath(raw_path)
    enforce_file_size(collect_file_stat(filepath), max_file_size, filepath)
    timestamp = render_timestamp(config.date_format)
    return transform_file(Path(raw_path).expanduser(), config, dialect, timestamp, comment_pattern)


def _attempt(convert: Callable[[str], str], raw_path: str) -> Conversion:
    try:
        return convert(raw_path), None
    except CONVERSION_ERRORS as error:
        return None, error


def _convert_all(
    raw_paths: tuple[str, ...], convert: Callable[[str], str], jobs: int
) -> Iterator[tuple[str, Conversion]]:
    """Yield each path with its conversion outcome, in argument order."""
    if jobs <= 1 or len(raw_paths) <= 1:
        for raw_path in raw_paths:
            yield raw_path, _attempt(convert, raw_path)
        return

    with ThreadPoolExecutor(max_workers=jobs) as executor:
        yield from zip(raw_paths, executor.map(partial(_attempt, convert), raw_paths))


@click.command(epilog=_format_help())
@click.version_option(package_name="literate-listing")
@click.option("-c", "--line-comment", help="Pattern that marks a prose line (default: //)")
@click.option(
    "-l", "--language", help="Use the line comment of LANGUAGE (`help` lists languages)"
)
@click.option("-t", "--date-format", help="strftime format for the listing date (empty to omit)")
@click.option(
    "-o",
    "--output-format",
    type=click.Choice(
        supported_output_formats() + list(OUTPUT_FORMAT_ALIASES), case_sensitive=False
    ),
    help="Output format",
)
@click.option(
    "-d",
    "--output-dir",
    type=click.Path(file_okay=False),
    help="Directory listings are saved in",
)
@click.option(
    "--latex-style", type=click.Choice(LATEX_STYLES), help="Code environment for TeX output"
)
@click.option("--pandoc", help="pandoc executable used for html, latex and pdf output")
@click.option(
    "-j",
    "--jobs",
    type=click.IntRange(min=1),
    default=1,
    show_default=True,
    help="Number of files converted in parallel",
)
@click.argument("files", nargs=-1, type=click.Path())
def cli(
    files: tuple[str, ...],
    line_comment: str | None = None,
    language: str | None = None,
    date_format: str | None = None,
    output_format: str | None = None,
    output_dir: str | None = None,
    latex_style: str | None = None,
    pandoc: str | None = None,
    jobs: int = 1,
):
    """
    Convert source FILES into literate listings.

    Args:
        files: Source files to convert, each independently.
        line_comment: Override for the prose-line comment pattern.
        language: Language whose native line comment marks prose.
        date_format: Override for the header timestamp format.
        output_format: Output keyword (`-`, `md`, `tex`, `html`, `latex`, `pdf`).
        output_dir: Directory that receives written listings.
        latex_style: `listing` or `verbatim` code environment for TeX output.
        pandoc: Override for the pandoc executable.
        jobs: Number of worker threads used for conversion.

    Returns:
        None.

    Raises:
        click.BadParameter: If the configuration is invalid (bad comment
            pattern, unknown language or format, missing output directory).
        click.ClickException: If environment limits are malformed.

    Examples:
        literate-listing -l python -o md -d docs tool.py
    """
    if language is not None and language.lower() == "help":
        _echo_languages()
        return

    try:
        config = build_config(
            Path.cwd(),
            line_comment=line_comment,
            language=language,
            date_format=date_format,
            output_format=output_format,
            output_dir=output_dir,
            latex_style=latex_style,
            pandoc=pandoc,
        )
        target = resolve_output_format(config)
        dialect = resolve_dialect(config)
    except ConfigError as error:
        raise click.BadParameter(str(error)) from error

    try:
        max_file_size = get_max_file_size(default=config.max_file_size)
    except ValueError as error:
        raise click.ClickException(str(error)) from error

    directory = None
    if target is not OutputFormat.STDOUT:
        try:
            directory = resolve_output_directory(config.output_dir)
        except ValueError as error:
            raise click.BadParameter(str(error), param_hint="'--output-dir'") from error

    convert = partial(
        convert_source,
        config=config,
        dialect=dialect,
        comment_pattern=build_comment_pattern(config.line_comment),
        max_file_size=max_file_size,
    )
    renderer = PandocRenderer(config.pandoc)

    for raw_path, (markup, error) in _convert_all(files, convert, jobs):
        if error is not None:
            _report_failure(raw_path, error)
            continue
        try:
            write_listing(markup, Path(raw_path), target, directory, renderer)
        except (OSError, RenderError) as write_error:
            _report_failure(raw_path, write_error)


if __name__ == "__main__":
    cli()
