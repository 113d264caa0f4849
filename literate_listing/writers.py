"""Delivery of finished listings: standard output, files, and pandoc."""

from __future__ import annotations

import os
import subprocess
import tempfile
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

import click

from .constants import DEFAULT_PANDOC, OUTPUT_EXTENSIONS, PANDOC_LATEX_TEMPLATE
from .exceptions import RenderError
from .filesystem import get_output_path, write_text_atomic
from .models import OutputFormat


@dataclass(frozen=True)
class RenderOptions:
    """Options passed to a `Renderer`.

    Attributes:
        standalone: Produce a complete document rather than a fragment.
        listings: Render code blocks with the LaTeX ``listings`` package.
        template: Template text handed to the renderer, if any.
        extra_args: Additional command-line arguments.
    """

    standalone: bool = False
    listings: bool = False
    template: str | None = None
    extra_args: tuple[str, ...] = ()


class Renderer(Protocol):
    """Converts Markdown into another document format at `output_path`."""

    def render(self, markup: str, output_path: Path, options: RenderOptions) -> None: ...


class PandocRenderer:
    """Render Markdown with the pandoc executable.

    The markup (and the template, when given) is written to temporary files
    that are removed once pandoc returns.

    Args:
        executable: Name or path of the pandoc binary.
    """

    def __init__(self, executable: str = DEFAULT_PANDOC):
        self.executable = executable

    def build_command(
        self,
        source: Path,
        output_path: Path,
        options: RenderOptions,
        template_path: Path | None = None,
    ) -> list[str]:
        command = [self.executable]
        if options.standalone:
            command.append("-s")
        command.extend(["-o", str(output_path)])
        if options.listings:
            command.append("--listings")
        if template_path is not None:
            command.extend(["--template", str(template_path)])
        command.extend(options.extra_args)
        command.append(str(source))
        return command

    def render(self, markup: str, output_path: Path, options: RenderOptions) -> None:
        """Run pandoc on `markup`, writing `output_path`.

        Raises:
            RenderError: If pandoc cannot be started or exits with a non-zero
                status; the error carries pandoc's combined output.
        """
        temp_paths: list[Path] = []
        try:
            source = _write_temp(markup, ".md")
            temp_paths.append(source)
            template_path = None
            if options.template is not None:
                template_path = _write_temp(options.template, ".latex")
                temp_paths.append(template_path)

            command = self.build_command(source, output_path, options, template_path)
            try:
                completed = subprocess.run(
                    command,
                    stdout=subprocess.PIPE,
                    stderr=subprocess.STDOUT,
                    text=True,
                    check=False,
                )
            except OSError as error:
                raise RenderError(f"Could not run {self.executable}: {error}") from error

            if completed.returncode != 0:
                raise RenderError(
                    f"{self.executable} exited with status {completed.returncode}",
                    output=completed.stdout or "",
                )
        finally:
            for path in temp_paths:
                path.unlink(missing_ok=True)


def _write_temp(content: str, suffix: str) -> Path:
    try:
        with tempfile.NamedTemporaryFile(
            mode="w", encoding="UTF-8", suffix=suffix, prefix="literate_pandoc", delete=False
        ) as tmp_file:
            tmp_file.write(content)
    except OSError as error:
        raise RenderError(f"Could not create temporary file: {error}") from error
    return Path(tmp_file.name)


Echo = Callable[[str], None]


def _write_stdout(markup: str, output_path: Path | None, renderer: Renderer, echo: Echo):
    echo(markup)


def _write_file(markup: str, output_path: Path | None, renderer: Renderer, echo: Echo):
    write_text_atomic(output_path, markup)


def _render_html(markup: str, output_path: Path | None, renderer: Renderer, echo: Echo):
    title = output_path.name.removesuffix(OUTPUT_EXTENSIONS[OutputFormat.HTML])
    options = RenderOptions(standalone=True, extra_args=("--metadata", f"pagetitle={title}"))
    renderer.render(markup, output_path, options)


def _render_latex(markup: str, output_path: Path | None, renderer: Renderer, echo: Echo):
    renderer.render(markup, output_path, RenderOptions(standalone=True))


def _render_pdf(markup: str, output_path: Path | None, renderer: Renderer, echo: Echo):
    options = RenderOptions(listings=True, template=PANDOC_LATEX_TEMPLATE)
    renderer.render(markup, output_path, options)


_WRITERS = {
    OutputFormat.STDOUT: _write_stdout,
    OutputFormat.MARKDOWN: _write_file,
    OutputFormat.TEX: _write_file,
    OutputFormat.HTML: _render_html,
    OutputFormat.LATEX: _render_latex,
    OutputFormat.PDF: _render_pdf,
}


def write_listing(
    markup: str,
    source: Path,
    output_format: OutputFormat,
    output_dir: Path | None = None,
    renderer: Renderer | None = None,
    echo: Echo = click.echo,
) -> Path | None:
    """Deliver a finished listing in the requested format.

    Args:
        markup: Complete document produced by the transformer.
        source: Source file the listing was produced from; its basename names
            the output file.
        output_format: Where and how to deliver the listing.
        output_dir: Directory for written files; defaults to the working
            directory.
        renderer: Renderer for HTML, LaTeX and PDF output; defaults to
            `PandocRenderer`.
        echo: Callback used for standard output.

    Returns:
        Path | None: Path of the written file, or None for standard output.

    Raises:
        IOError: If a file cannot be written.
        RenderError: If the renderer fails.

    Examples:
        write_listing(markdown, Path("main.go"), OutputFormat.MARKDOWN, Path("docs"))
    """
    writer = _WRITERS[output_format]
    output_path = None
    if output_format is not OutputFormat.STDOUT:
        output_path = get_output_path(
            source, output_dir or Path(os.curdir), OUTPUT_EXTENSIONS[output_format]
        )
    writer(markup, output_path, renderer or PandocRenderer(), echo)
    return output_path
