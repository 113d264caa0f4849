from __future__ import annotations

import re
import textwrap
from pathlib import Path

import pytest

from literate_listing.config import (
    ConfigError,
    ListingConfig,
    apply_overrides,
    build_comment_pattern,
    build_config,
    load_config,
    normalize_config,
    resolve_dialect,
    resolve_output_format,
    validate_config,
)
from literate_listing.models import Dialect, OutputFormat


def _write_pyproject(base: Path, body: str) -> Path:
    path = base / "pyproject.toml"
    path.write_text(textwrap.dedent(body).lstrip(), encoding="utf-8")
    return path


def _write_dotfile(base: Path, body: str) -> Path:
    path = base / ".literate-listing.toml"
    path.write_text(textwrap.dedent(body).lstrip(), encoding="utf-8")
    return path


def test_loads_config_from_pyproject(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.literate-listing]
        line_comment = ";;"
        date_format = "%Y"
        output_format = "md"
        output_dir = "docs"
        latex_style = "verbatim"
        read_buffer_size = 128
        max_file_size = 2048
        pandoc = "/opt/pandoc"
        """,
    )

    config = load_config(tmp_path)

    assert config == ListingConfig(
        line_comment=";;",
        date_format="%Y",
        output_format="md",
        output_dir="docs",
        latex_style="verbatim",
        read_buffer_size=128,
        max_file_size=2048,
        pandoc="/opt/pandoc",
    )


def test_loads_dashed_keys(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.literate-listing]
        line-comment = "--"
        output-format = "tex"
        """,
    )

    config = load_config(tmp_path)

    assert config.line_comment == "--"
    assert config.output_format == "tex"


def test_loads_config_from_dotfile(tmp_path: Path):
    _write_dotfile(
        tmp_path,
        """
        [literate-listing]
        language = "haskell"
        """,
    )
    nested = tmp_path / "child"
    nested.mkdir()

    config = load_config(nested)

    assert config.language == "haskell"


def test_load_config_walks_up_directories(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.literate-listing]
        output_format = "pdf"
        """,
    )
    nested = tmp_path / "a" / "b" / "c"
    nested.mkdir(parents=True)

    assert load_config(nested).output_format == "pdf"


def test_pyproject_without_table_is_skipped(tmp_path: Path):
    _write_dotfile(
        tmp_path,
        """
        [tool.literate-listing]
        line_comment = "%%"
        """,
    )
    _write_pyproject(
        tmp_path,
        """
        [project]
        name = "other"
        """,
    )

    assert load_config(tmp_path).line_comment == "%%"


def test_empty_config_table_stops_inheritance(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.literate-listing]
        line_comment = "#"
        """,
    )
    child = tmp_path / "child"
    child.mkdir()
    _write_pyproject(
        child,
        """
        [tool.literate-listing]
        """,
    )

    assert load_config(child) == ListingConfig()


def test_load_config_returns_defaults_when_missing(tmp_path: Path):
    assert load_config(tmp_path) == ListingConfig()


def test_load_config_skips_invalid_toml(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.literate-listing]
        line_comment = "#"
        """,
    )
    child = tmp_path / "child"
    child.mkdir()
    (child / "pyproject.toml").write_text("[tool.literate-listing\n", encoding="utf-8")

    assert load_config(child).line_comment == "#"


def test_load_config_rejects_unknown_keys(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.literate-listing]
        colour = "blue"
        """,
    )

    with pytest.raises(ConfigError, match="tool.literate-listing"):
        load_config(tmp_path)


def test_load_config_names_unknown_keys(tmp_path: Path):
    _write_dotfile(tmp_path, '[literate-listing]\ncolour = "blue"\nline-comment = "#"\n')

    with pytest.raises(ConfigError, match="colour"):
        load_config(tmp_path)


def test_load_config_normalizes_settings(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.literate-listing]
        language = "Python"
        output-format = "Markdown"
        latex-style = "VERBATIM"
        """,
    )

    config = load_config(tmp_path)

    assert config.language == "python"
    assert config.line_comment == re.escape("#")
    assert config.output_format == "md"
    assert config.latex_style == "verbatim"


def test_load_config_rejects_unknown_language(tmp_path: Path):
    _write_dotfile(tmp_path, '[literate-listing]\nlanguage = "cobol"\n')

    with pytest.raises(ConfigError, match="isn't recognised"):
        load_config(tmp_path)


def test_load_config_rejects_non_table(tmp_path: Path):
    _write_dotfile(tmp_path, 'literate-listing = "markdown"\n')

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_normalize_resolves_language():
    config = normalize_config(ListingConfig(line_comment="//", language="Python"))

    assert config.language == "python"
    assert config.line_comment == re.escape("#")


def test_normalize_resolves_output_aliases():
    assert normalize_config(ListingConfig(output_format="markdown")).output_format == "md"
    assert normalize_config(ListingConfig(output_format="stdout")).output_format == "-"
    assert normalize_config(ListingConfig(output_format="PDF")).output_format == "pdf"


def test_unknown_language_lists_alternatives():
    with pytest.raises(ConfigError) as excinfo:
        normalize_config(ListingConfig(language="cobol"))

    message = str(excinfo.value)
    assert "cobol" in message
    for language in ("go", "lisp", "haskell", "python", "ruby", "javascript", "erlang"):
        assert language in message


@pytest.mark.parametrize(
    ("overrides", "message"),
    [
        ({"line_comment": ""}, "`line_comment` must not be empty"),
        ({"line_comment": "("}, "Invalid comment line"),
        ({"output_format": "docx"}, "Supported formats"),
        ({"latex_style": "minted"}, "`latex_style` must be one of"),
        ({"output_dir": ""}, "`output_dir` must not be empty"),
        ({"pandoc": ""}, "`pandoc` must not be empty"),
        ({"read_buffer_size": 0}, "`read_buffer_size` must be a positive integer"),
        ({"max_file_size": -5}, "`max_file_size` must be a positive integer"),
        ({"read_buffer_size": True}, "`read_buffer_size` must be an integer"),
        ({"date_format": 12}, "`date_format` must be a string"),
    ],
)
def test_validate_config_rejects_invalid_values(overrides, message):
    with pytest.raises(ConfigError, match=re.escape(message)):
        validate_config(ListingConfig(**overrides))


def test_validate_config_accepts_defaults():
    validate_config(ListingConfig())


def test_apply_overrides_ignores_none():
    config = ListingConfig(output_format="md")

    assert apply_overrides(config, output_format=None) is config


def test_explicit_marker_clears_configured_language():
    config = apply_overrides(ListingConfig(language="ruby"), line_comment=";;")

    assert config.language is None
    assert normalize_config(config).line_comment == ";;"


def test_language_override_beats_marker():
    config = apply_overrides(ListingConfig(), line_comment=";;", language="erlang")

    assert normalize_config(config).line_comment == re.escape("%%")


def test_build_config_applies_overrides(tmp_path: Path):
    _write_pyproject(
        tmp_path,
        """
        [tool.literate-listing]
        language = "go"
        output_format = "md"
        """,
    )

    config = build_config(tmp_path, output_format="tex", latex_style=None)

    assert config.output_format == "tex"
    assert config.line_comment == re.escape("//")


def test_build_config_validates(tmp_path: Path):
    with pytest.raises(ConfigError):
        build_config(tmp_path, line_comment="[")


def test_resolve_output_format():
    assert resolve_output_format(ListingConfig()) is OutputFormat.STDOUT
    assert resolve_output_format(ListingConfig(output_format="markdown")) is OutputFormat.MARKDOWN

    with pytest.raises(ConfigError):
        resolve_output_format(ListingConfig(output_format="rtf"))


@pytest.mark.parametrize(
    ("output_format", "latex_style", "expected"),
    [
        ("-", "verbatim", Dialect.MARKDOWN),
        ("md", "listing", Dialect.MARKDOWN),
        ("pdf", "verbatim", Dialect.MARKDOWN),
        ("tex", "listing", Dialect.LATEX_LISTING),
        ("tex", "verbatim", Dialect.LATEX_VERBATIM),
    ],
)
def test_resolve_dialect(output_format, latex_style, expected):
    config = ListingConfig(output_format=output_format, latex_style=latex_style)

    assert resolve_dialect(config) is expected


def test_build_comment_pattern_is_cached():
    assert build_comment_pattern("//") is build_comment_pattern("//")


def test_build_comment_pattern_matches_leading_whitespace():
    pattern = build_comment_pattern("//")

    assert pattern.match("\t  //  text")
    assert not pattern.match("x // text")


def test_config_is_immutable():
    config = ListingConfig()

    with pytest.raises(AttributeError):
        config.line_comment = "#"
