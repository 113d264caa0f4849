"""Configuration loading and management."""

from __future__ import annotations

import functools
import re
from dataclasses import dataclass, fields, replace
from pathlib import Path
import tomllib

from .constants import (
    DEFAULT_DATE_FORMAT,
    DEFAULT_LINE_COMMENT,
    DEFAULT_MAX_FILE_SIZE,
    DEFAULT_PANDOC,
    DEFAULT_READ_BUFFER_SIZE,
    LANGUAGE_LINE_COMMENTS,
    LATEX_STYLES,
    OUTPUT_FORMAT_ALIASES,
)
from .models import Dialect, OutputFormat

CONFIG_TABLE = "literate-listing"


@dataclass(frozen=True)
class ListingConfig:
    """Configuration for converting source files into listings.

    Instances are immutable so one configuration can be shared by every
    conversion in a run, including conversions running on worker threads.

    Attributes:
        line_comment: Regular expression fragment that marks a prose line.
        language: Language name whose native line comment replaces
            `line_comment` when set.
        date_format: ``strftime`` format for the listing timestamp; an empty
            string omits the timestamp.
        output_format: Output keyword (``-``, ``md``, ``tex``, ``html``,
            ``latex`` or ``pdf``).
        output_dir: Directory that receives written listings.
        latex_style: Code environment used by TeX output (``listing`` or
            ``verbatim``).
        read_buffer_size: Characters requested per read; longer lines arrive
            in fragments and are reassembled.
        max_file_size: Maximum source file size in bytes.
        pandoc: Executable used for HTML, LaTeX and PDF rendering.

    Examples:
        ListingConfig(language="python", output_format="md")
    """

    # Line classification
    line_comment: str = DEFAULT_LINE_COMMENT
    language: str | None = None

    # Rendering
    date_format: str = DEFAULT_DATE_FORMAT
    output_format: str = OutputFormat.STDOUT.value
    output_dir: str = "."
    latex_style: str = Dialect.LATEX_LISTING.value

    # Limits
    read_buffer_size: int = DEFAULT_READ_BUFFER_SIZE
    max_file_size: int = DEFAULT_MAX_FILE_SIZE

    # External tools
    pandoc: str = DEFAULT_PANDOC


class ConfigError(ValueError):
    """Exception raised when configuration values are invalid.

    Examples:
        raise ConfigError("`output_format` must be one of: -, md, tex")
    """


# Per directory, in lookup order: file name and the tables read from it
CONFIG_SOURCES: tuple[tuple[str, tuple[tuple[str, ...], ...]], ...] = (
    ("pyproject.toml", (("tool", CONFIG_TABLE),)),
    (f".{CONFIG_TABLE}.toml", ((CONFIG_TABLE,), ("tool", CONFIG_TABLE))),
)


def load_config(search_path: Path) -> ListingConfig:
    """Load configuration from the nearest config file.

    Each directory from `search_path` up to the filesystem root is checked for
    `pyproject.toml` (``[tool.literate-listing]``) and then
    `.literate-listing.toml` (``[literate-listing]`` or
    ``[tool.literate-listing]``). The first table found wins, even an empty
    one. TOML files that cannot be read or decoded are skipped.

    Args:
        search_path: Directory used as the starting point for configuration lookup.

    Returns:
        ListingConfig: Normalized configuration, or the defaults when no table
        is found.

    Raises:
        ConfigError: If the table is not a mapping, contains unsupported keys,
            or names an unsupported language.

    Examples:
        load_config(Path("src"))
    """
    start = search_path.resolve()
    for directory in (start, *start.parents):
        for filename, table_paths in CONFIG_SOURCES:
            config_file = directory / filename
            found = _find_table(_read_toml(config_file), table_paths)
            if found is not None:
                table_name, settings = found
                return normalize_config(_config_from_table(settings, table_name, config_file))
    return ListingConfig()


def _read_toml(config_file: Path) -> dict:
    try:
        with open(config_file, "rb") as stream:
            return tomllib.load(stream)
    except (OSError, tomllib.TOMLDecodeError):
        return {}


def _find_table(
    document: dict, table_paths: tuple[tuple[str, ...], ...]
) -> tuple[str, object] | None:
    """Return the dotted name and value of the first table present in `document`."""
    for table_path in table_paths:
        node: object = document
        for key in table_path:
            if not isinstance(node, dict) or key not in node:
                break
            node = node[key]
        else:
            return ".".join(table_path), node
    return None


def _config_from_table(settings: object, table_name: str, config_file: Path) -> ListingConfig:
    if settings is None:
        return ListingConfig()
    if not isinstance(settings, dict):
        raise ConfigError(f"Invalid `[{table_name}]` settings in {config_file}")

    # TOML keys use dashes; dataclass fields use underscores
    values = {key.replace("-", "_"): value for key, value in settings.items()}
    unknown = sorted(set(values) - {field.name for field in fields(ListingConfig)})
    if unknown:
        raise ConfigError(
            f"Unsupported keys in `[{table_name}]` of {config_file}: {', '.join(unknown)}"
        )
    return ListingConfig(**values)


def supported_languages() -> list[str]:
    """Return the language names accepted by ``language``, sorted."""
    return sorted(LANGUAGE_LINE_COMMENTS)


def supported_output_formats() -> list[str]:
    """Return the output format keywords, in declaration order."""
    return [output_format.value for output_format in OutputFormat]


def normalize_config(config: ListingConfig) -> ListingConfig:
    """Resolve aliases and language names into canonical settings.

    Args:
        config: Configuration to normalize.

    Returns:
        ListingConfig: Configuration whose `line_comment` reflects `language`
        and whose `output_format` is a canonical keyword.

    Raises:
        ConfigError: If `language` names an unsupported language.
    """
    line_comment = config.line_comment
    language = config.language
    if language is not None:
        if not isinstance(language, str):
            raise ConfigError("`language` must be a string")
        language = language.lower()
        marker = LANGUAGE_LINE_COMMENTS.get(language)
        if marker is None:
            raise ConfigError(
                f"`{config.language}` isn't recognised. Currently supported languages: "
                f"{', '.join(supported_languages())}"
            )
        line_comment = re.escape(marker)

    output_format = config.output_format
    if isinstance(output_format, str):
        output_format = OUTPUT_FORMAT_ALIASES.get(output_format.lower(), output_format.lower())

    latex_style = config.latex_style
    if isinstance(latex_style, str):
        latex_style = latex_style.lower()

    return replace(
        config,
        line_comment=line_comment,
        language=language,
        output_format=output_format,
        latex_style=latex_style,
    )


def validate_config(config: ListingConfig) -> None:
    """Validate a `ListingConfig` instance.

    Args:
        config: Configuration to validate.

    Returns:
        None.

    Raises:
        ConfigError: If the comment marker is empty or not a valid pattern, the
            output format or LaTeX style is unknown, text settings have the
            wrong type, or numeric limits are non-positive.

    Examples:
        validate_config(ListingConfig(line_comment="#", output_format="md"))
    """
    config = normalize_config(config)

    _ensure_strings(
        {
            "line_comment": config.line_comment,
            "date_format": config.date_format,
            "output_format": config.output_format,
            "output_dir": config.output_dir,
            "latex_style": config.latex_style,
            "pandoc": config.pandoc,
        }
    )

    if not config.line_comment:
        raise ConfigError("`line_comment` must not be empty")
    try:
        build_comment_pattern(config.line_comment)
    except re.error as error:
        raise ConfigError(f"Invalid comment line ({error})") from error

    if config.output_format not in supported_output_formats():
        raise ConfigError(
            f"{config.output_format} is not a supported output format. "
            f"Supported formats: {', '.join(supported_output_formats())}"
        )
    if config.latex_style not in LATEX_STYLES:
        raise ConfigError(f"`latex_style` must be one of: {', '.join(LATEX_STYLES)}")
    if not config.output_dir:
        raise ConfigError("`output_dir` must not be empty")
    if not config.pandoc:
        raise ConfigError("`pandoc` must not be empty")

    _ensure_integers(
        {
            "read_buffer_size": config.read_buffer_size,
            "max_file_size": config.max_file_size,
        }
    )
    _ensure_positive(
        {
            "read_buffer_size": config.read_buffer_size,
            "max_file_size": config.max_file_size,
        }
    )


def apply_overrides(config: ListingConfig, **overrides: object) -> ListingConfig:
    """Apply override values to a `ListingConfig`.

    Args:
        config: Base configuration to update.
        overrides: Override values keyed by configuration field name; values set to
            None are ignored.

    Returns:
        ListingConfig: New configuration with the provided overrides applied. The
        original configuration is returned when no changes are supplied.

    Raises:
        TypeError: If an override name is not defined on `ListingConfig`.

    Examples:
        updated = apply_overrides(config, language="python", output_format="md")
    """
    changes = {key: value for key, value in overrides.items() if value is not None}
    # An explicit marker beats a language inherited from a config file
    if "line_comment" in changes and "language" not in changes:
        changes["language"] = None
    if not changes:
        return config
    return replace(config, **changes)


def build_config(search_path: Path, **overrides: object) -> ListingConfig:
    """Load, override, and validate configuration.

    Args:
        search_path: Directory where configuration files are resolved.
        overrides: Override values keyed by configuration attributes; None values
            are ignored.

    Returns:
        ListingConfig: Validated configuration ready for conversion.

    Raises:
        ConfigError: If configuration loading or validation fails.

    Examples:
        config = build_config(Path.cwd(), language="go", output_format="tex")
    """
    config = load_config(search_path)
    config = apply_overrides(config, **overrides)
    config = normalize_config(config)
    validate_config(config)
    return config


@functools.lru_cache(maxsize=32)
def build_comment_pattern(line_comment: str) -> re.Pattern[str]:
    """Compile the prose-line matcher for a comment marker.

    The pattern accepts optional leading whitespace, the marker, and any
    whitespace after it, so stripping the match leaves only the prose text.

    Args:
        line_comment: Regular expression fragment for the comment marker.

    Returns:
        re.Pattern[str]: Compiled, shareable pattern.

    Raises:
        re.error: If `line_comment` is not a valid regular expression fragment.

    Examples:
        build_comment_pattern("//").match("  // text")
    """
    return re.compile(rf"^\s*{line_comment}\s*")


def resolve_output_format(config: ListingConfig) -> OutputFormat:
    """Map the configured output keyword onto its `OutputFormat` member."""
    try:
        return OutputFormat(normalize_config(config).output_format)
    except ValueError as error:
        raise ConfigError(
            f"{config.output_format} is not a supported output format. "
            f"Supported formats: {', '.join(supported_output_formats())}"
        ) from error


def resolve_dialect(config: ListingConfig) -> Dialect:
    """Pick the markup dialect implied by the output format.

    TeX output uses the configured LaTeX style; every other format is rendered
    from Markdown.
    """
    if resolve_output_format(config) is not OutputFormat.TEX:
        return Dialect.MARKDOWN
    try:
        return Dialect(normalize_config(config).latex_style)
    except ValueError as error:
        raise ConfigError(f"`latex_style` must be one of: {', '.join(LATEX_STYLES)}") from error


def _ensure_positive(values: dict[str, int]) -> None:
    for key, value in values.items():
        if value <= 0:
            raise ConfigError(f"`{key}` must be a positive integer")


def _ensure_integers(values: dict[str, object]) -> None:
    for key, value in values.items():
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigError(f"`{key}` must be an integer")


def _ensure_strings(values: dict[str, object]) -> None:
    for key, value in values.items():
        if not isinstance(value, str):
            raise ConfigError(f"`{key}` must be a string")
