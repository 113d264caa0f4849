"""
literate-listing: readable listings from source code.

Lines that match a comment pattern (``//`` by default) are rendered as prose;
every other line is rendered as code. This package can be used both as a CLI
tool and as a library.

CLI Usage:
    literate-listing -l go -o md main.go

Library Usage:
    from literate_listing import Dialect, build_comment_pattern, transform_source

    pattern = build_comment_pattern("//")
    markdown = transform_source(source_text, "main.go", pattern)
    tex = transform_source(source_text, "main.go", pattern, Dialect.LATEX_VERBATIM)
"""

from .config import ConfigError, ListingConfig, build_comment_pattern, build_config
from .exceptions import ListingError, ReadError, RenderError
from .models import Dialect, LineKind, OutputFormat
from .reader import LineReader
from .transformer import (
    ListingFileError,
    classify_line,
    strip_comment,
    transform_file,
    transform_lines,
    transform_source,
)
from .writers import PandocRenderer, RenderOptions, Renderer, write_listing

__version__ = "0.1.0"

__all__ = [
    # Core functionality
    "transform_lines",
    "transform_source",
    "transform_file",
    "classify_line",
    "strip_comment",
    "LineReader",
    # Configuration
    "ListingConfig",
    "build_config",
    "build_comment_pattern",
    # Data models
    "Dialect",
    "LineKind",
    "OutputFormat",
    # Output
    "write_listing",
    "Renderer",
    "RenderOptions",
    "PandocRenderer",
    # Exceptions
    "ConfigError",
    "ListingError",
    "ListingFileError",
    "ReadError",
    "RenderError",
    # Version
    "__version__",
]
