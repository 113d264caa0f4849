"""Data models for literate-listing."""

from dataclasses import dataclass
from enum import Enum, auto


class LineKind(Enum):
    """Classification of a logical source line.

    Attributes:
        PROSE: Line matched the comment pattern; rendered as text.
        CODE: Any other line; rendered inside a code block.
    """

    PROSE = auto()
    CODE = auto()


class Dialect(Enum):
    """Markup dialects the transformer can emit."""

    MARKDOWN = "markdown"
    LATEX_VERBATIM = "verbatim"
    LATEX_LISTING = "listing"


class OutputFormat(Enum):
    """Output formats selectable from the command line.

    The value is the keyword accepted by ``--output-format``.
    """

    STDOUT = "-"
    MARKDOWN = "md"
    TEX = "tex"
    HTML = "html"
    LATEX = "latex"
    PDF = "pdf"


@dataclass(frozen=True)
class DialectMarkup:
    """Delimiters emitted around code and prose runs for one dialect.

    Attributes:
        code_open: Emitted once when a code run starts.
        code_close: Emitted once when a code run ends, including at end of input.
        prose_break: Emitted after `code_close` when a prose line follows code.
        code_prefix: Prepended to every code line.
        footer: Emitted after the last line.
    """

    code_open: str
    code_close: str
    prose_break: str
    code_prefix: str
    footer: str


@dataclass
class TransformerContext:
    """Mutable state for a single conversion.

    Attributes:
        in_prose: True when the last emitted line was prose (or nothing has
            been emitted yet).
    """

    in_prose: bool = True
