"""Package-specific exception types."""

from __future__ import annotations


class ListingError(Exception):
    """Base class for errors raised while producing a listing."""


class ReadError(ListingError):
    """Raised when the source stream fails part-way through a read.

    Args:
        line_number: One-based index of the line that could not be read. Only
            approximate for `UnicodeDecodeError` causes, which surface when the
            decoder reaches the bad chunk rather than the bad line.
        cause: Underlying exception reported by the stream.
    """

    def __init__(self, line_number: int, cause: BaseException):
        self.line_number = line_number
        self.cause = cause
        super().__init__(self._build_message())

    def _build_message(self) -> str:
        return f"Read failed at line {self.line_number}: {self.cause}"


class RenderError(ListingError):
    """Raised when an external renderer cannot produce the output document.

    Args:
        message: Short description of the failure.
        output: Combined stdout/stderr captured from the renderer, if any.
    """

    def __init__(self, message: str, output: str = ""):
        self.output = output
        super().__init__(message)
