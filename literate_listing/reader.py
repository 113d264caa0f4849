"""Logical line reading for source files."""

from __future__ import annotations

from collections.abc import Iterator
from typing import TextIO

from .constants import DEFAULT_READ_BUFFER_SIZE
from .exceptions import ReadError


class LineReader:
    """Deliver one logical line at a time from a text stream.

    The stream is read in chunks of at most `buffer_size` characters, so a
    line longer than the buffer arrives as several fragments. Fragments are
    joined until a line terminator (or end of input) is reached; callers only
    ever see whole lines, without their terminator.

    Lines end where the stream's ``readline`` ends them. Open the stream with
    universal newlines (``newline=None``) so that ``\\r\\n`` and a lone ``\\r``
    terminate lines as well as ``\\n``.

    Args:
        stream: Text stream supporting ``readline(size)``.
        buffer_size: Maximum number of characters requested per read.

    Raises:
        ValueError: If `buffer_size` is not positive.

    Examples:
        reader = LineReader(io.StringIO("a\\nb\\n"))
        reader.next_line()  # ("a", True)
    """

    def __init__(self, stream: TextIO, buffer_size: int = DEFAULT_READ_BUFFER_SIZE):
        if buffer_size <= 0:
            raise ValueError("`buffer_size` must be a positive integer")
        self._stream = stream
        self.buffer_size = buffer_size
        self.line_number = 0

    def next_line(self) -> tuple[str, bool]:
        """Return the next logical line.

        Returns:
            tuple[str, bool]: The line without its terminator and True, or an
            empty string and False once the input is exhausted.

        Raises:
            ReadError: If the stream fails or cannot be decoded. For decode
                errors the line number is the line being read when the
                decoder failed; text streams decode ahead in chunks, so the
                offending byte may sit on a later line.
        """
        fragments: list[str] = []
        while True:
            try:
                fragment = self._stream.readline(self.buffer_size)
            except (OSError, UnicodeDecodeError) as error:
                raise ReadError(self.line_number + 1, error) from error

            if not fragment:
                break
            fragments.append(fragment)
            if fragment.endswith("\n"):
                break

        if not fragments:
            return "", False

        self.line_number += 1
        return _strip_line_terminator("".join(fragments)), True

    def __iter__(self) -> Iterator[str]:
        while True:
            line, ok = self.next_line()
            if not ok:
                return
            yield line


def _strip_line_terminator(line: str) -> str:
    if line.endswith("\r\n"):
        return line[:-2]
    if line.endswith("\n"):
        return line[:-1]
    return line
