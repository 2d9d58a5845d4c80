"""
Line-based standard-input scanner offered to native modules.
"""

import sys
from typing import Optional, TextIO


class LineScanner:
    """Reads text one line at a time, looking ahead one line for has_next_line()."""

    def __init__(self, stream: Optional[TextIO] = None):
        self._stream = stream
        self._pending: Optional[str] = None

    @property
    def stream(self) -> TextIO:
        # sys.stdin is looked up lazily so a host can swap it after creation
        return self._stream if self._stream is not None else sys.stdin

    def _fill(self) -> None:
        if self._pending is None:
            line = self.stream.readline()
            if line:
                self._pending = line

    def has_next_line(self) -> bool:
        self._fill()
        return self._pending is not None

    def next_line(self) -> str:
        """Return the next line without its terminator; EOFError at end of input."""
        self._fill()
        if self._pending is None:
            raise EOFError("no more input lines")
        line, self._pending = self._pending, None
        if line.endswith("\r\n"):
            return line[:-2]
        if line.endswith("\n"):
            return line[:-1]
        return line
