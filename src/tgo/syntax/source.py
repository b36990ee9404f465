"""Source files and offset to line/column resolution."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Position:
    """Resolved source position. Line is 1-based, column is a 1-based byte column."""

    filename: str
    offset: int
    line: int
    column: int

    def __str__(self) -> str:
        s = str(self.line) + ":" + str(self.column)
        if self.filename != "":
            s = self.filename + ":" + s
        return s


class SourceFile:
    """Source text of one file with a table of line start offsets."""

    def __init__(self, filename: str, text: str):
        self.filename: str = filename
        self.text: str = text
        self.line_starts: list[int] = [0]
        i = 0
        while i < len(text):
            if text[i] == "\n":
                self.line_starts.append(i + 1)
            i += 1

    def line(self, offset: int) -> int:
        """Return the 1-based line containing offset."""
        lo = 0
        hi = len(self.line_starts)
        while hi - lo > 1:
            mid = (lo + hi) // 2
            if self.line_starts[mid] <= offset:
                lo = mid
            else:
                hi = mid
        return lo + 1

    def line_start(self, line: int) -> int:
        return self.line_starts[line - 1]

    def position(self, offset: int) -> Position:
        if offset < 0 or offset > len(self.text):
            raise ValueError("offset " + str(offset) + " out of range")
        line = self.line(offset)
        start = self.line_starts[line - 1]
        column = len(self.text[start:offset].encode("utf-8", "surrogateescape")) + 1
        return Position(self.filename, offset, line, column)
