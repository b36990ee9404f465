"""Analysis diagnostics."""

from __future__ import annotations

from ..syntax.source import Position


class AnalyzeError:
    """A diagnostic with the span it refers to."""

    def __init__(self, start: Position, end: Position, message: str):
        self.start: Position = start
        self.end: Position = end
        self.message: str = message

    def __str__(self) -> str:
        return str(self.start) + ": " + self.message

    def __repr__(self) -> str:
        return "AnalyzeError(" + repr(str(self)) + ")"


class AnalyzeErrors(Exception):
    """All diagnostics of one analysis, in the order the passes found them."""

    def __init__(self, errors: list[AnalyzeError]):
        self.errors: list[AnalyzeError] = errors
        super().__init__(self.summary())

    def summary(self) -> str:
        if len(self.errors) == 0:
            return "no errors"
        if len(self.errors) == 1:
            return str(self.errors[0])
        return str(self.errors[0]) + " (and " + str(len(self.errors) - 1) + " more errors)"

    def __str__(self) -> str:
        return self.summary()

    def __len__(self) -> int:
        return len(self.errors)

    def __iter__(self):
        return iter(self.errors)

    def __bool__(self) -> bool:
        return len(self.errors) > 0


class UnsupportedImportError(Exception):
    """The runtime package is imported in a way the analyzer cannot follow."""

    def __init__(self, msg: str, position: Position):
        self.msg: str = msg
        self.position: Position = position
        super().__init__(str(position) + ": " + msg)
