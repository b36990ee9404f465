"""Classification of the material between two syntax nodes.

Comments are not part of the syntax tree, so the generator looks at the
raw text between nodes to find line breaks and comments.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

# Token kinds
WHITE = "white"  # spaces and tabs
INDENT = "indent"  # a newline and the indentation after it
SEMI = "semi"
COMMENT = "comment"

BLANKS = " \t\r"


@dataclass
class White:
    kind: str
    pos: int
    text: str

    @property
    def end(self) -> int:
        return self.pos + len(self.text)


def iter_white(src: str, start: int, end: int) -> Iterator[White]:
    """Yield the tokens of src[start:end], stopping at the first character of code."""
    i = start
    while i < end:
        c = src[i]
        if c in BLANKS or c == "\n":
            j = i + 1
            while j < end and src[j] in BLANKS:
                j += 1
            kind = WHITE
            if c == "\n":
                kind = INDENT
            yield White(kind, i, src[i:j])
            i = j
        elif c == ";":
            yield White(SEMI, i, ";")
            i += 1
        elif src.startswith("//", i):
            j = src.find("\n", i, end)
            if j < 0:
                j = end
            yield White(COMMENT, i, src[i:j])
            i = j
        elif src.startswith("/*", i):
            j = src.find("*/", i + 2, end)
            if j < 0:
                raise RuntimeError("unreachable: comment crosses the end of the range")
            yield White(COMMENT, i, src[i : j + 2])
            i = j + 2
        else:
            return


def code_start(src: str, start: int, end: int) -> int:
    """Return the offset of the first code character in src[start:end], or end."""
    pos = start
    for w in iter_white(src, start, end):
        pos = w.end
    return pos


def first_newline(src: str, start: int, end: int) -> int | None:
    """Return the offset of the first line break outside comments before any code."""
    for w in iter_white(src, start, end):
        if w.kind == INDENT:
            return w.pos
    return None


def last_newline(src: str, start: int, end: int) -> int | None:
    """Return the offset of the last line break outside comments before any code."""
    found: int | None = None
    for w in iter_white(src, start, end):
        if w.kind == INDENT:
            found = w.pos
    return found
