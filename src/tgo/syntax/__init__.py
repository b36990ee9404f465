"""Go front end with tgo extensions: tokenizer, parser, syntax tree and positions."""

from __future__ import annotations

from .ast import File
from .parse import ParseError as ParseError, parse
from .source import Position as Position, SourceFile
from .tokens import TokenizeError as TokenizeError


def parse_file(text: str, filename: str = "") -> tuple[File, SourceFile]:
    """Parse text and return the tree together with its source file."""
    return parse(text, filename), SourceFile(filename, text)
