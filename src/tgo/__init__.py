"""tgo: HTML-like templates written directly in Go function bodies.

A tgo file is a Go file whose template functions (taking a tgo.Ctx first and
returning only an error) may contain tags, attributes and string literal
statements. The package parses such files, checks them and translates them
into plain Go.
"""

from __future__ import annotations

from .analyzer import AnalyzeError as AnalyzeError, AnalyzeErrors as AnalyzeErrors, UnsupportedImportError as UnsupportedImportError
from .analyzer import analyze as analyze
from .syntax import ParseError as ParseError, TokenizeError as TokenizeError, parse_file as parse_file
from .transpiler import transpile as transpile


def translate(text: str, filename: str = "") -> str:
    """Parse, check and translate a tgo file, raising AnalyzeErrors if the checks fail."""
    file, source = parse_file(text, filename)
    errors = analyze(file, source)
    if errors:
        raise errors
    return transpile(file, source)
