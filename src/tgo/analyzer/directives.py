"""Line directive comments, which would clash with the generated ones."""

from __future__ import annotations

from ..syntax.ast import File
from ..syntax.source import SourceFile
from .errors import AnalyzeError


def check_directives(file: File, source: SourceFile) -> list[AnalyzeError]:
    errors: list[AnalyzeError] = []
    for comment in file.comments:
        # TODO: also matches ordinary comments such as "//lines"; only "line " and "line\t" are directives.
        if comment.text[2:].startswith("line"):
            errors.append(
                AnalyzeError(
                    source.position(comment.pos),
                    source.position(comment.end),
                    "line directive is not allowed inside of the tgo file",
                )
            )
    return errors
