"""Static checks for tgo files.

The passes run in order: tag balance, placement of tgo constructs (using
the template function classification), branch statements (only when the
earlier passes found nothing, since they rely on balanced tags), and line
directive comments.
"""

from __future__ import annotations

from ..syntax.ast import File
from ..syntax.source import SourceFile
from .branches import check_branches
from .context import check_context
from .directives import check_directives
from .errors import AnalyzeError, AnalyzeErrors, UnsupportedImportError as UnsupportedImportError
from .funcs import ShadowSet as ShadowSet, template_funcs
from .tags import check_tags


def analyze(file: File, source: SourceFile) -> AnalyzeErrors:
    """Run every check on file and return the collected diagnostics."""
    errors: list[AnalyzeError] = []
    errors.extend(check_tags(file, source))
    funcs = template_funcs(file, source)
    errors.extend(check_context(file, source, funcs))
    if len(errors) == 0:
        errors.extend(check_branches(file, source))
    errors.extend(check_directives(file, source))
    return AnalyzeErrors(errors)
