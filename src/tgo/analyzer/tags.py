"""Open/close tag balance within each statement list."""

from __future__ import annotations

from ..syntax.ast import (
    BlockStmt,
    CaseClause,
    CommClause,
    EndTagStmt,
    Node,
    OpenTagStmt,
    Stmt,
    inspect,
)
from ..syntax.source import SourceFile
from ..syntax.strconv import quote
from .errors import AnalyzeError


class TagChecker:
    """Checks that every statement list closes the tags it opens, in order."""

    def __init__(self, source: SourceFile):
        self.source: SourceFile = source
        self.errors: list[AnalyzeError] = []

    def error(self, start: int, end: int, msg: str) -> None:
        self.errors.append(AnalyzeError(self.source.position(start), self.source.position(end), msg))

    def visit(self, node: Node) -> bool:
        if isinstance(node, BlockStmt):
            self.check_list(node.list)
        elif isinstance(node, OpenTagStmt):
            self.check_list(node.body)
        elif isinstance(node, (CaseClause, CommClause)):
            self.check_list(node.body)
        return True

    def check_list(self, stmts: list[Stmt]) -> None:
        stack: list[OpenTagStmt] = []
        for stmt in stmts:
            if isinstance(stmt, OpenTagStmt):
                stack.append(stmt)
            elif isinstance(stmt, EndTagStmt):
                if len(stack) == 0:
                    self.error(stmt.open_pos, stmt.close_pos, "missing open tag")
                    continue
                open_tag = stack.pop()
                if open_tag.name.name.casefold() != stmt.name.name.casefold():
                    self.error(
                        stmt.open_pos,
                        stmt.close_pos,
                        "unexpected close tag: "
                        + quote(stmt.name.name)
                        + ", want: "
                        + quote(open_tag.name.name),
                    )
        for open_tag in stack:
            self.error(open_tag.pos, open_tag.end - 1, "unclosed tag")


def check_tags(file: Node, source: SourceFile) -> list[AnalyzeError]:
    checker = TagChecker(source)
    inspect(file, checker.visit)
    return checker.errors
