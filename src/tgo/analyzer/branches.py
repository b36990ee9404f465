"""Branch statements that would leave a tag body before its end tag."""

from __future__ import annotations

from ..syntax.ast import (
    BranchStmt,
    EndTagStmt,
    ForStmt,
    FuncDecl,
    FuncLit,
    LabeledStmt,
    Node,
    OpenTagStmt,
    RangeStmt,
    ReturnStmt,
    SelectStmt,
    SwitchStmt,
    TypeSwitchStmt,
    iter_children,
)
from ..syntax.source import SourceFile
from .errors import AnalyzeError


class Depths:
    """Number of tags opened since the function, breakable, continuable and labelled statement began."""

    def __init__(self) -> None:
        self.tag: int = 0
        self.break_: int = 0
        self.continue_: int = 0
        self.labels: dict[str, int] = {}

    def clone(self) -> Depths:
        d = Depths()
        d.tag = self.tag
        d.break_ = self.break_
        d.continue_ = self.continue_
        d.labels = dict(self.labels)
        return d

    def open_tag(self) -> None:
        self.tag += 1
        self.break_ += 1
        self.continue_ += 1
        for label in self.labels:
            self.labels[label] += 1

    def close_tag(self) -> None:
        if self.tag == 0 or self.break_ == 0 or self.continue_ == 0:
            raise RuntimeError("unreachable: end tag without a matching open tag")
        self.tag -= 1
        self.break_ -= 1
        self.continue_ -= 1
        for label in self.labels:
            if self.labels[label] == 0:
                raise RuntimeError("unreachable: end tag without a matching open tag after label " + label)
            self.labels[label] -= 1


class BranchChecker:
    """Rejects break, continue, goto and return statements that skip an end tag."""

    def __init__(self, source: SourceFile):
        self.source: SourceFile = source
        self.errors: list[AnalyzeError] = []

    def error(self, stmt: Node, keyword: str) -> None:
        self.errors.append(
            AnalyzeError(
                self.source.position(stmt.pos),
                self.source.position(stmt.end - 1),
                "unexpected "
                + keyword
                + " statement in the middle of a tag body, ensure that all open tags are closed",
            )
        )

    def walk_children(self, node: Node, depths: Depths) -> None:
        for child in iter_children(node):
            self.walk(child, depths)

    def walk(self, node: Node, depths: Depths) -> None:
        if isinstance(node, (FuncDecl, FuncLit)):
            self.walk_children(node, Depths())
        elif isinstance(node, (ForStmt, RangeStmt)):
            inner = depths.clone()
            inner.break_ = 0
            inner.continue_ = 0
            self.walk_children(node, inner)
        elif isinstance(node, (SwitchStmt, TypeSwitchStmt, SelectStmt)):
            inner = depths.clone()
            inner.break_ = 0
            self.walk_children(node, inner)
        elif isinstance(node, LabeledStmt):
            inner = depths.clone()
            inner.labels[node.label.name] = 0
            self.walk_children(node, inner)
        elif isinstance(node, OpenTagStmt):
            depths.open_tag()
            self.walk_children(node, depths)
        elif isinstance(node, EndTagStmt):
            depths.close_tag()
        elif isinstance(node, ReturnStmt):
            if depths.tag != 0:
                self.error(node, "return")
            self.walk_children(node, depths)
        elif isinstance(node, BranchStmt):
            self.check_branch(node, depths)
        else:
            self.walk_children(node, depths)

    def check_branch(self, stmt: BranchStmt, depths: Depths) -> None:
        if stmt.tok == "break" or stmt.tok == "continue":
            if stmt.label is not None and stmt.label.name in depths.labels:
                depth = depths.labels[stmt.label.name]
            elif stmt.tok == "break":
                depth = depths.break_
            else:
                depth = depths.continue_
            if depth != 0:
                self.error(stmt, stmt.tok)
        elif stmt.tok == "goto":
            # TODO: a goto to a label inside the same open tag is safe but still rejected.
            if depths.tag != 0:
                self.error(stmt, stmt.tok)
        elif stmt.tok != "fallthrough":
            raise RuntimeError("unreachable: unknown branch statement " + stmt.tok)


def check_branches(file: Node, source: SourceFile) -> list[AnalyzeError]:
    checker = BranchChecker(source)
    checker.walk(file, Depths())
    return checker.errors
