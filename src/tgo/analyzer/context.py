"""Placement rules for tags, attributes and template literals."""

from __future__ import annotations

from ..syntax.ast import (
    AttributeStmt,
    BlockStmt,
    CaseClause,
    CommClause,
    EndTagStmt,
    ExprStmt,
    ForStmt,
    FuncDecl,
    FuncLit,
    IfStmt,
    LabeledStmt,
    Node,
    OpenTagStmt,
    RangeStmt,
    SelectStmt,
    SwitchStmt,
    TemplateLiteral,
    TypeSwitchStmt,
    iter_children,
)
from ..syntax.source import SourceFile
from .errors import AnalyzeError

# Classification contexts
ORDINARY = "ordinary"
TEMPLATE_BODY = "template body"
TAG_HEADER = "tag header"


class ContextChecker:
    """Walks the tree with the context in force, recording misplaced constructs."""

    def __init__(self, source: SourceFile, funcs: set[Node]):
        self.source: SourceFile = source
        self.funcs: set[Node] = funcs
        self.errors: list[AnalyzeError] = []

    def error(self, node: Node, msg: str) -> None:
        start = self.source.position(node.pos)
        end = self.source.position(node.end)
        self.errors.append(AnalyzeError(start, end, msg))

    def walk_all(self, nodes: list, context: str) -> None:
        for node in nodes:
            self.walk(node, context)

    def walk(self, node: Node | None, context: str) -> None:
        if node is None:
            return
        if isinstance(node, (FuncDecl, FuncLit)):
            if isinstance(node, FuncDecl):
                self.walk(node.recv, ORDINARY)
            self.walk(node.type, ORDINARY)
            body_context = ORDINARY
            if node in self.funcs:
                body_context = TEMPLATE_BODY
            self.walk(node.body, body_context)
        elif isinstance(node, BlockStmt):
            self.walk_all(node.list, context)
        elif isinstance(node, LabeledStmt):
            self.walk(node.stmt, context)
        elif isinstance(node, ExprStmt):
            self.walk(node.x, context)
        elif isinstance(node, IfStmt):
            self.walk(node.init, ORDINARY)
            self.walk(node.cond, ORDINARY)
            self.walk(node.body, context)
            self.walk(node.else_, context)
        elif isinstance(node, SwitchStmt):
            self.walk(node.init, ORDINARY)
            self.walk(node.tag, ORDINARY)
            self.walk(node.body, context)
        elif isinstance(node, TypeSwitchStmt):
            self.walk(node.init, ORDINARY)
            self.walk(node.assign, ORDINARY)
            self.walk(node.body, context)
        elif isinstance(node, CaseClause):
            self.walk_all(node.list or [], ORDINARY)
            self.walk_all(node.body, context)
        elif isinstance(node, SelectStmt):
            self.walk(node.body, context)
        elif isinstance(node, CommClause):
            self.walk(node.comm, ORDINARY)
            self.walk_all(node.body, context)
        elif isinstance(node, ForStmt):
            self.walk(node.init, ORDINARY)
            self.walk(node.cond, ORDINARY)
            self.walk(node.post, ORDINARY)
            self.walk(node.body, context)
        elif isinstance(node, RangeStmt):
            self.walk(node.key, ORDINARY)
            self.walk(node.value, ORDINARY)
            self.walk(node.x, ORDINARY)
            self.walk(node.body, context)
        elif isinstance(node, TemplateLiteral):
            if context != TEMPLATE_BODY:
                self.error(node, "template literal is not allowed in this context")
            self.walk_all(node.parts, ORDINARY)
        elif isinstance(node, OpenTagStmt):
            if context != TEMPLATE_BODY:
                self.error(node, "open tag is not allowed in this context")
            self.walk_all(node.body, TAG_HEADER)
        elif isinstance(node, EndTagStmt):
            if context != TEMPLATE_BODY:
                self.error(node, "end tag is not allowed in this context")
        elif isinstance(node, AttributeStmt):
            if context != TAG_HEADER:
                self.error(node, "attribute is not allowed in this context")
            if isinstance(node.value, TemplateLiteral):
                self.walk_all(node.value.parts, ORDINARY)
        else:
            for child in iter_children(node):
                self.walk(child, ORDINARY)


def check_context(file: Node, source: SourceFile, funcs: set[Node]) -> list[AnalyzeError]:
    checker = ContextChecker(source, funcs)
    checker.walk(file, ORDINARY)
    return checker.errors
