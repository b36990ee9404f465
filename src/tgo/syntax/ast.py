"""Syntax tree for Go source extended with tgo tags, attributes and template literals.

Every node carries source offsets: pos is the offset of its first character
and end the offset just past its last one. Nodes compare by identity.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Callable, Iterator


@dataclass(eq=False)
class Node:
    """Base for all syntax tree nodes."""

    pos: int
    end: int


@dataclass(eq=False)
class Comment(Node):
    """A // or /* */ comment, text includes the comment markers."""

    text: str


# ============================================================
# EXPRESSIONS
# ============================================================


@dataclass(eq=False)
class Expr(Node):
    """Base for expression and type nodes."""


@dataclass(eq=False)
class BadExpr(Expr):
    pass


@dataclass(eq=False)
class Ident(Expr):
    name: str


@dataclass(eq=False)
class BasicLit(Expr):
    """INT, FLOAT, IMAG, CHAR or STRING literal; value is the source text."""

    kind: str
    value: str


@dataclass(eq=False)
class TemplateLiteral(Expr):
    """String literal with embedded expressions: strings[0] parts[0] strings[1] ..."""

    strings: list[str]
    parts: list[Expr]


@dataclass(eq=False)
class Ellipsis(Expr):
    """...T in a parameter list, or [...] array length."""

    elt: Expr | None


@dataclass(eq=False)
class FuncLit(Expr):
    type: FuncType
    body: BlockStmt


@dataclass(eq=False)
class CompositeLit(Expr):
    type: Expr | None
    elts: list[Expr]
    lbrace: int
    rbrace: int


@dataclass(eq=False)
class ParenExpr(Expr):
    x: Expr


@dataclass(eq=False)
class SelectorExpr(Expr):
    x: Expr
    sel: Ident


@dataclass(eq=False)
class IndexExpr(Expr):
    x: Expr
    index: Expr


@dataclass(eq=False)
class IndexListExpr(Expr):
    x: Expr
    indices: list[Expr]


@dataclass(eq=False)
class SliceExpr(Expr):
    x: Expr
    low: Expr | None
    high: Expr | None
    max: Expr | None
    slice3: bool


@dataclass(eq=False)
class TypeAssertExpr(Expr):
    """x.(T); type is None for x.(type) in a type switch."""

    x: Expr
    type: Expr | None


@dataclass(eq=False)
class CallExpr(Expr):
    fun: Expr
    args: list[Expr]
    has_ellipsis: bool


@dataclass(eq=False)
class StarExpr(Expr):
    x: Expr


@dataclass(eq=False)
class UnaryExpr(Expr):
    op: str
    x: Expr


@dataclass(eq=False)
class BinaryExpr(Expr):
    x: Expr
    op: str
    y: Expr


@dataclass(eq=False)
class KeyValueExpr(Expr):
    key: Expr
    value: Expr


# ============================================================
# TYPES
# ============================================================


@dataclass(eq=False)
class Field(Node):
    names: list[Ident]
    type: Expr
    tag: BasicLit | None


@dataclass(eq=False)
class FieldList(Node):
    """Parameters, results, struct fields or interface elements."""

    list: list[Field]

    def num_fields(self) -> int:
        n = 0
        for f in self.list:
            if len(f.names) == 0:
                n += 1
            else:
                n += len(f.names)
        return n


@dataclass(eq=False)
class ArrayType(Expr):
    """[len]elt; len is None for slices."""

    len: Expr | None
    elt: Expr


@dataclass(eq=False)
class StructType(Expr):
    fields: FieldList


@dataclass(eq=False)
class FuncType(Expr):
    type_params: FieldList | None
    params: FieldList
    results: FieldList | None


@dataclass(eq=False)
class InterfaceType(Expr):
    methods: FieldList


@dataclass(eq=False)
class MapType(Expr):
    key: Expr
    value: Expr


@dataclass(eq=False)
class ChanType(Expr):
    """dir is "both", "send" or "recv"."""

    dir: str
    value: Expr


# ============================================================
# STATEMENTS
# ============================================================


@dataclass(eq=False)
class Stmt(Node):
    """Base for statements."""


@dataclass(eq=False)
class DeclStmt(Stmt):
    decl: GenDecl


@dataclass(eq=False)
class EmptyStmt(Stmt):
    pass


@dataclass(eq=False)
class LabeledStmt(Stmt):
    label: Ident
    stmt: Stmt


@dataclass(eq=False)
class ExprStmt(Stmt):
    x: Expr


@dataclass(eq=False)
class SendStmt(Stmt):
    chan: Expr
    value: Expr


@dataclass(eq=False)
class IncDecStmt(Stmt):
    x: Expr
    tok: str


@dataclass(eq=False)
class AssignStmt(Stmt):
    lhs: list[Expr]
    tok: str
    rhs: list[Expr]


@dataclass(eq=False)
class GoStmt(Stmt):
    call: Expr


@dataclass(eq=False)
class DeferStmt(Stmt):
    call: Expr


@dataclass(eq=False)
class ReturnStmt(Stmt):
    results: list[Expr]


@dataclass(eq=False)
class BranchStmt(Stmt):
    """break, continue, goto or fallthrough."""

    tok: str
    label: Ident | None


@dataclass(eq=False)
class BlockStmt(Stmt):
    """{ list }; pos is the "{" and end is just past the "}"."""

    list: list[Stmt]

    @property
    def lbrace(self) -> int:
        return self.pos

    @property
    def rbrace(self) -> int:
        return self.end - 1


@dataclass(eq=False)
class IfStmt(Stmt):
    init: Stmt | None
    cond: Expr
    body: BlockStmt
    else_: Stmt | None


@dataclass(eq=False)
class CaseClause(Stmt):
    """case list: body; list is None for default."""

    list: list[Expr] | None
    colon: int
    body: list[Stmt]


@dataclass(eq=False)
class SwitchStmt(Stmt):
    init: Stmt | None
    tag: Expr | None
    body: BlockStmt


@dataclass(eq=False)
class TypeSwitchStmt(Stmt):
    """assign is x := y.(type) or y.(type)."""

    init: Stmt | None
    assign: Stmt
    body: BlockStmt


@dataclass(eq=False)
class CommClause(Stmt):
    """case comm: body; comm is None for default."""

    comm: Stmt | None
    colon: int
    body: list[Stmt]


@dataclass(eq=False)
class SelectStmt(Stmt):
    body: BlockStmt


@dataclass(eq=False)
class ForStmt(Stmt):
    init: Stmt | None
    cond: Expr | None
    post: Stmt | None
    body: BlockStmt


@dataclass(eq=False)
class RangeStmt(Stmt):
    key: Expr | None
    value: Expr | None
    tok: str
    x: Expr
    body: BlockStmt


# ============================================================
# TGO STATEMENTS
# ============================================================


@dataclass(eq=False)
class OpenTagStmt(Stmt):
    """<name header>; body holds the header statements, close_pos is the ">".

    The element content follows as sibling statements up to the EndTagStmt.
    """

    name: Ident
    body: list[Stmt]
    close_pos: int


@dataclass(eq=False)
class EndTagStmt(Stmt):
    """</name>; open_pos is the "<" and close_pos the ">"."""

    name: Ident
    open_pos: int
    close_pos: int


@dataclass(eq=False)
class AttributeStmt(Stmt):
    """@name, @name="value" or @name="text \\{expr}"."""

    name: Ident
    value: BasicLit | TemplateLiteral | None


# ============================================================
# DECLARATIONS
# ============================================================


@dataclass(eq=False)
class Spec(Node):
    """Base for import, value and type specs."""


@dataclass(eq=False)
class ImportSpec(Spec):
    name: Ident | None
    path: BasicLit


@dataclass(eq=False)
class ValueSpec(Spec):
    names: list[Ident]
    type: Expr | None
    values: list[Expr]


@dataclass(eq=False)
class TypeSpec(Spec):
    name: Ident
    type_params: FieldList | None
    assign: bool
    type: Expr


@dataclass(eq=False)
class Decl(Node):
    """Base for top level declarations."""


@dataclass(eq=False)
class GenDecl(Decl):
    """import, const, var or type declaration."""

    tok: str
    specs: list[Spec]


@dataclass(eq=False)
class FuncDecl(Decl):
    recv: FieldList | None
    name: Ident
    type: FuncType
    body: BlockStmt | None


@dataclass(eq=False)
class File(Node):
    filename: str
    package: Ident
    decls: list[Decl]
    imports: list[ImportSpec]
    comments: list[Comment]


# ============================================================
# TRAVERSAL
# ============================================================

# Fields that are not walked: File.imports repeats the import specs of
# File.decls, and comments are not part of the tree proper.
_SKIP_FIELDS: set[str] = {"filename", "imports", "comments"}


def iter_children(node: Node) -> Iterator[Node]:
    """Yield the direct children of node in source order."""
    for f in fields(node):
        if f.name in _SKIP_FIELDS:
            continue
        value = getattr(node, f.name)
        if isinstance(value, Node):
            yield value
        elif isinstance(value, list):
            for item in value:
                if isinstance(item, Node):
                    yield item


def inspect(node: Node, fn: Callable[[Node], bool]) -> None:
    """Call fn on node and its descendants in pre-order; a False result skips the children."""
    if not fn(node):
        return
    for child in iter_children(node):
        inspect(child, fn)


def unparen(x: Expr) -> Expr:
    while isinstance(x, ParenExpr):
        x = x.x
    return x


def is_static_content(stmt: Stmt) -> bool:
    """Report whether stmt is tgo content: a tag, an attribute or a string statement."""
    if isinstance(stmt, (OpenTagStmt, EndTagStmt, AttributeStmt)):
        return True
    if isinstance(stmt, ExprStmt):
        x = stmt.x
        if isinstance(x, TemplateLiteral):
            return True
        return isinstance(x, BasicLit) and x.kind == "STRING"
    return False
