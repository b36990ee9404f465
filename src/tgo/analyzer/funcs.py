"""Template function classification.

A template function takes the runtime context as its first parameter and
returns only an error:

    func page(ctx tgo.Ctx, title string) error

The package name may be aliased or imported several times, and a local
declaration can shadow it, so the classifier tracks, per scope, which
runtime aliases are hidden by local names.
"""

from __future__ import annotations

from .. import runtime
from ..syntax.ast import (
    AssignStmt,
    BlockStmt,
    CaseClause,
    CommClause,
    DeclStmt,
    EndTagStmt,
    Expr,
    FieldList,
    File,
    ForStmt,
    FuncDecl,
    FuncLit,
    FuncType,
    GenDecl,
    Ident,
    IfStmt,
    LabeledStmt,
    Node,
    OpenTagStmt,
    RangeStmt,
    SelectorExpr,
    Spec,
    Stmt,
    SwitchStmt,
    TypeSpec,
    TypeSwitchStmt,
    ValueSpec,
    iter_children,
    unparen,
)
from ..syntax.source import SourceFile
from ..syntax.strconv import unquote
from .errors import UnsupportedImportError


class ShadowSet:
    """Indices of runtime aliases hidden by a local declaration, as a bitmask."""

    __slots__ = ("bits",)

    def __init__(self, bits: int = 0):
        self.bits: int = bits

    def has(self, index: int) -> bool:
        return (self.bits >> index) & 1 == 1

    def with_index(self, index: int) -> ShadowSet:
        return ShadowSet(self.bits | (1 << index))

    def union(self, other: ShadowSet) -> ShadowSet:
        return ShadowSet(self.bits | other.bits)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, ShadowSet) and other.bits == self.bits

    def __hash__(self) -> int:
        return hash(self.bits)

    def __repr__(self) -> str:
        return "ShadowSet(" + bin(self.bits) + ")"


def runtime_aliases(file: File, source: SourceFile) -> list[str]:
    """Return the local names the runtime package is imported under."""
    aliases: list[str] = []
    for spec in file.imports:
        if unquote(spec.path.value) != runtime.MODULE_PATH:
            continue
        if spec.name is None:
            aliases.append(runtime.DEFAULT_ALIAS)
        elif spec.name.name == ".":
            raise UnsupportedImportError(
                "dot import of " + spec.path.value + " is not supported",
                source.position(spec.pos),
            )
        elif spec.name.name != "_":
            aliases.append(spec.name.name)
    return aliases


def field_names(fields: FieldList | None) -> list[Ident]:
    if fields is None:
        return []
    names: list[Ident] = []
    for f in fields.list:
        names.extend(f.names)
    return names


def is_template_func(ftype: FuncType, aliases: list[str], shadowed: ShadowSet) -> bool:
    """Report whether the signature is func(alias.Ctx, ...) error with an unshadowed alias."""
    if len(ftype.params.list) == 0:
        return False
    results = ftype.results
    if results is None or results.num_fields() != 1:
        return False
    result = unparen(results.list[0].type)
    if not isinstance(result, Ident) or result.name != runtime.ERROR_TYPE:
        return False
    first = unparen(ftype.params.list[0].type)
    if not isinstance(first, SelectorExpr) or first.sel.name != runtime.CONTEXT_TYPE:
        return False
    pkg = first.x
    if not isinstance(pkg, Ident):
        return False
    for i, alias in enumerate(aliases):
        if alias == pkg.name and not shadowed.has(i):
            return True
    return False


def _defined_names(stmt: Stmt | None) -> list[Ident]:
    """Names declared by a := statement."""
    if not isinstance(stmt, AssignStmt) or stmt.tok != ":=":
        return []
    return _idents(stmt.lhs)


def _idents(exprs: list[Expr | None]) -> list[Ident]:
    return [x for x in exprs if isinstance(x, Ident)]


def _spec_names(spec: Spec) -> list[Ident]:
    if isinstance(spec, ValueSpec):
        return spec.names
    if isinstance(spec, TypeSpec):
        return [spec.name]
    return []


class Classifier:
    """Walks a file with per-scope shadow sets, collecting template functions."""

    def __init__(self, aliases: list[str]):
        self.aliases: list[str] = aliases
        self.funcs: set[Node] = set()

    def shadow(self, shadowed: ShadowSet, names: list[Ident]) -> ShadowSet:
        for ident in names:
            for i, alias in enumerate(self.aliases):
                if alias == ident.name:
                    shadowed = shadowed.with_index(i)
        return shadowed

    def walk(self, node: Node | None, shadowed: ShadowSet) -> None:
        if node is None:
            return
        if isinstance(node, FuncDecl):
            self.check_func(node, node.type, node.body, node.recv, shadowed)
        elif isinstance(node, FuncLit):
            self.check_func(node, node.type, node.body, None, shadowed)
        elif isinstance(node, BlockStmt):
            self.stmt_list(node.list, shadowed)
        elif isinstance(node, IfStmt):
            self.walk(node.init, shadowed)
            inner = self.shadow(shadowed, _defined_names(node.init))
            self.walk(node.cond, inner)
            self.walk(node.body, inner)
            self.walk(node.else_, inner)
        elif isinstance(node, SwitchStmt):
            self.walk(node.init, shadowed)
            inner = self.shadow(shadowed, _defined_names(node.init))
            self.walk(node.tag, inner)
            self.walk(node.body, inner)
        elif isinstance(node, TypeSwitchStmt):
            self.walk(node.init, shadowed)
            inner = self.shadow(shadowed, _defined_names(node.init))
            self.walk(node.assign, inner)
            # The symbolic variable of "switch v := x.(type)" is declared in every clause.
            clause_scope = self.shadow(inner, _defined_names(node.assign))
            for clause in node.body.list:
                assert isinstance(clause, CaseClause)
                for x in clause.list or []:
                    self.walk(x, inner)
                self.stmt_list(clause.body, clause_scope)
        elif isinstance(node, CaseClause):
            for x in node.list or []:
                self.walk(x, shadowed)
            self.stmt_list(node.body, shadowed)
        elif isinstance(node, CommClause):
            self.walk(node.comm, shadowed)
            self.stmt_list(node.body, self.shadow(shadowed, _defined_names(node.comm)))
        elif isinstance(node, ForStmt):
            self.walk(node.init, shadowed)
            inner = self.shadow(shadowed, _defined_names(node.init))
            self.walk(node.cond, inner)
            self.walk(node.post, inner)
            self.walk(node.body, inner)
        elif isinstance(node, RangeStmt):
            self.walk(node.x, shadowed)
            inner = shadowed
            if node.tok == ":=":
                inner = self.shadow(shadowed, _idents([node.key, node.value]))
            self.walk(node.body, inner)
        else:
            for child in iter_children(node):
                self.walk(child, shadowed)

    def check_func(
        self,
        node: Node,
        ftype: FuncType,
        body: BlockStmt | None,
        recv: FieldList | None,
        shadowed: ShadowSet,
    ) -> None:
        before = self.shadow(shadowed, field_names(ftype.type_params))
        if is_template_func(ftype, self.aliases, before):
            self.funcs.add(node)
        inner = self.shadow(before, field_names(recv))
        inner = self.shadow(inner, field_names(ftype.params))
        inner = self.shadow(inner, field_names(ftype.results))
        if body is not None:
            self.stmt_list(body.list, inner)

    def stmt_list(self, stmts: list[Stmt], shadowed: ShadowSet) -> None:
        """Walk a statement list; declarations shadow only the statements after them."""
        # Shadow sets in force before each open tag; tag content is its own scope.
        saved: list[ShadowSet] = []
        for stmt in stmts:
            s = stmt
            while isinstance(s, LabeledStmt):
                s = s.stmt
            if isinstance(s, DeclStmt):
                shadowed = self.decl(s.decl, shadowed)
            elif isinstance(s, AssignStmt):
                self.walk(s, shadowed)
                shadowed = self.shadow(shadowed, _defined_names(s))
            elif isinstance(s, OpenTagStmt):
                self.stmt_list(s.body, shadowed)
                saved.append(shadowed)
            elif isinstance(s, EndTagStmt):
                if len(saved) > 0:
                    shadowed = saved.pop()
            else:
                self.walk(s, shadowed)

    def decl(self, decl: GenDecl, shadowed: ShadowSet) -> ShadowSet:
        for spec in decl.specs:
            if isinstance(spec, TypeSpec):
                shadowed = self.shadow(shadowed, [spec.name])
                self.walk(spec.type, shadowed)
            else:
                self.walk(spec, shadowed)
                shadowed = self.shadow(shadowed, _spec_names(spec))
        return shadowed


def template_funcs(file: File, source: SourceFile) -> set[Node]:
    """Return the FuncDecl and FuncLit nodes of file that are template functions."""
    aliases = runtime_aliases(file, source)
    classifier = Classifier(aliases)
    if len(aliases) == 0:
        return classifier.funcs
    classifier.walk(file, ShadowSet())
    return classifier.funcs
