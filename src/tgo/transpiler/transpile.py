"""Translation of a validated tgo file into Go source.

The source is copied through lazily: ordinary code is appended verbatim
as the walk passes it, and tgo statements are replaced by calls on the
template context. Static text of consecutive tgo statements is merged
into a single WriteString call, and every template literal expression
becomes a DynamicWrite call. After generated code, a line directive maps
the following source text back to its original position.

Tags do not introduce Go scopes in the source, so a variable declared
between an open tag and its end tag would leak into the code that
follows. Each tag header and tag body therefore gets a block in the
output; the block is opened only once an ordinary statement appears in
it, so tag-only content is left flat.
"""

from __future__ import annotations

import logging

from ..analyzer.funcs import template_funcs
from ..runtime import CONTEXT_PARAM, DYNAMIC_WRITE, GENERATED_MARKER, WRITE_STRING
from ..syntax.ast import (
    AttributeStmt,
    BasicLit,
    BlockStmt,
    CaseClause,
    CommClause,
    EndTagStmt,
    Expr,
    ExprStmt,
    File,
    FuncDecl,
    FuncLit,
    FuncType,
    Node,
    OpenTagStmt,
    Stmt,
    TemplateLiteral,
    is_static_content,
    iter_children,
)
from ..syntax.source import SourceFile
from ..syntax.strconv import quote, unquote
from .white import code_start, first_newline, last_newline

logger = logging.getLogger("tgo.transpile")


class _Scope:
    """Output block standing for a tag header or a tag body."""

    def __init__(self, header: bool):
        self.header: bool = header
        self.opened: bool = False


class _Frame:
    """Statement list being translated, with the tag scopes open in it."""

    def __init__(self, base: str):
        self.base: str = base
        self.scopes: list[_Scope] = []

    def indent(self) -> str:
        n = 0
        for scope in self.scopes:
            if scope.opened:
                n += 1
        return self.base + "\t" * n


class _StaticWrite:
    """WriteString call whose text grows while static content is merged into it."""

    def __init__(self, ctx: str, indent: str):
        self.ctx: str = ctx
        self.indent: str = indent
        self.parts: list[str] = []

    def render(self) -> str:
        return (
            "if err := "
            + self.ctx
            + "."
            + WRITE_STRING
            + "("
            + quote("".join(self.parts))
            + "); err != nil {\n"
            + self.indent
            + "\treturn err\n"
            + self.indent
            + "}"
        )


class Transpiler:
    """Produces Go source for one validated file."""

    def __init__(self, file: File, source: SourceFile):
        self.file: File = file
        self.source: SourceFile = source
        self.src: str = source.text
        self.out: list[str | _StaticWrite] = []
        # Offset of the first source character not yet copied or skipped.
        self.last: int = 0
        # Whether generated code was emitted since the last copied source text.
        self.directive_owed: bool = False
        self.static: _StaticWrite | None = None
        self.funcs: set[Node] = template_funcs(file, source)
        # Context parameter of each enclosing function, None for ordinary functions.
        self.ctx_names: list[str | None] = []

    def transpile(self) -> str:
        self.out.append(GENERATED_MARKER + "\n\n//line " + self.source.filename + ":1:1\n")
        for decl in self.file.decls:
            self.visit(decl)
        self.copy_to(len(self.src))
        parts: list[str] = []
        for item in self.out:
            if isinstance(item, _StaticWrite):
                parts.append(item.render())
            else:
                parts.append(item)
        return "".join(parts)

    # ── Output ──────────────────────────────────────────────

    def emit(self, text: str) -> None:
        """Append generated code."""
        logger.debug("emit %r", text)
        self.out.append(text)
        self.static = None
        self.directive_owed = True

    def copy_to(self, offset: int) -> None:
        """Append the source text up to offset, preceded by a line directive when one is owed."""
        if offset < self.last:
            raise RuntimeError("unreachable: copy backwards from " + str(self.last) + " to " + str(offset))
        if offset == self.last:
            return
        if self.directive_owed:
            self.resume(offset)
        logger.debug("copy %d..%d", self.last, offset)
        self.out.append(self.src[self.last : offset])
        self.static = None
        self.last = offset

    def resume(self, offset: int) -> None:
        """Map the source text starting at self.last back to its position."""
        self.directive_owed = False
        newline = first_newline(self.src, self.last, offset)
        if newline is not None:
            # Comments on the line of the generated code stay on that line.
            self.out.append(self.src[self.last : newline])
            self.last = newline
            line = self.source.position(newline + 1).line
            self.out.append("\n//line " + self.source.filename + ":" + str(line) + ":1")
            return
        code = code_start(self.src, self.last, offset)
        # The source separator was dropped with the tgo statement before it.
        if self.last_char() not in ("", "\n", "{", ":", ";"):
            self.out.append(";")
        self.out.append(" " + self.inline_directive(code))
        self.last = code

    def inline_directive(self, offset: int) -> str:
        """Block comment directive for the text at offset, to be followed by that text."""
        pos = self.source.position(offset)
        if pos.column == 1:
            return "/*line " + self.source.filename + ":" + str(pos.line) + ":1*/"
        # The directive is followed by a space, which takes the column before the text.
        return "/*line " + self.source.filename + ":" + str(pos.line) + ":" + str(pos.column - 1) + "*/ "

    def last_char(self) -> str:
        for item in reversed(self.out):
            if isinstance(item, _StaticWrite):
                return "}"
            if item:
                return item[-1]
        return ""

    def line_indent(self) -> str:
        """Leading whitespace of the output line being written."""
        tail: list[str] = []
        for item in reversed(self.out):
            text = item.render() if isinstance(item, _StaticWrite) else item
            i = text.rfind("\n")
            if i >= 0:
                tail.append(text[i + 1 :])
                break
            tail.append(text)
        line = "".join(reversed(tail))
        return line[: len(line) - len(line.lstrip(" \t"))]

    def skip_to(self, offset: int) -> None:
        """Drop the source text before a tgo statement at offset."""
        if not self.directive_owed:
            # Keep the rest of the line of the preceding ordinary code.
            newline = last_newline(self.src, self.last, offset)
            if newline is not None:
                self.copy_to(newline)
        self.last = offset

    # ── Writes ──────────────────────────────────────────────

    def ctx(self) -> str:
        if len(self.ctx_names) == 0 or self.ctx_names[-1] is None:
            raise RuntimeError("unreachable: tgo content outside of a template function")
        return self.ctx_names[-1]

    def write_static(self, frame: _Frame, text: str) -> None:
        if text == "":
            return
        if self.static is None:
            indent = frame.indent()
            self.emit("\n" + indent)
            self.static = _StaticWrite(self.ctx(), indent)
            self.out.append(self.static)
        self.static.parts.append(text)
        self.directive_owed = True

    def write_dynamic(self, frame: _Frame, x: Expr) -> None:
        indent = frame.indent()
        self.emit("\n" + indent + "if err := " + self.ctx() + "." + DYNAMIC_WRITE + "( " + self.inline_directive(x.pos))
        self.last = x.pos
        self.directive_owed = False
        self.visit(x)
        self.copy_to(x.end)
        self.emit("); err != nil {\n" + indent + "\treturn err\n" + indent + "}")

    def write_template(self, frame: _Frame, lit: TemplateLiteral) -> None:
        for i, part in enumerate(lit.parts):
            self.write_static(frame, lit.strings[i])
            self.write_dynamic(frame, part)
        self.write_static(frame, lit.strings[-1])

    # ── Scopes ──────────────────────────────────────────────

    def open_scopes(self, frame: _Frame) -> None:
        for scope in frame.scopes:
            if not scope.opened:
                self.emit("\n" + frame.indent() + "{")
                scope.opened = True

    def close_scope(self, frame: _Frame) -> None:
        scope = frame.scopes.pop()
        if scope.opened:
            self.emit("\n" + frame.indent() + "}")
        elif scope.header:
            # The end of a header starts a new write.
            self.static = None

    # ── Statements ──────────────────────────────────────────

    def in_template(self) -> bool:
        return len(self.ctx_names) > 0 and self.ctx_names[-1] is not None

    def stmt_list(self, stmts: list[Stmt], frame: _Frame) -> None:
        for stmt in stmts:
            if self.in_template() and is_static_content(stmt):
                self.static_stmt(stmt, frame)
            else:
                self.open_scopes(frame)
                self.visit(stmt)
                self.copy_to(stmt.end)

    def static_stmt(self, stmt: Stmt, frame: _Frame) -> None:
        self.skip_to(stmt.pos)
        if isinstance(stmt, OpenTagStmt):
            self.write_static(frame, "<" + stmt.name.name)
            frame.scopes.append(_Scope(True))
            self.last = stmt.name.end
            self.stmt_list(stmt.body, frame)
            self.skip_to(stmt.close_pos)
            self.close_scope(frame)
            self.write_static(frame, ">")
            frame.scopes.append(_Scope(False))
        elif isinstance(stmt, EndTagStmt):
            self.close_scope(frame)
            self.write_static(frame, "</" + stmt.name.name + ">")
        elif isinstance(stmt, AttributeStmt):
            value = stmt.value
            if value is None:
                self.write_static(frame, " " + stmt.name.name)
            elif isinstance(value, BasicLit):
                self.write_static(frame, " " + stmt.name.name + '="' + unquote(value.value) + '"')
            else:
                self.write_static(frame, " " + stmt.name.name + '="')
                self.write_template(frame, value)
                self.write_static(frame, '"')
        elif isinstance(stmt, ExprStmt):
            x = stmt.x
            if isinstance(x, TemplateLiteral):
                self.write_template(frame, x)
            elif isinstance(x, BasicLit):
                self.write_static(frame, unquote(x.value))
            else:
                raise RuntimeError("unreachable: unexpected static expression " + type(x).__name__)
        else:
            raise RuntimeError("unreachable: unexpected static statement " + type(stmt).__name__)
        self.last = stmt.end
        self.directive_owed = True

    def block(self, block: BlockStmt) -> None:
        self.copy_to(block.lbrace + 1)
        frame = _Frame(self.line_indent() + "\t")
        self.stmt_list(block.list, frame)
        if len(frame.scopes) != 0:
            raise RuntimeError("unreachable: tag left open at the end of a block")

    def clause(self, clause: CaseClause | CommClause) -> None:
        if isinstance(clause, CaseClause):
            for x in clause.list or []:
                self.visit(x)
        elif clause.comm is not None:
            self.visit(clause.comm)
        self.copy_to(clause.colon + 1)
        frame = _Frame(self.line_indent() + "\t")
        self.stmt_list(clause.body, frame)
        if len(frame.scopes) != 0:
            raise RuntimeError("unreachable: tag left open at the end of a case clause")

    # ── Functions ───────────────────────────────────────────

    def context_param(self, ftype: FuncType) -> str:
        """Return the name of the context parameter, naming it when it is unnamed or blank."""
        first = ftype.params.list[0]
        if len(first.names) == 0:
            # Parameters are either all named or all unnamed.
            for i, field in enumerate(ftype.params.list):
                self.copy_to(field.type.pos)
                self.out.append(CONTEXT_PARAM + " " if i == 0 else "_ ")
            return CONTEXT_PARAM
        name = first.names[0]
        if name.name == "_":
            self.copy_to(name.pos)
            self.out.append(CONTEXT_PARAM)
            self.last = name.end
            return CONTEXT_PARAM
        return name.name

    def func(self, node: FuncDecl | FuncLit) -> None:
        ctx: str | None = None
        if node in self.funcs:
            ctx = self.context_param(node.type)
            logger.debug("template function at offset %d, context %s", node.pos, ctx)
        self.ctx_names.append(ctx)
        for child in iter_children(node):
            self.visit(child)
        self.ctx_names.pop()

    def visit(self, node: Node | None) -> None:
        if node is None:
            return
        if isinstance(node, (FuncDecl, FuncLit)):
            self.func(node)
        elif isinstance(node, BlockStmt):
            self.block(node)
        elif isinstance(node, (CaseClause, CommClause)):
            self.clause(node)
        else:
            for child in iter_children(node):
                self.visit(child)


def transpile(file: File, source: SourceFile) -> str:
    """Return the Go translation of a file that analyzed without errors."""
    return Transpiler(file, source).transpile()
