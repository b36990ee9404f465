"""Go parser extended with tgo tags, attributes and template literals.

Recursive descent, one method per grammar production, following the Go
language grammar. Statement level additions:

    <name header...>     open tag, header statements up to the ">"
    </name>              end tag
    @name                attribute, optionally ="..." with a string or template literal
    "text \\{expr}"       string or template literal statement (static content)
"""

from __future__ import annotations

from .ast import (
    ArrayType,
    AssignStmt,
    AttributeStmt,
    BasicLit,
    BinaryExpr,
    BlockStmt,
    BranchStmt,
    CallExpr,
    CaseClause,
    ChanType,
    CommClause,
    Comment,
    CompositeLit,
    Decl,
    DeclStmt,
    DeferStmt,
    Ellipsis,
    EmptyStmt,
    EndTagStmt,
    Expr,
    ExprStmt,
    Field,
    FieldList,
    File,
    ForStmt,
    FuncDecl,
    FuncLit,
    FuncType,
    GenDecl,
    GoStmt,
    Ident,
    IfStmt,
    ImportSpec,
    IncDecStmt,
    IndexExpr,
    IndexListExpr,
    InterfaceType,
    KeyValueExpr,
    LabeledStmt,
    MapType,
    OpenTagStmt,
    ParenExpr,
    RangeStmt,
    ReturnStmt,
    SelectStmt,
    SelectorExpr,
    SendStmt,
    SliceExpr,
    Spec,
    StarExpr,
    Stmt,
    StructType,
    SwitchStmt,
    TemplateLiteral,
    TypeAssertExpr,
    TypeSpec,
    TypeSwitchStmt,
    UnaryExpr,
    ValueSpec,
    is_static_content,
)
from .tokens import (
    KEYWORDS,
    TK_CHAR,
    TK_EOF,
    TK_FLOAT,
    TK_IDENT,
    TK_IMAG,
    TK_INT,
    TK_OP,
    TK_STRING,
    TK_TEMPLATE,
    Token,
    line_col,
    tokenize,
)

BINARY_PREC: dict[str, int] = {
    "||": 1,
    "&&": 2,
    "==": 3,
    "!=": 3,
    "<": 3,
    "<=": 3,
    ">": 3,
    ">=": 3,
    "+": 4,
    "-": 4,
    "|": 4,
    "^": 4,
    "*": 5,
    "/": 5,
    "%": 5,
    "<<": 5,
    ">>": 5,
    "&": 5,
    "&^": 5,
}

ASSIGN_OPS: set[str] = {
    "=",
    ":=",
    "+=",
    "-=",
    "*=",
    "/=",
    "%=",
    "&=",
    "|=",
    "^=",
    "<<=",
    ">>=",
    "&^=",
}

UNARY_OPS: set[str] = {"+", "-", "!", "^", "&", "~"}

LITERAL_TYPES: set[str] = {TK_INT, TK_FLOAT, TK_IMAG, TK_CHAR, TK_STRING}

# Tokens that can begin a type
TYPE_START: set[str] = {"*", "[", "(", "func", "map", "chan", "struct", "interface", "<-"}

# Simple statement modes
BASIC = 0
LABEL_OK = 1
RANGE_OK = 2


class ParseError(Exception):
    """Parse error with location info."""

    def __init__(self, msg: str, line: int, col: int):
        self.msg: str = msg
        self.line: int = line
        self.col: int = col
        super().__init__(msg + " at line " + str(line) + " col " + str(col))


class _RangeClause:
    """Header of a for-range loop, before its body is parsed."""

    def __init__(self, pos: int, lhs: list[Expr], tok: str, x: Expr):
        self.pos: int = pos
        self.lhs: list[Expr] = lhs
        self.tok: str = tok
        self.x: Expr = x


class Parser:
    """Recursive descent parser for Go with tgo extensions."""

    def __init__(self, tokens: list[Token], source: str, filename: str = ""):
        self.tokens: list[Token] = tokens
        self.source: str = source
        self.filename: str = filename
        self.pos: int = 0
        # Below zero inside control clauses, where T{ starts the block, not a literal.
        self.expr_lev: int = 0

    # ── Helpers ──────────────────────────────────────────────

    def current(self) -> Token:
        return self.tokens[self.pos]

    def peek(self, offset: int) -> Token:
        idx = self.pos + offset
        if idx >= len(self.tokens):
            return self.tokens[len(self.tokens) - 1]
        return self.tokens[idx]

    def advance(self) -> Token:
        tok = self.tokens[self.pos]
        if tok.type != TK_EOF:
            self.pos += 1
        return tok

    def at(self, value: str) -> bool:
        tok = self.current()
        return tok.value == value and tok.type != TK_STRING

    def at_type(self, type_: str) -> bool:
        return self.current().type == type_

    def at_ident(self) -> bool:
        return self.current().type == TK_IDENT

    def at_end_tag(self) -> bool:
        return self.at("<") and self.peek(1).value == "/"

    def prev_end(self) -> int:
        return self.tokens[self.pos - 1].end

    def describe(self, tok: Token) -> str:
        if tok.type == TK_EOF:
            return "EOF"
        if tok.auto:
            return "newline"
        return "'" + tok.value + "'"

    def expect(self, value: str) -> Token:
        tok = self.current()
        if tok.value != value or tok.type == TK_STRING:
            raise self.error("expected '" + value + "', found " + self.describe(tok))
        return self.advance()

    def expect_ident(self) -> Token:
        tok = self.current()
        if tok.type != TK_IDENT:
            raise self.error("expected identifier, found " + self.describe(tok))
        return self.advance()

    def expect_semi(self) -> None:
        if self.at(";"):
            self.advance()
            return
        if self.at(")") or self.at("}") or self.at_type(TK_EOF):
            return
        raise self.error("expected ';', found " + self.describe(self.current()))

    def error(self, msg: str) -> ParseError:
        return self.error_at(self.current().pos, msg)

    def error_at(self, offset: int, msg: str) -> ParseError:
        line, col = line_col(self.source, offset)
        return ParseError(msg, line, col)

    def parse_ident(self) -> Ident:
        tok = self.expect_ident()
        return Ident(tok.pos, tok.end, tok.value)

    def parse_ident_list(self) -> list[Ident]:
        idents = [self.parse_ident()]
        while self.at(","):
            self.advance()
            idents.append(self.parse_ident())
        return idents

    def parse_expr_list(self) -> list[Expr]:
        exprs = [self.parse_expr()]
        while self.at(","):
            self.advance()
            exprs.append(self.parse_expr())
        return exprs

    def starts_type(self) -> bool:
        tok = self.current()
        return tok.type == TK_IDENT or (tok.type != TK_STRING and tok.value in TYPE_START)

    # ── Top Level ────────────────────────────────────────────

    def parse_file(self, comments: list[Comment]) -> File:
        self.expect("package")
        package = self.parse_ident()
        self.expect_semi()
        decls: list[Decl] = []
        imports: list[ImportSpec] = []
        while self.at("import"):
            decl = self.parse_gen_decl("import")
            for spec in decl.specs:
                if isinstance(spec, ImportSpec):
                    imports.append(spec)
            decls.append(decl)
            self.expect_semi()
        while not self.at_type(TK_EOF):
            decls.append(self.parse_decl())
        return File(0, len(self.source), self.filename, package, decls, imports, comments)

    def parse_decl(self) -> Decl:
        if self.at("func"):
            decl = self.parse_func_decl()
            self.expect_semi()
            return decl
        if self.at("const") or self.at("var") or self.at("type"):
            gen = self.parse_gen_decl(self.current().value)
            self.expect_semi()
            return gen
        if self.at("import"):
            raise self.error("imports must appear before other declarations")
        raise self.error("expected declaration, found " + self.describe(self.current()))

    def parse_gen_decl(self, keyword: str) -> GenDecl:
        start = self.expect(keyword).pos
        specs: list[Spec] = []
        if self.at("("):
            self.advance()
            while not self.at(")") and not self.at_type(TK_EOF):
                specs.append(self.parse_spec(keyword))
                self.expect_semi()
            end = self.expect(")").end
        else:
            spec = self.parse_spec(keyword)
            specs.append(spec)
            end = spec.end
        return GenDecl(start, end, keyword, specs)

    def parse_spec(self, keyword: str) -> Spec:
        if keyword == "import":
            return self.parse_import_spec()
        if keyword == "type":
            return self.parse_type_spec()
        return self.parse_value_spec()

    def parse_import_spec(self) -> ImportSpec:
        start = self.current().pos
        name: Ident | None = None
        if self.at_ident():
            name = self.parse_ident()
        elif self.at("."):
            tok = self.advance()
            name = Ident(tok.pos, tok.end, ".")
        tok = self.current()
        if tok.type != TK_STRING:
            raise self.error("expected import path, found " + self.describe(tok))
        self.advance()
        path = BasicLit(tok.pos, tok.end, TK_STRING, tok.value)
        return ImportSpec(start, path.end, name, path)

    def parse_value_spec(self) -> ValueSpec:
        names = self.parse_ident_list()
        typ: Expr | None = None
        values: list[Expr] = []
        if not self.at("=") and not self.at(";") and not self.at(")"):
            typ = self.parse_type()
        if self.at("="):
            self.advance()
            values = self.parse_expr_list()
        end = names[-1].end
        if len(values) > 0:
            end = values[-1].end
        elif typ is not None:
            end = typ.end
        return ValueSpec(names[0].pos, end, names, typ, values)

    def parse_type_spec(self) -> TypeSpec:
        name = self.parse_ident()
        type_params: FieldList | None = None
        if self.at("[") and self.looks_like_type_params():
            type_params = self.parse_type_params()
        assign = False
        if self.at("="):
            assign = True
            self.advance()
        typ = self.parse_type()
        return TypeSpec(name.pos, typ.end, name, type_params, assign, typ)

    def looks_like_type_params(self) -> bool:
        """Tell "type T[P any] ..." from the array type "type T [N]E"."""
        if self.peek(1).type != TK_IDENT:
            return False
        after = self.peek(2)
        if after.type == TK_IDENT:
            return True
        return after.type != TK_STRING and after.value in (
            "interface",
            "func",
            "map",
            "chan",
            "struct",
            "~",
            "[",
            "*",
            "(",
            ",",
        )

    def parse_func_decl(self) -> FuncDecl:
        start = self.expect("func").pos
        recv: FieldList | None = None
        if self.at("("):
            recv = self.parse_parameters()
        name = self.parse_ident()
        type_params: FieldList | None = None
        if self.at("["):
            type_params = self.parse_type_params()
        params = self.parse_parameters()
        results = self.parse_results()
        ftype = FuncType(start, self.prev_end(), type_params, params, results)
        body: BlockStmt | None = None
        end = ftype.end
        if self.at("{"):
            outer = self.expr_lev
            self.expr_lev = 0
            body = self.parse_block()
            self.expr_lev = outer
            end = body.end
        return FuncDecl(start, end, recv, name, ftype, body)

    # ── Signatures ───────────────────────────────────────────

    def parse_parameters(self) -> FieldList:
        lparen = self.expect("(").pos
        items: list[tuple[Ident | None, Expr | None]] = []
        while not self.at(")"):
            items.append(self.parse_param_item())
            if not self.at(","):
                break
            self.advance()
        rparen = self.expect(")").end
        return FieldList(lparen, rparen, self.group_params(items))

    def parse_param_item(self) -> tuple[Ident | None, Expr | None]:
        """Parse "name", "name Type", or "Type"; a lone name may turn out to be a type."""
        if self.at_ident():
            ident = self.parse_ident()
            if self.at("."):
                return (None, self.parse_type_args_opt(self.parse_qualified(ident)))
            if self.at("["):
                return self.parse_array_or_instance(ident)
            if self.at(",") or self.at(")"):
                return (ident, None)
            if self.at("..."):
                return (ident, self.parse_variadic())
            return (ident, self.parse_type())
        if self.at("..."):
            return (None, self.parse_variadic())
        return (None, self.parse_type())

    def parse_variadic(self) -> Ellipsis:
        start = self.expect("...").pos
        elt = self.parse_type()
        return Ellipsis(start, elt.end, elt)

    def parse_array_or_instance(self, ident: Ident) -> tuple[Ident | None, Expr]:
        """After "name [": an array or slice type of a named field, or a generic instance."""
        lbrack = self.expect("[").pos
        if self.at("]"):
            self.advance()
            elt = self.parse_type()
            return (ident, ArrayType(lbrack, elt.end, None, elt))
        if self.at("..."):
            tok = self.advance()
            self.expect("]")
            elt = self.parse_type()
            return (ident, ArrayType(lbrack, elt.end, Ellipsis(tok.pos, tok.end, None), elt))
        self.expr_lev += 1
        args = [self.parse_expr()]
        while self.at(","):
            self.advance()
            if self.at("]"):
                break
            args.append(self.parse_expr())
        self.expr_lev -= 1
        rbrack = self.expect("]").end
        if len(args) == 1 and self.starts_type():
            elt = self.parse_type()
            return (ident, ArrayType(lbrack, elt.end, args[0], elt))
        if len(args) == 1:
            return (None, IndexExpr(ident.pos, rbrack, ident, args[0]))
        return (None, IndexListExpr(ident.pos, rbrack, ident, args))

    def group_params(self, items: list[tuple[Ident | None, Expr | None]]) -> list[Field]:
        named = False
        for name, typ in items:
            if name is not None and typ is not None:
                named = True
        fields: list[Field] = []
        if not named:
            for name, typ in items:
                t = typ
                if t is None:
                    t = name
                assert t is not None
                fields.append(Field(t.pos, t.end, [], t, None))
            return fields
        pending: list[Ident] = []
        for name, typ in items:
            if name is None:
                assert typ is not None
                raise self.error_at(typ.pos, "mixed named and unnamed parameters")
            pending.append(name)
            if typ is not None:
                fields.append(Field(pending[0].pos, typ.end, pending, typ, None))
                pending = []
        if len(pending) > 0:
            raise self.error_at(pending[0].pos, "mixed named and unnamed parameters")
        return fields

    def parse_results(self) -> FieldList | None:
        if self.at("("):
            return self.parse_parameters()
        if self.starts_type():
            typ = self.parse_type()
            return FieldList(typ.pos, typ.end, [Field(typ.pos, typ.end, [], typ, None)])
        return None

    def parse_type_params(self) -> FieldList:
        lbrack = self.expect("[").pos
        fields: list[Field] = []
        pending: list[Ident] = []
        while not self.at("]"):
            pending.append(self.parse_ident())
            if self.at(","):
                self.advance()
                continue
            constraint = self.parse_constraint()
            fields.append(Field(pending[0].pos, constraint.end, pending, constraint, None))
            pending = []
            if not self.at(","):
                break
            self.advance()
        if len(pending) > 0:
            raise self.error_at(pending[0].pos, "missing type constraint")
        rbrack = self.expect("]").end
        if len(fields) == 0:
            raise self.error_at(lbrack, "empty type parameter list")
        return FieldList(lbrack, rbrack, fields)

    def parse_constraint(self) -> Expr:
        """Parse a union of type terms: ~int | string."""
        x = self.parse_constraint_term()
        while self.at("|"):
            self.advance()
            y = self.parse_constraint_term()
            x = BinaryExpr(x.pos, y.end, x, "|", y)
        return x

    def parse_constraint_term(self) -> Expr:
        if self.at("~"):
            start = self.advance().pos
            typ = self.parse_type()
            return UnaryExpr(start, typ.end, "~", typ)
        return self.parse_type()

    # ── Types ────────────────────────────────────────────────

    def parse_type(self) -> Expr:
        tok = self.current()
        if tok.type == TK_IDENT:
            ident = self.parse_ident()
            typ: Expr = ident
            if self.at("."):
                typ = self.parse_qualified(ident)
            return self.parse_type_args_opt(typ)
        if self.at("*"):
            self.advance()
            elem = self.parse_type()
            return StarExpr(tok.pos, elem.end, elem)
        if self.at("["):
            return self.parse_array_type()
        if self.at("("):
            self.advance()
            inner = self.parse_type()
            end = self.expect(")").end
            return ParenExpr(tok.pos, end, inner)
        if self.at("func"):
            return self.parse_func_type()
        if self.at("map"):
            self.advance()
            self.expect("[")
            key = self.parse_type()
            self.expect("]")
            value = self.parse_type()
            return MapType(tok.pos, value.end, key, value)
        if self.at("chan"):
            self.advance()
            direction = "both"
            if self.at("<-"):
                self.advance()
                direction = "send"
            value = self.parse_type()
            return ChanType(tok.pos, value.end, direction, value)
        if self.at("<-"):
            self.advance()
            self.expect("chan")
            value = self.parse_type()
            return ChanType(tok.pos, value.end, "recv", value)
        if self.at("struct"):
            return self.parse_struct_type()
        if self.at("interface"):
            return self.parse_interface_type()
        raise self.error("expected type, found " + self.describe(tok))

    def parse_qualified(self, ident: Ident) -> SelectorExpr:
        self.expect(".")
        sel = self.parse_ident()
        return SelectorExpr(ident.pos, sel.end, ident, sel)

    def parse_type_args_opt(self, typ: Expr) -> Expr:
        if not self.at("["):
            return typ
        self.advance()
        self.expr_lev += 1
        args = [self.parse_type()]
        while self.at(","):
            self.advance()
            if self.at("]"):
                break
            args.append(self.parse_type())
        self.expr_lev -= 1
        end = self.expect("]").end
        if len(args) == 1:
            return IndexExpr(typ.pos, end, typ, args[0])
        return IndexListExpr(typ.pos, end, typ, args)

    def parse_array_type(self) -> ArrayType:
        lbrack = self.expect("[").pos
        length: Expr | None = None
        if self.at("..."):
            tok = self.advance()
            length = Ellipsis(tok.pos, tok.end, None)
        elif not self.at("]"):
            self.expr_lev += 1
            length = self.parse_expr()
            self.expr_lev -= 1
        self.expect("]")
        elt = self.parse_type()
        return ArrayType(lbrack, elt.end, length, elt)

    def parse_func_type(self) -> FuncType:
        start = self.expect("func").pos
        params = self.parse_parameters()
        results = self.parse_results()
        return FuncType(start, self.prev_end(), None, params, results)

    def parse_struct_type(self) -> StructType:
        start = self.expect("struct").pos
        lbrace = self.expect("{").pos
        fields: list[Field] = []
        while not self.at("}") and not self.at_type(TK_EOF):
            fields.append(self.parse_struct_field())
            self.expect_semi()
        rbrace = self.expect("}").end
        return StructType(start, rbrace, FieldList(lbrace, rbrace, fields))

    def parse_struct_field(self) -> Field:
        start = self.current().pos
        names: list[Ident] = []
        if self.at("*"):
            tok = self.advance()
            base = self.parse_type()
            typ: Expr = StarExpr(tok.pos, base.end, base)
        else:
            ident = self.parse_ident()
            if self.at("."):
                typ = self.parse_type_args_opt(self.parse_qualified(ident))
            elif self.at(";") or self.at("}") or self.at_type(TK_STRING):
                typ = ident
            elif self.at("["):
                name, arr = self.parse_array_or_instance(ident)
                if name is not None:
                    names.append(name)
                typ = arr
            else:
                names.append(ident)
                while self.at(","):
                    self.advance()
                    names.append(self.parse_ident())
                typ = self.parse_type()
        tag: BasicLit | None = None
        end = typ.end
        if self.at_type(TK_STRING):
            tok = self.advance()
            tag = BasicLit(tok.pos, tok.end, TK_STRING, tok.value)
            end = tok.end
        return Field(start, end, names, typ, tag)

    def parse_interface_type(self) -> InterfaceType:
        start = self.expect("interface").pos
        lbrace = self.expect("{").pos
        fields: list[Field] = []
        while not self.at("}") and not self.at_type(TK_EOF):
            if self.at_ident() and self.peek(1).value == "(":
                name = self.parse_ident()
                params = self.parse_parameters()
                results = self.parse_results()
                ftype = FuncType(params.pos, self.prev_end(), None, params, results)
                fields.append(Field(name.pos, ftype.end, [name], ftype, None))
            else:
                elem = self.parse_constraint()
                fields.append(Field(elem.pos, elem.end, [], elem, None))
            self.expect_semi()
        rbrace = self.expect("}").end
        return InterfaceType(start, rbrace, FieldList(lbrace, rbrace, fields))

    # ── Statements ───────────────────────────────────────────

    def parse_block(self) -> BlockStmt:
        lbrace = self.expect("{").pos
        stmts = self.parse_stmt_list()
        rbrace = self.expect("}").end
        return BlockStmt(lbrace, rbrace, stmts)

    def parse_stmt_list(self) -> list[Stmt]:
        stmts: list[Stmt] = []
        while (
            not self.at("}")
            and not self.at("case")
            and not self.at("default")
            and not self.at_type(TK_EOF)
        ):
            if self.at(";"):
                self.advance()
                continue
            stmt = self.parse_stmt()
            stmts.append(stmt)
            self.expect_stmt_end(stmt)
        return stmts

    def expect_stmt_end(self, stmt: Stmt) -> None:
        """Consume the statement separator; optional after tgo content and before tag ends."""
        if self.at(";"):
            self.advance()
            return
        if is_static_content(stmt) or self.at_end_tag():
            return
        if self.at("}") or self.at(">") or self.at(")") or self.at_type(TK_EOF):
            return
        raise self.error("expected ';', found " + self.describe(self.current()))

    def parse_stmt(self) -> Stmt:
        tok = self.current()
        if tok.type == TK_STRING or tok.type == TK_TEMPLATE:
            x = self.parse_operand()
            return ExprStmt(x.pos, x.end, x)
        if self.at("<"):
            return self.parse_tag()
        if self.at("@"):
            return self.parse_attribute()
        if self.at("var") or self.at("const") or self.at("type"):
            decl = self.parse_gen_decl(tok.value)
            return DeclStmt(decl.pos, decl.end, decl)
        if self.at("go") or self.at("defer"):
            self.advance()
            call = self.parse_expr()
            if not isinstance(call, CallExpr):
                raise self.error_at(call.pos, "expression in " + tok.value + " must be function call")
            if tok.value == "go":
                return GoStmt(tok.pos, call.end, call)
            return DeferStmt(tok.pos, call.end, call)
        if self.at("return"):
            self.advance()
            results: list[Expr] = []
            end = tok.end
            if not self.at(";") and not self.at("}") and not self.at_end_tag():
                results = self.parse_expr_list()
                end = results[-1].end
            return ReturnStmt(tok.pos, end, results)
        if self.at("break") or self.at("continue") or self.at("goto") or self.at("fallthrough"):
            self.advance()
            label: Ident | None = None
            end = tok.end
            if tok.value != "fallthrough" and self.at_ident():
                label = self.parse_ident()
                end = label.end
            elif tok.value == "goto":
                raise self.error("expected label, found " + self.describe(self.current()))
            return BranchStmt(tok.pos, end, tok.value, label)
        if self.at("{"):
            return self.parse_block()
        if self.at("if"):
            return self.parse_if_stmt()
        if self.at("switch"):
            return self.parse_switch_stmt()
        if self.at("select"):
            return self.parse_select_stmt()
        if self.at("for"):
            return self.parse_for_stmt()
        stmt = self.parse_simple_stmt(LABEL_OK)
        assert isinstance(stmt, Stmt)
        return stmt

    def parse_simple_stmt(self, mode: int) -> Stmt | _RangeClause:
        start = self.current().pos
        if mode == RANGE_OK and self.at("range"):
            self.advance()
            x = self.parse_expr()
            return _RangeClause(start, [], "", x)
        lhs = self.parse_expr_list()
        tok = self.current()
        if tok.value in ASSIGN_OPS and tok.type != TK_STRING:
            self.advance()
            if mode == RANGE_OK and self.at("range") and (tok.value == "=" or tok.value == ":="):
                self.advance()
                x = self.parse_expr()
                return _RangeClause(start, lhs, tok.value, x)
            rhs = self.parse_expr_list()
            return AssignStmt(lhs[0].pos, rhs[-1].end, lhs, tok.value, rhs)
        if len(lhs) > 1:
            raise self.error("expected 1 expression, found " + str(len(lhs)))
        x = lhs[0]
        if self.at(":") and mode == LABEL_OK and isinstance(x, Ident):
            colon = self.advance()
            if self.at("}") or self.at(";"):
                stmt: Stmt = EmptyStmt(colon.end, colon.end)
            else:
                stmt = self.parse_stmt()
            return LabeledStmt(x.pos, stmt.end, x, stmt)
        if self.at("<-"):
            self.advance()
            value = self.parse_expr()
            return SendStmt(x.pos, value.end, x, value)
        if self.at("++") or self.at("--"):
            op = self.advance()
            return IncDecStmt(x.pos, op.end, x, op.value)
        return ExprStmt(x.pos, x.end, x)

    def parse_simple_basic(self) -> Stmt:
        stmt = self.parse_simple_stmt(BASIC)
        assert isinstance(stmt, Stmt)
        return stmt

    def expect_cond(self, stmt: Stmt | None, what: str) -> Expr:
        if not isinstance(stmt, ExprStmt):
            raise self.error("expected " + what + ", found " + self.describe(self.current()))
        return stmt.x

    def parse_if_stmt(self) -> IfStmt:
        start = self.expect("if").pos
        outer = self.expr_lev
        self.expr_lev = -1
        init: Stmt | None = None
        cond: Expr
        if self.at("{"):
            raise self.error("missing condition in if statement")
        stmt: Stmt | None = None
        if not self.at(";"):
            stmt = self.parse_simple_basic()
        if self.at(";"):
            self.advance()
            init = stmt
            if self.at("{"):
                raise self.error("missing condition in if statement")
            cond = self.expect_cond(self.parse_simple_basic(), "boolean expression")
        else:
            cond = self.expect_cond(stmt, "boolean expression")
        self.expr_lev = outer
        body = self.parse_block()
        else_: Stmt | None = None
        end = body.end
        if self.at("else"):
            self.advance()
            if self.at("if"):
                else_ = self.parse_if_stmt()
            elif self.at("{"):
                else_ = self.parse_block()
            else:
                raise self.error("expected if statement or block, found " + self.describe(self.current()))
            end = else_.end
        return IfStmt(start, end, init, cond, body, else_)

    def parse_switch_stmt(self) -> Stmt:
        start = self.expect("switch").pos
        outer = self.expr_lev
        self.expr_lev = -1
        init: Stmt | None = None
        guard: Stmt | None = None
        if not self.at("{"):
            if not self.at(";"):
                guard = self.parse_simple_basic()
            if self.at(";"):
                self.advance()
                init = guard
                guard = None
                if not self.at("{"):
                    guard = self.parse_simple_basic()
        self.expr_lev = outer
        type_switch = guard is not None and is_type_switch_guard(guard)
        lbrace = self.expect("{").pos
        clauses: list[Stmt] = []
        while self.at("case") or self.at("default"):
            clauses.append(self.parse_case_clause(type_switch))
        rbrace = self.expect("}").end
        body = BlockStmt(lbrace, rbrace, clauses)
        if type_switch:
            assert guard is not None
            return TypeSwitchStmt(start, body.end, init, guard, body)
        tag: Expr | None = None
        if guard is not None:
            tag = self.expect_cond(guard, "switch expression")
        return SwitchStmt(start, body.end, init, tag, body)

    def parse_case_clause(self, type_switch: bool) -> CaseClause:
        tok = self.advance()
        exprs: list[Expr] | None = None
        if tok.value == "case":
            if type_switch:
                exprs = [self.parse_type()]
                while self.at(","):
                    self.advance()
                    exprs.append(self.parse_type())
            else:
                exprs = self.parse_expr_list()
        colon = self.expect(":")
        body = self.parse_stmt_list()
        end = colon.end
        if len(body) > 0:
            end = body[-1].end
        return CaseClause(tok.pos, end, exprs, colon.pos, body)

    def parse_select_stmt(self) -> SelectStmt:
        start = self.expect("select").pos
        lbrace = self.expect("{").pos
        clauses: list[Stmt] = []
        while self.at("case") or self.at("default"):
            tok = self.advance()
            comm: Stmt | None = None
            if tok.value == "case":
                comm = self.parse_simple_basic()
            colon = self.expect(":")
            body = self.parse_stmt_list()
            end = colon.end
            if len(body) > 0:
                end = body[-1].end
            clauses.append(CommClause(tok.pos, end, comm, colon.pos, body))
        rbrace = self.expect("}").end
        return SelectStmt(start, rbrace, BlockStmt(lbrace, rbrace, clauses))

    def parse_for_stmt(self) -> Stmt:
        start = self.expect("for").pos
        outer = self.expr_lev
        self.expr_lev = -1
        init: Stmt | None = None
        cond_stmt: Stmt | None = None
        post: Stmt | None = None
        clause: _RangeClause | None = None
        if not self.at("{"):
            first: Stmt | _RangeClause | None = None
            if not self.at(";"):
                first = self.parse_simple_stmt(RANGE_OK)
            if isinstance(first, _RangeClause):
                clause = first
            elif self.at(";"):
                self.advance()
                init = first
                if not self.at(";"):
                    cond_stmt = self.parse_simple_basic()
                self.expect(";")
                if not self.at("{"):
                    post = self.parse_simple_basic()
            else:
                cond_stmt = first
        self.expr_lev = outer
        body = self.parse_block()
        if clause is not None:
            key: Expr | None = None
            value: Expr | None = None
            if len(clause.lhs) > 2:
                raise self.error_at(clause.lhs[2].pos, "range clause permits at most two iteration variables")
            if len(clause.lhs) > 0:
                key = clause.lhs[0]
            if len(clause.lhs) > 1:
                value = clause.lhs[1]
            return RangeStmt(start, body.end, key, value, clause.tok, clause.x, body)
        cond: Expr | None = None
        if cond_stmt is not None:
            cond = self.expect_cond(cond_stmt, "for loop condition")
        return ForStmt(start, body.end, init, cond, post, body)

    # ── Tgo Statements ───────────────────────────────────────

    def parse_markup_name(self, separators: tuple[str, ...]) -> Ident:
        """Parse a tag or attribute name: identifier-like words joined by adjacent separators."""
        tok = self.current()
        if tok.type != TK_IDENT and tok.type not in KEYWORDS:
            raise self.error("expected name, found " + self.describe(tok))
        self.advance()
        name = tok.value
        end = tok.end
        while True:
            sep = self.current()
            word = self.peek(1)
            if sep.type != TK_OP or sep.value not in separators or sep.pos != end:
                break
            if word.pos != sep.end:
                break
            if word.type != TK_IDENT and word.type not in KEYWORDS and word.type != TK_INT:
                break
            self.advance()
            self.advance()
            name = name + sep.value + word.value
            end = word.end
        return Ident(tok.pos, end, name)

    def parse_tag(self) -> Stmt:
        open_tok = self.expect("<")
        if self.at("/"):
            self.advance()
            name = self.parse_markup_name(("-",))
            close = self.expect(">")
            return EndTagStmt(open_tok.pos, close.end, name, open_tok.pos, close.pos)
        name = self.parse_markup_name(("-",))
        body: list[Stmt] = []
        while not self.at(">"):
            if self.at_type(TK_EOF):
                raise self.error_at(open_tok.pos, "tag not terminated")
            if self.at(";"):
                self.advance()
                continue
            stmt = self.parse_stmt()
            body.append(stmt)
            self.expect_stmt_end(stmt)
        close = self.expect(">")
        return OpenTagStmt(open_tok.pos, close.end, name, body, close.pos)

    def parse_attribute(self) -> AttributeStmt:
        start = self.expect("@").pos
        name = self.parse_markup_name(("-", ":"))
        value: BasicLit | TemplateLiteral | None = None
        end = name.end
        if self.at("="):
            self.advance()
            tok = self.current()
            if tok.type != TK_STRING and tok.type != TK_TEMPLATE:
                raise self.error("expected attribute value, found " + self.describe(tok))
            lit = self.parse_operand()
            assert isinstance(lit, (BasicLit, TemplateLiteral))
            value = lit
            end = lit.end
        return AttributeStmt(start, end, name, value)

    # ── Expressions ──────────────────────────────────────────

    def parse_expr(self) -> Expr:
        return self.parse_binary_expr(1)

    def parse_binary_expr(self, prec1: int) -> Expr:
        x = self.parse_unary_expr()
        while True:
            tok = self.current()
            if tok.type == TK_STRING or tok.value not in BINARY_PREC:
                return x
            # "x</div>": the end tag closes the statement
            if self.at_end_tag():
                return x
            prec = BINARY_PREC[tok.value]
            if prec < prec1:
                return x
            self.advance()
            y = self.parse_binary_expr(prec + 1)
            x = BinaryExpr(x.pos, y.end, x, tok.value, y)

    def parse_unary_expr(self) -> Expr:
        tok = self.current()
        if tok.type != TK_STRING and tok.value in UNARY_OPS:
            self.advance()
            x = self.parse_unary_expr()
            return UnaryExpr(tok.pos, x.end, tok.value, x)
        if self.at("<-"):
            self.advance()
            if self.at("chan"):
                self.advance()
                value = self.parse_type()
                return self.parse_primary_suffix(ChanType(tok.pos, value.end, "recv", value))
            x = self.parse_unary_expr()
            return UnaryExpr(tok.pos, x.end, "<-", x)
        if self.at("*"):
            self.advance()
            x = self.parse_unary_expr()
            return StarExpr(tok.pos, x.end, x)
        return self.parse_primary_suffix(self.parse_operand())

    def parse_operand(self) -> Expr:
        tok = self.current()
        if tok.type == TK_IDENT:
            return self.parse_ident()
        if tok.type in LITERAL_TYPES:
            self.advance()
            return BasicLit(tok.pos, tok.end, tok.type, tok.value)
        if tok.type == TK_TEMPLATE:
            self.advance()
            return self.parse_template(tok)
        if self.at("("):
            self.advance()
            self.expr_lev += 1
            x = self.parse_expr()
            self.expr_lev -= 1
            end = self.expect(")").end
            return ParenExpr(tok.pos, end, x)
        if self.at("func"):
            ftype = self.parse_func_type()
            if not self.at("{"):
                return ftype
            outer = self.expr_lev
            self.expr_lev = 0
            body = self.parse_block()
            self.expr_lev = outer
            return FuncLit(ftype.pos, body.end, ftype, body)
        if self.at("[") or self.at("struct") or self.at("map") or self.at("chan") or self.at("interface"):
            return self.parse_type()
        raise self.error("expected operand, found " + self.describe(tok))

    def parse_template(self, tok: Token) -> TemplateLiteral:
        parts: list[Expr] = []
        for tokens in tok.exprs:
            sub = Parser(tokens, self.source, self.filename)
            x = sub.parse_expr()
            if not sub.at_type(TK_EOF):
                raise sub.error("expected '}' in template literal, found " + sub.describe(sub.current()))
            parts.append(x)
        return TemplateLiteral(tok.pos, tok.end, tok.strings, parts)

    def parse_primary_suffix(self, x: Expr) -> Expr:
        while True:
            if self.at("."):
                self.advance()
                if self.at_ident():
                    sel = self.parse_ident()
                    x = SelectorExpr(x.pos, sel.end, x, sel)
                elif self.at("("):
                    self.advance()
                    typ: Expr | None = None
                    if self.at("type"):
                        self.advance()
                    else:
                        typ = self.parse_type()
                    end = self.expect(")").end
                    x = TypeAssertExpr(x.pos, end, x, typ)
                else:
                    raise self.error("expected selector or type assertion, found " + self.describe(self.current()))
            elif self.at("["):
                x = self.parse_index_or_slice(x)
            elif self.at("("):
                x = self.parse_call(x)
            elif self.at("{") and self.allows_composite(x):
                x = self.parse_composite_lit(x)
            else:
                return x

    def allows_composite(self, x: Expr) -> bool:
        t = x
        while isinstance(t, ParenExpr):
            t = t.x
        if isinstance(t, (ArrayType, StructType, MapType)):
            return True
        if isinstance(t, (Ident, SelectorExpr, IndexExpr, IndexListExpr)):
            return self.expr_lev >= 0
        return False

    def parse_index_or_slice(self, x: Expr) -> Expr:
        self.expect("[")
        self.expr_lev += 1
        index: list[Expr | None] = [None, None, None]
        colons = 0
        if not self.at(":"):
            index[0] = self.parse_expr()
        if self.at(","):
            args: list[Expr] = []
            if index[0] is not None:
                args.append(index[0])
            while self.at(","):
                self.advance()
                if self.at("]"):
                    break
                args.append(self.parse_expr())
            self.expr_lev -= 1
            end = self.expect("]").end
            return IndexListExpr(x.pos, end, x, args)
        while self.at(":") and colons < 2:
            self.advance()
            colons += 1
            if not self.at(":") and not self.at("]"):
                index[colons] = self.parse_expr()
        self.expr_lev -= 1
        end = self.expect("]").end
        if colons > 0:
            if colons == 2 and (index[1] is None or index[2] is None):
                raise self.error_at(end - 1, "middle and final index required in 3-index slice")
            return SliceExpr(x.pos, end, x, index[0], index[1], index[2], colons == 2)
        if index[0] is None:
            raise self.error_at(end - 1, "expected operand")
        return IndexExpr(x.pos, end, x, index[0])

    def parse_call(self, fun: Expr) -> CallExpr:
        self.expect("(")
        self.expr_lev += 1
        args: list[Expr] = []
        has_ellipsis = False
        while not self.at(")"):
            args.append(self.parse_expr())
            if self.at("..."):
                self.advance()
                has_ellipsis = True
            if not self.at(","):
                break
            self.advance()
        self.expr_lev -= 1
        end = self.expect(")").end
        return CallExpr(fun.pos, end, fun, args, has_ellipsis)

    def parse_composite_lit(self, typ: Expr | None) -> CompositeLit:
        lbrace = self.expect("{").pos
        self.expr_lev += 1
        elts: list[Expr] = []
        while not self.at("}"):
            elts.append(self.parse_element())
            if not self.at(","):
                break
            self.advance()
        self.expr_lev -= 1
        if self.at(";") and self.current().auto:
            raise self.error("missing ',' before newline in composite literal")
        rbrace = self.expect("}")
        start = lbrace
        if typ is not None:
            start = typ.pos
        return CompositeLit(start, rbrace.end, typ, elts, lbrace, rbrace.pos)

    def parse_element_value(self) -> Expr:
        if self.at("{"):
            return self.parse_composite_lit(None)
        return self.parse_expr()

    def parse_element(self) -> Expr:
        x = self.parse_element_value()
        if self.at(":"):
            self.advance()
            value = self.parse_element_value()
            return KeyValueExpr(x.pos, value.end, x, value)
        return x


def is_type_switch_guard(stmt: Stmt) -> bool:
    if isinstance(stmt, ExprStmt):
        x = stmt.x
        return isinstance(x, TypeAssertExpr) and x.type is None
    if isinstance(stmt, AssignStmt) and stmt.tok == ":=" and len(stmt.lhs) == 1 and len(stmt.rhs) == 1:
        x = stmt.rhs[0]
        return isinstance(x, TypeAssertExpr) and x.type is None
    return False


def parse(source: str, filename: str = "") -> File:
    """Parse a Go/tgo source file."""
    tokens, comments = tokenize(source)
    return Parser(tokens, source, filename).parse_file(comments)
