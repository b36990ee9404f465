"""Go tokenizer extended with tgo template literals."""

from __future__ import annotations

from .ast import Comment
from .strconv import EscapeError, decode_escape


# Token type constants
TK_IDENT = "IDENT"
TK_INT = "INT"
TK_FLOAT = "FLOAT"
TK_IMAG = "IMAG"
TK_CHAR = "CHAR"
TK_STRING = "STRING"
TK_TEMPLATE = "TEMPLATE"
TK_OP = "OP"
TK_EOF = "EOF"

KEYWORDS: set[str] = {
    "break",
    "case",
    "chan",
    "const",
    "continue",
    "default",
    "defer",
    "else",
    "fallthrough",
    "for",
    "func",
    "go",
    "goto",
    "if",
    "import",
    "interface",
    "map",
    "package",
    "range",
    "return",
    "select",
    "struct",
    "switch",
    "type",
    "var",
}

# Multi-character operators, sorted by length descending for greedy matching
MULTI_OPS: list[str] = [
    "...",
    "&^=",
    "<<=",
    ">>=",
    "&&",
    "||",
    "<-",
    "++",
    "--",
    "==",
    "!=",
    "<=",
    ">=",
    ":=",
    "+=",
    "-=",
    "*=",
    "/=",
    "%=",
    "&=",
    "|=",
    "^=",
    "<<",
    ">>",
    "&^",
]

SINGLE_OPS: set[str] = {
    "+",
    "-",
    "*",
    "/",
    "%",
    "&",
    "|",
    "^",
    "<",
    ">",
    "=",
    "!",
    "~",
    "(",
    ")",
    "[",
    "]",
    "{",
    "}",
    ",",
    ";",
    ".",
    ":",
    "@",
}

# Tokens after which a newline terminates the statement
SEMI_TYPES: set[str] = {TK_IDENT, TK_INT, TK_FLOAT, TK_IMAG, TK_CHAR, TK_STRING, TK_TEMPLATE}
SEMI_VALUES: set[str] = {"break", "continue", "fallthrough", "return", "++", "--", ")", "]", "}"}


class TokenizeError(Exception):
    """Error during tokenization."""

    def __init__(self, msg: str, line: int, col: int):
        self.msg: str = msg
        self.line: int = line
        self.col: int = col
        super().__init__(msg + " at line " + str(line) + " col " + str(col))


class Token:
    """A token with type, value, and source offsets [pos, end)."""

    def __init__(self, type_: str, value: str, pos: int, end: int):
        self.type: str = type_
        self.value: str = value
        self.pos: int = pos
        self.end: int = end
        # Set on semicolons inserted at a newline or at the end of input.
        self.auto: bool = False
        # Template literals: decoded static segments and the tokens of each
        # embedded expression (every list ends with an EOF token).
        self.strings: list[str] = []
        self.exprs: list[list[Token]] = []

    def __repr__(self) -> str:
        return (
            "Token("
            + self.type
            + ", "
            + repr(self.value)
            + ", "
            + str(self.pos)
            + ", "
            + str(self.end)
            + ")"
        )


def line_col(source: str, offset: int) -> tuple[int, int]:
    """Return the 1-based line and character column of offset."""
    line = source.count("\n", 0, offset) + 1
    start = source.rfind("\n", 0, offset) + 1
    return line, offset - start + 1


def _is_digit(c: str) -> bool:
    return c >= "0" and c <= "9"


def _is_hex(c: str) -> bool:
    return (c >= "0" and c <= "9") or (c >= "a" and c <= "f") or (c >= "A" and c <= "F")


def _is_letter(c: str) -> bool:
    return c == "_" or c.isalpha()


def _is_ident_char(c: str) -> bool:
    return c == "_" or c.isalpha() or c.isdecimal()


class _Lexer:
    """Scans source[pos:] into tokens.

    A nested lexer scans one embedded template expression: it inserts no
    semicolons, rejects newlines and stops at the "}" closing the expression.
    """

    def __init__(self, source: str, pos: int, comments: list[Comment], nested: bool):
        self.source: str = source
        self.pos: int = pos
        self.comments: list[Comment] = comments
        self.nested: bool = nested
        self.tokens: list[Token] = []
        self.insert_semi: bool = False
        self.depth: int = 0

    def error(self, msg: str, offset: int) -> TokenizeError:
        line, col = line_col(self.source, offset)
        return TokenizeError(msg, line, col)

    def emit(self, type_: str, value: str, start: int) -> Token:
        tok = Token(type_, value, start, self.pos)
        self.tokens.append(tok)
        self.insert_semi = type_ in SEMI_TYPES or value in SEMI_VALUES
        return tok

    def auto_semi(self, offset: int) -> None:
        tok = Token(TK_OP, ";", offset, offset)
        tok.auto = True
        self.tokens.append(tok)
        self.insert_semi = False

    def run(self) -> list[Token]:
        source = self.source
        length = len(source)
        while True:
            if self.pos >= length:
                if self.nested:
                    raise self.error("template literal expression not terminated", self.pos)
                if self.insert_semi:
                    self.auto_semi(self.pos)
                self.tokens.append(Token(TK_EOF, "", self.pos, self.pos))
                return self.tokens
            c = source[self.pos]
            start = self.pos

            if c == "\n":
                if self.nested:
                    raise self.error("newline in template literal expression", self.pos)
                if self.insert_semi:
                    self.auto_semi(self.pos)
                self.pos += 1
                continue

            if c == " " or c == "\t" or c == "\r":
                self.pos += 1
                continue

            # Comments
            if c == "/" and self.pos + 1 < length and source[self.pos + 1] == "/":
                end = source.find("\n", self.pos)
                if end < 0:
                    end = length
                self.comments.append(Comment(start, end, source[start:end]))
                self.pos = end
                continue
            if c == "/" and self.pos + 1 < length and source[self.pos + 1] == "*":
                end = source.find("*/", self.pos + 2)
                if end < 0:
                    raise self.error("comment not terminated", start)
                end += 2
                text = source[start:end]
                if "\n" in text:
                    if self.nested:
                        raise self.error("newline in template literal expression", start)
                    if self.insert_semi:
                        self.auto_semi(start)
                self.comments.append(Comment(start, end, text))
                self.pos = end
                continue

            if _is_digit(c) or (
                c == "." and self.pos + 1 < length and _is_digit(source[self.pos + 1])
            ):
                self.scan_number()
                continue

            if c == '"':
                self.scan_string()
                continue

            if c == "`":
                end = source.find("`", self.pos + 1)
                if end < 0:
                    raise self.error("raw string literal not terminated", start)
                if self.nested and "\n" in source[start:end]:
                    raise self.error("newline in template literal expression", start)
                self.pos = end + 1
                self.emit(TK_STRING, source[start : self.pos], start)
                continue

            if c == "'":
                self.scan_rune()
                continue

            if _is_letter(c):
                while self.pos < length and _is_ident_char(source[self.pos]):
                    self.pos += 1
                word = source[start : self.pos]
                if word in KEYWORDS:
                    self.emit(word, word, start)
                else:
                    self.emit(TK_IDENT, word, start)
                continue

            if self.nested:
                if c == "{":
                    self.depth += 1
                elif c == "}":
                    if self.depth == 0:
                        self.tokens.append(Token(TK_EOF, "", self.pos, self.pos))
                        return self.tokens
                    self.depth -= 1

            matched = False
            for op in MULTI_OPS:
                if source.startswith(op, self.pos):
                    self.pos += len(op)
                    self.emit(TK_OP, op, start)
                    matched = True
                    break
            if matched:
                continue

            if c in SINGLE_OPS:
                self.pos += 1
                self.emit(TK_OP, c, start)
                continue

            raise self.error("unexpected character: " + repr(c), start)

    def scan_digits(self, hexdigits: bool) -> None:
        source = self.source
        while self.pos < len(source):
            c = source[self.pos]
            if c == "_" or _is_digit(c) or (hexdigits and _is_hex(c)):
                self.pos += 1
            else:
                break

    def scan_number(self) -> None:
        source = self.source
        start = self.pos
        kind = TK_INT
        prefix = source[self.pos : self.pos + 2].lower()
        if prefix == "0x":
            self.pos += 2
            self.scan_digits(True)
            if self.pos < len(source) and source[self.pos] == ".":
                kind = TK_FLOAT
                self.pos += 1
                self.scan_digits(True)
            if self.pos < len(source) and source[self.pos] in "pP":
                kind = TK_FLOAT
                self.scan_exponent()
        elif prefix == "0b" or prefix == "0o":
            self.pos += 2
            self.scan_digits(False)
        else:
            self.scan_digits(False)
            if self.pos < len(source) and source[self.pos] == ".":
                kind = TK_FLOAT
                self.pos += 1
                self.scan_digits(False)
            if self.pos < len(source) and source[self.pos] in "eE":
                kind = TK_FLOAT
                self.scan_exponent()
        if self.pos < len(source) and source[self.pos] == "i":
            kind = TK_IMAG
            self.pos += 1
        self.emit(kind, source[start : self.pos], start)

    def scan_exponent(self) -> None:
        source = self.source
        exp = self.pos
        self.pos += 1
        if self.pos < len(source) and source[self.pos] in "+-":
            self.pos += 1
        if self.pos >= len(source) or not _is_digit(source[self.pos]):
            raise self.error("exponent has no digits", exp)
        self.scan_digits(False)

    def scan_rune(self) -> None:
        source = self.source
        start = self.pos
        self.pos += 1
        count = 0
        while True:
            if self.pos >= len(source) or source[self.pos] == "\n":
                raise self.error("rune literal not terminated", start)
            c = source[self.pos]
            if c == "'":
                self.pos += 1
                break
            if c == "\\":
                try:
                    _, self.pos = decode_escape(source, self.pos, "'")
                except EscapeError as e:
                    raise self.error(e.msg, e.offset) from None
            else:
                self.pos += 1
            count += 1
        if count != 1:
            raise self.error("rune literal must contain exactly one character", start)
        self.emit(TK_CHAR, source[start : self.pos], start)

    def scan_string(self) -> None:
        """Scan an interpreted string, which is a template literal if it contains \\{."""
        source = self.source
        start = self.pos
        self.pos += 1
        strings: list[str] = []
        exprs: list[list[Token]] = []
        chars: list[str] = []
        while True:
            if self.pos >= len(source) or source[self.pos] == "\n":
                raise self.error("string literal not terminated", start)
            c = source[self.pos]
            if c == '"':
                self.pos += 1
                break
            if c == "\\" and self.pos + 1 < len(source) and source[self.pos + 1] == "{":
                strings.append("".join(chars))
                chars = []
                sub = _Lexer(source, self.pos + 2, self.comments, True)
                tokens = sub.run()
                if len(tokens) == 1:
                    raise self.error("empty template literal expression", self.pos)
                exprs.append(tokens)
                self.pos = sub.pos + 1
                continue
            if c == "\\":
                try:
                    s, self.pos = decode_escape(source, self.pos, '"')
                except EscapeError as e:
                    raise self.error(e.msg, e.offset) from None
                chars.append(s)
                continue
            chars.append(c)
            self.pos += 1
        strings.append("".join(chars))
        if len(exprs) == 0:
            self.emit(TK_STRING, source[start : self.pos], start)
            return
        tok = self.emit(TK_TEMPLATE, source[start : self.pos], start)
        tok.strings = strings
        tok.exprs = exprs


def tokenize(source: str) -> tuple[list[Token], list[Comment]]:
    """Tokenize Go/tgo source into a token list ending with TK_EOF, plus its comments."""
    comments: list[Comment] = []
    tokens = _Lexer(source, 0, comments, False).run()
    return tokens, comments
