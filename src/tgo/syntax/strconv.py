"""Go string literal helpers: escape decoding, unquoting and quoting.

Bytes produced by \\x and octal escapes that are not valid on their own
(values 0x80 to 0xff) are represented as surrogate-escaped characters,
the same way Python's "surrogateescape" error handler does, so that they
survive a decode/quote round trip.
"""

from __future__ import annotations

SIMPLE_ESCAPES: dict[str, str] = {
    "a": "\a",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "v": "\v",
    "\\": "\\",
}

QUOTE_ESCAPES: dict[str, str] = {
    "\a": "\\a",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\v": "\\v",
}

HEX_DIGITS = "0123456789abcdef"


class EscapeError(ValueError):
    """Invalid escape sequence; offset is relative to the decoded text."""

    def __init__(self, msg: str, offset: int):
        self.msg: str = msg
        self.offset: int = offset
        super().__init__(msg)


def _is_hex(c: str) -> bool:
    return (c >= "0" and c <= "9") or (c >= "a" and c <= "f") or (c >= "A" and c <= "F")


def _byte_char(b: int) -> str:
    if b < 0x80:
        return chr(b)
    return chr(0xDC00 + b)


def decode_escape(text: str, i: int, quote: str) -> tuple[str, int]:
    """Decode the escape sequence whose backslash is at text[i].

    Returns (decoded, index after the escape). quote is the enclosing
    quote character, the only quote that may be escaped.
    """
    if i + 1 >= len(text):
        raise EscapeError("escape sequence not terminated", i)
    c = text[i + 1]
    if c in SIMPLE_ESCAPES:
        return SIMPLE_ESCAPES[c], i + 2
    if c == quote:
        return c, i + 2
    if c >= "0" and c <= "7":
        digits = text[i + 1 : i + 4]
        if len(digits) < 3 or not all(d >= "0" and d <= "7" for d in digits):
            raise EscapeError("invalid octal escape", i)
        value = int(digits, 8)
        if value > 255:
            raise EscapeError("octal escape value > 255: " + str(value), i)
        return _byte_char(value), i + 4
    if c == "x" or c == "u" or c == "U":
        n = 2
        if c == "u":
            n = 4
        elif c == "U":
            n = 8
        digits = text[i + 2 : i + 2 + n]
        if len(digits) < n or not all(_is_hex(d) for d in digits):
            raise EscapeError("invalid hex escape", i)
        value = int(digits, 16)
        if c == "x":
            return _byte_char(value), i + 2 + n
        if value > 0x10FFFF or (value >= 0xD800 and value < 0xE000):
            raise EscapeError("escape is invalid Unicode code point", i)
        return chr(value), i + 2 + n
    raise EscapeError("unknown escape sequence", i)


def unquote(lit: str) -> str:
    """Return the value of a Go string or rune literal."""
    if len(lit) < 2:
        raise ValueError("invalid literal: " + repr(lit))
    q = lit[0]
    if q == "`":
        if lit[-1] != "`":
            raise ValueError("invalid raw string literal: " + repr(lit))
        return lit[1:-1].replace("\r", "")
    if (q != '"' and q != "'") or lit[-1] != q:
        raise ValueError("invalid literal: " + repr(lit))
    body = lit[1:-1]
    out: list[str] = []
    i = 0
    while i < len(body):
        c = body[i]
        if c == "\\":
            s, i = decode_escape(body, i, q)
            out.append(s)
            continue
        out.append(c)
        i += 1
    return "".join(out)


def quote(s: str) -> str:
    """Return a double-quoted Go string literal for s, escaped like strconv.Quote."""
    out: list[str] = ['"']
    for c in s:
        if c == '"' or c == "\\":
            out.append("\\" + c)
        elif c in QUOTE_ESCAPES:
            out.append(QUOTE_ESCAPES[c])
        elif c >= "\udc80" and c <= "\udcff":
            b = ord(c) - 0xDC00
            out.append("\\x" + HEX_DIGITS[b >> 4] + HEX_DIGITS[b & 15])
        elif c.isprintable():
            out.append(c)
        elif ord(c) < 0x20 or ord(c) == 0x7F:
            out.append("\\x" + format(ord(c), "02x"))
        elif ord(c) < 0x10000:
            out.append("\\u" + format(ord(c), "04x"))
        else:
            out.append("\\U" + format(ord(c), "08x"))
    out.append('"')
    return "".join(out)
