"""Tokenizer tests."""

import pytest

from tgo.syntax.tokens import (
    TK_CHAR,
    TK_EOF,
    TK_FLOAT,
    TK_IDENT,
    TK_IMAG,
    TK_INT,
    TK_OP,
    TK_STRING,
    TK_TEMPLATE,
    TokenizeError,
    line_col,
    tokenize,
)


def types(source: str) -> list[str]:
    tokens, _ = tokenize(source)
    return [t.type for t in tokens]


def values(source: str) -> list[str]:
    tokens, _ = tokenize(source)
    return [t.value for t in tokens]


def test_keywords_and_identifiers():
    assert types("func f") == ["func", TK_IDENT, TK_OP, TK_EOF]
    tokens, _ = tokenize("func f")
    assert tokens[2].auto
    assert tokens[2].pos == tokens[2].end == 6


def test_semicolon_inserted_at_newline():
    tokens, _ = tokenize("x\ny")
    assert [t.value for t in tokens] == ["x", ";", "y", ";", ""]
    assert tokens[1].auto
    assert tokens[1].pos == 1 and tokens[1].end == 1


def test_no_semicolon_after_operator():
    assert values("x +\ny") == ["x", "+", "y", ";", ""]


def test_no_semicolon_after_tag_close():
    assert types("<a @b>") == [TK_OP, TK_IDENT, TK_OP, TK_IDENT, TK_OP, TK_EOF]


def test_explicit_semicolon_is_not_auto():
    tokens, _ = tokenize("x;")
    assert tokens[1].value == ";"
    assert not tokens[1].auto


def test_literal_kinds():
    assert types("1 2.5 0x1F 3i 'a' `r`") == [
        TK_INT,
        TK_FLOAT,
        TK_INT,
        TK_IMAG,
        TK_CHAR,
        TK_STRING,
        TK_OP,
        TK_EOF,
    ]


def test_operators_are_greedy():
    assert values("a &^= b <- c ...") == ["a", "&^=", "b", "<-", "c", "...", ""]


def test_plain_string():
    tokens, _ = tokenize('"a\\n"')
    assert tokens[0].type == TK_STRING
    assert tokens[0].value == '"a\\n"'


def test_template_literal():
    tokens, _ = tokenize('"a \\{x} b"')
    tok = tokens[0]
    assert tok.type == TK_TEMPLATE
    assert tok.value == '"a \\{x} b"'
    assert tok.strings == ["a ", " b"]
    assert len(tok.exprs) == 1
    assert [t.type for t in tok.exprs[0]] == [TK_IDENT, TK_EOF]
    assert tok.exprs[0][0].pos == 5
    assert tok.exprs[0][1].pos == 6


def test_template_literal_strings_are_decoded():
    tokens, _ = tokenize('"\\t\\{x}\\u00e9"')
    assert tokens[0].strings == ["\t", "\u00e9"]


def test_template_expression_with_braces():
    tokens, _ = tokenize('"\\{f(func() int { return 1 })}"')
    expr = [t.value for t in tokens[0].exprs[0]]
    assert expr == ["f", "(", "func", "(", ")", "int", "{", "return", "1", "}", ")", ""]


def test_template_expression_with_string():
    tokens, _ = tokenize('"\\{m["}"]} done"')
    tok = tokens[0]
    assert [t.value for t in tok.exprs[0]] == ["m", "[", '"}"', "]", ""]
    assert tok.strings == ["", " done"]


def test_escaped_backslash_is_not_a_template():
    tokens, _ = tokenize('"\\\\{x}"')
    assert tokens[0].type == TK_STRING


def test_several_expressions():
    tokens, _ = tokenize('"\\{a}-\\{b}"')
    tok = tokens[0]
    assert tok.strings == ["", "-", ""]
    assert [[t.value for t in e] for e in tok.exprs] == [["a", ""], ["b", ""]]


def test_comments_are_collected():
    tokens, comments = tokenize("x // hi\ny /* c */")
    assert [c.text for c in comments] == ["// hi", "/* c */"]
    assert comments[0].pos == 2 and comments[0].end == 7
    assert [t.value for t in tokens] == ["x", ";", "y", ";", ""]
    assert tokens[1].pos == 7


def test_multiline_block_comment_ends_statement():
    tokens, comments = tokenize("x /*\n*/ y")
    assert [t.value for t in tokens] == ["x", ";", "y", ";", ""]
    assert tokens[1].auto
    assert tokens[1].pos == 2
    assert comments[0].text == "/*\n*/"


@pytest.mark.parametrize(
    "source,message",
    [
        ('"\\{x\n}"', "newline in template literal expression"),
        ('"\\{}"', "empty template literal expression"),
        ('"\\{x', "template literal expression not terminated"),
        ('"abc', "string literal not terminated"),
        ("`abc", "raw string literal not terminated"),
        ("/* x", "comment not terminated"),
        ("'ab'", "rune literal must contain exactly one character"),
        ('"\\q"', "unknown escape sequence"),
        ("1e", "exponent has no digits"),
        ("$", "unexpected character: '$'"),
    ],
)
def test_errors(source: str, message: str):
    with pytest.raises(TokenizeError) as info:
        tokenize(source)
    assert info.value.msg == message


def test_error_position():
    with pytest.raises(TokenizeError) as info:
        tokenize("x\n  $")
    assert info.value.line == 2
    assert info.value.col == 3
    assert str(info.value) == "unexpected character: '$' at line 2 col 3"


def test_escape_error_position():
    with pytest.raises(TokenizeError) as info:
        tokenize('x := "ab\\q"')
    assert info.value.line == 1
    assert info.value.col == 9


def test_line_col():
    assert line_col("ab\ncd", 0) == (1, 1)
    assert line_col("ab\ncd", 2) == (1, 3)
    assert line_col("ab\ncd", 3) == (2, 1)
    assert line_col("ab\ncd", 5) == (2, 3)
