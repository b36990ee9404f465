"""Pytest-based parser tests."""

from pathlib import Path

import pytest

from tgo.syntax import ParseError, TokenizeError
from tgo.syntax.ast import (
    AttributeStmt,
    BasicLit,
    BlockStmt,
    EndTagStmt,
    ExprStmt,
    FuncDecl,
    Ident,
    OpenTagStmt,
    ReturnStmt,
    TemplateLiteral,
)
from tgo.syntax.parse import parse

PARSE_DIR = Path(__file__).parent / "02_parse"


def parse_test_file(path: Path) -> list[tuple[str, str, str]]:
    """Parse .tests file into (name, input, expected) tuples.

    Expected is one of: 'ok', 'error: <message>'
    """
    lines = path.read_text().split("\n")
    result: list[tuple[str, str, str]] = []
    i = 0
    while i < len(lines):
        line = lines[i]
        if line.startswith("=== "):
            test_name = line[4:].strip()
            i += 1
            input_lines: list[str] = []
            while i < len(lines) and not lines[i].startswith("---"):
                input_lines.append(lines[i])
                i += 1
            if i < len(lines) and lines[i] == "---":
                i += 1
            expected_lines: list[str] = []
            while i < len(lines) and not lines[i].startswith("---"):
                expected_lines.append(lines[i])
                i += 1
            if i < len(lines) and lines[i] == "---":
                i += 1
            test_input = "\n".join(input_lines)
            expected = "\n".join(expected_lines).strip()
            result.append((test_name, test_input, expected))
        else:
            i += 1
    return result


def discover_parse_tests() -> list[tuple[str, str, str]]:
    """Find all parse tests, returns (test_id, input, expected)."""
    results = []
    for test_file in sorted(PARSE_DIR.glob("*.tests")):
        for name, input_code, expected in parse_test_file(test_file):
            results.append((f"{test_file.stem}/{name}", input_code, expected))
    return results


def pytest_generate_tests(metafunc):
    """Parametrize tests over parse test files."""
    if "parse_input" in metafunc.fixturenames:
        params = [
            pytest.param(input_code, expected, id=test_id)
            for test_id, input_code, expected in discover_parse_tests()
        ]
        metafunc.parametrize("parse_input,parse_expected", params)


def test_parse(parse_input: str, parse_expected: str):
    """Verify parser produces expected result."""
    try:
        parse(parse_input)
        parse_error = None
    except (ParseError, TokenizeError) as e:
        parse_error = e

    if parse_expected == "ok":
        if parse_error is not None:
            pytest.fail(f"Expected ok, got parse error: {parse_error}")
    elif parse_expected.startswith("error:"):
        expected_msg = parse_expected[6:].strip()
        if parse_error is None:
            pytest.fail(f"Expected error containing '{expected_msg}', but parsing succeeded")
        assert expected_msg in str(parse_error)
    else:
        pytest.fail(f"Unknown expected format: {parse_expected}")


def body_of(source: str) -> list:
    """Parse source and return the statements of its first function."""
    file = parse(source)
    for decl in file.decls:
        if isinstance(decl, FuncDecl):
            assert isinstance(decl.body, BlockStmt)
            return decl.body.list
    raise AssertionError("no function in source")


def test_tag_statements():
    stmts = body_of('package p\nfunc f() {\n\t<a @href="x" @b>"t"</a>\n}\n')
    assert [type(s) for s in stmts] == [OpenTagStmt, ExprStmt, EndTagStmt]
    open_tag = stmts[0]
    assert open_tag.name.name == "a"
    assert [type(s) for s in open_tag.body] == [AttributeStmt, AttributeStmt]
    href, bare = open_tag.body
    assert href.name.name == "href"
    assert isinstance(href.value, BasicLit) and href.value.value == '"x"'
    assert bare.name.name == "b" and bare.value is None
    assert stmts[2].name.name == "a"


def test_tag_positions():
    source = "package p\nfunc f() {\n\t<div></div>\n}\n"
    open_tag, end_tag = body_of(source)
    assert source[open_tag.pos : open_tag.end] == "<div>"
    assert source[open_tag.close_pos] == ">"
    assert source[end_tag.pos : end_tag.end] == "</div>"
    assert source[end_tag.open_pos] == "<"
    assert end_tag.close_pos == end_tag.end - 1


def test_markup_names():
    stmts = body_of('package p\nfunc f() {\n\t<my-tag @data-x:y="1"></my-tag>\n}\n')
    assert stmts[0].name.name == "my-tag"
    assert stmts[0].body[0].name.name == "data-x:y"
    assert stmts[1].name.name == "my-tag"


def test_separated_dash_is_not_part_of_the_name():
    with pytest.raises(ParseError):
        parse("package p\nfunc f() {\n\t<my - tag></my>\n}\n")


def test_return_before_end_tag():
    stmts = body_of("package p\nfunc f() error {\n\t<div>return nil</div>\n}\n")
    assert [type(s) for s in stmts] == [OpenTagStmt, ReturnStmt, EndTagStmt]
    ret = stmts[1]
    assert len(ret.results) == 1
    assert isinstance(ret.results[0], Ident) and ret.results[0].name == "nil"


def test_template_literal():
    source = 'package p\nfunc f() {\n\t"a \\{x} b \\{y.z}"\n}\n'
    stmts = body_of(source)
    lit = stmts[0].x
    assert isinstance(lit, TemplateLiteral)
    assert lit.strings == ["a ", " b ", ""]
    assert len(lit.parts) == 2
    assert source[lit.parts[0].pos : lit.parts[0].end] == "x"
    assert source[lit.parts[1].pos : lit.parts[1].end] == "y.z"


def test_template_literal_escapes_are_decoded():
    stmts = body_of('package p\nfunc f() {\n\t"\\t\\"\\{x}\\u00e9"\n}\n')
    assert stmts[0].x.strings == ['\t"', "\u00e9"]


def test_error_position():
    with pytest.raises(ParseError) as info:
        parse("package p\n\nfunc f() {\n\t<div @x=1></div>\n}\n")
    assert info.value.line == 4
    assert info.value.col == 10
    assert str(info.value) == "expected attribute value, found '1' at line 4 col 10"


def test_comments_are_collected():
    file = parse("package p // a\n\n/* b */\nfunc f() {}\n")
    assert [c.text for c in file.comments] == ["// a", "/* b */"]
