"""Transpiler output tests.

Test cases live in 04_transpile/*.tests files. The input is a tgo file named
page.tgo and the expected section is the complete generated Go source.
"""

import shutil
import subprocess
from pathlib import Path

import pytest

from tgo import AnalyzeErrors, parse_file, translate, transpile

TRANSPILE_DIR = Path(__file__).parent / "04_transpile"

HEADER = "// Code generated by tgo. DO NOT EDIT.\n\n//line page.tgo:1:1\n"

# Cases whose input puts several statements on one line, which gofmt splits.
UNFORMATTED: set[str] = {
    "static/statement on the same line as an end tag",
    "static/empty string between statements on one line",
}


def parse_test_file(path: Path) -> list[tuple[str, str, str]]:
    """Parse .tests file into (name, input, expected) tuples."""
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
            # Whitespace is significant in generated code, so nothing is stripped.
            test_input = "\n".join(input_lines) + "\n"
            expected = "\n".join(expected_lines) + "\n"
            result.append((test_name, test_input, expected))
        else:
            i += 1
    return result


def discover_transpile_tests() -> list[tuple[str, str, str]]:
    results = []
    for test_file in sorted(TRANSPILE_DIR.glob("*.tests")):
        for name, input_code, expected in parse_test_file(test_file):
            results.append((f"{test_file.stem}/{name}", input_code, expected))
    return results


def pytest_generate_tests(metafunc):
    """Parametrize tests over transpiler test files."""
    if "transpile_input" in metafunc.fixturenames:
        params = [
            pytest.param(input_code, expected, id=test_id)
            for test_id, input_code, expected in discover_transpile_tests()
        ]
        metafunc.parametrize("transpile_input,transpile_expected", params)
    if "formatted_input" in metafunc.fixturenames:
        have_gofmt = shutil.which("gofmt") is not None
        params = []
        for test_id, input_code, _ in discover_transpile_tests():
            if test_id in UNFORMATTED:
                params.append(
                    pytest.param(
                        input_code,
                        id=test_id,
                        marks=pytest.mark.skip(reason="input not gofmt-formatted"),
                    )
                )
            elif not have_gofmt:
                params.append(
                    pytest.param(input_code, id=test_id, marks=pytest.mark.skip(reason="gofmt not found"))
                )
            else:
                params.append(pytest.param(input_code, id=test_id))
        metafunc.parametrize("formatted_input", params)


def test_transpile(transpile_input: str, transpile_expected: str):
    actual = translate(transpile_input, "page.tgo")
    assert actual == transpile_expected


def test_output_is_gofmt_clean(formatted_input: str):
    """Translating gofmt-formatted input yields gofmt-formatted output."""
    actual = translate(formatted_input, "page.tgo")
    result = subprocess.run(["gofmt"], input=actual.encode(), capture_output=True)
    assert result.returncode == 0, result.stderr.decode(errors="replace")
    assert result.stdout.decode() == actual


def test_plain_go_is_only_prefixed():
    text = "package main\n\nfunc main() {\n\tprintln(1)\n}\n"
    file, source = parse_file(text, "page.tgo")
    assert transpile(file, source) == HEADER + text


def test_translate_raises_on_diagnostics():
    text = "package main\n\nfunc f() {\n\t<a></a>\n}\n"
    with pytest.raises(AnalyzeErrors) as info:
        translate(text, "page.tgo")
    assert len(info.value) == 2
    assert str(info.value) == "page.tgo:4:2: open tag is not allowed in this context (and 1 more errors)"
