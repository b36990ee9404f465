"""CLI tests for the tgo entry point.

Test cases live in 01_cli/*.tests files. Format:

    === test name
    args: --check page.tgo
    source code here
    (written to page.tgo in a fresh directory)
    ---
    exit: 0
    stderr: error: some message
    stdout-contains: "keyword"
    output-contains: WriteString
    ---

Special directives in the input section:
    args:           CLI arguments (first line, required)
    source-bytes:   hex-encoded raw bytes for page.tgo instead of text

Assertion directives in the expected section:
    exit:             exact exit code
    exit-not:         exit code must NOT equal this
    stderr:           exact stderr content (trailing newline added)
    stderr-contains:  stderr must contain substring
    stderr-empty:     stderr must be empty
    stdout-contains:  stdout must contain substring
    stdout-empty:     stdout must be empty
    output-contains:  page.tgo.go must contain substring
    no-output:        page.tgo.go must not exist
"""

import os
import subprocess
import sys
from pathlib import Path

import pytest

CLI_DIR = Path(__file__).parent / "01_cli"
SRC_DIR = Path(__file__).parent.parent / "src"


def parse_cli_test_file(path: Path) -> list[tuple[str, dict]]:
    """Parse a .tests file into (name, spec) tuples.

    Each spec dict has keys: args, source, source_bytes, assertions.
    """
    lines = path.read_text().split("\n")
    result: list[tuple[str, dict]] = []
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
            spec = _parse_spec(input_lines, expected_lines)
            result.append((test_name, spec))
        else:
            i += 1
    return result


def _parse_spec(input_lines: list[str], expected_lines: list[str]) -> dict:
    """Parse input + expected lines into a test spec dict."""
    spec: dict = {
        "args": [],
        "source": None,
        "source_bytes": None,
        "assertions": [],
    }
    body_start = 0
    if input_lines and input_lines[0].startswith("args:"):
        args_str = input_lines[0][5:].strip()
        spec["args"] = args_str.split() if args_str else []
        body_start = 1

    remaining = input_lines[body_start:]
    if remaining and remaining[0].startswith("source-bytes:"):
        hex_str = remaining[0][len("source-bytes:") :].strip()
        spec["source_bytes"] = bytes.fromhex(hex_str)
    elif remaining:
        spec["source"] = "\n".join(remaining) + "\n"

    for line in expected_lines:
        line = line.strip()
        if not line:
            continue
        if line.startswith("exit:"):
            spec["assertions"].append(("exit", int(line[5:].strip())))
        elif line.startswith("exit-not:"):
            spec["assertions"].append(("exit-not", int(line[9:].strip())))
        elif line.startswith("stderr:"):
            spec["assertions"].append(("stderr", line[7:].strip()))
        elif line.startswith("stderr-contains:"):
            spec["assertions"].append(("stderr-contains", line[16:].strip()))
        elif line.startswith("stderr-empty:"):
            spec["assertions"].append(("stderr-empty", None))
        elif line.startswith("stdout-contains:"):
            spec["assertions"].append(("stdout-contains", line[16:].strip()))
        elif line.startswith("stdout-empty:"):
            spec["assertions"].append(("stdout-empty", None))
        elif line.startswith("output-contains:"):
            spec["assertions"].append(("output-contains", line[16:].strip()))
        elif line.startswith("no-output:"):
            spec["assertions"].append(("no-output", None))
    return spec


def discover_cli_tests() -> list[tuple[str, dict]]:
    """Find all CLI tests across .tests files."""
    results = []
    for test_file in sorted(CLI_DIR.glob("*.tests")):
        tests = parse_cli_test_file(test_file)
        for name, spec in tests:
            test_id = f"{test_file.stem}/{name}"
            results.append((test_id, spec))
    return results


def run_cli(spec: dict, workdir: Path) -> subprocess.CompletedProcess[bytes]:
    """Run the tgo CLI from a test spec inside workdir."""
    if spec["source_bytes"] is not None:
        (workdir / "page.tgo").write_bytes(spec["source_bytes"])
    elif spec["source"] is not None:
        (workdir / "page.tgo").write_bytes(spec["source"].encode())
    env = dict(os.environ)
    env["PYTHONPATH"] = str(SRC_DIR)
    cmd = [sys.executable, "-m", "tgo", *spec["args"]]
    return subprocess.run(
        cmd,
        input=b"",
        capture_output=True,
        cwd=workdir,
        env=env,
    )


def check_assertions(
    result: subprocess.CompletedProcess[bytes], assertions: list[tuple], workdir: Path
) -> None:
    """Check all assertions against a CLI result."""
    output = workdir / "page.tgo.go"
    for kind, value in assertions:
        if kind == "exit":
            assert result.returncode == value, (
                f"expected exit {value}, got {result.returncode}"
                f"\nstderr: {result.stderr.decode(errors='replace')}"
            )
        elif kind == "exit-not":
            assert result.returncode != value, (
                f"expected exit != {value}, got {result.returncode}"
            )
        elif kind == "stderr":
            actual = result.stderr.decode(errors="replace").rstrip("\n")
            assert actual == value, f"expected stderr {value!r}, got {actual!r}"
        elif kind == "stderr-contains":
            actual = result.stderr.decode(errors="replace")
            assert value in actual, (
                f"expected stderr to contain {value!r}, got {actual!r}"
            )
        elif kind == "stderr-empty":
            assert result.stderr == b"", f"expected empty stderr, got {result.stderr!r}"
        elif kind == "stdout-contains":
            actual = result.stdout.decode(errors="replace")
            assert value in actual, (
                f"expected stdout to contain {value!r}, got {actual!r}"
            )
        elif kind == "stdout-empty":
            assert result.stdout == b"", (
                f"expected empty stdout, got {result.stdout[:200]!r}"
            )
        elif kind == "output-contains":
            assert output.exists(), "expected page.tgo.go to be written"
            actual = output.read_text()
            assert value in actual, (
                f"expected output to contain {value!r}, got {actual[:400]!r}"
            )
        elif kind == "no-output":
            assert not output.exists(), "expected no page.tgo.go"


def pytest_generate_tests(metafunc):
    """Parametrize test_cli over all .tests files."""
    if "cli_spec" in metafunc.fixturenames:
        tests = discover_cli_tests()
        params = [pytest.param(spec, id=test_id) for test_id, spec in tests]
        metafunc.parametrize("cli_spec", params)


def test_cli(cli_spec: dict, tmp_path: Path) -> None:
    """Run a single CLI test case from .tests file."""
    result = run_cli(cli_spec, tmp_path)
    check_assertions(result, cli_spec["assertions"], tmp_path)
