"""tgo CLI: check .tgo files and translate them into Go."""

from __future__ import annotations

import logging
import sys

from .analyzer import UnsupportedImportError, analyze
from .syntax import ParseError, TokenizeError, parse_file
from .transpiler import transpile

logger = logging.getLogger("tgo.cli")

USAGE: str = """\
tgo [OPTIONS] FILE...

Check tgo files and translate them into Go. The output for page.tgo is
written to page.tgo.go.

Options:
  --check            Only check the files, do not write any output
  -o, --output FILE  Write the output to FILE (- for stdout); needs one input
  -v, --verbose      Log the translation steps to stderr
  --help             Show this help message
"""


def output_path(path: str) -> str:
    """Return the default output path for an input file."""
    return path + ".go"


def process(path: str, check: bool, output: str) -> bool:
    """Translate one file; diagnostics go to stderr and False is returned on failure."""
    try:
        with open(path, "rb") as f:
            raw = f.read()
    except FileNotFoundError:
        print("tgo: " + path + ": No such file or directory", file=sys.stderr)
        return False
    except OSError as e:
        print("tgo: " + path + ": " + str(e), file=sys.stderr)
        return False
    try:
        text = raw.decode("utf-8")
    except ValueError:
        print("tgo: " + path + ": invalid utf-8", file=sys.stderr)
        return False

    try:
        file, source = parse_file(text, path)
    except (TokenizeError, ParseError) as e:
        print("error: " + path + ":" + str(e.line) + ":" + str(e.col) + ": " + e.msg, file=sys.stderr)
        return False
    try:
        errors = analyze(file, source)
    except UnsupportedImportError as e:
        print("error: " + str(e), file=sys.stderr)
        return False
    if errors:
        for err in errors:
            print(str(err), file=sys.stderr)
        return False
    if check:
        logger.info("%s: ok", path)
        return True

    result = transpile(file, source)
    if output == "-":
        sys.stdout.write(result)
        logger.info("%s: written to stdout", path)
        return True
    target = output if output != "" else output_path(path)
    try:
        with open(target, "w", encoding="utf-8") as f:
            f.write(result)
    except OSError as e:
        print("tgo: " + target + ": " + str(e), file=sys.stderr)
        return False
    logger.info("%s: written to %s", path, target)
    return True


def main(argv: list[str] | None = None) -> int:
    args = argv if argv is not None else sys.argv[1:]
    files: list[str] = []
    check = False
    verbose = False
    output = ""
    i = 0
    while i < len(args):
        arg = args[i]
        if arg == "--help" or arg == "-h":
            print(USAGE, end="")
            return 0
        elif arg == "--check":
            check = True
            i += 1
        elif arg == "-v" or arg == "--verbose":
            verbose = True
            i += 1
        elif arg == "-o" or arg == "--output":
            if i + 1 >= len(args):
                print("tgo: " + arg + " requires an argument", file=sys.stderr)
                return 2
            output = args[i + 1]
            i += 2
        elif arg.startswith("-"):
            print("tgo: unknown flag '" + arg + "'", file=sys.stderr)
            return 2
        else:
            files.append(arg)
            i += 1
    if len(files) == 0:
        print("tgo: missing file argument", file=sys.stderr)
        return 2
    if output != "" and len(files) != 1:
        print("tgo: --output requires exactly one input file", file=sys.stderr)
        return 2
    if output != "" and check:
        print("tgo: --output cannot be used with --check", file=sys.stderr)
        return 2

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(name)s: %(message)s",
        stream=sys.stderr,
    )
    status = 0
    for path in files:
        if not process(path, check, output):
            status = 1
    return status


if __name__ == "__main__":
    sys.exit(main())
