"""named-block CLI — expand labeled blocks in a source file."""

from __future__ import annotations

import sys

from . import check_source, expand_source
from .errors import TransformError
from .options import Options
from .tokens import TokenizeError

PROG = "named-block"

USAGE: str = """\
named-block [OPTIONS] [INPUT] [-o OUTPUT]

Rewrite block!('label: { ... }) invocations into plain loops.

Options:
  --check                Validate only; print diagnostics, no output
  --macro NAME           Invocation macro name (default: block)
  --allow-closure-exits  Let labeled exits inside closures reach outer blocks
  -o, --output FILE      Write output to FILE instead of stdout
  --help                 Show this help message
"""


def _error(msg: str) -> None:
    print(PROG + ": error: " + msg, file=sys.stderr)


def read_source(input_file: str | None) -> tuple[str, int]:
    """Read source from file or stdin. Returns (source, exit_code) where exit_code 0 means OK."""
    if input_file is not None:
        try:
            with open(input_file, "rb") as f:
                raw = f.read()
        except OSError:
            _error("cannot open '" + input_file + "'")
            return ("", 1)
    else:
        raw = sys.stdin.buffer.read()
    try:
        source = raw.decode("utf-8")
    except ValueError:
        _error("invalid utf-8 in input")
        return ("", 1)
    return (source, 0)


def write_output(output: str, output_file: str | None) -> int:
    """Write output to file or stdout. Returns 0 on success, 1 on error."""
    if output_file is not None:
        try:
            with open(output_file, "w", encoding="utf-8") as f:
                f.write(output)
        except OSError:
            _error("cannot write '" + output_file + "'")
            return 1
        return 0
    sys.stdout.write(output)
    return 0


def main(argv: list[str] | None = None) -> int:
    args = argv if argv is not None else sys.argv[1:]
    check_only = False
    macro_name = "block"
    strict_closures = True
    input_file: str | None = None
    output_file: str | None = None
    i = 0
    while i < len(args):
        arg = args[i]
        if arg == "--help" or arg == "-h":
            print(USAGE, end="")
            return 0
        elif arg == "--check":
            check_only = True
            i += 1
        elif arg == "--allow-closure-exits":
            strict_closures = False
            i += 1
        elif arg == "--macro" or arg == "-o" or arg == "--output":
            if i + 1 >= len(args):
                _error(arg + " requires an argument")
                return 2
            if arg == "--macro":
                macro_name = args[i + 1]
            else:
                output_file = args[i + 1]
            i += 2
        elif arg.startswith("-") and arg != "-":
            _error("unknown flag '" + arg + "'")
            return 2
        else:
            if input_file is not None:
                _error("unexpected argument '" + arg + "'")
                return 2
            input_file = arg
            i += 1
    if not macro_name.isidentifier():
        _error("invalid macro name '" + macro_name + "'")
        return 2
    if input_file == "-":
        input_file = None

    source, err = read_source(input_file)
    if err != 0:
        return err
    options = Options(macro_name=macro_name, strict_closures=strict_closures)

    try:
        if check_only:
            errors = check_source(source, options)
            for e in errors:
                _error(str(e))
            return 1 if errors else 0
        output = expand_source(source, options)
    except TokenizeError as e:
        _error("parse error: " + str(e))
        return 1
    except TransformError as e:
        _error(str(e))
        return 1
    return write_output(output, output_file)


if __name__ == "__main__":
    sys.exit(main())
