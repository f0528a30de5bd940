"""Tests for the named-block command line."""

import io
import sys

from named_block import expand_source
from named_block.cli import USAGE, main

GOOD = "let x = block!('a: {\n    if c { break 'a 1; }\n    2\n});\n"
BAD = "let a = block!('a: { break; });\nlet b = block!('b: { continue 'b; });\n"
CLOSURE = "block!('a: { let f = || { break 'a 1; }; 0 })\n"


def _write(tmp_path, name: str, text: str) -> str:
    path = tmp_path / name
    path.write_text(text)
    return str(path)


# ============================================================
# arguments
# ============================================================


def test_help(capsys):
    assert main(["--help"]) == 0
    assert capsys.readouterr().out == USAGE


def test_unknown_flag(capsys):
    assert main(["--bogus"]) == 2
    assert capsys.readouterr().err == "named-block: error: unknown flag '--bogus'\n"


def test_flag_missing_argument(capsys):
    assert main(["--macro"]) == 2
    assert "--macro requires an argument" in capsys.readouterr().err


def test_two_inputs(capsys, tmp_path):
    a = _write(tmp_path, "a.rs", GOOD)
    assert main([a, a]) == 2
    assert "unexpected argument" in capsys.readouterr().err


def test_invalid_macro_name(capsys):
    assert main(["--macro", "1x"]) == 2
    assert "invalid macro name" in capsys.readouterr().err


# ============================================================
# expansion
# ============================================================


def test_expand_to_stdout(capsys, tmp_path):
    path = _write(tmp_path, "in.rs", GOOD)
    assert main([path]) == 0
    assert capsys.readouterr().out == expand_source(GOOD)


def test_expand_to_file(capsys, tmp_path):
    src = _write(tmp_path, "in.rs", GOOD)
    out = tmp_path / "out.rs"
    assert main([src, "-o", str(out)]) == 0
    assert out.read_text() == expand_source(GOOD)
    assert capsys.readouterr().out == ""


def test_expand_from_stdin(capsys, monkeypatch):
    monkeypatch.setattr(sys, "stdin", io.TextIOWrapper(io.BytesIO(GOOD.encode("utf-8"))))
    assert main([]) == 0
    assert capsys.readouterr().out == expand_source(GOOD)


def test_custom_macro(capsys, tmp_path):
    path = _write(tmp_path, "in.rs", "named!('a: { break 'a 1 })\n")
    assert main(["--macro", "named", path]) == 0
    assert "named!" not in capsys.readouterr().out


def test_validation_error(capsys, tmp_path):
    path = _write(tmp_path, "bad.rs", BAD)
    assert main([path]) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err.startswith("named-block: error: ")
    assert captured.err.rstrip().endswith("at line 1 col 22")


def test_closure_exits(capsys, tmp_path):
    path = _write(tmp_path, "c.rs", CLOSURE)
    assert main([path]) == 1
    capsys.readouterr()
    assert main(["--allow-closure-exits", path]) == 0


def test_parse_error(capsys, tmp_path):
    path = _write(tmp_path, "p.rs", 'let s = "open;\n')
    assert main([path]) == 1
    assert "named-block: error: parse error: unterminated string" in capsys.readouterr().err


def test_missing_file(capsys, tmp_path):
    assert main([str(tmp_path / "nope.rs")]) == 1
    assert "cannot open" in capsys.readouterr().err


def test_invalid_utf8(capsys, tmp_path):
    path = tmp_path / "bin.rs"
    path.write_bytes(b"\xff\xfe")
    assert main([str(path)]) == 1
    assert "invalid utf-8" in capsys.readouterr().err


# ============================================================
# --check
# ============================================================


def test_check_ok(capsys, tmp_path):
    path = _write(tmp_path, "in.rs", GOOD)
    assert main(["--check", path]) == 0
    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err == ""


def test_check_reports_every_site(capsys, tmp_path):
    path = _write(tmp_path, "bad.rs", BAD)
    assert main(["--check", path]) == 1
    lines = capsys.readouterr().err.strip().split("\n")
    assert len(lines) == 2
    assert all(line.startswith("named-block: error: ") for line in lines)
    assert lines[1].endswith("at line 2 col 22")
