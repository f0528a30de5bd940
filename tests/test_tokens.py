"""Tests for the tokenizer."""

import pytest

from named_block.tokens import (
    TK_CHAR,
    TK_EOF,
    TK_FLOAT,
    TK_IDENT,
    TK_INT,
    TK_LIFETIME,
    TK_OP,
    TK_STRING,
    TokenizeError,
    tokenize,
)


def _kinds(source: str) -> list[tuple[str, str]]:
    return [(t.type, t.value) for t in tokenize(source) if t.type != TK_EOF]


def _rebuild(source: str) -> str:
    return "".join(t.space + t.value for t in tokenize(source))


# ============================================================
# round trip
# ============================================================


@pytest.mark.parametrize(
    "source",
    [
        "",
        "   \n\t ",
        "let x = 1; // trailing comment\n",
        "/* outer /* nested */ still comment */ fn f() {}",
        'let s = r#"raw "quoted" text"#;',
        "let b = b'x'; let c = '\\n'; let l: &'static str = \"a\\\"b\";",
        "block!('a: {\n    break 'a 1;\n})\n",
    ],
)
def test_round_trip_is_exact(source: str):
    assert _rebuild(source) == source


def test_trailing_trivia_lives_on_eof():
    toks = tokenize("x // done\n")
    assert toks[-1].type == TK_EOF
    assert toks[-1].space == " // done\n"


# ============================================================
# token kinds
# ============================================================


def test_lifetime_and_char():
    assert _kinds("'a: 'b'") == [(TK_LIFETIME, "'a"), (TK_OP, ":"), (TK_CHAR, "'b'")]


def test_escaped_char():
    assert _kinds("'\\''") == [(TK_CHAR, "'\\''")]


def test_keywords_are_identifiers():
    assert _kinds("break continue loop") == [
        (TK_IDENT, "break"),
        (TK_IDENT, "continue"),
        (TK_IDENT, "loop"),
    ]


def test_raw_identifier():
    assert _kinds("r#match") == [(TK_IDENT, "r#match")]


def test_numbers():
    assert _kinds("1u8 2.0f64 3e10 0xff") == [
        (TK_INT, "1u8"),
        (TK_FLOAT, "2.0f64"),
        (TK_FLOAT, "3e10"),
        (TK_INT, "0xff"),
    ]


def test_range_is_not_float():
    assert _kinds("1..2") == [(TK_INT, "1"), (TK_OP, ".."), (TK_INT, "2")]


def test_tuple_field_is_not_float():
    assert _kinds("x.0") == [(TK_IDENT, "x"), (TK_OP, "."), (TK_INT, "0")]


def test_multi_char_operators_are_greedy():
    assert _kinds("a ..= b => c :: d") == [
        (TK_IDENT, "a"),
        (TK_OP, "..="),
        (TK_IDENT, "b"),
        (TK_OP, "=>"),
        (TK_IDENT, "c"),
        (TK_OP, "::"),
        (TK_IDENT, "d"),
    ]


def test_string_prefixes():
    assert _kinds('b"x" br"y" c"z"') == [
        (TK_STRING, 'b"x"'),
        (TK_STRING, 'br"y"'),
        (TK_STRING, 'c"z"'),
    ]


def test_positions():
    toks = tokenize("a\n  bc")
    assert (toks[0].line, toks[0].col) == (1, 1)
    assert (toks[1].line, toks[1].col) == (2, 3)
    assert toks[1].space == "\n  "


# ============================================================
# errors
# ============================================================


def test_unterminated_string():
    with pytest.raises(TokenizeError) as exc:
        tokenize('x = "abc')
    assert exc.value.line == 1
    assert exc.value.col == 5
    assert "unterminated string" in str(exc.value)


def test_unterminated_block_comment():
    with pytest.raises(TokenizeError) as exc:
        tokenize("x /* never closed")
    assert "unterminated block comment" in exc.value.msg


def test_unexpected_character():
    with pytest.raises(TokenizeError) as exc:
        tokenize("a\n  `")
    assert (exc.value.line, exc.value.col) == (2, 3)
    assert str(exc.value).endswith("at line 2 col 3")
