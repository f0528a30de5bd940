"""Tokenizer — lexes Rust-style source into a flat token list.

Every token keeps the whitespace and comments that precede it in `space`, so
concatenating `space + value` over the list (EOF included) gives back the
input exactly.
"""

from __future__ import annotations


# Token type constants
TK_INT = "INT"
TK_FLOAT = "FLOAT"
TK_STRING = "STRING"
TK_CHAR = "CHAR"
TK_IDENT = "IDENT"
TK_LIFETIME = "LIFETIME"
TK_OP = "OP"
TK_EOF = "EOF"

# Strict and reserved words. Lexed as TK_IDENT; the parser consults this set
# where a word's role matters (operand vs keyword).
KEYWORDS: set[str] = {
    "as",
    "async",
    "await",
    "break",
    "const",
    "continue",
    "crate",
    "dyn",
    "else",
    "enum",
    "extern",
    "false",
    "fn",
    "for",
    "if",
    "impl",
    "in",
    "let",
    "loop",
    "match",
    "mod",
    "move",
    "mut",
    "pub",
    "ref",
    "return",
    "static",
    "struct",
    "super",
    "trait",
    "true",
    "type",
    "unsafe",
    "use",
    "where",
    "while",
    "yield",
}

# Multi-character operators, sorted by length descending for greedy matching
MULTI_OPS: list[str] = [
    "<<=",
    ">>=",
    "...",
    "..=",
    "::",
    "->",
    "=>",
    "==",
    "!=",
    "<=",
    ">=",
    "&&",
    "||",
    "+=",
    "-=",
    "*=",
    "/=",
    "%=",
    "^=",
    "&=",
    "|=",
    "<<",
    ">>",
    "..",
]

SINGLE_OPS: set[str] = {
    "+",
    "-",
    "*",
    "/",
    "%",
    "^",
    "!",
    "&",
    "|",
    "=",
    "<",
    ">",
    "@",
    ".",
    ",",
    ";",
    ":",
    "#",
    "$",
    "?",
    "~",
    "(",
    ")",
    "[",
    "]",
    "{",
    "}",
}


class TokenizeError(Exception):
    """Error during tokenization."""

    def __init__(self, msg: str, line: int, col: int):
        self.msg: str = msg
        self.line: int = line
        self.col: int = col
        super().__init__(msg + " at line " + str(line) + " col " + str(col))


class Token:
    """A token with type, value, position, and the trivia that precedes it."""

    def __init__(self, type_: str, value: str, line: int, col: int, space: str = ""):
        self.type: str = type_
        self.value: str = value
        self.line: int = line
        self.col: int = col
        self.space: str = space

    def __repr__(self) -> str:
        return (
            "Token("
            + self.type
            + ", "
            + repr(self.value)
            + ", "
            + str(self.line)
            + ", "
            + str(self.col)
            + ")"
        )

    def is_op(self, value: str) -> bool:
        return self.type == TK_OP and self.value == value


def synth(type_: str, value: str, space: str = " ") -> Token:
    """Make a token that has no source position (generated code)."""
    return Token(type_, value, 0, 0, space)


def _is_digit(c: str) -> bool:
    return c >= "0" and c <= "9"


def _is_alpha(c: str) -> bool:
    if (c >= "a" and c <= "z") or (c >= "A" and c <= "Z") or c == "_":
        return True
    return c > "\x7f" and c.isalpha()


def _is_alnum(c: str) -> bool:
    return _is_alpha(c) or _is_digit(c) or (c > "\x7f" and c.isalnum())


class _Lexer:
    def __init__(self, source: str) -> None:
        self.src: str = source
        self.pos: int = 0
        self.line: int = 1
        self.col: int = 1

    def at(self, offset: int = 0) -> str:
        idx = self.pos + offset
        if idx < len(self.src):
            return self.src[idx]
        return ""

    def advance(self, n: int = 1) -> None:
        for _ in range(n):
            if self.pos >= len(self.src):
                return
            if self.src[self.pos] == "\n":
                self.line += 1
                self.col = 1
            else:
                self.col += 1
            self.pos += 1

    # ── Trivia ───────────────────────────────────────────────

    def skip_trivia(self) -> str:
        start = self.pos
        while self.pos < len(self.src):
            c = self.at()
            if c == " " or c == "\t" or c == "\r" or c == "\n":
                self.advance()
            elif c == "/" and self.at(1) == "/":
                while self.pos < len(self.src) and self.at() != "\n":
                    self.advance()
            elif c == "/" and self.at(1) == "*":
                self.block_comment()
            else:
                break
        return self.src[start : self.pos]

    def block_comment(self) -> None:
        line, col = self.line, self.col
        depth = 0
        while self.pos < len(self.src):
            if self.at() == "/" and self.at(1) == "*":
                depth += 1
                self.advance(2)
            elif self.at() == "*" and self.at(1) == "/":
                depth -= 1
                self.advance(2)
                if depth == 0:
                    return
            else:
                self.advance()
        raise TokenizeError("unterminated block comment", line, col)

    # ── Literals ─────────────────────────────────────────────

    def quoted(self, quote: str, line: int, col: int) -> None:
        """Consume a quoted body starting at the opening quote."""
        self.advance()
        while self.pos < len(self.src):
            c = self.at()
            if c == "\\":
                self.advance(2)
                continue
            if c == quote:
                self.advance()
                return
            if quote == "'" and c == "\n":
                break
            self.advance()
        if quote == '"':
            raise TokenizeError("unterminated string literal", line, col)
        raise TokenizeError("unterminated char literal", line, col)

    def raw_string(self, line: int, col: int) -> None:
        """Consume r#*"..."#* starting at the `r`."""
        self.advance()
        hashes = 0
        while self.at() == "#":
            hashes += 1
            self.advance()
        if self.at() != '"':
            raise TokenizeError("malformed raw string literal", line, col)
        self.advance()
        closing = '"' + "#" * hashes
        end = self.src.find(closing, self.pos)
        if end < 0:
            raise TokenizeError("unterminated raw string literal", line, col)
        self.advance(end + len(closing) - self.pos)

    def number(self) -> str:
        if self.at() == "0" and self.at(1) in ("x", "o", "b"):
            self.advance(2)
            while _is_alnum(self.at()):
                self.advance()
            return TK_INT
        while _is_digit(self.at()) or self.at() == "_":
            self.advance()
        is_float = False
        if self.at() == "." and _is_digit(self.at(1)):
            is_float = True
            self.advance()
            while _is_digit(self.at()) or self.at() == "_":
                self.advance()
        elif self.at() == "." and self.at(1) != "." and not _is_alpha(self.at(1)):
            # `1.` is a float; `1..2` and `1.foo()` are not
            is_float = True
            self.advance()
            return TK_FLOAT
        if self.at() in ("e", "E") and (
            _is_digit(self.at(1))
            or (self.at(1) in ("+", "-") and _is_digit(self.at(2)))
        ):
            is_float = True
            self.advance(2)
            while _is_digit(self.at()) or self.at() == "_":
                self.advance()
        # Type suffix: 1u8, 2.0f64
        if _is_alpha(self.at()):
            suffix_start = self.pos
            while _is_alnum(self.at()):
                self.advance()
            if self.src[suffix_start : self.pos].startswith("f"):
                is_float = True
        if is_float:
            return TK_FLOAT
        return TK_INT

    # ── Main loop ────────────────────────────────────────────

    def next_token(self) -> Token:
        space = self.skip_trivia()
        line, col = self.line, self.col
        start = self.pos
        if self.pos >= len(self.src):
            return Token(TK_EOF, "", line, col, space)
        c = self.at()

        # Prefixed literals: b"..", br"..", r"..", r#"..."#, c"..", b'x'
        if c in ("b", "c", "r"):
            nxt = self.at(1)
            if c == "r" and (nxt == '"' or (nxt == "#" and self.at(2) in ('"', "#"))):
                self.raw_string(line, col)
                return Token(TK_STRING, self.src[start : self.pos], line, col, space)
            if c in ("b", "c") and nxt == "r" and self.at(2) in ('"', "#"):
                self.advance()
                self.raw_string(line, col)
                return Token(TK_STRING, self.src[start : self.pos], line, col, space)
            if c in ("b", "c") and nxt == '"':
                self.advance()
                self.quoted('"', line, col)
                return Token(TK_STRING, self.src[start : self.pos], line, col, space)
            if c == "b" and nxt == "'":
                self.advance()
                self.quoted("'", line, col)
                return Token(TK_CHAR, self.src[start : self.pos], line, col, space)

        # Raw identifier: r#name
        if c == "r" and self.at(1) == "#" and _is_alpha(self.at(2)):
            self.advance(2)
            while _is_alnum(self.at()):
                self.advance()
            return Token(TK_IDENT, self.src[start : self.pos], line, col, space)

        if _is_alpha(c):
            while _is_alnum(self.at()):
                self.advance()
            return Token(TK_IDENT, self.src[start : self.pos], line, col, space)

        if _is_digit(c):
            kind = self.number()
            return Token(kind, self.src[start : self.pos], line, col, space)

        if c == '"':
            self.quoted('"', line, col)
            return Token(TK_STRING, self.src[start : self.pos], line, col, space)

        # Char literal or lifetime/label
        if c == "'":
            if self.at(1) == "\\" or (self.at(1) != "" and self.at(2) == "'"):
                self.quoted("'", line, col)
                return Token(TK_CHAR, self.src[start : self.pos], line, col, space)
            if _is_alpha(self.at(1)):
                self.advance()
                while _is_alnum(self.at()):
                    self.advance()
                return Token(TK_LIFETIME, self.src[start : self.pos], line, col, space)
            raise TokenizeError("unterminated char literal", line, col)

        for op in MULTI_OPS:
            if self.src.startswith(op, self.pos):
                self.advance(len(op))
                return Token(TK_OP, op, line, col, space)

        if c in SINGLE_OPS:
            self.advance()
            return Token(TK_OP, c, line, col, space)

        raise TokenizeError("unexpected character: " + repr(c), line, col)


def tokenize(source: str) -> list[Token]:
    """Tokenize source into a flat list ending with TK_EOF."""
    lexer = _Lexer(source)
    tokens: list[Token] = []
    while True:
        tok = lexer.next_token()
        tokens.append(tok)
        if tok.type == TK_EOF:
            return tokens
