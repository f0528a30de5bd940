"""Symbol generator — collision-free names for result slots."""

from __future__ import annotations

import itertools
import threading

from .tokens import TK_IDENT, Token

PREFIX = "_named_block_"


def reserved_names(tokens: list[Token]) -> set[str]:
    """Every identifier spelled in the source; generated names must avoid these."""
    return {t.value for t in tokens if t.type == TK_IDENT}


class SymbolGenerator:
    """Hands out names unique for the lifetime of the generator.

    One generator covers one translation unit. The counter is advanced under a
    lock so units may be expanded from several threads against one generator.
    """

    def __init__(self, reserved: set[str] | None = None) -> None:
        self._counter = itertools.count(1)
        self._lock = threading.Lock()
        self._reserved: set[str] = set(reserved) if reserved is not None else set()

    def reserve(self, names: set[str]) -> None:
        with self._lock:
            self._reserved |= names

    def fresh(self, hint: str) -> str:
        hint = _sanitize(hint)
        with self._lock:
            while True:
                name = PREFIX + hint + "_" + str(next(self._counter))
                if name not in self._reserved:
                    self._reserved.add(name)
                    return name


def _sanitize(hint: str) -> str:
    if hint.startswith("'"):
        hint = hint[1:]
    if hint.startswith("r#"):
        hint = hint[2:]
    out = "".join(c if (c.isalnum() or c == "_") else "_" for c in hint)
    return out or "ret"


_default = SymbolGenerator()


def default_generator() -> SymbolGenerator:
    """Process-wide generator for callers that do not bring their own."""
    return _default
