"""Label/scope tracker — which labels are live at each point of the walk."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from .ast import Pos
from .symbols import SymbolGenerator

KIND_BLOCK = "block"
KIND_LOOP = "loop"
KIND_CLOSURE = "closure"
KIND_LABELED = "labeled"


@dataclass
class ScopeEntry:
    """One level of the stack.

    block entries belong to a labeled block being transformed and own its
    result slot. loop entries are native loops (label may be None). labeled
    entries are native labeled blocks, reachable only by label. closure
    entries carry no label and stop bare exits from resolving past them.
    """

    kind: str
    label: str | None
    result: str | None = None
    pos: Pos | None = None

    @property
    def is_active(self) -> bool:
        return self.kind == KIND_BLOCK


@dataclass(frozen=True)
class Resolution:
    entry: ScopeEntry
    crossed_closure: bool


class ScopeTracker:
    def __init__(
        self, symbols: SymbolGenerator, outer_labels: tuple[str, ...] = ()
    ) -> None:
        self.symbols: SymbolGenerator = symbols
        self.entries: list[ScopeEntry] = []
        for label in outer_labels:
            self.entries.append(ScopeEntry(KIND_LOOP, label))

    # ── Push / pop ───────────────────────────────────────────

    def enter(self, label: str, pos: Pos | None = None) -> ScopeEntry:
        entry = ScopeEntry(KIND_BLOCK, label, self.symbols.fresh(label), pos)
        self.entries.append(entry)
        return entry

    def enter_loop(self, label: str | None) -> ScopeEntry:
        entry = ScopeEntry(KIND_LOOP, label)
        self.entries.append(entry)
        return entry

    def enter_labeled(self, label: str) -> ScopeEntry:
        entry = ScopeEntry(KIND_LABELED, label)
        self.entries.append(entry)
        return entry

    def enter_closure(self) -> ScopeEntry:
        entry = ScopeEntry(KIND_CLOSURE, None)
        self.entries.append(entry)
        return entry

    def exit(self) -> ScopeEntry:
        if not self.entries:
            raise RuntimeError("scope stack underflow")
        return self.entries.pop()

    @contextmanager
    def block(self, label: str, pos: Pos | None = None) -> Iterator[ScopeEntry]:
        entry = self.enter(label, pos)
        try:
            yield entry
        finally:
            self.exit()

    @contextmanager
    def loop(self, label: str | None) -> Iterator[ScopeEntry]:
        entry = self.enter_loop(label)
        try:
            yield entry
        finally:
            self.exit()

    @contextmanager
    def labeled(self, label: str) -> Iterator[ScopeEntry]:
        entry = self.enter_labeled(label)
        try:
            yield entry
        finally:
            self.exit()

    @contextmanager
    def closure(self) -> Iterator[ScopeEntry]:
        entry = self.enter_closure()
        try:
            yield entry
        finally:
            self.exit()

    # ── Queries ──────────────────────────────────────────────

    def resolve(self, label: str | None) -> Resolution | None:
        """Find the entry an exit binds to.

        With a label: the innermost block, loop, or labeled block carrying it.
        Without: the innermost block, loop, or closure. None when nothing
        matches.
        """
        crossed = False
        i = len(self.entries) - 1
        while i >= 0:
            entry = self.entries[i]
            if label is None:
                if entry.kind != KIND_LABELED:
                    return Resolution(entry, crossed)
                i -= 1
                continue
            if entry.kind == KIND_CLOSURE:
                crossed = True
            elif entry.label == label:
                return Resolution(entry, crossed)
            i -= 1
        return None

    def in_block(self) -> bool:
        """True while any labeled block is being transformed."""
        return any(e.is_active for e in self.entries)
