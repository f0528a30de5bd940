"""Validator — decides what each break/continue inside a labeled block binds to.

Runs interleaved with the rewriter: every exit is checked against the scope
stack at the point it is reached. Exits outside any labeled block are never
our concern and always pass.
"""

from __future__ import annotations

from .ast import EarlyExit, LoopFlow
from .errors import (
    ClosureCapturedExit,
    InvalidBareExit,
    InvalidSelfContinue,
    UnresolvedLabel,
)
from .options import Options
from .scope import KIND_BLOCK, ScopeEntry, ScopeTracker


def resolve_exit(node: EarlyExit, scope: ScopeTracker, options: Options) -> ScopeEntry | None:
    """Return the labeled block `node` exits, or None to leave it untouched."""
    if not scope.in_block():
        return None
    kw = node.keyword
    if node.label is None:
        res = scope.resolve(None)
        if res is not None and res.entry.kind == KIND_BLOCK:
            raise InvalidBareExit(
                "unlabeled break inside labeled block "
                + res.entry.label
                + " would exit the block's own loop; use break "
                + res.entry.label,
                kw.line,
                kw.col,
            )
        return None
    label = node.label.value
    res = scope.resolve(label)
    if res is None:
        raise UnresolvedLabel(
            "use of undeclared label " + label, node.label.line, node.label.col
        )
    if not res.entry.is_active:
        return None
    if res.crossed_closure and options.strict_closures:
        raise ClosureCapturedExit(
            "break to labeled block "
            + label
            + " from inside a closure; mark the closure #["
            + options.macro_name
            + "(ignore)] or move the exit out",
            kw.line,
            kw.col,
        )
    return res.entry


def check_flow(node: LoopFlow, scope: ScopeTracker) -> None:
    """Raise if a bare break/continue or a labeled continue is invalid here."""
    if not scope.in_block():
        return
    kw = node.keyword
    if node.label is None:
        res = scope.resolve(None)
        if res is not None and res.entry.kind == KIND_BLOCK:
            raise InvalidBareExit(
                "unlabeled "
                + node.kind
                + " inside labeled block "
                + res.entry.label
                + " is ambiguous",
                kw.line,
                kw.col,
            )
        return
    label = node.label.value
    res = scope.resolve(label)
    if res is None:
        raise UnresolvedLabel(
            "use of undeclared label " + label, node.label.line, node.label.col
        )
    if res.entry.kind == KIND_BLOCK:
        raise InvalidSelfContinue(
            "continue " + label + " targets a labeled block, which never repeats",
            kw.line,
            kw.col,
        )
