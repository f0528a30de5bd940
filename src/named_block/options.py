"""Transformation options."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Options:
    """Knobs shared by the parser, rewriter, and CLI.

    macro_name: name of the invocation macro (`block!`), which also names the
        ignore marker (`#[block(ignore)]`).
    strict_closures: reject labeled exits inside a closure that would reach a
        labeled block outside it. When off they are rewritten like any other
        exit, which is only correct if the closure runs inside the block.
    """

    macro_name: str = "block"
    strict_closures: bool = True


DEFAULT_OPTIONS = Options()
