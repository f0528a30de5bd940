"""Item skipper — recognizes nested declarations and finds where they end.

Classification looks at no more than a handful of leading tokens. It is
deliberately conservative: anything it is unsure about is not an item, so the
rewriter still sees any early exits inside it.
"""

from __future__ import annotations

from .ast import DELIM_BRACE, DELIM_PAREN, Group, Leaf, Node
from .tokens import KEYWORDS, TK_IDENT, TK_OP, TK_STRING

# Keywords that always start an item at statement position.
ITEM_KEYWORDS: set[str] = {
    "use",
    "mod",
    "trait",
    "impl",
    "fn",
    "type",
    "enum",
    "struct",
}

# Items terminated only by `;` even if a brace group appears first
# (use a::{b, c}; const X: T = { .. };).
SEMI_KINDS: set[str] = {"use", "static", "const", "type", "extern crate"}


def _word(nodes: tuple[Node, ...] | list[Node], i: int) -> str | None:
    if i < len(nodes):
        node = nodes[i]
        if isinstance(node, Leaf) and node.token.type == TK_IDENT:
            return node.token.value
    return None


def _is_op(nodes: tuple[Node, ...] | list[Node], i: int, value: str) -> bool:
    if i < len(nodes):
        node = nodes[i]
        return isinstance(node, Leaf) and node.token.type == TK_OP and node.token.value == value
    return False


def _is_name(nodes: tuple[Node, ...] | list[Node], i: int) -> bool:
    w = _word(nodes, i)
    return w is not None and (w not in KEYWORDS or w == "_")


def _is_group(nodes: tuple[Node, ...] | list[Node], i: int, delim: str) -> bool:
    return i < len(nodes) and isinstance(nodes[i], Group) and nodes[i].delim == delim


def item_kind(nodes: tuple[Node, ...] | list[Node], i: int) -> str | None:
    """Classify the statement starting at nodes[i]. Returns the item kind or None."""
    j = i
    if _word(nodes, j) == "pub":
        j += 1
        if _is_group(nodes, j, DELIM_PAREN):
            j += 1
    w = _word(nodes, j)
    if w is None:
        return None
    if w in ITEM_KEYWORDS:
        if w == "fn" and not _is_name(nodes, j + 1):
            return None
        return w
    if w == "macro_rules" and _is_op(nodes, j + 1, "!"):
        return "macro_rules"
    if w == "union" and _is_name(nodes, j + 1):
        return "union"
    if w == "static":
        if _word(nodes, j + 1) == "mut" or _is_name(nodes, j + 1):
            return "static"
        return None
    if w == "const":
        if _word(nodes, j + 1) in ("fn", "unsafe", "async", "extern"):
            return item_kind(nodes, j + 1)
        if _is_name(nodes, j + 1):
            return "const"
        return None
    if w == "unsafe":
        if _word(nodes, j + 1) in ("fn", "impl", "trait", "extern"):
            return item_kind(nodes, j + 1)
        return None
    if w == "async":
        if _word(nodes, j + 1) == "fn":
            return "fn"
        if _word(nodes, j + 1) == "unsafe" and _word(nodes, j + 2) == "fn":
            return "fn"
        return None
    if w == "extern":
        k = j + 1
        if _word(nodes, k) == "crate":
            return "extern crate"
        if k < len(nodes) and isinstance(nodes[k], Leaf) and nodes[k].token.type == TK_STRING:
            k += 1
        if _word(nodes, k) == "fn":
            return "fn"
        if _is_group(nodes, k, DELIM_BRACE):
            return "extern"
        return None
    return None


def item_end(nodes: tuple[Node, ...] | list[Node], i: int, kind: str) -> int | None:
    """Index just past the item starting at nodes[i], or None if it never ends."""
    semi_only = kind in SEMI_KINDS
    j = i
    while j < len(nodes):
        if _is_op(nodes, j, ";"):
            return j + 1
        if not semi_only and _is_group(nodes, j, DELIM_BRACE):
            return j + 1
        j += 1
    return None


def skip_item(nodes: tuple[Node, ...] | list[Node], i: int) -> tuple[str, int] | None:
    """Return (kind, end) when nodes[i] starts a complete item, else None."""
    kind = item_kind(nodes, i)
    if kind is None:
        return None
    end = item_end(nodes, i, kind)
    if end is None:
        return None
    return kind, end
