"""Ignore annotation — the #[block(ignore)] escape hatch.

A node carrying the marker is copied to the output unchanged and the marker is
dropped. Nothing under it is examined by the enclosing rewrite, which makes it
the way out for code the rewriter cannot classify safely, such as closures
that reuse an outer block's label.
"""

from __future__ import annotations

from .ast import DELIM_BRACKET, DELIM_PAREN, Annotated, Group, Leaf, Node, respace
from .tokens import TK_IDENT

IGNORE_ARG = "ignore"


def is_ignore_marker(attr: Group, macro_name: str) -> bool:
    """Check if attr is exactly [<macro_name>(ignore)]."""
    if attr.delim != DELIM_BRACKET or len(attr.children) != 2:
        return False
    name, args = attr.children
    if not (isinstance(name, Leaf) and name.token.type == TK_IDENT):
        return False
    if name.token.value != macro_name:
        return False
    if not (isinstance(args, Group) and args.delim == DELIM_PAREN):
        return False
    if len(args.children) != 1:
        return False
    arg = args.children[0]
    return (
        isinstance(arg, Leaf)
        and arg.token.type == TK_IDENT
        and arg.token.value == IGNORE_ARG
    )


def strip(node: Annotated) -> Node:
    """Drop the marker, keep the annotated node verbatim.

    The node takes over the marker's leading whitespace, so a marker on its
    own line leaves no blank line behind.
    """
    if not node.is_ignore:
        raise ValueError("node is not marked ignore")
    return respace(node.inner, node.hash.space)
