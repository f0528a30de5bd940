"""Emitter — renders a node tree back into source text.

Each token is written as its leading trivia followed by its text, so a tree
built from source and never rewritten renders to exactly that source.
"""

from __future__ import annotations

from .ast import Node, tokens_of


def to_source(node: Node) -> str:
    """Render a node tree as source text."""
    parts: list[str] = []
    for tok in tokens_of(node):
        parts.append(tok.space)
        parts.append(tok.value)
    return "".join(parts)
