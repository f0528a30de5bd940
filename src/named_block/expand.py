"""Driver — finds every invocation site in a file and expands it.

Outside any labeled block nothing is validated: the driver only walks the
tree, remembers which native loop labels are in scope, and hands each
invocation to the rewriter. Invocations the rewriter copied verbatim (inside
items or ignored nodes) are picked up by walking its output again, each with
a scope of its own. Native loop labels around an ignored region stay visible
inside it.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import replace

from .ast import (
    Annotated,
    Closure,
    EarlyExit,
    Group,
    ItemDecl,
    LabeledBlock,
    Leaf,
    Loop,
    LoopFlow,
    Node,
)
from .errors import MalformedInput, TransformError
from .ignore import strip
from .options import DEFAULT_OPTIONS, Options
from .rewrite import transform
from .symbols import SymbolGenerator, default_generator


class Expander:
    """Expands all sites of one translation unit.

    With collect=False the first error propagates. With collect=True each
    failing site is recorded in `errors`, left as written, and the walk
    goes on with the next site.
    """

    def __init__(
        self,
        options: Options = DEFAULT_OPTIONS,
        symbols: SymbolGenerator | None = None,
        collect: bool = False,
    ) -> None:
        self.options: Options = options
        self.symbols: SymbolGenerator = symbols if symbols is not None else default_generator()
        self.collect: bool = collect
        self.errors: list[TransformError] = []
        self.labels: list[str] = []

    def expand(self, tree: Group) -> Group:
        return self.node(tree)

    @contextmanager
    def fresh_labels(self) -> Iterator[None]:
        """Hide the enclosing loop labels; items and closures cannot see them."""
        saved = self.labels
        self.labels = []
        try:
            yield
        finally:
            self.labels = saved

    # ── Walk ─────────────────────────────────────────────────

    def seq(self, nodes: tuple[Node, ...]) -> tuple[Node, ...]:
        return tuple(self.node(n) for n in nodes)

    def node(self, node: Node) -> Node:
        if isinstance(node, Leaf):
            return node
        if isinstance(node, Group):
            children = self.seq(node.children)
            if all(a is b for a, b in zip(children, node.children)):
                return node
            return node.with_children(children)
        if isinstance(node, LabeledBlock):
            return self.site(node)
        if isinstance(node, EarlyExit):
            if node.value is None:
                return node
            return replace(node, value=self.seq(node.value))
        if isinstance(node, LoopFlow):
            return node
        if isinstance(node, Loop):
            head = self.seq(node.head)
            if node.label is None:
                return replace(node, head=head, body=self.node(node.body))
            self.labels.append(node.label.value)
            try:
                body = self.node(node.body)
            finally:
                self.labels.pop()
            return replace(node, head=head, body=body)
        if isinstance(node, Closure):
            with self.fresh_labels():
                return replace(node, head=self.seq(node.head), body=self.seq(node.body))
        if isinstance(node, ItemDecl):
            with self.fresh_labels():
                return replace(node, children=self.seq(node.children))
        if isinstance(node, Annotated):
            if node.is_ignore:
                return self.node(strip(node))
            return replace(node, inner=self.node(node.inner))
        raise TypeError("unknown node: " + type(node).__name__)

    # ── Sites ────────────────────────────────────────────────

    def site(self, block: LabeledBlock) -> Node:
        try:
            try:
                out = transform(block, self.options, self.symbols, tuple(self.labels))
            except RecursionError:
                raise MalformedInput(
                    "input nested too deeply", block.pos.line, block.pos.col
                ) from None
        except TransformError as e:
            if not self.collect:
                raise
            self.errors.append(e)
            return block
        # ignored regions keep the enclosing labels; items and closures drop them
        return self.node(out)


def expand_tree(
    tree: Group,
    options: Options = DEFAULT_OPTIONS,
    symbols: SymbolGenerator | None = None,
) -> Group:
    """Expand every site in tree, raising the first error."""
    return Expander(options, symbols).expand(tree)


def check_tree(
    tree: Group,
    options: Options = DEFAULT_OPTIONS,
    symbols: SymbolGenerator | None = None,
) -> list[TransformError]:
    """Expand every site in tree and return the errors (empty = ok)."""
    expander = Expander(options, symbols, collect=True)
    expander.expand(tree)
    return expander.errors
