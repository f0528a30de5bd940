"""Rewriter — turns a labeled block into a result slot and a one-shot loop.

    block!('a: { ...; break 'a v; ...; tail })

becomes

    { let R; 'a: loop { R = { ...; { R = v; break 'a; }; ...; tail }; break 'a; } R }

The walk is a recursive descent that keeps the scope stack in step with the
tree: labeled blocks, native loops, and closures push an entry on the way
down and pop it on the way back up. Items and ignored nodes are copied as
they are. Untouched subtrees are shared with the input, not copied.
"""

from __future__ import annotations

from dataclasses import replace

from .ast import (
    DELIM_BRACE,
    DELIM_NONE,
    DELIM_PAREN,
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
    Pos,
    ends_statement,
    respace,
)
from .ignore import strip
from .options import DEFAULT_OPTIONS, Options
from .scope import ScopeEntry, ScopeTracker
from .symbols import SymbolGenerator, default_generator
from .tokens import TK_IDENT, TK_LIFETIME, TK_OP, synth
from .validate import check_flow, resolve_exit

_GEN = Pos(0, 0)


# ============================================================
# GENERATED CODE
# ============================================================


def _leaf(type_: str, value: str, space: str = " ") -> Leaf:
    return Leaf(_GEN, synth(type_, value, space))


def _op(value: str, space: str = "") -> Leaf:
    return _leaf(TK_OP, value, space)


def _braces(children: list[Node], space: str = " ") -> Group:
    return Group(_GEN, DELIM_BRACE, synth(TK_OP, "{", space), tuple(children), synth(TK_OP, "}"))


def _unit() -> Group:
    return Group(_GEN, DELIM_PAREN, synth(TK_OP, "("), (), synth(TK_OP, ")", ""))


def _is_tail(children: tuple[Node, ...], i: int) -> bool:
    """Whether children[i] is the whole tail expression of the block."""
    if i != len(children) - 1:
        return False
    return i == 0 or ends_statement(children[i - 1])


# ============================================================
# REWRITER
# ============================================================


class Rewriter:
    def __init__(
        self,
        options: Options = DEFAULT_OPTIONS,
        symbols: SymbolGenerator | None = None,
        outer_labels: tuple[str, ...] = (),
    ) -> None:
        self.options: Options = options
        self.symbols: SymbolGenerator = symbols if symbols is not None else default_generator()
        self.scope: ScopeTracker = ScopeTracker(self.symbols, outer_labels)

    def transform(self, block: LabeledBlock) -> Group:
        """Rewrite one labeled block, including any blocks nested in it."""
        with self.scope.block(block.name, block.pos) as entry:
            body = self.body(block.body, entry)
        return self.wrap(block, entry, body)

    # ── Block body ───────────────────────────────────────────

    def body(self, group: Group, entry: ScopeEntry) -> Group:
        children = group.children
        out: list[Node] = []
        for i, child in enumerate(children):
            if isinstance(child, EarlyExit) and _is_tail(children, i):
                out.append(self.tail_exit(child, entry))
            else:
                out.append(self.node(child))
        return group.with_children(tuple(out))

    def tail_exit(self, node: EarlyExit, entry: ScopeEntry) -> Node:
        """The block's own tail `break 'a v` is just `v`: falling off the end assigns it."""
        target = resolve_exit(node, self.scope, self.options)
        if target is not entry:
            return self.node(node)
        if node.value is None:
            return respace(_unit(), node.keyword.space)
        value = self.seq(node.value)
        value = (respace(value[0], node.keyword.space),) + value[1:]
        return Group(node.pos, DELIM_NONE, None, value, None)

    def wrap(self, block: LabeledBlock, entry: ScopeEntry, body: Group) -> Group:
        lead = block.path[0].space if block.path else block.macro.space
        slot = entry.result
        label = block.label.value
        loop_body = [
            _leaf(TK_IDENT, slot),
            _op("=", " "),
            body,
            _op(";"),
            _leaf(TK_IDENT, "break"),
            _leaf(TK_LIFETIME, label),
            _op(";"),
        ]
        return _braces(
            [
                _leaf(TK_IDENT, "let"),
                _leaf(TK_IDENT, slot),
                _op(";"),
                _leaf(TK_LIFETIME, label),
                _op(":"),
                _leaf(TK_IDENT, "loop"),
                _braces(loop_body),
                _leaf(TK_IDENT, slot),
            ],
            lead,
        )

    # ── Tree walk ────────────────────────────────────────────

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
            return self.transform(node)
        if isinstance(node, EarlyExit):
            target = resolve_exit(node, self.scope, self.options)
            if target is None:
                if node.value is None:
                    return node
                return replace(node, value=self.seq(node.value))
            return self.exit_to(node, target)
        if isinstance(node, LoopFlow):
            check_flow(node, self.scope)
            return node
        if isinstance(node, Loop):
            return self.loop(node)
        if isinstance(node, Closure):
            with self.scope.closure():
                body = self.seq(node.body)
            return replace(node, body=body)
        if isinstance(node, ItemDecl):
            return node
        if isinstance(node, Annotated):
            if node.is_ignore:
                return strip(node)
            return replace(node, inner=self.node(node.inner))
        raise TypeError("unknown node: " + type(node).__name__)

    def loop(self, node: Loop) -> Node:
        head = self.seq(node.head)
        label = node.label.value if node.label is not None else None
        if node.keyword is None and label is not None:
            with self.scope.labeled(label):
                body = self.node(node.body)
        else:
            with self.scope.loop(label):
                body = self.node(node.body)
        return replace(node, head=head, body=body)

    def exit_to(self, node: EarlyExit, entry: ScopeEntry) -> Group:
        """`break 'a v` -> `{ R = v; break 'a; }`."""
        if node.value is None:
            value: tuple[Node, ...] = (_unit(),)
        else:
            value = self.seq(node.value)
        label_space = node.label.space if node.label is not None else " "
        children: list[Node] = [_leaf(TK_IDENT, entry.result), _op("=", " ")]
        children.extend(value)
        children.extend(
            [
                _op(";"),
                _leaf(TK_IDENT, "break", label_space),
                _leaf(TK_LIFETIME, entry.label),
                _op(";"),
            ]
        )
        return _braces(children, node.keyword.space)


def transform(
    block: LabeledBlock,
    options: Options = DEFAULT_OPTIONS,
    symbols: SymbolGenerator | None = None,
    outer_labels: tuple[str, ...] = (),
) -> Group:
    """Transform one invocation. outer_labels names native loops around it."""
    return Rewriter(options, symbols, outer_labels).transform(block)
