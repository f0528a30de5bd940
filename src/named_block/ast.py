"""Node model — immutable token-tree nodes the rewriter operates over."""

from __future__ import annotations

from dataclasses import dataclass, replace

from .tokens import TK_OP, Token


# ============================================================
# POSITION
# ============================================================


@dataclass(frozen=True)
class Pos:
    """Source position, 1-indexed. Generated tokens sit at 0:0."""

    line: int
    col: int


def pos_of(tok: Token) -> Pos:
    return Pos(tok.line, tok.col)


# ============================================================
# NODES
# ============================================================

# Delimiter kinds. DELIM_NONE is a bare sequence without delimiter tokens.
DELIM_PAREN = "("
DELIM_BRACKET = "["
DELIM_BRACE = "{"
DELIM_NONE = ""

CLOSERS: dict[str, str] = {"(": ")", "[": "]", "{": "}"}


@dataclass(frozen=True)
class Node:
    """Base for all nodes."""

    pos: Pos


@dataclass(frozen=True)
class Leaf(Node):
    """A single token with no structural meaning to the rewriter."""

    token: Token


@dataclass(frozen=True)
class Group(Node):
    """Delimited sequence: ( ... ), [ ... ], { ... }, or a bare sequence."""

    delim: str
    open: Token | None
    children: tuple[Node, ...]
    close: Token | None

    def with_children(self, children: tuple[Node, ...]) -> Group:
        return replace(self, children=children)


@dataclass(frozen=True)
class LabeledBlock(Node):
    """block!('label: { body }) — one invocation site."""

    macro: Token
    bang: Token
    open: Token
    label: Token
    colon: Token
    body: Group
    close: Token
    path: tuple[Token, ...] = ()

    @property
    def name(self) -> str:
        return self.label.value


@dataclass(frozen=True)
class EarlyExit(Node):
    """break 'label value / break 'label / break value.

    value is None when the break carries no expression.
    """

    keyword: Token
    label: Token | None
    value: tuple[Node, ...] | None


@dataclass(frozen=True)
class LoopFlow(Node):
    """Bare `break`, or `continue` with or without a label."""

    kind: str
    keyword: Token
    label: Token | None


@dataclass(frozen=True)
class Loop(Node):
    """Native 'label: loop/while/for ... { body }.

    keyword is None for a native labeled block ('label: { body }), which binds
    its label but does not catch unlabeled break/continue.
    """

    label: Token | None
    colon: Token | None
    keyword: Token | None
    head: tuple[Node, ...]
    body: Group


@dataclass(frozen=True)
class Closure(Node):
    """move |params| -> T body. head holds everything before the body."""

    head: tuple[Node, ...]
    body: tuple[Node, ...]


@dataclass(frozen=True)
class ItemDecl(Node):
    """A nested declaration (fn, struct, impl, use, ...), kept opaque."""

    kind: str
    children: tuple[Node, ...]


@dataclass(frozen=True)
class Annotated(Node):
    """#[attr] followed by the node it is attached to."""

    hash: Token
    attr: Group
    inner: Node
    is_ignore: bool = False


# ============================================================
# TRAVERSAL HELPERS
# ============================================================


def tokens_of(node: Node) -> list[Token]:
    """All tokens of a node in source order."""
    out: list[Token] = []
    _collect_tokens(node, out)
    return out


def _collect_tokens(node: Node, out: list[Token]) -> None:
    if isinstance(node, Leaf):
        out.append(node.token)
    elif isinstance(node, Group):
        if node.open is not None:
            out.append(node.open)
        for child in node.children:
            _collect_tokens(child, out)
        if node.close is not None:
            out.append(node.close)
    elif isinstance(node, LabeledBlock):
        out.extend(node.path)
        out.extend([node.macro, node.bang, node.open, node.label, node.colon])
        _collect_tokens(node.body, out)
        out.append(node.close)
    elif isinstance(node, EarlyExit):
        out.append(node.keyword)
        if node.label is not None:
            out.append(node.label)
        if node.value is not None:
            for child in node.value:
                _collect_tokens(child, out)
    elif isinstance(node, LoopFlow):
        out.append(node.keyword)
        if node.label is not None:
            out.append(node.label)
    elif isinstance(node, Loop):
        if node.label is not None and node.colon is not None:
            out.extend([node.label, node.colon])
        if node.keyword is not None:
            out.append(node.keyword)
        for child in node.head:
            _collect_tokens(child, out)
        _collect_tokens(node.body, out)
    elif isinstance(node, Closure):
        for child in node.head:
            _collect_tokens(child, out)
        for child in node.body:
            _collect_tokens(child, out)
    elif isinstance(node, ItemDecl):
        for child in node.children:
            _collect_tokens(child, out)
    elif isinstance(node, Annotated):
        out.append(node.hash)
        _collect_tokens(node.attr, out)
        _collect_tokens(node.inner, out)
    else:
        raise TypeError("unknown node: " + type(node).__name__)


def _retoken(tok: Token, space: str) -> Token:
    return Token(tok.type, tok.value, tok.line, tok.col, space)


def respace(node: Node, space: str) -> Node:
    """Copy of node whose first token is preceded by `space` instead."""
    if isinstance(node, Leaf):
        return Leaf(node.pos, _retoken(node.token, space))
    if isinstance(node, Group):
        if node.open is not None:
            return replace(node, open=_retoken(node.open, space))
        if node.children:
            first = respace(node.children[0], space)
            return replace(node, children=(first,) + node.children[1:])
        if node.close is not None:
            return replace(node, close=_retoken(node.close, space))
        return node
    if isinstance(node, LabeledBlock):
        if node.path:
            return replace(node, path=(_retoken(node.path[0], space),) + node.path[1:])
        return replace(node, macro=_retoken(node.macro, space))
    if isinstance(node, (EarlyExit, LoopFlow)):
        return replace(node, keyword=_retoken(node.keyword, space))
    if isinstance(node, Loop):
        if node.label is not None:
            return replace(node, label=_retoken(node.label, space))
        if node.keyword is not None:
            return replace(node, keyword=_retoken(node.keyword, space))
        return replace(node, body=respace(node.body, space))
    if isinstance(node, Closure):
        return replace(node, head=(respace(node.head[0], space),) + node.head[1:])
    if isinstance(node, ItemDecl):
        return replace(node, children=(respace(node.children[0], space),) + node.children[1:])
    if isinstance(node, Annotated):
        return replace(node, hash=_retoken(node.hash, space))
    raise TypeError("unknown node: " + type(node).__name__)


def ends_statement(node: Node) -> bool:
    """True if a new statement may start right after node."""
    if isinstance(node, Leaf):
        return node.token.type == TK_OP and node.token.value == ";"
    if isinstance(node, Group):
        return node.delim == DELIM_BRACE
    if isinstance(node, (ItemDecl, Loop)):
        return True
    if isinstance(node, Annotated):
        return ends_statement(node.inner)
    return False
