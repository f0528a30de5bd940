"""Parser — builds the node tree from tokens.

Two stages. `read_tree` matches delimiters into raw Leaf/Group trees with an
explicit stack. `Parser` then walks each raw sequence and recognizes the
constructs the rewriter cares about: block invocations, break/continue,
native loops, closures, items, and attributes. Everything else stays a Leaf.
"""

from __future__ import annotations

from .ast import (
    CLOSERS,
    DELIM_BRACE,
    DELIM_NONE,
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
    pos_of,
)
from .errors import MalformedInput
from .ignore import is_ignore_marker
from .items import skip_item
from .options import DEFAULT_OPTIONS, Options
from .tokens import (
    TK_EOF,
    TK_IDENT,
    TK_LIFETIME,
    TK_OP,
    Token,
)

LOOP_KEYWORDS: set[str] = {"loop", "while", "for"}

# Words after which `|` opens a closure rather than a bitwise or.
OPERAND_KEYWORDS: set[str] = {"return", "move", "in", "yield", "else", "match"}

# `|`/`||` after one of these is a binary operator.
_POSTFIX_OPS: set[str] = {"?"}


# ============================================================
# DELIMITER MATCHING
# ============================================================


def read_tree(tokens: list[Token]) -> Group:
    """Match delimiters. The root is a bare Group closed by the EOF token."""
    stack: list[tuple[Token | None, list[Node]]] = [(None, [])]
    for tok in tokens:
        if tok.type == TK_EOF:
            open_tok, children = stack[-1]
            if open_tok is not None:
                raise MalformedInput(
                    "unclosed '" + open_tok.value + "'", open_tok.line, open_tok.col
                )
            return Group(Pos(1, 1), DELIM_NONE, None, tuple(children), tok)
        if tok.type == TK_OP and tok.value in CLOSERS:
            stack.append((tok, []))
        elif tok.type == TK_OP and tok.value in (")", "]", "}"):
            open_tok, children = stack[-1]
            if open_tok is None:
                raise MalformedInput("unmatched '" + tok.value + "'", tok.line, tok.col)
            if CLOSERS[open_tok.value] != tok.value:
                raise MalformedInput(
                    "mismatched '"
                    + tok.value
                    + "', expected '"
                    + CLOSERS[open_tok.value]
                    + "'",
                    tok.line,
                    tok.col,
                )
            stack.pop()
            group = Group(pos_of(open_tok), open_tok.value, open_tok, tuple(children), tok)
            stack[-1][1].append(group)
        else:
            stack[-1][1].append(Leaf(pos_of(tok), tok))
    raise MalformedInput("token stream has no EOF", 0, 0)


# ============================================================
# HELPERS
# ============================================================


def _leaf(nodes: tuple[Node, ...], i: int) -> Token | None:
    if 0 <= i < len(nodes) and isinstance(nodes[i], Leaf):
        return nodes[i].token
    return None


def _is_op(nodes: tuple[Node, ...], i: int, value: str) -> bool:
    tok = _leaf(nodes, i)
    return tok is not None and tok.type == TK_OP and tok.value == value


def _is_word(nodes: tuple[Node, ...], i: int, value: str) -> bool:
    tok = _leaf(nodes, i)
    return tok is not None and tok.type == TK_IDENT and tok.value == value


def _is_brace(nodes: tuple[Node, ...], i: int) -> bool:
    return 0 <= i < len(nodes) and isinstance(nodes[i], Group) and nodes[i].delim == DELIM_BRACE


_ANGLE_DEPTH: dict[str, int] = {"<": 1, "<<": 2, ">": -1, ">>": -2, ">=": -1, ">>=": -2}


def _skip_angles(nodes: tuple[Node, ...], i: int) -> int:
    """Index just past the balanced `<...>` that opens at nodes[i]."""
    depth = 0
    while i < len(nodes):
        tok = _leaf(nodes, i)
        if tok is not None and tok.type == TK_OP:
            depth += _ANGLE_DEPTH.get(tok.value, 0)
        i += 1
        if depth <= 0:
            return i
    return i


def _find_terminator(nodes: tuple[Node, ...], i: int) -> int:
    """Index of the next top-level `;` or `,` at or after i, else len(nodes).

    Commas inside a turbofish (`f::<A, B>`) do not count.
    """
    while i < len(nodes):
        if _is_op(nodes, i, ";") or _is_op(nodes, i, ","):
            return i
        if _is_op(nodes, i, "::") and (_is_op(nodes, i + 1, "<") or _is_op(nodes, i + 1, "<<")):
            i = _skip_angles(nodes, i + 1)
            continue
        i += 1
    return len(nodes)


def _initializer_start(nodes: tuple[Node, ...]) -> int | None:
    """Index just past the `=` of a const/static item, skipping `=` inside `<...>`."""
    depth = 0
    for k in range(len(nodes)):
        tok = _leaf(nodes, k)
        if tok is None or tok.type != TK_OP:
            continue
        if tok.value == "=" and depth <= 0:
            return k + 1
        depth += _ANGLE_DEPTH.get(tok.value, 0)
    return None


def _expects_operand(prev: Node | None) -> bool:
    """Whether the node before a `|` leaves us in operand position."""
    if prev is None:
        return True
    if isinstance(prev, Leaf):
        tok = prev.token
        if tok.type == TK_OP:
            return tok.value not in _POSTFIX_OPS
        if tok.type == TK_IDENT:
            return tok.value in OPERAND_KEYWORDS
    return False


# ============================================================
# PARSER
# ============================================================


class Parser:
    """Classifies raw token trees into rewriter nodes."""

    def __init__(self, options: Options = DEFAULT_OPTIONS):
        self.options: Options = options

    def parse_tree(self, root: Group) -> Group:
        return self.group(root)

    def group(self, raw: Group) -> Group:
        items_ok = raw.delim in (DELIM_BRACE, DELIM_NONE)
        return raw.with_children(self.sequence(raw.children, items_ok))

    def sequence(self, nodes: tuple[Node, ...], items_ok: bool) -> tuple[Node, ...]:
        out: list[Node] = []
        stmt_start = True
        i = 0
        while i < len(nodes):
            prev = out[-1] if out else None
            node, i = self.element(nodes, i, stmt_start and items_ok, prev, out)
            out.append(node)
            stmt_start = ends_statement(node)
        return tuple(out)

    def element(
        self,
        nodes: tuple[Node, ...],
        i: int,
        item_position: bool,
        prev: Node | None,
        out: list[Node],
    ) -> tuple[Node, int]:
        """Parse one element at nodes[i]. Returns (node, next index)."""
        raw = nodes[i]
        if item_position:
            hit = skip_item(nodes, i)
            if hit is not None:
                kind, end = hit
                return ItemDecl(raw.pos, kind, self.item(kind, nodes[i:end])), end

        if isinstance(raw, Group):
            return self.group(raw), i + 1

        tok = raw.token
        if tok.type == TK_OP and tok.value == "#":
            attr = nodes[i + 1] if i + 1 < len(nodes) else None
            if isinstance(attr, Group) and attr.delim == "[":
                if i + 2 >= len(nodes):
                    raise MalformedInput("attribute is not attached to anything", tok.line, tok.col)
                inner, end = self.element(nodes, i + 2, item_position, prev, out)
                ignore = is_ignore_marker(attr, self.options.macro_name)
                return Annotated(raw.pos, tok, self.group(attr), inner, ignore), end

        if tok.type == TK_LIFETIME and _is_op(nodes, i + 1, ":"):
            word = _leaf(nodes, i + 2)
            if word is not None and word.type == TK_IDENT and word.value in LOOP_KEYWORDS:
                found = self.loop(nodes, i + 2, tok, _leaf(nodes, i + 1))
                if found is not None:
                    return found
            if _is_brace(nodes, i + 2):
                body = self.group(nodes[i + 2])
                return Loop(raw.pos, tok, _leaf(nodes, i + 1), None, (), body), i + 3

        if tok.type == TK_IDENT:
            if tok.value in LOOP_KEYWORDS:
                found = self.loop(nodes, i, None, None)
                if found is not None:
                    return found
            if tok.value == self.options.macro_name and _is_op(nodes, i + 1, "!"):
                return self.invocation(nodes, i, out)
            if tok.value == "break":
                return self.break_(nodes, i)
            if tok.value == "continue":
                label = _leaf(nodes, i + 1)
                if label is not None and label.type == TK_LIFETIME:
                    return LoopFlow(raw.pos, "continue", tok, label), i + 2
                return LoopFlow(raw.pos, "continue", tok, None), i + 1
            # `async` only ever starts an operand
            if tok.value == "async" or (tok.value == "move" and _expects_operand(prev)):
                found = self.closure(nodes, i)
                if found is not None:
                    return found

        if tok.type == TK_OP and tok.value in ("|", "||") and _expects_operand(prev):
            found = self.closure(nodes, i)
            if found is not None:
                return found

        return raw, i + 1

    def passive(self, raw: Node) -> Node:
        """Classify inside groups only; top-level tokens stay leaves."""
        if isinstance(raw, Group):
            return self.group(raw)
        return raw

    def item(self, kind: str, nodes: tuple[Node, ...]) -> tuple[Node, ...]:
        """An item's children. A const/static initializer is an expression."""
        if kind in ("const", "static"):
            k = _initializer_start(nodes)
            if k is not None:
                head = tuple(self.passive(n) for n in nodes[:k])
                return head + self.sequence(nodes[k:], False)
        return tuple(self.passive(n) for n in nodes)

    # ── Constructs ───────────────────────────────────────────

    def invocation(self, nodes: tuple[Node, ...], i: int, out: list[Node]) -> tuple[Node, int]:
        macro = nodes[i].token
        bang = nodes[i + 1].token
        args = nodes[i + 2] if i + 2 < len(nodes) else None
        if not isinstance(args, Group):
            raise MalformedInput(
                "expected arguments after " + macro.value + "!", bang.line, bang.col
            )
        inner = args.children
        if not (
            len(inner) == 3
            and _leaf(inner, 0) is not None
            and _leaf(inner, 0).type == TK_LIFETIME
            and _is_op(inner, 1, ":")
            and _is_brace(inner, 2)
        ):
            raise MalformedInput(
                "expected 'label: { ... } in " + macro.value + "! invocation",
                args.pos.line,
                args.pos.col,
            )
        path = self._absorb_path(out)
        body = self.group(inner[2])
        pos = pos_of(path[0]) if path else nodes[i].pos
        block = LabeledBlock(
            pos,
            macro,
            bang,
            args.open,
            inner[0].token,
            inner[1].token,
            body,
            args.close,
            path,
        )
        return block, i + 3

    def _absorb_path(self, out: list[Node]) -> tuple[Token, ...]:
        """Pull a `crate::` style path prefix already emitted into the invocation."""
        taken: list[Token] = []
        while out and isinstance(out[-1], Leaf) and out[-1].token.is_op("::"):
            taken.insert(0, out.pop().token)
            if out and isinstance(out[-1], Leaf) and out[-1].token.type == TK_IDENT:
                taken.insert(0, out.pop().token)
            else:
                break
        return tuple(taken)

    def break_(self, nodes: tuple[Node, ...], i: int) -> tuple[Node, int]:
        keyword = nodes[i].token
        pos = nodes[i].pos
        j = i + 1
        label: Token | None = None
        tok = _leaf(nodes, j)
        if tok is not None and tok.type == TK_LIFETIME:
            label = tok
            j += 1
        end = _find_terminator(nodes, j)
        if end > j:
            value = self.sequence(nodes[j:end], False)
            return EarlyExit(pos, keyword, label, value), end
        if label is not None:
            return EarlyExit(pos, keyword, label, None), j
        return LoopFlow(pos, "break", keyword, None), j

    def loop(
        self,
        nodes: tuple[Node, ...],
        i: int,
        label: Token | None,
        colon: Token | None,
    ) -> tuple[Node, int] | None:
        keyword = nodes[i].token
        if keyword.value == "for" and _is_op(nodes, i + 1, "<"):
            return None
        j = i + 1
        while j < len(nodes) and not _is_brace(nodes, j):
            if _is_op(nodes, j, ";"):
                return None
            j += 1
        if j >= len(nodes):
            return None
        if keyword.value == "loop" and j != i + 1:
            return None
        head = self.sequence(nodes[i + 1 : j], False)
        body = self.group(nodes[j])
        start = label if label is not None else keyword
        return Loop(pos_of(start), label, colon, keyword, head, body), j + 1

    def closure(self, nodes: tuple[Node, ...], i: int) -> tuple[Node, int] | None:
        j = i
        while _is_word(nodes, j, "async") or _is_word(nodes, j, "move"):
            j += 1
        if _is_word(nodes, i, "async") and _is_brace(nodes, j):
            # async block: no parameters, same exit boundary as a closure
            head = tuple(nodes[i:j])
            return Closure(nodes[i].pos, head, (self.group(nodes[j]),)), j + 1
        if _is_op(nodes, j, "||"):
            j += 1
        elif _is_op(nodes, j, "|"):
            j += 1
            while j < len(nodes) and not _is_op(nodes, j, "|"):
                j += 1
            if j >= len(nodes):
                return None
            j += 1
        else:
            return None
        if _is_op(nodes, j, "->"):
            while j < len(nodes) and not _is_brace(nodes, j):
                j += 1
            if j >= len(nodes):
                return None
            end = j + 1
        else:
            end = _find_terminator(nodes, j)
            if end == j:
                return None
            # `| A | B => ..` is a match arm, not a closure
            if any(_is_op(nodes, k, "=>") for k in range(j, end)):
                return None
        head = tuple(self.passive(n) for n in nodes[i:j])
        body = self.sequence(nodes[j:end], False)
        return Closure(nodes[i].pos, head, body), end


def parse_tokens(tokens: list[Token], options: Options = DEFAULT_OPTIONS) -> Group:
    return Parser(options).parse_tree(read_tree(tokens))


