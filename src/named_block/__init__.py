"""named-block — labeled blocks with early exit, rewritten to loops — public API."""

from __future__ import annotations

from .ast import Group, LabeledBlock, Node
from .emit import to_source
from .errors import MalformedInput as MalformedInput, TransformError as TransformError
from .errors import ValidationError as ValidationError
from .expand import check_tree, expand_tree
from .options import DEFAULT_OPTIONS, Options as Options
from .parse import parse_tokens
from .rewrite import transform as _transform
from .symbols import SymbolGenerator, reserved_names
from .tokens import Token, TokenizeError as TokenizeError, tokenize


def _too_deep() -> MalformedInput:
    return MalformedInput("input nested too deeply", 1, 1)


def _front(source: str, options: Options) -> tuple[list[Token], Group]:
    tokens = tokenize(source)
    try:
        tree = parse_tokens(tokens, options)
    except RecursionError:
        raise _too_deep() from None
    return tokens, tree


def parse(source: str, options: Options | None = None) -> Group:
    """Parse source text into a node tree. Raises TokenizeError or MalformedInput."""
    _, tree = _front(source, options or DEFAULT_OPTIONS)
    return tree


def transform(
    block: LabeledBlock,
    options: Options | None = None,
    symbols: SymbolGenerator | None = None,
    outer_labels: tuple[str, ...] = (),
) -> Group:
    """Rewrite a single invocation into its loop form.

    outer_labels lists native loop labels in scope around the invocation;
    breaks to them pass through instead of failing as unresolved.
    """
    try:
        return _transform(block, options or DEFAULT_OPTIONS, symbols, outer_labels)
    except RecursionError:
        raise MalformedInput("input nested too deeply", block.pos.line, block.pos.col) from None


def expand_source(source: str, options: Options | None = None) -> str:
    """Expand every invocation in source. Raises the first error found."""
    options = options or DEFAULT_OPTIONS
    tokens, tree = _front(source, options)
    return emit(expand_tree(tree, options, SymbolGenerator(reserved_names(tokens))))


def check_source(source: str, options: Options | None = None) -> list[TransformError]:
    """Expand source and return one error per failing site (empty = ok).

    Errors that stop the whole file from parsing are raised, not returned.
    """
    options = options or DEFAULT_OPTIONS
    tokens, tree = _front(source, options)
    return check_tree(tree, options, SymbolGenerator(reserved_names(tokens)))


def emit(node: Node) -> str:
    """Render a node tree back to source text."""
    try:
        return to_source(node)
    except RecursionError:
        raise _too_deep() from None
