"""Tests for the label/scope tracker."""

import pytest

from named_block.scope import (
    KIND_BLOCK,
    KIND_CLOSURE,
    KIND_LABELED,
    KIND_LOOP,
    ScopeTracker,
)
from named_block.symbols import SymbolGenerator


def _tracker(*outer: str) -> ScopeTracker:
    return ScopeTracker(SymbolGenerator(), tuple(outer))


def test_enter_assigns_result_slot():
    scope = _tracker()
    entry = scope.enter("'a")
    assert entry.kind == KIND_BLOCK
    assert entry.is_active
    assert entry.result == "_named_block_a_1"


def test_resolve_label():
    scope = _tracker()
    a = scope.enter("'a")
    res = scope.resolve("'a")
    assert res.entry is a
    assert not res.crossed_closure
    assert scope.resolve("'b") is None


def test_innermost_label_wins():
    scope = _tracker()
    scope.enter("'a")
    inner = scope.enter("'a")
    assert scope.resolve("'a").entry is inner
    scope.exit()
    assert scope.resolve("'a").entry is not inner


def test_bare_exit_resolves_innermost_boundary():
    scope = _tracker()
    scope.enter("'a")
    loop = scope.enter_loop(None)
    assert scope.resolve(None).entry is loop
    scope.exit()
    closure = scope.enter_closure()
    assert scope.resolve(None).entry is closure
    assert closure.kind == KIND_CLOSURE


def test_bare_exit_skips_native_labeled_block():
    scope = _tracker()
    a = scope.enter("'a")
    labeled = scope.enter_labeled("'n")
    assert labeled.kind == KIND_LABELED
    assert scope.resolve(None).entry is a
    assert scope.resolve("'n").entry is labeled


def test_crossing_closure_is_reported():
    scope = _tracker()
    a = scope.enter("'a")
    with scope.closure():
        res = scope.resolve("'a")
        assert res.entry is a
        assert res.crossed_closure
        with scope.block("'b") as b:
            res = scope.resolve("'b")
            assert res.entry is b
            assert not res.crossed_closure


def test_outer_labels_seed_native_loops():
    scope = _tracker("'outer")
    assert not scope.in_block()
    res = scope.resolve("'outer")
    assert res.entry.kind == KIND_LOOP
    assert not res.entry.is_active


def test_context_manager_pops_on_error():
    scope = _tracker()
    with pytest.raises(KeyError):
        with scope.block("'a"):
            with scope.loop("'l"):
                raise KeyError("boom")
    assert scope.entries == []


def test_exit_underflow():
    scope = _tracker()
    with pytest.raises(RuntimeError):
        scope.exit()


def test_active_entries():
    scope = _tracker("'outer")
    scope.enter("'a")
    scope.enter_loop("'l")
    scope.enter("'b")
    assert scope.in_block()
    assert [e.label for e in scope.entries if e.is_active] == ["'a", "'b"]
