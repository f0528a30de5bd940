"""Tests for the item skipper."""

import pytest

from named_block.items import item_end, item_kind, skip_item
from named_block.parse import read_tree
from named_block.tokens import tokenize


def _nodes(source: str):
    return read_tree(tokenize(source)).children


@pytest.mark.parametrize(
    "source,kind",
    [
        ("fn f() {}", "fn"),
        ("pub fn f() {}", "fn"),
        ("pub(crate) struct S;", "struct"),
        ("unsafe impl Send for X {}", "impl"),
        ("unsafe fn f() {}", "fn"),
        ("async fn f() {}", "fn"),
        ("const fn f() {}", "fn"),
        ("const X: u8 = 1;", "const"),
        ("static mut X: u8 = 0;", "static"),
        ("extern crate foo;", "extern crate"),
        ('extern "C" fn f() {}', "fn"),
        ('extern "C" { fn g(); }', "extern"),
        ("macro_rules! m { () => {} }", "macro_rules"),
        ("union U { a: u8 }", "union"),
        ("use a::b;", "use"),
        ("mod m;", "mod"),
        ("trait T {}", "trait"),
        ("type A = B;", "type"),
        ("enum E { A }", "enum"),
    ],
)
def test_item_kind(source: str, kind: str):
    assert item_kind(_nodes(source), 0) == kind


@pytest.mark.parametrize(
    "source",
    [
        "let x = 1;",
        "const { 1 }",
        "unsafe { f() }",
        "union(1)",
        "fn(x)",
        "static || 1",
        "x",
    ],
)
def test_not_an_item(source: str):
    assert item_kind(_nodes(source), 0) is None


def test_item_kind_at_offset():
    nodes = _nodes("x; fn f() {}")
    assert item_kind(nodes, 0) is None
    assert item_kind(nodes, 2) == "fn"


def test_semicolon_items_skip_brace_groups():
    nodes = _nodes("use a::{b, c}; x")
    assert item_end(nodes, 0, "use") == 5


def test_const_with_block_initializer():
    nodes = _nodes("const X: T = { 1 }; y")
    assert item_end(nodes, 0, "const") == 7


def test_braced_item_ends_at_body():
    nodes = _nodes("struct S { a: u8 } x")
    assert item_end(nodes, 0, "struct") == 3


def test_tuple_struct_ends_at_semicolon():
    nodes = _nodes("struct P(u8, u8); x")
    assert skip_item(nodes, 0) == ("struct", 4)


def test_unterminated_item_is_not_skipped():
    assert skip_item(_nodes("fn f()"), 0) is None
