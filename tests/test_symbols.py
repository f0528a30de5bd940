"""Tests for the symbol generator."""

import threading

from named_block.symbols import SymbolGenerator, default_generator, reserved_names
from named_block.tokens import tokenize


def test_names_count_up():
    gen = SymbolGenerator()
    assert gen.fresh("'a") == "_named_block_a_1"
    assert gen.fresh("'a") == "_named_block_a_2"
    assert gen.fresh("'outer") == "_named_block_outer_3"


def test_reserved_names_are_skipped():
    gen = SymbolGenerator({"_named_block_a_1", "_named_block_a_2"})
    assert gen.fresh("'a") == "_named_block_a_3"


def test_reserve_later():
    gen = SymbolGenerator()
    gen.reserve({"_named_block_x_1"})
    assert gen.fresh("'x") == "_named_block_x_2"


def test_hint_is_sanitized():
    gen = SymbolGenerator()
    assert gen.fresh("r#loop") == "_named_block_loop_1"
    assert gen.fresh("") == "_named_block_ret_2"


def test_reserved_names_from_source():
    names = reserved_names(tokenize("let x = y + 'a'; 'l: loop {}"))
    assert names == {"let", "x", "y", "loop"}


def test_default_generator_is_shared():
    assert default_generator() is default_generator()


def test_unique_across_threads():
    gen = SymbolGenerator()
    results: list[list[str]] = [[] for _ in range(8)]

    def work(out: list[str]) -> None:
        for _ in range(200):
            out.append(gen.fresh("'t"))

    threads = [threading.Thread(target=work, args=(r,)) for r in results]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    names = [n for r in results for n in r]
    assert len(names) == 1600
    assert len(set(names)) == 1600
