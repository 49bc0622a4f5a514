from __future__ import annotations

import pytest

from scratch_engine.containers import OrderedMap


def make_map() -> OrderedMap[str, int]:
    return OrderedMap([("c", 3), ("a", 1), ("b", 2)])


def test_iteration_follows_insertion_order() -> None:
    ordered = make_map()

    assert list(ordered) == ["c", "a", "b"]
    assert ordered.values() == [3, 1, 2]
    assert ordered.items()[0] == ("c", 3)


def test_overwrite_keeps_position() -> None:
    ordered = make_map()

    ordered["a"] = 10

    assert ordered.keys() == ["c", "a", "b"]
    assert ordered["a"] == 10
    assert ordered.index_of("a") == 1


def test_positional_access_and_misses() -> None:
    ordered = make_map()

    assert ordered.key_at(2) == "b"
    assert ordered.value_at(0) == 3
    assert ordered.entry_at(5) is None
    assert ordered.key_at(-1) is None
    assert ordered.first() == ("c", 3)
    assert ordered.last() == ("b", 2)
    assert ordered.get("missing") is None
    assert ordered.get("missing", 0) == 0


def test_removal_reindexes_later_entries() -> None:
    ordered = make_map()

    assert ordered.remove("c") == 3
    assert ordered.remove("c") is None
    assert ordered.index_of("a") == 0
    assert ordered.index_of("b") == 1
    del ordered["a"]
    assert ordered.keys() == ["b"]


def test_pop_raises_without_default() -> None:
    ordered = make_map()

    assert ordered.pop("missing", None) is None
    with pytest.raises(KeyError):
        ordered.pop("missing")


def test_replace_at_rekeys_in_place() -> None:
    ordered = make_map()

    ordered.replace_at(1, "z", 26)

    assert ordered.keys() == ["c", "z", "b"]
    assert "a" not in ordered
    assert ordered.index_of("z") == 1
    with pytest.raises(KeyError):
        ordered.replace_at(0, "b", 0)
    with pytest.raises(IndexError):
        ordered.replace_at(3, "q", 0)


def test_equality_is_order_sensitive() -> None:
    assert make_map() == OrderedMap([("c", 3), ("a", 1), ("b", 2)])
    assert make_map() != OrderedMap([("a", 1), ("b", 2), ("c", 3)])
