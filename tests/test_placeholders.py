from __future__ import annotations

import pytest

from scratch_engine.buffer import ATTACHMENT_CHARACTER as UNIT, Buffer, TextRange
from scratch_engine.placeholders import (
    Placeholder,
    PlaceholderError,
    PlaceholderIndex,
    PlaceholderSyntax,
    ReplacementAction,
    ReplacementPolicy,
    UnrenderMode,
    UserAction,
    render_placeholders,
    unrender,
)

BOTH = (PlaceholderSyntax.CANONICAL, PlaceholderSyntax.LEGACY)


def make_index(source: str) -> PlaceholderIndex:
    rendered, _ = render_placeholders(source)
    return PlaceholderIndex(Buffer.from_text(rendered))


def labels(index: PlaceholderIndex) -> list[str]:
    return [placeholder.label for placeholder in index.placeholders]


def test_placeholder_is_one_unit() -> None:
    index = make_index("<#n#>+1")
    placeholder = index.placeholders.key_at(0)

    assert index.buffer.text == f"{UNIT}+1"
    assert placeholder is not None and placeholder.label == "n"
    assert index.placeholder_at(0) is placeholder
    assert index.placeholder_at(1) is None
    assert index.range_of(placeholder) == TextRange(0, 1)
    assert index.placeholder_at_range(TextRange(0, 1)) is placeholder
    assert index.placeholder_at_range(TextRange(0, 2)) is None


def test_misses_return_none() -> None:
    index = make_index("no placeholders here")

    assert not index.has_placeholders
    assert index.placeholder_at(-1) is None
    assert index.placeholder_at(500) is None
    assert index.nearest_from(0) is None
    assert index.first_in() is None
    assert index.all_in() == []
    assert index.range_of(Placeholder("ghost")) is None


def test_next_and_previous_wrap() -> None:
    index = make_index("<#a#> <#b#> <#c#>")
    a, b, c = index.placeholders.keys()

    assert index.next(a) == b
    assert index.next(c) == a
    assert index.next(c, loop=False) is None
    assert index.previous(b) == a
    assert index.previous(a) == c
    assert index.previous(a, loop=False) is None


def test_single_placeholder_has_no_neighbour() -> None:
    index = make_index("<#only#> text")
    only = index.placeholders.key_at(0)

    assert index.next(only) is None
    assert index.previous(only) is None
    assert index.next(Placeholder("ghost")) is None


def test_nearest_from_searches_forward_then_wraps() -> None:
    index = make_index("<#a#> <#b#> <#c#>")
    a, b, c = index.placeholders.keys()

    assert index.nearest_from(1) == b
    assert index.nearest_from(3) == c
    assert index.nearest_from(3, lookahead=1) == b
    assert index.nearest_from(5) == a
    assert index.nearest_from(5, loop=False) is None


def test_ranges_follow_buffer_edits() -> None:
    index = make_index("<#a#> <#b#>")
    a, b = index.placeholders.keys()

    index.buffer.insert_text("xx", location=0)

    assert index.range_of(a) == TextRange(2, 1)
    assert index.range_of(b) == TextRange(4, 1)
    assert index.all_in(TextRange(3, 2)) == [b]


def test_select_sets_buffer_selection() -> None:
    index = make_index("<#a#> <#b#>")
    a, b = index.placeholders.keys()

    assert index.select(b) == TextRange(2, 1)
    assert index.buffer.selection == TextRange(2, 1)
    assert b.is_selected and index.selected is b

    index.select(a)
    assert not b.is_selected and a.is_selected

    with pytest.raises(PlaceholderError) as raised:
        index.select(Placeholder("ghost"))
    assert raised.value.placeholder is not None


def test_delete_clears_selection_and_keeps_caret() -> None:
    index = make_index("<#a#> <#b#> <#c#>")
    _, b, _ = index.placeholders.keys()
    index.select(b)

    assert index.delete(b) == 2

    assert index.selected is None
    assert not b.is_selected
    assert index.buffer.text == f"{UNIT}  {UNIT}"
    assert index.buffer.selection == TextRange(2, 0)
    assert labels(index) == ["a", "c"]
    with pytest.raises(PlaceholderError):
        index.delete(b)


def test_stale_selection_dropped_after_external_edit() -> None:
    index = make_index("<#a#> rest")
    a = index.placeholders.key_at(0)
    index.select(a)

    index.buffer.delete_range(TextRange(0, 1))

    assert index.selected is None
    assert not a.is_selected


def test_sync_selection_follows_host_ranges() -> None:
    index = make_index("x <#a#>")
    a = index.placeholders.key_at(0)

    assert index.sync_selection(TextRange(2, 1)) is a
    assert index.sync_selection(TextRange(0, 3)) is None
    assert not a.is_selected


def test_materialize_writes_replacement_or_label() -> None:
    index = make_index("<#a#> <#b#>")
    a, b = index.placeholders.keys()
    b.replacement = "42"

    assert index.materialize(a) == TextRange(0, 1)
    index.materialize(b)

    assert index.buffer.text == "a 42"
    assert not index.has_placeholders


def test_insert_and_append_keep_location_order() -> None:
    index = make_index("ab")

    tail = index.append("tail")
    head = index.insert("head", 0)

    assert index.placeholders.keys() == [head, tail]
    assert index.buffer.text == f"{UNIT}ab{UNIT}"


def test_perform_follows_policy() -> None:
    index = make_index("<#a#> <#b#> <#c#>")
    a, b, c = index.placeholders.keys()

    assert index.perform(a, UserAction.DELETE) is ReplacementAction.DELETE
    assert index.perform(b, UserAction.ENTER) is ReplacementAction.INSERT

    keep = ReplacementPolicy(hook=lambda action, placeholder: ReplacementAction.NONE)
    assert index.perform(c, UserAction.DOUBLE_CLICK, keep) is ReplacementAction.NONE
    assert index.buffer.text == f" b {UNIT}"


def test_policy_hook_may_defer_to_rules() -> None:
    policy = ReplacementPolicy(
        hook=lambda action, placeholder: ReplacementAction.NONE
        if placeholder.label == "keep"
        else None
    )

    assert policy.resolve(UserAction.DELETE, Placeholder("keep")) is ReplacementAction.NONE
    assert policy.resolve(UserAction.DELETE, Placeholder("x")) is ReplacementAction.DELETE
    assert policy.resolve(UserAction.ENTER, Placeholder("x")) is ReplacementAction.INSERT


def test_render_counts_tokens() -> None:
    rendered, count = render_placeholders("a <#x#> b <#y#>")

    assert count == 2
    assert rendered.text == f"a {UNIT} b {UNIT}"
    assert [p.label for p, _ in rendered.enumerate_attachments()] == ["x", "y"]


@pytest.mark.parametrize("source", ["<#open", "close#>", "<#a\nb#>", "<@legacy@>"])
def test_unmatched_or_disabled_markup_stays_plain(source: str) -> None:
    rendered, count = render_placeholders(source)

    assert count == 0
    assert rendered.text == source


def test_legacy_syntax_is_opt_in() -> None:
    rendered, count = render_placeholders("<@a@> and <#b#>", BOTH)

    assert count == 2
    assert unrender(rendered) == "<#a#> and <#b#>"
    assert unrender(rendered, syntax=PlaceholderSyntax.LEGACY) == "<@a@> and <@b@>"


def test_unrender_modes() -> None:
    rendered, _ = render_placeholders("a <#x#> b")
    placeholder = next(p for p, _ in rendered.enumerate_attachments())
    placeholder.replacement = "42"

    assert unrender(rendered, mode=UnrenderMode.MARKUP) == "a <#x#> b"
    assert unrender(rendered, mode=UnrenderMode.CONTENT) == "a 42 b"
    assert unrender(rendered, mode=UnrenderMode.BLANK, blank_marker="_") == "a _ b"
    assert unrender(rendered, TextRange(2, 3), UnrenderMode.CONTENT) == "42 b"


def test_placeholders_compare_by_identity() -> None:
    first, second = Placeholder("x"), Placeholder("x")

    assert first != second
    assert len({first, second}) == 2
    assert first.markup() == "<#x#>"
