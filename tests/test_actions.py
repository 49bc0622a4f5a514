from __future__ import annotations

from scratch_engine.actions import click, handle_key
from scratch_engine.buffer import ATTACHMENT_CHARACTER as UNIT, TextRange
from scratch_engine.config import EngineConfig
from scratch_engine.placeholders import ReplacementAction, ReplacementPolicy, UserAction
from scratch_engine.session import EditorSession


def make_session(text: str, policy: ReplacementPolicy | None = None) -> EditorSession:
    if policy is None:
        session = EditorSession(EngineConfig())
    else:
        session = EditorSession(EngineConfig(), policy=policy)
    session.load(text)
    return session


def selected_label(session: EditorSession) -> str | None:
    selected = session.placeholders.selected
    return selected.label if selected else None


def test_tab_cycles_through_placeholders() -> None:
    session = make_session("a <#x#> b <#y#>")

    first = handle_key(session, "tab")
    assert first.consumed and first.status == "placeholder_nearest"
    assert selected_label(session) == "x"
    assert session.buffer.selection == TextRange(2, 1)

    assert handle_key(session, "tab").status == "placeholder_next"
    assert selected_label(session) == "y"
    handle_key(session, "Tab")
    assert selected_label(session) == "x"

    back = handle_key(session, "shift+tab")
    assert back.status == "placeholder_previous"
    assert selected_label(session) == "y"


def test_tab_without_placeholders_passes_through() -> None:
    session = make_session("plain text")

    result = handle_key(session, "tab")

    assert not result.consumed
    assert result.status == "pass"


def test_tab_searches_from_start_of_current_section() -> None:
    session = make_session("<#a#>\n\nb <#c#> d")
    session.on_selection_changed(TextRange(7, 0))

    handle_key(session, "tab")

    assert selected_label(session) == "c"


def test_shift_tab_without_selection_picks_preceding() -> None:
    session = make_session("<#a#> <#b#> text")
    session.on_selection_changed(TextRange(5, 0))

    handle_key(session, "shift+tab")
    assert selected_label(session) == "b"

    session.deselect_placeholder()
    session.on_selection_changed(TextRange(0, 0))
    handle_key(session, "shift+tab")
    assert selected_label(session) == "b"


def test_enter_materializes_selected_placeholder() -> None:
    session = make_session("a <#x#> b")
    handle_key(session, "tab")

    result = handle_key(session, "enter")

    assert result.status == "placeholder_insert"
    assert result.message == "x"
    assert session.text == "a x b\n"
    assert session.placeholders.selected is None


def test_backspace_deletes_selected_placeholder() -> None:
    session = make_session("a <#x#> b <#y#>")
    handle_key(session, "tab")

    result = handle_key(session, "backspace")

    assert result.status == "placeholder_delete"
    assert session.text == f"a  b {UNIT}\n"
    assert session.buffer.selection == TextRange(2, 0)


def test_backspace_without_selection_passes_through() -> None:
    session = make_session("a <#x#>")

    assert not handle_key(session, "backspace").consumed
    assert not handle_key(session, "f5").consumed
    assert session.text == f"a {UNIT}\n"


def test_policy_can_keep_placeholder_on_enter() -> None:
    policy = ReplacementPolicy(
        rules={UserAction.DELETE: ReplacementAction.DELETE, UserAction.ENTER: ReplacementAction.NONE}
    )
    session = make_session("<#x#>", policy)
    handle_key(session, "tab")

    result = handle_key(session, "enter")

    assert result.status == "placeholder_none"
    assert session.text == f"{UNIT}\n"


def test_arrows_select_adjacent_placeholder() -> None:
    session = make_session("a <#x#> b")
    session.on_selection_changed(TextRange(2, 0))

    assert handle_key(session, "right").status == "placeholder_adjacent"
    assert selected_label(session) == "x"

    moved = handle_key(session, "right")
    assert not moved.consumed
    assert session.placeholders.selected is None

    session.on_selection_changed(TextRange(3, 0))
    assert handle_key(session, "left").consumed
    assert selected_label(session) == "x"


def test_left_at_buffer_start_passes() -> None:
    session = make_session("<#x#>")

    assert not handle_key(session, "left").consumed


def test_click_selects_then_double_click_materializes() -> None:
    session = make_session("a <#x#> b")

    assert click(session, 2).status == "placeholder_selected"
    assert selected_label(session) == "x"
    assert click(session, 2).consumed
    assert session.text == f"a {UNIT} b\n"

    result = click(session, 2, click_count=2)
    assert result.status == "placeholder_insert"
    assert session.text == "a x b\n"


def test_click_on_text_moves_caret_and_deselects() -> None:
    session = make_session("a <#x#> b")
    click(session, 2)

    result = click(session, 4)

    assert not result.consumed
    assert session.placeholders.selected is None
    assert session.buffer.selection == TextRange(4, 0)
