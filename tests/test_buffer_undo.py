from __future__ import annotations

from typing import List

import pytest

from scratch_engine.buffer import (
    ATTACHMENT_CHARACTER as UNIT,
    AttributedText,
    Buffer,
    BufferValidationError,
    EditDelta,
    TextRange,
    TextStorage,
)


def make_buffer(text: str = "") -> Buffer:
    return Buffer.from_text(text, name="test")


def type_text(buffer: Buffer, text: str) -> None:
    for char in text:
        buffer.insert_text(char)


def test_typing_coalesces_into_one_undo_step() -> None:
    buffer = make_buffer()

    type_text(buffer, "abc")

    assert buffer.text == "abc"
    assert len(buffer.log) == 1
    buffer.undo()
    assert buffer.text == ""
    assert buffer.selection == TextRange(0, 0)


def test_break_coalescing_starts_a_new_step() -> None:
    buffer = make_buffer()

    type_text(buffer, "ab")
    buffer.break_coalescing()
    type_text(buffer, "cd")

    assert len(buffer.log) == 2
    buffer.undo()
    assert buffer.text == "ab"


def test_backspacing_coalesces() -> None:
    buffer = make_buffer("abc")

    buffer.delete_range(TextRange(2, 1))
    buffer.delete_range(TextRange(1, 1))

    assert buffer.text == "a"
    assert len(buffer.log) == 1
    buffer.undo()
    assert buffer.text == "abc"


def test_grouped_edits_undo_together() -> None:
    buffer = make_buffer("abc")

    with buffer.grouped("wrap"):
        buffer.replace_range(TextRange(0, 0), "(", label="wrap")
        with buffer.grouped("inner"):
            buffer.replace_range(TextRange(4, 0), ")", label="wrap")

    assert buffer.text == "(abc)"
    assert len(buffer.log) == 1
    buffer.undo()
    assert buffer.text == "abc"
    buffer.redo()
    assert buffer.text == "(abc)"


def test_new_edit_discards_redo() -> None:
    buffer = make_buffer("abc")
    buffer.replace_range(TextRange(0, 1), "x")
    buffer.undo()

    buffer.replace_range(TextRange(0, 1), "y")

    assert not buffer.log.can_redo()
    assert buffer.redo() is None
    assert buffer.text == "ybc"


def test_undo_restores_attachment_identity() -> None:
    marker = object()
    buffer = make_buffer(AttributedText.attachment(marker) + "tail")

    buffer.delete_range(TextRange(0, 2))
    assert buffer.storage.attachment_at(0) is None

    buffer.undo()
    assert buffer.text == f"{UNIT}tail"
    assert buffer.storage.attachment_at(0) is marker


def test_listeners_see_every_delta() -> None:
    buffer = make_buffer("abc")
    seen: List[EditDelta] = []
    buffer.add_listener(seen.append)

    buffer.replace_range(TextRange(1, 1), "XY")
    buffer.undo()
    buffer.remove_listener(seen.append)
    buffer.redo()

    assert [(delta.location, delta.removed_length, delta.inserted_text) for delta in seen] == [
        (1, 1, "XY"),
        (1, 2, "b"),
    ]


def test_out_of_bounds_edits_are_rejected() -> None:
    buffer = make_buffer("abc")

    with pytest.raises(BufferValidationError) as raised:
        buffer.replace_range(TextRange(2, 5), "x")
    assert raised.value.text_range == TextRange(2, 5)
    with pytest.raises(BufferValidationError):
        buffer.set_caret(4)
    with pytest.raises(BufferValidationError):
        buffer.insert_text("x", location=-1)
    assert buffer.version == 0


def test_storage_shifts_attachments() -> None:
    storage = TextStorage(f"ab{UNIT}cd", {2: "unit"})

    storage.replace(TextRange(0, 1), "xyz")
    assert storage.attachment_at(4) == "unit"

    storage.replace(TextRange(3, 2), "")
    assert not storage.contains_attachments()
    assert storage.version == 2


def test_attributed_text_validates_offsets() -> None:
    with pytest.raises(ValueError):
        AttributedText("ab", {0: object()})
    with pytest.raises(ValueError):
        AttributedText(UNIT, {3: object()})

    joined = "x" + AttributedText.attachment("a") + AttributedText.attachment("b")
    assert dict(joined.attachments) == {1: "a", 2: "b"}
    assert joined.slice(TextRange(2, 1)).attachments[0] == "b"


def test_edit_delta_ranges() -> None:
    delta = EditDelta.from_range(TextRange(2, 3), "hello")

    assert delta.replaced_range == TextRange(2, 3)
    assert delta.edited_range == TextRange(2, 5)
    assert delta.change_in_length == 2
    assert delta.replacement().text == "hello"


def test_mirror_snapshots_state() -> None:
    buffer = make_buffer("abc")
    buffer.set_selection(TextRange(1, 2))

    mirror = buffer.mirror(attributes={"mode": "edit"})

    assert mirror.text == "abc"
    assert mirror.selection == TextRange(1, 2)
    assert mirror.attributes == {"mode": "edit"}
