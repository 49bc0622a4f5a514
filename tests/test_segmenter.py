from __future__ import annotations

import pytest

from scratch_engine.buffer import TextRange
from scratch_engine.structure import (
    SectionKind,
    SectionSegmenter,
    covered_length,
    math_ranges,
    segment,
)


def test_blank_lines_split_sections() -> None:
    sections = segment("abc\n\ndef")

    assert [section.source_range for section in sections] == [TextRange(0, 3), TextRange(5, 3)]
    assert [section.content for section in sections] == ["abc", "def"]
    assert [section.index for section in sections] == [0, 1]
    assert sections[0].line_range == range(0, 1)
    assert sections[1].line_range == range(2, 3)


def test_single_trailing_break_is_trimmed() -> None:
    assert [section.content for section in segment("abc\n\ndef\n")] == ["abc", "def"]
    # Only one break is synthetic; the rest is an empty paragraph.
    sections = segment("abc\n\n\n")
    assert [section.content for section in sections] == ["abc", ""]
    assert sections[1].source_range == TextRange(5, 0)


def test_empty_text_yields_one_empty_section() -> None:
    sections = segment("")

    assert len(sections) == 1
    assert sections[0].source_range == TextRange(0, 0)
    assert sections[0].kind is SectionKind.EMPTY


def test_consecutive_separators_keep_empty_slots() -> None:
    sections = segment("a\n\n\n\nb")

    assert [section.content for section in sections] == ["a", "", "b"]
    assert sections[1].source_range == TextRange(3, 0)
    assert sections[2].source_range == TextRange(5, 1)


@pytest.mark.parametrize("text", ["", "abc", "a\n\nb\n\nc", "x\ny\n\n\n\nz", "# t\n\n- a\n- b\n"])
def test_sections_cover_the_text(text: str) -> None:
    sections = segment(text)
    body = text[:-1] if text.endswith("\n") else text

    assert covered_length(sections) == len(body)
    for section in sections:
        assert text[section.source_range.as_slice()] == section.content


def test_segmentation_is_idempotent() -> None:
    text = "# Title\n\nSome $x$ text\nacross lines\n\n1. first\n"

    assert segment(text) == segment(text)


def test_line_numbers_track_multiline_sections() -> None:
    sections = segment("one\ntwo\n\nthree\n\nfour\nfive\nsix")

    assert [section.line_range for section in sections] == [
        range(0, 2),
        range(3, 4),
        range(5, 8),
    ]


def test_custom_separator() -> None:
    segmenter = SectionSegmenter("\n---\n")

    sections = segmenter.segment("a\n---\nb")

    assert [section.content for section in sections] == ["a", "b"]
    assert sections[1].source_range == TextRange(6, 1)
    with pytest.raises(ValueError):
        SectionSegmenter("")


def test_sections_are_classified() -> None:
    sections = segment("## Results\n\n- item\n\n2. step\n\nplain words\n\n\n")

    assert [(section.kind, section.level) for section in sections] == [
        (SectionKind.HEADING, 2),
        (SectionKind.BULLET_LIST, 0),
        (SectionKind.ORDERED_LIST, 0),
        (SectionKind.TEXT, 0),
        (SectionKind.EMPTY, 0),
    ]
    assert sections[0].preview == "Results"
    assert sections[1].preview == "item"


def test_math_ranges_are_absolute() -> None:
    sections = segment("intro\n\nlet $x$ and $y^2$ be")

    assert sections[1].math_ranges == (TextRange(12, 1), TextRange(20, 3))


def test_math_ranges_ignore_escaped_and_unmatched_delimiters() -> None:
    assert math_ranges(r"costs \$5 and $a$") == [TextRange(15, 1)]
    assert math_ranges("open $ never closed") == []
