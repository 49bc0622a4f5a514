from __future__ import annotations

from scratch_engine.buffer import TextRange
from scratch_engine.structure import build_entries, build_tree, segment


def test_entries_mirror_sections() -> None:
    entries = build_entries(segment("abc\n\ndef"))

    assert [entry.content for entry in entries] == ["abc", "def"]
    assert entries[1].line_range == range(2, 3)
    assert entries[1].selectable_range == TextRange(5, 3)


def test_entries_use_formatter() -> None:
    entries = build_entries(segment("abc\n\ndef"), lambda section: section.content.upper())

    assert [entry.content for entry in entries] == ["ABC", "DEF"]


def test_tree_nests_under_headings() -> None:
    sections = segment("intro\n\n# A\n\ntext\n\n## B\n\nmore\n\n# C\n\nend")

    roots = build_tree(sections)

    assert [node.preview for node in roots] == ["intro", "A", "C"]
    heading_a = roots[1]
    assert [node.preview for node in heading_a.children] == ["text", "B"]
    assert [node.preview for node in heading_a.children[1].children] == ["more"]
    assert [node.preview for node in roots[2].children] == ["end"]
    assert roots[0].is_leaf and not roots[0].is_heading


def test_walk_visits_every_section_in_order() -> None:
    sections = segment("# A\n\ntext\n\n## B\n\nmore\n\n# C")

    visited = [node.section.index for root in build_tree(sections) for node in root.walk()]

    assert visited == [section.index for section in sections]
