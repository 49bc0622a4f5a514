"""Outline entries and the heading tree built from sections."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterator, List, Optional, Sequence

from scratch_engine.buffer import TextRange

from .section import Section, SectionKind

ContentFormatter = Callable[[Section], str]


@dataclass(frozen=True, slots=True)
class OutlineEntry:
    """Sidebar row for one section."""

    content: str
    line_range: range
    selectable_range: TextRange


@dataclass(slots=True)
class OutlineNode:
    section: Section
    children: List["OutlineNode"] = field(default_factory=list)

    @property
    def is_heading(self) -> bool:
        return self.section.kind is SectionKind.HEADING

    @property
    def is_leaf(self) -> bool:
        return not self.children

    @property
    def preview(self) -> str:
        return self.section.preview

    def walk(self) -> Iterator["OutlineNode"]:
        yield self
        for child in self.children:
            yield from child.walk()


def build_entries(
    sections: Sequence[Section], formatter: Optional[ContentFormatter] = None
) -> List[OutlineEntry]:
    render = formatter or (lambda section: section.content)
    return [
        OutlineEntry(
            content=render(section),
            line_range=section.line_range,
            selectable_range=section.selectable_range,
        )
        for section in sections
    ]


def build_tree(sections: Sequence[Section]) -> List[OutlineNode]:
    """Nest sections under the closest preceding deeper-level heading.

    A heading closes every open heading of the same or a shallower level.
    """

    roots: List[OutlineNode] = []
    open_headings: List[OutlineNode] = []
    for section in sections:
        node = OutlineNode(section)
        if node.is_heading:
            while open_headings and open_headings[-1].section.level >= section.level:
                open_headings.pop()
        parent = open_headings[-1] if open_headings else None
        (parent.children if parent else roots).append(node)
        if node.is_heading:
            open_headings.append(node)
    return roots


__all__ = ["ContentFormatter", "OutlineEntry", "OutlineNode", "build_entries", "build_tree"]
