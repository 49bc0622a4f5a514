"""Tracks which sections still need a syntax highlighting pass.

Sections are cached by their key (source range plus content), so a section
stays clean across re-segmentations as long as its text and position are
unchanged, and turns dirty as soon as an edit touches either.
"""

from __future__ import annotations

from typing import AbstractSet, Callable, List, Optional, Sequence, Set

from scratch_engine.buffer import TextRange
from scratch_engine.runtime import telemetry
from scratch_engine.structure import RangeMap, Section, SectionKey

from .tokens import HighlightToken, SectionHighlight, tokenize

HighlightCallback = Callable[[List[SectionHighlight]], None]
Tokenizer = Callable[[Section], List[HighlightToken]]


class DirtyRegionTracker:
    def __init__(
        self,
        range_map: Optional[RangeMap] = None,
        on_apply: Optional[HighlightCallback] = None,
        tokenizer: Tokenizer = tokenize,
    ) -> None:
        self.range_map = range_map or RangeMap()
        self.on_apply = on_apply
        self.tokenizer = tokenizer
        self._cache: Set[SectionKey] = set()

    @property
    def cached(self) -> AbstractSet[SectionKey]:
        return frozenset(self._cache)

    def is_clean(self, section: Section) -> bool:
        return section.key in self._cache

    def dirty_sections(self) -> List[Section]:
        return [section for section in self.range_map.sections if section.key not in self._cache]

    def compute_dirty(
        self,
        edited_range: TextRange,
        visible_range: Optional[TextRange] = None,
        cached: Optional[AbstractSet[SectionKey]] = None,
    ) -> List[Section]:
        """Sections near ``edited_range`` (and visible, when scoped) minus the cache."""

        candidates = self.range_map.sections_near(edited_range)
        if visible_range is not None:
            visible = {section.key for section in self.range_map.sections_near(visible_range)}
            candidates = [section for section in candidates if section.key in visible]
        skip = self._cache if cached is None else cached
        return [section for section in candidates if section.key not in skip]

    def apply(self, sections: Sequence[Section]) -> List[Section]:
        """Tokenize ``sections``, hand the result to ``on_apply`` and mark them clean."""

        applied = list(sections)
        if not applied:
            return applied
        with telemetry.span("highlight::apply", metadata={"sections": len(applied)}) as span:
            highlights = [
                SectionHighlight(section, tuple(self.tokenizer(section))) for section in applied
            ]
            span.note("tokens", count=sum(len(item.tokens) for item in highlights))
            if self.on_apply is not None:
                self.on_apply(highlights)
            self._cache.update(section.key for section in applied)
        return applied

    def invalidate(self, edited_range: TextRange) -> List[Section]:
        touched = self.range_map.sections_near(edited_range)
        for section in touched:
            self._cache.discard(section.key)
        return touched

    def highlight_visible(
        self, visible_range: TextRange, ignore_cached: bool = False
    ) -> List[Section]:
        """Highlight visible sections not yet highlighted; returns what was processed.

        ``ignore_cached`` forces a full refresh of the visible sections.
        """

        visible = self.range_map.sections_near(visible_range)
        if not ignore_cached:
            visible = [section for section in visible if section.key not in self._cache]
        return self.apply(visible)

    def rebind(self, range_map: RangeMap) -> None:
        """Adopt a fresh segmentation, forgetting sections that no longer exist."""

        self.range_map = range_map
        self._cache &= {section.key for section in range_map.sections}

    def reset(self) -> None:
        self._cache.clear()


__all__ = ["DirtyRegionTracker", "HighlightCallback", "Tokenizer"]
