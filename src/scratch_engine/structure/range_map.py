"""Mapping between source ranges and rendered section indices."""

from __future__ import annotations

from typing import List, Optional, Sequence, Union

from scratch_engine.buffer import TextRange
from scratch_engine.containers import OrderedMap
from scratch_engine.runtime import telemetry

from .section import Section


class RangeMap:
    """Ordered ``source range -> rendered index`` table for one segmentation."""

    def __init__(self, sections: Sequence[Section] = ()) -> None:
        self._sections: List[Section] = list(sections)
        self.entries: OrderedMap[TextRange, int] = OrderedMap(
            (section.source_range, section.index) for section in self._sections
        )

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def sections(self) -> List[Section]:
        return list(self._sections)

    @property
    def ranges(self) -> List[TextRange]:
        return self.entries.keys()

    def section_at(self, index: int) -> Optional[Section]:
        if 0 <= index < len(self._sections):
            return self._sections[index]
        return None

    def index_for_location(self, location: int) -> Optional[int]:
        """Section holding ``location``, a location in the gap maps to the section before it."""

        for source_range, index in self.entries.items():
            if source_range.location <= location <= source_range.upper_bound:
                return index
            if location > source_range.upper_bound:
                continue
            return index - 1 if index > 0 else None
        return None

    def index_for_range(self, text_range: Union[TextRange, int]) -> Optional[int]:
        location = text_range if isinstance(text_range, int) else text_range.location
        return self.index_for_location(location)

    def range_for_index(self, index: int) -> Optional[TextRange]:
        return self.entries.key_at(index)

    def section_for_location(self, location: int) -> Optional[Section]:
        index = self.index_for_location(location)
        return None if index is None else self.section_at(index)

    def sections_near(self, text_range: TextRange) -> List[Section]:
        """Sections whose source range intersects or touches ``text_range``."""

        return [
            section
            for section in self._sections
            if section.source_range.intersects(text_range)
        ]


class RangeMapper:
    def rebuild(self, sections: Sequence[Section]) -> RangeMap:
        with telemetry.span("structure::range_map", metadata={"sections": len(sections)}):
            return RangeMap(sections)


__all__ = ["RangeMap", "RangeMapper"]
