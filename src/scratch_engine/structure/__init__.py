"""Section segmentation, range mapping, and outline building."""

from .outline import OutlineEntry, OutlineNode, build_entries, build_tree
from .range_map import RangeMap, RangeMapper
from .section import Section, SectionKey, SectionKind, describe
from .segmenter import SYNTHETIC_BREAK, SectionSegmenter, covered_length, segment
from .tex import math_ranges

__all__ = [
    "OutlineEntry",
    "OutlineNode",
    "RangeMap",
    "RangeMapper",
    "SYNTHETIC_BREAK",
    "Section",
    "SectionKey",
    "SectionKind",
    "SectionSegmenter",
    "build_entries",
    "build_tree",
    "covered_length",
    "describe",
    "math_ranges",
    "segment",
]
