"""Incremental highlighting: dirty-region bookkeeping and section tokens."""

from .dirty import DirtyRegionTracker, HighlightCallback, Tokenizer
from .tokens import HighlightToken, SectionHighlight, TokenKind, tokenize

__all__ = [
    "DirtyRegionTracker",
    "HighlightCallback",
    "Tokenizer",
    "HighlightToken",
    "SectionHighlight",
    "TokenKind",
    "tokenize",
]
