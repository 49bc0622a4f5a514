"""Textual host adapter; the demo app lives in :mod:`.app`."""

from .controller import TextualEditorAdapter, TextualUIHooks, diff_text

__all__ = ["TextualEditorAdapter", "TextualUIHooks", "diff_text"]
