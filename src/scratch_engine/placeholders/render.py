"""Conversion between placeholder markup and one-unit placeholder attachments."""

from __future__ import annotations

import re
from enum import Enum
from functools import lru_cache
from typing import Dict, Iterable, List, Optional, Tuple, Union

from scratch_engine.buffer import AttributedText, TextRange, TextStorage

from .model import Placeholder, PlaceholderSyntax


class UnrenderMode(str, Enum):
    MARKUP = "markup"
    CONTENT = "content"
    BLANK = "blank"


@lru_cache(maxsize=None)
def _compile(syntaxes: Tuple[PlaceholderSyntax, ...]) -> "re.Pattern[str]":
    return re.compile("|".join(f"(?:{syntax.pattern})" for syntax in syntaxes))


def render_placeholders(
    text: str,
    syntaxes: Iterable[PlaceholderSyntax] = (PlaceholderSyntax.CANONICAL,),
) -> Tuple[AttributedText, int]:
    """Replace every placeholder token in ``text`` by a placeholder unit.

    Returns the rendered fragment and the number of tokens replaced.
    """

    enabled = tuple(dict.fromkeys(syntaxes))
    if not enabled:
        return AttributedText(text), 0
    regex = _compile(enabled)
    pieces: List[str] = []
    attachments: Dict[int, object] = {}
    cursor = 0
    offset = 0
    for match in regex.finditer(text):
        before = text[cursor : match.start()]
        pieces.append(before)
        offset += len(before)
        label = next(group for group in match.groups() if group is not None)
        unit = AttributedText.attachment(Placeholder(label))
        pieces.append(unit.text)
        attachments[offset] = unit.attachments[0]
        offset += 1
        cursor = match.end()
    pieces.append(text[cursor:])
    return AttributedText("".join(pieces), attachments), len(attachments)


def _placeholder_text(
    placeholder: Placeholder,
    mode: UnrenderMode,
    syntax: PlaceholderSyntax,
    blank_marker: str,
) -> str:
    if mode is UnrenderMode.MARKUP:
        return placeholder.markup(syntax)
    if mode is UnrenderMode.CONTENT:
        return placeholder.text
    return blank_marker


def unrender(
    source: Union[TextStorage, AttributedText],
    text_range: Optional[TextRange] = None,
    mode: UnrenderMode = UnrenderMode.MARKUP,
    *,
    syntax: PlaceholderSyntax = PlaceholderSyntax.CANONICAL,
    blank_marker: str = " ",
) -> str:
    """Plain text of ``text_range`` with placeholder units expanded.

    ``markup`` restores the source token, ``content`` writes the replacement
    or label, ``blank`` writes ``blank_marker`` so lengths are preserved.
    """

    fragment = source.snapshot() if isinstance(source, TextStorage) else source
    if text_range is not None:
        fragment = fragment.slice(text_range)
    pieces: List[str] = []
    cursor = 0
    for attachment, unit in fragment.enumerate_attachments():
        if not isinstance(attachment, Placeholder):
            continue
        pieces.append(fragment.text[cursor : unit.location])
        pieces.append(_placeholder_text(attachment, mode, syntax, blank_marker))
        cursor = unit.upper_bound
    pieces.append(fragment.text[cursor:])
    return "".join(pieces)


__all__ = ["UnrenderMode", "render_placeholders", "unrender"]
