"""Syntax tokens produced by a highlight pass.

Patterns run in three scopes over a section: the whole block (headings),
the block with its TeX spans blanked out (markdown emphasis), and the TeX
spans alone (commands, operators, brackets, environment names).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Pattern, Sequence, Tuple

from scratch_engine.buffer import TextRange
from scratch_engine.structure import Section


class TokenKind(str, Enum):
    HEADING = "heading"
    BOLD = "bold"
    ITALIC = "italic"
    UNDERLINE = "underline"
    STRIKETHROUGH = "strikethrough"
    TEX_COMMAND = "tex_command"
    TEX_OPERATOR = "tex_operator"
    TEX_BRACKET = "tex_bracket"
    TEX_ENVIRONMENT = "tex_environment"


@dataclass(frozen=True, slots=True)
class HighlightToken:
    text_range: TextRange
    kind: TokenKind


@dataclass(frozen=True, slots=True)
class SectionHighlight:
    """Tokens computed for one section during a highlight pass."""

    section: Section
    tokens: Tuple[HighlightToken, ...] = ()

    def of_kind(self, kind: TokenKind) -> List[HighlightToken]:
        return [token for token in self.tokens if token.kind == kind]


# (kind, pattern, groups to emit)
TokenPattern = Tuple[TokenKind, Pattern[str], Tuple[int, ...]]

FULL_PATTERNS: Tuple[TokenPattern, ...] = (
    (TokenKind.HEADING, re.compile(r"^[\t ]*(#{1,6})[\t ]+(.+?)$", re.MULTILINE), (0,)),
)

TEXT_PATTERNS: Tuple[TokenPattern, ...] = (
    (TokenKind.BOLD, re.compile(r"([*_]){2}.*?\1{2}(?!\1)"), (0,)),
    (
        TokenKind.ITALIC,
        re.compile(
            r"(?:(?<!\*)\*(?![\s*])(?:[^*]*[^\s*])?\*)|(?:(?<!_)_(?![\s_])(?:[^_]*[^\s_])?_)"
        ),
        (0,),
    ),
    (TokenKind.UNDERLINE, re.compile(r"<u>.*?</u>"), (0,)),
    (TokenKind.STRIKETHROUGH, re.compile(r"(?<!~)(~~?)(?![\s~])(?:[^~]*[^\s~])?\1"), (0,)),
)

MATH_PATTERNS: Tuple[TokenPattern, ...] = (
    (TokenKind.TEX_COMMAND, re.compile(r"\\(?:[a-zA-Z]+|[\\;, ])"), (0,)),
    (TokenKind.TEX_OPERATOR, re.compile(r"[+\-=^_()|&]"), (0,)),
    (TokenKind.TEX_BRACKET, re.compile(r"[{}\[\]]"), (0,)),
    (
        TokenKind.TEX_ENVIRONMENT,
        re.compile(r"(?:[^\\]|^)\\begin\{([a-zA-Z]+\*?)\}[\s\S]*?[^\\]\\end\{(\1)\}"),
        (1, 2),
    ),
)


def scan(
    text: str, base: int, patterns: Iterable[TokenPattern]
) -> List[HighlightToken]:
    """Match ``patterns`` against ``text``; token ranges are offset by ``base``."""

    tokens: List[HighlightToken] = []
    for kind, pattern, groups in patterns:
        for match in pattern.finditer(text):
            for group in groups:
                start, end = match.span(group)
                if start < 0 or start == end:
                    continue
                tokens.append(HighlightToken(TextRange(base + start, end - start), kind))
    return tokens


def _mask(content: str, base: int, spans: Sequence[TextRange]) -> str:
    if not spans:
        return content
    chars = list(content)
    for span in spans:
        local = span.shifted(-base)
        chars[local.as_slice()] = " " * local.length
    return "".join(chars)


def tokenize(section: Section) -> List[HighlightToken]:
    """Tokens for one section, ordered by position."""

    base = section.source_range.location
    content = section.content
    tokens = scan(content, base, FULL_PATTERNS)
    tokens.extend(scan(_mask(content, base, section.math_ranges), base, TEXT_PATTERNS))
    for span in section.math_ranges:
        local = span.shifted(-base)
        tokens.extend(scan(content[local.as_slice()], span.location, MATH_PATTERNS))
    tokens.sort(key=lambda token: (token.text_range, token.kind.value))
    return tokens


__all__ = [
    "FULL_PATTERNS",
    "MATH_PATTERNS",
    "TEXT_PATTERNS",
    "HighlightToken",
    "SectionHighlight",
    "TokenKind",
    "TokenPattern",
    "scan",
    "tokenize",
]
