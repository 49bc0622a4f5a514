"""Command templates inserted at, or wrapped around, the selection.

A template pattern marks its wrap point with two ``!`` characters: the text
before the first one goes left of a wrapped selection, the text after the
second one goes right of it, and the part between them is the default
content used when nothing is selected. Placeholder markup inside a pattern
is rendered into placeholder units on insertion.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Optional, Tuple, Union

from scratch_engine.buffer import AttributedText, TextRange
from scratch_engine.placeholders import render_placeholders
from scratch_engine.runtime import telemetry

if TYPE_CHECKING:
    from scratch_engine.session import EditorSession

WRAP_MARKER = "!"


class TemplateError(ValueError):
    """Raised for a template pattern without a usable wrap point."""

    def __init__(self, message: str, *, pattern: str) -> None:
        super().__init__(message)
        self.pattern = pattern


@dataclass(frozen=True, slots=True)
class CommandTemplate:
    """Insertion pattern for one command.

    ``split`` carries ``(insert, wrap)`` patterns for commands whose inserted
    text differs from the text wrapped around a selection.
    """

    name: str
    pattern: str
    wrappable: bool = True
    split: Optional[Tuple[str, str]] = None

    def __post_init__(self) -> None:
        if self.wrappable:
            parts = self._wrap_pattern.split(WRAP_MARKER)
            if len(parts) != 3:
                raise TemplateError(
                    f"template {self.name!r} needs exactly two {WRAP_MARKER!r} markers",
                    pattern=self._wrap_pattern,
                )

    @property
    def _wrap_pattern(self) -> str:
        return self.split[1] if self.split else self.pattern

    @property
    def insert_text(self) -> str:
        if self.split:
            return self.split[0]
        return "".join(self.pattern.split(WRAP_MARKER))

    @property
    def wrap_parts(self) -> Tuple[str, str]:
        left, _, right = self._wrap_pattern.split(WRAP_MARKER)
        return left, right


def _matrix(environment: str, columns: Tuple[str, str] = ("", "")) -> Tuple[str, str]:
    """Insert and wrap forms; ``columns`` is the column spec each form opens with."""

    insert_spec, wrap_spec = columns
    return (
        f"\\begin{{{environment}}}{insert_spec}\n\t<#a#> & <#b#> \\\\\n\t<#c#> & <#d#>\n\\end{{{environment}}}",
        f"\\begin{{{environment}}}{wrap_spec}\n\t!!\n\\end{{{environment}}}",
    )


DEFAULT_TEMPLATES: tuple[CommandTemplate, ...] = (
    CommandTemplate("bold", "**!<#bold#>!**"),
    CommandTemplate("italic", "_!<#italic#>!_"),
    CommandTemplate("underlined", "<u>!<#underlined#>!</u>"),
    CommandTemplate("strikethrough", "~~!<#text#>!~~"),
    CommandTemplate("inline_math", "$!<#a+b=c#>!$"),
    CommandTemplate("fraction", r"\frac{!<#a#>!}{<#b#>}"),
    CommandTemplate("exponent", "", split=("^{<#n#>}", "{!!}^{<#n#>}")),
    CommandTemplate("square_root", r"\sqrt{!<#n#>!}"),
    CommandTemplate("root", r"\sqrt[<#n#>]{!<#m#>!}"),
    CommandTemplate("parentheses", r"\left(!<#a#>!\right)"),
    CommandTemplate("indefinite_integral", r"\int{!<#f(x)#>!\ d<#x#>}"),
    CommandTemplate("definite_integral", r"\int_{<#a#>}^{<#b#>}{!<#f(x)#>!\ d<#x#>}"),
    CommandTemplate("sum", r"\sum_{<#i#>=<#0#>}^{<#n#>}{!<#expression#>!}"),
    CommandTemplate("product", r"\prod_{<#i#>=<#0#>}^{<#n#>}{!<#expression#>!}"),
    CommandTemplate("limit", r"\lim_{<#x#>\to<#a#>}{!<#f(x)#>!}"),
    CommandTemplate("binomial", r"\binom{!<#n#>!}{<#r#>}"),
    CommandTemplate("aligned", "\\begin{aligned}\n\t!<#a+b=c#>!\n\\end{aligned}"),
    CommandTemplate("array", "", split=_matrix("array", ("{cc}", "{c}"))),
    CommandTemplate("matrix", "", split=_matrix("matrix")),
    CommandTemplate("parenthesis_matrix", "", split=_matrix("pmatrix")),
    CommandTemplate("bracket_matrix", "", split=_matrix("bmatrix")),
    CommandTemplate("braces_matrix", "", split=_matrix("Bmatrix")),
    CommandTemplate("vertical_matrix", "", split=_matrix("vmatrix")),
    CommandTemplate("double_vertical_matrix", "", split=_matrix("Vmatrix")),
    CommandTemplate(
        "cases",
        "\\begin{cases}\n\t!<#a#>! & \\text{if } <#b#> \\\\\n\t<#c#> & \\text{if } <#d#>\n\\end{cases}",
    ),
    CommandTemplate("cancel", r"\cancel{!<#a#>!}"),
    CommandTemplate("overline", r"\overline{!<#A#>!}"),
    CommandTemplate("underline", r"\underline{!<#a#>!}"),
    CommandTemplate("overbrace", r"\overbrace{!<#a#>!}^{<#b#>}"),
    CommandTemplate("underbrace", r"\underbrace{!<#a#>!}_{<#b#>}"),
    CommandTemplate("vector", r"\vec{!<#v#>!}"),
    CommandTemplate("hat", r"\hat{!<#i#>!}"),
    CommandTemplate("bar", r"\bar{!<#h#>!}"),
    CommandTemplate("box", r"\boxed{!<#a#>!}"),
)

TEMPLATES_BY_NAME: Dict[str, CommandTemplate] = {
    template.name: template for template in DEFAULT_TEMPLATES
}


class TemplateInserter:
    def __init__(
        self,
        session: "EditorSession",
        templates: Optional[Dict[str, CommandTemplate]] = None,
    ) -> None:
        self.session = session
        self.templates = dict(templates or TEMPLATES_BY_NAME)

    def lookup(self, template: Union[CommandTemplate, str]) -> CommandTemplate:
        if isinstance(template, CommandTemplate):
            return template
        try:
            return self.templates[template]
        except KeyError:
            raise KeyError(f"unknown template {template!r}") from None

    def _render(self, text: str) -> Tuple[AttributedText, int]:
        return render_placeholders(text, self.session.config.syntaxes)

    def apply(
        self,
        template: Union[CommandTemplate, str],
        text_range: Optional[TextRange] = None,
        *,
        select: bool = True,
    ) -> TextRange:
        """Insert, wrap, or unwrap; returns the selection left behind."""

        command = self.lookup(template)
        target = text_range or self.session.buffer.selection
        self.session.buffer.break_coalescing()
        with telemetry.span(
            "template::apply", metadata={"template": command.name, "range": target}
        ):
            if command.wrappable and target.length > 0:
                return self._wrap(command, target, select=select)
            return self._insert(command, target, select=select)

    def _insert(self, command: CommandTemplate, target: TextRange, *, select: bool) -> TextRange:
        rendered, count = self._render(command.insert_text)
        with self.session.editing(f"template_{command.name}") as buffer:
            buffer.replace_range(target, rendered, label="template_insert")
        if select and count:
            return self._select_nearest(target.location)
        return self.session.buffer.selection

    def _wrap(self, command: CommandTemplate, target: TextRange, *, select: bool) -> TextRange:
        left, right = command.wrap_parts
        buffer = self.session.buffer
        left_range = None
        if target.location >= len(left):
            left_range = TextRange(target.location - len(left), len(left))
        right_range = TextRange(target.upper_bound, len(right))
        if (
            left_range is not None
            and right_range.upper_bound <= buffer.length
            and buffer.storage.substring(left_range) == left
            and buffer.storage.substring(right_range) == right
        ):
            inner = buffer.storage.attributed_substring(target)
            outer = TextRange.between(left_range.location, right_range.upper_bound)
            restored = TextRange(left_range.location, target.length)
            with self.session.editing(f"template_{command.name}") as edit:
                edit.replace_range(
                    outer,
                    inner,
                    label="template_unwrap",
                    select=restored if select else None,
                )
            return buffer.selection

        left_text, left_count = self._render(left)
        right_text, right_count = self._render(right)
        wrapped = left_text + buffer.storage.attributed_substring(target) + right_text
        with self.session.editing(f"template_{command.name}") as edit:
            edit.replace_range(target, wrapped, label="template_wrap")
        if not select:
            return buffer.selection
        if left_count + right_count:
            return self._select_nearest(target.location)
        shifted = TextRange(target.location + len(left_text), target.length)
        buffer.set_selection(shifted)
        return shifted

    def _select_nearest(self, location: int) -> TextRange:
        self.session.buffer.set_caret(location)
        nearest = self.session.placeholders.nearest_from(location)
        if nearest is None:
            return self.session.buffer.selection
        return self.session.select_placeholder(nearest)


__all__ = [
    "CommandTemplate",
    "DEFAULT_TEMPLATES",
    "TEMPLATES_BY_NAME",
    "TemplateError",
    "TemplateInserter",
    "WRAP_MARKER",
]
