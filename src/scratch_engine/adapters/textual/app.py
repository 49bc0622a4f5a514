"""Executable Textual app that hosts the synchronization engine."""

from __future__ import annotations

import argparse
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional, Sequence, Tuple

try:  # pragma: no cover - imported only when demo is run
    from textual import events
    from textual.app import App, ComposeResult
    from textual.containers import Horizontal, Vertical
    from textual.widgets import Footer, Header, Static, TextArea
    from textual.widgets.text_area import Selection
except ModuleNotFoundError as exc:  # pragma: no cover - friendly error for missing dep
    raise RuntimeError(
        "Install the 'textual' package to use scratch_engine.adapters.textual.app"
    ) from exc

from scratch_engine.buffer import BufferMirror
from scratch_engine.config import EngineConfig
from scratch_engine.placeholders import PlaceholderSyntax
from scratch_engine.session import EditorSession
from scratch_engine.structure import OutlineEntry

from .controller import TextualEditorAdapter, TextualUIHooks

PLACEHOLDER_MARKER = "◆"

SAMPLE_TEXT = """# Scratch paper

Solve $x^2 + <#b#>x + <#c#> = 0$ for $x$.

## Fractions

$\\frac{<#a#>}{<#b#>}$ simplifies once <#a#> is known.

- press tab to jump between placeholders
- press enter on a placeholder to keep its label
"""


def create_session(config: Optional[EngineConfig] = None) -> EditorSession:
    """Build a session configured for the terminal demo."""

    base = config or EngineConfig.from_env()
    return EditorSession(base.with_overrides(blank_marker=PLACEHOLDER_MARKER))


@dataclass
class UIState:
    buffer_text: str = ""
    status_text: str = ""
    outline: List[OutlineEntry] = field(default_factory=list)
    selected_index: Optional[int] = None


class SessionTextArea(TextArea):
    """TextArea that lets the engine claim placeholder keys first."""

    adapter: Optional[TextualEditorAdapter] = None

    async def _on_key(self, event: events.Key) -> None:
        if self.adapter is not None and self.adapter.handle_textual_key(event.key).consumed:
            event.prevent_default()
            event.stop()
            return
        await super()._on_key(event)


class ScratchEngineApp(App[None]):
    """Editor, outline and preview panes kept in sync by one session."""

    CSS = """
	Screen {
		layout: vertical;
	}

	#panes {
		height: 1fr;
	}

	#outline {
		width: 28;
		border: round $accent;
		padding: 0 1;
		overflow: auto;
	}

	#editor {
		width: 1fr;
	}

	#preview {
		width: 1fr;
		border: round $accent;
		padding: 0 1;
		overflow: auto;
	}

	#status-line {
		height: 1;
		background: $surface-darken-1;
		padding: 0 1;
	}
	"""

    BINDINGS = [
        ("ctrl+q", "quit", "Quit"),
        ("ctrl+z", "undo", "Undo"),
        ("ctrl+y", "redo", "Redo"),
        ("ctrl+f", "template('fraction')", "Fraction"),
        ("ctrl+b", "template('bold')", "Bold"),
    ]

    def __init__(self, *, source_text: str = SAMPLE_TEXT, config: Optional[EngineConfig] = None) -> None:
        super().__init__()
        self._state = UIState()
        self._source_text = source_text
        self.session = create_session(config)
        self.adapter: TextualEditorAdapter | None = None
        self._editor: SessionTextArea | None = None
        self._outline_widget: Static | None = None
        self._preview_widget: Static | None = None
        self._status_widget: Static | None = None
        self._syncing = False

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        with Horizontal(id="panes"):
            self._outline_widget = Static("", id="outline")
            yield self._outline_widget
            with Vertical(id="editor"):
                self._editor = SessionTextArea(id="editor-area")
                yield self._editor
            self._preview_widget = Static("", id="preview")
            yield self._preview_widget
        self._status_widget = Static("", id="status-line")
        yield self._status_widget
        yield Footer()

    async def on_mount(self) -> None:
        hooks = TextualUIHooks(
            update_buffer=self._update_buffer,
            update_outline=self._update_outline,
            select_outline=self._select_outline,
            update_preview=self._update_preview,
            update_status=self._update_status,
            handle_event=self._handle_event,
            log=self._log_line,
        )
        self.adapter = TextualEditorAdapter(self.session, hooks)
        if self._editor is not None:
            self._editor.adapter = self.adapter
            self._editor.focus()
        self.adapter.load(self._source_text)

    def on_text_area_changed(self, event: TextArea.Changed) -> None:
        if self._syncing or not self.adapter:
            return
        self.adapter.handle_text_change(event.text_area.text)

    def on_text_area_selection_changed(self, event: TextArea.SelectionChanged) -> None:
        if self._syncing or not self.adapter:
            return
        self.adapter.handle_selection(event.selection.start, event.selection.end)
        self._update_viewport()

    def action_undo(self) -> None:
        if self.adapter:
            self.adapter.undo()

    def action_redo(self) -> None:
        if self.adapter:
            self.adapter.redo()

    def action_template(self, name: str) -> None:
        if self.adapter:
            self.adapter.apply_template(name)

    def _update_viewport(self) -> None:
        if not self.adapter or not self._editor:
            return
        first_row = int(self._editor.scroll_offset.y)
        self.adapter.handle_scroll(first_row, self._editor.size.height)

    def _update_buffer(self, mirror: BufferMirror) -> None:
        self._state.buffer_text = mirror.text
        if not self._editor or not self.adapter:
            return
        start, end = self.adapter.selection_positions()
        self._syncing = True
        try:
            if self._editor.text != mirror.text:
                self._editor.load_text(mirror.text)
            self._editor.selection = Selection(start, end)
        finally:
            self._syncing = False

    def _update_outline(self, entries: List[OutlineEntry]) -> None:
        self._state.outline = entries
        self._render_outline()

    def _select_outline(self, index: int) -> None:
        self._state.selected_index = index
        self._render_outline()

    def _render_outline(self) -> None:
        if not self._outline_widget:
            return
        rows = []
        for index, entry in enumerate(self._state.outline):
            marker = ">" if index == self._state.selected_index else " "
            preview = entry.content.strip().splitlines()[0] if entry.content.strip() else "(empty)"
            rows.append(f"{marker} {entry.line_range.start + 1:>3} {preview[:20]}")
        self._outline_widget.update("\n".join(rows))

    def _update_preview(self, payloads: List[Tuple[int, str]]) -> None:
        if self._preview_widget:
            self._preview_widget.update("\n\n".join(content for _, content in payloads))

    def _update_status(self, status: str) -> None:
        self._state.status_text = status
        if self._status_widget:
            self._status_widget.update(status)

    def _handle_event(self, name: str, payload: Any | None) -> None:
        if name.startswith("render"):
            index = getattr(payload, "index", payload)
            self._update_status(f"{name}:{index}")

    def _log_line(self, line: str) -> None:
        self.log(line)


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the scratch engine Textual demo.")
    parser.add_argument(
        "path",
        nargs="?",
        default=os.environ.get("SCRATCH_ENGINE_DEMO_FILE"),
        help="Text file to open (default: built-in sample)",
    )
    parser.add_argument(
        "--line-to-line",
        action="store_true",
        help="Reveal the matching preview section on every caret move",
    )
    parser.add_argument(
        "--legacy-placeholders",
        action="store_true",
        help="Also recognise <@label@> placeholders",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = _parse_args(argv)
    config = EngineConfig.from_env()
    if args.line_to_line:
        config = config.with_overrides(line_to_line=True)
    if args.legacy_placeholders and PlaceholderSyntax.LEGACY not in config.syntaxes:
        config = config.with_overrides(syntaxes=config.syntaxes + (PlaceholderSyntax.LEGACY,))
    source = Path(args.path).read_text(encoding="utf-8") if args.path else SAMPLE_TEXT
    app = ScratchEngineApp(source_text=source, config=config)
    app.run()


if __name__ == "__main__":  # pragma: no cover - manual demo
    main()
