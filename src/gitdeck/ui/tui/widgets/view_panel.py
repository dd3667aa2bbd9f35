"""Main region: renders the active view's snapshot.

File: src/gitdeck/ui/tui/widgets/view_panel.py
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.style import Style
from rich.text import Text
from textual.widgets import Static

if TYPE_CHECKING:
    from gitdeck.ui.tui.state import ViewSnapshot

_HIGHLIGHT_SYMBOL = ">> "
_S_TITLE = Style(color="#3fa9f5", bold=True)
_S_ITEM = Style(color="#c8cdd8")
_S_SELECTED = Style(color="yellow", bold=True)
_S_PROMPT = Style(color="#7f8aa3", italic=True)


class ViewPanel(Static):
    """Static panel redrawn from a :class:`ViewSnapshot` on every sync."""

    DEFAULT_CSS = """
    ViewPanel {
        height: 1fr;
        width: 1fr;
        border: round #3fa9f5;
        padding: 0 1;
        overflow-y: auto;
    }
    """

    def __init__(self, *, no_color: bool = False, **kwargs: object) -> None:
        super().__init__("", **kwargs)
        self._no_color = no_color
        self.last_snapshot: ViewSnapshot | None = None

    def show(self, snapshot: ViewSnapshot) -> None:
        if snapshot == self.last_snapshot:
            return
        self.last_snapshot = snapshot
        self.border_title = snapshot.title
        self.update(render_snapshot(snapshot, no_color=self._no_color))


def render_snapshot(snapshot: ViewSnapshot, *, no_color: bool = False) -> Text:
    """Build the rich text for a snapshot; the selected line gets a marker."""
    styles = (Style(), Style(), Style(bold=True), Style()) if no_color else (
        _S_TITLE,
        _S_ITEM,
        _S_SELECTED,
        _S_PROMPT,
    )
    title_style, item_style, selected_style, prompt_style = styles

    text = Text()
    text.append(snapshot.title + "\n", style=title_style)
    for index, line in enumerate(snapshot.lines):
        if snapshot.selected is not None and index == snapshot.selected:
            text.append(_HIGHLIGHT_SYMBOL + line, style=selected_style)
        else:
            text.append(" " * len(_HIGHLIGHT_SYMBOL) + line, style=item_style)
        text.append("\n")
    if snapshot.prompt:
        text.append("\n" + snapshot.prompt, style=prompt_style)
    return text


__all__ = ["ViewPanel", "render_snapshot"]
