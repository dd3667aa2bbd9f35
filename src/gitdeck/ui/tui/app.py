"""Main Textual App: view layer that renders shell state and forwards input.

File: src/gitdeck/ui/tui/app.py

This is the top-level Textual App. It:
- Composes the layout (title row, active view, message pane, footer)
- Forwards key events and interval ticks to the shell controller
- Re-renders the active view and the message pane after every event

All interaction logic lives in the controller and views; this file only renders.
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.css.query import NoMatches
from textual.widgets import Static

from gitdeck.constants import (
    APP_TITLE,
    DEFAULT_TICK_INTERVAL_MS,
    FOOTER_TEXT,
    QUIT_KEY,
    VIEW_SWITCH_KEY,
)
from gitdeck.ui.tui.state import KeyPress
from gitdeck.ui.tui.widgets.message_pane import MessagePane
from gitdeck.ui.tui.widgets.view_panel import ViewPanel

if TYPE_CHECKING:
    from gitdeck.ui.tui.controller import ShellController

_CSS = """
Screen { background: #05070c; color: #c8cdd8; layout: vertical; }
#title { height: 3; content-align: center middle; text-style: bold; color: #3fa9f5;
         border: round #3fa9f5; }
#main { height: 1fr; }
#messages { height: 5; }
#footer { height: 3; content-align: center middle; color: #7f8aa3; border: round #1a2550; }
"""

_CSS_NO_COLOR = """
Screen { background: black; color: white; layout: vertical; }
#title { height: 3; content-align: center middle; text-style: bold; border: round white; }
#main { height: 1fr; }
#messages { height: 5; }
#footer { height: 3; content-align: center middle; border: round white; }
"""


class GitDeckTUI(App[int]):
    """Interactive git front-end: one active view plus a message pane."""

    TITLE = APP_TITLE
    CSS = _CSS
    AUTO_FOCUS = None
    BINDINGS = [
        Binding(VIEW_SWITCH_KEY, "switch_view", "Switch view", show=False, priority=True),
        Binding(QUIT_KEY, "quit_shell", "Quit", show=False, priority=True),
    ]

    def __init__(
        self,
        controller: ShellController,
        *,
        tick_interval_ms: int = DEFAULT_TICK_INTERVAL_MS,
        no_color: bool = False,
    ) -> None:
        self._no_color = no_color or bool(os.environ.get("NO_COLOR", ""))
        super().__init__()
        self.controller = controller
        self._tick_seconds = tick_interval_ms / 1000

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------

    def compose(self) -> ComposeResult:
        yield Static(APP_TITLE, id="title")
        yield ViewPanel(no_color=self._no_color, id="main")
        yield MessagePane(no_color=self._no_color, id="messages")
        yield Static(FOOTER_TEXT, id="footer")

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def on_mount(self) -> None:
        self.controller.start()
        self.set_interval(self._tick_seconds, self._on_tick)
        self._sync()

    def _on_tick(self) -> None:
        self.controller.on_tick()
        self._sync()

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def action_switch_view(self) -> None:
        self._dispatch(KeyPress(key=VIEW_SWITCH_KEY))

    def action_quit_shell(self) -> None:
        self._dispatch(KeyPress.char(QUIT_KEY))

    def on_key(self, event: events.Key) -> None:
        event.stop()
        self._dispatch(KeyPress(key=event.key, character=event.character))

    def _dispatch(self, key: KeyPress) -> None:
        if self.controller.handle_key(key):
            self.exit(0)
            return
        self._sync()

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _sync(self) -> None:
        try:
            panel = self.query_one("#main", ViewPanel)
            pane = self.query_one("#messages", MessagePane)
        except NoMatches:
            return
        panel.show(self.controller.snapshot())
        pane.sync(self.controller.messages)


def run_tui_app(
    controller: ShellController,
    *,
    tick_interval_ms: int = DEFAULT_TICK_INTERVAL_MS,
    no_color: bool = False,
) -> int:
    """Create and run the TUI app, returning its exit code."""
    effective_no_color = no_color or bool(os.environ.get("NO_COLOR", ""))
    GitDeckTUI.CSS = _CSS_NO_COLOR if effective_no_color else _CSS

    app = GitDeckTUI(controller, tick_interval_ms=tick_interval_ms, no_color=no_color)
    result = app.run()
    return result if isinstance(result, int) else 0


__all__ = ["GitDeckTUI", "run_tui_app"]
