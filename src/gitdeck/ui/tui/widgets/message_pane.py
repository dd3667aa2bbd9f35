"""Message pane: RichLog of shell messages, most recent last.

File: src/gitdeck/ui/tui/widgets/message_pane.py

Only messages not yet written are appended on each sync, keyed by the
message sequence number, so evictions from the bounded log never cause a
redraw of the whole pane.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.style import Style
from rich.text import Text
from textual.app import ComposeResult
from textual.widget import Widget
from textual.widgets import RichLog

if TYPE_CHECKING:
    from gitdeck.ui.tui.state import Message, MessageLog

_MAX_BUFFER_LINES = 1_000

_S_TIME = Style(color="#7f8aa3")
_S_TEXT = Style(color="#c8cdd8")
_S_ERROR = Style(color="#e05555", bold=True)
_S_OK = Style(color="#4ec990")

_ERROR_PREFIXES = ("Error", "Failed")
_OK_PREFIXES = ("Staged", "Committed", "Switched to branch", "Branch '")


class MessagePane(Widget):
    """Wrapped, auto-scrolling log of shell messages."""

    DEFAULT_CSS = """
    MessagePane {
        height: 5;
        width: 1fr;
    }
    #message-log {
        height: 1fr;
        width: 1fr;
        border: round #3fa9f5;
        scrollbar-size-vertical: 1;
    }
    """

    def __init__(self, *, no_color: bool = False, **kwargs: object) -> None:
        super().__init__(**kwargs)
        self._no_color = no_color
        self._last_sequence = 0

    def compose(self) -> ComposeResult:
        log = RichLog(
            max_lines=_MAX_BUFFER_LINES,
            wrap=True,
            markup=False,
            auto_scroll=True,
            id="message-log",
        )
        # Arrow keys belong to the active view, not to log scrolling.
        log.can_focus = False
        yield log

    @property
    def rich_log(self) -> RichLog:
        return self.query_one("#message-log", RichLog)

    def sync(self, messages: MessageLog) -> int:
        """Write messages appended since the last sync; return how many were written."""
        pending = [message for message in messages if message.sequence > self._last_sequence]
        log = self.rich_log
        for message in pending:
            log.write(_format_message(message, no_color=self._no_color))
            self._last_sequence = message.sequence
        return len(pending)

    @property
    def text(self) -> str:
        """Plain text of the pane; used by tests."""
        return "\n".join(getattr(line, "text", str(line)) for line in self.rich_log.lines)


def _format_message(message: Message, *, no_color: bool) -> Text:
    if no_color:
        return Text(message.line)

    style = _S_TEXT
    if message.text.startswith(_ERROR_PREFIXES):
        style = _S_ERROR
    elif message.text.startswith(_OK_PREFIXES):
        style = _S_OK

    text = Text()
    text.append(f"[{message.timestamp}] ", style=_S_TIME)
    text.append(message.text, style=style)
    return text


__all__ = ["MessagePane"]
