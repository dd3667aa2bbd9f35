"""Shell controller: owns the view ring and message log, dispatches keys and ticks.

File: src/gitdeck/ui/tui/controller.py

NO widget/Textual imports. The controller:
1. Receives key presses and timer ticks from the view layer.
2. Handles the reserved shell keys (quit, view switch) itself.
3. Forwards every other key to the active view, reporting recoverable failures.

This keeps all interaction logic testable without Textual.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from gitdeck.constants import DEFAULT_MESSAGE_CAPACITY, QUIT_KEY, VIEW_SWITCH_KEY
from gitdeck.engine.errors import GitDeckError
from gitdeck.observability.logging import correlation_scope
from gitdeck.ui.tui.state import MessageLog, ViewName, ViewSnapshot
from gitdeck.ui.tui.views import InteractiveView, build_views

if TYPE_CHECKING:
    from collections.abc import Mapping

    from gitdeck.engine.workflow import WorkflowEngine
    from gitdeck.ui.tui.state import KeyPress

logger = logging.getLogger(__name__)


class ShellController:
    """Application shell: cyclic view selector plus bounded message log."""

    def __init__(
        self,
        engine: WorkflowEngine,
        *,
        message_capacity: int = DEFAULT_MESSAGE_CAPACITY,
        views: Mapping[ViewName, InteractiveView] | None = None,
    ) -> None:
        self.engine = engine
        self.messages = MessageLog(message_capacity)
        self.views: dict[ViewName, InteractiveView] = (
            dict(views) if views is not None else build_views(engine, self.messages)
        )
        self.active = ViewName.STATUS
        self.should_quit = False

    @property
    def active_view(self) -> InteractiveView:
        return self.views[self.active]

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Refresh the initial view once before the first frame is drawn."""
        logger.info("shell started", extra={"repo": str(self.engine.repo_path)})
        self.active_view.refresh()

    def on_tick(self) -> None:
        self.active_view.refresh()

    # ------------------------------------------------------------------
    # Intents
    # ------------------------------------------------------------------

    def handle_key(self, key: KeyPress) -> bool:
        """Dispatch one key; return ``True`` when the shell should exit."""
        if key.key == QUIT_KEY:
            self.should_quit = True
            logger.info("quit requested")
            return True

        if key.key == VIEW_SWITCH_KEY:
            self.switch_view()
            return False

        with correlation_scope(view=self.active.value):
            try:
                self.active_view.handle_input(key)
            except GitDeckError as exc:
                logger.warning("view action failed", extra={"error": str(exc)})
                self.messages.append(f"Error: {exc}")
        return False

    def switch_view(self) -> ViewName:
        self.active = self.active.next()
        self.messages.append(f"Switched to {self.active.value}")
        return self.active

    # ------------------------------------------------------------------
    # Read side for the rendering layer
    # ------------------------------------------------------------------

    def snapshot(self) -> ViewSnapshot:
        return self.active_view.render()


__all__ = ["ShellController"]
