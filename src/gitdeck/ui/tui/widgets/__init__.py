"""Textual widgets for the gitdeck shell."""

from gitdeck.ui.tui.widgets.message_pane import MessagePane
from gitdeck.ui.tui.widgets.view_panel import ViewPanel

__all__ = ["MessagePane", "ViewPanel"]
