"""UI package exports for the CLI router, plain rendering and the interactive shell."""

from gitdeck.ui.cli import CLIError, build_parser, run_cli
from gitdeck.ui.render import CLIRenderer, create_renderer
from gitdeck.ui.tui import run_tui, tui_available

__all__ = [
    "CLIError",
    "CLIRenderer",
    "build_parser",
    "create_renderer",
    "run_cli",
    "run_tui",
    "tui_available",
]
