"""Interactive shell package (state / controller / views / Textual app).

Exposes ``tui_available()`` and ``run_tui()`` for the CLI router. Textual is
only imported once the shell is actually launched.
"""

from __future__ import annotations

import sys
from importlib.util import find_spec
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Mapping

    from gitdeck.engine.workflow import WorkflowEngine


def tui_available() -> bool:
    """Return whether the Textual runtime is importable in this environment."""
    return find_spec("textual") is not None


def run_tui(config: Mapping[str, Any], *, engine: WorkflowEngine | None = None) -> int:
    """Run the interactive shell against ``config``, or exit with code 2 if unavailable."""
    if not tui_available():
        print("The interactive shell requires textual. Install: pip install textual", file=sys.stderr)
        return 2

    from gitdeck.config import git_identity_env
    from gitdeck.engine.workflow import WorkflowEngine
    from gitdeck.ui.tui.app import run_tui_app
    from gitdeck.ui.tui.controller import ShellController

    if engine is None:
        engine = WorkflowEngine(
            config["repository"]["path"], env_overrides=git_identity_env(config)
        )

    ui = config["ui"]
    controller = ShellController(engine, message_capacity=ui["message_capacity"])
    return run_tui_app(
        controller,
        tick_interval_ms=ui["tick_interval_ms"],
        no_color=bool(ui["no_color"]),
    )


__all__ = ["run_tui", "tui_available"]
