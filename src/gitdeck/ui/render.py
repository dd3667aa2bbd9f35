"""Output rendering abstraction for the gitdeck CLI.

File: src/gitdeck/ui/render.py

Purpose
- Provide a thin rendering layer for non-interactive command output.
- Respect NO_COLOR environment variable and --no-color CLI flag.
"""

from __future__ import annotations

import os
import sys
from typing import TYPE_CHECKING, TextIO

if TYPE_CHECKING:
    from collections.abc import Sequence

_GREEN = "\x1b[32m"
_RED = "\x1b[31m"
_YELLOW = "\x1b[33m"
_RESET = "\x1b[0m"

_STATUS_COLORS = {"A": _GREEN, "M": _YELLOW, "D": _RED, "R": _YELLOW, "U": _RED, "??": _RED}


def _color_allowed(no_color_flag: bool, stream: TextIO) -> bool:
    if no_color_flag:
        return False
    if os.environ.get("NO_COLOR", ""):
        return False
    return hasattr(stream, "isatty") and stream.isatty()


class CLIRenderer:
    """Thin CLI output renderer.

    Produces clean, deterministic plain-text output. Color is only applied to
    status codes and the current-branch marker, and only on a TTY.
    """

    def __init__(self, *, no_color: bool = False, stream: TextIO | None = None) -> None:
        self._stream = stream if stream is not None else sys.stdout
        self._color = _color_allowed(no_color, self._stream)

    def text(self, line: str) -> None:
        print(line, file=self._stream)

    def kv(self, key: str, value: object) -> None:
        print(f"{key}: {value}", file=self._stream)

    def items(self, entries: Sequence[str], *, prefix: str = "- ") -> None:
        for entry in entries:
            print(f"  {prefix}{entry}", file=self._stream)

    def status_line(self, code: str, path: str) -> None:
        print(f"{self._paint(code, _STATUS_COLORS.get(code))} {path}", file=self._stream)

    def branch_line(self, name: str, *, current: bool) -> None:
        if current:
            print(self._paint(f"* {name}", _GREEN), file=self._stream)
        else:
            print(f"  {name}", file=self._stream)

    def ok(self, label: str) -> None:
        print(label, file=self._stream)

    def _paint(self, text: str, color: str | None) -> str:
        if not self._color or color is None:
            return text
        return f"{color}{text}{_RESET}"


def create_renderer(*, no_color: bool = False) -> CLIRenderer:
    """Create a CLI renderer with the given settings."""

    return CLIRenderer(no_color=no_color)


__all__ = ["CLIRenderer", "create_renderer"]
