"""Stable constants shared by the engine, shell and CLI."""

from __future__ import annotations

from typing import Final

APP_NAME: Final[str] = "gitdeck"
APP_TITLE: Final[str] = "GitDeck: Terminal Git Interface"
FOOTER_TEXT: Final[str] = "Press 'q' to exit | Tab to switch views"

# Schema versions for persisted contracts.
CONFIG_SCHEMA_VERSION: Final[int] = 1

# Shell timing and capacity defaults.
DEFAULT_TICK_INTERVAL_MS: Final[int] = 250
DEFAULT_MESSAGE_CAPACITY: Final[int] = 500
DEFAULT_REMOTE: Final[str] = "origin"

# Reserved shell keys (Textual key names).
QUIT_KEY: Final[str] = "q"
VIEW_SWITCH_KEY: Final[str] = "tab"

# Runtime paths.
DEFAULT_CONFIG_FILE: Final[str] = "gitdeck.toml"
DEFAULT_LOG_DIR: Final[str] = "~/.gitdeck/logs"
LOG_FILE_NAME: Final[str] = "gitdeck.jsonl"

__all__ = [
    "APP_NAME",
    "APP_TITLE",
    "CONFIG_SCHEMA_VERSION",
    "DEFAULT_CONFIG_FILE",
    "DEFAULT_LOG_DIR",
    "DEFAULT_MESSAGE_CAPACITY",
    "DEFAULT_REMOTE",
    "DEFAULT_TICK_INTERVAL_MS",
    "FOOTER_TEXT",
    "LOG_FILE_NAME",
    "QUIT_KEY",
    "VIEW_SWITCH_KEY",
]
