"""Shared pytest fixtures for the gitdeck suite."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from pathlib import Path

TEST_AUTHOR_NAME = "GitDeck Tester"
TEST_AUTHOR_EMAIL = "tester@example.com"


@pytest.fixture(autouse=True)
def isolated_git_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep every test away from the developer's git config, identity and gitdeck env."""
    home = tmp_path / "home"
    xdg = tmp_path / "xdg"
    home.mkdir()
    xdg.mkdir()

    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(xdg))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_TERMINAL_PROMPT", "0")
    monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(tmp_path))
    monkeypatch.setenv("GIT_AUTHOR_NAME", TEST_AUTHOR_NAME)
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", TEST_AUTHOR_EMAIL)
    monkeypatch.setenv("GIT_COMMITTER_NAME", TEST_AUTHOR_NAME)
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", TEST_AUTHOR_EMAIL)
    for key in list(os.environ):
        if key.startswith("GITDECK_"):
            monkeypatch.delenv(key, raising=False)
