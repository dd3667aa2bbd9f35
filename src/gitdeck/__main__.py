"""Module entrypoint for ``python -m gitdeck``."""

from __future__ import annotations

from gitdeck.main import cli_entrypoint

if __name__ == "__main__":
    raise SystemExit(cli_entrypoint())
