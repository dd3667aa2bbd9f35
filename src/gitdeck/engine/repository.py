"""Repository accessor: scoped, per-operation handles onto a git working tree.

A handle is acquired with :func:`open_repository`, used for exactly one engine
operation, and invalidated when the ``with`` block exits. Nothing is cached
between operations, so every call re-validates the repository and re-reads
HEAD.
"""

from __future__ import annotations

import logging
import os
import subprocess
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

from gitdeck.engine.errors import GitCommandError, InvalidOperationError, RepositoryNotFoundError
from gitdeck.engine.models import CommandResult

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping, Sequence

logger = logging.getLogger(__name__)


class RepositoryHandle:
    """Validated view of one repository for the lifetime of one operation."""

    def __init__(
        self,
        root: Path,
        *,
        head: str | None,
        env_overrides: Mapping[str, str] | None = None,
    ) -> None:
        self.root = root
        self.head = head
        self._env_overrides = dict(env_overrides or {})
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def has_commits(self) -> bool:
        return self.head is not None

    def close(self) -> None:
        self._closed = True

    def run(
        self,
        args: Sequence[str],
        *,
        check: bool = True,
        input_text: str | None = None,
    ) -> CommandResult:
        """Run ``git <args>`` at the repository root."""
        if self._closed:
            raise InvalidOperationError("Repository handle used after its operation finished.")
        return run_git(
            args,
            cwd=self.root,
            check=check,
            input_text=input_text,
            env_overrides=self._env_overrides,
        )

    def resolve(self, ref: str) -> str | None:
        """Return the commit id ``ref`` points at, or ``None`` when it does not resolve."""
        result = self.run(["rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}"], check=False)
        if result.returncode != 0:
            return None
        return result.stdout.strip() or None

    def current_branch(self) -> str | None:
        """Shorthand of the checked-out branch (born or unborn); ``None`` when detached."""
        result = self.run(["symbolic-ref", "--quiet", "--short", "HEAD"], check=False)
        if result.returncode != 0:
            return None
        return result.stdout.strip() or None

    def branch_exists(self, name: str) -> bool:
        ref = f"refs/heads/{name}"
        return self.run(["show-ref", "--verify", "--quiet", ref], check=False).returncode == 0

    def remote_names(self) -> tuple[str, ...]:
        output = self.run(["remote"]).stdout
        return tuple(line.strip() for line in output.splitlines() if line.strip())

    def remote_exists(self, name: str) -> bool:
        return name in self.remote_names()

    def is_ancestor(self, ancestor: str, descendant: str) -> bool:
        result = self.run(["merge-base", "--is-ancestor", ancestor, descendant], check=False)
        if result.returncode in (0, 1):
            return result.returncode == 0
        raise GitCommandError(
            command=result.command,
            returncode=result.returncode,
            stdout=result.stdout,
            stderr=result.stderr,
        )

    def merge_base(self, first: str, second: str) -> str | None:
        result = self.run(["merge-base", first, second], check=False)
        if result.returncode != 0:
            return None
        return result.stdout.strip() or None


@contextmanager
def open_repository(
    path: Path | str,
    *,
    env_overrides: Mapping[str, str] | None = None,
) -> Iterator[RepositoryHandle]:
    """Open and validate the repository containing ``path`` for one operation."""
    handle = _acquire(Path(path), env_overrides=env_overrides)
    try:
        yield handle
    finally:
        handle.close()


def _acquire(path: Path, *, env_overrides: Mapping[str, str] | None) -> RepositoryHandle:
    location = path.expanduser()
    if not location.is_dir():
        raise RepositoryNotFoundError(f"Failed to open repository at '{path}': no such directory")

    probe = run_git(
        ["rev-parse", "--show-toplevel"],
        cwd=location,
        check=False,
        env_overrides=env_overrides,
    )
    if probe.returncode != 0 or not probe.stdout.strip():
        detail = probe.stderr.strip() or "not a git working tree"
        raise RepositoryNotFoundError(f"Failed to open repository at '{path}': {detail}")

    root = Path(probe.stdout.strip())
    head_probe = run_git(
        ["rev-parse", "--verify", "--quiet", "HEAD^{commit}"],
        cwd=root,
        check=False,
        env_overrides=env_overrides,
    )
    head = head_probe.stdout.strip() if head_probe.returncode == 0 else None
    return RepositoryHandle(root, head=head or None, env_overrides=env_overrides)


def run_git(
    args: Sequence[str],
    *,
    cwd: Path,
    check: bool = True,
    input_text: str | None = None,
    env_overrides: Mapping[str, str] | None = None,
) -> CommandResult:
    command = ("git", *args)
    env = os.environ.copy()
    env["GIT_TERMINAL_PROMPT"] = "0"
    # Periodic status refreshes must not take the index lock.
    env["GIT_OPTIONAL_LOCKS"] = "0"
    env.update(env_overrides or {})

    logger.debug("git %s", " ".join(args), extra={"cwd": cwd.as_posix()})
    try:
        completed = subprocess.run(
            command,
            cwd=cwd,
            env=env,
            text=True,
            capture_output=True,
            input=input_text,
            check=False,
        )
    except FileNotFoundError as exc:
        raise RepositoryNotFoundError("git executable not found on PATH") from exc

    result = CommandResult(
        command=command,
        cwd=cwd.as_posix(),
        returncode=completed.returncode,
        stdout=completed.stdout,
        stderr=completed.stderr,
    )

    if check and result.returncode != 0:
        raise GitCommandError(
            command=result.command,
            returncode=result.returncode,
            stdout=result.stdout,
            stderr=result.stderr,
        )

    return result


__all__ = ["RepositoryHandle", "open_repository", "run_git"]
