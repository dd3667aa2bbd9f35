"""Typed failures raised by the workflow engine.

Every engine operation either returns normally or raises one of these. The
interactive shell and the CLI catch ``GitDeckError`` at their boundaries and
turn it into a user-facing message or exit code.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence


class GitDeckError(RuntimeError):
    """Base error for recoverable workflow failures."""


class NotFoundError(GitDeckError):
    """Raised when a branch, remote, commit or ref does not exist."""


class RepositoryNotFoundError(NotFoundError):
    """Raised when the working directory is not a usable git repository."""


class AlreadyExistsError(GitDeckError):
    """Raised on a name collision when creating a branch or remote."""


class InvalidOperationError(GitDeckError):
    """Raised when an operation is not allowed in the current repository state."""


class MergeConflictError(GitDeckError):
    """Raised when a three-way merge leaves unresolved conflicts behind."""

    def __init__(self, message: str, *, paths: Sequence[str] = ()) -> None:
        self.paths = tuple(paths)
        super().__init__(message)


class UnknownMergeAnalysisError(GitDeckError):
    """Raised when merge analysis cannot classify an integration."""


class GitCommandError(GitDeckError):
    """Raised when a git subprocess command exits non-zero."""

    def __init__(
        self,
        *,
        command: Sequence[str],
        returncode: int,
        stdout: str,
        stderr: str,
    ) -> None:
        self.command = tuple(command)
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        message = f"git command failed ({returncode}): {' '.join(command)}"
        if stderr.strip():
            message = f"{message}: {stderr.strip()}"
        super().__init__(message)


class BackendFailure(GitDeckError):
    """Raised when an underlying store operation fails.

    ``action`` names what was attempted ("create branch", "stage file", ...) and
    ``subject`` the branch, path or remote it was attempted on. The originating
    ``GitCommandError`` is kept as ``__cause__``.
    """

    def __init__(self, action: str, subject: str | None = None, *, detail: str = "") -> None:
        self.action = action
        self.subject = subject
        self.detail = detail.strip()
        target = f" '{subject}'" if subject else ""
        message = f"Failed to {action}{target}"
        if self.detail:
            message = f"{message}: {self.detail}"
        super().__init__(message)


__all__ = [
    "AlreadyExistsError",
    "BackendFailure",
    "GitCommandError",
    "GitDeckError",
    "InvalidOperationError",
    "MergeConflictError",
    "NotFoundError",
    "RepositoryNotFoundError",
    "UnknownMergeAnalysisError",
]
