"""Read-only projections of repository state."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import UTC, datetime

_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Normalized subprocess result for a single git invocation."""

    command: tuple[str, ...]
    cwd: str
    returncode: int
    stdout: str
    stderr: str


@dataclass(frozen=True, slots=True)
class BranchRef:
    """A local branch and whether it is checked out."""

    name: str
    is_current: bool

    @property
    def label(self) -> str:
        marker = "* " if self.is_current else "  "
        return f"{marker}{self.name}"


@dataclass(frozen=True, slots=True)
class StatusEntry:
    """One working-tree status line."""

    code: str
    path: str

    @property
    def line(self) -> str:
        return f"{self.code} {self.path}"


@dataclass(frozen=True, slots=True)
class CommitRecord:
    """Summary of a commit as listed by the revision walk."""

    id: str
    author: str
    timestamp: datetime
    summary: str
    parents: tuple[str, ...] = ()

    @property
    def date(self) -> str:
        return self.timestamp.strftime(_DATE_FORMAT)


@dataclass(frozen=True, slots=True)
class CommitDetail:
    """Full detail of one commit for the log detail pane."""

    id: str
    author: str
    timestamp: datetime
    message: str
    parents: tuple[str, ...]

    @property
    def date(self) -> str:
        return self.timestamp.strftime(_DATE_FORMAT)


@dataclass(frozen=True, slots=True)
class RemoteRef:
    name: str
    url: str


class MergeAnalysis(enum.Enum):
    """Classification of integrating a target commit into HEAD."""

    UP_TO_DATE = "up_to_date"
    FAST_FORWARD = "fast_forward"
    NORMAL = "normal"
    UNKNOWN = "unknown"


@dataclass(frozen=True, slots=True)
class IntegrationResult:
    """Outcome of a successful merge or pull."""

    analysis: MergeAnalysis
    target: str
    head: str
    commit: str | None = None

    @property
    def created_commit(self) -> bool:
        return self.commit is not None


def timestamp_from_epoch(raw: str) -> datetime:
    """Parse a git ``%at`` field into an aware UTC datetime."""
    try:
        seconds = int(raw.strip())
    except ValueError:
        seconds = 0
    return datetime.fromtimestamp(seconds, tz=UTC)


__all__ = [
    "BranchRef",
    "CommandResult",
    "CommitDetail",
    "CommitRecord",
    "IntegrationResult",
    "MergeAnalysis",
    "RemoteRef",
    "StatusEntry",
    "timestamp_from_epoch",
]
