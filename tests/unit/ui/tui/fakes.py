"""In-memory stand-in for the workflow engine used by shell tests."""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

from gitdeck.engine import (
    AlreadyExistsError,
    BranchRef,
    CommitDetail,
    CommitRecord,
    InvalidOperationError,
    NotFoundError,
    StatusEntry,
)

EPOCH = datetime(2026, 1, 2, 3, 4, 5, tzinfo=UTC)


class FakeEngine:
    """Records every call; branch and staging behavior mirror the real engine's contract."""

    def __init__(
        self,
        *,
        status: list[StatusEntry] | None = None,
        branches: list[str] | None = None,
        current: str | None = "main",
        commits: list[CommitRecord] | None = None,
    ) -> None:
        self.repo_path = Path("/fake/repo")
        self.status = list(status or [])
        self.branches = list(branches if branches is not None else ["main"])
        self.current = current
        self.commits = list(commits or [])
        self.calls: list[tuple[str, object]] = []
        self.fail_with: Exception | None = None

    def _record(self, name: str, argument: object = None) -> None:
        self.calls.append((name, argument))
        if self.fail_with is not None:
            raise self.fail_with

    def status_entries(self) -> list[StatusEntry]:
        self._record("status_entries")
        return list(self.status)

    def add_files(self, files: list[str]) -> tuple[str, ...]:
        self._record("add_files", tuple(files))
        return tuple(files)

    def list_branches(self) -> list[BranchRef]:
        self._record("list_branches")
        return [BranchRef(name=name, is_current=name == self.current) for name in self.branches]

    def create_branch(self, name: str) -> BranchRef:
        self._record("create_branch", name)
        if name in self.branches:
            raise AlreadyExistsError(f"Branch '{name}' already exists.")
        self.branches.append(name)
        self.branches.sort()
        return BranchRef(name=name, is_current=False)

    def delete_branch(self, name: str) -> None:
        self._record("delete_branch", name)
        if name == self.current:
            raise InvalidOperationError(f"Cannot delete the current active branch '{name}'.")
        if name not in self.branches:
            raise NotFoundError(f"Branch '{name}' not found.")
        self.branches.remove(name)

    def switch_branch(self, name: str) -> str:
        self._record("switch_branch", name)
        if name not in self.branches:
            raise NotFoundError(f"Branch '{name}' not found.")
        self.current = name
        return "0" * 40

    def commit_changes(self, message: str) -> str:
        self._record("commit_changes", message)
        return "c" * 40

    def list_commits(self) -> list[CommitRecord]:
        self._record("list_commits")
        return list(self.commits)

    def commit_detail(self, commit_id: str) -> CommitDetail:
        self._record("commit_detail", commit_id)
        for commit in self.commits:
            if commit.id == commit_id:
                return CommitDetail(
                    id=commit.id,
                    author=commit.author,
                    timestamp=commit.timestamp,
                    message=f"{commit.summary}\n\nBody.",
                    parents=commit.parents,
                )
        raise NotFoundError(f"Failed to find commit '{commit_id}'.")


def make_commit(index: int, summary: str, *parents: str) -> CommitRecord:
    return CommitRecord(
        id=f"{index:040x}",
        author="Ada",
        timestamp=EPOCH,
        summary=summary,
        parents=tuple(parents),
    )


__all__ = ["EPOCH", "FakeEngine", "make_commit"]
