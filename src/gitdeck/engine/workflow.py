"""Workflow engine: user intents turned into git operations.

Every public method opens a fresh :class:`RepositoryHandle`, performs one
operation and releases the handle. Merge and pull share one classify-and-apply
routine (:meth:`WorkflowEngine._integrate`) so the two entry points cannot drift
apart.
"""

from __future__ import annotations

import logging
from contextlib import AbstractContextManager, contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

from gitdeck.engine.errors import (
    AlreadyExistsError,
    BackendFailure,
    GitCommandError,
    InvalidOperationError,
    MergeConflictError,
    NotFoundError,
    UnknownMergeAnalysisError,
)
from gitdeck.engine.models import (
    BranchRef,
    CommitDetail,
    CommitRecord,
    IntegrationResult,
    MergeAnalysis,
    RemoteRef,
    StatusEntry,
    timestamp_from_epoch,
)
from gitdeck.engine.repository import RepositoryHandle, open_repository

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping, Sequence

logger = logging.getLogger(__name__)

_FIELD_SEP = "\x1f"
_RECORD_SEP = "\x1e"
_LOG_FORMAT = _FIELD_SEP.join(("%H", "%an", "%at", "%P", "%s")) + _RECORD_SEP
_DETAIL_FORMAT = _FIELD_SEP.join(("%H", "%an", "%at", "%P", "%B"))
_UNMERGED_CODES = frozenset({"DD", "AU", "UD", "UA", "DU", "AA", "UU"})


@contextmanager
def _backend(action: str, subject: str | None = None) -> Iterator[None]:
    """Translate git subprocess failures into ``BackendFailure`` for ``action``."""
    try:
        yield
    except GitCommandError as exc:
        detail = exc.stderr.strip() or exc.stdout.strip() or str(exc)
        raise BackendFailure(action, subject, detail=detail) from exc


class WorkflowEngine:
    """Branch, staging, commit, merge and remote workflows for one working tree."""

    def __init__(
        self,
        repo_path: Path | str = ".",
        *,
        env_overrides: Mapping[str, str] | None = None,
    ) -> None:
        self.repo_path = Path(repo_path)
        self._env_overrides = dict(env_overrides or {})

    def _open(self) -> AbstractContextManager[RepositoryHandle]:
        return open_repository(self.repo_path, env_overrides=self._env_overrides)

    # ------------------------------------------------------------------
    # Branch lifecycle
    # ------------------------------------------------------------------

    def create_branch(self, name: str) -> BranchRef:
        """Create ``name`` at the commit HEAD resolves to, without switching to it."""
        name = _require_name(name, what="Branch name")
        with self._open() as repo:
            _check_branch_name(repo, name)
            if repo.branch_exists(name):
                raise AlreadyExistsError(f"Branch '{name}' already exists.")
            if repo.head is None:
                raise InvalidOperationError(
                    f"Cannot create branch '{name}': the repository has no commits yet."
                )
            with _backend("create branch", name):
                repo.run(["branch", "--no-track", name, repo.head])

        logger.info("created branch", extra={"branch": name})
        return BranchRef(name=name, is_current=False)

    def delete_branch(self, name: str) -> None:
        """Delete local branch ``name``; the checked-out branch is never deleted."""
        name = _require_name(name, what="Branch name")
        with self._open() as repo:
            if name == repo.current_branch():
                raise InvalidOperationError(f"Cannot delete the current active branch '{name}'.")
            if not repo.branch_exists(name):
                raise NotFoundError(f"Branch '{name}' not found.")
            with _backend("delete branch", name):
                repo.run(["branch", "-D", name])

        logger.info("deleted branch", extra={"branch": name})

    def switch_branch(self, name: str) -> str:
        """Point HEAD at ``name`` and force the working tree to match it."""
        name = _require_name(name, what="Branch name")
        with self._open() as repo:
            target = repo.resolve(f"refs/heads/{name}")
            if target is None:
                raise NotFoundError(f"Branch '{name}' not found.")
            with _backend("checkout branch", name):
                repo.run(["checkout", "--force", "--quiet", name, "--"])

        logger.info("switched branch", extra={"branch": name, "commit": target})
        return target

    def current_branch(self) -> str | None:
        with self._open() as repo:
            return repo.current_branch()

    def list_branches(self) -> list[BranchRef]:
        """Return local branches ordered by name, marking the checked-out one."""
        with self._open() as repo, _backend("list branches"):
            output = repo.run(
                ["for-each-ref", f"--format=%(HEAD){_FIELD_SEP}%(refname)", "refs/heads/"]
            ).stdout

        branches: list[BranchRef] = []
        for line in output.splitlines():
            marker, _, refname = line.partition(_FIELD_SEP)
            if not refname.startswith("refs/heads/"):
                continue
            branches.append(
                BranchRef(name=refname[len("refs/heads/") :], is_current=marker.strip() == "*")
            )
        return branches

    # ------------------------------------------------------------------
    # Staging and committing
    # ------------------------------------------------------------------

    def add_files(self, files: Sequence[str]) -> tuple[str, ...]:
        """Stage each path in ``files`` into the index."""
        paths = tuple(files)
        if not paths:
            raise InvalidOperationError("No files to stage.")
        with self._open() as repo:
            for path in paths:
                with _backend("add file", path):
                    repo.run(["add", "--", path])

        logger.info("staged files", extra={"paths": list(paths)})
        return paths

    def commit_changes(self, message: str) -> str:
        """Commit the index on top of HEAD, or as a root commit when HEAD is unborn."""
        title = message.strip()
        if not title:
            raise InvalidOperationError("Commit message cannot be empty.")

        with self._open() as repo:
            with _backend("read index"):
                indexed = repo.run(["ls-files", "--cached", "-z"]).stdout
            if not indexed:
                raise InvalidOperationError("No changes to commit.")
            if repo.resolve("MERGE_HEAD") is not None:
                raise InvalidOperationError(
                    "A merge is in progress; finish or abort it with git before committing."
                )

            with _backend("write tree"):
                tree = repo.run(["write-tree"]).stdout.strip()

            parent_args = ["-p", repo.head] if repo.head is not None else []
            with _backend("create commit"):
                commit = repo.run(
                    ["commit-tree", tree, *parent_args, "-F", "-"], input_text=title + "\n"
                ).stdout.strip()

            summary = title.splitlines()[0]
            reflog = f"commit: {summary}" if repo.head else f"commit (initial): {summary}"
            with _backend("update HEAD"):
                repo.run(["update-ref", "-m", reflog, "HEAD", commit, repo.head or ""])

        logger.info("created commit", extra={"commit": commit, "summary": summary})
        return commit

    # ------------------------------------------------------------------
    # Merge / pull
    # ------------------------------------------------------------------

    def analyze_merge(self, target: str) -> MergeAnalysis:
        """Classify integrating ``target`` into HEAD without touching the repository."""
        with self._open() as repo:
            target_id = repo.resolve(target)
            if target_id is None:
                raise NotFoundError(f"Revision '{target}' not found.")
            return _classify(repo, target_id)

    def merge_branch(self, name: str) -> IntegrationResult:
        """Merge local branch ``name`` into the checked-out branch."""
        name = _require_name(name, what="Branch name")
        with self._open() as repo:
            current = repo.current_branch()
            if name == current:
                raise InvalidOperationError(f"Cannot merge branch '{name}' into itself.")
            target = repo.resolve(f"refs/heads/{name}")
            if target is None:
                raise NotFoundError(f"Branch '{name}' not found.")
            return self._integrate(repo, target, label=name, message=f"Merge branch '{name}'")

    def pull_branch(self, remote: str, branch: str) -> IntegrationResult:
        """Fetch ``branch`` from ``remote`` and integrate the fetched tip into HEAD."""
        remote = _require_name(remote, what="Remote name")
        branch = _require_name(branch, what="Branch name")
        tracking_ref = f"refs/remotes/{remote}/{branch}"
        with self._open() as repo:
            if not repo.remote_exists(remote):
                raise NotFoundError(f"Remote '{remote}' not found.")
            with _backend(f"fetch branch '{branch}' from remote", remote):
                repo.run(
                    ["fetch", "--no-tags", remote, f"+refs/heads/{branch}:{tracking_ref}"]
                )
            target = repo.resolve(tracking_ref)
            if target is None:
                raise NotFoundError(f"Branch '{branch}' not found on remote '{remote}'.")
            return self._integrate(
                repo,
                target,
                label=f"{remote}/{branch}",
                message=f"Pull from {remote}/{branch}",
            )

    def _integrate(
        self,
        repo: RepositoryHandle,
        target: str,
        *,
        label: str,
        message: str,
    ) -> IntegrationResult:
        current = repo.current_branch()
        if current is None:
            raise InvalidOperationError("HEAD is detached; check out a branch first.")

        analysis = _classify(repo, target)
        logger.info(
            "merge analysis",
            extra={"source": label, "branch": current, "analysis": analysis.value},
        )

        if analysis is MergeAnalysis.UP_TO_DATE:
            raise InvalidOperationError(f"Branch '{label}' is already up to date.")

        if analysis is MergeAnalysis.FAST_FORWARD:
            _fast_forward(repo, current, target, label=label)
            return IntegrationResult(analysis=analysis, target=target, head=target)

        if analysis is MergeAnalysis.NORMAL:
            commit = _three_way_merge(repo, target, label=label, message=message)
            return IntegrationResult(analysis=analysis, target=target, head=commit, commit=commit)

        raise UnknownMergeAnalysisError("Merge analysis returned unknown status.")

    # ------------------------------------------------------------------
    # Remotes
    # ------------------------------------------------------------------

    def add_remote(self, name: str, url: str) -> RemoteRef:
        name = _require_name(name, what="Remote name")
        url = _require_name(url, what="Remote URL")
        with self._open() as repo:
            if repo.remote_exists(name):
                raise AlreadyExistsError(f"Remote '{name}' already exists.")
            with _backend(f"add remote with URL '{url}' as", name):
                repo.run(["remote", "add", name, url])

        logger.info("added remote", extra={"remote": name})
        return RemoteRef(name=name, url=url)

    def remove_remote(self, name: str) -> None:
        name = _require_name(name, what="Remote name")
        with self._open() as repo:
            if not repo.remote_exists(name):
                raise NotFoundError(f"Remote '{name}' not found.")
            with _backend("remove remote", name):
                repo.run(["remote", "remove", name])

        logger.info("removed remote", extra={"remote": name})

    def list_remotes(self) -> list[RemoteRef]:
        with self._open() as repo, _backend("list remotes"):
            output = repo.run(["remote", "-v"]).stdout

        remotes: dict[str, str] = {}
        for line in output.splitlines():
            parts = line.split()
            if len(parts) >= 2 and parts[0] not in remotes:
                remotes[parts[0]] = parts[1]
        return [RemoteRef(name=name, url=url) for name, url in remotes.items()]

    def push_branch(self, remote: str, branch: str) -> None:
        """Push ``refs/heads/<branch>`` to the same-named ref on ``remote``."""
        remote = _require_name(remote, what="Remote name")
        branch = _require_name(branch, what="Branch name")
        with self._open() as repo:
            if not repo.remote_exists(remote):
                raise NotFoundError(f"Remote '{remote}' not found.")
            if not repo.branch_exists(branch):
                raise NotFoundError(f"Branch '{branch}' not found.")
            refspec = f"refs/heads/{branch}:refs/heads/{branch}"
            with _backend(f"push branch '{branch}' to remote", remote):
                repo.run(["push", "--quiet", remote, refspec])

        logger.info("pushed branch", extra={"branch": branch, "remote": remote})

    # ------------------------------------------------------------------
    # Read projections
    # ------------------------------------------------------------------

    def status_entries(self) -> list[StatusEntry]:
        """Return working-tree status, one entry per changed or untracked path."""
        with self._open() as repo, _backend("read status"):
            output = repo.run(
                ["status", "--porcelain=v1", "-z", "--untracked-files=all"]
            ).stdout
        return parse_porcelain_status(output)

    def list_commits(self) -> list[CommitRecord]:
        """Walk history from HEAD in commit-time order, oldest first."""
        with self._open() as repo:
            if repo.head is None:
                return []
            with _backend("walk history"):
                output = repo.run(
                    ["log", "--date-order", "--reverse", f"--format={_LOG_FORMAT}", repo.head]
                ).stdout

        records: list[CommitRecord] = []
        for chunk in output.split(_RECORD_SEP):
            chunk = chunk.strip("\n")
            if not chunk:
                continue
            commit_id, author, epoch, parents, summary = (chunk.split(_FIELD_SEP) + [""] * 5)[:5]
            records.append(
                CommitRecord(
                    id=commit_id,
                    author=author or "Unknown",
                    timestamp=timestamp_from_epoch(epoch),
                    summary=summary,
                    parents=tuple(parents.split()),
                )
            )
        return records

    def commit_detail(self, commit_id: str) -> CommitDetail:
        with self._open() as repo:
            resolved = repo.resolve(commit_id) if commit_id.strip() else None
            if resolved is None:
                raise NotFoundError(f"Failed to find commit '{commit_id}'.")
            with _backend("read commit", commit_id):
                output = repo.run(["show", "-s", f"--format={_DETAIL_FORMAT}", resolved]).stdout

        fields = output.split(_FIELD_SEP, 4)
        fields += [""] * (5 - len(fields))
        return CommitDetail(
            id=fields[0].strip(),
            author=fields[1] or "Unknown",
            timestamp=timestamp_from_epoch(fields[2]),
            message=fields[4].rstrip("\n"),
            parents=tuple(fields[3].split()),
        )


# ----------------------------------------------------------------------
# Merge analysis and application
# ----------------------------------------------------------------------


def _classify(repo: RepositoryHandle, target: str) -> MergeAnalysis:
    head = repo.head
    if head is None:
        return MergeAnalysis.FAST_FORWARD

    with _backend("perform merge analysis"):
        if head == target or repo.is_ancestor(target, head):
            return MergeAnalysis.UP_TO_DATE
        if repo.is_ancestor(head, target):
            return MergeAnalysis.FAST_FORWARD
        if repo.merge_base(head, target) is None:
            return MergeAnalysis.UNKNOWN
    return MergeAnalysis.NORMAL


def _fast_forward(repo: RepositoryHandle, branch: str, target: str, *, label: str) -> None:
    with _backend("fast-forward to", label):
        repo.run(
            [
                "update-ref",
                "-m",
                f"fast-forward: {label}",
                f"refs/heads/{branch}",
                target,
                repo.head or "",
            ]
        )
    with _backend("checkout head after fast-forward"):
        repo.run(["read-tree", "--reset", "-u", "HEAD"])

    logger.info("fast-forwarded", extra={"branch": branch, "commit": target})


def _three_way_merge(repo: RepositoryHandle, target: str, *, label: str, message: str) -> str:
    merged = repo.run(["merge", "--no-ff", "--no-commit", target], check=False)

    conflicts = _unmerged_paths(repo)
    if conflicts:
        logger.warning("merge conflicts", extra={"source": label, "paths": list(conflicts)})
        raise MergeConflictError(
            "Merge conflicts detected. Please resolve them manually.", paths=conflicts
        )
    if merged.returncode != 0:
        detail = merged.stderr.strip() or merged.stdout.strip()
        raise BackendFailure("merge", label, detail=detail)

    with _backend("create merge commit", label):
        repo.run(["commit", "--no-verify", "--quiet", "-F", "-"], input_text=message + "\n")
        commit = repo.run(["rev-parse", "HEAD"]).stdout.strip()

    logger.info("created merge commit", extra={"source": label, "commit": commit})
    return commit


def _unmerged_paths(repo: RepositoryHandle) -> tuple[str, ...]:
    with _backend("list conflicts"):
        output = repo.run(["diff", "--name-only", "--diff-filter=U"], check=False).stdout
    return tuple(line.strip() for line in output.splitlines() if line.strip())


# ----------------------------------------------------------------------
# Helpers
# ----------------------------------------------------------------------


def parse_porcelain_status(output: str) -> list[StatusEntry]:
    """Parse ``git status --porcelain=v1 -z`` output into status entries."""
    entries: list[StatusEntry] = []
    fields = output.split("\0")
    index = 0
    while index < len(fields):
        field = fields[index]
        index += 1
        if len(field) < 4:
            continue
        xy, path = field[:2], field[3:]
        if xy[0] in {"R", "C"}:
            # Renames and copies carry the source path as an extra field.
            index += 1
        code = _status_code(xy)
        if code is None:
            continue
        entries.append(StatusEntry(code=code, path=path))
    return entries


def _status_code(xy: str) -> str | None:
    index_state, tree_state = xy[0], xy[1]
    if xy == "!!":
        return None
    if xy == "??":
        return "??"
    if xy in _UNMERGED_CODES:
        return "U"
    for state in (index_state, tree_state):
        if state in {"A", "M", "D", "R"}:
            return state
        if state == "C":
            return "A"
    return xy.strip() or None


def _require_name(value: str, *, what: str) -> str:
    name = value.strip()
    if not name:
        raise InvalidOperationError(f"{what} cannot be empty.")
    return name


def _check_branch_name(repo: RepositoryHandle, name: str) -> None:
    if name.startswith("-"):
        raise InvalidOperationError(f"Invalid branch name '{name}'.")
    if repo.run(["check-ref-format", "--branch", name], check=False).returncode != 0:
        raise InvalidOperationError(f"Invalid branch name '{name}'.")


__all__ = ["WorkflowEngine", "parse_porcelain_status"]
