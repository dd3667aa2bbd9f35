"""
gitdeck engine public API.

File: src/gitdeck/engine/__init__.py

Purpose
- Export the workflow engine, its read projections and its typed failures.
- Keep Textual and configuration out of the import graph.
"""

from gitdeck.engine.errors import (
    AlreadyExistsError,
    BackendFailure,
    GitCommandError,
    GitDeckError,
    InvalidOperationError,
    MergeConflictError,
    NotFoundError,
    RepositoryNotFoundError,
    UnknownMergeAnalysisError,
)
from gitdeck.engine.models import (
    BranchRef,
    CommandResult,
    CommitDetail,
    CommitRecord,
    IntegrationResult,
    MergeAnalysis,
    RemoteRef,
    StatusEntry,
)
from gitdeck.engine.repository import RepositoryHandle, open_repository, run_git
from gitdeck.engine.workflow import WorkflowEngine, parse_porcelain_status

__all__ = [
    "AlreadyExistsError",
    "BackendFailure",
    "BranchRef",
    "CommandResult",
    "CommitDetail",
    "CommitRecord",
    "GitCommandError",
    "GitDeckError",
    "IntegrationResult",
    "InvalidOperationError",
    "MergeAnalysis",
    "MergeConflictError",
    "NotFoundError",
    "RemoteRef",
    "RepositoryHandle",
    "RepositoryNotFoundError",
    "StatusEntry",
    "UnknownMergeAnalysisError",
    "WorkflowEngine",
    "open_repository",
    "parse_porcelain_status",
    "run_git",
]
