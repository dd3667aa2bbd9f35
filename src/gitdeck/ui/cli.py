"""Command-line interface router for gitdeck."""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

from gitdeck.config import (
    ConfigLoadError,
    ConfigValidationError,
    dump_effective_config,
    git_identity_env,
    load_config,
)
from gitdeck.engine import GitDeckError, MergeAnalysis, MergeConflictError, WorkflowEngine
from gitdeck.observability import setup_logging, shutdown_logging
from gitdeck.ui.render import CLIRenderer, create_renderer
from gitdeck.ui.tui.views import CLEAN_TREE_TEXT

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from gitdeck.engine import IntegrationResult


@dataclass(frozen=True, slots=True)
class CLIError(RuntimeError):
    """Typed CLI failure with an explicit process exit code."""

    message: str
    exit_code: int = 1

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse command router for the shell and every scripted workflow."""

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--repo",
        default=argparse.SUPPRESS,
        help="Path to the git working tree (default: repository.path from config).",
    )
    common.add_argument(
        "--config",
        dest="config_path",
        default=argparse.SUPPRESS,
        help="Path to gitdeck TOML config (default: ./gitdeck.toml if present).",
    )
    common.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        default=argparse.SUPPRESS,
        help="Mirror structured logs to stderr (non-interactive commands only).",
    )
    common.add_argument(
        "--no-color",
        action="store_true",
        default=argparse.SUPPRESS,
        help="Disable colored output (also respects NO_COLOR env var).",
    )

    parser = argparse.ArgumentParser(
        prog="gitdeck",
        parents=[common],
        description=(
            "gitdeck: interactive terminal front-end for git.\n\n"
            "Common workflows:\n"
            "  gitdeck                     Open the interactive shell\n"
            "  gitdeck status              Show working tree status\n"
            "  gitdeck branch create NAME  Create a branch at HEAD\n"
            "  gitdeck merge NAME          Merge a branch into the current one\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.set_defaults(handler=_cmd_tui)
    subparsers = parser.add_subparsers(dest="command")

    # tui -----------------------------------------------------------------
    tui_parser = subparsers.add_parser(
        "tui", parents=[common], help="Open the interactive shell (default)"
    )
    tui_parser.set_defaults(handler=_cmd_tui)

    # branch --------------------------------------------------------------
    branch_parser = subparsers.add_parser("branch", parents=[common], help="Manage local branches")
    branch_sub = branch_parser.add_subparsers(dest="branch_command", required=True)
    for action, help_text, handler in (
        ("create", "Create a branch at the current HEAD commit", _cmd_branch_create),
        ("delete", "Delete a local branch", _cmd_branch_delete),
        ("switch", "Check out a local branch", _cmd_branch_switch),
    ):
        action_parser = branch_sub.add_parser(action, parents=[common], help=help_text)
        action_parser.add_argument("name")
        action_parser.set_defaults(handler=handler)
    branch_list = branch_sub.add_parser("list", parents=[common], help="List local branches")
    branch_list.add_argument("--json", action="store_true", default=False)
    branch_list.set_defaults(handler=_cmd_branch_list)

    # add -----------------------------------------------------------------
    add_parser = subparsers.add_parser("add", parents=[common], help="Stage files")
    add_parser.add_argument("files", nargs="+", metavar="FILE")
    add_parser.set_defaults(handler=_cmd_add)

    # commit --------------------------------------------------------------
    commit_parser = subparsers.add_parser(
        "commit", parents=[common], help="Commit the staged index on HEAD"
    )
    commit_parser.add_argument("-m", "--message", required=True)
    commit_parser.set_defaults(handler=_cmd_commit)

    # merge / pull / push -------------------------------------------------
    merge_parser = subparsers.add_parser(
        "merge", parents=[common], help="Merge a local branch into the current branch"
    )
    merge_parser.add_argument("name")
    merge_parser.set_defaults(handler=_cmd_merge)

    pull_parser = subparsers.add_parser(
        "pull", parents=[common], help="Fetch a remote branch and integrate it"
    )
    pull_parser.add_argument(
        "remote", nargs="?", default=None, help="Remote name (default: git.default_remote)."
    )
    pull_parser.add_argument("branch")
    pull_parser.set_defaults(handler=_cmd_pull)

    push_parser = subparsers.add_parser(
        "push", parents=[common], help="Push a local branch to the same name on a remote"
    )
    push_parser.add_argument(
        "remote", nargs="?", default=None, help="Remote name (default: git.default_remote)."
    )
    push_parser.add_argument("branch")
    push_parser.set_defaults(handler=_cmd_push)

    # remote --------------------------------------------------------------
    remote_parser = subparsers.add_parser("remote", parents=[common], help="Manage remotes")
    remote_sub = remote_parser.add_subparsers(dest="remote_command", required=True)
    remote_add = remote_sub.add_parser("add", parents=[common], help="Add a named remote")
    remote_add.add_argument("name")
    remote_add.add_argument("url")
    remote_add.set_defaults(handler=_cmd_remote_add)
    remote_remove = remote_sub.add_parser("remove", parents=[common], help="Remove a remote")
    remote_remove.add_argument("name")
    remote_remove.set_defaults(handler=_cmd_remote_remove)
    remote_list = remote_sub.add_parser("list", parents=[common], help="List remotes")
    remote_list.add_argument("--json", action="store_true", default=False)
    remote_list.set_defaults(handler=_cmd_remote_list)

    # log / status / config -----------------------------------------------
    log_parser = subparsers.add_parser("log", parents=[common], help="List commits reachable from HEAD")
    log_parser.add_argument(
        "--limit", type=int, default=None, help="Only show the newest N commits."
    )
    log_parser.add_argument("--json", action="store_true", default=False)
    log_parser.set_defaults(handler=_cmd_log)

    status_parser = subparsers.add_parser("status", parents=[common], help="Show working tree status")
    status_parser.add_argument("--json", action="store_true", default=False)
    status_parser.set_defaults(handler=_cmd_status)

    config_parser = subparsers.add_parser(
        "config", parents=[common], help="Print the effective (redacted) configuration"
    )
    config_parser.set_defaults(handler=_cmd_config)

    return parser


def run_cli(argv: Sequence[str] | None = None) -> int:
    """Parse argv, route to a command handler, and return process exit code."""

    parser = build_parser()
    namespace = parser.parse_args(list(argv) if argv is not None else None)
    handler = getattr(namespace, "handler", None)
    if not callable(handler):
        parser.print_help(sys.stderr)
        return 2

    try:
        result = handler(namespace)
    except CLIError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return exc.exit_code
    except MergeConflictError as exc:
        print(f"error: {exc}", file=sys.stderr)
        for path in exc.paths:
            print(f"  conflict: {path}", file=sys.stderr)
        return 1
    except GitDeckError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    finally:
        shutdown_logging()
    return int(result)


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


def _cmd_tui(args: argparse.Namespace) -> int:
    config = _load_effective_config(args)
    setup_logging(config["observability"])
    engine = _engine(config)
    # Fail before the terminal is taken over when the path is not a repository.
    engine.current_branch()

    from gitdeck.ui.tui import run_tui

    return run_tui(config, engine=engine)


def _cmd_branch_create(args: argparse.Namespace) -> int:
    engine = _prepare(args)
    branch = engine.create_branch(args.name)
    _get_renderer(args).ok(f"Branch '{branch.name}' created.")
    return 0


def _cmd_branch_delete(args: argparse.Namespace) -> int:
    engine = _prepare(args)
    engine.delete_branch(args.name)
    _get_renderer(args).ok(f"Branch '{args.name}' deleted.")
    return 0


def _cmd_branch_switch(args: argparse.Namespace) -> int:
    engine = _prepare(args)
    engine.switch_branch(args.name)
    _get_renderer(args).ok(f"Switched to branch '{args.name}'.")
    return 0


def _cmd_branch_list(args: argparse.Namespace) -> int:
    engine = _prepare(args)
    branches = engine.list_branches()
    if _flag(args, "json"):
        _emit_json(
            {
                "command": "branch list",
                "branches": [
                    {"name": branch.name, "current": branch.is_current} for branch in branches
                ],
            }
        )
        return 0

    renderer = _get_renderer(args)
    for branch in branches:
        renderer.branch_line(branch.name, current=branch.is_current)
    return 0


def _cmd_add(args: argparse.Namespace) -> int:
    engine = _prepare(args)
    staged = engine.add_files(args.files)
    renderer = _get_renderer(args)
    for path in staged:
        renderer.ok(f"Staged file '{path}'.")
    return 0


def _cmd_commit(args: argparse.Namespace) -> int:
    engine = _prepare(args)
    commit_id = engine.commit_changes(args.message)
    renderer = _get_renderer(args)
    renderer.ok(f"Committed with message: '{args.message}'")
    renderer.kv("commit", commit_id)
    return 0


def _cmd_merge(args: argparse.Namespace) -> int:
    engine = _prepare(args)
    result = engine.merge_branch(args.name)
    _render_integration(_get_renderer(args), result, label=args.name)
    return 0


def _cmd_pull(args: argparse.Namespace) -> int:
    config = _load_effective_config(args)
    engine = _prepare(args, config)
    remote = args.remote or config["git"]["default_remote"]
    result = engine.pull_branch(remote, args.branch)
    _render_integration(_get_renderer(args, config), result, label=f"{remote}/{args.branch}")
    return 0


def _cmd_push(args: argparse.Namespace) -> int:
    config = _load_effective_config(args)
    engine = _prepare(args, config)
    remote = args.remote or config["git"]["default_remote"]
    engine.push_branch(remote, args.branch)
    _get_renderer(args, config).ok(f"Pushed '{args.branch}' to '{remote}'.")
    return 0


def _cmd_remote_add(args: argparse.Namespace) -> int:
    engine = _prepare(args)
    remote = engine.add_remote(args.name, args.url)
    _get_renderer(args).ok(f"Remote '{remote.name}' added.")
    return 0


def _cmd_remote_remove(args: argparse.Namespace) -> int:
    engine = _prepare(args)
    engine.remove_remote(args.name)
    _get_renderer(args).ok(f"Remote '{args.name}' removed.")
    return 0


def _cmd_remote_list(args: argparse.Namespace) -> int:
    engine = _prepare(args)
    remotes = engine.list_remotes()
    if _flag(args, "json"):
        _emit_json(
            {
                "command": "remote list",
                "remotes": [{"name": remote.name, "url": remote.url} for remote in remotes],
            }
        )
        return 0

    renderer = _get_renderer(args)
    for remote in remotes:
        renderer.text(f"{remote.name}\t{remote.url}")
    return 0


def _cmd_log(args: argparse.Namespace) -> int:
    engine = _prepare(args)
    commits = engine.list_commits()
    limit = getattr(args, "limit", None)
    if limit is not None:
        if limit < 1:
            raise CLIError("--limit must be >= 1", exit_code=2)
        commits = commits[-limit:]

    if _flag(args, "json"):
        _emit_json(
            {
                "command": "log",
                "commits": [
                    {
                        "id": commit.id,
                        "author": commit.author,
                        "date": commit.date,
                        "summary": commit.summary,
                        "parents": list(commit.parents),
                    }
                    for commit in commits
                ],
            }
        )
        return 0

    renderer = _get_renderer(args)
    for commit in commits:
        renderer.text(f"{commit.id} {commit.author} [{commit.date}] - {commit.summary}")
    return 0


def _cmd_status(args: argparse.Namespace) -> int:
    engine = _prepare(args)
    entries = engine.status_entries()
    if _flag(args, "json"):
        _emit_json(
            {
                "command": "status",
                "branch": engine.current_branch(),
                "entries": [{"code": entry.code, "path": entry.path} for entry in entries],
            }
        )
        return 0

    renderer = _get_renderer(args)
    if not entries:
        renderer.text(CLEAN_TREE_TEXT)
        return 0
    for entry in entries:
        renderer.status_line(entry.code, entry.path)
    return 0


def _cmd_config(args: argparse.Namespace) -> int:
    config = _load_effective_config(args)
    _get_renderer(args, config).text(dump_effective_config(config))
    return 0


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _emit_json(payload: Mapping[str, object]) -> None:
    """Emit a JSON payload to stdout with deterministic formatting."""

    print(json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False))


def _get_renderer(
    args: argparse.Namespace, config: Mapping[str, Any] | None = None
) -> CLIRenderer:
    no_color = _flag(args, "no_color")
    if config is not None:
        no_color = no_color or bool(config["ui"]["no_color"])
    return create_renderer(no_color=no_color)


def _render_integration(renderer: CLIRenderer, result: IntegrationResult, *, label: str) -> None:
    if result.analysis is MergeAnalysis.FAST_FORWARD:
        renderer.ok(f"Fast-forwarded to '{label}'.")
        renderer.kv("head", result.head)
        return
    renderer.ok(f"Merged '{label}'.")
    renderer.kv("commit", result.commit or result.head)


def _load_effective_config(args: argparse.Namespace) -> dict[str, Any]:
    config_path = getattr(args, "config_path", None)
    overrides: dict[str, object] = {}
    repo = getattr(args, "repo", None)
    if repo is not None:
        overrides["repository.path"] = str(Path(repo).expanduser().resolve())
    if _flag(args, "no_color"):
        overrides["ui.no_color"] = True

    try:
        return load_config(config_path, cli_overrides=overrides)
    except (ConfigLoadError, ConfigValidationError) as exc:
        raise CLIError(str(exc), exit_code=2) from exc


def _engine(config: Mapping[str, Any]) -> WorkflowEngine:
    return WorkflowEngine(
        config["repository"]["path"],
        env_overrides=git_identity_env(config),
    )


def _prepare(
    args: argparse.Namespace, config: Mapping[str, Any] | None = None
) -> WorkflowEngine:
    """Load config, start logging for a non-interactive command and build the engine."""

    resolved = config if config is not None else _load_effective_config(args)
    setup_logging(resolved["observability"], log_to_stderr=_flag(args, "verbose"))
    return _engine(resolved)


def _flag(args: argparse.Namespace, name: str) -> bool:
    return bool(getattr(args, name, False))


__all__ = ["CLIError", "build_parser", "run_cli"]
