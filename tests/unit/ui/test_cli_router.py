"""
gitdeck — unit tests for the CLI router and exit-code contract.

File: tests/unit/ui/test_cli_router.py

Purpose
- Validate argument routing, command output, and the mapping of failures onto exit codes.
"""

from __future__ import annotations

import json
import subprocess
from typing import TYPE_CHECKING, Any

import pytest

from gitdeck import main as main_module
from gitdeck.config import ConfigValidationError, ConfigValidationIssue
from gitdeck.engine import BackendFailure
from gitdeck.main import ExitCode, cli_entrypoint
from gitdeck.ui import cli as cli_module
from gitdeck.ui.cli import build_parser, run_cli

if TYPE_CHECKING:
    from pathlib import Path

pytestmark = pytest.mark.unit


def _git(cwd: Path, *args: str) -> str:
    completed = subprocess.run(["git", *args], cwd=cwd, text=True, capture_output=True, check=True)
    return completed.stdout.strip()


def _commit(worktree: Path, name: str, content: str, message: str) -> str:
    (worktree / name).write_text(content, encoding="utf-8")
    _git(worktree, "add", name)
    _git(worktree, "-c", "commit.gpgsign=false", "commit", "--quiet", "-m", message)
    return _git(worktree, "rev-parse", "HEAD")


@pytest.fixture()
def repo(tmp_path: Path) -> Path:
    worktree = tmp_path / "repo"
    worktree.mkdir()
    _git(worktree, "init", "--quiet", "--initial-branch=main")
    _commit(worktree, "README.md", "root\n", "root")
    return worktree


def _run(repo: Path, *args: str) -> int:
    return run_cli(["--repo", str(repo), *args])


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


class TestParser:
    def test_no_command_opens_shell(self) -> None:
        namespace = build_parser().parse_args([])

        assert namespace.handler is cli_module._cmd_tui
        assert getattr(namespace, "repo", None) is None

    def test_common_options_accepted_before_or_after_command(self) -> None:
        parser = build_parser()

        before = parser.parse_args(["--repo", "/r", "--no-color", "tui"])
        after = parser.parse_args(["tui", "--repo", "/r", "--no-color"])

        for namespace in (before, after):
            assert namespace.repo == "/r"
            assert namespace.no_color is True
            assert namespace.handler is cli_module._cmd_tui

    def test_pull_remote_is_optional(self) -> None:
        parser = build_parser()

        explicit = parser.parse_args(["pull", "upstream", "main"])
        implicit = parser.parse_args(["pull", "main"])

        assert (explicit.remote, explicit.branch) == ("upstream", "main")
        assert (implicit.remote, implicit.branch) == (None, "main")

    def test_unknown_command_is_usage_error(self) -> None:
        with pytest.raises(SystemExit) as excinfo:
            build_parser().parse_args(["frobnicate"])

        assert excinfo.value.code == 2


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


class TestCommands:
    def test_status_of_clean_tree(self, repo: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert _run(repo, "status") == 0

        assert capsys.readouterr().out.strip() == "Nothing to commit, working tree clean."

    def test_status_json(self, repo: Path, capsys: pytest.CaptureFixture[str]) -> None:
        (repo / "new.txt").write_text("new\n", encoding="utf-8")

        assert _run(repo, "status", "--json") == 0

        payload = json.loads(capsys.readouterr().out)
        assert payload["branch"] == "main"
        assert payload["entries"] == [{"code": "??", "path": "new.txt"}]

    def test_branch_lifecycle(self, repo: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert _run(repo, "branch", "create", "feature") == 0
        assert "Branch 'feature' created." in capsys.readouterr().out

        assert _run(repo, "branch", "list", "--json") == 0
        listed = json.loads(capsys.readouterr().out)["branches"]
        assert listed == [
            {"name": "feature", "current": False},
            {"name": "main", "current": True},
        ]

        assert _run(repo, "branch", "switch", "feature") == 0
        assert _git(repo, "symbolic-ref", "--short", "HEAD") == "feature"

        assert _run(repo, "branch", "delete", "main") == 0
        assert _run(repo, "--no-color", "branch", "list") == 0
        assert capsys.readouterr().out.splitlines()[-1] == "* feature"

    def test_add_commit_and_log(self, repo: Path, capsys: pytest.CaptureFixture[str]) -> None:
        (repo / "notes.txt").write_text("notes\n", encoding="utf-8")

        assert _run(repo, "add", "notes.txt") == 0
        assert _run(repo, "commit", "-m", "Add notes") == 0
        output = capsys.readouterr().out
        assert "Staged file 'notes.txt'." in output
        assert "Committed with message: 'Add notes'" in output

        assert _run(repo, "log", "--json", "--limit", "1") == 0
        commits = json.loads(capsys.readouterr().out)["commits"]
        assert [commit["summary"] for commit in commits] == ["Add notes"]
        assert commits[0]["id"] == _git(repo, "rev-parse", "HEAD")

    def test_merge_fast_forward(self, repo: Path, capsys: pytest.CaptureFixture[str]) -> None:
        _git(repo, "checkout", "--quiet", "-b", "feature")
        tip = _commit(repo, "feature.txt", "B\n", "B")
        _git(repo, "checkout", "--quiet", "main")

        assert _run(repo, "merge", "feature") == 0

        output = capsys.readouterr().out
        assert "Fast-forwarded to 'feature'." in output
        assert _git(repo, "rev-parse", "main") == tip

    def test_merge_conflict_lists_paths(
        self, repo: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        _git(repo, "checkout", "--quiet", "-b", "feature")
        _commit(repo, "README.md", "feature\n", "feature edit")
        _git(repo, "checkout", "--quiet", "main")
        _commit(repo, "README.md", "main\n", "main edit")

        assert _run(repo, "merge", "feature") == 1

        err = capsys.readouterr().err
        assert "error: Merge conflicts detected." in err
        assert "conflict: README.md" in err

    def test_workflow_failure_exits_one(
        self, repo: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        assert _run(repo, "merge", "main") == 1

        assert capsys.readouterr().err.strip() == "error: Cannot merge branch 'main' into itself."

    def test_not_a_repository_exits_one(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        plain = tmp_path / "plain"
        plain.mkdir()

        assert _run(plain, "status") == 1
        assert "Failed to open repository" in capsys.readouterr().err

    def test_remote_push_uses_default_remote(
        self, repo: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        bare = tmp_path / "remote.git"
        bare.mkdir()
        _git(bare, "init", "--quiet", "--bare", "--initial-branch=main")

        assert _run(repo, "remote", "add", "origin", bare.as_posix()) == 0
        assert _run(repo, "push", "main") == 0
        assert _git(bare, "rev-parse", "refs/heads/main") == _git(repo, "rev-parse", "HEAD")

        assert _run(repo, "remote", "list", "--json") == 0
        out = capsys.readouterr().out.splitlines()[-1]
        assert json.loads(out)["remotes"] == [{"name": "origin", "url": bare.as_posix()}]

        assert _run(repo, "remote", "remove", "origin") == 0
        assert _run(repo, "remote", "remove", "origin") == 1

    def test_config_dump(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        config_path = tmp_path / "gitdeck.toml"
        config_path.write_text("[ui]\nmessage_capacity = 7\n", encoding="utf-8")

        assert run_cli(["config", "--config", str(config_path)]) == 0

        dumped = json.loads(capsys.readouterr().out)
        assert dumped["ui"]["message_capacity"] == 7

    def test_config_errors_exit_two(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        assert run_cli(["config", "--config", str(tmp_path / "missing.toml")]) == 2
        assert "config file not found" in capsys.readouterr().err

        bad = tmp_path / "bad.toml"
        bad.write_text("[ui]\nmessage_capacity = 0\n", encoding="utf-8")
        assert run_cli(["status", "--config", str(bad)]) == 2
        assert "ui.message_capacity" in capsys.readouterr().err

    def test_tui_receives_effective_config(
        self, repo: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        captured: dict[str, Any] = {}

        def fake_run_tui(config: dict[str, Any], *, engine: object = None) -> int:
            captured["config"] = config
            captured["engine"] = engine
            return 0

        monkeypatch.setattr("gitdeck.ui.tui.run_tui", fake_run_tui)

        assert run_cli(["tui", "--repo", str(repo), "--no-color"]) == 0

        assert captured["config"]["ui"]["no_color"] is True
        assert captured["config"]["repository"]["path"] == repo.resolve().as_posix()
        assert captured["engine"].repo_path.as_posix() == repo.resolve().as_posix()


# ---------------------------------------------------------------------------
# Entrypoint exit codes
# ---------------------------------------------------------------------------


class TestEntrypoint:
    def test_success_passthrough(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(cli_module, "run_cli", lambda argv: 0)

        assert cli_entrypoint([]) == ExitCode.SUCCESS

    @pytest.mark.parametrize(
        ("error", "expected"),
        [
            (BackendFailure("create branch", "x"), ExitCode.WORKFLOW_ERROR),
            (
                ConfigValidationError([ConfigValidationIssue(path="ui", message="bad")]),
                ExitCode.CONFIG_ERROR,
            ),
            (RuntimeError("unexpected"), ExitCode.INTERNAL_ERROR),
        ],
    )
    def test_exceptions_are_routed(
        self,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
        error: Exception,
        expected: ExitCode,
    ) -> None:
        def boom(argv: object) -> int:
            raise error

        monkeypatch.setattr(cli_module, "run_cli", boom)

        assert cli_entrypoint([]) == expected
        err = capsys.readouterr().err
        if expected is ExitCode.INTERNAL_ERROR:
            assert "Traceback" in err
        else:
            assert err.startswith("error: ")

    def test_wrapped_workflow_error_is_found_in_chain(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def boom(argv: object) -> int:
            try:
                raise BackendFailure("read status")
            except BackendFailure as exc:
                raise RuntimeError("wrapped") from exc

        monkeypatch.setattr(cli_module, "run_cli", boom)

        assert cli_entrypoint([]) == ExitCode.WORKFLOW_ERROR

    def test_usage_error_exits_two(self) -> None:
        assert cli_entrypoint(["no-such-command"]) == ExitCode.CONFIG_ERROR

    def test_unexpected_exit_codes_are_internal(self) -> None:
        assert main_module._normalize_exit_code(9) == ExitCode.INTERNAL_ERROR
        assert main_module._normalize_exit_code(None) == ExitCode.SUCCESS
