"""
gitdeck — unit tests for layered config loading.

File: tests/unit/config/test_loader.py

Purpose
- Validate precedence (defaults < file < env < CLI), path normalization and load errors.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from gitdeck.config import (
    ConfigLoadError,
    ConfigValidationError,
    dump_effective_config,
    load_config,
)

pytestmark = pytest.mark.unit


def _write_config(path: Path, body: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(body, encoding="utf-8")
    return path


def test_defaults_when_no_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)

    config = load_config(environ={})

    assert config["ui"]["tick_interval_ms"] == 250
    assert config["repository"]["path"] == tmp_path.resolve().as_posix()


def test_file_values_override_defaults(tmp_path: Path) -> None:
    config_path = _write_config(
        tmp_path / "cfg" / "gitdeck.toml",
        '[ui]\nmessage_capacity = 42\n\n[git]\nauthor_name = "Ada"\n',
    )

    config = load_config(config_path, environ={})

    assert config["ui"]["message_capacity"] == 42
    assert config["ui"]["tick_interval_ms"] == 250
    assert config["git"]["author_name"] == "Ada"


def test_precedence_env_over_file_and_cli_over_env(tmp_path: Path) -> None:
    config_path = _write_config(tmp_path / "gitdeck.toml", "[ui]\ntick_interval_ms = 500\n")
    environ = {
        "GITDECK_UI_TICK_INTERVAL_MS": "750",
        "GITDECK_UI_NO_COLOR": "yes",
        "GITDECK_GIT_DEFAULT_REMOTE": "upstream",
    }

    from_env = load_config(config_path, environ=environ)
    from_cli = load_config(
        config_path,
        environ=environ,
        cli_overrides={"ui.tick_interval_ms": 1000, "git.default_remote": None},
    )

    assert from_env["ui"]["tick_interval_ms"] == 750
    assert from_env["ui"]["no_color"] is True
    assert from_env["git"]["default_remote"] == "upstream"
    assert from_cli["ui"]["tick_interval_ms"] == 1000
    assert from_cli["git"]["default_remote"] == "upstream"


def test_paths_are_normalized_relative_to_config_file(tmp_path: Path) -> None:
    config_path = _write_config(
        tmp_path / "cfg" / "gitdeck.toml",
        '[repository]\npath = "../work"\n\n[observability]\nlog_dir = "logs"\n',
    )

    config = load_config(config_path, environ={})

    assert config["repository"]["path"] == (tmp_path.resolve() / "work").as_posix()
    assert config["observability"]["log_dir"] == (tmp_path.resolve() / "cfg" / "logs").as_posix()


def test_home_relative_log_dir_is_expanded(tmp_path: Path) -> None:
    config_path = _write_config(tmp_path / "gitdeck.toml", "")

    loaded = load_config(config_path, environ={})

    assert loaded["observability"]["log_dir"] == (
        Path("~/.gitdeck/logs").expanduser().as_posix()
    )


def test_explicit_missing_file_is_load_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigLoadError, match="config file not found"):
        load_config(tmp_path / "nope.toml", environ={})


def test_invalid_toml_is_load_error(tmp_path: Path) -> None:
    config_path = _write_config(tmp_path / "gitdeck.toml", "[ui\n")

    with pytest.raises(ConfigLoadError, match="invalid TOML"):
        load_config(config_path, environ={})


def test_bad_env_values_are_load_errors(tmp_path: Path) -> None:
    config_path = _write_config(tmp_path / "gitdeck.toml", "")

    with pytest.raises(ConfigLoadError, match="must be an integer"):
        load_config(config_path, environ={"GITDECK_UI_MESSAGE_CAPACITY": "many"})
    with pytest.raises(ConfigLoadError, match="must be a boolean"):
        load_config(config_path, environ={"GITDECK_UI_NO_COLOR": "maybe"})


def test_invalid_file_values_fail_validation(tmp_path: Path) -> None:
    config_path = _write_config(tmp_path / "gitdeck.toml", "[ui]\nmessage_capacity = 0\n")

    with pytest.raises(ConfigValidationError, match="ui.message_capacity"):
        load_config(config_path, environ={})


def test_dump_effective_config_is_redacted_json(tmp_path: Path) -> None:
    config_path = _write_config(tmp_path / "gitdeck.toml", '[git]\nauthor_name = "Ada"\n')

    dumped = json.loads(dump_effective_config(load_config(config_path, environ={})))

    assert dumped["git"]["author_name"] == "Ada"
    assert set(dumped) == {"git", "meta", "observability", "repository", "ui"}
