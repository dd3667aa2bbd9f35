"""
gitdeck — unit tests for config schema validation.

File: tests/unit/config/test_schema.py

Purpose
- Validate defaults, strict field checks, redaction and git identity mapping.
"""

from __future__ import annotations

import pytest

from gitdeck.config import (
    ConfigValidationError,
    assert_valid_config,
    default_config,
    git_identity_env,
    merge_config,
    redact_config,
    validate_config,
)

pytestmark = pytest.mark.unit


def _with(section: str, **values: object) -> dict[str, object]:
    return merge_config(default_config(), {section: values})


def _issue_paths(config: dict[str, object]) -> list[str]:
    return [issue.path for issue in validate_config(config).issues]


def test_defaults_are_valid() -> None:
    result = validate_config(default_config())

    assert result.is_valid
    assert result.config == default_config()
    assert result.config["ui"]["message_capacity"] == 500
    assert result.config["ui"]["tick_interval_ms"] == 250
    assert result.config["git"]["default_remote"] == "origin"


def test_default_config_returns_independent_copies() -> None:
    first = default_config()
    first["ui"]["message_capacity"] = 1

    assert default_config()["ui"]["message_capacity"] == 500


@pytest.mark.parametrize(
    ("section", "values", "path"),
    [
        ("ui", {"tick_interval_ms": 5}, "ui.tick_interval_ms"),
        ("ui", {"tick_interval_ms": 60_001}, "ui.tick_interval_ms"),
        ("ui", {"message_capacity": 0}, "ui.message_capacity"),
        ("ui", {"no_color": "yes"}, "ui.no_color"),
        ("ui", {"tick_interval_ms": True}, "ui.tick_interval_ms"),
        ("git", {"author_email": "not-an-email"}, "git.author_email"),
        ("git", {"default_remote": "my remote"}, "git.default_remote"),
        ("git", {"default_remote": ""}, "git.default_remote"),
        ("observability", {"log_level": "TRACE"}, "observability.log_level"),
        ("repository", {"path": ""}, "repository.path"),
        ("meta", {"schema_version": 2}, "meta.schema_version"),
    ],
)
def test_invalid_values_report_field_paths(
    section: str, values: dict[str, object], path: str
) -> None:
    assert _issue_paths(_with(section, **values)) == [path]


def test_unknown_and_secret_keys_are_rejected() -> None:
    config = merge_config(
        default_config(),
        {"ui": {"theme": "dark"}, "git": {"password": "hunter2"}},
    )

    issues = {issue.path: issue.message for issue in validate_config(config).issues}

    assert issues == {
        "ui.theme": "unknown field",
        "git.password": "embedded secret values are forbidden",
    }


def test_missing_sections_are_reported() -> None:
    config = default_config()
    del config["observability"]

    assert _issue_paths(config) == ["observability"]


def test_assert_valid_config_raises_with_rendered_issues() -> None:
    with pytest.raises(ConfigValidationError) as excinfo:
        assert_valid_config(_with("ui", message_capacity=0))

    assert str(excinfo.value) == "invalid config:\n- ui.message_capacity: must be >= 1"
    assert excinfo.value.issues[0].path == "ui.message_capacity"


def test_merge_config_is_deep_and_non_destructive() -> None:
    base = default_config()

    merged = merge_config(base, {"ui": {"no_color": True}})

    assert merged["ui"]["no_color"] is True
    assert merged["ui"]["message_capacity"] == 500
    assert base["ui"]["no_color"] is False


def test_redact_config_masks_sensitive_keys() -> None:
    redacted = redact_config({"git": {"author_name": "Ada", "access_token": "abc"}})

    assert redacted == {"git": {"access_token": "<redacted>", "author_name": "Ada"}}


def test_git_identity_env_maps_non_empty_values() -> None:
    assert git_identity_env(default_config()) == {}

    config = _with("git", author_name="Ada Lovelace", author_email="ada@example.com")

    assert git_identity_env(config) == {
        "GIT_AUTHOR_NAME": "Ada Lovelace",
        "GIT_COMMITTER_NAME": "Ada Lovelace",
        "GIT_AUTHOR_EMAIL": "ada@example.com",
        "GIT_COMMITTER_EMAIL": "ada@example.com",
    }
