"""Tests for configuration loading."""

from __future__ import annotations

import pytest

from k8s_cluster_check.config.settings import CONFIG_FILE_ENV, ConfigError, Settings, load_settings

_ENV_VARS = [
    "CHECK_K8S_CONTEXT",
    "CHECK_K8S_REQUEST_TIMEOUT",
    "CHECK_K8S_RESTART_THRESHOLD",
    "CHECK_K8S_RESTART_WINDOW_HOURS",
    "CHECK_K8S_TOP_PODS",
    "CHECK_K8S_RECENT_EVENTS",
    "CHECK_K8S_CLEANUP_COMPLETED",
    "CHECK_K8S_REPORT_WIDTH",
    "CHECK_K8S_LOG_LEVEL",
    CONFIG_FILE_ENV,
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    s = load_settings()
    assert s.context is None
    assert s.restart_threshold == 10
    assert s.restart_window_seconds == 2 * 86400
    assert s.top_pods == 6
    assert s.recent_events == 5
    assert s.cleanup_completed is True
    assert s.log_level == "WARNING"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("CHECK_K8S_CONTEXT", "prod")
    monkeypatch.setenv("CHECK_K8S_RESTART_THRESHOLD", "20")
    monkeypatch.setenv("CHECK_K8S_CLEANUP_COMPLETED", "no")
    s = load_settings()
    assert s.context == "prod"
    assert s.restart_threshold == 20
    assert s.cleanup_completed is False


def test_invalid_environment_value(monkeypatch):
    monkeypatch.setenv("CHECK_K8S_TOP_PODS", "six")
    with pytest.raises(ConfigError, match="CHECK_K8S_TOP_PODS"):
        load_settings()


def test_yaml_file_overrides_env(monkeypatch, tmp_path):
    path = tmp_path / "check.yaml"
    path.write_text("restart_threshold: 25\ncleanup_completed: false\n", encoding="utf-8")
    monkeypatch.setenv("CHECK_K8S_TOP_PODS", "3")
    monkeypatch.setenv(CONFIG_FILE_ENV, str(path))
    s = load_settings()
    assert s.restart_threshold == 25
    assert s.cleanup_completed is False
    assert s.top_pods == 3


def test_yaml_file_rejects_unknown_keys(monkeypatch, tmp_path):
    path = tmp_path / "check.yaml"
    path.write_text("restart_treshold: 25\n", encoding="utf-8")
    monkeypatch.setenv(CONFIG_FILE_ENV, str(path))
    with pytest.raises(ConfigError, match="restart_treshold"):
        load_settings()


def test_missing_yaml_file(monkeypatch, tmp_path):
    monkeypatch.setenv(CONFIG_FILE_ENV, str(tmp_path / "absent.yaml"))
    with pytest.raises(ConfigError):
        load_settings()


@pytest.mark.parametrize(
    "overrides",
    [{"request_timeout": 0}, {"top_pods": -1}, {"restart_threshold": "ten"}, {"cleanup_completed": "yes"}],
)
def test_invalid_values_rejected(overrides):
    with pytest.raises(ConfigError):
        Settings(**overrides)


@pytest.mark.parametrize(
    ("content", "field"),
    [
        ("log_level: 10\n", "log_level"),
        ("log_level:\n", "log_level"),
        ("log_level: LOUD\n", "log_level"),
        ("context: 42\n", "context"),
    ],
)
def test_yaml_file_rejects_bad_string_fields(monkeypatch, tmp_path, content, field):
    path = tmp_path / "check.yaml"
    path.write_text(content, encoding="utf-8")
    monkeypatch.setenv(CONFIG_FILE_ENV, str(path))
    with pytest.raises(ConfigError, match=field):
        load_settings()


def test_log_level_is_normalised(monkeypatch):
    monkeypatch.setenv("CHECK_K8S_LOG_LEVEL", "debug")
    assert load_settings().log_level == "DEBUG"


def test_null_context_is_allowed(monkeypatch, tmp_path):
    path = tmp_path / "check.yaml"
    path.write_text("context:\n", encoding="utf-8")
    monkeypatch.setenv(CONFIG_FILE_ENV, str(path))
    assert load_settings().context is None
