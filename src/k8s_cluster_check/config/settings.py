"""Application configuration and defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

CONFIG_FILE_ENV = "CHECK_K8S_CLUSTER_CONFIG"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}
_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class ConfigError(Exception):
    """Raised when a configuration value cannot be used."""


def _env_str(name: str, default: str | None = None) -> str | None:
    value = os.environ.get(name, "")
    return value if value else default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "")
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from None


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name, "").strip().lower()
    if not raw:
        return default
    if raw in _TRUE_VALUES:
        return True
    if raw in _FALSE_VALUES:
        return False
    raise ConfigError(f"{name} must be a boolean, got {raw!r}")


@dataclass
class Settings:
    context: str | None = field(default_factory=lambda: _env_str("CHECK_K8S_CONTEXT"))
    request_timeout: int = field(default_factory=lambda: _env_int("CHECK_K8S_REQUEST_TIMEOUT", 30))
    restart_threshold: int = field(default_factory=lambda: _env_int("CHECK_K8S_RESTART_THRESHOLD", 10))
    restart_window_hours: int = field(default_factory=lambda: _env_int("CHECK_K8S_RESTART_WINDOW_HOURS", 48))
    top_pods: int = field(default_factory=lambda: _env_int("CHECK_K8S_TOP_PODS", 6))
    recent_events: int = field(default_factory=lambda: _env_int("CHECK_K8S_RECENT_EVENTS", 5))
    cleanup_completed: bool = field(default_factory=lambda: _env_bool("CHECK_K8S_CLEANUP_COMPLETED", True))
    report_width: int = field(default_factory=lambda: _env_int("CHECK_K8S_REPORT_WIDTH", 250))
    log_level: str = field(default_factory=lambda: _env_str("CHECK_K8S_LOG_LEVEL", "WARNING"))

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if f.type == "int" and (not isinstance(value, int) or isinstance(value, bool)):
                raise ConfigError(f"{f.name} must be an integer, got {value!r}")
            if f.type == "bool" and not isinstance(value, bool):
                raise ConfigError(f"{f.name} must be a boolean, got {value!r}")
            if f.type == "str" and not isinstance(value, str):
                raise ConfigError(f"{f.name} must be a string, got {value!r}")
            if f.type == "str | None" and value is not None and not isinstance(value, str):
                raise ConfigError(f"{f.name} must be a string, got {value!r}")
        self.log_level = self.log_level.upper()
        if self.log_level not in _LOG_LEVELS:
            raise ConfigError(f"log_level must be one of {', '.join(_LOG_LEVELS)}, got {self.log_level!r}")
        for name in ("request_timeout", "restart_window_hours", "report_width"):
            if getattr(self, name) <= 0:
                raise ConfigError(f"{name} must be positive")
        for name in ("restart_threshold", "top_pods", "recent_events"):
            if getattr(self, name) < 0:
                raise ConfigError(f"{name} must not be negative")

    @property
    def restart_window_seconds(self) -> int:
        return self.restart_window_hours * 3600

    @classmethod
    def from_file(cls, path: Path) -> Settings:
        """Build settings from a YAML file; keys not present keep their env/default value."""
        try:
            with path.open("r", encoding="utf-8") as fh:
                data = yaml.safe_load(fh) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Could not read config file {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {path} must contain a mapping")
        return cls(**_known_keys(data, path))


def _known_keys(data: dict[str, Any], path: Path) -> dict[str, Any]:
    allowed = {f.name for f in fields(Settings)}
    unknown = sorted(set(data) - allowed)
    if unknown:
        raise ConfigError(f"Unknown key(s) in {path}: {', '.join(unknown)}")
    return data


def load_settings() -> Settings:
    """Resolve settings from the environment and the optional YAML config file."""
    config_file = os.environ.get(CONFIG_FILE_ENV, "")
    if config_file:
        return Settings.from_file(Path(config_file))
    return Settings()
