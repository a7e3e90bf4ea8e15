"""Runtime settings for the gitprofiles CLI."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

import yaml

from gitprofiles import __version__

HOME_ENV = "GITPROFILES_HOME"
TELEMETRY_ENV = "GITPROFILES_TELEMETRY"
CONFIG_FILENAME = "config.yaml"

DISABLE_VALUES = frozenset({"0", "false", "no", "off"})


@dataclass(frozen=True)
class RuntimeSettings:
    home_dir: Path
    state_dir: Path
    log_dir: Path
    git_executable: str = "git"
    telemetry_enabled: bool = True
    cli_version: str = __version__

    @property
    def fallback_store_file(self) -> Path:
        return self.state_dir / "profiles.json"

    @property
    def config_file(self) -> Path:
        return self.home_dir / CONFIG_FILENAME


def _default_home_dir() -> Path:
    override = os.environ.get(HOME_ENV, "").strip()
    if override:
        return Path(override).expanduser()
    return Path.home() / ".gitprofiles"


def _load_config_file(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid {path.name}: root must be a mapping")
    return data


def _telemetry_flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() not in DISABLE_VALUES
    return bool(value)


def load_settings(home_dir: Path | None = None) -> RuntimeSettings:
    base = home_dir or _default_home_dir()
    config = _load_config_file(base / CONFIG_FILENAME)
    telemetry = _telemetry_flag(config.get("telemetry", True))
    env_value = os.environ.get(TELEMETRY_ENV)
    if env_value is not None and env_value.strip().lower() in DISABLE_VALUES:
        telemetry = False
    return RuntimeSettings(
        home_dir=base,
        state_dir=base / "state",
        log_dir=base / "logs",
        git_executable=str(config.get("git_executable") or "git"),
        telemetry_enabled=telemetry,
    )


SETTINGS = load_settings()
