from __future__ import annotations

import os
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, Iterator

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
SANDBOX_HOME = ROOT / ".test_place" / "home"
os.environ.setdefault("GITPROFILES_HOME", str(SANDBOX_HOME))
SANDBOX_HOME.mkdir(parents=True, exist_ok=True)
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from gitprofiles.adapters.file_repository import FileProfileRepository  # noqa: E402
from gitprofiles.adapters.memory_backend import InMemoryConfigBackend  # noqa: E402
from gitprofiles.app.profiles import ProfileManager  # noqa: E402
from gitprofiles.domain.profiles import ConfigScope  # noqa: E402
from gitprofiles.ports.config_backend import ConfigBackendError  # noqa: E402
from gitprofiles.settings import RuntimeSettings  # noqa: E402


class TickingClock:
    """Returns a strictly increasing UTC time on every call."""

    def __init__(self, start: datetime | None = None) -> None:
        self._current = start or datetime(2025, 10, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self._current += timedelta(seconds=1)
        return self._current


class FailingBackend(InMemoryConfigBackend):
    """In-memory backend whose ``set``/``unset`` fail for selected keys."""

    def __init__(self, failing_keys: set[str] | None = None) -> None:
        super().__init__()
        self.failing_keys = set(failing_keys or ())
        self.set_calls: list[tuple[str, str, str]] = []

    def set(self, scope, key, value, root=None):  # type: ignore[override]
        self.set_calls.append((ConfigScope.parse(scope).value, key, value))
        if key in self.failing_keys:
            raise ConfigBackendError(f"could not lock config file for {key}")
        super().set(scope, key, value, root)

    def unset(self, scope, key, root=None):  # type: ignore[override]
        if key in self.failing_keys:
            raise ConfigBackendError(f"could not lock config file for {key}")
        super().unset(scope, key, root)


@pytest.fixture()
def runtime_settings(tmp_path: Path) -> RuntimeSettings:
    home = tmp_path / "runtime"
    return RuntimeSettings(
        home_dir=home,
        state_dir=home / "state",
        log_dir=home / "logs",
    )


@pytest.fixture()
def project_root(tmp_path: Path) -> Path:
    root = tmp_path / "repo"
    (root / ".git").mkdir(parents=True)
    return root


@pytest.fixture()
def backend(project_root: Path) -> FailingBackend:
    backend = FailingBackend()
    backend.init_local(project_root)
    return backend


@pytest.fixture()
def store_path(project_root: Path) -> Path:
    return project_root / ".gitprofiles" / "profiles.json"


@pytest.fixture()
def make_manager(
    backend: FailingBackend,
    project_root: Path,
    store_path: Path,
    runtime_settings: RuntimeSettings,
) -> Iterator[Callable[..., ProfileManager]]:
    clock = TickingClock()

    def _factory(**overrides) -> ProfileManager:
        options = {
            "project_root": project_root,
            "settings": runtime_settings,
            "clock": clock,
        }
        options.update(overrides)
        repository = FileProfileRepository(store_path, clock=clock)
        return ProfileManager(repository, options.pop("backend", backend), **options)

    yield _factory


@pytest.fixture()
def manager(make_manager: Callable[..., ProfileManager]) -> ProfileManager:
    return make_manager()


@pytest.fixture()
def git_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point git at a throwaway global config and away from system config."""

    global_config = tmp_path / "global.gitconfig"
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", str(global_config))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    return global_config
