from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

import pytest

from gitprofiles.adapters.git_config_backend import GitConfigBackend
from gitprofiles.domain.profiles import ConfigItem, ConfigScope

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git executable not available")

MULTI_VALUED_GLOBAL = """\
[safe]
\tdirectory = /a
\tdirectory = /b
[user]
\tname = Grace
"""


@pytest.fixture()
def git_repo(tmp_path: Path, git_env: Path) -> Path:
    git_env.write_text(MULTI_VALUED_GLOBAL, encoding="utf-8")
    repo = tmp_path / "work"
    repo.mkdir()
    subprocess.run(["git", "init", "-q", str(repo)], check=True)
    return repo


@requires_git
def test_snapshot_of_multi_valued_key_compares_clean(make_manager, git_repo: Path) -> None:
    manager = make_manager(backend=GitConfigBackend(), project_root=git_repo)

    profile = manager.create_profile_from_current("Snapshot", "")

    safe = [item.value for item in profile.configs if item.key == "safe.directory"]
    assert safe == ["/a", "/b"]
    assert manager.compare_profiles(profile.id).is_empty()


@requires_git
def test_applying_snapshot_with_multi_valued_key(make_manager, git_repo: Path) -> None:
    backend = GitConfigBackend()
    manager = make_manager(backend=backend, project_root=git_repo)
    profile = manager.create_profile_from_current("Snapshot", "")

    result = manager.apply_profile(profile.id)

    assert result.complete
    assert ("safe.directory", "/b") in backend.list(ConfigScope.GLOBAL)
    assert manager.compare_profiles(profile.id).is_empty()


@requires_git
def test_prune_unsets_multi_valued_key_once(make_manager, git_repo: Path) -> None:
    backend = GitConfigBackend()
    manager = make_manager(backend=backend, project_root=None)
    profile = manager.create_profile("Minimal", "", [ConfigItem("user.name", "Ada", ConfigScope.GLOBAL)])

    result = manager.apply_profile(profile.id, prune=True)

    assert result.complete
    assert result.removed == [ConfigItem("safe.directory", "/b", ConfigScope.GLOBAL)]
    assert backend.list(ConfigScope.GLOBAL) == [("user.name", "Ada")]
    assert manager.compare_profiles(profile.id).is_empty()
