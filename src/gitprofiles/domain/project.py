"""Project root discovery and store placement."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


PROJECT_DIR = ".gitprofiles"
STORE_FILENAME = "profiles.json"
VCS_MARKER = ".git"


def find_project_root(start: Path) -> Path | None:
    """Return the closest ancestor of ``start`` that holds a ``.git`` entry."""

    current = start.expanduser().resolve()
    for candidate in (current, *current.parents):
        if (candidate / VCS_MARKER).exists():
            return candidate
    return None


@dataclass(frozen=True)
class ProjectId:
    """Identifier of a git working tree (its root path)."""

    root: Path

    @classmethod
    def for_path(cls, path: Path) -> "ProjectId":
        return cls(root=path.expanduser().resolve())

    def store_path(self) -> Path:
        return self.root / PROJECT_DIR / STORE_FILENAME


def resolve_store_path(project_root: Path | None, fallback: Path) -> Path:
    """Project-local store when a root is known, otherwise the fallback file."""

    if project_root is None:
        return fallback
    return ProjectId.for_path(project_root).store_path()
