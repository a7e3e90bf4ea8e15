"""Process-local configuration backend."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, List, Tuple

from gitprofiles.domain.profiles import ConfigScope
from gitprofiles.ports.config_backend import ConfigBackend, ConfigBackendError


class InMemoryConfigBackend(ConfigBackend):
    """Keeps values in dictionaries keyed by scope and project root.

    A ``local`` scope is only available for roots registered through
    ``init_local``, mirroring a directory that is not a repository.
    """

    def __init__(self) -> None:
        self._global: Dict[str, str] = {}
        self._local: Dict[str, Dict[str, str]] = {}

    def init_local(self, root: Path, entries: Iterable[Tuple[str, str]] = ()) -> None:
        values = self._local.setdefault(self._root_key(root), {})
        values.update(dict(entries))

    def seed_global(self, entries: Iterable[Tuple[str, str]]) -> None:
        self._global.update(dict(entries))

    def list(self, scope: ConfigScope, root: Path | None = None) -> List[Tuple[str, str]]:
        return list(self._values(scope, root).items())

    def set(self, scope: ConfigScope, key: str, value: str, root: Path | None = None) -> None:
        self._values(scope, root)[key] = value

    def unset(self, scope: ConfigScope, key: str, root: Path | None = None) -> None:
        values = self._values(scope, root)
        if key not in values:
            raise ConfigBackendError(f"key not set: {key}")
        del values[key]

    def _values(self, scope: ConfigScope, root: Path | None) -> Dict[str, str]:
        if ConfigScope.parse(scope) == ConfigScope.GLOBAL:
            return self._global
        if root is None:
            raise ConfigBackendError("local scope requires a project root")
        values = self._local.get(self._root_key(root))
        if values is None:
            raise ConfigBackendError(f"not a repository: {root}")
        return values

    @staticmethod
    def _root_key(root: Path) -> str:
        return str(Path(root).expanduser().resolve())


__all__ = ["InMemoryConfigBackend"]
