"""Port definition for the scoped key-value configuration backend."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Tuple

from gitprofiles.domain.profiles import ConfigScope


class ConfigBackendError(RuntimeError):
    """Raised when a single backend command fails."""


class ConfigBackend(ABC):
    """Read/write access to ``local`` (per project) and ``global`` settings.

    ``root`` selects the project for the ``local`` scope and is ignored for
    ``global``. Each call succeeds or raises ``ConfigBackendError`` on its
    own; there is no multi-key transaction.
    """

    @abstractmethod
    def list(self, scope: ConfigScope, root: Path | None = None) -> List[Tuple[str, str]]:
        """Return ``(key, value)`` pairs; raise if the scope is unavailable."""

    @abstractmethod
    def set(self, scope: ConfigScope, key: str, value: str, root: Path | None = None) -> None:
        """Write ``value`` as the only value of ``key``."""

    @abstractmethod
    def unset(self, scope: ConfigScope, key: str, root: Path | None = None) -> None:
        """Remove every value of ``key``."""


__all__ = ["ConfigBackend", "ConfigBackendError"]
