"""``git config`` backed implementation of the configuration backend."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import List, Mapping, Tuple

from gitprofiles.domain.profiles import ConfigScope
from gitprofiles.ports.config_backend import ConfigBackend, ConfigBackendError


def parse_config_listing(output: str) -> List[Tuple[str, str]]:
    """Parse ``git config --list`` output into ``(key, value)`` pairs.

    Only the first ``=`` separates key from value. Lines without ``=``
    (valueless boolean keys) are skipped.
    """

    entries: List[Tuple[str, str]] = []
    for line in output.splitlines():
        if not line.strip() or "=" not in line:
            continue
        key, value = line.split("=", 1)
        entries.append((key.strip(), value.strip()))
    return entries


class GitConfigBackend(ConfigBackend):
    def __init__(
        self,
        executable: str = "git",
        *,
        timeout: float | None = None,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self._executable = executable
        self._timeout = timeout
        self._env = dict(env) if env is not None else None

    def list(self, scope: ConfigScope, root: Path | None = None) -> List[Tuple[str, str]]:
        output = self._run(scope, ["--list"], root)
        return parse_config_listing(output)

    def set(self, scope: ConfigScope, key: str, value: str, root: Path | None = None) -> None:
        self._run(scope, ["--replace-all", key, value], root)

    def unset(self, scope: ConfigScope, key: str, root: Path | None = None) -> None:
        self._run(scope, ["--unset-all", key], root)

    def _run(self, scope: ConfigScope, args: List[str], root: Path | None) -> str:
        scope = ConfigScope.parse(scope)
        if scope == ConfigScope.LOCAL:
            if root is None:
                raise ConfigBackendError("local scope requires a project root")
            cwd: Path | None = root
        else:
            cwd = None
        command = [self._executable, "config", f"--{scope.value}", *args]
        try:
            result = subprocess.run(
                command,
                cwd=cwd,
                env=self._env,
                capture_output=True,
                text=True,
                timeout=self._timeout,
            )
        except FileNotFoundError as exc:
            raise ConfigBackendError(f"git executable not found: {self._executable}") from exc
        except subprocess.TimeoutExpired as exc:
            raise ConfigBackendError(f"git config timed out after {self._timeout}s") from exc
        if result.returncode != 0:
            detail = (result.stderr or "").strip() or f"exit code {result.returncode}"
            raise ConfigBackendError(detail)
        return result.stdout


__all__ = ["GitConfigBackend", "parse_config_listing"]
