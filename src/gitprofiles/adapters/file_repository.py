"""Filesystem-backed storage for the profile store."""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Callable

from gitprofiles.domain.profiles import (
    ProfileStorageError,
    ProfileStoreDocument,
    isoformat,
    utc_now,
)
from gitprofiles.ports.profile_repository import ProfileRepository


class FileProfileRepository(ProfileRepository):
    """Persist the whole store as one indented JSON document."""

    def __init__(self, path: Path, *, clock: Callable[[], datetime] = utc_now) -> None:
        self._path = path
        self._clock = clock

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> ProfileStoreDocument:
        # a missing file and a corrupted one both start from an empty store
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
            return ProfileStoreDocument.from_dict(raw)
        except (OSError, ValueError):
            return ProfileStoreDocument.empty()

    def save(self, document: ProfileStoreDocument) -> None:
        document.last_modified = isoformat(self._clock())
        payload = document.to_dict()
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(payload, ensure_ascii=False, indent=2) + "\n", encoding="utf-8")
        except OSError as exc:
            raise ProfileStorageError(f"Failed to save profiles to {self._path}: {exc}") from exc


__all__ = ["FileProfileRepository"]
