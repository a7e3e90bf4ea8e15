"""Application service reconciling configuration profiles with a backend."""

from __future__ import annotations

import json
import time
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, Sequence

from gitprofiles.adapters.file_repository import FileProfileRepository
from gitprofiles.adapters.git_config_backend import GitConfigBackend
from gitprofiles.domain.profiles import (
    BackendPartialFailureError,
    ConfigItem,
    ConfigScope,
    ConfigWriteFailure,
    InvalidProfileFormatError,
    NoProjectRootError,
    Profile,
    ProfileComparison,
    ProfileError,
    ProfileNotFoundError,
    ProfileStorageError,
    ProfileTemplate,
    ProfileTemplateNotFoundError,
    coerce_configs,
    compare_configs,
    generate_profile_id,
    icon_for_tags,
    isoformat,
    utc_now,
    validate_profile_payload,
)
from gitprofiles.domain.project import resolve_store_path
from gitprofiles.ports.config_backend import ConfigBackend, ConfigBackendError
from gitprofiles.ports.profile_repository import ProfileRepository
from gitprofiles.resources import load_template_payloads
from gitprofiles.settings import RuntimeSettings
from gitprofiles.utils.telemetry import EventLog, ProfileEvent

MUTABLE_FIELDS = frozenset({"name", "description", "configs", "tags", "icon"})
IMMUTABLE_FIELDS = frozenset({"id", "created", "modified"})


@dataclass(frozen=True)
class ApplyResult:
    profile: Profile
    applied: List[ConfigItem] = field(default_factory=list)
    removed: List[ConfigItem] = field(default_factory=list)
    failures: List[ConfigWriteFailure] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.failures

    def to_dict(self) -> Dict[str, Any]:
        return {
            "profile": self.profile.id,
            "applied": [item.to_dict() for item in self.applied],
            "removed": [item.to_dict() for item in self.removed],
            "failures": [failure.to_dict() for failure in self.failures],
        }


class ProfileManager:
    """CRUD, snapshot, comparison and apply operations over one profile store.

    The store document is loaded once at construction and rewritten in full
    after every mutation. One manager is expected per session; two managers
    writing the same file overwrite each other's changes.
    """

    def __init__(
        self,
        repository: ProfileRepository,
        backend: ConfigBackend,
        *,
        project_root: Path | None = None,
        settings: RuntimeSettings | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._repository = repository
        self._backend = backend
        self._project_root = project_root
        self._settings = settings
        self._clock = clock
        self._document = repository.load()
        self._templates = {template.template_id: template for template in self._load_templates()}

    @property
    def project_root(self) -> Path | None:
        return self._project_root

    def get_all_profiles(self) -> List[Profile]:
        return self._document.profiles

    def get_profile(self, profile_id: str) -> Profile | None:
        return self._document.find(profile_id)

    def require_profile(self, profile_id: str) -> Profile:
        profile = self.get_profile(profile_id)
        if profile is None:
            raise ProfileNotFoundError(profile_id)
        return profile

    def get_active_profile(self) -> Profile | None:
        active_id = self._document.active_profile
        if not active_id:
            return None
        return self.get_profile(active_id)

    def create_profile(
        self,
        name: str,
        description: str,
        configs: Iterable[ConfigItem | Mapping[str, Any]],
        tags: Sequence[str] | None = None,
    ) -> Profile:
        config_items = coerce_configs(configs)
        now = self._clock()
        timestamp = isoformat(now)
        profile = Profile(
            id=self._new_id(now),
            name=name,
            description=description,
            configs=config_items,
            created=timestamp,
            modified=timestamp,
            tags=list(tags) if tags is not None else None,
            icon=icon_for_tags(tags),
        )
        self._document.profiles.append(profile)
        self._persist()
        self._record("profiles.create", profile.id, configs=len(config_items))
        return profile

    def update_profile(self, profile_id: str, **changes: Any) -> Profile:
        """Shallow-merge ``changes`` into the profile.

        ``id``, ``created`` and ``modified`` are ignored if passed; any other
        unknown field is rejected before the profile is touched.
        """

        profile = self.require_profile(profile_id)
        unknown = set(changes) - MUTABLE_FIELDS - IMMUTABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown profile fields: {', '.join(sorted(unknown))}")
        updates = {key: value for key, value in changes.items() if key in MUTABLE_FIELDS}
        if "configs" in updates:
            updates["configs"] = coerce_configs(updates["configs"])
        if "tags" in updates and updates["tags"] is not None:
            updates["tags"] = [str(tag) for tag in updates["tags"]]

        for key, value in updates.items():
            setattr(profile, key, value)
        profile.modified = isoformat(self._clock())
        self._persist()
        self._record("profiles.update", profile.id, fields=sorted(updates))
        return profile

    def delete_profile(self, profile_id: str) -> None:
        index = self._document.index_of(profile_id)
        if index == -1:
            raise ProfileNotFoundError(profile_id)
        del self._document.profiles[index]
        if self._document.active_profile == profile_id:
            self._document.active_profile = None
        self._persist()
        self._record("profiles.delete", profile_id)

    def get_current_configs(self, root: Path | None = None) -> List[ConfigItem]:
        """Read live ``local`` then ``global`` values from the backend.

        A scope the backend cannot list contributes nothing.
        """

        resolved = self._resolve_root(root)
        configs: List[ConfigItem] = []
        if resolved is not None:
            configs.extend(self._list_scope(ConfigScope.LOCAL, resolved))
        configs.extend(self._list_scope(ConfigScope.GLOBAL, None))
        return configs

    def create_profile_from_current(
        self,
        name: str,
        description: str,
        tags: Sequence[str] | None = None,
        root: Path | None = None,
    ) -> Profile:
        current = self.get_current_configs(root)
        return self.create_profile(name, description, current, tags)

    def compare_profiles(self, profile_id: str, root: Path | None = None) -> ProfileComparison:
        profile = self.require_profile(profile_id)
        current = self.get_current_configs(root)
        comparison = compare_configs(profile.configs, current)
        self._record("profiles.compare", profile.id, **comparison.summary())
        return comparison

    def apply_profile(self, profile_id: str, root: Path | None = None, *, prune: bool = False) -> ApplyResult:
        """Write every config of the profile to the backend.

        Failures are collected and raised together as
        ``BackendPartialFailureError`` once all writes were attempted. With
        ``prune`` the keys a comparison reports for removal are unset as well.
        The active pointer moves to this profile even when some writes fail.
        """

        profile = self.require_profile(profile_id)
        resolved = self._resolve_root(root)
        if resolved is None and any(item.scope == ConfigScope.LOCAL for item in profile.configs):
            raise NoProjectRootError(
                f"Profile {profile.id} has local-scope configs but no project root was found"
            )

        to_remove: List[ConfigItem] = []
        if prune:
            to_remove = compare_configs(profile.configs, self.get_current_configs(resolved)).to_remove

        started = time.monotonic()
        applied: List[ConfigItem] = []
        removed: List[ConfigItem] = []
        failures: List[ConfigWriteFailure] = []
        for item in profile.configs:
            try:
                self._backend.set(item.scope, item.key, item.value, self._root_for(item, resolved))
            except ConfigBackendError as exc:
                failures.append(ConfigWriteFailure(item.key, item.scope.value, str(exc), "set"))
            else:
                applied.append(item)
        for item in to_remove:
            try:
                self._backend.unset(item.scope, item.key, self._root_for(item, resolved))
            except ConfigBackendError as exc:
                failures.append(ConfigWriteFailure(item.key, item.scope.value, str(exc), "unset"))
            else:
                removed.append(item)

        self._document.active_profile = profile.id
        self._persist()

        result = ApplyResult(profile=profile, applied=applied, removed=removed, failures=failures)
        self._record(
            "profiles.apply",
            profile.id,
            status="partial" if failures else "ok",
            level="warn" if failures else "info",
            duration_ms=(time.monotonic() - started) * 1000,
            applied=len(applied),
            removed=len(removed),
            failed=len(failures),
            prune=prune,
        )
        if failures:
            raise BackendPartialFailureError(failures, result)
        return result

    def export_profile(self, profile_id: str) -> str:
        profile = self.require_profile(profile_id)
        self._record("profiles.export", profile.id)
        return json.dumps(profile.to_dict(), ensure_ascii=False, indent=2)

    def export_profile_to(self, profile_id: str, path: Path) -> Path:
        text = self.export_profile(profile_id)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text + "\n", encoding="utf-8")
        except OSError as exc:
            raise ProfileStorageError(f"Failed to export profile to {path}: {exc}") from exc
        return path

    def import_profile(self, data: str) -> Profile:
        try:
            payload = json.loads(data)
        except json.JSONDecodeError as exc:
            raise InvalidProfileFormatError([f"invalid JSON: {exc}"]) from exc
        validation = validate_profile_payload(payload)
        if not validation.valid:
            raise InvalidProfileFormatError(validation.errors)

        now = self._clock()
        timestamp = isoformat(now)
        tags = payload.get("tags")
        profile = Profile(
            id=self._new_id(now),
            name=payload["name"],
            description=payload.get("description", ""),
            configs=coerce_configs(payload["configs"]),
            created=timestamp,
            modified=timestamp,
            tags=tags,
            icon=payload.get("icon") or icon_for_tags(tags),
        )
        self._document.profiles.append(profile)
        self._persist()
        self._record(
            "profiles.import",
            profile.id,
            source_id=str(payload.get("id", "")),
            configs=len(profile.configs),
        )
        return profile

    def import_profile_from(self, path: Path) -> Profile:
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ProfileError(f"Cannot read profile file {path}: {exc}") from exc
        return self.import_profile(text)

    def list_templates(self) -> List[ProfileTemplate]:
        return sorted(self._templates.values(), key=lambda item: item.name.lower())

    def create_profile_from_template(
        self,
        template_id: str,
        name: str | None = None,
        description: str | None = None,
        tags: Sequence[str] | None = None,
    ) -> Profile:
        template = self._templates.get(template_id)
        if template is None:
            raise ProfileTemplateNotFoundError(f"Unknown profile template: {template_id}")
        return self.create_profile(
            name or template.name,
            description if description is not None else template.description,
            list(template.configs),
            list(tags) if tags is not None else list(template.tags),
        )

    def _resolve_root(self, root: Path | None) -> Path | None:
        return root if root is not None else self._project_root

    @staticmethod
    def _root_for(item: ConfigItem, root: Path | None) -> Path | None:
        return root if item.scope == ConfigScope.LOCAL else None

    def _list_scope(self, scope: ConfigScope, root: Path | None) -> List[ConfigItem]:
        try:
            entries = self._backend.list(scope, root)
        except ConfigBackendError:
            return []
        return [ConfigItem(key=key, value=value, scope=scope) for key, value in entries if key]

    def _new_id(self, now: datetime) -> str:
        candidate = generate_profile_id(now)
        while self._document.find(candidate) is not None:
            candidate = generate_profile_id(now)
        return candidate

    def _persist(self) -> None:
        self._repository.save(self._document)

    def _load_templates(self) -> Iterable[ProfileTemplate]:
        return [ProfileTemplate.from_payload(payload) for payload in load_template_payloads()]

    def _record(
        self,
        name: str,
        profile_id: str,
        *,
        status: str = "ok",
        level: str = "info",
        duration_ms: float | None = None,
        **details: Any,
    ) -> None:
        if self._settings is None:
            return
        EventLog(self._settings).append(
            ProfileEvent(
                name=name,
                profile_id=profile_id,
                details=details,
                status=status,
                level=level,
                duration_ms=duration_ms,
            )
        )


def build_profile_manager(
    settings: RuntimeSettings,
    project_root: Path | None = None,
    *,
    backend: ConfigBackend | None = None,
) -> ProfileManager:
    """Wire a manager against the store for ``project_root`` and ``git config``."""

    store_path = resolve_store_path(project_root, settings.fallback_store_file)
    repository = FileProfileRepository(store_path)
    return ProfileManager(
        repository,
        backend or GitConfigBackend(settings.git_executable),
        project_root=project_root,
        settings=settings,
    )


__all__ = ["ApplyResult", "ProfileManager", "build_profile_manager"]
