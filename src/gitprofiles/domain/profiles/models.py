"""Domain models for configuration profiles and their persisted store."""

from __future__ import annotations

import secrets
import string
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Sequence

DEFAULT_ICON = "symbol-misc"

_ID_ALPHABET = string.ascii_lowercase + string.digits
_ID_SUFFIX_LENGTH = 9

_ICON_RULES: Sequence[tuple[tuple[str, ...], str]] = (
    (("work", "office"), "briefcase"),
    (("personal", "home"), "home"),
    (("opensource", "oss"), "github"),
    (("client",), "organization"),
)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def isoformat(dt: datetime) -> str:
    return dt.astimezone(timezone.utc).isoformat(timespec="microseconds").replace("+00:00", "Z")


class ProfileError(RuntimeError):
    """Base class for profile management failures."""


class ProfileNotFoundError(ProfileError):
    """Raised when a profile id does not resolve in the store."""

    def __init__(self, profile_id: str) -> None:
        super().__init__(f"Profile not found: {profile_id}")
        self.profile_id = profile_id


class InvalidProfileFormatError(ProfileError, ValueError):
    """Raised when an imported payload is not a valid profile."""

    def __init__(self, errors: Sequence[str]) -> None:
        self.errors = list(errors)
        detail = "; ".join(self.errors) if self.errors else "unknown error"
        super().__init__(f"Invalid profile format: {detail}")


class ProfileStorageError(ProfileError):
    """Raised when the profile store cannot be written."""


class NoProjectRootError(ProfileError):
    """Raised when local-scope configs are applied without a project root."""


class ProfileTemplateNotFoundError(ProfileError):
    """Raised when a packaged template id is unknown."""


@dataclass(frozen=True)
class ConfigWriteFailure:
    key: str
    scope: str
    reason: str
    operation: str = "set"

    def describe(self) -> str:
        return f"Failed to {self.operation} {self.key} ({self.scope}): {self.reason}"

    def to_dict(self) -> Dict[str, str]:
        return {"key": self.key, "scope": self.scope, "operation": self.operation, "reason": self.reason}


class BackendPartialFailureError(ProfileError):
    """Raised after a batch in which one or more backend writes failed.

    Writes that succeeded before or after the failures are kept.
    """

    def __init__(self, failures: Sequence[ConfigWriteFailure], result: Any = None) -> None:
        self.failures = list(failures)
        self.result = result
        lines = "\n".join(failure.describe() for failure in self.failures)
        super().__init__(f"Some configurations failed:\n{lines}")


class ConfigScope(str, Enum):
    LOCAL = "local"
    GLOBAL = "global"

    @classmethod
    def parse(cls, value: "str | ConfigScope") -> "ConfigScope":
        if isinstance(value, ConfigScope):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as exc:
            raise ValueError(f"unknown config scope: {value!r}") from exc


@dataclass(frozen=True)
class ConfigItem:
    """A single ``key=value`` entry bound to a scope."""

    key: str
    value: str
    scope: ConfigScope

    def __post_init__(self) -> None:
        if not isinstance(self.key, str) or not self.key.strip():
            raise ValueError("config key must be a non-empty string")
        if not isinstance(self.value, str):
            raise ValueError(f"config value for {self.key} must be a string")
        object.__setattr__(self, "scope", ConfigScope.parse(self.scope))

    @property
    def composite_key(self) -> str:
        return f"{self.key}:{self.scope.value}"

    def to_dict(self) -> Dict[str, str]:
        return {"key": self.key, "value": self.value, "scope": self.scope.value}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ConfigItem":
        return cls(key=str(data["key"]), value=str(data["value"]), scope=ConfigScope.parse(data["scope"]))


def coerce_configs(items: Iterable["ConfigItem | Mapping[str, Any]"]) -> List[ConfigItem]:
    configs: List[ConfigItem] = []
    for item in items:
        if isinstance(item, ConfigItem):
            configs.append(item)
        elif isinstance(item, Mapping):
            configs.append(ConfigItem.from_dict(item))
        else:
            raise ValueError(f"config entry must be a ConfigItem or mapping, got {type(item).__name__}")
    return configs


def generate_profile_id(now: datetime | None = None) -> str:
    millis = int((now.timestamp() if now is not None else time.time()) * 1000)
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(_ID_SUFFIX_LENGTH))
    return f"profile_{millis}_{suffix}"


def icon_for_tags(tags: Sequence[str] | None) -> str:
    """Pick a display icon from the first tag only."""

    if not tags:
        return DEFAULT_ICON
    first = str(tags[0]).lower()
    for needles, icon in _ICON_RULES:
        if any(needle in first for needle in needles):
            return icon
    return DEFAULT_ICON


@dataclass
class Profile:
    """A named snapshot of scoped configuration values."""

    id: str
    name: str
    description: str
    configs: List[ConfigItem]
    created: str
    modified: str
    tags: List[str] | None = None
    icon: str | None = None

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("profile id must be a non-empty string")
        self.configs = coerce_configs(self.configs)
        if self.tags is not None:
            self.tags = [str(tag) for tag in self.tags]

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "configs": [item.to_dict() for item in self.configs],
            "created": self.created,
            "modified": self.modified,
        }
        if self.tags is not None:
            payload["tags"] = list(self.tags)
        if self.icon is not None:
            payload["icon"] = self.icon
        return payload

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Profile":
        tags = data.get("tags")
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            description=str(data.get("description", "")),
            configs=coerce_configs(data.get("configs") or []),
            created=str(data["created"]),
            modified=str(data.get("modified", data["created"])),
            tags=list(tags) if isinstance(tags, list) else None,
            icon=data.get("icon"),
        )


@dataclass
class ProfileStoreDocument:
    """The persisted collection of profiles plus the active pointer."""

    profiles: List[Profile] = field(default_factory=list)
    active_profile: str | None = None
    last_modified: str = ""

    @classmethod
    def empty(cls) -> "ProfileStoreDocument":
        return cls(profiles=[], active_profile=None, last_modified=isoformat(utc_now()))

    def find(self, profile_id: str) -> Profile | None:
        for profile in self.profiles:
            if profile.id == profile_id:
                return profile
        return None

    def index_of(self, profile_id: str) -> int:
        for index, profile in enumerate(self.profiles):
            if profile.id == profile_id:
                return index
        return -1

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"profiles": [profile.to_dict() for profile in self.profiles]}
        if self.active_profile is not None:
            payload["activeProfile"] = self.active_profile
        payload["lastModified"] = self.last_modified
        return payload

    @classmethod
    def from_dict(cls, data: Any) -> "ProfileStoreDocument":
        if not isinstance(data, dict):
            raise ValueError("profile store root must be an object")
        profiles_payload = data.get("profiles")
        if not isinstance(profiles_payload, list):
            raise ValueError("profile store 'profiles' must be a list")
        profiles: List[Profile] = []
        for entry in profiles_payload:
            if not isinstance(entry, dict):
                raise ValueError("each stored profile must be an object")
            try:
                profiles.append(Profile.from_dict(entry))
            except KeyError as exc:
                raise ValueError(f"stored profile missing field {exc}") from exc
        active = data.get("activeProfile")
        return cls(
            profiles=profiles,
            active_profile=str(active) if active else None,
            last_modified=str(data.get("lastModified", "")),
        )


@dataclass(frozen=True)
class ProfileTemplate:
    """A packaged starter profile."""

    template_id: str
    name: str
    description: str
    configs: List[ConfigItem]
    tags: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        for field_name in ("template_id", "name"):
            value = getattr(self, field_name)
            if not value or not value.strip():
                raise ValueError(f"{field_name} must be provided")
        object.__setattr__(self, "configs", coerce_configs(self.configs))
        object.__setattr__(self, "tags", [str(tag) for tag in self.tags])

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "ProfileTemplate":
        return cls(
            template_id=str(payload.get("id", "")),
            name=str(payload.get("name", "")),
            description=str(payload.get("description", "")),
            configs=coerce_configs(payload.get("configs") or []),
            tags=list(payload.get("tags") or []),
        )


__all__ = [
    "DEFAULT_ICON",
    "BackendPartialFailureError",
    "ConfigItem",
    "ConfigScope",
    "ConfigWriteFailure",
    "InvalidProfileFormatError",
    "NoProjectRootError",
    "Profile",
    "ProfileError",
    "ProfileNotFoundError",
    "ProfileStorageError",
    "ProfileStoreDocument",
    "ProfileTemplate",
    "ProfileTemplateNotFoundError",
    "coerce_configs",
    "generate_profile_id",
    "icon_for_tags",
    "isoformat",
    "utc_now",
]
