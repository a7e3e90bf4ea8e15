"""Structured event log for profile operations.

Every mutating or reconciling call on a profile manager appends one JSON
line to ``<log_dir>/telemetry.jsonl``. Records are checked against the
packaged ``telemetry.schema.json`` before they are written. Set
``GITPROFILES_TELEMETRY=0`` (or ``telemetry: false`` in ``config.yaml``) to
stop writing.
"""

from __future__ import annotations

import json
import os
import time
from collections import Counter, deque
from dataclasses import dataclass, field
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any, Dict, Iterator, List

from jsonschema import Draft202012Validator

from gitprofiles.settings import DISABLE_VALUES, TELEMETRY_ENV, RuntimeSettings

LOG_FILENAME = "telemetry.jsonl"
LEVELS = ("info", "warn", "error")
COMPONENT = "profiles"


@dataclass(frozen=True)
class ProfileEvent:
    """One operation on the profile store or the config backend."""

    name: str
    profile_id: str | None = None
    details: Dict[str, Any] = field(default_factory=dict)
    status: str = "ok"
    level: str = "info"
    duration_ms: float | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise ValueError("event name must be a non-empty string")
        if self.level not in LEVELS:
            raise ValueError(f"unsupported event level: {self.level}")
        if self.duration_ms is not None and self.duration_ms < 0:
            raise ValueError("event duration must not be negative")

    def to_record(self, ts: float) -> Dict[str, Any]:
        record: Dict[str, Any] = {
            "ts": ts,
            "event": self.name,
            "component": COMPONENT,
            "level": self.level,
            "status": self.status,
            "payload": dict(self.details),
        }
        if self.profile_id:
            record["profile"] = self.profile_id
        if self.duration_ms is not None:
            record["durationMs"] = round(self.duration_ms, 3)
        return record


@lru_cache(maxsize=1)
def _record_validator() -> Draft202012Validator:
    schema_file = resources.files("gitprofiles.resources") / "telemetry.schema.json"
    return Draft202012Validator(json.loads(schema_file.read_text(encoding="utf-8")))


class EventLog:
    """Append-only JSONL log under the runtime ``log_dir``."""

    def __init__(self, settings: RuntimeSettings) -> None:
        self._settings = settings

    @property
    def path(self) -> Path:
        return self._settings.log_dir / LOG_FILENAME

    @property
    def enabled(self) -> bool:
        if not self._settings.telemetry_enabled:
            return False
        return os.getenv(TELEMETRY_ENV, "1").strip().lower() not in DISABLE_VALUES

    def append(self, event: ProfileEvent) -> None:
        if not self.enabled:
            return
        record = event.to_record(time.time())
        _record_validator().validate(record)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("a", encoding="utf-8") as fh:
            fh.write(json.dumps(record, ensure_ascii=False) + "\n")

    def __iter__(self) -> Iterator[Dict[str, Any]]:
        if not self.path.exists():
            return
        with self.path.open("r", encoding="utf-8") as fh:
            for line in fh:
                line = line.strip()
                if not line:
                    continue
                try:
                    yield json.loads(line)
                except json.JSONDecodeError:
                    # partially written line from an interrupted process
                    continue

    def tail(self, limit: int) -> List[Dict[str, Any]]:
        return list(deque(self, maxlen=max(limit, 0)))

    def report(self, recent: int = 0) -> Dict[str, Any]:
        """Aggregate counts per event, status and profile.

        ``partial_applies`` counts apply runs in which some writes failed.
        """

        events = self.tail(recent) if recent > 0 else list(self)
        by_event = Counter(str(evt.get("event", "unknown")) for evt in events)
        by_status = Counter(str(evt.get("status", "unknown")) for evt in events)
        by_profile = Counter(str(evt["profile"]) for evt in events if evt.get("profile"))
        partial = sum(
            1 for evt in events if evt.get("event") == "profiles.apply" and evt.get("status") == "partial"
        )
        return {
            "total": len(events),
            "by_event": dict(by_event),
            "by_status": dict(by_status),
            "by_profile": dict(by_profile),
            "partial_applies": partial,
        }

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()


__all__ = ["COMPONENT", "LEVELS", "LOG_FILENAME", "EventLog", "ProfileEvent"]
