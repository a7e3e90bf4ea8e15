"""Diff logic between a profile's desired configs and live backend state."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Set

from .models import ConfigItem, ConfigScope


@dataclass(frozen=True)
class ConfigUpdate:
    key: str
    scope: ConfigScope
    old_value: str
    new_value: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "key": self.key,
            "scope": self.scope.value,
            "oldValue": self.old_value,
            "newValue": self.new_value,
        }


@dataclass
class ProfileComparison:
    to_add: List[ConfigItem] = field(default_factory=list)
    to_update: List[ConfigUpdate] = field(default_factory=list)
    to_remove: List[ConfigItem] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.to_add or self.to_update or self.to_remove)

    def summary(self) -> Dict[str, int]:
        return {
            "total": len(self.to_add) + len(self.to_update) + len(self.to_remove),
            "add": len(self.to_add),
            "update": len(self.to_update),
            "remove": len(self.to_remove),
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "summary": self.summary(),
            "toAdd": [item.to_dict() for item in self.to_add],
            "toUpdate": [update.to_dict() for update in self.to_update],
            "toRemove": [item.to_dict() for item in self.to_remove],
        }


def compare_configs(desired: Iterable[ConfigItem], current: Iterable[ConfigItem]) -> ProfileComparison:
    """Compute what must change for ``current`` to match ``desired``.

    Both sides are reduced to a ``(key, scope) -> value`` map in which the
    last entry for a composite key wins, so multi-valued git keys are
    classified once. Output keeps the position of each key's first entry.
    ``desired`` is the complete target state: anything present only in
    ``current`` is reported for removal.
    """

    desired_list = list(desired)
    current_list = list(current)
    desired_map = {item.composite_key: item.value for item in desired_list}
    current_map = {item.composite_key: item.value for item in current_list}

    comparison = ProfileComparison()
    seen: Set[str] = set()
    for item in desired_list:
        if item.composite_key in seen:
            continue
        seen.add(item.composite_key)
        wanted = desired_map[item.composite_key]
        current_value = current_map.get(item.composite_key)
        if current_value is None:
            comparison.to_add.append(ConfigItem(key=item.key, value=wanted, scope=item.scope))
        elif current_value != wanted:
            comparison.to_update.append(
                ConfigUpdate(
                    key=item.key,
                    scope=item.scope,
                    old_value=current_value,
                    new_value=wanted,
                )
            )

    for item in current_list:
        if item.composite_key in desired_map or item.composite_key in seen:
            continue
        seen.add(item.composite_key)
        comparison.to_remove.append(
            ConfigItem(key=item.key, value=current_map[item.composite_key], scope=item.scope)
        )

    return comparison


__all__ = ["ConfigUpdate", "ProfileComparison", "compare_configs"]
