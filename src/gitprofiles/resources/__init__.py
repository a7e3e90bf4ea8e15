"""Packaged data: starter profile templates and JSON schemas."""

from __future__ import annotations

from functools import lru_cache
from importlib import resources
from typing import Any, Dict, Tuple

import yaml

TEMPLATES_PACKAGE = __name__ + ".templates"

__all__ = ["TEMPLATES_PACKAGE", "load_template_payloads"]


@lru_cache(maxsize=1)
def load_template_payloads() -> Tuple[Dict[str, Any], ...]:
    """Return the starter template documents ordered by template id.

    Each ``templates/*.yaml`` file holds one mapping with an ``id``. A file
    that is not a mapping, lacks an id or reuses another file's id is a
    packaging error and raises ``ValueError``.
    """

    by_id: Dict[str, Dict[str, Any]] = {}
    for entry in resources.files(TEMPLATES_PACKAGE).iterdir():
        if not entry.name.endswith(".yaml"):
            continue
        payload = yaml.safe_load(entry.read_text("utf-8"))
        if not isinstance(payload, dict):
            raise ValueError(f"template {entry.name} must be a mapping")
        template_id = str(payload.get("id") or "").strip()
        if not template_id:
            raise ValueError(f"template {entry.name} has no id")
        if template_id in by_id:
            raise ValueError(f"template id {template_id!r} defined twice")
        by_id[template_id] = payload
    return tuple(by_id[template_id] for template_id in sorted(by_id))
