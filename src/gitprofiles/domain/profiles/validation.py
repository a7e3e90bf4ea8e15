"""Shape validation for profile payloads coming from outside the store."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from functools import lru_cache
from importlib import resources
from typing import Any, List

from jsonschema import Draft202012Validator

_SCHEMA_RESOURCE = "profile.schema.json"
_SCHEMA_PACKAGE = "gitprofiles.resources"


@dataclass(frozen=True)
class ProfileValidationResult:
    valid: bool
    errors: List[str] = field(default_factory=list)


@lru_cache(maxsize=1)
def _load_schema() -> dict[str, Any]:
    resource = resources.files(_SCHEMA_PACKAGE) / _SCHEMA_RESOURCE
    with resource.open("r", encoding="utf-8") as handle:
        return json.load(handle)


@lru_cache(maxsize=1)
def _validator() -> Draft202012Validator:
    return Draft202012Validator(_load_schema())


def validate_profile_payload(payload: Any) -> ProfileValidationResult:
    """Check that ``payload`` has a name and a list of scoped configs."""

    errors: List[str] = []
    found = _validator().iter_errors(payload)
    for error in sorted(found, key=lambda item: [str(part) for part in item.absolute_path]):
        path = ".".join(str(part) for part in error.absolute_path)
        errors.append(f"{path}: {error.message}" if path else error.message)
    return ProfileValidationResult(valid=not errors, errors=errors)


__all__ = ["ProfileValidationResult", "validate_profile_payload"]
