"""Profile domain exports."""

from .comparison import ConfigUpdate, ProfileComparison, compare_configs
from .models import (
    DEFAULT_ICON,
    BackendPartialFailureError,
    ConfigItem,
    ConfigScope,
    ConfigWriteFailure,
    InvalidProfileFormatError,
    NoProjectRootError,
    Profile,
    ProfileError,
    ProfileNotFoundError,
    ProfileStorageError,
    ProfileStoreDocument,
    ProfileTemplate,
    ProfileTemplateNotFoundError,
    coerce_configs,
    generate_profile_id,
    icon_for_tags,
    isoformat,
    utc_now,
)
from .validation import ProfileValidationResult, validate_profile_payload

__all__ = [
    "DEFAULT_ICON",
    "BackendPartialFailureError",
    "ConfigItem",
    "ConfigScope",
    "ConfigWriteFailure",
    "ConfigUpdate",
    "InvalidProfileFormatError",
    "NoProjectRootError",
    "Profile",
    "ProfileComparison",
    "ProfileError",
    "ProfileNotFoundError",
    "ProfileStorageError",
    "ProfileStoreDocument",
    "ProfileTemplate",
    "ProfileTemplateNotFoundError",
    "ProfileValidationResult",
    "coerce_configs",
    "compare_configs",
    "generate_profile_id",
    "icon_for_tags",
    "isoformat",
    "utc_now",
    "validate_profile_payload",
]
