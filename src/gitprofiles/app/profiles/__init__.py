"""Profile management application services."""

from .service import ApplyResult, ProfileManager, build_profile_manager  # noqa: F401

__all__ = ["ApplyResult", "ProfileManager", "build_profile_manager"]
