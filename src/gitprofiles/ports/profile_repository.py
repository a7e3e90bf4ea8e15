"""Port definition for persisting the profile store document."""

from __future__ import annotations

from abc import ABC, abstractmethod

from gitprofiles.domain.profiles import ProfileStoreDocument


class ProfileRepository(ABC):
    """Abstraction over durable storage for the profile store."""

    @abstractmethod
    def load(self) -> ProfileStoreDocument:
        """Return the stored document, or an empty one if nothing usable exists."""

    @abstractmethod
    def save(self, document: ProfileStoreDocument) -> None:
        """Persist the whole document; raise ``ProfileStorageError`` on failure."""


__all__ = ["ProfileRepository"]
