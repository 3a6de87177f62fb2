"""Formal port interfaces for dependency inversion.

The webhook route depends on ``UserStorePort`` rather than on SQLAlchemy
directly, so the sync logic can run against any store (tests use a spy).
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class UserFields:
    """Mutable user fields, always written together."""
    email: str
    name: str
    profile_image: str | None = None


@dataclass(frozen=True)
class UserRecord:
    """A full user row."""
    id: str
    email: str
    name: str
    profile_image: str | None = None

    @property
    def fields(self) -> UserFields:
        return UserFields(email=self.email, name=self.name, profile_image=self.profile_image)


class UserStorePort(ABC):
    """Abstract interface for the user store.

    Implementations raise ``UserAlreadyExistsError`` from ``create`` when the
    id is taken, ``UserNotFoundError`` from ``update``/``delete`` when it is
    not, and ``UserStoreUnavailableError`` for any other storage failure.
    """

    @abstractmethod
    async def create(self, record: UserRecord) -> UserRecord:
        """Insert a new user."""
        pass

    @abstractmethod
    async def update(self, user_id: str, fields: UserFields) -> UserRecord:
        """Overwrite every mutable field of an existing user."""
        pass

    @abstractmethod
    async def delete(self, user_id: str) -> None:
        """Remove an existing user."""
        pass

    @abstractmethod
    async def get(self, user_id: str) -> UserRecord | None:
        """Fetch a user, or None."""
        pass


__all__ = [
    "UserFields",
    "UserRecord",
    "UserStorePort",
]
