"""SQLAlchemy models."""

from clerk_sync.models.user import User

__all__ = [
    "User",
]
