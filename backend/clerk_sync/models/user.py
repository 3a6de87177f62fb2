"""User model mirrored from Clerk user lifecycle webhooks."""

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from clerk_sync.database import Base


class User(Base):
    """User row keyed by the Clerk user id."""

    __tablename__ = "users"

    # Clerk user id (user_...), set by the provider and never rewritten
    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    profile_image: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<User clerk:{self.id}>"
