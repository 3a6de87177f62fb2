"""SQLAlchemy-backed user store."""

import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from clerk_sync.exceptions import (
    UserAlreadyExistsError,
    UserNotFoundError,
    UserStoreUnavailableError,
)
from clerk_sync.models import User
from clerk_sync.ports import UserFields, UserRecord, UserStorePort

logger = logging.getLogger("users.store")


def _to_record(user: User) -> UserRecord:
    return UserRecord(
        id=user.id,
        email=user.email,
        name=user.name,
        profile_image=user.profile_image,
    )


class SqlAlchemyUserStore(UserStorePort):
    """User store over an ``AsyncSession``.

    Every mutation is committed before the call returns. On failure the
    session is rolled back so it can be reused for a follow-up operation.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get(self, user_id: str) -> UserRecord | None:
        try:
            user = await self.db.get(User, user_id)
        except SQLAlchemyError as exc:
            raise await self._unavailable("get", exc) from exc
        return _to_record(user) if user is not None else None

    async def create(self, record: UserRecord) -> UserRecord:
        try:
            if await self.db.get(User, record.id) is not None:
                raise UserAlreadyExistsError(record.id)

            user = User(
                id=record.id,
                email=record.email,
                name=record.name,
                profile_image=record.profile_image,
            )
            self.db.add(user)
            await self.db.flush()
            await self.db.commit()
        except IntegrityError as exc:
            # Lost a race with a concurrent insert of the same id
            await self.db.rollback()
            logger.info(
                "User already exists",
                extra={"service": "users", "operation": "user.create", "user_id": record.id},
            )
            raise UserAlreadyExistsError(record.id) from exc
        except SQLAlchemyError as exc:
            raise await self._unavailable("create", exc) from exc
        return _to_record(user)

    async def update(self, user_id: str, fields: UserFields) -> UserRecord:
        try:
            user = await self.db.get(User, user_id)
            if user is None:
                raise UserNotFoundError(user_id)

            user.email = fields.email
            user.name = fields.name
            user.profile_image = fields.profile_image
            await self.db.commit()
        except SQLAlchemyError as exc:
            raise await self._unavailable("update", exc) from exc
        return _to_record(user)

    async def delete(self, user_id: str) -> None:
        try:
            user = await self.db.get(User, user_id)
            if user is None:
                raise UserNotFoundError(user_id)

            await self.db.delete(user)
            await self.db.commit()
        except SQLAlchemyError as exc:
            raise await self._unavailable("delete", exc) from exc

    async def _unavailable(self, operation: str, exc: SQLAlchemyError) -> UserStoreUnavailableError:
        try:
            await self.db.rollback()
        except SQLAlchemyError:
            logger.warning(
                "Rollback after store failure also failed",
                extra={"service": "users", "operation": f"user.{operation}"},
                exc_info=True,
            )
        logger.error(
            "User store operation failed",
            extra={"service": "users", "operation": f"user.{operation}", "error": str(exc)},
        )
        return UserStoreUnavailableError(operation, error=type(exc).__name__)
