"""
Jam Session Backend — User Service
====================================

What:  CRUD for user profiles, the caller's availability, and cleanup of
       accounts created by integration/load tests.
Who:   Called by the /users, /me and /testusers route handlers.

Rules:
    - e-mail addresses and auth ids are unique; create checks all rows,
      update checks every row except the one being updated
    - a missing row is reported as NotFoundError (HTTP 400)
"""

import logging
from typing import List

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from jamsession.config import settings
from jamsession.exceptions import NotFoundError, ValidationError
from jamsession.models.user import User
from jamsession.schemas.user import (
    AvailabilityUpdate,
    UserCreate,
    UserResponse,
    UserUpdate,
)
from jamsession.services.base import translate_db_errors

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL_MESSAGE = "The specified e-mail address already exists"
DUPLICATE_AUTH_ID_MESSAGE = "The specified auth id already belongs to another user"


def duplicate_email_error() -> ValidationError:
    return ValidationError(message=DUPLICATE_EMAIL_MESSAGE, field="email")


def duplicate_auth_id_error() -> ValidationError:
    return ValidationError(message=DUPLICATE_AUTH_ID_MESSAGE, field="auth_id")


def conflict_error(e: IntegrityError) -> ValidationError:
    """Picks the duplicate error matching the unique constraint that failed."""
    if "auth_id" in str(e.orig):
        return duplicate_auth_id_error()
    return duplicate_email_error()


def unknown_caller_error(email: str) -> ValidationError:
    """The bearer token is valid but no profile carries its e-mail."""
    return ValidationError(
        message="The authenticated user doesn't exist in the db",
        field="Authorization",
        location="header",
        context={"email": email},
    )


class UserService:
    """Business logic layer for user operations."""

    async def list_users(self, db: AsyncSession) -> List[UserResponse]:
        async with translate_db_errors("retrieve users"):
            result = await db.execute(select(User).order_by(User.id))
            users = result.scalars().all()
        return [UserResponse.model_validate(user) for user in users]

    async def get_user(self, db: AsyncSession, user_id: int) -> UserResponse:
        """
        Raises:
            NotFoundError: no user with this id
        """
        user = await self._load(db, user_id, action="retrieve")
        return UserResponse.model_validate(user)

    async def create_user(self, db: AsyncSession, data: UserCreate) -> UserResponse:
        """
        Persist a new profile.

        Raises:
            ValidationError: the e-mail address or auth id is already taken
        """
        async with translate_db_errors("create the user"):
            if await self._taken(db, User.email, data.email):
                raise duplicate_email_error()
            if data.auth_id is not None and await self._taken(db, User.auth_id, data.auth_id):
                raise duplicate_auth_id_error()

            user = User(
                nickname=data.nickname,
                email=data.email,
                auth_id=data.auth_id,
                is_available=data.is_available,
                instruments=data.instruments,
                availability_description=data.availability_description,
                availability_expires_at=data.availability_expires_at,
                is_admin=False,
            )
            db.add(user)
            try:
                await db.flush()
            except IntegrityError as e:
                # Lost a race with a concurrent insert of the same address or auth id
                raise conflict_error(e) from e

        logger.info("User %s created (%s)", user.id, user.email)
        return UserResponse.model_validate(user)

    async def update_user(
        self, db: AsyncSession, user_id: int, data: UserUpdate
    ) -> UserResponse:
        """
        Replace nickname and e-mail, plus any optional field present in the body.

        Order of checks: the user exists, then no *other* user holds the
        submitted e-mail (or auth id, when sent). Keeping one's own values is
        not a conflict.

        Raises:
            NotFoundError: no user with this id
            ValidationError: another user already has the e-mail address or auth id
        """
        user = await self._load(db, user_id, action="update")

        async with translate_db_errors("update the user"):
            if await self._taken(db, User.email, data.email, exclude_id=user_id):
                raise duplicate_email_error()
            if data.auth_id is not None and await self._taken(
                db, User.auth_id, data.auth_id, exclude_id=user_id
            ):
                raise duplicate_auth_id_error()

            user.nickname = data.nickname
            user.email = data.email
            for field, value in data.model_dump(
                exclude_unset=True, exclude={"nickname", "email"}
            ).items():
                setattr(user, field, value)

            try:
                await db.flush()
            except IntegrityError as e:
                raise conflict_error(e) from e

        logger.info("User %s updated", user.id)
        return UserResponse.model_validate(user)

    async def update_availability(
        self, db: AsyncSession, email: str, data: AvailabilityUpdate
    ) -> UserResponse:
        """
        Set the availability of the user the bearer token belongs to.

        Raises:
            ValidationError: no profile exists for the token's e-mail
        """
        async with translate_db_errors("update the availability"):
            result = await db.execute(select(User).where(User.email == email))
            user = result.scalar_one_or_none()
            if user is None:
                raise unknown_caller_error(email)

            user.is_available = data.is_available
            user.instruments = data.instruments
            user.availability_description = data.description
            user.availability_expires_at = data.expires_at
            await db.flush()

        logger.info(
            "User %s availability set to %s (%d instruments)",
            user.id, user.is_available, len(user.instruments),
        )
        return UserResponse.model_validate(user)

    async def delete_user(self, db: AsyncSession, user_id: int) -> None:
        """
        Remove a profile. Authored jams go with it (database cascade).

        Raises:
            NotFoundError: no user with this id
        """
        user = await self._load(db, user_id, action="delete")
        async with translate_db_errors("delete the user"):
            await db.delete(user)
            await db.flush()
        logger.info("User %s deleted", user_id)

    async def delete_test_users(self, db: AsyncSession) -> int:
        """Delete every user whose e-mail matches the test pattern. Returns the count."""
        async with translate_db_errors("delete test users"):
            result = await db.execute(
                delete(User)
                .where(User.email.like(settings.test_email_pattern))
                .execution_options(synchronize_session=False)
            )
        deleted = result.rowcount or 0
        logger.info("Deleted %d test users matching %s", deleted, settings.test_email_pattern)
        return deleted

    # ── Internals ────────────────────────────────────────────────────────

    async def _load(self, db: AsyncSession, user_id: int, action: str) -> User:
        async with translate_db_errors("retrieve the user"):
            result = await db.execute(select(User).where(User.id == user_id))
            user = result.scalar_one_or_none()
        if user is None:
            raise NotFoundError(resource="user", action=action, resource_id=user_id)
        return user

    async def _taken(
        self, db: AsyncSession, column, value: str, exclude_id: int | None = None
    ) -> bool:
        query = select(User.id).where(column == value)
        if exclude_id is not None:
            query = query.where(User.id != exclude_id)
        result = await db.execute(query.limit(1))
        return result.scalar_one_or_none() is not None


user_service = UserService()
