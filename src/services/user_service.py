"""Credential store: user records in PostgreSQL."""

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID, uuid4

import asyncpg
import structlog

from src.database import get_pool
from src.errors import ConflictError, PersistenceError
from src.models.user import User, UserProfile

logger = structlog.get_logger(__name__)

_PUBLIC_COLUMNS = "id, username, name, image, created_at"


def _row_to_user(row) -> User:
    return User(
        id=row["id"],
        username=row["username"],
        name=row["name"],
        image=row["image"],
        created_at=row["created_at"],
    )


class UserService:
    """Service for user CRUD operations.

    Passwords arrive here already hashed; hashing is the caller's concern.
    """

    async def create_user(
        self,
        username: str,
        password_hash: str,
        name: str,
        image: Optional[str] = None,
    ) -> User:
        """Insert a new user.

        Args:
            username: Unique username
            password_hash: Hash of the user's password
            name: Display name
            image: Optional avatar URL

        Returns:
            Created User model

        Raises:
            ConflictError: If the username is already taken
            PersistenceError: If the database insert fails
        """
        user_id = uuid4()
        now = datetime.now(timezone.utc)

        pool = await get_pool()

        try:
            async with pool.acquire() as conn:
                await conn.execute(
                    """
                    INSERT INTO users (id, username, password_hash, name, image, created_at)
                    VALUES ($1, $2, $3, $4, $5, $6)
                    """,
                    user_id,
                    username,
                    password_hash,
                    name,
                    image,
                    now,
                )
        except asyncpg.UniqueViolationError as e:
            logger.warning("user_create_conflict", username=username)
            raise ConflictError() from e
        except asyncpg.PostgresError as e:
            logger.error("user_create_failed", username=username, error=str(e))
            raise PersistenceError("Failed to create user") from e

        logger.info("user_created", user_id=str(user_id), username=username)

        return User(
            id=user_id,
            username=username,
            name=name,
            image=image,
            created_at=now,
        )

    async def get_by_username(self, username: str) -> Optional[tuple[User, str]]:
        """Get a user by username.

        Args:
            username: Username to look up

        Returns:
            Tuple of (User, password_hash) or None if not found
        """
        pool = await get_pool()

        async with pool.acquire() as conn:
            row = await conn.fetchrow(
                f"""
                SELECT {_PUBLIC_COLUMNS}, password_hash
                FROM users
                WHERE username = $1
                """,
                username,
            )

        if row is None:
            return None

        return _row_to_user(row), row["password_hash"]

    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        """Get a user by UUID."""
        pool = await get_pool()

        async with pool.acquire() as conn:
            row = await conn.fetchrow(
                f"SELECT {_PUBLIC_COLUMNS} FROM users WHERE id = $1",
                user_id,
            )

        if row is None:
            return None

        return _row_to_user(row)

    async def get_profile(self, username: str) -> Optional[UserProfile]:
        """Get the public profile for a username.

        Only public columns are selected, so the password hash never
        leaves the database on this path.
        """
        pool = await get_pool()

        async with pool.acquire() as conn:
            row = await conn.fetchrow(
                f"SELECT {_PUBLIC_COLUMNS} FROM users WHERE username = $1",
                username,
            )

        if row is None:
            return None

        return UserProfile.from_user(_row_to_user(row))

    async def update_password(self, username: str, password_hash: str) -> bool:
        """Overwrite the stored password hash.

        Returns:
            True if a user row was updated, False if the username is unknown

        Raises:
            PersistenceError: If the database update fails
        """
        pool = await get_pool()

        try:
            async with pool.acquire() as conn:
                result = await conn.execute(
                    "UPDATE users SET password_hash = $1 WHERE username = $2",
                    password_hash,
                    username,
                )
        except asyncpg.PostgresError as e:
            logger.error("password_update_failed", username=username, error=str(e))
            raise PersistenceError() from e

        updated = result == "UPDATE 1"

        if updated:
            logger.info("password_updated", username=username)
        else:
            logger.warning("password_update_not_found", username=username)

        return updated
