"""
Business logic for users.

Covers registration, password authentication, profile updates,
password changes and account deletion.  Passwords are stored as
PBKDF2 hashes produced by ``core.security.hash_password``.  Deleting a
user removes their contacts (and the contacts' link rows) through the
``ON DELETE CASCADE`` foreign keys.
"""

import logging
import sqlite3
import uuid
from typing import Optional

from linkleaf_api.app.core.db import get_connection, transaction, utc_now
from linkleaf_api.app.core.exceptions import AuthenticationError, ConflictError, NotFoundError
from linkleaf_api.app.core.security import hash_password, verify_password
from linkleaf_api.app.schemas.user import PasswordChange, ProfileUpdate, UserRead, UserRegister

logger = logging.getLogger(__name__)

USER_COLUMNS = (
    "id, email, first_name, last_name, avatar_url, is_active, is_verified, "
    "last_login, created_at, updated_at"
)


def _row_to_user(row: sqlite3.Row) -> UserRead:
    return UserRead(
        id=row["id"],
        email=row["email"],
        first_name=row["first_name"],
        last_name=row["last_name"],
        avatar_url=row["avatar_url"],
        is_active=bool(row["is_active"]),
        is_verified=bool(row["is_verified"]),
        last_login=row["last_login"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class UserService:
    """Сервис для работы с пользователями."""

    @classmethod
    async def create_user(cls, data: UserRegister) -> UserRead:
        """Register a new user.

        E-mail addresses are compared case-insensitively; registering
        an address twice raises ``ConflictError``.
        """
        user_id = str(uuid.uuid4())
        email = data.email.lower()
        now = utc_now()
        logger.info("Registering user %s", email)
        try:
            with transaction() as conn:
                conn.execute(
                    "INSERT INTO users (id, email, password_hash, first_name, last_name, created_at, updated_at) "
                    "VALUES (?, ?, ?, ?, ?, ?, ?)",
                    (user_id, email, hash_password(data.password), data.first_name, data.last_name, now, now),
                )
        except sqlite3.IntegrityError as e:
            raise ConflictError("User with this email already exists") from e
        return await cls.get_user(user_id)

    @classmethod
    async def authenticate(cls, email: str, password: str) -> Optional[UserRead]:
        """Check credentials and record the login time.

        Returns ``None`` if the e-mail is unknown or the password does
        not match.  A deactivated account raises ``AuthenticationError``.
        """
        conn = get_connection()
        try:
            row = conn.execute(
                "SELECT id, password_hash, is_active FROM users WHERE email = ?",
                (email.lower(),),
            ).fetchone()
            if not row or not verify_password(password, row["password_hash"]):
                return None
            if not row["is_active"]:
                raise AuthenticationError("Account is deactivated")
            conn.execute("UPDATE users SET last_login = ? WHERE id = ?", (utc_now(), row["id"]))
            conn.commit()
        finally:
            conn.close()
        return await cls.get_user(row["id"])

    @classmethod
    async def get_user(cls, user_id: str) -> UserRead:
        """Retrieve a user by ID or raise ``NotFoundError``."""
        conn = get_connection()
        try:
            row = conn.execute(
                f"SELECT {USER_COLUMNS} FROM users WHERE id = ?", (user_id,)
            ).fetchone()
        finally:
            conn.close()
        if not row:
            raise NotFoundError("User not found")
        return _row_to_user(row)

    @classmethod
    async def update_profile(cls, user_id: str, data: ProfileUpdate) -> UserRead:
        """Update name and avatar; null or omitted fields keep their value."""
        with transaction() as conn:
            cursor = conn.execute(
                """
                UPDATE users
                SET first_name = COALESCE(?, first_name),
                    last_name = COALESCE(?, last_name),
                    avatar_url = COALESCE(?, avatar_url),
                    updated_at = ?
                WHERE id = ?
                """,
                (data.first_name, data.last_name, data.avatar_url, utc_now(), user_id),
            )
            if cursor.rowcount == 0:
                raise NotFoundError("User not found")
        logger.info("User %s updated profile", user_id)
        return await cls.get_user(user_id)

    @classmethod
    async def change_password(cls, user_id: str, data: PasswordChange) -> None:
        """Replace the password after checking the current one."""
        with transaction() as conn:
            row = conn.execute(
                "SELECT password_hash FROM users WHERE id = ?", (user_id,)
            ).fetchone()
            if not row:
                raise NotFoundError("User not found")
            if not verify_password(data.current_password, row["password_hash"]):
                raise AuthenticationError("Current password is incorrect")
            conn.execute(
                "UPDATE users SET password_hash = ?, updated_at = ? WHERE id = ?",
                (hash_password(data.new_password), utc_now(), user_id),
            )
        logger.info("User %s changed password", user_id)

    @classmethod
    async def delete_user(cls, user_id: str) -> None:
        """Удалить пользователя вместе с его контактами.

        Contacts and their tag links go with the user through the
        cascading foreign keys; shared tags are kept.
        """
        with transaction() as conn:
            cursor = conn.execute("DELETE FROM users WHERE id = ?", (user_id,))
            if cursor.rowcount == 0:
                raise NotFoundError("User not found")
        logger.info("Deleted user %s", user_id)
