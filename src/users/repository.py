from __future__ import annotations

from typing import Optional
from uuid import UUID

from src.errors import ConflictError, NotFoundError, translate_errors
from src.tools.db import fetchrow, fetchval, transaction
from src.tools.logger import logger
from src.users.audit import record_audit
from src.users.models import NewUser, User

_SEL = (
    "id, email, username, password_hash, is_admin, is_verified, "
    "created_at, updated_at, deleted_at, deleted_by"
)


def _row(r) -> User:
    return User(**dict(r))


async def create_user(new: NewUser) -> User:
    """Insert an active user. Email uniqueness among active users is case-insensitive."""
    try:
        async with translate_errors("create user"):
            row = await fetchrow(
                f"""
                INSERT INTO users (email, username, password_hash, is_admin, is_verified)
                VALUES ($1, $2, $3, $4, $5)
                RETURNING {_SEL};
                """,
                new.email,
                new.username,
                new.password_hash,
                new.is_admin,
                new.is_verified,
            )
    except ConflictError as exc:
        raise ConflictError("User with this email already exists") from exc
    return _row(row)


async def get_user_by_id(user_id: UUID) -> Optional[User]:
    """Any user, active or soft-deleted."""
    row = await fetchrow(f"SELECT {_SEL} FROM users WHERE id = $1;", user_id)
    return _row(row) if row else None


async def get_user_by_email(email: str) -> Optional[User]:
    row = await fetchrow(
        f"SELECT {_SEL} FROM users WHERE LOWER(email) = LOWER($1) AND deleted_at IS NULL;",
        email.strip(),
    )
    return _row(row) if row else None


async def user_exists(user_id: UUID) -> bool:
    return await fetchval(
        "SELECT EXISTS(SELECT 1 FROM users WHERE id = $1 AND deleted_at IS NULL);",
        user_id,
    )


async def count_users() -> int:
    return await fetchval("SELECT COUNT(*) FROM users WHERE deleted_at IS NULL;")


async def update_user(
    user_id: UUID,
    *,
    username: Optional[str] = None,
    password_hash: Optional[str] = None,
    is_admin: Optional[bool] = None,
    is_verified: Optional[bool] = None,
) -> User:
    """Partial update of an active user. `updated_at` is refreshed by the table trigger."""
    async with translate_errors("update user"):
        row = await fetchrow(
            f"""
            UPDATE users
               SET username      = COALESCE($2, username),
                   password_hash = COALESCE($3, password_hash),
                   is_admin      = COALESCE($4, is_admin),
                   is_verified   = COALESCE($5, is_verified)
             WHERE id = $1
               AND deleted_at IS NULL
            RETURNING {_SEL};
            """,
            user_id,
            username,
            password_hash,
            is_admin,
            is_verified,
        )
    if row is None:
        raise NotFoundError("User not found")
    return _row(row)


async def soft_delete_user(user_id: UUID, deleted_by: Optional[UUID]) -> User:
    """
    Mark an active user deleted and append a `soft_delete` audit entry, atomically.

    A second soft delete is rejected with ConflictError rather than re-stamping
    `deleted_at`, so the purge clock is never reset.
    """
    async with translate_errors("soft delete user"):
        async with transaction() as conn:
            row = await fetchrow(
                f"""
                UPDATE users
                   SET deleted_at = now(),
                       deleted_by = $2
                 WHERE id = $1
                   AND deleted_at IS NULL
                RETURNING {_SEL};
                """,
                user_id,
                deleted_by,
                conn=conn,
            )
            if row is None:
                exists = await fetchval("SELECT EXISTS(SELECT 1 FROM users WHERE id = $1);", user_id, conn=conn)
                if exists:
                    raise ConflictError("User is already deleted")
                raise NotFoundError("User not found")

            await record_audit(user_id, "soft_delete", deleted_by, conn=conn)

    logger.info(f"user {user_id} soft-deleted by {deleted_by}")
    return _row(row)
