"""
Versioned "about me" content.

Rows are append-only: a new version of the text is a new row whose revision
number is assigned here, never by the caller. Revision numbers are scoped to
`effective_date` and computed from the active (non-deleted) rows only.

Assignment is a read-max-then-insert sequence, so every writer first takes a
transaction-scoped advisory lock keyed by the effective date. Writers for the
same date queue up on the lock; writers for other dates do not touch it. The
partial unique index `idx_about_me_active` rejects any duplicate that gets
past the lock (e.g. a raw INSERT that bypasses this module).
"""
from __future__ import annotations

from datetime import date
from typing import Optional
from uuid import UUID

import asyncpg

from src.about_me.models import AboutMe, NewAboutMe
from src.config import settings
from src.errors import ConflictError, InvalidInputError, NotFoundError, retry_on_transient, translate_errors
from src.tools.db import affected_rows, execute, fetch, fetchrow, fetchval, transaction
from src.tools.locks import advisory_xact_lock, date_lock_key
from src.tools.logger import logger

TABLE = "about_me"
_SEL = "id, revision, content_markdown, effective_date, created_at, updated_at, deleted_at"


def _row(r) -> AboutMe:
    return AboutMe(**dict(r))


async def _lock_date(conn: asyncpg.Connection, effective_date: date) -> None:
    await advisory_xact_lock(conn, TABLE, date_lock_key(effective_date), timeout_ms=settings.DB_LOCK_TIMEOUT_MS)


async def _insert_next_revision(conn: asyncpg.Connection, effective_date: date, content: str) -> AboutMe:
    # Caller must hold the date lock for `effective_date` on `conn`.
    next_rev = await fetchval(
        """
        SELECT COALESCE(MAX(revision), 0) + 1
          FROM about_me
         WHERE effective_date = $1
           AND deleted_at IS NULL;
        """,
        effective_date,
        conn=conn,
    )
    row = await fetchrow(
        f"""
        INSERT INTO about_me (revision, content_markdown, effective_date)
        VALUES ($1, $2, $3)
        RETURNING {_SEL};
        """,
        next_rev,
        content,
        effective_date,
        conn=conn,
    )
    return _row(row)


async def create_about_me(new: NewAboutMe) -> AboutMe:
    """
    Persist a new content version for `new.effective_date`.

    Raises RetryableError when the lock could not be taken within
    DB_LOCK_TIMEOUT_MS (or on deadlock); see `create_about_me_with_retry`.
    """
    async with translate_errors("create about_me"):
        async with transaction() as conn:
            await _lock_date(conn, new.effective_date)
            created = await _insert_next_revision(conn, new.effective_date, new.content_markdown)

    logger.info(f"about_me revision {created.revision} created for {created.effective_date} (id={created.id})")
    return created


async def create_about_me_with_retry(new: NewAboutMe, *, attempts: int = 3) -> AboutMe:
    return await retry_on_transient(lambda: create_about_me(new), attempts=attempts)


async def revise_about_me(about_id: UUID, content_markdown: str, expected_revision: int) -> AboutMe:
    """
    Publish edited content for the date of `about_id` as a new revision.

    `expected_revision` must match both `about_id`'s revision and the latest
    active revision for that date, otherwise another writer got there first.
    """
    if not content_markdown:
        raise InvalidInputError("Content cannot be empty")

    async with translate_errors("revise about_me"):
        async with transaction() as conn:
            base = await fetchrow(
                "SELECT effective_date FROM about_me WHERE id = $1 AND deleted_at IS NULL;",
                about_id,
                conn=conn,
            )
            if base is None:
                raise NotFoundError("About Me content not found")

            await _lock_date(conn, base["effective_date"])

            # Re-read under the lock: the row may have been deleted or superseded meanwhile.
            current = await fetchrow(
                f"SELECT {_SEL} FROM about_me WHERE id = $1 AND deleted_at IS NULL;",
                about_id,
                conn=conn,
            )
            if current is None:
                raise NotFoundError("About Me content not found")
            latest = await get_latest_revision(current["effective_date"], conn=conn)
            if current["revision"] != expected_revision or latest != expected_revision:
                raise ConflictError("Revision mismatch")

            created = await _insert_next_revision(conn, current["effective_date"], content_markdown)

    logger.info(f"about_me {about_id} revised: revision {created.revision} for {created.effective_date}")
    return created


async def get_about_me_by_id(about_id: UUID) -> AboutMe:
    """Direct lookup; soft-deleted rows are returned too."""
    row = await fetchrow(f"SELECT {_SEL} FROM about_me WHERE id = $1;", about_id)
    if row is None:
        raise NotFoundError("About Me content not found")
    return _row(row)


async def get_current_about_me(today: Optional[date] = None) -> AboutMe:
    """Highest active revision of the nearest effective date on or before `today`."""
    row = await fetchrow(
        f"""
        SELECT {_SEL}
          FROM about_me
         WHERE deleted_at IS NULL
           AND effective_date <= COALESCE($1::date, CURRENT_DATE)
         ORDER BY effective_date DESC, revision DESC
         LIMIT 1;
        """,
        today,
    )
    if row is None:
        raise NotFoundError("About Me content not found")
    return _row(row)


async def get_latest_revision(effective_date: date, conn: asyncpg.Connection | None = None) -> int:
    """Highest active revision for `effective_date`, 0 when there is none."""
    return await fetchval(
        """
        SELECT COALESCE(MAX(revision), 0)
          FROM about_me
         WHERE effective_date = $1
           AND deleted_at IS NULL;
        """,
        effective_date,
        conn=conn,
    )


async def list_revisions(effective_date: date, include_deleted: bool = False) -> list[AboutMe]:
    rows = await fetch(
        f"""
        SELECT {_SEL}
          FROM about_me
         WHERE effective_date = $1
           AND ($2::boolean OR deleted_at IS NULL)
         ORDER BY revision DESC, created_at DESC;
        """,
        effective_date,
        include_deleted,
    )
    return [_row(r) for r in rows]


async def soft_delete_about_me(about_id: UUID) -> None:
    """Soft delete under the date lock, so it serialises with revision assignment for that date."""
    async with translate_errors("soft delete about_me"):
        async with transaction() as conn:
            effective_date = await fetchval(
                "SELECT effective_date FROM about_me WHERE id = $1 AND deleted_at IS NULL;",
                about_id,
                conn=conn,
            )
            if effective_date is None:
                raise NotFoundError("About Me content not found")

            await _lock_date(conn, effective_date)

            status = await execute(
                "UPDATE about_me SET deleted_at = now() WHERE id = $1 AND deleted_at IS NULL;",
                about_id,
                conn=conn,
            )
            if affected_rows(status) == 0:
                raise NotFoundError("About Me content not found")

    logger.info(f"about_me {about_id} soft-deleted")


async def hard_delete_about_me(about_id: UUID) -> None:
    status = await execute("DELETE FROM about_me WHERE id = $1;", about_id)
    if affected_rows(status) == 0:
        raise NotFoundError("About Me content not found")
    logger.warning(f"about_me {about_id} hard-deleted")
