"""
Purge eligibility for soft-deleted users.

Only the predicate lives here. Hard-deleting eligible rows is the job of an
external reaper, which scans `list_purge_eligible_user_ids()`.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

from src.tools.db import fetch

PURGE_RETENTION = timedelta(days=7)


def _now() -> datetime:
    return datetime.now(tz=timezone.utc)


def purge_cutoff(now: Optional[datetime] = None) -> datetime:
    return (now or _now()) - PURGE_RETENTION


def is_purge_eligible(deleted_at: Optional[datetime], now: Optional[datetime] = None) -> bool:
    if deleted_at is None:
        return False
    return deleted_at < purge_cutoff(now)


async def list_purge_eligible_user_ids(now: Optional[datetime] = None) -> list[UUID]:
    # Same predicate as should_purge_user(); served by idx_users_purge_eligible.
    rows = await fetch(
        """
        SELECT id
          FROM users
         WHERE deleted_at IS NOT NULL
           AND deleted_at < $1
         ORDER BY deleted_at;
        """,
        purge_cutoff(now),
    )
    return [r["id"] for r in rows]
