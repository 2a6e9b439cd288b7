from __future__ import annotations

from typing import Optional
from uuid import UUID

import asyncpg

from src.errors import translate_errors
from src.tools.db import fetch, fetchrow
from src.users.models import UserAuditEntry

# user_audit is append-only: there is deliberately no update / delete here.


async def record_audit(
    user_id: UUID,
    action: str,
    performed_by: Optional[UUID] = None,
    conn: asyncpg.Connection | None = None,
) -> UserAuditEntry:
    async with translate_errors("record user audit"):
        row = await fetchrow(
            """
            INSERT INTO user_audit (user_id, action, performed_by)
            VALUES ($1, $2, $3)
            RETURNING id, user_id, action, performed_by, performed_at;
            """,
            user_id,
            action,
            performed_by,
            conn=conn,
        )
    return UserAuditEntry(**dict(row))


async def list_audit(user_id: UUID) -> list[UserAuditEntry]:
    rows = await fetch(
        """
        SELECT id, user_id, action, performed_by, performed_at
          FROM user_audit
         WHERE user_id = $1
         ORDER BY performed_at, id;
        """,
        user_id,
    )
    return [UserAuditEntry(**dict(r)) for r in rows]
