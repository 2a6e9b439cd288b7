from __future__ import annotations

from datetime import date
from typing import Optional

import asyncpg

LOCK_EPOCH = date(2000, 1, 1)


def date_lock_key(d: date) -> int:
    """Days between `d` and 2000-01-01; fits int4 for every representable date."""
    return (d - LOCK_EPOCH).days


async def advisory_xact_lock(
    conn: asyncpg.Connection,
    table: str,
    key: int,
    timeout_ms: Optional[int] = None,
) -> None:
    """
    Block until the (table, key) advisory lock is held by the current transaction.

    The namespace half of the key is the table's OID so locks of different
    tables never collide. Released by COMMIT / ROLLBACK only.

    With `timeout_ms` the wait is bounded by a transaction-local `lock_timeout`;
    Postgres then raises LockNotAvailableError.
    """
    if timeout_ms:
        await conn.execute("SELECT set_config('lock_timeout', $1, true);", f"{timeout_ms}ms")
    await conn.execute("SELECT pg_advisory_xact_lock($1::text::regclass::int, $2);", table, key)
