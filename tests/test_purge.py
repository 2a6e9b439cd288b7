from datetime import datetime, timedelta, timezone

import pytest

from src.tools.db import execute, fetchval
from src.users import NewUser, create_user, is_purge_eligible, list_purge_eligible_user_ids, purge_cutoff

NOW = datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)


def test_cutoff_is_seven_days_back():
    assert purge_cutoff(NOW) == NOW - timedelta(days=7)


@pytest.mark.parametrize(
    "deleted_at, expected",
    [
        (None, False),
        (NOW - timedelta(days=6), False),
        (NOW - timedelta(days=7), False),
        (NOW - timedelta(days=7, seconds=1), True),
        (NOW - timedelta(days=30), True),
    ],
)
def test_is_purge_eligible(deleted_at, expected):
    assert is_purge_eligible(deleted_at, now=NOW) is expected


@pytest.mark.asyncio(loop_scope="session")
@pytest.mark.usefixtures("clean_db")
async def test_only_users_deleted_over_a_week_ago_are_listed():
    old = await create_user(NewUser(email="old@x.com", password_hash="h"))
    recent = await create_user(NewUser(email="recent@x.com", password_hash="h"))
    await create_user(NewUser(email="active@x.com", password_hash="h"))

    await execute("UPDATE users SET deleted_at = now() - interval '8 days' WHERE id = $1;", old.id)
    await execute("UPDATE users SET deleted_at = now() - interval '6 days' WHERE id = $1;", recent.id)

    assert await list_purge_eligible_user_ids() == [old.id]


@pytest.mark.asyncio(loop_scope="session")
@pytest.mark.usefixtures("clean_db")
async def test_sql_predicate_matches_python_one():
    assert await fetchval("SELECT should_purge_user(now() - interval '8 days');") is True
    assert await fetchval("SELECT should_purge_user(now() - interval '6 days');") is False
    assert await fetchval("SELECT should_purge_user(NULL);") is False
    assert await fetchval(
        "SELECT should_purge_user($1::timestamptz, $2::timestamptz);",
        NOW - timedelta(days=8),
        NOW,
    ) is True
