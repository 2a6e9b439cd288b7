import asyncio
from datetime import date

import pytest
from pydantic import ValidationError

from src.about_me import (
    NewAboutMe,
    create_about_me,
    create_about_me_with_retry,
    get_about_me_by_id,
    get_current_about_me,
    get_latest_revision,
    hard_delete_about_me,
    list_revisions,
    revise_about_me,
    soft_delete_about_me,
)
from src.config import settings
from src.errors import ConflictError, InvalidInputError, NotFoundError, RetryableError, translate_errors
from src.tools.db import execute, transaction
from src.tools.locks import advisory_xact_lock, date_lock_key

pytestmark = [pytest.mark.asyncio(loop_scope="session"), pytest.mark.usefixtures("clean_db")]

DAY = date(2024, 5, 1)


def _new(text: str, d: date = DAY) -> NewAboutMe:
    return NewAboutMe(content_markdown=text, effective_date=d)


async def test_first_revision_is_one():
    created = await create_about_me(_new("hello"))
    assert created.revision == 1
    assert created.is_active
    assert await get_latest_revision(DAY) == 1


async def test_revisions_are_scoped_per_date():
    await create_about_me(_new("a"))
    await create_about_me(_new("b"))
    other = await create_about_me(_new("c", date(2024, 6, 1)))
    assert other.revision == 1
    assert await get_latest_revision(DAY) == 2


async def test_concurrent_creates_get_distinct_gapless_revisions():
    n = 8
    results = await asyncio.gather(*(create_about_me(_new(f"v{i}")) for i in range(n)))

    assert sorted(r.revision for r in results) == list(range(1, n + 1))
    active = await list_revisions(DAY)
    assert sorted(r.revision for r in active) == list(range(1, n + 1))


async def test_writer_waits_only_for_its_own_date():
    other_day = date(2024, 5, 2)
    async with transaction() as conn:
        await advisory_xact_lock(conn, "about_me", date_lock_key(DAY))

        unrelated = await asyncio.wait_for(create_about_me(_new("free", other_day)), timeout=5)
        assert unrelated.revision == 1

        blocked = asyncio.create_task(create_about_me(_new("queued")))
        await asyncio.sleep(0.3)
        assert not blocked.done()

    created = await asyncio.wait_for(blocked, timeout=5)
    assert created.revision == 1


async def test_soft_deleted_revision_is_reused_but_row_kept():
    first = await create_about_me(_new("first"))
    await soft_delete_about_me(first.id)

    again = await create_about_me(_new("second"))
    assert again.revision == 1

    kept = await get_about_me_by_id(first.id)
    assert kept.deleted_at is not None
    assert not kept.is_active
    assert [r.id for r in await list_revisions(DAY)] == [again.id]
    assert {r.id for r in await list_revisions(DAY, include_deleted=True)} == {first.id, again.id}


async def test_next_revision_ignores_deleted_rows_above_active_max():
    rows = [await create_about_me(_new(f"r{i}")) for i in range(4)]
    await soft_delete_about_me(rows[3].id)

    assert await get_latest_revision(DAY) == 3
    nxt = await create_about_me(_new("r5"))
    assert nxt.revision == 4


async def test_second_soft_delete_is_not_found():
    row = await create_about_me(_new("x"))
    await soft_delete_about_me(row.id)
    with pytest.raises(NotFoundError):
        await soft_delete_about_me(row.id)


async def test_hard_delete_removes_row():
    row = await create_about_me(_new("x"))
    await hard_delete_about_me(row.id)
    with pytest.raises(NotFoundError):
        await get_about_me_by_id(row.id)
    with pytest.raises(NotFoundError):
        await hard_delete_about_me(row.id)


async def test_revise_appends_new_revision():
    base = await create_about_me(_new("draft"))
    revised = await revise_about_me(base.id, "final", expected_revision=1)

    assert revised.revision == 2
    assert revised.effective_date == DAY
    assert revised.content_markdown == "final"
    assert (await get_about_me_by_id(base.id)).content_markdown == "draft"


async def test_revise_with_stale_revision_conflicts():
    base = await create_about_me(_new("draft"))
    await revise_about_me(base.id, "second", expected_revision=1)

    with pytest.raises(ConflictError):
        await revise_about_me(base.id, "third", expected_revision=1)
    assert await get_latest_revision(DAY) == 2


async def test_revise_rejects_empty_content_and_unknown_id():
    base = await create_about_me(_new("draft"))
    with pytest.raises(InvalidInputError):
        await revise_about_me(base.id, "", expected_revision=1)

    await soft_delete_about_me(base.id)
    with pytest.raises(NotFoundError):
        await revise_about_me(base.id, "text", expected_revision=1)


async def test_current_picks_latest_date_not_after_today():
    await create_about_me(_new("old", date(2024, 1, 1)))
    await create_about_me(_new("old v2", date(2024, 1, 1)))
    await create_about_me(_new("future", date(2024, 12, 1)))

    current = await get_current_about_me(today=date(2024, 6, 1))
    assert current.content_markdown == "old v2"
    assert current.revision == 2

    with pytest.raises(NotFoundError):
        await get_current_about_me(today=date(2023, 1, 1))


async def test_pre_1900_date_rejected_by_model_and_table():
    with pytest.raises(ValidationError):
        _new("too old", date(1899, 12, 31))

    with pytest.raises(InvalidInputError):
        async with translate_errors("raw insert"):
            await execute(
                "INSERT INTO about_me (revision, content_markdown, effective_date) VALUES (1, 'x', '1899-12-31');"
            )


async def test_negative_revision_rejected_by_table():
    with pytest.raises(InvalidInputError):
        async with translate_errors("raw insert"):
            await execute(
                "INSERT INTO about_me (revision, content_markdown, effective_date) VALUES (-1, 'x', '2024-05-01');"
            )


async def test_duplicate_active_revision_rejected_by_index():
    await create_about_me(_new("first"))
    with pytest.raises(ConflictError):
        async with translate_errors("raw insert"):
            await execute(
                "INSERT INTO about_me (revision, content_markdown, effective_date) VALUES (1, 'dup', '2024-05-01');"
            )


async def test_blocked_writer_gives_up_with_retryable_error(monkeypatch):
    monkeypatch.setattr(settings, "DB_LOCK_TIMEOUT_MS", 200)

    async with transaction() as conn:
        await advisory_xact_lock(conn, "about_me", date_lock_key(DAY))

        with pytest.raises(RetryableError):
            await asyncio.wait_for(create_about_me(_new("stuck")), timeout=5)
        with pytest.raises(RetryableError):
            await asyncio.wait_for(create_about_me_with_retry(_new("stuck"), attempts=2), timeout=5)

    assert await get_latest_revision(DAY) == 0
    created = await create_about_me(_new("free"))
    assert created.revision == 1


async def test_soft_delete_waits_for_date_lock():
    row = await create_about_me(_new("x"))

    async with transaction() as conn:
        await advisory_xact_lock(conn, "about_me", date_lock_key(DAY))
        pending = asyncio.create_task(soft_delete_about_me(row.id))
        await asyncio.sleep(0.3)
        assert not pending.done()

    await asyncio.wait_for(pending, timeout=5)
    assert (await get_about_me_by_id(row.id)).deleted_at is not None
