from uuid import uuid4

import pytest

from src.errors import ConflictError, IntegrityError, NotFoundError
from src.tools.db import execute, fetchval
from src.users import (
    NewUser,
    count_users,
    create_user,
    get_user_by_email,
    get_user_by_id,
    list_audit,
    record_audit,
    soft_delete_user,
    update_user,
    user_exists,
)

pytestmark = [pytest.mark.asyncio(loop_scope="session"), pytest.mark.usefixtures("clean_db")]


def _new(email: str, **kw) -> NewUser:
    return NewUser(email=email, password_hash="argon2$fake", **kw)


async def test_create_and_lookup():
    user = await create_user(_new("Ada@Example.com", username="ada"))

    assert user.is_active
    assert not user.is_admin and not user.is_verified
    assert (await get_user_by_email("ada@example.com")).id == user.id
    assert await user_exists(user.id)
    assert await count_users() == 1


async def test_email_unique_case_insensitively_among_active_users():
    await create_user(_new("a@x.com"))
    with pytest.raises(ConflictError, match="already exists"):
        await create_user(_new("A@X.COM"))


async def test_email_reusable_after_soft_delete():
    first = await create_user(_new("a@x.com"))
    await soft_delete_user(first.id, deleted_by=None)

    second = await create_user(_new("A@x.com"))
    assert second.id != first.id
    assert (await get_user_by_email("a@x.com")).id == second.id
    # the deleted account is still addressable by id
    assert (await get_user_by_id(first.id)).deleted_at is not None


async def test_soft_delete_records_audit_entry():
    admin = await create_user(_new("admin@x.com", is_admin=True))
    user = await create_user(_new("u@x.com"))

    deleted = await soft_delete_user(user.id, deleted_by=admin.id)
    assert deleted.deleted_by == admin.id
    assert not await user_exists(user.id)
    assert await count_users() == 1

    entries = await list_audit(user.id)
    assert [(e.action, e.performed_by) for e in entries] == [("soft_delete", admin.id)]


async def test_second_soft_delete_conflicts_and_keeps_timestamp():
    user = await create_user(_new("u@x.com"))
    first = await soft_delete_user(user.id, deleted_by=None)

    with pytest.raises(ConflictError):
        await soft_delete_user(user.id, deleted_by=None)
    assert (await get_user_by_id(user.id)).deleted_at == first.deleted_at
    assert len(await list_audit(user.id)) == 1


async def test_soft_delete_unknown_user():
    with pytest.raises(NotFoundError):
        await soft_delete_user(uuid4(), deleted_by=None)


async def test_audit_requires_existing_user():
    with pytest.raises(IntegrityError):
        await record_audit(uuid4(), "soft_delete")


async def test_update_user_partial_and_trigger_refreshes_updated_at():
    user = await create_user(_new("u@x.com", username="old"))

    updated = await update_user(user.id, username="new")
    assert updated.username == "new"
    assert updated.password_hash == user.password_hash
    assert updated.updated_at >= user.updated_at

    # a caller-supplied updated_at is overwritten by the trigger
    await execute("UPDATE users SET updated_at = '2000-01-01' WHERE id = $1;", user.id)
    refreshed = await get_user_by_id(user.id)
    assert refreshed.updated_at >= updated.updated_at

    with pytest.raises(NotFoundError):
        await update_user(uuid4(), username="ghost")


async def test_deleted_by_is_cleared_when_deleter_is_removed():
    admin = await create_user(_new("admin@x.com"))
    user = await create_user(_new("u@x.com"))
    await execute("UPDATE users SET deleted_at = now(), deleted_by = $1 WHERE id = $2;", admin.id, user.id)

    await execute("DELETE FROM users WHERE id = $1;", admin.id)

    row = await get_user_by_id(user.id)
    assert row.deleted_at is not None
    assert row.deleted_by is None


async def test_active_email_index_exists():
    assert await fetchval("SELECT to_regclass('unique_active_users_email') IS NOT NULL;")
