from __future__ import annotations

from uuid import UUID

from src.contact.models import ContactMessage, NewContactMessage
from src.errors import NotFoundError, translate_errors
from src.tools.db import affected_rows, execute, fetch, fetchrow, fetchval
from src.tools.logger import logger

_SEL = "id, name, email, subject, message, created_at, deleted_at"


async def create_contact_message(msg: NewContactMessage) -> ContactMessage:
    async with translate_errors("create contact message"):
        row = await fetchrow(
            f"""
            INSERT INTO contact_me_messages (name, email, subject, message)
            VALUES ($1, $2, $3, $4)
            RETURNING {_SEL};
            """,
            msg.name,
            msg.email,
            msg.subject,
            msg.message,
        )
    logger.info(f"contact message {row['id']} received from {msg.email}")
    return ContactMessage(**dict(row))


async def get_contact_message_by_id(message_id: UUID) -> ContactMessage:
    row = await fetchrow(
        f"SELECT {_SEL} FROM contact_me_messages WHERE id = $1 AND deleted_at IS NULL;",
        message_id,
    )
    if row is None:
        raise NotFoundError("Contact message not found")
    return ContactMessage(**dict(row))


async def list_contact_messages() -> list[ContactMessage]:
    rows = await fetch(
        f"SELECT {_SEL} FROM contact_me_messages WHERE deleted_at IS NULL ORDER BY created_at DESC, id;"
    )
    return [ContactMessage(**dict(r)) for r in rows]


async def count_contact_messages() -> int:
    return await fetchval("SELECT COUNT(*) FROM contact_me_messages WHERE deleted_at IS NULL;")


async def soft_delete_contact_message(message_id: UUID) -> None:
    status = await execute(
        "UPDATE contact_me_messages SET deleted_at = now() WHERE id = $1 AND deleted_at IS NULL;",
        message_id,
    )
    if affected_rows(status) == 0:
        raise NotFoundError("Contact message not found")


async def hard_delete_contact_message(message_id: UUID) -> None:
    status = await execute("DELETE FROM contact_me_messages WHERE id = $1;", message_id)
    if affected_rows(status) == 0:
        raise NotFoundError("Contact message not found")
