"""create contact_me_messages

Revision ID: d2a8c4e6f390
Revises: b7d3f1a05e64
Create Date: 2025-10-14 21:05:02.340118

"""
from typing import Sequence, Union

from alembic import op


# revision identifiers, used by Alembic.
revision: str = 'd2a8c4e6f390'
down_revision: Union[str, None] = 'b7d3f1a05e64'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
    CREATE EXTENSION IF NOT EXISTS pgcrypto;

    CREATE TABLE contact_me_messages (
        id          uuid PRIMARY KEY DEFAULT gen_random_uuid(),
        name        text NOT NULL,
        email       text NOT NULL,
        subject     text,
        message     text NOT NULL,
        created_at  timestamptz NOT NULL DEFAULT now(),
        deleted_at  timestamptz NULL
    );

    CREATE INDEX idx_contact_me_message_email      ON contact_me_messages (email);
    CREATE INDEX idx_contact_me_messages_deleted_at ON contact_me_messages (deleted_at);
    CREATE INDEX idx_contact_me_messages_active     ON contact_me_messages (created_at) WHERE deleted_at IS NULL;
    """)


def downgrade() -> None:
    op.execute("""
    DROP INDEX IF EXISTS idx_contact_me_messages_active;
    DROP INDEX IF EXISTS idx_contact_me_messages_deleted_at;
    DROP INDEX IF EXISTS idx_contact_me_message_email;
    DROP TABLE IF EXISTS contact_me_messages;
    """)
