"""create about_me

Revision ID: 9e4b2d6c8a13
Revises: 5c1f0a7e9b21
Create Date: 2025-08-04 21:31:01.502871

Versioned "about me" content. Revision numbers are assigned by the
application under a per-date advisory lock (src/about_me/repository.py);
there is no trigger here.
"""
from typing import Sequence, Union

from alembic import op


# revision identifiers, used by Alembic.
revision: str = '9e4b2d6c8a13'
down_revision: Union[str, None] = '5c1f0a7e9b21'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
    CREATE EXTENSION IF NOT EXISTS pgcrypto;

    CREATE TABLE about_me (
        id                uuid PRIMARY KEY DEFAULT gen_random_uuid(),
        revision          integer NOT NULL,
        content_markdown  text NOT NULL,
        effective_date    date NOT NULL,
        created_at        timestamptz NOT NULL DEFAULT now(),
        updated_at        timestamptz NOT NULL DEFAULT now(),
        deleted_at        timestamptz DEFAULT NULL,
        -- 0 is accepted for historical rows; the store itself numbers from 1
        CONSTRAINT about_me_revision_check CHECK (revision >= 0),
        CONSTRAINT about_me_effective_date_check CHECK (effective_date >= DATE '1900-01-01')
    );

    CREATE INDEX idx_about_me_current
        ON about_me (effective_date DESC, revision DESC);

    CREATE INDEX idx_about_me_revisions
        ON about_me (effective_date, revision DESC);

    -- One active row per (effective_date, revision); deleted rows keep their number
    CREATE UNIQUE INDEX idx_about_me_active
        ON about_me (effective_date DESC, revision DESC)
        WHERE deleted_at IS NULL;

    COMMENT ON TABLE about_me IS 'Append-only, soft-deletable revisions of the about-me text per effective date';
    COMMENT ON COLUMN about_me.revision IS 'Per-effective_date sequence number, assigned at insert';
    """)


def downgrade() -> None:
    op.execute("""
    DROP INDEX IF EXISTS idx_about_me_active;
    DROP INDEX IF EXISTS idx_about_me_revisions;
    DROP INDEX IF EXISTS idx_about_me_current;
    DROP TABLE IF EXISTS about_me;
    """)
