"""create blog_posts

Revision ID: b7d3f1a05e64
Revises: 9e4b2d6c8a13
Create Date: 2025-08-17 22:44:29.913457

"""
from typing import Sequence, Union

from alembic import op


# revision identifiers, used by Alembic.
revision: str = 'b7d3f1a05e64'
down_revision: Union[str, None] = '9e4b2d6c8a13'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
    CREATE EXTENSION IF NOT EXISTS pgcrypto;

    CREATE TABLE blog_posts (
        id                uuid PRIMARY KEY DEFAULT gen_random_uuid(),
        title             text NOT NULL,
        slug              text NOT NULL,
        excerpt           text NOT NULL,
        content_markdown  text NOT NULL,
        cover_image_url   text,
        tags              text[],
        seo_title         text,
        seo_description   text,
        published         boolean NOT NULL DEFAULT false,
        published_at      timestamptz,
        created_at        timestamptz NOT NULL DEFAULT now(),
        updated_at        timestamptz NOT NULL DEFAULT now(),
        deleted_at        timestamptz DEFAULT NULL
    );

    -- Slug is unique among ACTIVE posts only, case-insensitive
    CREATE UNIQUE INDEX blog_posts_slug_active_idx
        ON blog_posts (LOWER(slug))
        WHERE deleted_at IS NULL;

    CREATE INDEX blog_posts_published_at_idx ON blog_posts (published_at DESC);
    CREATE INDEX blog_posts_published_idx    ON blog_posts (published) WHERE published = true;
    CREATE INDEX blog_posts_tags_idx         ON blog_posts USING GIN (tags);
    """)


def downgrade() -> None:
    op.execute("""
    DROP INDEX IF EXISTS blog_posts_tags_idx;
    DROP INDEX IF EXISTS blog_posts_published_idx;
    DROP INDEX IF EXISTS blog_posts_published_at_idx;
    DROP INDEX IF EXISTS blog_posts_slug_active_idx;
    DROP TABLE IF EXISTS blog_posts;
    """)
