from __future__ import annotations

from typing import Optional
from uuid import UUID

from src.blog.models import BlogPost, BlogPostUpdate, NewBlogPost
from src.errors import ConflictError, InvalidInputError, NotFoundError, translate_errors
from src.tools.db import affected_rows, execute, fetch, fetchrow, fetchval
from src.tools.logger import logger

_SEL = (
    "id, title, slug, excerpt, content_markdown, cover_image_url, tags, seo_title, seo_description, "
    "published, published_at, created_at, updated_at, deleted_at"
)


def _row(r) -> BlogPost:
    return BlogPost(**dict(r))


def page_offset(page: int, per_page: int) -> int:
    """OFFSET for a 1-based page number."""
    return max(page - 1, 0) * per_page


async def blog_post_exists_with_slug(slug: str, exclude_id: Optional[UUID] = None) -> bool:
    return await fetchval(
        """
        SELECT EXISTS (
            SELECT 1
              FROM blog_posts
             WHERE LOWER(slug) = LOWER($1)
               AND deleted_at IS NULL
               AND ($2::uuid IS NULL OR id <> $2::uuid)
        );
        """,
        slug,
        exclude_id,
    )


async def create_blog_post(new: NewBlogPost) -> BlogPost:
    # The pre-check gives a clean error; the partial unique index still guards the race.
    if await blog_post_exists_with_slug(new.slug):
        raise ConflictError("Slug already exists")

    try:
        async with translate_errors("create blog post"):
            row = await fetchrow(
                f"""
                INSERT INTO blog_posts (
                    title, slug, excerpt, content_markdown, cover_image_url, tags,
                    seo_title, seo_description, published, published_at
                )
                VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9,
                        CASE WHEN $9::boolean THEN COALESCE($10::timestamptz, now()) ELSE $10::timestamptz END)
                RETURNING {_SEL};
                """,
                new.title,
                new.slug,
                new.excerpt,
                new.content_markdown,
                new.cover_image_url,
                new.tags,
                new.seo_title,
                new.seo_description,
                new.published,
                new.published_at,
            )
    except ConflictError as exc:
        raise ConflictError("Slug already exists") from exc

    logger.info(f"blog post {row['id']} created with slug {row['slug']!r}")
    return _row(row)


async def get_blog_post_by_id(post_id: UUID) -> BlogPost:
    row = await fetchrow(f"SELECT {_SEL} FROM blog_posts WHERE id = $1 AND deleted_at IS NULL;", post_id)
    if row is None:
        raise NotFoundError("Blog post not found")
    return _row(row)


async def get_blog_post_by_slug(slug: str) -> BlogPost:
    row = await fetchrow(
        f"SELECT {_SEL} FROM blog_posts WHERE LOWER(slug) = LOWER($1) AND deleted_at IS NULL;",
        slug,
    )
    if row is None:
        raise NotFoundError("Blog post not found")
    return _row(row)


async def update_blog_post(post_id: UUID, upd: BlogPostUpdate) -> BlogPost:
    if upd.slug is not None and await blog_post_exists_with_slug(upd.slug, exclude_id=post_id):
        raise ConflictError("Slug already exists")

    try:
        async with translate_errors("update blog post"):
            row = await fetchrow(
                f"""
                UPDATE blog_posts SET
                    title            = COALESCE($2, title),
                    slug             = COALESCE($3, slug),
                    excerpt          = COALESCE($4, excerpt),
                    content_markdown = COALESCE($5, content_markdown),
                    cover_image_url  = COALESCE($6, cover_image_url),
                    tags             = COALESCE($7, tags),
                    seo_title        = COALESCE($8, seo_title),
                    seo_description  = COALESCE($9, seo_description),
                    published        = COALESCE($10, published),
                    published_at     = COALESCE($11, published_at),
                    updated_at       = now()
                 WHERE id = $1
                   AND deleted_at IS NULL
                RETURNING {_SEL};
                """,
                post_id,
                upd.title,
                upd.slug,
                upd.excerpt,
                upd.content_markdown,
                upd.cover_image_url,
                upd.tags,
                upd.seo_title,
                upd.seo_description,
                upd.published,
                upd.published_at,
            )
    except ConflictError as exc:
        raise ConflictError("Slug already exists") from exc

    if row is None:
        raise NotFoundError("Blog post not found")
    return _row(row)


async def publish_blog_post(post_id: UUID, published: bool = True) -> BlogPost:
    """Toggle visibility; `published_at` is stamped on the first publish and kept afterwards."""
    row = await fetchrow(
        f"""
        UPDATE blog_posts
           SET published    = $2::boolean,
               published_at = CASE WHEN $2::boolean AND published_at IS NULL THEN now() ELSE published_at END,
               updated_at   = now()
         WHERE id = $1
           AND deleted_at IS NULL
        RETURNING {_SEL};
        """,
        post_id,
        published,
    )
    if row is None:
        raise NotFoundError("Blog post not found")
    return _row(row)


async def list_blog_posts(published_only: bool = True, page: int = 1, per_page: int = 10) -> list[BlogPost]:
    if per_page < 1:
        raise InvalidInputError("per_page must be at least 1")
    order = "published_at DESC NULLS LAST" if published_only else "created_at DESC"
    rows = await fetch(
        f"""
        SELECT {_SEL}
          FROM blog_posts
         WHERE deleted_at IS NULL
           AND ($1::boolean IS FALSE OR published = TRUE)
         ORDER BY {order}, id
         LIMIT $2 OFFSET $3;
        """,
        published_only,
        per_page,
        page_offset(page, per_page),
    )
    return [_row(r) for r in rows]


async def count_blog_posts(published_only: bool = True) -> int:
    # Same filter predicate as list_blog_posts
    return await fetchval(
        """
        SELECT COUNT(*)
          FROM blog_posts
         WHERE deleted_at IS NULL
           AND ($1::boolean IS FALSE OR published = TRUE);
        """,
        published_only,
    )


async def get_recent_blog_posts(limit: int = 5) -> list[BlogPost]:
    if limit < 1:
        raise InvalidInputError("limit must be at least 1")
    rows = await fetch(
        f"SELECT {_SEL} FROM blog_posts WHERE deleted_at IS NULL ORDER BY created_at DESC LIMIT $1;",
        limit,
    )
    return [_row(r) for r in rows]


async def search_blog_posts(query: str) -> list[BlogPost]:
    pattern = f"%{query}%"
    rows = await fetch(
        f"""
        SELECT {_SEL}
          FROM blog_posts
         WHERE deleted_at IS NULL
           AND (title ILIKE $1 OR content_markdown ILIKE $1)
         ORDER BY created_at DESC;
        """,
        pattern,
    )
    return [_row(r) for r in rows]


async def get_blog_posts_by_tag(tag: str) -> list[BlogPost]:
    rows = await fetch(
        f"""
        SELECT {_SEL}
          FROM blog_posts
         WHERE deleted_at IS NULL
           AND tags @> ARRAY[$1::text]
         ORDER BY created_at DESC;
        """,
        tag,
    )
    return [_row(r) for r in rows]


async def soft_delete_blog_post(post_id: UUID) -> None:
    status = await execute(
        "UPDATE blog_posts SET deleted_at = now() WHERE id = $1 AND deleted_at IS NULL;",
        post_id,
    )
    if affected_rows(status) == 0:
        raise NotFoundError("Blog post not found")
    logger.info(f"blog post {post_id} soft-deleted")


async def hard_delete_blog_post(post_id: UUID) -> None:
    status = await execute("DELETE FROM blog_posts WHERE id = $1;", post_id)
    if affected_rows(status) == 0:
        raise NotFoundError("Blog post not found")
    logger.warning(f"blog post {post_id} hard-deleted")
