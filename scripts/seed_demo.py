"""
Populate a couple of demo rows so local dev & CI aren't empty.
Run once: `python -m scripts.seed_demo`
"""
import asyncio
from datetime import date

from src.about_me import NewAboutMe, create_about_me
from src.blog import NewBlogPost, create_blog_post
from src.contact import NewContactMessage, create_contact_message
from src.tools.db import close_pool, init_pool
from src.tools.logger import logger


async def main() -> None:
    await init_pool()
    try:
        await create_about_me(NewAboutMe(content_markdown="# Hi\n\nI build backends.", effective_date=date.today()))
        await create_blog_post(
            NewBlogPost(
                title="Hello, world",
                excerpt="First post",
                content_markdown="Welcome to the blog.",
                tags=["intro"],
                published=True,
            )
        )
        await create_contact_message(
            NewContactMessage(name="Demo", email="demo@example.com", subject="Hi", message="Nice site!")
        )
    finally:
        await close_pool()
    logger.success("✅ Demo content inserted")


if __name__ == "__main__":
    asyncio.run(main())
