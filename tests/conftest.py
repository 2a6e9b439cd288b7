import os

# Settings are read at import time, so the required secrets must exist first.
os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret-0123456789abcdef0123456789")
os.environ.setdefault("REFRESH_TOKEN_SECRET", "test-refresh-secret-0123456789abcdef012345")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
import pytest_asyncio
from testcontainers.postgres import PostgresContainer

from src.tools import db
from src.tools.migrations import upgrade_head

TABLES = "user_audit, about_me, blog_posts, contact_me_messages, users"


@pytest.fixture(scope="session")
def pg_url():
    with PostgresContainer("postgres:16-alpine", driver=None) as pg:
        url = pg.get_connection_url()
        upgrade_head(url)
        yield url


@pytest_asyncio.fixture(scope="session", loop_scope="session")
async def pool(pg_url):
    await db.close_pool()
    await db.init_pool(postgres_url=pg_url)
    yield
    await db.close_pool()


@pytest_asyncio.fixture(loop_scope="session")
async def clean_db(pool):
    await db.execute(f"TRUNCATE {TABLES} RESTART IDENTITY CASCADE;")
    yield
