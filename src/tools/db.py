import asyncio
from contextlib import asynccontextmanager

import asyncpg

from src.config import settings
from src.tools.logger import logger

_pool: asyncpg.Pool | None = None


async def init_pool(postgres_url: str = str(settings.DATABASE_URL)) -> asyncpg.Pool:
    global _pool
    if _pool is not None:
        return _pool

    logger.info("Connecting to Postgres …")
    wait_seconds = 2
    for attempt in range(1, settings.DB_CONNECT_RETRIES + 1):
        try:
            _pool = await asyncpg.create_pool(
                str(postgres_url),
                min_size=settings.DB_POOL_MIN_SIZE,
                max_size=settings.DB_POOL_MAX_SIZE,
            )
            break
        except (OSError, asyncpg.PostgresError) as exc:
            if attempt == settings.DB_CONNECT_RETRIES:
                raise
            logger.warning(
                f"Failed to connect to database (attempt {attempt}/{settings.DB_CONNECT_RETRIES}): "
                f"{exc}. Retrying in {wait_seconds}s..."
            )
            await asyncio.sleep(wait_seconds)
            wait_seconds *= 2

    logger.success("Postgres connection pool ready")
    return _pool


async def close_pool() -> None:
    global _pool
    if _pool is not None:
        await _pool.close()
        _pool = None
        logger.info("Postgres connection pool closed")


@asynccontextmanager
async def get_conn(conn: asyncpg.Connection | None = None):
    """Yield `conn` when the caller already holds one, otherwise borrow from the pool."""
    if conn is not None:
        yield conn
        return
    if _pool is None:
        await init_pool()
    async with _pool.acquire() as pooled:
        yield pooled


@asynccontextmanager
async def transaction():
    """
    Connection inside a transaction: commit on clean exit, rollback on error.
    Transaction-scoped advisory locks taken on it are released at the same time.
    """
    async with get_conn() as conn:
        async with conn.transaction():
            yield conn


async def fetchrow(sql: str, *args, conn: asyncpg.Connection | None = None):
    async with get_conn(conn) as c:
        return await c.fetchrow(sql, *args)


async def fetch(sql: str, *args, conn: asyncpg.Connection | None = None):
    async with get_conn(conn) as c:
        return await c.fetch(sql, *args)


async def fetchval(sql: str, *args, conn: asyncpg.Connection | None = None):
    async with get_conn(conn) as c:
        return await c.fetchval(sql, *args)


async def execute(sql: str, *args, conn: asyncpg.Connection | None = None) -> str:
    async with get_conn(conn) as c:
        return await c.execute(sql, *args)


async def check_connection() -> None:
    await fetchval("SELECT 1;")


def affected_rows(status: str) -> int:
    # asyncpg returns the command tag, e.g. "UPDATE 1" / "DELETE 0"
    try:
        return int(status.rsplit(" ", 1)[-1])
    except (ValueError, IndexError):
        return 0
