from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import Awaitable, Callable, TypeVar

from asyncpg import exceptions as pg_exc

from src.tools.logger import logger

T = TypeVar("T")


class StoreError(Exception):
    """Base class for every error the store surfaces to its callers."""


class NotFoundError(StoreError):
    pass


class ConflictError(StoreError):
    """Write rejected by a uniqueness rule or an optimistic-concurrency check."""


class InvalidInputError(StoreError):
    """Input rejected by validation or by a CHECK / NOT NULL constraint."""


class IntegrityError(StoreError):
    """Write references a row that does not exist (foreign-key violation)."""


class RetryableError(StoreError):
    """Transient lock / deadlock / serialization failure. Safe to retry."""


_RETRYABLE = (
    pg_exc.DeadlockDetectedError,
    pg_exc.LockNotAvailableError,
    pg_exc.SerializationError,
    pg_exc.QueryCanceledError,  # statement_timeout / lock_timeout
)


@asynccontextmanager
async def translate_errors(context: str):
    """Map asyncpg constraint and lock errors raised inside the block to StoreError subclasses."""
    try:
        yield
    except pg_exc.UniqueViolationError as exc:
        raise ConflictError(f"{context}: {getattr(exc, 'detail', None) or exc}") from exc
    except (pg_exc.CheckViolationError, pg_exc.NotNullViolationError) as exc:
        raise InvalidInputError(f"{context}: {exc}") from exc
    except pg_exc.ForeignKeyViolationError as exc:
        raise IntegrityError(f"{context}: {getattr(exc, 'detail', None) or exc}") from exc
    except _RETRYABLE as exc:
        raise RetryableError(f"{context}: {exc}") from exc


async def retry_on_transient(
    fn: Callable[[], Awaitable[T]],
    *,
    attempts: int = 3,
    base_delay: float = 0.05,
) -> T:
    """Re-run `fn` when it raises RetryableError; anything else propagates immediately."""
    if attempts < 1:
        raise ValueError(f"attempts must be at least 1, got {attempts}")
    delay = base_delay
    for attempt in range(1, attempts + 1):
        try:
            return await fn()
        except RetryableError as exc:
            if attempt == attempts:
                raise
            logger.warning(f"Transient failure (attempt {attempt}/{attempts}): {exc}. Retrying in {delay:.2f}s")
            await asyncio.sleep(delay)
            delay *= 2
    raise AssertionError("unreachable")
