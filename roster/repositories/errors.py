import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import asyncpg

log: logging.Logger = logging.getLogger(__name__)


class StorageUnavailableError(Exception):
    pass


class DuplicatePlayerError(Exception):
    pass


class TeamReferenceError(Exception):
    pass


@asynccontextmanager
async def acquire(pool: asyncpg.Pool) -> AsyncIterator[asyncpg.Connection]:
    """Acquire a connection and translate driver failures into store errors."""
    try:
        async with pool.acquire() as conn:
            yield conn
    except asyncpg.UniqueViolationError as e:
        raise DuplicatePlayerError(str(e)) from e
    except asyncpg.ForeignKeyViolationError as e:
        raise TeamReferenceError(str(e)) from e
    except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError) as e:
        log.error(f"Storage failure: {e}", exc_info=True)
        raise StorageUnavailableError(str(e)) from e
