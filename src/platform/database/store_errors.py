"""Translation of asyncpg driver failures into the service's store error types."""

from collections.abc import Iterator
from contextlib import contextmanager

import asyncpg

from src.platform.exception.exceptions import PersistenceError, TransientStoreError


TRANSIENT_STORE_ERRORS: tuple[type[BaseException], ...] = (
    asyncpg.SerializationError,
    asyncpg.DeadlockDetectedError,
    asyncpg.LockNotAvailableError,
    asyncpg.QueryCanceledError,
    asyncpg.ConnectionDoesNotExistError,
    asyncpg.PostgresConnectionError,
    asyncpg.TooManyConnectionsError,
    asyncpg.CannotConnectNowError,
    OSError,
    TimeoutError,
)


@contextmanager
def translate_store_errors() -> Iterator[None]:
    try:
        yield
    except TRANSIENT_STORE_ERRORS as e:
        raise TransientStoreError(f'Store unavailable: {type(e).__name__}: {e}') from e
    except asyncpg.PostgresError as e:
        raise PersistenceError(f'Store rejected the operation: {type(e).__name__}: {e}') from e


def constraint_name_of(error: asyncpg.UniqueViolationError) -> str:
    return getattr(error, 'constraint_name', None) or ''
