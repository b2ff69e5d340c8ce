import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import asyncpg
from uuid_utils import UUID

from src.platform.config.core_setting import settings
from src.platform.database.store_errors import translate_store_errors
from src.platform.logging.loguru_io import Logger


# Global connection pools per event loop
asyncpg_pools: dict[int, asyncpg.Pool] = {}


async def _init_connection(conn: asyncpg.Connection) -> None:
    """Initialize each connection with a uuid_utils codec for UUID7 ticket ids"""

    def _uuid_decoder(value: bytes) -> UUID:
        return UUID(bytes=value)

    def _uuid_encoder(value: UUID) -> bytes:
        return value.bytes

    await conn.set_type_codec(
        'uuid',
        encoder=_uuid_encoder,
        decoder=_uuid_decoder,
        schema='pg_catalog',
        format='binary',
    )


async def get_asyncpg_pool() -> asyncpg.Pool:
    current_loop = asyncio.get_running_loop()
    loop_id = id(current_loop)

    if loop_id in asyncpg_pools:
        return asyncpg_pools[loop_id]

    dsn = settings.DATABASE_URL_ASYNC.replace('postgresql+asyncpg://', 'postgresql://')
    with translate_store_errors():
        pool = await asyncpg.create_pool(
            dsn,
            min_size=settings.ASYNCPG_POOL_MIN_SIZE,
            max_size=settings.ASYNCPG_POOL_MAX_SIZE,
            command_timeout=settings.ASYNCPG_POOL_COMMAND_TIMEOUT,
            max_inactive_connection_lifetime=settings.ASYNCPG_POOL_MAX_INACTIVE_LIFETIME,
            timeout=settings.ASYNCPG_POOL_TIMEOUT,
            max_queries=settings.ASYNCPG_POOL_MAX_QUERIES,
            init=_init_connection,
        )

    asyncpg_pools[loop_id] = pool
    Logger.base.info(
        f'🏊 [Pool] Created asyncpg pool (min={pool.get_min_size()}, max={pool.get_max_size()})'
    )
    return pool


@asynccontextmanager
async def acquire_connection(
    conn: asyncpg.Connection | None = None,
) -> AsyncIterator[asyncpg.Connection]:
    """
    Yield `conn` when a caller already holds one (Unit of Work), otherwise
    borrow a connection from the pool for the duration of the block.

    Transient driver failures inside the block surface as TransientStoreError.
    """
    if conn is not None:
        with translate_store_errors():
            yield conn
        return

    with translate_store_errors():
        pool = await get_asyncpg_pool()
        async with pool.acquire() as pooled:
            yield pooled


async def warmup_asyncpg_pool() -> int:
    """Acquire MIN_SIZE connections and release them so first requests skip the connect"""
    pool = await get_asyncpg_pool()
    connections: list[asyncpg.Connection] = []

    try:
        for i in range(settings.ASYNCPG_POOL_MIN_SIZE):
            try:
                connections.append(await pool.acquire(timeout=settings.ASYNCPG_POOL_TIMEOUT))
            except asyncio.TimeoutError:
                Logger.base.warning(f'⚠️  [Pool Warmup] Timeout at {i + 1} connections')
                break
    finally:
        for conn in connections:
            await pool.release(conn)

    Logger.base.info(
        f'✅ [Pool Warmup] {len(connections)} connections ready '
        f'(size={pool.get_size()}, idle={pool.get_idle_size()})'
    )
    return len(connections)


async def close_all_asyncpg_pools() -> None:
    """Close every pool; only call during application shutdown"""
    for loop_id, pool in list(asyncpg_pools.items()):
        try:
            await pool.close()
        except (OSError, asyncpg.PostgresError) as e:
            Logger.base.warning(f'⚠️  [Pool] Failed to close pool for loop {loop_id}: {e}')
    asyncpg_pools.clear()
