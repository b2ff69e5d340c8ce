"""
Production FastAPI Application
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import RedirectResponse

from src.platform.app_factory import create_app
from src.platform.config.di import cleanup, container, setup
from src.platform.config.wire_modules import WIRE_MODULES
from src.platform.database.asyncpg_setting import close_all_asyncpg_pools, warmup_asyncpg_pool
from src.platform.logging.loguru_io import Logger
from src.platform.observability.tracing import TracingConfig
from src.platform.state.kvrocks_client import kvrocks_client


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifespan: startup and shutdown."""
    Logger.base.info('🚀 [Ticket Core] Starting up...')

    tracing = TracingConfig(service_name='ticket-core')
    tracing.setup()
    tracing.instrument_asyncpg()
    tracing.instrument_redis()
    Logger.base.info('📊 [Ticket Core] OpenTelemetry tracing configured')

    setup()
    container.wire(modules=WIRE_MODULES)
    Logger.base.info('🔌 [Ticket Core] Dependency injection wired')

    # Fail-fast: rate limiting needs Kvrocks reachable at boot
    await kvrocks_client.initialize()
    Logger.base.info('📡 [Ticket Core] Kvrocks initialized')

    await warmup_asyncpg_pool()
    Logger.base.info('🏊 [Ticket Core] Asyncpg pool warmed up to MIN_SIZE')

    Logger.base.info('✅ [Ticket Core] Ready to serve requests')

    yield

    Logger.base.info('🛑 [Ticket Core] Shutting down...')

    await close_all_asyncpg_pools()
    Logger.base.info('🏊 [Ticket Core] Asyncpg pools closed')

    await kvrocks_client.disconnect()
    Logger.base.info('📡 [Ticket Core] Kvrocks disconnected')

    cleanup()
    tracing.shutdown()
    Logger.base.info('👋 [Ticket Core] Shutdown complete')


app = create_app(lifespan=lifespan)


@app.get('/')
async def root() -> RedirectResponse:
    return RedirectResponse(url='/docs')
