"""
Unit of Work - one asyncpg connection and transaction shared by the
repositories that take part in it.

Usage:
    async with uow:
        await uow.some_repo.write(...)
        await uow.commit()

Leaving the block without `commit()` rolls everything back.
"""

from __future__ import annotations

import abc
from types import TracebackType
from typing import Self

import asyncpg
from asyncpg.transaction import Transaction

from src.platform.database.asyncpg_setting import get_asyncpg_pool
from src.platform.database.store_errors import translate_store_errors
from src.platform.logging.loguru_io import Logger


class AbstractUnitOfWork(abc.ABC):
    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.rollback()

    async def commit(self) -> None:
        await self._commit()

    @abc.abstractmethod
    async def _commit(self) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    async def rollback(self) -> None:
        raise NotImplementedError


class AsyncpgUnitOfWork(AbstractUnitOfWork):
    """Subclasses bind their repositories to `self.connection` in `_bind_repositories`"""

    def __init__(self) -> None:
        self.connection: asyncpg.Connection | None = None
        self._pool: asyncpg.Pool | None = None
        self._transaction: Transaction | None = None
        self._finished = False

    @abc.abstractmethod
    def _bind_repositories(self, connection: asyncpg.Connection) -> None:
        raise NotImplementedError

    async def __aenter__(self) -> Self:
        with translate_store_errors():
            self._pool = await get_asyncpg_pool()
            self.connection = await self._pool.acquire()
            self._transaction = self.connection.transaction()
            try:
                await self._transaction.start()
            except BaseException:
                await self._pool.release(self.connection)
                self.connection = None
                raise
        self._finished = False
        self._bind_repositories(self.connection)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        try:
            await self.rollback()
        except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError) as e:
            # Connection is already broken; the pool discards it on release
            Logger.base.warning(f'⚠️  [UOW] Rollback failed: {e}')
        finally:
            if self._pool is not None and self.connection is not None:
                await self._pool.release(self.connection)
            self.connection = None
            self._transaction = None

    async def _commit(self) -> None:
        if self._transaction is None or self._finished:
            raise RuntimeError('Unit of work is not active')
        with translate_store_errors():
            await self._transaction.commit()
        self._finished = True

    async def rollback(self) -> None:
        if self._transaction is None or self._finished:
            return
        self._finished = True
        await self._transaction.rollback()
