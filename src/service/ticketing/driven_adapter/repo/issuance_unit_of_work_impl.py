import asyncpg

from src.platform.database.unit_of_work import AsyncpgUnitOfWork
from src.service.ticketing.app.interface.i_issuance_unit_of_work import IIssuanceUnitOfWork
from src.service.ticketing.driven_adapter.repo.inventory_ledger_impl import InventoryLedgerImpl
from src.service.ticketing.driven_adapter.repo.ticket_command_repo_impl import (
    TicketCommandRepoImpl,
)


class IssuanceUnitOfWorkImpl(AsyncpgUnitOfWork, IIssuanceUnitOfWork):
    def _bind_repositories(self, connection: asyncpg.Connection) -> None:
        self.inventory_ledger = InventoryLedgerImpl(conn=connection)
        self.ticket_command_repo = TicketCommandRepoImpl(conn=connection)
