from __future__ import annotations

from typing import TYPE_CHECKING

from src.platform.database.unit_of_work import AbstractUnitOfWork


if TYPE_CHECKING:
    from src.service.ticketing.app.interface.i_inventory_ledger import IInventoryLedger
    from src.service.ticketing.app.interface.i_ticket_command_repo import ITicketCommandRepo


class IIssuanceUnitOfWork(AbstractUnitOfWork):
    """
    One issuance transaction: capacity reservation + ticket insert.

    Usage:
        async with uow:
            outcome = await uow.inventory_ledger.try_reserve(event_id=...)
            ticket = await uow.ticket_command_repo.insert(ticket=...)
            await uow.commit()
    """

    inventory_ledger: IInventoryLedger
    ticket_command_repo: ITicketCommandRepo
