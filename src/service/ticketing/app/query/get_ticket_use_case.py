from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from uuid_utils import UUID

from src.platform.config.di import Container
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.interface.i_ticket_query_repo import ITicketQueryRepo
from src.service.ticketing.domain.entity.ticket_entity import TicketEntity
from src.service.ticketing.domain.value_object.caller_identity import CallerIdentity


class GetTicketUseCase:
    def __init__(self, ticket_query_repo: ITicketQueryRepo) -> None:
        self.ticket_query_repo = ticket_query_repo

    @classmethod
    @inject
    def depends(
        cls,
        ticket_query_repo: ITicketQueryRepo = Depends(Provide[Container.ticket_query_repo]),
    ) -> Self:
        return cls(ticket_query_repo=ticket_query_repo)

    @Logger.io
    async def get_by_id(self, *, ticket_id: UUID, caller: CallerIdentity) -> TicketEntity:
        """Owner-only read; another user's ticket is reported as missing."""
        ticket = await self.ticket_query_repo.get_by_id(ticket_id=ticket_id)

        if ticket is None or not ticket.is_owned_by(caller.user_id):
            Logger.base.warning(f'⚠️ [GET_TICKET] Ticket {ticket_id} not found for {caller.user_id}')
            raise NotFoundError('Ticket not found')

        return ticket
