from typing import List, Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.interface.i_ticket_query_repo import ITicketQueryRepo
from src.service.ticketing.domain.entity.ticket_entity import TicketEntity
from src.service.ticketing.domain.enum.ticket_status import TicketStatus


class ListMyTicketsUseCase:
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
    async def list_by_owner(
        self, *, owner_user_id: int, status: Optional[TicketStatus] = None
    ) -> List[TicketEntity]:
        tickets = await self.ticket_query_repo.list_by_owner(
            owner_user_id=owner_user_id, status=status
        )
        Logger.base.info(f'🎫 [MY_TICKETS] User {owner_user_id} holds {len(tickets)} tickets')
        return tickets
