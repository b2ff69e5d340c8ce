from datetime import datetime
from typing import List, Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.core_setting import settings
from src.platform.config.di import Container
from src.platform.exception.exceptions import AuthorizationError, DomainError
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.interface.i_ticket_query_repo import ITicketQueryRepo
from src.service.ticketing.domain.access_policy import PolicyAction, PolicyResource, evaluate
from src.service.ticketing.domain.entity.ticket_entity import TicketEntity
from src.service.ticketing.domain.value_object.caller_identity import CallerIdentity


class GetScanHistoryUseCase:
    """Tickets the calling scanner has redeemed, newest first."""

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
    async def list_for_scanner(
        self,
        *,
        scanner: CallerIdentity,
        limit: Optional[int] = None,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
    ) -> List[TicketEntity]:
        decision = evaluate(scanner, PolicyAction.VIEW_SCAN_HISTORY, PolicyResource())
        if not decision.allowed:
            raise AuthorizationError(decision.reason)

        if since is not None and until is not None and since > until:
            raise DomainError('since must not be later than until')

        if limit is None:
            limit = settings.SCAN_HISTORY_DEFAULT_LIMIT
        limit = max(1, min(limit, settings.SCAN_HISTORY_MAX_LIMIT))

        return await self.ticket_query_repo.list_scanned_by(
            scanner_user_id=scanner.user_id, limit=limit, since=since, until=until
        )
