from abc import ABC, abstractmethod
from datetime import datetime

from uuid_utils import UUID

from src.service.ticketing.domain.entity.ticket_entity import TicketEntity
from src.service.ticketing.domain.enum.ticket_status import TicketStatus


class ITicketQueryRepo(ABC):
    @abstractmethod
    async def get_by_id(self, *, ticket_id: UUID) -> TicketEntity | None:
        pass

    @abstractmethod
    async def get_by_payment_reference(self, *, payment_reference: str) -> TicketEntity | None:
        pass

    @abstractmethod
    async def get_by_ticket_number(self, *, ticket_number: str) -> TicketEntity | None:
        """Ticket numbers are unique across events"""
        pass

    @abstractmethod
    async def find_confirmed_for_owner(
        self, *, event_id: int, owner_user_id: int
    ) -> TicketEntity | None:
        pass

    @abstractmethod
    async def list_by_owner(
        self, *, owner_user_id: int, status: TicketStatus | None = None
    ) -> list[TicketEntity]:
        pass

    @abstractmethod
    async def list_scanned_by(
        self,
        *,
        scanner_user_id: int,
        limit: int,
        since: datetime | None = None,
        until: datetime | None = None,
    ) -> list[TicketEntity]:
        """Tickets redeemed by the scanner, newest `used_at` first"""
        pass
