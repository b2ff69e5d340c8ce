"""
Ticket Command Repository Interface

Every status or ownership change is a conditional write guarded by
`status = confirmed`; a `None` return means another writer already moved
the ticket and is not an error.
"""

from abc import ABC, abstractmethod

from uuid_utils import UUID

from src.service.ticketing.domain.entity.ticket_entity import TicketEntity


class ITicketCommandRepo(ABC):
    @abstractmethod
    async def insert(self, *, ticket: TicketEntity) -> TicketEntity:
        """
        Insert a newly issued ticket.

        Raises:
            DuplicateRequestError: a ticket already exists for the payment reference
            AlreadyHoldsTicketError: the owner already holds a confirmed ticket for the event
        """
        pass

    @abstractmethod
    async def mark_used(
        self, *, ticket_id: UUID, scanned_by: int, scanned_by_email: str
    ) -> TicketEntity | None:
        """confirmed -> used; None when the ticket was no longer confirmed"""
        pass

    @abstractmethod
    async def reassign_owner(
        self, *, ticket_id: UUID, from_user_id: int, to_user_id: int
    ) -> TicketEntity | None:
        """
        Move ownership while the ticket stays confirmed and owned by `from_user_id`.

        Raises:
            AlreadyHoldsTicketError: the recipient already holds a confirmed ticket for the event
        """
        pass
