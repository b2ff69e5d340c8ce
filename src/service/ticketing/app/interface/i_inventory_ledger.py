from abc import ABC, abstractmethod
from enum import StrEnum


class ReservationOutcome(StrEnum):
    RESERVED = 'reserved'
    CAPACITY_EXCEEDED = 'capacity_exceeded'
    EVENT_NOT_ACTIVE = 'event_not_active'
    EVENT_NOT_FOUND = 'event_not_found'


class IInventoryLedger(ABC):
    """
    Capacity ledger for an event.

    `try_reserve` is a single conditional increment
    ("tickets_sold + 1 iff tickets_sold < max_tickets and the event is active");
    it runs inside the issuance transaction so the ticket insert and the
    increment commit or roll back together.
    """

    @abstractmethod
    async def try_reserve(self, *, event_id: int) -> ReservationOutcome:
        pass
