from typing import Optional

import attrs
from uuid_utils import UUID


@attrs.frozen
class TicketLookup:
    """
    How a scanner identifies a ticket: by id (QR scan), or by its
    ticket number (manual entry, typed at a specific event's door).

    `event_id` is the event the door is admitting; when supplied it must
    match the ticket's event.
    """

    ticket_id: Optional[UUID] = None
    ticket_number: Optional[str] = None
    event_id: Optional[int] = None

    def __attrs_post_init__(self) -> None:
        if (self.ticket_id is None) == (self.ticket_number is None):
            raise ValueError('Provide exactly one of ticket_id or ticket_number')
        if self.ticket_number is not None and self.event_id is None:
            raise ValueError('event_id is required when looking up by ticket_number')

    @classmethod
    def by_id(cls, ticket_id: UUID, *, event_id: Optional[int] = None) -> 'TicketLookup':
        return cls(ticket_id=ticket_id, event_id=event_id)

    @classmethod
    def by_number(cls, ticket_number: str, *, event_id: int) -> 'TicketLookup':
        return cls(ticket_number=ticket_number.strip().upper(), event_id=event_id)

    def describe(self) -> str:
        if self.ticket_id is not None:
            return str(self.ticket_id)
        return f'{self.ticket_number}@event:{self.event_id}'
