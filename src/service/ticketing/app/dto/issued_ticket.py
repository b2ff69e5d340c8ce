import attrs

from src.service.ticketing.domain.entity.ticket_entity import TicketEntity


@attrs.frozen
class IssuedTicket:
    ticket: TicketEntity
    replayed: bool = False  # True when an earlier call already issued this ticket
