from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from src.platform.types import TicketId
from src.service.ticketing.domain.entity.ticket_entity import TicketEntity
from src.service.ticketing.domain.enum.ticket_status import TicketStatus


class TicketResponse(BaseModel):
    model_config = {
        'json_schema_extra': {
            'example': {
                'id': '01936d8f-5e73-7c4e-a9c5-123456789abc',  # UUID7
                'event_id': 1,
                'owner_user_id': 2,
                'ticket_number': 'TKT123456789012',
                'status': 'confirmed',
                'price': 2500,
                'currency': 'gbp',
                'qr_code': '{"type":"EVENT_TICKET",...}',
                'purchased_at': '2026-01-10T10:30:00Z',
            }
        },
    }

    id: TicketId
    event_id: int
    owner_user_id: int
    ticket_number: str
    status: TicketStatus
    price: int
    currency: str
    qr_code: Optional[str] = None
    purchased_at: Optional[datetime] = None
    used_at: Optional[datetime] = None
    transferred_from: Optional[int] = None
    transferred_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, ticket: TicketEntity) -> 'TicketResponse':
        return cls(
            id=ticket.id,
            event_id=ticket.event_id,
            owner_user_id=ticket.owner_user_id,
            ticket_number=ticket.ticket_number,
            status=ticket.status,
            price=ticket.price,
            currency=ticket.currency,
            qr_code=ticket.qr_code,
            purchased_at=ticket.purchased_at,
            used_at=ticket.used_at,
            transferred_from=ticket.transferred_from,
            transferred_at=ticket.transferred_at,
        )


class TransferTicketRequest(BaseModel):
    recipient_email: str = Field(min_length=3, max_length=255)
