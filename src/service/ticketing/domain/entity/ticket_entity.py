from datetime import datetime, timezone
from typing import Optional

import attrs
import uuid_utils
from uuid_utils import UUID

from src.service.ticketing.domain.enum.ticket_status import TicketStatus
from src.service.ticketing.domain.ticket_number import build_qr_payload, generate_ticket_number


@attrs.define
class TicketEntity:
    id: UUID
    event_id: int
    owner_user_id: int
    ticket_number: str
    payment_reference: str
    price: int
    currency: str
    status: TicketStatus = TicketStatus.CONFIRMED
    qr_code: Optional[str] = None
    purchased_at: Optional[datetime] = None
    used_at: Optional[datetime] = None
    scanned_by: Optional[int] = None
    scanned_by_email: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    refunded_at: Optional[datetime] = None
    transferred_from: Optional[int] = None
    transferred_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def issue(
        cls,
        *,
        event_id: int,
        owner_user_id: int,
        payment_reference: str,
        price: int,
        currency: str,
        qr_secret: str,
    ) -> 'TicketEntity':
        """Mint a new confirmed ticket for a verified payment"""
        ticket_id = uuid_utils.uuid7()
        ticket_number = generate_ticket_number()
        return cls(
            id=ticket_id,
            event_id=event_id,
            owner_user_id=owner_user_id,
            ticket_number=ticket_number,
            payment_reference=payment_reference,
            price=price,
            currency=currency,
            status=TicketStatus.CONFIRMED,
            qr_code=build_qr_payload(
                ticket_id=str(ticket_id),
                event_id=event_id,
                user_id=owner_user_id,
                ticket_number=ticket_number,
                secret=qr_secret,
            ),
            purchased_at=datetime.now(timezone.utc),
        )

    def with_new_ticket_number(self, *, qr_secret: str) -> 'TicketEntity':
        ticket_number = generate_ticket_number()
        return attrs.evolve(
            self,
            ticket_number=ticket_number,
            qr_code=build_qr_payload(
                ticket_id=str(self.id),
                event_id=self.event_id,
                user_id=self.owner_user_id,
                ticket_number=ticket_number,
                secret=qr_secret,
            ),
        )

    def is_owned_by(self, user_id: int) -> bool:
        return self.owner_user_id == user_id
