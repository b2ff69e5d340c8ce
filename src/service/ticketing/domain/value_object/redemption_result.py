from datetime import datetime
from typing import Optional

import attrs
from uuid_utils import UUID

from src.service.ticketing.domain.entity.ticket_entity import TicketEntity
from src.service.ticketing.domain.enum.redemption_outcome import RedemptionOutcome


@attrs.frozen
class RedemptionResult:
    """Structured answer for the scanning device; every outcome is a normal result"""

    outcome: RedemptionOutcome
    message: str
    ticket_id: Optional[UUID] = None
    ticket_number: Optional[str] = None
    event_id: Optional[int] = None
    actual_event_id: Optional[int] = None
    owner_user_id: Optional[int] = None
    used_at: Optional[datetime] = None
    scanned_by: Optional[int] = None
    scanned_by_email: Optional[str] = None
    retry_after_seconds: Optional[int] = None

    @classmethod
    def for_ticket(
        cls, outcome: RedemptionOutcome, ticket: TicketEntity, *, message: str
    ) -> 'RedemptionResult':
        return cls(
            outcome=outcome,
            message=message,
            ticket_id=ticket.id,
            ticket_number=ticket.ticket_number,
            event_id=ticket.event_id,
            owner_user_id=ticket.owner_user_id,
            used_at=ticket.used_at,
            scanned_by=ticket.scanned_by,
            scanned_by_email=ticket.scanned_by_email,
        )

    @property
    def is_success(self) -> bool:
        return self.outcome == RedemptionOutcome.SUCCESS
