from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from src.platform.types import TicketId
from src.service.ticketing.domain.entity.ticket_entity import TicketEntity
from src.service.ticketing.domain.enum.redemption_outcome import RedemptionOutcome
from src.service.ticketing.domain.value_object.redemption_result import RedemptionResult


class ScanTicketRequest(BaseModel):
    """By ticket id, or by ticket number (manual entry) together with event_id"""

    ticket_id: Optional[TicketId] = None
    ticket_number: Optional[str] = Field(default=None, min_length=1, max_length=16)
    event_id: Optional[int] = None

    model_config = {
        'json_schema_extra': {
            'examples': [
                {'ticket_id': '01936d8f-5e73-7c4e-a9c5-123456789abc', 'event_id': 1},
                {'ticket_number': 'TKT123456789012', 'event_id': 1},
            ]
        }
    }

    @model_validator(mode='after')
    def _one_identifier(self) -> 'ScanTicketRequest':
        if (self.ticket_id is None) == (self.ticket_number is None):
            raise ValueError('Provide exactly one of ticket_id or ticket_number')
        if self.ticket_number is not None and self.event_id is None:
            raise ValueError('event_id is required with ticket_number')
        return self


class ScanQrRequest(BaseModel):
    qr_payload: str = Field(min_length=1, max_length=4096)
    event_id: Optional[int] = None


class RedemptionResponse(BaseModel):
    outcome: RedemptionOutcome
    message: str
    ticket_id: Optional[TicketId] = None
    ticket_number: Optional[str] = None
    event_id: Optional[int] = None
    actual_event_id: Optional[int] = None
    owner_user_id: Optional[int] = None
    used_at: Optional[datetime] = None
    scanned_by: Optional[int] = None
    scanned_by_email: Optional[str] = None
    retry_after_seconds: Optional[int] = None

    @classmethod
    def from_result(cls, result: RedemptionResult) -> 'RedemptionResponse':
        return cls(
            outcome=result.outcome,
            message=result.message,
            ticket_id=result.ticket_id,
            ticket_number=result.ticket_number,
            event_id=result.event_id,
            actual_event_id=result.actual_event_id,
            owner_user_id=result.owner_user_id,
            used_at=result.used_at,
            scanned_by=result.scanned_by,
            scanned_by_email=result.scanned_by_email,
            retry_after_seconds=result.retry_after_seconds,
        )


class ScanHistoryItem(BaseModel):
    ticket_id: TicketId
    ticket_number: str
    event_id: int
    owner_user_id: int
    used_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, ticket: TicketEntity) -> 'ScanHistoryItem':
        return cls(
            ticket_id=ticket.id,
            ticket_number=ticket.ticket_number,
            event_id=ticket.event_id,
            owner_user_id=ticket.owner_user_id,
            used_at=ticket.used_at,
        )
