"""Ticketing Domain Enums"""

from src.service.ticketing.domain.enum.compensation_reason import CompensationReason
from src.service.ticketing.domain.enum.event_status import EventStatus
from src.service.ticketing.domain.enum.redemption_outcome import RedemptionOutcome
from src.service.ticketing.domain.enum.ticket_status import TicketStatus
from src.service.ticketing.domain.enum.user_role import UserRole

__all__ = ['CompensationReason', 'EventStatus', 'RedemptionOutcome', 'TicketStatus', 'UserRole']
