"""Ticketing Domain Value Objects"""

from src.service.ticketing.domain.value_object.caller_identity import CallerIdentity
from src.service.ticketing.domain.value_object.payment_record import (
    PaymentIntent,
    PaymentRecord,
    RefundResult,
)
from src.service.ticketing.domain.value_object.rate_limit import RateLimitDecision, RateLimitPolicy
from src.service.ticketing.domain.value_object.redemption_result import RedemptionResult
from src.service.ticketing.domain.value_object.ticket_lookup import TicketLookup

__all__ = [
    'CallerIdentity',
    'PaymentIntent',
    'PaymentRecord',
    'RateLimitDecision',
    'RateLimitPolicy',
    'RedemptionResult',
    'RefundResult',
    'TicketLookup',
]
