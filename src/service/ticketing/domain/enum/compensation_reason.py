from enum import StrEnum


class CompensationReason(StrEnum):
    """The only situations in which a captured payment is refunded"""

    EVENT_NOT_FOUND = 'event_not_found'
    EVENT_CANCELLED = 'event_cancelled'
    CAPACITY_EXCEEDED = 'capacity_exceeded'
    ALREADY_HOLDS_TICKET = 'already_holds_ticket'
    PERSISTENCE_FAILURE = 'persistence_failure'
