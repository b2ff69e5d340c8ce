from enum import StrEnum


class TicketStatus(StrEnum):
    CONFIRMED = 'confirmed'
    USED = 'used'
    CANCELLED = 'cancelled'
    REFUNDED = 'refunded'
