from enum import StrEnum


class EventStatus(StrEnum):
    ACTIVE = 'active'
    CANCELLED = 'cancelled'
    SOLD_OUT = 'sold_out'
