from enum import StrEnum


class RedemptionOutcome(StrEnum):
    SUCCESS = 'success'
    ALREADY_USED = 'already_used'
    WRONG_EVENT = 'wrong_event'
    CANCELLED = 'cancelled'
    REFUNDED = 'refunded'
    NOT_FOUND = 'not_found'
    PERMISSION_DENIED = 'permission_denied'
    RATE_LIMITED = 'rate_limited'
