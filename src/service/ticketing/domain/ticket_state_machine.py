"""
Ticket lifecycle.

    confirmed ──redeem──▶ used        (terminal)
    confirmed ──cancel──▶ cancelled   (terminal)
    confirmed ──refund──▶ refunded    (terminal)
    confirmed ──transfer─▶ confirmed  (owner changes)

Writers persist a transition with a conditional update guarded by the
expected current status; zero rows affected means another writer won.
"""

from enum import StrEnum
from typing import assert_never

from src.platform.exception.exceptions import (
    AlreadyUsedError,
    TicketCancelledError,
    TicketRefundedError,
)
from src.service.ticketing.domain.enum.ticket_status import TicketStatus


class TicketTransition(StrEnum):
    REDEEM = 'redeem'
    CANCEL = 'cancel'
    REFUND = 'refund'
    TRANSFER = 'transfer'


_TARGET_STATUS: dict[TicketTransition, TicketStatus] = {
    TicketTransition.REDEEM: TicketStatus.USED,
    TicketTransition.CANCEL: TicketStatus.CANCELLED,
    TicketTransition.REFUND: TicketStatus.REFUNDED,
    TicketTransition.TRANSFER: TicketStatus.CONFIRMED,
}


def is_terminal(status: TicketStatus) -> bool:
    match status:
        case TicketStatus.CONFIRMED:
            return False
        case TicketStatus.USED | TicketStatus.CANCELLED | TicketStatus.REFUNDED:
            return True
        case _:
            assert_never(status)


def ensure_transition(current: TicketStatus, transition: TicketTransition) -> TicketStatus:
    """Return the status `transition` leads to, or raise why it cannot start from `current`"""
    match current:
        case TicketStatus.CONFIRMED:
            return _TARGET_STATUS[transition]
        case TicketStatus.USED:
            raise AlreadyUsedError('Ticket has already been used')
        case TicketStatus.CANCELLED:
            raise TicketCancelledError('Ticket has been cancelled')
        case TicketStatus.REFUNDED:
            raise TicketRefundedError('Ticket has been refunded')
        case _:
            assert_never(current)


def can_transition(current: TicketStatus, transition: TicketTransition) -> bool:
    return not is_terminal(current) and transition in _TARGET_STATUS
