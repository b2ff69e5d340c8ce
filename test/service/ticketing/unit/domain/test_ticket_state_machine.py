import pytest

from src.platform.exception.exceptions import (
    AlreadyUsedError,
    TicketCancelledError,
    TicketRefundedError,
)
from src.service.ticketing.domain.enum.ticket_status import TicketStatus
from src.service.ticketing.domain.ticket_state_machine import (
    TicketTransition,
    can_transition,
    ensure_transition,
    is_terminal,
)


@pytest.mark.unit
class TestTicketStateMachine:
    @pytest.mark.parametrize(
        ('transition', 'expected'),
        [
            (TicketTransition.REDEEM, TicketStatus.USED),
            (TicketTransition.CANCEL, TicketStatus.CANCELLED),
            (TicketTransition.REFUND, TicketStatus.REFUNDED),
            (TicketTransition.TRANSFER, TicketStatus.CONFIRMED),
        ],
    )
    def test_confirmed_allows_every_transition(
        self, transition: TicketTransition, expected: TicketStatus
    ) -> None:
        assert ensure_transition(TicketStatus.CONFIRMED, transition) == expected
        assert can_transition(TicketStatus.CONFIRMED, transition)

    @pytest.mark.parametrize(
        ('status', 'error'),
        [
            (TicketStatus.USED, AlreadyUsedError),
            (TicketStatus.CANCELLED, TicketCancelledError),
            (TicketStatus.REFUNDED, TicketRefundedError),
        ],
    )
    @pytest.mark.parametrize('transition', list(TicketTransition))
    def test_terminal_statuses_reject_every_transition(
        self, status: TicketStatus, error: type[Exception], transition: TicketTransition
    ) -> None:
        assert is_terminal(status)
        assert not can_transition(status, transition)
        with pytest.raises(error):
            ensure_transition(status, transition)

    def test_confirmed_is_the_only_live_status(self) -> None:
        assert [s for s in TicketStatus if not is_terminal(s)] == [TicketStatus.CONFIRMED]
