import attrs
import pytest

from src.platform.exception.exceptions import (
    AlreadyHoldsTicketError,
    AlreadyUsedError,
    AuthorizationError,
    ConflictError,
    DomainError,
    NotFoundError,
    TicketCancelledError,
)
from src.service.ticketing.app.command.transfer_ticket_use_case import TransferTicketUseCase
from src.service.ticketing.domain.entity.audit_entry import AuditAction, AuditStatus
from src.service.ticketing.domain.entity.event_entity import EventEntity
from src.service.ticketing.domain.entity.ticket_entity import TicketEntity
from src.service.ticketing.domain.entity.user_entity import UserEntity
from src.service.ticketing.domain.enum.ticket_status import TicketStatus
from src.service.ticketing.domain.value_object.caller_identity import CallerIdentity
from test.service.ticketing.fakes import (
    FakeTicketCommandRepo,
    FakeTicketQueryRepo,
    FakeUserQueryRepo,
    InMemoryStore,
    RecordingAuditSink,
    make_ticket,
)
from test.util_constant import BUYER_ID, EVENT_ID, OTHER_BUYER_ID


@pytest.fixture
def ticket(store: InMemoryStore, event: EventEntity, buyer: CallerIdentity) -> TicketEntity:
    return store.add_ticket(make_ticket(event_id=EVENT_ID, owner_user_id=buyer.user_id))


@pytest.mark.unit
class TestTransferTicketUseCase:
    @pytest.mark.asyncio
    async def test_transfer_moves_ownership(
        self,
        transfer_ticket_use_case: TransferTicketUseCase,
        store: InMemoryStore,
        ticket: TicketEntity,
        buyer: CallerIdentity,
        other_buyer: CallerIdentity,
        audit_sink: RecordingAuditSink,
    ) -> None:
        transferred = await transfer_ticket_use_case.execute(
            ticket_id=ticket.id, recipient_email=f'  {other_buyer.email.upper()} ', caller=buyer
        )

        assert transferred.owner_user_id == OTHER_BUYER_ID
        assert transferred.transferred_from == BUYER_ID
        assert transferred.transferred_at is not None
        assert transferred.status == TicketStatus.CONFIRMED
        assert transferred.qr_code == ticket.qr_code
        assert store.tickets[ticket.id].owner_user_id == OTHER_BUYER_ID
        assert audit_sink.last().action == AuditAction.TRANSFERRED
        assert audit_sink.last().status == AuditStatus.SUCCESS

    @pytest.mark.asyncio
    async def test_only_owner_can_transfer(
        self,
        transfer_ticket_use_case: TransferTicketUseCase,
        store: InMemoryStore,
        ticket: TicketEntity,
        buyer: CallerIdentity,
        other_buyer: CallerIdentity,
        audit_sink: RecordingAuditSink,
    ) -> None:
        with pytest.raises(AuthorizationError):
            await transfer_ticket_use_case.execute(
                ticket_id=ticket.id, recipient_email=buyer.email, caller=other_buyer
            )

        assert store.tickets[ticket.id].owner_user_id == BUYER_ID
        assert audit_sink.last().status == AuditStatus.FAILURE

    @pytest.mark.asyncio
    async def test_missing_ticket(
        self,
        transfer_ticket_use_case: TransferTicketUseCase,
        event: EventEntity,
        buyer: CallerIdentity,
        other_buyer: CallerIdentity,
    ) -> None:
        missing = make_ticket(event_id=EVENT_ID)

        with pytest.raises(NotFoundError, match='Ticket'):
            await transfer_ticket_use_case.execute(
                ticket_id=missing.id, recipient_email=other_buyer.email, caller=buyer
            )

    @pytest.mark.parametrize(
        ('status', 'error'),
        [(TicketStatus.USED, AlreadyUsedError), (TicketStatus.CANCELLED, TicketCancelledError)],
    )
    @pytest.mark.asyncio
    async def test_terminal_ticket_cannot_move(
        self,
        transfer_ticket_use_case: TransferTicketUseCase,
        store: InMemoryStore,
        event: EventEntity,
        buyer: CallerIdentity,
        other_buyer: CallerIdentity,
        status: TicketStatus,
        error: type[Exception],
    ) -> None:
        ticket = store.add_ticket(
            make_ticket(event_id=EVENT_ID, owner_user_id=buyer.user_id, status=status)
        )

        with pytest.raises(error):
            await transfer_ticket_use_case.execute(
                ticket_id=ticket.id, recipient_email=other_buyer.email, caller=buyer
            )

    @pytest.mark.asyncio
    async def test_unknown_recipient(
        self,
        transfer_ticket_use_case: TransferTicketUseCase,
        ticket: TicketEntity,
        buyer: CallerIdentity,
    ) -> None:
        with pytest.raises(NotFoundError, match='No user'):
            await transfer_ticket_use_case.execute(
                ticket_id=ticket.id, recipient_email='nobody@example.com', caller=buyer
            )

    @pytest.mark.asyncio
    async def test_inactive_recipient_is_treated_as_unknown(
        self,
        transfer_ticket_use_case: TransferTicketUseCase,
        store: InMemoryStore,
        ticket: TicketEntity,
        buyer: CallerIdentity,
    ) -> None:
        store.add_user(UserEntity(id=77, email='gone@example.com', is_active=False))

        with pytest.raises(NotFoundError):
            await transfer_ticket_use_case.execute(
                ticket_id=ticket.id, recipient_email='gone@example.com', caller=buyer
            )

    @pytest.mark.asyncio
    async def test_blank_email(
        self,
        transfer_ticket_use_case: TransferTicketUseCase,
        ticket: TicketEntity,
        buyer: CallerIdentity,
    ) -> None:
        with pytest.raises(DomainError, match='required'):
            await transfer_ticket_use_case.execute(
                ticket_id=ticket.id, recipient_email='   ', caller=buyer
            )

    @pytest.mark.asyncio
    async def test_self_transfer(
        self,
        transfer_ticket_use_case: TransferTicketUseCase,
        ticket: TicketEntity,
        buyer: CallerIdentity,
    ) -> None:
        with pytest.raises(DomainError, match='yourself'):
            await transfer_ticket_use_case.execute(
                ticket_id=ticket.id, recipient_email=buyer.email, caller=buyer
            )

    @pytest.mark.asyncio
    async def test_recipient_already_holding_a_ticket(
        self,
        transfer_ticket_use_case: TransferTicketUseCase,
        store: InMemoryStore,
        ticket: TicketEntity,
        buyer: CallerIdentity,
        other_buyer: CallerIdentity,
    ) -> None:
        store.add_ticket(make_ticket(event_id=EVENT_ID, owner_user_id=other_buyer.user_id))

        with pytest.raises(AlreadyHoldsTicketError):
            await transfer_ticket_use_case.execute(
                ticket_id=ticket.id, recipient_email=other_buyer.email, caller=buyer
            )

        assert store.tickets[ticket.id].owner_user_id == BUYER_ID


    @pytest.mark.asyncio
    async def test_scan_landing_before_the_write_wins(
        self,
        store: InMemoryStore,
        ticket: TicketEntity,
        buyer: CallerIdentity,
        other_buyer: CallerIdentity,
        ticket_query_repo: FakeTicketQueryRepo,
        user_query_repo: FakeUserQueryRepo,
        audit_sink: RecordingAuditSink,
    ) -> None:
        class ScannedMidTransfer(FakeTicketCommandRepo):
            async def reassign_owner(self, **kwargs):  # type: ignore[no-untyped-def]
                current = self.store.tickets[kwargs['ticket_id']]
                self.store.tickets[current.id] = attrs.evolve(current, status=TicketStatus.USED)
                return await super().reassign_owner(**kwargs)

        use_case = TransferTicketUseCase(
            ticket_query_repo=ticket_query_repo,
            ticket_command_repo=ScannedMidTransfer(store),
            user_query_repo=user_query_repo,
            audit_sink=audit_sink,
        )

        with pytest.raises(ConflictError):
            await use_case.execute(
                ticket_id=ticket.id, recipient_email=other_buyer.email, caller=buyer
            )

        assert store.tickets[ticket.id].owner_user_id == BUYER_ID
        assert store.tickets[ticket.id].status == TicketStatus.USED
