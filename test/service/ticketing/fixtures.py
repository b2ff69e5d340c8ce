from collections.abc import Callable

import pytest

from src.service.ticketing.app.command.confirm_purchase_use_case import ConfirmPurchaseUseCase
from src.service.ticketing.app.command.create_payment_intent_use_case import (
    CreatePaymentIntentUseCase,
)
from src.service.ticketing.app.command.redeem_ticket_use_case import RedeemTicketUseCase
from src.service.ticketing.app.command.transfer_ticket_use_case import TransferTicketUseCase
from src.service.ticketing.app.query.get_scan_history_use_case import GetScanHistoryUseCase
from src.service.ticketing.app.query.get_ticket_use_case import GetTicketUseCase
from src.service.ticketing.app.query.list_my_tickets_use_case import ListMyTicketsUseCase
from src.service.ticketing.app.service.compensation_manager import CompensationManager
from src.service.ticketing.app.service.idempotency_guard import IdempotencyGuard
from src.service.ticketing.domain.entity.event_entity import EventEntity
from src.service.ticketing.domain.entity.user_entity import UserEntity
from src.service.ticketing.domain.enum.user_role import UserRole
from src.service.ticketing.domain.value_object.caller_identity import CallerIdentity
from test.service.ticketing.fakes import (
    FakeEventQueryRepo,
    FakeIssuanceUnitOfWork,
    FakePaymentGateway,
    FakeRateLimiter,
    FakeTicketCommandRepo,
    FakeTicketQueryRepo,
    FakeUserQueryRepo,
    InMemoryStore,
    RecordingAuditSink,
    make_caller,
    make_event,
)
from test.util_constant import (
    BUYER_ID,
    EVENT_ID,
    OTHER_BUYER_ID,
    OTHER_VENUE_ID,
    SCANNER_ID,
    VENUE_ID,
)


# =============================================================================
# Store and ports
# =============================================================================
@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def event(store: InMemoryStore) -> EventEntity:
    return store.add_event(make_event(EVENT_ID, venue_id=VENUE_ID))


@pytest.fixture
def ticket_query_repo(store: InMemoryStore) -> FakeTicketQueryRepo:
    return FakeTicketQueryRepo(store)


@pytest.fixture
def ticket_command_repo(store: InMemoryStore) -> FakeTicketCommandRepo:
    return FakeTicketCommandRepo(store)


@pytest.fixture
def event_query_repo(store: InMemoryStore) -> FakeEventQueryRepo:
    return FakeEventQueryRepo(store)


@pytest.fixture
def user_query_repo(store: InMemoryStore) -> FakeUserQueryRepo:
    return FakeUserQueryRepo(store)


@pytest.fixture
def issuance_uow_factory(store: InMemoryStore) -> Callable[[], FakeIssuanceUnitOfWork]:
    return lambda: FakeIssuanceUnitOfWork(store)


@pytest.fixture
def payment_gateway() -> FakePaymentGateway:
    return FakePaymentGateway()


@pytest.fixture
def rate_limiter() -> FakeRateLimiter:
    return FakeRateLimiter()


@pytest.fixture
def audit_sink() -> RecordingAuditSink:
    return RecordingAuditSink()


@pytest.fixture
def idempotency_guard(ticket_query_repo: FakeTicketQueryRepo) -> IdempotencyGuard:
    return IdempotencyGuard(ticket_query_repo=ticket_query_repo)


@pytest.fixture
def compensation_manager(
    payment_gateway: FakePaymentGateway, audit_sink: RecordingAuditSink
) -> CompensationManager:
    return CompensationManager(payment_gateway=payment_gateway, audit_sink=audit_sink)


# =============================================================================
# Callers
# =============================================================================
@pytest.fixture
def buyer(store: InMemoryStore) -> CallerIdentity:
    caller = make_caller(BUYER_ID)
    store.add_user(UserEntity(id=caller.user_id, email=caller.email, name='Buyer'))
    return caller


@pytest.fixture
def other_buyer(store: InMemoryStore) -> CallerIdentity:
    caller = make_caller(OTHER_BUYER_ID)
    store.add_user(UserEntity(id=caller.user_id, email=caller.email, name='Other Buyer'))
    return caller


@pytest.fixture
def scanner() -> CallerIdentity:
    return make_caller(SCANNER_ID, role=UserRole.SCANNER, venue_id=VENUE_ID)


@pytest.fixture
def foreign_scanner() -> CallerIdentity:
    return make_caller(SCANNER_ID + 1, role=UserRole.SCANNER, venue_id=OTHER_VENUE_ID)


@pytest.fixture
def site_admin() -> CallerIdentity:
    return make_caller(900, role=UserRole.SITE_ADMIN)


# =============================================================================
# Use cases
# =============================================================================
@pytest.fixture
def confirm_purchase_use_case(
    payment_gateway: FakePaymentGateway,
    event_query_repo: FakeEventQueryRepo,
    idempotency_guard: IdempotencyGuard,
    compensation_manager: CompensationManager,
    issuance_uow_factory: Callable[[], FakeIssuanceUnitOfWork],
    rate_limiter: FakeRateLimiter,
    audit_sink: RecordingAuditSink,
) -> ConfirmPurchaseUseCase:
    return ConfirmPurchaseUseCase(
        payment_gateway=payment_gateway,
        event_query_repo=event_query_repo,
        idempotency_guard=idempotency_guard,
        compensation_manager=compensation_manager,
        issuance_uow_factory=issuance_uow_factory,
        rate_limiter=rate_limiter,
        audit_sink=audit_sink,
    )


@pytest.fixture
def create_payment_intent_use_case(
    payment_gateway: FakePaymentGateway,
    event_query_repo: FakeEventQueryRepo,
    ticket_query_repo: FakeTicketQueryRepo,
    rate_limiter: FakeRateLimiter,
    audit_sink: RecordingAuditSink,
) -> CreatePaymentIntentUseCase:
    return CreatePaymentIntentUseCase(
        payment_gateway=payment_gateway,
        event_query_repo=event_query_repo,
        ticket_query_repo=ticket_query_repo,
        rate_limiter=rate_limiter,
        audit_sink=audit_sink,
    )


@pytest.fixture
def redeem_ticket_use_case(
    ticket_query_repo: FakeTicketQueryRepo,
    ticket_command_repo: FakeTicketCommandRepo,
    event_query_repo: FakeEventQueryRepo,
    rate_limiter: FakeRateLimiter,
    audit_sink: RecordingAuditSink,
) -> RedeemTicketUseCase:
    return RedeemTicketUseCase(
        ticket_query_repo=ticket_query_repo,
        ticket_command_repo=ticket_command_repo,
        event_query_repo=event_query_repo,
        rate_limiter=rate_limiter,
        audit_sink=audit_sink,
    )


@pytest.fixture
def transfer_ticket_use_case(
    ticket_query_repo: FakeTicketQueryRepo,
    ticket_command_repo: FakeTicketCommandRepo,
    user_query_repo: FakeUserQueryRepo,
    audit_sink: RecordingAuditSink,
) -> TransferTicketUseCase:
    return TransferTicketUseCase(
        ticket_query_repo=ticket_query_repo,
        ticket_command_repo=ticket_command_repo,
        user_query_repo=user_query_repo,
        audit_sink=audit_sink,
    )


@pytest.fixture
def get_ticket_use_case(ticket_query_repo: FakeTicketQueryRepo) -> GetTicketUseCase:
    return GetTicketUseCase(ticket_query_repo=ticket_query_repo)


@pytest.fixture
def list_my_tickets_use_case(ticket_query_repo: FakeTicketQueryRepo) -> ListMyTicketsUseCase:
    return ListMyTicketsUseCase(ticket_query_repo=ticket_query_repo)


@pytest.fixture
def get_scan_history_use_case(ticket_query_repo: FakeTicketQueryRepo) -> GetScanHistoryUseCase:
    return GetScanHistoryUseCase(ticket_query_repo=ticket_query_repo)
