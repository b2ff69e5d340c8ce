"""
HTTP-level fixtures and BDD steps for the ticketing API

The real routers, auth dependencies and exception handlers run against the
in-memory fakes: every container provider a route can reach is overridden
before the TestClient starts.
"""

from collections.abc import Iterator
from typing import Any

from dependency_injector import providers
from fastapi.testclient import TestClient
import pytest
from pytest_bdd import given, parsers, scenarios, then, when

from src.platform.config.di import container
from src.platform.config.wire_modules import WIRE_MODULES
from src.service.ticketing.app.service.compensation_manager import CompensationManager
from src.service.ticketing.app.service.idempotency_guard import IdempotencyGuard
from src.service.ticketing.domain.entity.ticket_entity import TicketEntity
from src.service.ticketing.domain.enum.ticket_status import TicketStatus
from src.service.ticketing.domain.enum.user_role import UserRole
from test.service.ticketing.api.api_helpers import auth_headers
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
    make_ticket,
)
from test.test_main import app


# Load all feature scenarios
scenarios('ticket_redemption.feature')


@pytest.fixture
def client(
    store: InMemoryStore,
    ticket_query_repo: FakeTicketQueryRepo,
    ticket_command_repo: FakeTicketCommandRepo,
    event_query_repo: FakeEventQueryRepo,
    user_query_repo: FakeUserQueryRepo,
    payment_gateway: FakePaymentGateway,
    rate_limiter: FakeRateLimiter,
    audit_sink: RecordingAuditSink,
    idempotency_guard: IdempotencyGuard,
    compensation_manager: CompensationManager,
) -> Iterator[TestClient]:
    container.wire(modules=WIRE_MODULES)
    with container.override_providers(
        ticket_query_repo=providers.Object(ticket_query_repo),
        ticket_command_repo=providers.Object(ticket_command_repo),
        event_query_repo=providers.Object(event_query_repo),
        user_query_repo=providers.Object(user_query_repo),
        issuance_unit_of_work=providers.Factory(FakeIssuanceUnitOfWork, store),
        payment_gateway=providers.Object(payment_gateway),
        rate_limiter=providers.Object(rate_limiter),
        audit_sink=providers.Object(audit_sink),
        idempotency_guard=providers.Object(idempotency_guard),
        compensation_manager=providers.Object(compensation_manager),
    ):
        with TestClient(app) as test_client:
            yield test_client
    container.reset_singletons()


@pytest.fixture
def context() -> dict[str, Any]:
    """Shared test context for storing state between steps"""
    return {}


# =============================================================================
# Given Steps
# =============================================================================
@given(parsers.parse('an on-sale event {event_id:d} at venue {venue_id:d}'))
def on_sale_event(store: InMemoryStore, event_id: int, venue_id: int) -> None:
    store.add_event(make_event(event_id, venue_id=venue_id))


@given(parsers.parse('a {status} ticket for event {event_id:d}'))
def ticket_in_status(
    context: dict[str, Any], store: InMemoryStore, status: str, event_id: int
) -> None:
    context['ticket'] = store.add_ticket(
        make_ticket(event_id=event_id, status=TicketStatus(status))
    )


@given(parsers.parse('a scanner assigned to venue {venue_id:d}'))
def scanner_at_venue(context: dict[str, Any], venue_id: int) -> None:
    context['scanner'] = make_caller(50, role=UserRole.SCANNER, venue_id=venue_id)


@given('a scanner without a venue')
def scanner_without_venue(context: dict[str, Any]) -> None:
    context['scanner'] = make_caller(51, role=UserRole.SCANNER)


@given('the scanner has exhausted the scan budget')
def scan_budget_exhausted(rate_limiter: FakeRateLimiter) -> None:
    rate_limiter.allowed = False


# =============================================================================
# When Steps
# =============================================================================
def _scan(client: TestClient, context: dict[str, Any], payload: dict[str, Any]) -> None:
    response = client.post(
        '/api/redemption/scan', json=payload, headers=auth_headers(context['scanner'])
    )
    context.setdefault('responses', []).append(response)
    context['response'] = response


@when(parsers.parse('the scanner scans the ticket for event {event_id:d}'))
def scan_ticket_for_event(client: TestClient, context: dict[str, Any], event_id: int) -> None:
    ticket: TicketEntity = context['ticket']
    _scan(client, context, {'ticket_id': str(ticket.id), 'event_id': event_id})


@when('the scanner types the ticket number in lowercase')
def scan_ticket_number(client: TestClient, context: dict[str, Any]) -> None:
    ticket: TicketEntity = context['ticket']
    _scan(
        client,
        context,
        {'ticket_number': ticket.ticket_number.lower(), 'event_id': ticket.event_id},
    )


@when('the scanner scans the QR code')
def scan_qr(client: TestClient, context: dict[str, Any]) -> None:
    ticket: TicketEntity = context['ticket']
    response = client.post(
        '/api/redemption/scan/qr',
        json={'qr_payload': ticket.qr_code},
        headers=auth_headers(context['scanner']),
    )
    context['response'] = response


# =============================================================================
# Then Steps
# =============================================================================
@then(parsers.parse('the scan outcome is "{outcome}"'))
def scan_outcome_is(context: dict[str, Any], outcome: str) -> None:
    response = context['response']
    assert response.status_code == 200, response.text
    assert response.json()['outcome'] == outcome


@then(parsers.parse('the ticket status is "{status}"'))
def ticket_status_is(context: dict[str, Any], store: InMemoryStore, status: str) -> None:
    assert store.tickets[context['ticket'].id].status == TicketStatus(status)


@then(parsers.parse('the result reports actual event {event_id:d}'))
def result_reports_actual_event(context: dict[str, Any], event_id: int) -> None:
    assert context['response'].json()['actual_event_id'] == event_id


@then(parsers.parse('the response carries a Retry-After of {seconds:d} seconds'))
def response_retry_after(context: dict[str, Any], seconds: int) -> None:
    assert context['response'].headers['Retry-After'] == str(seconds)


@then('the first scan succeeded and the second reports who scanned it')
def first_scan_then_already_used(context: dict[str, Any]) -> None:
    first, second = (response.json() for response in context['responses'])
    assert first['outcome'] == 'success'
    assert second['outcome'] == 'already_used'
    assert second['scanned_by'] == first['scanned_by']
    assert second['used_at'] is not None

