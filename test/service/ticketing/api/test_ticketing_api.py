"""
HTTP contract tests for purchase, ticket and redemption routes

Status codes, error bodies (`kind` + `detail`) and headers as the clients see them.
"""

from fastapi.testclient import TestClient
import pytest

from src.platform.config.core_setting import settings
from src.service.ticketing.domain.entity.event_entity import EventEntity
from src.service.ticketing.domain.enum.ticket_status import TicketStatus
from src.service.ticketing.domain.value_object.caller_identity import CallerIdentity
from src.service.ticketing.driving_adapter.http_controller.auth.jwt_auth import JwtAuth
from test.service.ticketing.api.api_helpers import auth_headers
from test.service.ticketing.fakes import (
    FakePaymentGateway,
    FakeRateLimiter,
    InMemoryStore,
    make_caller,
    make_event,
    make_ticket,
)
from test.util_constant import BUYER_ID, EVENT_ID, OTHER_BUYER_ID, PAYMENT_REFERENCE


@pytest.mark.api
class TestPurchaseApi:
    def test_create_payment_intent(
        self,
        client: TestClient,
        event: EventEntity,
        buyer: CallerIdentity,
        payment_gateway: FakePaymentGateway,
    ) -> None:
        response = client.post(
            '/api/purchase/intent', json={'event_id': EVENT_ID}, headers=auth_headers(buyer)
        )

        assert response.status_code == 201, response.text
        body = response.json()
        assert body['payment_reference'] == 'pi_test_1'
        assert body['amount'] == event.price
        assert payment_gateway.intents[0]['user_id'] == str(BUYER_ID)

    def test_confirm_creates_then_replays(
        self,
        client: TestClient,
        event: EventEntity,
        buyer: CallerIdentity,
        payment_gateway: FakePaymentGateway,
        store: InMemoryStore,
    ) -> None:
        # Arrange
        payment_gateway.add_payment(PAYMENT_REFERENCE, user_id=BUYER_ID)
        payload = {'payment_reference': PAYMENT_REFERENCE}

        # Act
        first = client.post('/api/purchase/confirm', json=payload, headers=auth_headers(buyer))
        second = client.post('/api/purchase/confirm', json=payload, headers=auth_headers(buyer))

        # Assert
        assert first.status_code == 201, first.text
        assert second.status_code == 200, second.text
        assert first.json()['replayed'] is False
        assert second.json()['replayed'] is True
        assert second.json()['ticket']['id'] == first.json()['ticket']['id']
        assert first.json()['ticket']['status'] == 'confirmed'
        assert len(store.tickets) == 1

    def test_confirm_accepts_session_cookie(
        self,
        client: TestClient,
        event: EventEntity,
        buyer: CallerIdentity,
        payment_gateway: FakePaymentGateway,
    ) -> None:
        payment_gateway.add_payment(PAYMENT_REFERENCE, user_id=BUYER_ID)
        client.cookies.set(settings.AUTH_COOKIE_NAME, JwtAuth().create_jwt_token(buyer))

        response = client.post(
            '/api/purchase/confirm', json={'payment_reference': PAYMENT_REFERENCE}
        )

        assert response.status_code == 201, response.text

    def test_sold_out_event_is_refunded_and_reported(
        self,
        client: TestClient,
        store: InMemoryStore,
        buyer: CallerIdentity,
        payment_gateway: FakePaymentGateway,
    ) -> None:
        store.add_event(make_event(EVENT_ID, max_tickets=1, tickets_sold=1))
        payment_gateway.add_payment(PAYMENT_REFERENCE, user_id=BUYER_ID)

        response = client.post(
            '/api/purchase/confirm',
            json={'payment_reference': PAYMENT_REFERENCE},
            headers=auth_headers(buyer),
        )

        assert response.status_code == 409
        assert response.json()['kind'] == 'capacity_exceeded'
        assert payment_gateway.refunded == {PAYMENT_REFERENCE}

    def test_unpaid_payment_is_rejected(
        self,
        client: TestClient,
        event: EventEntity,
        buyer: CallerIdentity,
        payment_gateway: FakePaymentGateway,
    ) -> None:
        payment_gateway.add_payment(
            PAYMENT_REFERENCE, user_id=BUYER_ID, status='requires_payment_method'
        )

        response = client.post(
            '/api/purchase/confirm',
            json={'payment_reference': PAYMENT_REFERENCE},
            headers=auth_headers(buyer),
        )

        assert response.status_code == 402
        assert response.json()['kind'] == 'payment_verification'

    def test_rate_limited_purchase_carries_retry_after(
        self,
        client: TestClient,
        event: EventEntity,
        buyer: CallerIdentity,
        rate_limiter: FakeRateLimiter,
    ) -> None:
        rate_limiter.allowed = False

        response = client.post(
            '/api/purchase/confirm',
            json={'payment_reference': PAYMENT_REFERENCE},
            headers=auth_headers(buyer),
        )

        assert response.status_code == 429
        assert response.headers['Retry-After'] == str(rate_limiter.retry_after_seconds)
        assert response.json()['kind'] == 'rate_limited'

    def test_inactive_caller_cannot_purchase(self, client: TestClient, event: EventEntity) -> None:
        inactive = make_caller(BUYER_ID, is_active=False)

        response = client.post(
            '/api/purchase/intent', json={'event_id': EVENT_ID}, headers=auth_headers(inactive)
        )

        assert response.status_code == 403
        assert response.json()['kind'] == 'authorization'


@pytest.mark.api
class TestTicketApi:
    def test_requires_authentication(self, client: TestClient) -> None:
        response = client.get('/api/ticket/mine')

        assert response.status_code == 401
        assert response.json() == {'kind': 'authentication', 'detail': 'Not authenticated'}

    def test_garbage_token_is_rejected(self, client: TestClient) -> None:
        response = client.get('/api/ticket/mine', headers={'Authorization': 'Bearer not-a-jwt'})

        assert response.status_code == 401

    def test_list_and_get_own_tickets(
        self,
        client: TestClient,
        store: InMemoryStore,
        event: EventEntity,
        buyer: CallerIdentity,
    ) -> None:
        ticket = store.add_ticket(make_ticket(event_id=EVENT_ID, owner_user_id=BUYER_ID))
        store.add_ticket(make_ticket(event_id=EVENT_ID, owner_user_id=OTHER_BUYER_ID))

        listed = client.get('/api/ticket/mine', headers=auth_headers(buyer))
        fetched = client.get(f'/api/ticket/{ticket.id}', headers=auth_headers(buyer))

        assert [t['id'] for t in listed.json()] == [str(ticket.id)]
        assert fetched.status_code == 200
        assert fetched.json()['ticket_number'] == ticket.ticket_number

    def test_list_filters_by_status(
        self,
        client: TestClient,
        store: InMemoryStore,
        event: EventEntity,
        buyer: CallerIdentity,
    ) -> None:
        store.add_ticket(make_ticket(event_id=EVENT_ID, owner_user_id=BUYER_ID))

        response = client.get(
            '/api/ticket/mine', params={'ticket_status': 'used'}, headers=auth_headers(buyer)
        )

        assert response.status_code == 200
        assert response.json() == []

    def test_someone_elses_ticket_is_not_found(
        self,
        client: TestClient,
        store: InMemoryStore,
        event: EventEntity,
        other_buyer: CallerIdentity,
    ) -> None:
        ticket = store.add_ticket(make_ticket(event_id=EVENT_ID, owner_user_id=BUYER_ID))

        response = client.get(f'/api/ticket/{ticket.id}', headers=auth_headers(other_buyer))

        assert response.status_code == 404
        assert response.json()['kind'] == 'not_found'

    def test_transfer(
        self,
        client: TestClient,
        store: InMemoryStore,
        event: EventEntity,
        buyer: CallerIdentity,
        other_buyer: CallerIdentity,
    ) -> None:
        ticket = store.add_ticket(make_ticket(event_id=EVENT_ID, owner_user_id=BUYER_ID))

        response = client.post(
            f'/api/ticket/{ticket.id}/transfer',
            json={'recipient_email': other_buyer.email},
            headers=auth_headers(buyer),
        )

        assert response.status_code == 200, response.text
        assert response.json()['owner_user_id'] == OTHER_BUYER_ID
        assert response.json()['transferred_from'] == BUYER_ID

    def test_transfer_of_used_ticket_conflicts(
        self,
        client: TestClient,
        store: InMemoryStore,
        event: EventEntity,
        buyer: CallerIdentity,
        other_buyer: CallerIdentity,
    ) -> None:
        ticket = store.add_ticket(
            make_ticket(event_id=EVENT_ID, owner_user_id=BUYER_ID, status=TicketStatus.USED)
        )

        response = client.post(
            f'/api/ticket/{ticket.id}/transfer',
            json={'recipient_email': other_buyer.email},
            headers=auth_headers(buyer),
        )

        assert response.status_code == 409
        assert response.json()['kind'] == 'already_used'


@pytest.mark.api
class TestRedemptionApi:
    def test_scan_request_needs_exactly_one_identifier(
        self, client: TestClient, scanner: CallerIdentity
    ) -> None:
        response = client.post(
            '/api/redemption/scan',
            json={'ticket_number': 'TKT123456004298'},
            headers=auth_headers(scanner),
        )

        assert response.status_code == 400
        assert response.json()['kind'] == 'domain_error'

    def test_unknown_ticket_is_an_outcome_not_an_error(
        self, client: TestClient, event: EventEntity, scanner: CallerIdentity
    ) -> None:
        missing = make_ticket(event_id=EVENT_ID)

        response = client.post(
            '/api/redemption/scan',
            json={'ticket_id': str(missing.id)},
            headers=auth_headers(scanner),
        )

        assert response.status_code == 200
        assert response.json()['outcome'] == 'not_found'

    def test_forged_qr_is_rejected(
        self, client: TestClient, event: EventEntity, scanner: CallerIdentity
    ) -> None:
        response = client.post(
            '/api/redemption/scan/qr',
            json={'qr_payload': '{"type": "EVENT_TICKET"}'},
            headers=auth_headers(scanner),
        )

        assert response.status_code == 400
        assert response.json()['kind'] == 'domain_error'

    def test_scan_history_lists_own_scans(
        self,
        client: TestClient,
        store: InMemoryStore,
        event: EventEntity,
        scanner: CallerIdentity,
    ) -> None:
        ticket = store.add_ticket(make_ticket(event_id=EVENT_ID))
        client.post(
            '/api/redemption/scan',
            json={'ticket_id': str(ticket.id)},
            headers=auth_headers(scanner),
        )

        response = client.get('/api/redemption/history', headers=auth_headers(scanner))

        assert response.status_code == 200
        assert [item['ticket_id'] for item in response.json()] == [str(ticket.id)]

    def test_scan_history_is_for_scanners_only(
        self, client: TestClient, buyer: CallerIdentity
    ) -> None:
        response = client.get('/api/redemption/history', headers=auth_headers(buyer))

        assert response.status_code == 403


@pytest.mark.api
class TestOperationalEndpoints:
    def test_health(self, client: TestClient) -> None:
        assert client.get('/health').json()['status'] == 'healthy'

    def test_metrics(self, client: TestClient) -> None:
        response = client.get('/metrics')

        assert response.status_code == 200
        assert 'ticket' in response.text
