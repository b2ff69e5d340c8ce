from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from src.platform.config.di import Container
from src.platform.exception.exceptions import (
    AlreadyHoldsTicketError,
    CapacityExceededError,
    ConflictError,
    NotFoundError,
    TransientGatewayError,
    TransientStoreError,
)
from src.platform.logging.loguru_io import Logger
from src.platform.resilience.retry import retry_with_backoff
from src.service.ticketing.app.interface.i_audit_sink import IAuditSink
from src.service.ticketing.app.interface.i_event_query_repo import IEventQueryRepo
from src.service.ticketing.app.interface.i_payment_gateway import IPaymentGateway
from src.service.ticketing.app.interface.i_rate_limiter import IRateLimiter
from src.service.ticketing.app.interface.i_ticket_query_repo import ITicketQueryRepo
from src.service.ticketing.app.service.audit_trail import record_audit
from src.service.ticketing.app.service.rate_limit_policies import (
    PAYMENT,
    enforce_rate_limit,
    user_identifier,
)
from src.service.ticketing.domain.entity.audit_entry import (
    AuditAction,
    AuditEntry,
    AuditEventType,
    AuditStatus,
)
from src.service.ticketing.domain.enum.event_status import EventStatus
from src.service.ticketing.domain.value_object.caller_identity import CallerIdentity
from src.service.ticketing.domain.value_object.payment_record import PaymentIntent


class CreatePaymentIntentUseCase:
    """
    Start a purchase: pre-check the event and the buyer, then let the gateway
    create an intent carrying `{event_id, user_id, event_name}` metadata.

    The pre-checks only spare the buyer a doomed payment; ConfirmPurchase
    enforces capacity and one-ticket-per-user again at issuance.
    """

    def __init__(
        self,
        *,
        payment_gateway: IPaymentGateway,
        event_query_repo: IEventQueryRepo,
        ticket_query_repo: ITicketQueryRepo,
        rate_limiter: IRateLimiter,
        audit_sink: IAuditSink,
    ) -> None:
        self.payment_gateway = payment_gateway
        self.event_query_repo = event_query_repo
        self.ticket_query_repo = ticket_query_repo
        self.rate_limiter = rate_limiter
        self.audit_sink = audit_sink
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        payment_gateway: IPaymentGateway = Depends(Provide[Container.payment_gateway]),
        event_query_repo: IEventQueryRepo = Depends(Provide[Container.event_query_repo]),
        ticket_query_repo: ITicketQueryRepo = Depends(Provide[Container.ticket_query_repo]),
        rate_limiter: IRateLimiter = Depends(Provide[Container.rate_limiter]),
        audit_sink: IAuditSink = Depends(Provide[Container.audit_sink]),
    ) -> Self:
        return cls(
            payment_gateway=payment_gateway,
            event_query_repo=event_query_repo,
            ticket_query_repo=ticket_query_repo,
            rate_limiter=rate_limiter,
            audit_sink=audit_sink,
        )

    @Logger.io
    async def execute(self, *, event_id: int, caller: CallerIdentity) -> PaymentIntent:
        with self.tracer.start_as_current_span(
            'use_case.create_payment_intent',
            attributes={'event.id': event_id, 'user.id': caller.user_id},
        ):
            await enforce_rate_limit(
                self.rate_limiter, identifier=user_identifier(caller.user_id), policy=PAYMENT
            )

            event = await retry_with_backoff(
                lambda: self.event_query_repo.get_by_id(event_id=event_id),
                retry_on=(TransientStoreError,),
                operation_name='get_event',
            )
            if event is None:
                raise NotFoundError('Event not found')
            if event.status != EventStatus.ACTIVE:
                raise ConflictError('Event is not available for purchase')
            if event.remaining <= 0:
                raise CapacityExceededError('Event is sold out')

            held = await retry_with_backoff(
                lambda: self.ticket_query_repo.find_confirmed_for_owner(
                    event_id=event_id, owner_user_id=caller.user_id
                ),
                retry_on=(TransientStoreError,),
                operation_name='find_confirmed_for_owner',
            )
            if held is not None:
                raise AlreadyHoldsTicketError('You already have a ticket for this event')

            intent = await retry_with_backoff(
                lambda: self.payment_gateway.create_payment_intent(
                    amount=event.price,
                    currency=event.currency,
                    metadata={
                        'event_id': str(event.id),
                        'user_id': str(caller.user_id),
                        'event_name': event.name,
                    },
                ),
                retry_on=(TransientGatewayError,),
                operation_name='create_payment_intent',
            )

            Logger.base.info(
                f'💳 [PAYMENT-INTENT] {intent.reference} for event {event_id} '
                f'user {caller.user_id} ({intent.amount} {intent.currency})'
            )
            await record_audit(
                self.audit_sink,
                AuditEntry(
                    event_type=AuditEventType.PAYMENT,
                    action=AuditAction.INITIATED,
                    status=AuditStatus.SUCCESS,
                    resource_type='payment',
                    resource_id=intent.reference,
                    actor_user_id=caller.user_id,
                    actor_role=caller.role,
                    metadata={'event_id': event_id, 'amount': intent.amount},
                ),
            )
            return intent
