import time
from collections.abc import Callable
from typing import NoReturn, Self

import anyio
from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from src.platform.config.core_setting import settings
from src.platform.config.di import Container
from src.platform.exception.exceptions import (
    AlreadyHoldsTicketError,
    AuthorizationError,
    CapacityExceededError,
    ConflictError,
    CustomBaseError,
    DuplicateRequestError,
    NotFoundError,
    PaymentVerificationError,
    PersistenceError,
    RateLimitedError,
    TransientGatewayError,
    TransientStoreError,
)
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.ticketing_metrics import metrics
from src.platform.resilience.retry import retry_with_backoff
from src.service.ticketing.app.dto.issued_ticket import IssuedTicket
from src.service.ticketing.app.interface.i_audit_sink import IAuditSink
from src.service.ticketing.app.interface.i_event_query_repo import IEventQueryRepo
from src.service.ticketing.app.interface.i_inventory_ledger import ReservationOutcome
from src.service.ticketing.app.interface.i_issuance_unit_of_work import IIssuanceUnitOfWork
from src.service.ticketing.app.interface.i_payment_gateway import IPaymentGateway
from src.service.ticketing.app.interface.i_rate_limiter import IRateLimiter
from src.service.ticketing.app.service.audit_trail import record_audit
from src.service.ticketing.app.service.compensation_manager import CompensationManager
from src.service.ticketing.app.service.idempotency_guard import IdempotencyGuard
from src.service.ticketing.app.service.rate_limit_policies import (
    PAYMENT,
    enforce_rate_limit,
    user_identifier,
)
from src.service.ticketing.domain.entity.audit_entry import (
    AuditAction,
    AuditEntry,
    AuditEventType,
    AuditSeverity,
    AuditStatus,
)
from src.service.ticketing.domain.entity.event_entity import EventEntity
from src.service.ticketing.domain.entity.ticket_entity import TicketEntity
from src.service.ticketing.domain.enum.compensation_reason import CompensationReason
from src.service.ticketing.domain.enum.event_status import EventStatus
from src.service.ticketing.domain.value_object.caller_identity import CallerIdentity
from src.service.ticketing.domain.value_object.payment_record import PaymentRecord


class EventNotOnSaleError(ConflictError):
    pass


def _compensation_reason_for(error: CustomBaseError) -> CompensationReason:
    if isinstance(error, CapacityExceededError):
        return CompensationReason.CAPACITY_EXCEEDED
    if isinstance(error, AlreadyHoldsTicketError):
        return CompensationReason.ALREADY_HOLDS_TICKET
    if isinstance(error, NotFoundError):
        return CompensationReason.EVENT_NOT_FOUND
    if isinstance(error, EventNotOnSaleError):
        return CompensationReason.EVENT_CANCELLED
    return CompensationReason.PERSISTENCE_FAILURE


class ConfirmPurchaseUseCase:
    """
    Turn a gateway-confirmed payment into exactly one ticket.

    Flow:
    1. Fetch the payment from the gateway (never trust the client) and require
       `succeeded`, ownership by the caller, and no refund
    2. Replay: a ticket already issued for the reference is returned unchanged
    3. Fetch the event
    4. One transaction: conditional capacity increment + ticket insert
    5. Any failure after the money moved goes through CompensationManager,
       unless a concurrent call with the same reference already issued the ticket

    The chain runs shielded from cancellation so a client disconnect after
    payment cannot strand a half-finished issuance.
    """

    def __init__(
        self,
        *,
        payment_gateway: IPaymentGateway,
        event_query_repo: IEventQueryRepo,
        idempotency_guard: IdempotencyGuard,
        compensation_manager: CompensationManager,
        issuance_uow_factory: Callable[[], IIssuanceUnitOfWork],
        rate_limiter: IRateLimiter,
        audit_sink: IAuditSink,
    ) -> None:
        self.payment_gateway = payment_gateway
        self.event_query_repo = event_query_repo
        self.idempotency_guard = idempotency_guard
        self.compensation_manager = compensation_manager
        self.issuance_uow_factory = issuance_uow_factory
        self.rate_limiter = rate_limiter
        self.audit_sink = audit_sink
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        payment_gateway: IPaymentGateway = Depends(Provide[Container.payment_gateway]),
        event_query_repo: IEventQueryRepo = Depends(Provide[Container.event_query_repo]),
        idempotency_guard: IdempotencyGuard = Depends(Provide[Container.idempotency_guard]),
        compensation_manager: CompensationManager = Depends(
            Provide[Container.compensation_manager]
        ),
        issuance_uow_factory: Callable[[], IIssuanceUnitOfWork] = Depends(
            Provide[Container.issuance_unit_of_work.provider]
        ),
        rate_limiter: IRateLimiter = Depends(Provide[Container.rate_limiter]),
        audit_sink: IAuditSink = Depends(Provide[Container.audit_sink]),
    ) -> Self:
        return cls(
            payment_gateway=payment_gateway,
            event_query_repo=event_query_repo,
            idempotency_guard=idempotency_guard,
            compensation_manager=compensation_manager,
            issuance_uow_factory=issuance_uow_factory,
            rate_limiter=rate_limiter,
            audit_sink=audit_sink,
        )

    @Logger.io
    async def execute(self, *, payment_reference: str, caller: CallerIdentity) -> IssuedTicket:
        with self.tracer.start_as_current_span(
            'use_case.confirm_purchase',
            attributes={'payment.reference': payment_reference, 'user.id': caller.user_id},
        ):
            try:
                await enforce_rate_limit(
                    self.rate_limiter, identifier=user_identifier(caller.user_id), policy=PAYMENT
                )
            except RateLimitedError as e:
                await self._audit_rejection(
                    payment_reference=payment_reference,
                    caller=caller,
                    error=e,
                    action=AuditAction.RATE_LIMITED,
                )
                raise

            started = time.perf_counter()
            try:
                with anyio.CancelScope(shield=True):
                    return await self._confirm(payment_reference=payment_reference, caller=caller)
            finally:
                metrics.issuance_duration.observe(time.perf_counter() - started)

    async def _confirm(self, *, payment_reference: str, caller: CallerIdentity) -> IssuedTicket:
        payment = await self._verify_payment(payment_reference=payment_reference, caller=caller)

        existing = await self.idempotency_guard.ensure_unique(payment_reference=payment_reference)
        if existing is not None:
            return self._replayed(existing)

        if payment.is_refunded:
            await self._reject_payment(
                PaymentVerificationError('Payment has been refunded'),
                payment_reference=payment_reference,
                caller=caller,
            )

        assert payment.event_id is not None
        try:
            event = await retry_with_backoff(
                lambda: self.event_query_repo.get_by_id(event_id=payment.event_id),
                retry_on=(TransientStoreError,),
                operation_name='get_event',
            )
            if event is None:
                raise NotFoundError('Event not found')
            if event.status == EventStatus.CANCELLED:
                raise EventNotOnSaleError('Event has been cancelled')

            ticket = await retry_with_backoff(
                lambda: self._issue_once(payment=payment, event=event, caller=caller),
                retry_on=(TransientStoreError,),
                operation_name='issue_ticket',
            )
        except DuplicateRequestError:
            winner = await self.idempotency_guard.resolve_winner(
                payment_reference=payment_reference
            )
            return self._replayed(winner)
        except (NotFoundError, ConflictError, TransientStoreError, PersistenceError) as e:
            winner = await self._compensate_unless_issued(
                payment_reference=payment_reference, error=e, caller=caller
            )
            if winner is not None:
                return self._replayed(winner)
            raise
        except Exception as e:
            # Money has moved; anything unrecognised is still a failed issuance
            winner = await self._compensate_unless_issued(
                payment_reference=payment_reference,
                error=PersistenceError(f'Unexpected issuance failure: {type(e).__name__}: {e}'),
                caller=caller,
            )
            if winner is not None:
                return self._replayed(winner)
            raise

        metrics.record_ticket_issued(event_id=ticket.event_id)
        Logger.base.info(
            f'🎫 [CONFIRM] Issued {ticket.ticket_number} ({ticket.id}) for payment '
            f'{payment_reference} to user {caller.user_id}'
        )
        await record_audit(
            self.audit_sink,
            AuditEntry(
                event_type=AuditEventType.PAYMENT,
                action=AuditAction.SUCCEEDED,
                status=AuditStatus.SUCCESS,
                resource_type='ticket',
                resource_id=str(ticket.id),
                actor_user_id=caller.user_id,
                actor_role=caller.role,
                description='Ticket issued from verified payment',
                metadata={
                    'payment_reference': payment_reference,
                    'event_id': ticket.event_id,
                    'ticket_number': ticket.ticket_number,
                },
            ),
        )
        return IssuedTicket(ticket=ticket, replayed=False)

    async def _verify_payment(
        self, *, payment_reference: str, caller: CallerIdentity
    ) -> PaymentRecord:
        try:
            payment = await retry_with_backoff(
                lambda: self.payment_gateway.retrieve_payment(payment_reference=payment_reference),
                retry_on=(TransientGatewayError,),
                operation_name='retrieve_payment',
            )
        except PaymentVerificationError as e:
            await self._reject_payment(e, payment_reference=payment_reference, caller=caller)

        if not payment.is_succeeded:
            await self._reject_payment(
                PaymentVerificationError(f'Payment not completed (status: {payment.status})'),
                payment_reference=payment_reference,
                caller=caller,
            )

        if payment.user_id != caller.user_id:
            await record_audit(
                self.audit_sink,
                AuditEntry(
                    event_type=AuditEventType.SECURITY,
                    action=AuditAction.PERMISSION_DENIED,
                    status=AuditStatus.FAILURE,
                    severity=AuditSeverity.WARN,
                    resource_type='payment',
                    resource_id=payment_reference,
                    actor_user_id=caller.user_id,
                    actor_role=caller.role,
                    description='Payment claimed by a different user',
                ),
            )
            raise AuthorizationError('Payment does not belong to this user')

        if payment.event_id is None:
            await self._reject_payment(
                PaymentVerificationError('Payment is missing event metadata'),
                payment_reference=payment_reference,
                caller=caller,
            )

        return payment

    async def _reject_payment(
        self, error: PaymentVerificationError, *, payment_reference: str, caller: CallerIdentity
    ) -> NoReturn:
        await self._audit_rejection(
            payment_reference=payment_reference, caller=caller, error=error
        )
        raise error

    async def _audit_rejection(
        self,
        *,
        payment_reference: str,
        caller: CallerIdentity,
        error: CustomBaseError,
        action: AuditAction = AuditAction.FAILED,
    ) -> None:
        Logger.base.info(
            f'🚫 [CONFIRM] Rejected payment {payment_reference} for user {caller.user_id}: '
            f'{error.message}'
        )
        await record_audit(
            self.audit_sink,
            AuditEntry(
                event_type=AuditEventType.PAYMENT,
                action=action,
                status=AuditStatus.FAILURE,
                severity=AuditSeverity.WARN,
                resource_type='payment',
                resource_id=payment_reference,
                actor_user_id=caller.user_id,
                actor_role=caller.role,
                error_code=error.kind,
                description=error.message,
            ),
        )

    async def _issue_once(
        self, *, payment: PaymentRecord, event: EventEntity, caller: CallerIdentity
    ) -> TicketEntity:
        async with self.issuance_uow_factory() as uow:
            outcome = await uow.inventory_ledger.try_reserve(event_id=event.id)
            match outcome:
                case ReservationOutcome.RESERVED:
                    pass
                case ReservationOutcome.CAPACITY_EXCEEDED:
                    raise CapacityExceededError('Event is sold out')
                case ReservationOutcome.EVENT_NOT_ACTIVE:
                    raise EventNotOnSaleError('Event is no longer on sale')
                case ReservationOutcome.EVENT_NOT_FOUND:
                    raise NotFoundError('Event not found')

            ticket = await uow.ticket_command_repo.insert(
                ticket=TicketEntity.issue(
                    event_id=event.id,
                    owner_user_id=caller.user_id,
                    payment_reference=payment.reference,
                    price=payment.amount,
                    currency=payment.currency,
                    qr_secret=settings.QR_SECRET.get_secret_value(),
                )
            )
            await uow.commit()
            return ticket

    async def _compensate_unless_issued(
        self, *, payment_reference: str, error: CustomBaseError, caller: CallerIdentity
    ) -> TicketEntity | None:
        """
        Refund unless a concurrent call with the same reference already issued a ticket.

        Returns that ticket when it exists. When the store cannot tell us (still
        unavailable), no refund is made: a retry of the same reference settles it.
        """
        reason = _compensation_reason_for(error)
        try:
            winner = await self.idempotency_guard.ensure_unique(
                payment_reference=payment_reference
            )
        except TransientStoreError as e:
            Logger.base.error(
                f'🚨 [CONFIRM] Cannot verify issuance state for {payment_reference} '
                f'({reason}); refund deferred to reconciliation: {e}'
            )
            metrics.record_issuance_failure(reason=reason)
            return None

        if winner is not None:
            return winner

        metrics.record_issuance_failure(reason=reason)
        Logger.base.warning(
            f'⚠️  [CONFIRM] Issuance failed for {payment_reference}: {error.message} ({reason})'
        )
        await self.compensation_manager.refund(
            payment_reference=payment_reference, reason=reason, actor_user_id=caller.user_id
        )
        await record_audit(
            self.audit_sink,
            AuditEntry(
                event_type=AuditEventType.PAYMENT,
                action=AuditAction.FAILED,
                status=AuditStatus.FAILURE,
                severity=AuditSeverity.ERROR,
                resource_type='payment',
                resource_id=payment_reference,
                actor_user_id=caller.user_id,
                actor_role=caller.role,
                error_code=error.kind,
                description=error.message,
                metadata={'reason': str(reason)},
            ),
        )
        return None

    def _replayed(self, ticket: TicketEntity) -> IssuedTicket:
        metrics.record_issuance_replay()
        Logger.base.info(
            f'🔁 [CONFIRM] Payment {ticket.payment_reference} already issued {ticket.ticket_number}'
        )
        return IssuedTicket(ticket=ticket, replayed=True)
