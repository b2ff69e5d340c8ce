from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace
from uuid_utils import UUID

from src.platform.config.core_setting import settings
from src.platform.config.di import Container
from src.platform.exception.exceptions import (
    CustomBaseError,
    DomainError,
    ErrorKind,
    TransientStoreError,
)
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.ticketing_metrics import metrics
from src.platform.resilience.retry import retry_with_backoff
from src.service.ticketing.app.interface.i_audit_sink import IAuditSink
from src.service.ticketing.app.interface.i_event_query_repo import IEventQueryRepo
from src.service.ticketing.app.interface.i_rate_limiter import IRateLimiter
from src.service.ticketing.app.interface.i_ticket_command_repo import ITicketCommandRepo
from src.service.ticketing.app.interface.i_ticket_query_repo import ITicketQueryRepo
from src.service.ticketing.app.service.audit_trail import record_audit
from src.service.ticketing.app.service.rate_limit_policies import (
    TICKET_SCAN,
    check_rate_limit,
    scanner_identifier,
)
from src.service.ticketing.domain.access_policy import PolicyAction, PolicyResource, evaluate
from src.service.ticketing.domain.entity.audit_entry import (
    AuditAction,
    AuditEntry,
    AuditEventType,
    AuditSeverity,
    AuditStatus,
)
from src.service.ticketing.domain.entity.ticket_entity import TicketEntity
from src.service.ticketing.domain.enum.redemption_outcome import RedemptionOutcome
from src.service.ticketing.domain.enum.ticket_status import TicketStatus
from src.service.ticketing.domain.ticket_number import parse_qr_payload
from src.service.ticketing.domain.ticket_state_machine import TicketTransition, ensure_transition
from src.service.ticketing.domain.value_object.caller_identity import CallerIdentity
from src.service.ticketing.domain.value_object.redemption_result import RedemptionResult
from src.service.ticketing.domain.value_object.ticket_lookup import TicketLookup


_AUDIT_ACTION: dict[RedemptionOutcome, AuditAction] = {
    RedemptionOutcome.SUCCESS: AuditAction.SCANNED,
    RedemptionOutcome.PERMISSION_DENIED: AuditAction.PERMISSION_DENIED,
    RedemptionOutcome.RATE_LIMITED: AuditAction.RATE_LIMITED,
}

_AUDIT_SEVERITY: dict[RedemptionOutcome, AuditSeverity] = {
    RedemptionOutcome.SUCCESS: AuditSeverity.INFO,
    RedemptionOutcome.PERMISSION_DENIED: AuditSeverity.WARN,
    RedemptionOutcome.RATE_LIMITED: AuditSeverity.WARN,
    RedemptionOutcome.ALREADY_USED: AuditSeverity.WARN,
}


class RedeemTicketUseCase:
    """
    Redemption gate: admit a ticket exactly once at the door.

    Flow:
    1. Rate-limit the scanner (no store access when exhausted)
    2. Look up the ticket by id or by its ticket number
    3. Venue-scoped authorization against the ticket's event
    4. Wrong-event check for manual entry
    5. Branch on status; `confirmed` tries the conditional confirmed -> used
       write, and a lost race re-reads and reports who won

    Every outcome is a normal result for the scanning device and is audited.
    """

    def __init__(
        self,
        *,
        ticket_query_repo: ITicketQueryRepo,
        ticket_command_repo: ITicketCommandRepo,
        event_query_repo: IEventQueryRepo,
        rate_limiter: IRateLimiter,
        audit_sink: IAuditSink,
    ) -> None:
        self.ticket_query_repo = ticket_query_repo
        self.ticket_command_repo = ticket_command_repo
        self.event_query_repo = event_query_repo
        self.rate_limiter = rate_limiter
        self.audit_sink = audit_sink
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        ticket_query_repo: ITicketQueryRepo = Depends(Provide[Container.ticket_query_repo]),
        ticket_command_repo: ITicketCommandRepo = Depends(
            Provide[Container.ticket_command_repo]
        ),
        event_query_repo: IEventQueryRepo = Depends(Provide[Container.event_query_repo]),
        rate_limiter: IRateLimiter = Depends(Provide[Container.rate_limiter]),
        audit_sink: IAuditSink = Depends(Provide[Container.audit_sink]),
    ) -> Self:
        return cls(
            ticket_query_repo=ticket_query_repo,
            ticket_command_repo=ticket_command_repo,
            event_query_repo=event_query_repo,
            rate_limiter=rate_limiter,
            audit_sink=audit_sink,
        )

    @Logger.io
    async def execute(self, *, lookup: TicketLookup, scanner: CallerIdentity) -> RedemptionResult:
        with self.tracer.start_as_current_span(
            'use_case.redeem_ticket',
            attributes={'ticket.lookup': lookup.describe(), 'scanner.id': scanner.user_id},
        ):
            try:
                result = await self._redeem(lookup=lookup, scanner=scanner)
            except Exception as e:
                await record_audit(self.audit_sink, self._failure_entry(e, lookup, scanner))
                raise

            metrics.record_redemption(outcome=result.outcome)
            Logger.base.info(
                f'🎟️  [REDEEM] {lookup.describe()} by scanner {scanner.user_id} -> {result.outcome}'
            )
            await record_audit(self.audit_sink, self._audit_entry(result, lookup, scanner))
            return result

    @Logger.io
    async def execute_qr(
        self, *, qr_payload: str, scanner: CallerIdentity, event_id: int | None = None
    ) -> RedemptionResult:
        """Verify a scanned QR payload, then redeem by the ticket id it carries"""
        try:
            claims = parse_qr_payload(qr_payload, secret=settings.QR_SECRET.get_secret_value())
            ticket_id = UUID(claims.ticket_id)
        except (DomainError, ValueError) as e:
            await record_audit(
                self.audit_sink,
                AuditEntry(
                    event_type=AuditEventType.SECURITY,
                    action=AuditAction.FAILED,
                    status=AuditStatus.FAILURE,
                    severity=AuditSeverity.WARN,
                    resource_type='ticket',
                    resource_id=None,
                    actor_user_id=scanner.user_id,
                    actor_role=scanner.role,
                    error_code='invalid_qr',
                    description=str(e),
                ),
            )
            if isinstance(e, DomainError):
                raise
            raise DomainError('Invalid ticket id in QR code') from e

        return await self.execute(
            lookup=TicketLookup.by_id(ticket_id, event_id=event_id), scanner=scanner
        )

    async def _redeem(self, *, lookup: TicketLookup, scanner: CallerIdentity) -> RedemptionResult:
        decision = await check_rate_limit(
            self.rate_limiter, identifier=scanner_identifier(scanner.user_id), policy=TICKET_SCAN
        )
        if not decision.allowed:
            return RedemptionResult(
                outcome=RedemptionOutcome.RATE_LIMITED,
                message='Too many scan attempts. Please wait.',
                retry_after_seconds=decision.retry_after_seconds,
            )

        ticket = await self._find_ticket(lookup)
        if ticket is None:
            return RedemptionResult(
                outcome=RedemptionOutcome.NOT_FOUND,
                message='Ticket not found',
                event_id=lookup.event_id,
            )

        event = await retry_with_backoff(
            lambda: self.event_query_repo.get_by_id(event_id=ticket.event_id),
            retry_on=(TransientStoreError,),
            operation_name='get_event',
        )
        policy = evaluate(
            scanner,
            PolicyAction.REDEEM_TICKET,
            PolicyResource(venue_id=event.venue_id if event else None),
        )
        if not policy.allowed:
            return RedemptionResult(
                outcome=RedemptionOutcome.PERMISSION_DENIED,
                message=policy.reason,
                ticket_id=ticket.id,
            )

        if lookup.event_id is not None and lookup.event_id != ticket.event_id:
            return RedemptionResult(
                outcome=RedemptionOutcome.WRONG_EVENT,
                message='Ticket is for a different event',
                ticket_id=ticket.id,
                ticket_number=ticket.ticket_number,
                event_id=lookup.event_id,
                actual_event_id=ticket.event_id,
            )

        return await self._transition(ticket=ticket, scanner=scanner)

    async def _transition(
        self, *, ticket: TicketEntity, scanner: CallerIdentity
    ) -> RedemptionResult:
        match ticket.status:
            case TicketStatus.CANCELLED:
                return RedemptionResult.for_ticket(
                    RedemptionOutcome.CANCELLED, ticket, message='Ticket has been cancelled'
                )
            case TicketStatus.REFUNDED:
                return RedemptionResult.for_ticket(
                    RedemptionOutcome.REFUNDED, ticket, message='Ticket has been refunded'
                )
            case TicketStatus.USED:
                return RedemptionResult.for_ticket(
                    RedemptionOutcome.ALREADY_USED, ticket, message='Ticket already used'
                )
            case TicketStatus.CONFIRMED:
                ensure_transition(ticket.status, TicketTransition.REDEEM)

        used = await retry_with_backoff(
            lambda: self.ticket_command_repo.mark_used(
                ticket_id=ticket.id,
                scanned_by=scanner.user_id,
                scanned_by_email=scanner.email,
            ),
            retry_on=(TransientStoreError,),
            operation_name='mark_used',
        )
        if used is not None:
            return RedemptionResult.for_ticket(
                RedemptionOutcome.SUCCESS, used, message='Ticket successfully scanned'
            )

        # Lost the race: another writer moved the ticket out of confirmed
        current = await self._find_ticket(TicketLookup.by_id(ticket.id))
        if current is None or current.status == TicketStatus.CONFIRMED:
            raise TransientStoreError(f'Ticket {ticket.id} changed during redemption')
        return await self._transition(ticket=current, scanner=scanner)

    async def _find_ticket(self, lookup: TicketLookup) -> TicketEntity | None:
        if lookup.ticket_id is not None:
            ticket_id = lookup.ticket_id
            return await retry_with_backoff(
                lambda: self.ticket_query_repo.get_by_id(ticket_id=ticket_id),
                retry_on=(TransientStoreError,),
                operation_name='get_ticket',
            )

        assert lookup.ticket_number is not None
        ticket_number = lookup.ticket_number
        return await retry_with_backoff(
            lambda: self.ticket_query_repo.get_by_ticket_number(ticket_number=ticket_number),
            retry_on=(TransientStoreError,),
            operation_name='get_ticket_by_number',
        )

    @staticmethod
    def _audit_entry(
        result: RedemptionResult, lookup: TicketLookup, scanner: CallerIdentity
    ) -> AuditEntry:
        if result.outcome == RedemptionOutcome.PERMISSION_DENIED:
            event_type = AuditEventType.SECURITY
        else:
            event_type = AuditEventType.TICKET
        return AuditEntry(
            event_type=event_type,
            action=_AUDIT_ACTION.get(result.outcome, AuditAction.FAILED),
            status=AuditStatus.SUCCESS if result.is_success else AuditStatus.FAILURE,
            severity=_AUDIT_SEVERITY.get(result.outcome, AuditSeverity.INFO),
            resource_type='ticket',
            resource_id=str(result.ticket_id) if result.ticket_id else lookup.describe(),
            actor_user_id=scanner.user_id,
            actor_role=scanner.role,
            error_code=None if result.is_success else result.outcome,
            description=result.message,
            metadata={
                'event_id': result.event_id,
                'actual_event_id': result.actual_event_id,
                'scanner_venue_id': scanner.venue_id,
            },
        )

    @staticmethod
    def _failure_entry(
        error: Exception, lookup: TicketLookup, scanner: CallerIdentity
    ) -> AuditEntry:
        kind = error.kind if isinstance(error, CustomBaseError) else ErrorKind.INTERNAL
        return AuditEntry(
            event_type=AuditEventType.TICKET,
            action=AuditAction.FAILED,
            status=AuditStatus.FAILURE,
            severity=AuditSeverity.ERROR,
            resource_type='ticket',
            resource_id=lookup.describe(),
            actor_user_id=scanner.user_id,
            actor_role=scanner.role,
            error_code=kind,
            description=f'Redemption aborted: {error}',
            metadata={'event_id': lookup.event_id, 'scanner_venue_id': scanner.venue_id},
        )
