from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace
from uuid_utils import UUID

from src.platform.config.di import Container
from src.platform.exception.exceptions import (
    AlreadyHoldsTicketError,
    AuthorizationError,
    ConflictError,
    DomainError,
    NotFoundError,
    TransientStoreError,
)
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.ticketing_metrics import metrics
from src.platform.resilience.retry import retry_with_backoff
from src.service.ticketing.app.interface.i_audit_sink import IAuditSink
from src.service.ticketing.app.interface.i_ticket_command_repo import ITicketCommandRepo
from src.service.ticketing.app.interface.i_ticket_query_repo import ITicketQueryRepo
from src.service.ticketing.app.interface.i_user_query_repo import IUserQueryRepo
from src.service.ticketing.app.service.audit_trail import record_audit
from src.service.ticketing.domain.entity.audit_entry import (
    AuditAction,
    AuditEntry,
    AuditEventType,
    AuditStatus,
)
from src.service.ticketing.domain.entity.ticket_entity import TicketEntity
from src.service.ticketing.domain.entity.user_entity import normalize_email
from src.service.ticketing.domain.ticket_state_machine import TicketTransition, ensure_transition
from src.service.ticketing.domain.value_object.caller_identity import CallerIdentity


class TransferTicketUseCase:
    """
    Hand a confirmed ticket to another registered user.

    The ownership change is a conditional write on (confirmed, current owner),
    so a transfer racing a scan or a second transfer has exactly one winner.
    """

    def __init__(
        self,
        *,
        ticket_query_repo: ITicketQueryRepo,
        ticket_command_repo: ITicketCommandRepo,
        user_query_repo: IUserQueryRepo,
        audit_sink: IAuditSink,
    ) -> None:
        self.ticket_query_repo = ticket_query_repo
        self.ticket_command_repo = ticket_command_repo
        self.user_query_repo = user_query_repo
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
        user_query_repo: IUserQueryRepo = Depends(Provide[Container.user_query_repo]),
        audit_sink: IAuditSink = Depends(Provide[Container.audit_sink]),
    ) -> Self:
        return cls(
            ticket_query_repo=ticket_query_repo,
            ticket_command_repo=ticket_command_repo,
            user_query_repo=user_query_repo,
            audit_sink=audit_sink,
        )

    @Logger.io
    async def execute(
        self, *, ticket_id: UUID, recipient_email: str, caller: CallerIdentity
    ) -> TicketEntity:
        with self.tracer.start_as_current_span(
            'use_case.transfer_ticket',
            attributes={'ticket.id': str(ticket_id), 'user.id': caller.user_id},
        ):
            try:
                transferred = await self._transfer(
                    ticket_id=ticket_id, recipient_email=recipient_email, caller=caller
                )
            except (DomainError, NotFoundError, AuthorizationError, ConflictError) as e:
                metrics.record_transfer(result=e.kind)
                await record_audit(
                    self.audit_sink,
                    AuditEntry(
                        event_type=AuditEventType.TICKET,
                        action=AuditAction.TRANSFERRED,
                        status=AuditStatus.FAILURE,
                        resource_type='ticket',
                        resource_id=str(ticket_id),
                        actor_user_id=caller.user_id,
                        actor_role=caller.role,
                        error_code=e.kind,
                        description=e.message,
                    ),
                )
                raise

            metrics.record_transfer(result='transferred')
            Logger.base.info(
                f'🔀 [TRANSFER] Ticket {ticket_id} moved from user {caller.user_id} '
                f'to user {transferred.owner_user_id}'
            )
            await record_audit(
                self.audit_sink,
                AuditEntry(
                    event_type=AuditEventType.TICKET,
                    action=AuditAction.TRANSFERRED,
                    status=AuditStatus.SUCCESS,
                    resource_type='ticket',
                    resource_id=str(ticket_id),
                    actor_user_id=caller.user_id,
                    actor_role=caller.role,
                    description='Ticket transferred',
                    metadata={
                        'event_id': transferred.event_id,
                        'from_user_id': caller.user_id,
                        'to_user_id': transferred.owner_user_id,
                    },
                ),
            )
            return transferred

    async def _transfer(
        self, *, ticket_id: UUID, recipient_email: str, caller: CallerIdentity
    ) -> TicketEntity:
        ticket = await retry_with_backoff(
            lambda: self.ticket_query_repo.get_by_id(ticket_id=ticket_id),
            retry_on=(TransientStoreError,),
            operation_name='get_ticket',
        )
        if ticket is None:
            raise NotFoundError('Ticket not found')
        if not ticket.is_owned_by(caller.user_id):
            raise AuthorizationError('You do not own this ticket')
        ensure_transition(ticket.status, TicketTransition.TRANSFER)

        email = normalize_email(recipient_email)
        if not email:
            raise DomainError('Recipient email is required')
        recipient = await retry_with_backoff(
            lambda: self.user_query_repo.get_by_email(email=email),
            retry_on=(TransientStoreError,),
            operation_name='get_user_by_email',
        )
        if recipient is None or not recipient.is_active:
            raise NotFoundError('No user found with that email address')
        if recipient.id == caller.user_id:
            raise DomainError('Cannot transfer a ticket to yourself')

        held = await retry_with_backoff(
            lambda: self.ticket_query_repo.find_confirmed_for_owner(
                event_id=ticket.event_id, owner_user_id=recipient.id
            ),
            retry_on=(TransientStoreError,),
            operation_name='find_recipient_ticket',
        )
        if held is not None:
            raise AlreadyHoldsTicketError('Recipient already holds a ticket for this event')

        transferred = await retry_with_backoff(
            lambda: self.ticket_command_repo.reassign_owner(
                ticket_id=ticket.id, from_user_id=caller.user_id, to_user_id=recipient.id
            ),
            retry_on=(TransientStoreError,),
            operation_name='reassign_owner',
        )
        if transferred is None:
            raise ConflictError('Ticket was used, cancelled or transferred concurrently')
        return transferred
