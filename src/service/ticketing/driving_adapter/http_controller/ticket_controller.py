from typing import List, Optional

from fastapi import APIRouter, Depends

from src.platform.logging.loguru_io import Logger
from src.platform.types import TicketId
from src.service.ticketing.app.command.transfer_ticket_use_case import TransferTicketUseCase
from src.service.ticketing.app.query.get_ticket_use_case import GetTicketUseCase
from src.service.ticketing.app.query.list_my_tickets_use_case import ListMyTicketsUseCase
from src.service.ticketing.domain.enum.ticket_status import TicketStatus
from src.service.ticketing.domain.value_object.caller_identity import CallerIdentity
from src.service.ticketing.driving_adapter.http_controller.auth.role_auth import (
    get_current_caller,
    require_active_user,
)
from src.service.ticketing.driving_adapter.http_controller.schema.ticket_schema import (
    TicketResponse,
    TransferTicketRequest,
)


router = APIRouter()


@router.get('/mine')
@Logger.io
async def list_my_tickets(
    ticket_status: Optional[TicketStatus] = None,
    caller: CallerIdentity = Depends(get_current_caller),
    use_case: ListMyTicketsUseCase = Depends(ListMyTicketsUseCase.depends),
) -> List[TicketResponse]:
    tickets = await use_case.list_by_owner(owner_user_id=caller.user_id, status=ticket_status)
    return [TicketResponse.from_entity(ticket) for ticket in tickets]


@router.get('/{ticket_id}')
@Logger.io
async def get_ticket(
    ticket_id: TicketId,
    caller: CallerIdentity = Depends(get_current_caller),
    use_case: GetTicketUseCase = Depends(GetTicketUseCase.depends),
) -> TicketResponse:
    ticket = await use_case.get_by_id(ticket_id=ticket_id, caller=caller)
    return TicketResponse.from_entity(ticket)


@router.post('/{ticket_id}/transfer')
@Logger.io
async def transfer_ticket(
    ticket_id: TicketId,
    request: TransferTicketRequest,
    caller: CallerIdentity = Depends(require_active_user),
    use_case: TransferTicketUseCase = Depends(TransferTicketUseCase.depends),
) -> TicketResponse:
    ticket = await use_case.execute(
        ticket_id=ticket_id, recipient_email=request.recipient_email, caller=caller
    )
    return TicketResponse.from_entity(ticket)
