from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response
from opentelemetry import trace

from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.command.redeem_ticket_use_case import RedeemTicketUseCase
from src.service.ticketing.app.query.get_scan_history_use_case import GetScanHistoryUseCase
from src.service.ticketing.domain.enum.redemption_outcome import RedemptionOutcome
from src.service.ticketing.domain.value_object.caller_identity import CallerIdentity
from src.service.ticketing.domain.value_object.redemption_result import RedemptionResult
from src.service.ticketing.domain.value_object.ticket_lookup import TicketLookup
from src.service.ticketing.driving_adapter.http_controller.auth.role_auth import (
    get_current_caller,
)
from src.service.ticketing.driving_adapter.http_controller.schema.redemption_schema import (
    RedemptionResponse,
    ScanHistoryItem,
    ScanQrRequest,
    ScanTicketRequest,
)


router = APIRouter()
tracer = trace.get_tracer(__name__)


def _to_response(result: RedemptionResult, response: Response) -> RedemptionResponse:
    # Every outcome is a 200; the device branches on `outcome`
    if result.outcome == RedemptionOutcome.RATE_LIMITED and result.retry_after_seconds:
        response.headers['Retry-After'] = str(result.retry_after_seconds)
    return RedemptionResponse.from_result(result)


@router.post('/scan')
@Logger.io
async def scan_ticket(
    request: ScanTicketRequest,
    response: Response,
    scanner: CallerIdentity = Depends(get_current_caller),
    use_case: RedeemTicketUseCase = Depends(RedeemTicketUseCase.depends),
) -> RedemptionResponse:
    with tracer.start_as_current_span('controller.scan_ticket') as span:
        span.set_attribute('scanner.id', scanner.user_id)

        if request.ticket_id is not None:
            lookup = TicketLookup.by_id(request.ticket_id, event_id=request.event_id)
        else:
            assert request.ticket_number is not None and request.event_id is not None
            lookup = TicketLookup.by_number(request.ticket_number, event_id=request.event_id)

        result = await use_case.execute(lookup=lookup, scanner=scanner)
        span.set_attribute('outcome', str(result.outcome))
        return _to_response(result, response)


@router.post('/scan/qr')
@Logger.io
async def scan_qr(
    request: ScanQrRequest,
    response: Response,
    scanner: CallerIdentity = Depends(get_current_caller),
    use_case: RedeemTicketUseCase = Depends(RedeemTicketUseCase.depends),
) -> RedemptionResponse:
    result = await use_case.execute_qr(
        qr_payload=request.qr_payload, scanner=scanner, event_id=request.event_id
    )
    return _to_response(result, response)


@router.get('/history')
@Logger.io
async def scan_history(
    limit: Optional[int] = Query(default=None, ge=1),
    since: Optional[datetime] = None,
    until: Optional[datetime] = None,
    scanner: CallerIdentity = Depends(get_current_caller),
    use_case: GetScanHistoryUseCase = Depends(GetScanHistoryUseCase.depends),
) -> List[ScanHistoryItem]:
    tickets = await use_case.list_for_scanner(
        scanner=scanner, limit=limit, since=since, until=until
    )
    return [ScanHistoryItem.from_entity(ticket) for ticket in tickets]
