from fastapi import APIRouter, Depends, Response, status
from opentelemetry import trace

from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.command.confirm_purchase_use_case import ConfirmPurchaseUseCase
from src.service.ticketing.app.command.create_payment_intent_use_case import (
    CreatePaymentIntentUseCase,
)
from src.service.ticketing.domain.value_object.caller_identity import CallerIdentity
from src.service.ticketing.driving_adapter.http_controller.auth.role_auth import (
    require_active_user,
)
from src.service.ticketing.driving_adapter.http_controller.schema.purchase_schema import (
    ConfirmPurchaseRequest,
    ConfirmPurchaseResponse,
    PaymentIntentRequest,
    PaymentIntentResponse,
)
from src.service.ticketing.driving_adapter.http_controller.schema.ticket_schema import (
    TicketResponse,
)


router = APIRouter()
tracer = trace.get_tracer(__name__)


@router.post('/intent', status_code=status.HTTP_201_CREATED)
@Logger.io
async def create_payment_intent(
    request: PaymentIntentRequest,
    caller: CallerIdentity = Depends(require_active_user),
    use_case: CreatePaymentIntentUseCase = Depends(CreatePaymentIntentUseCase.depends),
) -> PaymentIntentResponse:
    intent = await use_case.execute(event_id=request.event_id, caller=caller)
    return PaymentIntentResponse(
        payment_reference=intent.reference,
        client_secret=intent.client_secret,
        amount=intent.amount,
        currency=intent.currency,
    )


@router.post('/confirm', status_code=status.HTTP_201_CREATED)
@Logger.io
async def confirm_purchase(
    request: ConfirmPurchaseRequest,
    response: Response,
    caller: CallerIdentity = Depends(require_active_user),
    use_case: ConfirmPurchaseUseCase = Depends(ConfirmPurchaseUseCase.depends),
) -> ConfirmPurchaseResponse:
    with tracer.start_as_current_span('controller.confirm_purchase') as span:
        span.set_attribute('user.id', caller.user_id)

        issued = await use_case.execute(
            payment_reference=request.payment_reference, caller=caller
        )

        span.set_attribute('ticket.id', str(issued.ticket.id))
        span.set_attribute('replayed', issued.replayed)
        # A replay returns the original ticket; nothing new was created
        if issued.replayed:
            response.status_code = status.HTTP_200_OK

        return ConfirmPurchaseResponse(
            ticket=TicketResponse.from_entity(issued.ticket), replayed=issued.replayed
        )
