from pydantic import BaseModel, Field

from src.service.ticketing.driving_adapter.http_controller.schema.ticket_schema import (
    TicketResponse,
)


class PaymentIntentRequest(BaseModel):
    event_id: int = Field(gt=0)

    model_config = {'json_schema_extra': {'example': {'event_id': 1}}}


class PaymentIntentResponse(BaseModel):
    payment_reference: str
    client_secret: str
    amount: int
    currency: str


class ConfirmPurchaseRequest(BaseModel):
    payment_reference: str = Field(min_length=1, max_length=255)

    model_config = {'json_schema_extra': {'example': {'payment_reference': 'pi_3Qx...'}}}


class ConfirmPurchaseResponse(BaseModel):
    ticket: TicketResponse
    replayed: bool = False
