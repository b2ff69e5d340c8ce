"""
Payment Gateway Interface

The gateway is the only authority on whether money was captured; the core
never trusts payment status supplied by a client.
"""

from abc import ABC, abstractmethod

from src.service.ticketing.domain.value_object.payment_record import (
    PaymentIntent,
    PaymentRecord,
    RefundResult,
)


class IPaymentGateway(ABC):
    @abstractmethod
    async def retrieve_payment(self, *, payment_reference: str) -> PaymentRecord:
        """
        Raises:
            PaymentVerificationError: the gateway does not know the reference
            TransientGatewayError: network/rate-limit/5xx failure, safe to retry
        """
        pass

    @abstractmethod
    async def create_payment_intent(
        self, *, amount: int, currency: str, metadata: dict[str, str]
    ) -> PaymentIntent:
        pass

    @abstractmethod
    async def refund(
        self, *, payment_reference: str, reason: str, idempotency_key: str
    ) -> RefundResult:
        """Refunding an already-refunded payment returns ALREADY_REFUNDED, never raises"""
        pass
