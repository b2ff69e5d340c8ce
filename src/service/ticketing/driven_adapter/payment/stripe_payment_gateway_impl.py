"""
Stripe Payment Gateway

The Stripe SDK is synchronous; every call runs in a worker thread under a
hard timeout. On timeout the caller gets TransientGatewayError at once and the
thread is abandoned; the HTTP client timeout bounds how long it lingers.
"""

import functools
import time
from typing import Any, Callable, TypeVar

import anyio
import anyio.to_thread
import stripe

from src.platform.config.core_setting import settings
from src.platform.exception.exceptions import PaymentVerificationError, TransientGatewayError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.ticketing_metrics import metrics
from src.service.ticketing.app.interface.i_payment_gateway import IPaymentGateway
from src.service.ticketing.domain.value_object.payment_record import (
    PaymentIntent,
    PaymentRecord,
    RefundResult,
)


_T = TypeVar('_T')

ALREADY_REFUNDED_CODE = 'charge_already_refunded'
RESOURCE_MISSING_CODE = 'resource_missing'


def _metadata_int(metadata: Any, key: str) -> int | None:
    value = (metadata or {}).get(key)
    if value is None or value == '':
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class StripePaymentGatewayImpl(IPaymentGateway):
    def __init__(self) -> None:
        stripe.api_key = settings.STRIPE_SECRET_KEY.get_secret_value()
        stripe.max_network_retries = settings.STRIPE_MAX_NETWORK_RETRIES
        # Socket-level bound; an abandoned worker thread still finishes within it
        stripe.default_http_client = stripe.RequestsClient(
            timeout=settings.PAYMENT_GATEWAY_TIMEOUT_SECONDS
        )

    async def _call(self, operation: str, func: Callable[..., _T], **kwargs: Any) -> _T:
        start = time.perf_counter()
        try:
            with anyio.fail_after(settings.PAYMENT_GATEWAY_TIMEOUT_SECONDS):
                return await anyio.to_thread.run_sync(
                    functools.partial(func, **kwargs), abandon_on_cancel=True
                )
        except TimeoutError as e:
            raise TransientGatewayError(f'Payment gateway timed out during {operation}') from e
        except (stripe.APIConnectionError, stripe.RateLimitError) as e:
            raise TransientGatewayError(f'Payment gateway unavailable: {e.user_message or e}') from e
        except stripe.APIError as e:
            if (e.http_status or 500) >= 500:
                raise TransientGatewayError(f'Payment gateway error: {e.user_message or e}') from e
            raise
        finally:
            metrics.record_gateway_call(operation=operation, duration=time.perf_counter() - start)

    @Logger.io
    async def retrieve_payment(self, *, payment_reference: str) -> PaymentRecord:
        try:
            intent = await self._call(
                'retrieve_payment',
                stripe.PaymentIntent.retrieve,
                id=payment_reference,
                expand=['latest_charge'],
            )
        except stripe.InvalidRequestError as e:
            if e.code == RESOURCE_MISSING_CODE:
                raise PaymentVerificationError('Payment not found') from e
            raise PaymentVerificationError(f'Payment lookup rejected: {e.user_message or e}') from e

        charge = intent.get('latest_charge')
        amount_refunded = 0
        if charge and not isinstance(charge, str):
            amount_refunded = charge.get('amount_refunded') or 0

        return PaymentRecord(
            reference=intent['id'],
            status=intent['status'],
            amount=intent['amount'],
            currency=intent['currency'],
            event_id=_metadata_int(intent.get('metadata'), 'event_id'),
            user_id=_metadata_int(intent.get('metadata'), 'user_id'),
            amount_refunded=amount_refunded,
        )

    @Logger.io
    async def create_payment_intent(
        self, *, amount: int, currency: str, metadata: dict[str, str]
    ) -> PaymentIntent:
        intent = await self._call(
            'create_payment_intent',
            stripe.PaymentIntent.create,
            amount=amount,
            currency=currency,
            metadata=metadata,
            automatic_payment_methods={'enabled': True},
        )
        Logger.base.info(f'💳 [STRIPE] Created payment intent {intent["id"]} ({amount} {currency})')
        return PaymentIntent(
            reference=intent['id'],
            client_secret=intent['client_secret'],
            amount=intent['amount'],
            currency=intent['currency'],
        )

    @Logger.io
    async def refund(
        self, *, payment_reference: str, reason: str, idempotency_key: str
    ) -> RefundResult:
        try:
            refund = await self._call(
                'refund',
                stripe.Refund.create,
                payment_intent=payment_reference,
                reason=reason,
                idempotency_key=idempotency_key,
            )
        except stripe.InvalidRequestError as e:
            if e.code == ALREADY_REFUNDED_CODE:
                Logger.base.info(f'ℹ️  [STRIPE] {payment_reference} was already refunded')
                return RefundResult.ALREADY_REFUNDED
            raise

        Logger.base.info(f'💸 [STRIPE] Refund {refund["id"]} for {payment_reference}')
        return RefundResult.REFUNDED
