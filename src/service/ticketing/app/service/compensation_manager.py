from typing import Optional

import attrs

from src.platform.exception.exceptions import CompensationFailure, TransientGatewayError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.ticketing_metrics import metrics
from src.platform.resilience.retry import retry_with_backoff
from src.service.ticketing.app.interface.i_audit_sink import IAuditSink
from src.service.ticketing.app.interface.i_payment_gateway import IPaymentGateway
from src.service.ticketing.app.service.audit_trail import record_audit
from src.service.ticketing.domain.entity.audit_entry import (
    AuditAction,
    AuditEntry,
    AuditEventType,
    AuditSeverity,
    AuditStatus,
)
from src.service.ticketing.domain.enum.compensation_reason import CompensationReason
from src.service.ticketing.domain.value_object.payment_record import RefundResult


# Reason passed to the gateway; the internal reason travels in the audit record
GATEWAY_REFUND_REASON = 'requested_by_customer'


def refund_idempotency_key(payment_reference: str) -> str:
    return f'refund:{payment_reference}'


@attrs.frozen
class CompensationAttempt:
    payment_reference: str
    reason: CompensationReason
    result: Optional[RefundResult] = None
    failure: Optional[CompensationFailure] = None

    @property
    def succeeded(self) -> bool:
        return self.failure is None


class CompensationManager:
    """
    Refunds a captured payment when issuance cannot complete.

    Best effort: a failed refund is logged, counted and audited as a
    CompensationFailure for reconciliation, and never replaces the error the
    caller is already receiving. Refunds carry an idempotency key derived
    from the payment reference, and an already-refunded payment is a no-op.
    """

    def __init__(self, *, payment_gateway: IPaymentGateway, audit_sink: IAuditSink) -> None:
        self.payment_gateway = payment_gateway
        self.audit_sink = audit_sink

    @Logger.io
    async def refund(
        self,
        *,
        payment_reference: str,
        reason: CompensationReason,
        actor_user_id: int | None = None,
    ) -> CompensationAttempt:
        Logger.base.info(f'💸 [REFUND] Refunding {payment_reference} (reason={reason})')
        try:
            result = await retry_with_backoff(
                lambda: self.payment_gateway.refund(
                    payment_reference=payment_reference,
                    reason=GATEWAY_REFUND_REASON,
                    idempotency_key=refund_idempotency_key(payment_reference),
                ),
                retry_on=(TransientGatewayError,),
                operation_name='refund',
            )
        except Exception as e:
            failure = CompensationFailure(
                f'Refund failed for {payment_reference}: {e}',
                payment_reference=payment_reference,
                reason=reason,
            )
            Logger.base.opt(exception=e).error(
                f'🚨 [REFUND] CompensationFailure payment={payment_reference} '
                f'reason={reason}: {e}'
            )
            metrics.record_refund(reason=reason, result='failed')
            await record_audit(
                self.audit_sink,
                AuditEntry(
                    event_type=AuditEventType.PAYMENT,
                    action=AuditAction.REFUNDED,
                    status=AuditStatus.FAILURE,
                    severity=AuditSeverity.CRITICAL,
                    resource_type='payment',
                    resource_id=payment_reference,
                    actor_user_id=actor_user_id,
                    error_code=failure.kind,
                    description=failure.message,
                    metadata={'reason': str(reason)},
                ),
            )
            return CompensationAttempt(
                payment_reference=payment_reference, reason=reason, failure=failure
            )

        Logger.base.info(f'✅ [REFUND] {payment_reference} -> {result}')
        metrics.record_refund(reason=reason, result=result)
        await record_audit(
            self.audit_sink,
            AuditEntry(
                event_type=AuditEventType.PAYMENT,
                action=AuditAction.REFUNDED,
                status=AuditStatus.SUCCESS,
                severity=AuditSeverity.WARN,
                resource_type='payment',
                resource_id=payment_reference,
                actor_user_id=actor_user_id,
                description=f'Compensating refund ({reason})',
                metadata={'reason': str(reason), 'result': str(result)},
            ),
        )
        return CompensationAttempt(payment_reference=payment_reference, reason=reason, result=result)
