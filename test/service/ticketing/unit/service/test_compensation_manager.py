"""
Unit tests for CompensationManager

Refunds are best effort: a failed refund comes back as a CompensationFailure
on the attempt, never as a raised exception.
"""

import pytest

from src.platform.exception.exceptions import CompensationFailure, TransientGatewayError
from src.service.ticketing.app.service.compensation_manager import (
    GATEWAY_REFUND_REASON,
    CompensationManager,
    refund_idempotency_key,
)
from src.service.ticketing.domain.entity.audit_entry import (
    AuditAction,
    AuditSeverity,
    AuditStatus,
)
from src.service.ticketing.domain.enum.compensation_reason import CompensationReason
from src.service.ticketing.domain.value_object.payment_record import RefundResult
from test.service.ticketing.fakes import FakePaymentGateway, RecordingAuditSink
from test.util_constant import PAYMENT_REFERENCE


@pytest.mark.unit
class TestCompensationManager:
    @pytest.mark.asyncio
    async def test_refund_uses_reference_derived_idempotency_key(
        self,
        compensation_manager: CompensationManager,
        payment_gateway: FakePaymentGateway,
        audit_sink: RecordingAuditSink,
    ) -> None:
        attempt = await compensation_manager.refund(
            payment_reference=PAYMENT_REFERENCE, reason=CompensationReason.CAPACITY_EXCEEDED
        )

        assert attempt.succeeded
        assert attempt.result == RefundResult.REFUNDED
        assert payment_gateway.refund_calls == [
            (PAYMENT_REFERENCE, refund_idempotency_key(PAYMENT_REFERENCE))
        ]
        entry = audit_sink.last()
        assert entry.action == AuditAction.REFUNDED
        assert entry.status == AuditStatus.SUCCESS
        assert entry.metadata['reason'] == 'capacity_exceeded'

    @pytest.mark.asyncio
    async def test_second_refund_is_a_no_op(
        self,
        compensation_manager: CompensationManager,
        payment_gateway: FakePaymentGateway,
    ) -> None:
        await compensation_manager.refund(
            payment_reference=PAYMENT_REFERENCE, reason=CompensationReason.EVENT_CANCELLED
        )

        again = await compensation_manager.refund(
            payment_reference=PAYMENT_REFERENCE, reason=CompensationReason.EVENT_CANCELLED
        )

        assert again.result == RefundResult.ALREADY_REFUNDED
        assert payment_gateway.refunded == {PAYMENT_REFERENCE}

    @pytest.mark.asyncio
    async def test_transient_gateway_failure_is_retried(
        self,
        compensation_manager: CompensationManager,
        payment_gateway: FakePaymentGateway,
    ) -> None:
        payment_gateway.fail_next('refund', times=2)

        attempt = await compensation_manager.refund(
            payment_reference=PAYMENT_REFERENCE, reason=CompensationReason.PERSISTENCE_FAILURE
        )

        assert attempt.succeeded

    @pytest.mark.parametrize(
        'error',
        [TransientGatewayError('still down'), RuntimeError('card network on fire')],
    )
    @pytest.mark.asyncio
    async def test_failed_refund_is_reported_not_raised(
        self,
        compensation_manager: CompensationManager,
        payment_gateway: FakePaymentGateway,
        audit_sink: RecordingAuditSink,
        error: Exception,
    ) -> None:
        payment_gateway.refund_error = error

        attempt = await compensation_manager.refund(
            payment_reference=PAYMENT_REFERENCE,
            reason=CompensationReason.ALREADY_HOLDS_TICKET,
            actor_user_id=5,
        )

        assert not attempt.succeeded
        assert isinstance(attempt.failure, CompensationFailure)
        assert attempt.failure.payment_reference == PAYMENT_REFERENCE
        assert attempt.failure.reason == CompensationReason.ALREADY_HOLDS_TICKET
        entry = audit_sink.last()
        assert entry.status == AuditStatus.FAILURE
        assert entry.severity == AuditSeverity.CRITICAL
        assert entry.actor_user_id == 5

    def test_gateway_reason_is_generic(self) -> None:
        assert GATEWAY_REFUND_REASON == 'requested_by_customer'
