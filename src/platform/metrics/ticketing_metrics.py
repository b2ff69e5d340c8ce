from prometheus_client import Counter, Histogram


class TicketingMetrics:
    """
    Ticket issuance & redemption metrics collector

    Counts the outcomes a reconciliation or on-call engineer needs to see:
    issued tickets, issuance failures by reason, refunds by result,
    redemption outcomes and transfers.
    """

    def __init__(self) -> None:
        # ========== Issuance ==========
        self.tickets_issued = Counter(
            'tickets_issued_total',
            'Tickets minted from verified payments',
            ['event_id'],
        )

        self.issuance_replays = Counter(
            'ticket_issuance_replays_total',
            'Confirm-purchase calls answered with an already-issued ticket',
        )

        self.issuance_failures = Counter(
            'ticket_issuance_failures_total',
            'Issuance attempts that ended without a ticket',
            ['reason'],
        )

        self.issuance_duration = Histogram(
            'ticket_issuance_duration_seconds',
            'Confirm-purchase processing time',
            buckets=[0.01, 0.05, 0.1, 0.2, 0.5, 1.0, 2.0, 5.0, 10.0],
        )

        # ========== Compensation ==========
        self.refunds = Counter(
            'compensation_refunds_total',
            'Compensating refunds by reason and result',
            ['reason', 'result'],  # result: refunded/already_refunded/failed
        )

        # ========== Redemption ==========
        self.redemptions = Counter(
            'ticket_redemptions_total',
            'Redemption attempts by outcome',
            ['outcome'],
        )

        # ========== Transfer ==========
        self.transfers = Counter(
            'ticket_transfers_total',
            'Ticket transfers by result',
            ['result'],  # result: success/failure
        )

        # ========== Payment gateway ==========
        self.gateway_call_duration = Histogram(
            'payment_gateway_call_duration_seconds',
            'Payment gateway call latency',
            ['operation'],
            buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
        )

        self.rate_limited = Counter(
            'rate_limited_requests_total',
            'Requests rejected by a rate-limit policy',
            ['policy'],
        )

    # ========== Helper Methods ==========

    def record_ticket_issued(self, *, event_id: int) -> None:
        self.tickets_issued.labels(event_id=event_id).inc()

    def record_issuance_replay(self) -> None:
        self.issuance_replays.inc()

    def record_issuance_failure(self, *, reason: str) -> None:
        self.issuance_failures.labels(reason=reason).inc()

    def record_refund(self, *, reason: str, result: str) -> None:
        self.refunds.labels(reason=reason, result=result).inc()

    def record_redemption(self, *, outcome: str) -> None:
        self.redemptions.labels(outcome=outcome).inc()

    def record_transfer(self, *, result: str) -> None:
        self.transfers.labels(result=result).inc()

    def record_gateway_call(self, *, operation: str, duration: float) -> None:
        self.gateway_call_duration.labels(operation=operation).observe(duration)

    def record_rate_limited(self, *, policy: str) -> None:
        self.rate_limited.labels(policy=policy).inc()


# Global metrics instance
metrics = TicketingMetrics()
