from src.platform.config.core_setting import settings
from src.platform.exception.exceptions import RateLimitedError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.ticketing_metrics import metrics
from src.service.ticketing.app.interface.i_rate_limiter import IRateLimiter
from src.service.ticketing.domain.value_object.rate_limit import (
    RateLimitDecision,
    RateLimitPolicy,
)


TICKET_SCAN = RateLimitPolicy(
    name='ticket_scan',
    capacity=settings.RATE_LIMIT_TICKET_SCAN_CAPACITY,
    window_seconds=settings.RATE_LIMIT_TICKET_SCAN_WINDOW_SECONDS,
)

PAYMENT = RateLimitPolicy(
    name='payment',
    capacity=settings.RATE_LIMIT_PAYMENT_CAPACITY,
    window_seconds=settings.RATE_LIMIT_PAYMENT_WINDOW_SECONDS,
)


def scanner_identifier(user_id: int) -> str:
    return f'scanner:{user_id}'


def user_identifier(user_id: int) -> str:
    return f'user:{user_id}'


async def check_rate_limit(
    rate_limiter: IRateLimiter, *, identifier: str, policy: RateLimitPolicy
) -> RateLimitDecision:
    decision = await rate_limiter.acquire(identifier=identifier, policy=policy)
    if not decision.allowed:
        metrics.record_rate_limited(policy=policy.name)
        Logger.base.warning(
            f'🚦 [RATE-LIMIT] {identifier} exhausted {policy.name} '
            f'(retry after {decision.retry_after_seconds}s)'
        )
    return decision


async def enforce_rate_limit(
    rate_limiter: IRateLimiter, *, identifier: str, policy: RateLimitPolicy
) -> None:
    decision = await check_rate_limit(rate_limiter, identifier=identifier, policy=policy)
    if not decision.allowed:
        raise RateLimitedError(
            'Too many requests. Please try again later.',
            retry_after_seconds=decision.retry_after_seconds,
        )
