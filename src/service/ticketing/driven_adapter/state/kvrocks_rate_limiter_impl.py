import math
import time

from redis.exceptions import RedisError

from src.platform.logging.loguru_io import Logger
from src.platform.state.kvrocks_client import kvrocks_client, make_key
from src.service.ticketing.app.interface.i_rate_limiter import IRateLimiter
from src.service.ticketing.driven_adapter.state.lua_script import TOKEN_BUCKET_SCRIPT
from src.service.ticketing.domain.value_object.rate_limit import (
    RateLimitDecision,
    RateLimitPolicy,
)


class KvrocksRateLimiterImpl(IRateLimiter):
    """
    Token bucket in Kvrocks, one hash per (policy, identifier).

    Fails open: when Kvrocks is unreachable the action is allowed and the
    outage is logged, so a limiter failure never blocks the door.
    """

    def __init__(self) -> None:
        self._script = None

    def _get_script(self):
        if self._script is None:
            # register_script falls back from EVALSHA to EVAL on NOSCRIPT
            self._script = kvrocks_client.get_client().register_script(TOKEN_BUCKET_SCRIPT)
        return self._script

    async def acquire(self, *, identifier: str, policy: RateLimitPolicy) -> RateLimitDecision:
        key = make_key(f'ratelimit:{policy.name}:{identifier}')
        try:
            allowed, remaining, retry_after_ms = await self._get_script()(
                keys=[key],
                args=[
                    policy.capacity,
                    policy.refill_per_second,
                    int(time.time() * 1000),
                    policy.window_seconds * 2,
                ],
            )
        except (RedisError, OSError, RuntimeError) as e:
            Logger.base.warning(f'⚠️ [RATE-LIMIT] Limiter unavailable, allowing {identifier}: {e}')
            return RateLimitDecision(allowed=True, remaining=policy.capacity)

        return RateLimitDecision(
            allowed=bool(int(allowed)),
            remaining=int(remaining),
            retry_after_seconds=math.ceil(int(retry_after_ms) / 1000),
        )
