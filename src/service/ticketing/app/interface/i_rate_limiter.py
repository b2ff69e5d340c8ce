from abc import ABC, abstractmethod

from src.service.ticketing.domain.value_object.rate_limit import (
    RateLimitDecision,
    RateLimitPolicy,
)


class IRateLimiter(ABC):
    """Token bucket held outside the process so every instance shares it"""

    @abstractmethod
    async def acquire(self, *, identifier: str, policy: RateLimitPolicy) -> RateLimitDecision:
        pass
