import attrs


@attrs.frozen
class RateLimitPolicy:
    """Token bucket: `capacity` actions per `window_seconds`, refilled continuously"""

    name: str
    capacity: int
    window_seconds: int

    @property
    def refill_per_second(self) -> float:
        return self.capacity / self.window_seconds


@attrs.frozen
class RateLimitDecision:
    allowed: bool
    remaining: int
    retry_after_seconds: int = 0
