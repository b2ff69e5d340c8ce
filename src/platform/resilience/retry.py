import random
from collections.abc import Awaitable, Callable
from typing import TypeVar

import anyio

from src.platform.config.core_setting import settings
from src.platform.logging.loguru_io import Logger


_T = TypeVar('_T')


def backoff_delay(*, attempt: int, base_delay: float, max_delay: float) -> float:
    """Exponential backoff with full jitter for the given 1-based attempt"""
    ceiling = min(max_delay, base_delay * (2 ** (attempt - 1)))
    return random.uniform(0, ceiling)


async def retry_with_backoff(
    operation: Callable[[], Awaitable[_T]],
    *,
    retry_on: tuple[type[BaseException], ...],
    operation_name: str,
    max_attempts: int | None = None,
    base_delay: float | None = None,
    max_delay: float | None = None,
) -> _T:
    """
    Run `operation` until it succeeds or raises something outside `retry_on`.

    The last `retry_on` error is re-raised once `max_attempts` is exhausted.
    """
    max_attempts = max_attempts or settings.TRANSIENT_RETRY_MAX_ATTEMPTS
    base_delay = settings.TRANSIENT_RETRY_BASE_DELAY if base_delay is None else base_delay
    max_delay = settings.TRANSIENT_RETRY_MAX_DELAY if max_delay is None else max_delay

    attempt = 1
    while True:
        try:
            return await operation()
        except retry_on as e:
            if attempt >= max_attempts:
                Logger.base.error(
                    f'❌ [RETRY] {operation_name} gave up after {attempt} attempts: {e}'
                )
                raise
            delay = backoff_delay(attempt=attempt, base_delay=base_delay, max_delay=max_delay)
            Logger.base.warning(
                f'🔄 [RETRY] {operation_name} attempt {attempt}/{max_attempts} failed: {e} '
                f'(retrying in {delay:.3f}s)'
            )
            await anyio.sleep(delay)
            attempt += 1
