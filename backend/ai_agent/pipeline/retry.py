import asyncio
import random
from collections.abc import Awaitable, Callable
from typing import TypeVar

from ai_agent.config import settings
from ai_agent.logging_config import logger
from ai_agent.pipeline.errors import RetryExhaustedError, TransientServiceError

T = TypeVar("T")


def backoff_delay(attempt: int, base_delay: float, max_delay: float) -> float:
    """Exponential backoff with 0-25% jitter. ``attempt`` starts at 1."""
    delay = min(base_delay * (2 ** (attempt - 1)), max_delay)
    return delay + delay * random.uniform(0, 0.25)


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    *,
    max_attempts: int | None = None,
    base_delay: float | None = None,
    max_delay: float | None = None,
    label: str = "operation",
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Run ``operation``, re-running it on transient service errors only.

    ``max_attempts`` counts every invocation, the first one included. Any
    other exception propagates after the first failure.
    """
    max_attempts = max_attempts or settings.retry_max_attempts
    base_delay = settings.retry_base_delay if base_delay is None else base_delay
    max_delay = settings.retry_max_delay if max_delay is None else max_delay

    last_error: TransientServiceError | None = None
    for attempt in range(1, max_attempts + 1):
        try:
            return await operation()
        except TransientServiceError as e:
            last_error = e
            if attempt == max_attempts:
                break
            delay = backoff_delay(attempt, base_delay, max_delay)
            logger.warning(
                "%s failed with %s (attempt %d/%d), retrying in %.1fs",
                label, e.code, attempt, max_attempts, delay,
            )
            await sleep(delay)

    logger.error("%s failed after %d attempts: %s", label, max_attempts, last_error)
    raise RetryExhaustedError(
        f"{label} failed after {max_attempts} attempts: {last_error.message}",
        attempts=max_attempts,
        last_error=last_error,
        stage=last_error.stage,
        batch=last_error.batch,
    ) from last_error
