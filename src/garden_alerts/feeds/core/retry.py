"""Bounded exponential retry for upstream fetches."""
import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from garden_alerts.exceptions import UpstreamFetchError

logger = logging.getLogger(__name__)

T = TypeVar("T")
Sleep = Callable[[float], Awaitable[None]]


def backoff_delay(attempt: int) -> float:
    """Seconds to wait after failed attempt number `attempt` (1-based): 2**attempt."""
    return float(2**attempt)


async def retry_with_backoff(
    fetch: Callable[[], Awaitable[T]],
    *,
    label: str,
    max_attempts: int = 5,
    sleep: Sleep = asyncio.sleep,
) -> T:
    """Await fetch() until it succeeds or max_attempts UpstreamFetchErrors have occurred.

    Only UpstreamFetchError is retried; anything else (e.g. MalformedPayloadError)
    propagates on the first occurrence.

    Raises:
        UpstreamFetchError: The last failure once attempts are exhausted.
    """
    for attempt in range(1, max_attempts + 1):
        logger.info("%s (attempt %d/%d)...", label, attempt, max_attempts)
        try:
            return await fetch()
        except UpstreamFetchError as exc:
            logger.warning("%s failed: %s", label, exc)
            if attempt >= max_attempts:
                logger.error("Max retries reached for %s", label)
                raise
            delay = backoff_delay(attempt)
            logger.info("Retrying %s in %.0f seconds...", label, delay)
            await sleep(delay)
    raise UpstreamFetchError(f"{label}: no attempts made")
