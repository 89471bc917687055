"""Bounded retry with exponential backoff for provider calls."""

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def with_retry(
    fn: Callable[[], Awaitable[T]],
    max_retries: int = 3,
    initial_delay: float = 1.0,
) -> T:
    """Await ``fn()``; on failure wait and try again, doubling the delay each time.

    After ``max_retries`` attempts (including the first) the last exception is re-raised.
    """
    if max_retries < 1:
        raise ValueError("max_retries must be at least 1")

    delay = initial_delay
    for attempt in range(1, max_retries + 1):
        try:
            return await fn()
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            if attempt == max_retries:
                raise
            logger.warning(
                "Attempt %s/%s failed (%s). Retrying in %.1fs",
                attempt,
                max_retries,
                exc,
                delay,
            )
            await asyncio.sleep(delay)
            delay *= 2
    raise RuntimeError("unreachable")
