"""Bounded exponential-backoff retry for asynchronous operations."""

import asyncio
from typing import Awaitable, Callable, Optional, TypeVar

from papyrus.utils.errors import classify_error
from papyrus.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_INITIAL_DELAY = 1.0  # seconds


def backoff_delay(attempt: int, initial_delay: float = DEFAULT_INITIAL_DELAY) -> float:
    """Delay before the attempt following ``attempt`` (zero-based)."""
    return initial_delay * (2**attempt)


async def retry_with_backoff(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    initial_delay: float = DEFAULT_INITIAL_DELAY,
    sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    context: str = "",
) -> T:
    """Run ``operation`` until it succeeds or retries are exhausted.

    Errors classified as non-retryable (authentication, forbidden, invalid
    input, not found) are re-raised on the spot. Anything else is retried
    after ``initial_delay * 2 ** attempt`` seconds. Once ``max_attempts``
    attempts have failed the last error is re-raised unchanged.

    Args:
        operation: Zero-argument coroutine factory, called once per attempt
        max_attempts: Total number of attempts, including the first
        initial_delay: Delay in seconds after the first failure
        sleep: Awaitable sleep used between attempts (``asyncio.sleep``)
        context: Label used in log messages

    Returns:
        The result of the first successful attempt
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be >= 1")

    sleep = sleep or asyncio.sleep

    for attempt in range(max_attempts):
        try:
            return await operation()

        except Exception as e:
            classified = classify_error(e)

            if not classified.retryable:
                logger.debug(
                    f"{context or 'operation'} failed with non-retryable "
                    f"{classified.category.value} error, giving up"
                )
                raise

            if attempt == max_attempts - 1:
                logger.error(
                    f"{context or 'operation'} failed after {max_attempts} attempts",
                    extra={"attempts": max_attempts, "error": str(e)},
                )
                raise

            delay = backoff_delay(attempt, initial_delay)
            logger.warning(
                f"Retrying {context or 'operation'} "
                f"(attempt {attempt + 2}/{max_attempts})",
                extra={"retry_delay": delay, "error": str(e)},
            )
            await sleep(delay)

    # Unreachable: the loop either returns or raises
    raise RuntimeError("retry loop exited without a result")
