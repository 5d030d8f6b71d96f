"""
Retry with exponential backoff for the generation service.

Only "service overloaded" failures are retried. Anything else is raised
on the first occurrence.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, TypeVar

from src.core import GenerationUnavailable

logger = logging.getLogger(__name__)

T = TypeVar("T")

OVERLOADED_STATUS_CODES = (503, 529)
OVERLOADED_MARKERS = ("503", "overloaded", "service unavailable")


def is_overloaded_error(error: BaseException) -> bool:
    """Check whether an error means the service is temporarily overloaded."""
    status = getattr(error, "status_code", None)
    if status in OVERLOADED_STATUS_CODES:
        return True
    message = str(error).lower()
    return any(marker in message for marker in OVERLOADED_MARKERS)


def backoff_delay(attempt: int, base_delay: float) -> float:
    """Delay before retrying after the given 1-based failed attempt: base, 2x, 4x..."""
    return base_delay * (2 ** (attempt - 1))


async def call_with_retry(
    func: Callable[[], Awaitable[T]],
    max_attempts: int = 3,
    base_delay: float = 1.0,
    operation_name: str = "Generation call",
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> T:
    """
    Call an async function, retrying overloaded failures with exponential backoff.

    Args:
        func: Async callable to invoke (usually a lambda)
        max_attempts: Total attempts, the first call included
        base_delay: Delay in seconds after the first overloaded failure
        operation_name: Description of the operation for logging
        sleep: Awaitable sleep function, replaceable in tests

    Returns:
        Result from the first successful call

    Raises:
        GenerationUnavailable: Retries exhausted, or a non-retryable error occurred
    """
    for attempt in range(1, max_attempts + 1):
        try:
            result = await func()
            if attempt > 1:
                logger.info(f"{operation_name} succeeded on attempt {attempt}")
            return result

        except GenerationUnavailable:
            raise

        except Exception as e:
            if not is_overloaded_error(e):
                logger.error(f"{operation_name} failed with non-retryable error: {e}")
                raise GenerationUnavailable(str(e), reason=GenerationUnavailable.SERVICE) from e

            if attempt >= max_attempts:
                logger.error(f"{operation_name} still overloaded after {max_attempts} attempts")
                raise GenerationUnavailable(str(e), reason=GenerationUnavailable.OVERLOADED) from e

            delay = backoff_delay(attempt, base_delay)
            logger.warning(
                f"{operation_name} overloaded (attempt {attempt}/{max_attempts}). "
                f"Retrying in {delay:.1f}s..."
            )
            await sleep(delay)

    raise GenerationUnavailable(f"{operation_name} was not attempted", reason=GenerationUnavailable.SERVICE)
