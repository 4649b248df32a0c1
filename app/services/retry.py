import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

# substrings of error messages that indicate a transient network or capacity problem
RETRIABLE_MARKERS = (
    "ECONNABORTED",
    "ECONNRESET",
    "ETIMEDOUT",
    "Service Unavailable",
    "Too Many Requests",
)


def is_transient_error(exc: BaseException) -> bool:
    if getattr(exc, "transient", False):
        return True
    if isinstance(exc, (ConnectionError, TimeoutError, asyncio.TimeoutError)):
        return True
    message = str(exc)
    return any(marker in message for marker in RETRIABLE_MARKERS)


async def retry_operation(
    operation: Callable[[], Awaitable[T]],
    max_retries: int = 3,
    initial_delay: float = 1.0,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """
    Await `operation()` up to `max_retries` times, backing off exponentially
    (initial_delay * 2**attempt) between tries.

    Only transient errors are retried; anything else, and the error from the
    final try, propagates unchanged.
    """
    if max_retries < 1:
        raise ValueError("max_retries must be at least 1")

    for attempt in range(max_retries):
        try:
            return await operation()
        except Exception as exc:
            if not is_transient_error(exc) or attempt == max_retries - 1:
                raise
            delay = initial_delay * (2 ** attempt)
            logger.warning("Retry attempt %d: waiting %.2fs after transient error: %s", attempt + 1, delay, exc)
            await sleep(delay)

    raise RuntimeError("Max retries exceeded")
