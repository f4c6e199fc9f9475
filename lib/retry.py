"""
Retry and timeout helpers for calls to the generative AI service.

Rate limits and transient server errors are retried with exponential
backoff; errors caused by the input (bad key, unreadable file) are raised
immediately.
"""

import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable, Optional, TypeVar

from lib.errors import FatalGenerationError, GenerationTimeoutError, ProviderError

logger = logging.getLogger(__name__)

T = TypeVar("T")

EXTRACTION_TIMEOUT_S = 120.0
GENERATION_TIMEOUT_S = 180.0

_FATAL_PHRASES = (
    "api key",
    "password",
    "not a valid",
    "not configured",
    "empty (0 bytes)",
    "file not found",
    "no text could be extracted",
)

_RETRIABLE_PHRASES = (
    "429",
    "rate",
    "quota",
    "timeout",
    "timed out",
    "500",
    "503",
    "resource_exhausted",
    "unavailable",
    "overloaded",
    "internal",
    "failed to fetch",
    "fetch failed",
    "econnreset",
    "connection reset",
    "socket hang up",
)


class ErrorKind(str, Enum):
    FATAL = "fatal"
    RETRIABLE = "retriable"
    OTHER = "other"


def classify_error(error: BaseException) -> ErrorKind:
    """Decide whether an error is worth another attempt."""
    if isinstance(error, FatalGenerationError):
        return ErrorKind.FATAL
    if isinstance(error, (GenerationTimeoutError, asyncio.TimeoutError)):
        return ErrorKind.RETRIABLE
    if isinstance(error, ProviderError) and error.status_code is not None:
        if error.status_code == 429 or error.status_code >= 500:
            return ErrorKind.RETRIABLE

    message = str(error).lower()
    if any(phrase in message for phrase in _FATAL_PHRASES):
        return ErrorKind.FATAL
    if any(phrase in message for phrase in _RETRIABLE_PHRASES):
        return ErrorKind.RETRIABLE
    return ErrorKind.OTHER


async def with_retry(
    fn: Callable[[], Awaitable[T]],
    max_retries: int = 2,
    base_delay: float = 3.0,
    label: str = "operation",
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """
    Call ``fn`` until it succeeds or retries run out.

    Args:
        fn: Zero-argument coroutine function to call
        max_retries: Attempts after the first one
        base_delay: Seconds to wait before the first retry, doubled each time
        label: Name used in log lines
        sleep: Awaitable sleep, replaceable in tests

    Returns:
        Whatever ``fn`` returns
    """
    attempt = 0
    while True:
        if attempt > 0:
            wait = base_delay * (2 ** (attempt - 1))
            logger.info("Retry %d/%d for %s, waiting %.1fs...", attempt, max_retries, label, wait)
            await sleep(wait)
        try:
            return await fn()
        except Exception as e:
            kind = classify_error(e)
            if kind == ErrorKind.RETRIABLE and attempt < max_retries:
                logger.warning("Retriable error on attempt %d for %s: %s", attempt + 1, label, e)
                attempt += 1
                continue
            raise


async def with_timeout(
    coro: Awaitable[T],
    seconds: float,
    message: Optional[str] = None,
) -> T:
    """Await ``coro`` with a hard wall-clock limit.

    Raises:
        GenerationTimeoutError: If the limit is exceeded
    """
    try:
        return await asyncio.wait_for(coro, timeout=seconds)
    except asyncio.TimeoutError:
        raise GenerationTimeoutError(message or f"Operation timed out after {seconds:g} seconds")
