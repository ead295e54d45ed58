"""
EmberGuard - Retry Utilities
============================

Retry logic for storage I/O with exponential backoff.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import asyncio
from typing import Any, Callable, Tuple, Type

from emberguard.core.logger import logger

# Exceptions that should trigger a retry
RETRYABLE_EXCEPTIONS: Tuple[Type[Exception], ...] = (
    OSError,
    asyncio.TimeoutError,
)


async def retry_async(
    coro_func: Callable[..., Any],
    *args,
    max_retries: int = 3,
    base_delay: float = 0.05,
    max_delay: float = 1.0,
    exceptions: Tuple[Type[Exception], ...] = RETRYABLE_EXCEPTIONS,
    operation: str = "operation",
    **kwargs,
) -> Any:
    """
    Retry an async function with exponential backoff.

    Args:
        coro_func: Async function to call.
        *args: Arguments to pass to the function.
        max_retries: Maximum number of retry attempts.
        base_delay: Initial delay between retries (seconds).
        max_delay: Maximum delay between retries (seconds).
        exceptions: Tuple of exception types that trigger retry.
        operation: Label used in retry log lines.
        **kwargs: Keyword arguments to pass to the function.

    Returns:
        Result of the coroutine function.

    Raises:
        The last exception if all retries fail.
    """
    last_exception = None

    for attempt in range(max_retries + 1):
        try:
            return await coro_func(*args, **kwargs)
        except exceptions as e:
            last_exception = e

            if attempt < max_retries:
                delay = min(base_delay * (2 ** attempt), max_delay)
                logger.warning(
                    f"Retry {attempt + 1}/{max_retries}: {operation} - {type(e).__name__}, retrying in {delay:.2f}s"
                )
                await asyncio.sleep(delay)
            else:
                logger.error("Retries Exhausted", [
                    ("Operation", operation),
                    ("Attempts", str(max_retries + 1)),
                    ("Error Type", type(e).__name__),
                    ("Error", str(e)[:100]),
                ])

    raise last_exception


__all__ = [
    "retry_async",
    "RETRYABLE_EXCEPTIONS",
]
