"""Shared utilities for tools module.

This module contains shared constants and utility functions
used by the HTTP clients (search and content store).
"""

import asyncio
import logging
import ssl
from typing import Awaitable, Callable, TypeVar

import certifi

logger = logging.getLogger(__name__)

T = TypeVar("T")

USER_AGENT = "ai-obituaries-discovery/0.1 (+https://github.com/)"


def create_ssl_context() -> ssl.SSLContext:
    """SSL context verifying against the certifi CA bundle."""
    return ssl.create_default_context(cafile=certifi.where())


def is_retryable(error: BaseException) -> bool:
    """Decide whether a failed call is worth another attempt.

    Errors may opt out by carrying ``retryable = False``.
    """
    return getattr(error, "retryable", True)


async def retry_async(
    operation: Callable[[], Awaitable[T]],
    *,
    max_retries: int,
    base_delay: float,
    label: str = "call",
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Run an async operation with bounded exponential backoff.

    The operation is attempted at most ``max_retries + 1`` times. The delay
    before retry ``n`` (0-based) is ``base_delay * 2**n``.

    Args:
        operation: Zero-argument coroutine factory
        max_retries: Additional attempts after the first failure
        base_delay: Base delay in seconds
        label: Name used in log messages (never candidate content)
        sleep: Sleep function, replaceable in tests

    Returns:
        The operation's result

    Raises:
        The last exception when attempts are exhausted, or immediately
        for non-retryable errors. Cancellation is never retried.
    """
    attempt = 0
    while True:
        try:
            return await operation()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            if attempt >= max_retries or not is_retryable(e):
                raise
            delay = base_delay * (2 ** attempt)
            attempt += 1
            logger.warning(
                "Retrying %s | attempt=%d/%d delay=%.1fs error=%s: %s",
                label, attempt, max_retries, delay, type(e).__name__, e,
            )
            await sleep(delay)
