"""Caller-side retry with exponential backoff.

SyncSession never retries on its own. Re-sending a batch whose HTTP exchange
failed is safe because the server ignores command uuids it already applied,
so callers can wrap perform_sync with retry_with_backoff:

    result = retry_with_backoff(lambda: session.perform_sync(types, batch))
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import TypeVar

from todoistsync.core.errors import RateLimitError, TransportError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Default retry configuration
DEFAULT_MAX_RETRIES = 5
DEFAULT_INITIAL_BACKOFF = 1.0  # seconds
DEFAULT_MAX_BACKOFF = 60.0  # seconds
DEFAULT_BACKOFF_MULTIPLIER = 2.0


def retry_with_backoff(
    func: Callable[[], T],
    max_retries: int = DEFAULT_MAX_RETRIES,
    initial_backoff: float = DEFAULT_INITIAL_BACKOFF,
    max_backoff: float = DEFAULT_MAX_BACKOFF,
    backoff_multiplier: float = DEFAULT_BACKOFF_MULTIPLIER,
    sleep: Callable[[float], None] | None = None,
) -> T:
    """Execute a function, retrying retryable transport errors.

    Only TransportErrors whose retryable flag is set (network failures,
    429, 5xx) are retried. A RateLimitError's retry_after, when sent,
    replaces the computed backoff.

    Args:
        func: Function to execute.
        max_retries: Maximum number of retry attempts.
        initial_backoff: Initial backoff time in seconds.
        max_backoff: Maximum backoff time in seconds.
        backoff_multiplier: Multiplier for each retry.
        sleep: Sleep function, time.sleep when None.

    Returns:
        Result of the function.

    Raises:
        The last exception if all retries fail, or the first non-retryable one.
    """
    backoff = initial_backoff

    for attempt in range(max_retries + 1):
        try:
            return func()
        except TransportError as e:
            if not e.retryable:
                raise
            if attempt == max_retries:
                logger.error(f"All {max_retries} retries failed: {e}")
                raise

            delay = backoff
            if isinstance(e, RateLimitError) and e.retry_after is not None:
                delay = min(e.retry_after, max_backoff)

            logger.warning(
                f"Attempt {attempt + 1}/{max_retries + 1} failed: {e}. "
                f"Retrying in {delay:.1f}s..."
            )
            (sleep or time.sleep)(delay)
            backoff = min(backoff * backoff_multiplier, max_backoff)

    raise RuntimeError("Unexpected retry loop exit")
