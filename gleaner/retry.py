"""Retry configuration for Gleaner's transport layer.

Only fetching is retried; extraction and pagination never retry.
"""

from collections.abc import Callable
from typing import Any

import logfire
from tenacity import (
    BaseRetrying,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)


def get_retryer(
    max_attempts: int = 1,
    wait_min: float = 1.0,
    wait_max: float = 10.0,
    exceptions: tuple[type[BaseException], ...] = (Exception,),
    log_callback: Callable[[Any], None] | None = None,
) -> BaseRetrying:
    """Create a tenacity Retrying object with exponential backoff.

    The last exception is re-raised once attempts are exhausted.

    Args:
        max_attempts: Total attempts, including the first
        wait_min: Minimum wait between attempts in seconds
        wait_max: Maximum wait between attempts in seconds
        exceptions: Exception types that trigger another attempt
        log_callback: Called with the retry state before sleeping

    Returns:
        A configured tenacity.Retrying object

    """
    return Retrying(
        stop=stop_after_attempt(max(1, max_attempts)),
        wait=wait_exponential(multiplier=1, min=wait_min, max=wait_max),
        retry=retry_if_exception_type(exceptions),
        before_sleep=log_callback,
        reraise=True,
    )


def log_retry(retry_state: Any) -> None:
    """Log a retry attempt with logfire."""
    exception = retry_state.outcome.exception()
    logfire.warn(
        'Retrying fetch',
        attempt=retry_state.attempt_number,
        error=str(exception) if exception else 'Unknown error',
    )
