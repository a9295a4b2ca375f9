"""
Bounded-time retry for upload+start sequences.

Retrying is safe because the wrapped function only fails before the
remote command has started; a command that ran is never re-run.
"""

import logging
import time
from typing import Callable, Optional, TypeVar

from ...config.provider import DEFAULT_RETRY_SLEEP
from ...errors import StartRetryTimeoutError
from ..api import RetryState

logger = logging.getLogger("psprovisioner.executor.retry")

T = TypeVar("T")


def retryable(
    fn: Callable[[], T],
    timeout: float,
    delay: float = DEFAULT_RETRY_SLEEP,
    state: Optional[RetryState] = None,
) -> T:
    """
    Call fn until it succeeds or the retry window closes.

    Args:
        fn: Attempt to make; any exception counts as a failed attempt
        timeout: Seconds from the first attempt after which failures are fatal
        delay: Fixed sleep between attempts
        state: Optional RetryState to record attempts in

    Returns:
        Whatever fn returned on its first successful call

    Raises:
        StartRetryTimeoutError: Once a failure happens past the deadline
    """
    state = state or RetryState(timeout=timeout, delay=delay)

    while True:
        state.attempts += 1
        try:
            return fn()
        except Exception as e:
            message = f"Retryable error: {e}"
            logger.warning(message)

            if state.expired():
                raise StartRetryTimeoutError(
                    message, attempts=state.attempts, last_error=e
                ) from e

            time.sleep(state.delay)
