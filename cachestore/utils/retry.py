# ==============================================================================
# Retry Configuration
# ==============================================================================
"""
Retry configuration for the Redis connection handshake.

Only establishing a connection is retried. Commands issued by the cache
interactions are never retried; their failures surface to the host.

Connect retry: 3 attempts, either a fixed wait of the configured retry
interval or exponential backoff (0.1s, 0.2s) when none is configured.
"""

import logging
from typing import Tuple, Type

from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
    wait_fixed,
)

# ==============================================================================
# Retry Constants
# ==============================================================================

RETRY_ATTEMPTS_CONNECT = 3
RETRY_WAIT_MIN = 0.1  # seconds
RETRY_WAIT_MAX = 1  # seconds


# ==============================================================================
# Logging Callbacks
# ==============================================================================


def log_retry_attempt(logger: logging.Logger):
    """
    Create a callback that logs retry attempts.

    Args:
        logger: Logger instance to use for logging

    Returns:
        Callback function for tenacity's before_sleep parameter
    """

    def _log_retry(retry_state: RetryCallState) -> None:
        exception = retry_state.outcome.exception() if retry_state.outcome else None
        logger.warning(
            "Retry attempt %d/%d after error: %s",
            retry_state.attempt_number,
            RETRY_ATTEMPTS_CONNECT,
            exception,
        )

    return _log_retry


# ==============================================================================
# Retry Decorators
# ==============================================================================


def retry_connect(
    exception_types: Tuple[Type[Exception], ...],
    logger: logging.Logger,
    retry_interval_ms: int | None = None,
):
    """
    Create a retry decorator for connection handshakes.

    Args:
        exception_types: Tuple of exception types to retry on
        logger: Logger instance for retry logging
        retry_interval_ms: Fixed wait between attempts in milliseconds.
            When None or 0, exponential backoff is used instead.

    Returns:
        Tenacity retry decorator

    Example:
        retry_connect((RedisConnectionError,), logger, 250)(client.ping)()
    """
    if retry_interval_ms:
        wait = wait_fixed(retry_interval_ms / 1000.0)
    else:
        wait = wait_exponential(multiplier=RETRY_WAIT_MIN, min=RETRY_WAIT_MIN, max=RETRY_WAIT_MAX)
    return retry(
        stop=stop_after_attempt(RETRY_ATTEMPTS_CONNECT),
        wait=wait,
        retry=retry_if_exception_type(exception_types),
        before_sleep=log_retry_attempt(logger),
        reraise=True,
    )
