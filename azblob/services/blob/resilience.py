"""
Retry logic for Azure Storage calls.

Container provisioning and append blob creation are retried with
exponential backoff when Azure reports a transient fault.

Author: azblob-plugin contributors
Date: 2026
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, TypeVar

from azure.core.exceptions import HttpResponseError, ServiceRequestError, ServiceResponseError

from azblob.core.config_manager import RetryConfig
from azblob.core.logging_config import log_with_context


logger = logging.getLogger(__name__)

T = TypeVar('T')

TRANSIENT_STATUS_CODES = frozenset({408, 429, 500, 502, 503, 504})


def is_transient_error(error: Exception) -> bool:
    """
    Determine if an error is transient and can be retried.

    Args:
        error: Exception to check

    Returns:
        True if error is transient and operation should be retried
    """
    # Connection failures and responses that never arrived intact
    if isinstance(error, (ServiceRequestError, ServiceResponseError)):
        return True

    if isinstance(error, HttpResponseError):
        return error.status_code in TRANSIENT_STATUS_CODES

    if isinstance(error, (ConnectionError, asyncio.TimeoutError)):
        return True

    return False


class RetryPolicy:
    """Bounded exponential backoff."""

    def __init__(
        self,
        max_attempts: int = 3,
        initial_backoff: float = 0.5,
        max_backoff: float = 8.0,
        backoff_multiplier: float = 2.0,
        retry_on: Optional[Callable[[Exception], bool]] = None,
    ):
        self.max_attempts = max(1, max_attempts)
        self.initial_backoff = initial_backoff
        self.max_backoff = max_backoff
        self.backoff_multiplier = backoff_multiplier
        self.retry_on = retry_on or is_transient_error

    @classmethod
    def from_config(cls, config: RetryConfig) -> "RetryPolicy":
        return cls(
            max_attempts=config.max_attempts,
            initial_backoff=config.initial_backoff,
            max_backoff=config.max_backoff,
            backoff_multiplier=config.backoff_multiplier,
        )

    def delay_for(self, attempt: int) -> float:
        """Seconds to wait after the given failed attempt (1-based)."""
        return min(self.initial_backoff * (self.backoff_multiplier ** (attempt - 1)), self.max_backoff)

    async def call(
        self,
        func: Callable[..., Awaitable[T]],
        *args: Any,
        operation_name: Optional[str] = None,
        **kwargs: Any,
    ) -> T:
        """
        Await ``func`` until it succeeds, fails permanently, or runs out of attempts.

        The last exception is re-raised unchanged.
        """
        operation_name = operation_name or func.__name__

        for attempt in range(1, self.max_attempts + 1):
            try:
                result = await func(*args, **kwargs)

                if attempt > 1:
                    log_with_context(
                        logger,
                        logging.INFO,
                        f"Operation succeeded after {attempt} attempts: {operation_name}",
                        operation=operation_name,
                        attempt=attempt,
                    )

                return result

            except Exception as e:
                should_retry = self.retry_on(e)

                if not should_retry or attempt >= self.max_attempts:
                    log_with_context(
                        logger,
                        logging.ERROR,
                        f"Operation failed (non-retryable or max attempts): {operation_name}",
                        operation=operation_name,
                        attempt=attempt,
                        max_attempts=self.max_attempts,
                        retryable=should_retry,
                        error_type=type(e).__name__,
                    )
                    raise

                delay = self.delay_for(attempt)

                log_with_context(
                    logger,
                    logging.WARNING,
                    f"Operation failed, retrying: {operation_name}",
                    operation=operation_name,
                    attempt=attempt,
                    max_attempts=self.max_attempts,
                    error_type=type(e).__name__,
                    retry_delay_seconds=delay,
                )

                await asyncio.sleep(delay)

        raise AssertionError("unreachable")
