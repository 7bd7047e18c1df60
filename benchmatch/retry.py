"""
Retry with exponential backoff and a circuit breaker for the resource API.

Transient failures (timeouts, dropped connections, 408/429/5xx responses)
are retried; anything else propagates on the first attempt.
"""

import functools
import time
from datetime import datetime
from typing import Callable, Optional, Tuple, Type, Union

from .logger import get_logger

logger = get_logger()

RETRYABLE_STATUS_CODES = frozenset({408, 429, 500, 502, 503, 504})


class RetryError(Exception):
    """Raised when all retry attempts are exhausted."""


class CircuitOpenError(Exception):
    """Raised when the circuit breaker is refusing calls."""


class TransientHTTPError(Exception):
    """A response whose status code is worth retrying."""

    def __init__(self, status_code: int, response=None):
        super().__init__(f"Transient HTTP status {status_code}")
        self.status_code = status_code
        self.response = response


def exponential_backoff(
    max_retries: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 30.0,
    exponential_base: float = 2.0,
    exceptions: Tuple[Type[Exception], ...] = (Exception,),
    on_retry: Optional[Callable] = None,
):
    """
    Decorator for retrying functions with exponential backoff.

    Args:
        max_retries: Maximum number of retry attempts (0 = no retries)
        base_delay: Initial delay in seconds
        max_delay: Maximum delay between retries in seconds
        exponential_base: Base for exponential calculation (delay *= base)
        exceptions: Tuple of exceptions to catch and retry
        on_retry: Optional callback function(attempt, exception, delay)

    Example:
        @exponential_backoff(max_retries=3, base_delay=0.5)
        def fetch_resources(session, url):
            return session.get(url, timeout=15)
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            delay = base_delay

            for attempt in range(max_retries + 1):
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    if attempt >= max_retries:
                        raise RetryError(
                            f"Failed after {max_retries + 1} attempts: {e}"
                        ) from e

                    current_delay = min(delay, max_delay)
                    logger.warning(
                        f"{func.__qualname__} attempt {attempt + 1}/{max_retries + 1} failed, retrying",
                        error=str(e),
                        delay=current_delay,
                    )
                    if on_retry:
                        on_retry(attempt + 1, e, current_delay)

                    time.sleep(current_delay)
                    delay *= exponential_base

            raise RetryError("Retry loop exited without a result")

        return wrapper
    return decorator


def call_with_retry(func: Callable, *args, max_retries: int = 3, base_delay: float = 1.0,
                    exceptions: Tuple[Type[Exception], ...] = (Exception,), **kwargs):
    """Run func once under exponential_backoff with runtime-chosen limits."""
    wrapped = exponential_backoff(
        max_retries=max_retries, base_delay=base_delay, exceptions=exceptions
    )(func)
    return wrapped(*args, **kwargs)


class CircuitBreaker:
    """
    Circuit breaker to stop hammering an API that keeps failing.

    States:
    - CLOSED: Normal operation, requests pass through
    - OPEN: Too many failures, requests are blocked
    - HALF_OPEN: One trial request is allowed through
    """

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"

    def __init__(
        self,
        failure_threshold: int = 5,
        recovery_timeout: float = 60,
        expected_exception: Union[Type[Exception], Tuple[Type[Exception], ...]] = Exception,
    ):
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.expected_exception = expected_exception

        self.failure_count = 0
        self.last_failure_time: Optional[datetime] = None
        self.state = self.CLOSED

    def call(self, func: Callable, *args, **kwargs):
        """
        Execute function with circuit breaker protection.

        Raises:
            CircuitOpenError: If circuit is OPEN
            Original exception: If function fails in CLOSED/HALF_OPEN state
        """
        if self.state == self.OPEN:
            if self._should_attempt_reset():
                self.state = self.HALF_OPEN
                logger.info("Circuit breaker half-open, sending trial request")
            else:
                raise CircuitOpenError(
                    f"Resource API circuit is open after {self.failure_count} failures. "
                    f"Retry after {self._time_until_reset():.0f}s"
                )

        try:
            result = func(*args, **kwargs)
        except self.expected_exception:
            self._on_failure()
            raise
        self._on_success()
        return result

    def _should_attempt_reset(self) -> bool:
        if self.last_failure_time is None:
            return True
        elapsed = (datetime.now() - self.last_failure_time).total_seconds()
        return elapsed >= self.recovery_timeout

    def _time_until_reset(self) -> float:
        if self.last_failure_time is None:
            return 0
        elapsed = (datetime.now() - self.last_failure_time).total_seconds()
        return max(0, self.recovery_timeout - elapsed)

    def _on_success(self):
        self.failure_count = 0
        self.state = self.CLOSED

    def _on_failure(self):
        self.failure_count += 1
        self.last_failure_time = datetime.now()

        if self.state == self.HALF_OPEN or self.failure_count >= self.failure_threshold:
            if self.state != self.OPEN:
                logger.warning("Circuit breaker opened", failures=self.failure_count)
            self.state = self.OPEN

    def reset(self):
        """Manually reset the circuit breaker."""
        self.failure_count = 0
        self.last_failure_time = None
        self.state = self.CLOSED


def should_retry_http_status(status_code: int) -> bool:
    """True for request timeouts, rate limiting and gateway/server errors."""
    return status_code in RETRYABLE_STATUS_CODES
