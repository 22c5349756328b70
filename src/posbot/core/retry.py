"""
posbot Retry Logic

Resilient HTTP request handling with exponential backoff for transient failures.

- Retries on 429 (rate limited) and 502/503/504
- Retries on network errors (httpx.RequestError)
- Jitter to prevent thundering herd

Set POSBOT_NO_RETRY=1 to make every request a single attempt.
"""

from collections.abc import Callable
from functools import wraps
from typing import Any, Optional, TypeVar, Union

import httpx
from tenacity import retry, retry_if_exception, stop_after_attempt, wait_exponential_jitter

from .config import is_retry_disabled

F = TypeVar("F", bound=Callable[..., Any])

# Default retry configuration
DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_MIN_WAIT = 2  # seconds
DEFAULT_MAX_WAIT = 30  # seconds

# HTTP status codes that should trigger retry
RETRYABLE_STATUS_CODES = {
    429,  # Too Many Requests (rate limited)
    503,  # Service Unavailable
    502,  # Bad Gateway
    504,  # Gateway Timeout
}


def is_retry_enabled() -> bool:
    """Check if retry logic is enabled (POSBOT_NO_RETRY not set)."""
    return not is_retry_disabled()


class RetryableESIError(Exception):
    """
    Exception for retryable ESI errors.

    Preserves the original error information for logging and debugging.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        retry_after: Optional[int] = None,
        original_error: Optional[Exception] = None,
    ) -> None:
        self.message: str = message
        self.status_code: Optional[int] = status_code
        self.retry_after: Optional[int] = retry_after
        self.original_error: Optional[Exception] = original_error
        super().__init__(self.message)


class NonRetryableESIError(Exception):
    """
    Exception for non-retryable ESI errors (e.g. 404 Not Found, 403 Forbidden).
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        original_error: Optional[Exception] = None,
    ) -> None:
        self.message: str = message
        self.status_code: Optional[int] = status_code
        self.original_error: Optional[Exception] = original_error
        super().__init__(self.message)


def _should_retry_exception(exc: BaseException) -> bool:
    """Determine if an exception should trigger a retry."""
    if isinstance(exc, RetryableESIError):
        return True
    if isinstance(exc, NonRetryableESIError):
        return False
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in RETRYABLE_STATUS_CODES
    if isinstance(exc, httpx.RequestError):
        return True
    return False


def esi_retry(
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    min_wait: float = DEFAULT_MIN_WAIT,
    max_wait: float = DEFAULT_MAX_WAIT,
) -> Callable[[F], F]:
    """
    Decorator for ESI requests with retry logic.

    Args:
        max_attempts: Maximum number of attempts (default: 3)
        min_wait: Minimum wait time between retries in seconds (default: 2)
        max_wait: Maximum wait time between retries in seconds (default: 30)

    Usage:
        @esi_retry()
        def make_request(url):
            ...
    """

    def decorator(func: F) -> F:
        if not is_retry_enabled():
            return func

        @retry(
            stop=stop_after_attempt(max_attempts),
            wait=wait_exponential_jitter(
                initial=min_wait,
                max=max_wait,
                jitter=max_wait * 0.1,
            ),
            retry=retry_if_exception(_should_retry_exception),
            reraise=True,
        )
        @wraps(func)
        def tenacity_wrapper(*args: Any, **kwargs: Any) -> Any:
            return func(*args, **kwargs)

        return tenacity_wrapper  # type: ignore[return-value]

    return decorator


def classify_httpx_error(
    error: httpx.HTTPStatusError,
) -> Union[RetryableESIError, NonRetryableESIError]:
    """
    Classify an httpx HTTP status error as retryable or non-retryable.

    Returns:
        RetryableESIError for transient errors (429, 503, etc.)
        NonRetryableESIError for permanent errors (404, 403, etc.)
    """
    status_code = error.response.status_code

    try:
        error_json = error.response.json()
        if isinstance(error_json, dict):
            message = error_json.get("error", str(error))
        else:
            message = str(error)
    except ValueError:
        message = error.response.text or str(error)

    if status_code in RETRYABLE_STATUS_CODES:
        retry_after = error.response.headers.get("retry-after")
        return RetryableESIError(
            message=message,
            status_code=status_code,
            retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None,
            original_error=error,
        )
    return NonRetryableESIError(message=message, status_code=status_code, original_error=error)
