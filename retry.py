"""
Retry decorator with exponential backoff.

Used by adapters to handle transient upstream failures on the metadata
calls. Content attempts are not retried here: the strategy chain is the
fallback mechanism for those.
"""

import time
from functools import wraps
from typing import TypeVar, Callable, Any, ParamSpec, cast

import httpx

from logging_config import logger
from models import GrabError, ErrorKind, kind_for_status

T = TypeVar("T")
P = ParamSpec("P")


# Exceptions that should trigger retry
RETRYABLE_EXCEPTIONS: tuple[type[Exception], ...] = (
    ConnectionError,
    TimeoutError,
    httpx.TransportError,
)

# HTTP status codes that should trigger retry
RETRYABLE_STATUS_CODES: frozenset[int] = frozenset({
    429,  # Rate limited
    500,  # Internal server error
    502,  # Bad gateway
    503,  # Service unavailable
    504,  # Gateway timeout
})


def _get_http_status(exception: Exception) -> int | None:
    """
    Extract HTTP status code from exception if available.

    Works with GrabError (details["status"]) and httpx.HTTPStatusError.
    """
    if isinstance(exception, GrabError):
        status = exception.details.get("status")
        return status if isinstance(status, int) else None

    if isinstance(exception, httpx.HTTPStatusError):
        return exception.response.status_code

    return None


def _should_retry(exception: Exception) -> bool:
    """Determine if an exception is retryable."""
    if isinstance(exception, GrabError):
        return exception.retryable

    if isinstance(exception, RETRYABLE_EXCEPTIONS):
        return True

    status = _get_http_status(exception)
    if status is not None and status in RETRYABLE_STATUS_CODES:
        return True

    return False


def _convert_to_grab_error(exception: Exception) -> GrabError:
    """Convert an exception to a GrabError if not already one."""
    if isinstance(exception, GrabError):
        return exception

    status = _get_http_status(exception)
    if status is not None:
        return GrabError(
            kind_for_status(status),
            str(exception),
            details={"status": status},
            retryable=status in RETRYABLE_STATUS_CODES,
        )

    if isinstance(exception, (httpx.TimeoutException, TimeoutError)):
        return GrabError(ErrorKind.TIMEOUT, str(exception), retryable=True)
    if isinstance(exception, (httpx.TransportError, ConnectionError)):
        return GrabError(ErrorKind.NETWORK_ERROR, str(exception), retryable=True)

    return GrabError(ErrorKind.UNKNOWN, str(exception))


def with_retry(
    max_attempts: int = 3,
    delay_ms: int = 1000,
    backoff_multiplier: float = 2.0,
    convert_errors: bool = True,
) -> Callable[[Callable[P, T]], Callable[P, T]]:
    """
    Retry decorator with exponential backoff.

    Args:
        max_attempts: Maximum number of retry attempts
        delay_ms: Initial delay in milliseconds
        backoff_multiplier: Multiplier for exponential backoff
        convert_errors: Convert exceptions to GrabError on final failure

    Returns:
        Decorated function with retry logic

    Example:
        @with_retry(max_attempts=3, delay_ms=500)
        def get_file_metadata(client, file_id):
            ...
    """

    def decorator(func: Callable[P, T]) -> Callable[P, T]:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            last_exception: Exception | None = None

            for attempt in range(max_attempts):
                try:
                    return func(*args, **kwargs)
                except Exception as e:
                    last_exception = e

                    if not _should_retry(e) or attempt == max_attempts - 1:
                        logger.debug(
                            f"{func.__name__} gave up after {attempt + 1} attempts: {e}"
                        )
                        if convert_errors:
                            raise _convert_to_grab_error(e) from e
                        raise

                    wait_ms = int(delay_ms * (backoff_multiplier ** attempt))
                    logger.warning(f"{func.__name__} retry {attempt + 1}/{max_attempts} in {wait_ms}ms: {e}")
                    time.sleep(wait_ms / 1000)

            # Should never reach here, but satisfy type checker
            assert last_exception is not None
            if convert_errors:
                raise _convert_to_grab_error(last_exception) from last_exception
            raise last_exception

        return cast(Callable[P, T], wrapper)

    return decorator
