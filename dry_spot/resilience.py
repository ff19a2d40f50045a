"""
Resilience helpers for Dry Spot Finder.

Retry with exponential backoff for HTTP lookups, and a shared error
categorisation used by retry logging and per-candidate outcomes.

Conservative strategy: 2 retries max, 1-5 second delays. After the last
attempt the final exception is re-raised so callers can record it.
"""

import asyncio
import functools
import json
import logging
import random
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, Tuple, TypeVar

import httpx

from dry_spot.errors import FetchError, IncompleteData

logger = logging.getLogger(__name__)

T = TypeVar('T')


class ErrorType(Enum):
    """Categories of errors for tracking."""
    TIMEOUT = "timeout"
    RATE_LIMIT = "rate_limit"
    API_ERROR = "api_error"
    PARSE_ERROR = "parse_error"
    UNKNOWN = "unknown"


@dataclass
class RetryConfig:
    """Configuration for retry behavior - Conservative defaults."""
    max_retries: int = 2  # 2 retries = 3 total attempts
    base_delay_seconds: float = 1.0
    max_delay_seconds: float = 5.0
    exponential_base: float = 2.0
    jitter: bool = True

    # HTTP status codes that should NOT trigger retry
    non_retryable_status_codes: tuple = (400, 401, 403, 404, 422)

    # HTTP status codes that SHOULD trigger retry
    retryable_status_codes: tuple = (408, 429, 500, 502, 503, 504)


DEFAULT_RETRY_CONFIG = RetryConfig()


def _root_cause(exception: BaseException) -> BaseException:
    # FetchError wraps the transport exception; categorise on the original
    if isinstance(exception, FetchError) and not isinstance(exception, IncompleteData):
        if exception.__cause__ is not None:
            return exception.__cause__
    return exception


def categorize_error(exception: BaseException) -> Tuple[ErrorType, str]:
    """
    Categorize an exception for tracking purposes.

    Returns:
        Tuple of (ErrorType, error_message)
    """
    error_msg = str(exception)[:200] or type(exception).__name__
    cause = _root_cause(exception)

    if isinstance(cause, (httpx.TimeoutException, asyncio.TimeoutError)):
        return (ErrorType.TIMEOUT, f"Timeout: {error_msg}")

    if isinstance(cause, httpx.HTTPStatusError):
        status = cause.response.status_code
        if status == 429:
            return (ErrorType.RATE_LIMIT, "HTTP 429 Too Many Requests")
        if status == 503:
            return (ErrorType.RATE_LIMIT, "HTTP 503 Service Unavailable (quota?)")
        return (ErrorType.API_ERROR, f"HTTP {status}: {error_msg}")

    if isinstance(cause, httpx.RequestError):
        return (ErrorType.API_ERROR, f"Request error: {error_msg}")

    if isinstance(cause, (IncompleteData, json.JSONDecodeError, KeyError, ValueError, TypeError)):
        return (ErrorType.PARSE_ERROR, f"Parse error: {error_msg}")

    if isinstance(cause, FetchError):
        return (ErrorType.API_ERROR, error_msg)

    return (ErrorType.UNKNOWN, error_msg)


def calculate_backoff_delay(attempt: int, config: RetryConfig) -> float:
    """
    Calculate delay with exponential backoff and optional jitter.

    Args:
        attempt: The retry attempt number (0-indexed)
        config: Retry configuration

    Returns:
        Delay in seconds
    """
    delay = min(
        config.base_delay_seconds * (config.exponential_base ** attempt),
        config.max_delay_seconds
    )

    if config.jitter:
        # Up to 25% extra
        delay += delay * 0.25 * random.random()

    return delay


def is_retryable_error(exception: BaseException, config: RetryConfig) -> bool:
    """Decide whether an exception should trigger another attempt."""
    if isinstance(exception, httpx.HTTPStatusError):
        status = exception.response.status_code
        if status in config.non_retryable_status_codes:
            return False
        return status in config.retryable_status_codes or status >= 500

    if isinstance(exception, httpx.TimeoutException):
        return True

    if isinstance(exception, httpx.RequestError):
        return True

    # Same bad payload would come back
    if isinstance(exception, (IncompleteData, json.JSONDecodeError, KeyError, ValueError, TypeError)):
        return False

    return False


def with_retry(
    config: Optional[RetryConfig] = None,
    provider_name: str = "unknown"
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """
    Decorator that adds retry logic with exponential backoff.

    Usage:
        @with_retry(provider_name="wttr")
        async def get(url):
            ...

    The last exception is re-raised once retries are exhausted or the error
    is not retryable. Cancellation is never retried.
    """
    if config is None:
        config = DEFAULT_RETRY_CONFIG

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs) -> Any:
            start_time = time.monotonic()

            for attempt in range(config.max_retries + 1):
                if attempt > 0:
                    delay = calculate_backoff_delay(attempt - 1, config)
                    logger.info(
                        f"[{provider_name}] Retry {attempt}/{config.max_retries} "
                        f"after {delay:.1f}s delay"
                    )
                    await asyncio.sleep(delay)

                try:
                    result = await func(*args, **kwargs)
                except Exception as e:
                    error_type, error_msg = categorize_error(e)
                    logger.warning(
                        f"[{provider_name}] Attempt {attempt + 1} failed: "
                        f"{error_type.value} - {error_msg}"
                    )

                    if not is_retryable_error(e, config):
                        logger.debug(f"[{provider_name}] Error not retryable, giving up")
                        raise

                    if attempt >= config.max_retries:
                        elapsed = time.monotonic() - start_time
                        logger.error(
                            f"[{provider_name}] All {config.max_retries + 1} attempts failed "
                            f"({elapsed:.2f}s total). Last error: {error_type.value}"
                        )
                        raise
                    continue

                if attempt > 0:
                    elapsed = time.monotonic() - start_time
                    logger.info(
                        f"[{provider_name}] Succeeded on attempt {attempt + 1} "
                        f"({elapsed:.2f}s total)"
                    )
                return result

        return async_wrapper

    return decorator
