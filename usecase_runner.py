"""
Cancellation-safe execution helpers for use cases.

Cancellation (asyncio.CancelledError) always propagates untouched: it is
never logged as a failure, converted to an Error or retried.
"""

import asyncio
import functools
import logging
from typing import Awaitable, Callable, TypeVar

import pages_config
from page_models import Error, ErrorKind

logger = logging.getLogger(__name__)

T = TypeVar("T")


def safe_use_case(error_message: str):
    """
    Decorate an async use-case method so unexpected faults become Error.

    The fault is logged once through the instance's `logger` attribute
    (falling back to this module's logger) and returned as
    Error(error_message, cause=fault). Local validation failures are
    returned by the method itself and pass through unchanged.

    Args:
        error_message: Short message shown to users, e.g. "Failed to load pages"
    """
    def decorator(method):
        @functools.wraps(method)
        async def wrapper(self, *args, **kwargs):
            try:
                return await method(self, *args, **kwargs)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                log = getattr(self, 'logger', logger)
                log.exception(f"{error_message}: {type(e).__name__}")
                return Error(error_message, cause=e, kind=ErrorKind.PERSISTENCE_FAILURE)
        return wrapper
    return decorator


def never_retry_cancellation(error: BaseException) -> bool:
    return not isinstance(error, asyncio.CancelledError)


async def retry_with_backoff(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int = pages_config.RETRY_MAX_ATTEMPTS,
    initial_delay: float = pages_config.RETRY_INITIAL_DELAY,
    factor: float = pages_config.RETRY_BACKOFF_FACTOR,
    should_retry: Callable[[BaseException], bool] = never_retry_cancellation,
) -> T:
    """
    Run an async operation, retrying failures with exponential backoff.

    Each attempt calls `operation()` afresh, so the whole operation reruns
    from scratch. Cancellation is re-raised immediately whatever
    `should_retry` says.

    Args:
        operation: Zero-argument callable returning a new awaitable
        max_attempts: Total attempts including the first (>= 1)
        initial_delay: Seconds to wait before the first retry
        factor: Delay multiplier applied after each retry
        should_retry: Predicate deciding whether a failure is retryable

    Returns:
        The operation's result

    Raises:
        ValueError: If max_attempts < 1
        Exception: The last failure once attempts are exhausted, or the
            first non-retryable one
    """
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be >= 1, was {max_attempts}")

    delay = initial_delay
    for attempt in range(1, max_attempts + 1):
        try:
            return await operation()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            if attempt == max_attempts or not should_retry(e):
                raise
            logger.warning(
                f"Attempt {attempt}/{max_attempts} failed ({type(e).__name__}), retrying in {delay:.2f}s"
            )
            await asyncio.sleep(delay)
            delay *= factor

    raise RuntimeError("unreachable")  # pragma: no cover
