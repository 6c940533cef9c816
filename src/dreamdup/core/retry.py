"""Retry with exponential backoff for calls to remote services."""

import functools
import random
import time
from typing import Any, Callable, Optional, TypeVar

from dreamdup.core.logging import StructuredLogger, get_logger

T = TypeVar("T")

logger = get_logger("dreamdup.retry")


def backoff_delays(
    max_retries: int,
    initial_delay: float,
    max_delay: float = 30.0,
    exponential_base: float = 2.0,
    jitter: bool = True,
) -> list[float]:
    """Sleep durations before each retry, capped at ``max_delay``."""
    delays = []
    delay = initial_delay
    for _ in range(max_retries):
        delays.append(delay + delay * 0.1 * random.random() if jitter else delay)
        delay = min(delay * exponential_base, max_delay)
    return delays


def retry_with_exponential_backoff(
    max_retries: int = 3,
    initial_delay: float = 1.0,
    max_delay: float = 30.0,
    exponential_base: float = 2.0,
    jitter: bool = True,
    retryable_exceptions: tuple[type[Exception], ...] = (Exception,),
    retry_if: Optional[Callable[[Exception], bool]] = None,
    logger_instance: Optional[StructuredLogger] = None,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """
    Decorator retrying a remote call with exponential backoff.

    A failure is retried when it is one of ``retryable_exceptions`` and
    ``retry_if`` (when given) returns True for it. Anything else, such as a
    rejected API key, is raised on the first attempt.

    Args:
        max_retries: Retry attempts after the first call
        initial_delay: Delay in seconds before the first retry
        max_delay: Upper bound for a single delay
        exponential_base: Growth factor between delays
        jitter: Add up to 10% random jitter to each delay
        retryable_exceptions: Exception types considered for retry
        retry_if: Predicate deciding whether a caught exception is transient
        logger_instance: Logger for retry warnings (default: dreamdup.retry)

    Returns:
        Decorator function
    """
    log = logger_instance or logger

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            delays = backoff_delays(max_retries, initial_delay, max_delay, exponential_base, jitter)
            attempt = 0
            while True:
                attempt += 1
                try:
                    return func(*args, **kwargs)
                except retryable_exceptions as e:
                    if retry_if is not None and not retry_if(e):
                        log.debug(
                            f"{func.__name__} failed with a permanent error: {e}",
                            context={"function": func.__name__, "attempt": attempt},
                        )
                        raise
                    if attempt > len(delays):
                        log.error(
                            f"All {attempt} attempts failed for {func.__name__}",
                            context={"function": func.__name__, "attempts": attempt, "error": str(e)},
                        )
                        raise

                    delay = delays[attempt - 1]
                    log.warning(
                        f"Attempt {attempt}/{max_retries + 1} failed: {e}. Retrying in {delay:.2f}s...",
                        context={"function": func.__name__, "attempt": attempt, "delay": delay},
                    )
                    time.sleep(delay)

        return wrapper

    return decorator
