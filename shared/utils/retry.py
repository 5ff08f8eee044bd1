"""
Resource Actions - Retry Utilities
==================================

Exponential-backoff retries for read-only calls to the managing service.

Only idempotent requests (inventory fetches, action listings) are wrapped.
Running an action is never retried: it is an imperative operation on live
infrastructure.

Usage:
    from shared.utils.retry import with_retry, RetryConfig

    @with_retry(RetryConfig(max_attempts=3, retryable_exceptions=(httpx.TransportError,)))
    async def fetch_inventory():
        return await client.get("/api/v1/applications/guestbook/managed-resources")
"""

import asyncio
from dataclasses import dataclass, field
from functools import wraps
from typing import Callable, Type, TypeVar, Any, Optional
from collections.abc import Awaitable

from shared.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass
class RetryConfig:
    """
    Configuration for retry behavior.

    Attributes:
        max_attempts: Maximum number of attempts (including first try)
        base_delay: Initial delay between retries in seconds
        max_delay: Maximum delay cap in seconds
        backoff_multiplier: Multiplier for exponential backoff
        retryable_exceptions: Exception types that trigger a retry
        on_retry: Optional callback called before each retry
    """
    max_attempts: int = 3
    base_delay: float = 0.5
    max_delay: float = 10.0
    backoff_multiplier: float = 2.0
    retryable_exceptions: tuple[Type[Exception], ...] = field(
        default_factory=lambda: (Exception,)
    )
    on_retry: Optional[Callable[[int, Exception], None]] = None


def calculate_delay(
    attempt: int,
    base_delay: float,
    max_delay: float,
    backoff_multiplier: float
) -> float:
    """
    Delay before the retry following `attempt` (0-indexed), capped at `max_delay`.
    """
    delay = base_delay * (backoff_multiplier ** attempt)
    return min(delay, max_delay)


def with_retry(config: Optional[RetryConfig] = None):
    """
    Decorator that retries an async function according to `config`.

    Exceptions outside `config.retryable_exceptions` propagate immediately;
    the last retryable exception propagates once attempts are exhausted.

    Example:
        @with_retry(RetryConfig(max_attempts=4, base_delay=0.5))
        async def list_actions():
            ...

        # Retries after 0.5s, 1s and 2s before giving up
    """
    if config is None:
        config = RetryConfig()

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            for attempt in range(config.max_attempts):
                try:
                    return await func(*args, **kwargs)

                except config.retryable_exceptions as e:
                    if attempt + 1 >= config.max_attempts:
                        logger.error(
                            f"All {config.max_attempts} attempts exhausted for {func.__name__}",
                            extra={
                                "function": func.__name__,
                                "error": str(e),
                                "attempts": config.max_attempts
                            }
                        )
                        raise

                    delay = calculate_delay(
                        attempt,
                        config.base_delay,
                        config.max_delay,
                        config.backoff_multiplier
                    )

                    logger.warning(
                        f"Retry {attempt + 1}/{config.max_attempts} for {func.__name__} after {delay:.2f}s",
                        extra={
                            "function": func.__name__,
                            "attempt": attempt + 1,
                            "delay": delay,
                            "error": str(e)
                        }
                    )

                    if config.on_retry:
                        config.on_retry(attempt + 1, e)

                    await asyncio.sleep(delay)

            raise RuntimeError(f"Retry loop for {func.__name__} ran with max_attempts < 1")

        return wrapper
    return decorator


async def retry_async(
    func: Callable[..., Awaitable[T]],
    *args: Any,
    config: Optional[RetryConfig] = None,
    **kwargs: Any
) -> T:
    """
    Call `func` with retries, for one-off calls where a decorator does not fit.

    Example:
        items = await retry_async(
            client.get,
            "/api/v1/applications/guestbook/managed-resources",
            config=RetryConfig(max_attempts=3)
        )
    """
    @with_retry(config)
    async def call() -> T:
        return await func(*args, **kwargs)

    return await call()
