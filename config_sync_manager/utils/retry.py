"""Retry decorator for operations that can fail transiently.

This module provides a decorator that retries an async function a bounded
number of times, waiting between attempts with optional exponential backoff.
It is used for removing working directories whose files may still be locked by
git processes that have only just exited.
"""

import asyncio
import functools
import inspect
from typing import Any, Awaitable, Callable, TypeVar

import structlog

logger = structlog.get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def retry_on_exception(
    max_attempts: int = 3,
    initial_delay: float = 1.0,
    max_delay: float = 30.0,
    exponential_base: float = 1.0,
    exceptions: tuple[type[BaseException], ...] = (OSError,),
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> Callable[[F], F]:
    """Decorator for retrying async functions that raise one of ``exceptions``.

    The decorated function is called at most ``max_attempts`` times. After the
    final failed attempt the last exception is re-raised. Exceptions not listed
    in ``exceptions`` are raised immediately without retrying.

    Args:
        max_attempts: Maximum number of attempts, including the first (default: 3)
        initial_delay: Delay in seconds before the second attempt (default: 1.0)
        max_delay: Maximum delay in seconds between attempts (default: 30.0)
        exponential_base: Multiplier applied to the delay after each attempt (default: 1.0, a fixed delay)
        exceptions: Exception types that trigger a retry (default: OSError)
        sleep: Awaitable used to wait between attempts (default: asyncio.sleep)

    Returns:
        Decorated function with retry logic

    Example:
        @retry_on_exception(max_attempts=3, initial_delay=1.0)
        async def remove_directory(path: Path) -> None:
            shutil.rmtree(path)
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    def decorator(func: F) -> F:
        if not inspect.iscoroutinefunction(func):
            raise TypeError(f"Function {func.__name__} decorated with @retry_on_exception must be async.")

        @functools.wraps(func)
        async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
            delay = initial_delay

            for attempt in range(1, max_attempts + 1):
                try:
                    return await func(*args, **kwargs)
                except exceptions as e:
                    if attempt == max_attempts:
                        logger.error(
                            "Max attempts reached",
                            function=func.__name__,
                            attempt=attempt,
                            error=str(e),
                            error_type=type(e).__name__,
                        )
                        raise

                    wait_time = min(delay, max_delay)
                    logger.warning(
                        f"Attempt failed, retrying in {wait_time} seconds",
                        function=func.__name__,
                        attempt=attempt,
                        max_attempts=max_attempts,
                        wait_time=wait_time,
                        error=str(e),
                    )
                    await sleep(wait_time)
                    delay = min(delay * exponential_base, max_delay)

        return async_wrapper  # type: ignore

    return decorator
