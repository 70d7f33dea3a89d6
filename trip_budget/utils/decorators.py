"""Utility decorators for resilience around network calls."""
import asyncio
import functools
import time
from typing import Callable, Tuple, Type

from trip_budget.utils.logging import get_logger

logger = get_logger(__name__)


def retry(
    max_attempts: int = 3,
    delay: float = 0.5,
    backoff: float = 2.0,
    exceptions: Tuple[Type[Exception], ...] = (Exception,)
):
    """
    Retry an async function with exponential backoff.

    Args:
        max_attempts: Maximum number of attempts, including the first call
        delay: Initial delay between attempts in seconds
        backoff: Multiplier applied to the delay after each failure
        exceptions: Exception types that trigger another attempt

    Example:
        @retry(max_attempts=3, exceptions=(httpx.HTTPError,))
        async def fetch_latest(self, base):
            ...
    """
    def decorator(func: Callable):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            current_delay = delay

            for attempt in range(1, max_attempts + 1):
                try:
                    return await func(*args, **kwargs)
                except exceptions as e:
                    if attempt == max_attempts:
                        logger.error(
                            f"{func.__name__} failed after {max_attempts} attempts",
                            extra={"error": str(e), "attempts": attempt}
                        )
                        raise

                    logger.warning(
                        f"{func.__name__} failed (attempt {attempt}/{max_attempts}), retrying in {current_delay}s",
                        extra={"error": str(e), "delay": current_delay}
                    )
                    await asyncio.sleep(current_delay)
                    current_delay *= backoff

        return wrapper

    return decorator


def log_execution(func: Callable):
    """Log start, completion time and failure of an async function."""

    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        start_time = time.perf_counter()
        name = func.__name__
        logger.debug(f"Starting {name}", extra={"function": name})
        try:
            result = await func(*args, **kwargs)
        except Exception as e:
            elapsed = round((time.perf_counter() - start_time) * 1000, 2)
            logger.warning(
                f"Failed {name}",
                extra={"function": name, "execution_time_ms": elapsed, "error": str(e)}
            )
            raise
        elapsed = round((time.perf_counter() - start_time) * 1000, 2)
        logger.debug(f"Completed {name}", extra={"function": name, "execution_time_ms": elapsed})
        return result

    return wrapper
