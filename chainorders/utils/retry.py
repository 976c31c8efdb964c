"""
Retry decorators and utilities for handling transient errors.
"""

import asyncio
import functools
from typing import Callable, Tuple, Type

from ..node.exceptions import TransientError
from .logger import get_logger

logger = get_logger(__name__)


def retry_on_transient_error(
    max_attempts: int = 3,
    backoff_base: float = 2,
    base_delay: float = 0.5,
    exceptions: Tuple[Type[Exception], ...] = (TransientError,)
):
    """
    Decorator to retry async functions on transient errors.

    Uses exponential backoff: delay = base_delay * backoff_base ** attempt_number

    Args:
        max_attempts: Maximum number of attempts (default: 3)
        backoff_base: Base for exponential backoff calculation (default: 2)
        base_delay: Delay before the first retry in seconds (default: 0.5)
        exceptions: Tuple of exception types to retry on

    Example:
        @retry_on_transient_error(max_attempts=3)
        async def rpc_call():
            ...
    """
    def decorator(func: Callable):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            for attempt in range(max_attempts):
                try:
                    return await func(*args, **kwargs)
                except exceptions as e:
                    if attempt == max_attempts - 1:
                        logger.error(
                            "max_retries_exceeded",
                            function=func.__name__,
                            attempts=max_attempts,
                            error=str(e)
                        )
                        raise

                    delay = base_delay * backoff_base ** attempt
                    logger.warning(
                        "retrying_after_error",
                        function=func.__name__,
                        attempt=attempt + 1,
                        max_attempts=max_attempts,
                        delay_seconds=delay,
                        error=str(e)
                    )
                    await asyncio.sleep(delay)

        return wrapper
    return decorator
