import asyncio
import functools
import time
from typing import Callable, Optional

from .logger import logger


def log_timing(func: Optional[Callable] = None, *, slow_ms: Optional[float] = None):
    """
    Log how long a pipeline stage took.

    Usable bare (@log_timing) or with a threshold (@log_timing(slow_ms=500)):
    completions are logged at DEBUG, or at WARNING once they take longer than
    slow_ms. Failures are logged at ERROR and re-raised.
    """
    if func is None:
        return functools.partial(log_timing, slow_ms=slow_ms)

    name = func.__qualname__

    def _completed(start: float):
        duration = round((time.perf_counter() - start) * 1000, 2)
        if slow_ms is not None and duration > slow_ms:
            logger.warning(f"{name} slow", duration_ms=duration, slow_ms=slow_ms)
        else:
            logger.debug(f"{name} completed", duration_ms=duration)

    def _failed(start: float, e: Exception):
        duration = round((time.perf_counter() - start) * 1000, 2)
        logger.error(f"{name} failed", duration_ms=duration, error=str(e), error_type=type(e).__name__)

    @functools.wraps(func)
    async def async_wrapper(*args, **kwargs):
        start = time.perf_counter()
        try:
            result = await func(*args, **kwargs)
        except Exception as e:
            _failed(start, e)
            raise
        _completed(start)
        return result

    @functools.wraps(func)
    def sync_wrapper(*args, **kwargs):
        start = time.perf_counter()
        try:
            result = func(*args, **kwargs)
        except Exception as e:
            _failed(start, e)
            raise
        _completed(start)
        return result

    if asyncio.iscoroutinefunction(func):
        return async_wrapper
    return sync_wrapper
