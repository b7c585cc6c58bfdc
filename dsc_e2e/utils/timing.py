"""
Duration parsing and timeout helpers

Durations are expressed in milliseconds. Test modules may give them either
as numbers or as compact strings such as "30s", "1.5h" or "250ms".
"""

import asyncio
import functools
import math
import re
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, TypeVar, Union

from .exceptions import InvalidDurationError, StepTimeoutError

T = TypeVar('T')

Duration = Union[int, float, str]

SECOND = 1000
MINUTE = SECOND * 60
HOUR = MINUTE * 60
DAY = HOUR * 24
WEEK = DAY * 7
YEAR = DAY * 365.25

_UNITS = {
    "": 1,
    "ms": 1, "msec": 1, "msecs": 1, "millisecond": 1, "milliseconds": 1,
    "s": SECOND, "sec": SECOND, "secs": SECOND, "second": SECOND, "seconds": SECOND,
    "m": MINUTE, "min": MINUTE, "mins": MINUTE, "minute": MINUTE, "minutes": MINUTE,
    "h": HOUR, "hr": HOUR, "hrs": HOUR, "hour": HOUR, "hours": HOUR,
    "d": DAY, "day": DAY, "days": DAY,
    "w": WEEK, "week": WEEK, "weeks": WEEK,
    "y": YEAR, "yr": YEAR, "yrs": YEAR, "year": YEAR, "years": YEAR,
}

_DURATION_RE = re.compile(r"^(\d+(?:\.\d+)?|\.\d+)\s*([a-z]*)$")

STEP_THREADS = 8

# Selenium calls block, so they run here instead of on the event loop
_driver_executor = ThreadPoolExecutor(max_workers=STEP_THREADS, thread_name_prefix="dsc_e2e_step_")


def to_ms(expr: Duration) -> int:
    """
    Convert a duration expression to milliseconds.

    Args:
        expr: Number of milliseconds, or a string like "90s" or "1500"

    Returns:
        Duration in whole milliseconds

    Raises:
        InvalidDurationError: If the expression cannot be parsed
    """
    if isinstance(expr, bool):
        raise InvalidDurationError(expr)

    if isinstance(expr, (int, float)):
        if math.isnan(expr) or math.isinf(expr) or expr < 0:
            raise InvalidDurationError(expr)
        return int(round(expr))

    if not isinstance(expr, str):
        raise InvalidDurationError(expr)

    match = _DURATION_RE.match(expr.strip().lower())
    if not match or match.group(2) not in _UNITS:
        raise InvalidDurationError(expr)

    return int(round(float(match.group(1)) * _UNITS[match.group(2)]))


async def timeout_signal(name: str, test_id: str, timeout_ms: int) -> None:
    """Sleep for timeout_ms, then raise StepTimeoutError for the given step"""
    await asyncio.sleep(timeout_ms / 1000)
    raise StepTimeoutError(
        f'Test "{test_id}" step "{name}" timed out!',
        test_id=test_id,
        step=name
    )


def monotonic_mark() -> float:
    """Capture a start mark for elapsed_ms"""
    return time.monotonic()


def elapsed_ms(start: float) -> float:
    """Milliseconds elapsed since a mark from monotonic_mark"""
    return (time.monotonic() - start) * 1000


async def run_sync(func: Callable[..., T], *args, **kwargs) -> T:
    """
    Run a blocking function in the step thread pool.

    Args:
        func: Synchronous function to run
        *args: Positional arguments for func
        **kwargs: Keyword arguments for func

    Returns:
        Result of func
    """
    loop = asyncio.get_running_loop()
    partial_func = functools.partial(func, *args, **kwargs)
    return await loop.run_in_executor(_driver_executor, partial_func)
