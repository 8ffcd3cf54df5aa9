"""Await user callables that may be either ``def`` or ``async def``."""

import inspect
from typing import Any


async def invoke(func: Any, *args: Any, **kwargs: Any) -> Any:
    """Call *func*, awaiting the result when a guard check or engine method returns one."""
    result = func(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
