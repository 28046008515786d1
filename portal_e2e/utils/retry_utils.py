"""Retry helpers for flaky browser and network actions."""

from __future__ import annotations

import asyncio
import functools
import inspect
from typing import Any, Awaitable, Callable, TypeVar, Union

from ..exceptions import RetryExhaustedError
from .config import get_logger

logger = get_logger("retry")

T = TypeVar("T")

Action = Callable[[], Union[T, Awaitable[T]]]


async def _run(action: Action[T]) -> T:
    result = action()
    if inspect.isawaitable(result):
        result = await result
    return result


async def retry(
    action: Action[T],
    max_attempts: int = 3,
    delay_ms: float = 1000,
    *,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> T:
    """Run *action* until it succeeds, at most *max_attempts* times.

    Waits *delay_ms* between attempts but never after the last one.  When
    every attempt fails, raises :class:`RetryExhaustedError` carrying only
    the final error; earlier failures are logged and then dropped.

    With ``max_attempts == 1`` the action is invoked once and its own
    exception propagates unwrapped.
    """
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")
    if delay_ms < 0:
        raise ValueError(f"delay_ms must be >= 0, got {delay_ms}")

    if max_attempts == 1:
        return await _run(action)

    attempt = 1
    while True:
        try:
            return await _run(action)
        except Exception as exc:
            logger.warning("Attempt %d/%d failed: %s", attempt, max_attempts, exc)
            if attempt == max_attempts:
                raise RetryExhaustedError(max_attempts, exc) from exc
        await sleep(delay_ms / 1000)
        attempt += 1


def with_retry(max_attempts: int = 3, delay_ms: float = 1000):
    """Decorator applying :func:`retry` to a coroutine function.

    Useful on page-object actions that race a still-rendering UI::

        @with_retry(max_attempts=3, delay_ms=250)
        async def open_user_menu(self) -> None:
            ...
    """

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            return await retry(lambda: func(*args, **kwargs), max_attempts, delay_ms)

        return wrapper

    return decorator
