"""Small function combinators used alongside the rate controllers."""

from __future__ import annotations

import asyncio
import functools
import logging
from collections.abc import Awaitable
from typing import Any, Callable, TypeVar

from pacekit.adapters.scheduler.asyncio_loop import AsyncioScheduler
from pacekit.adapters.scheduler.base import AbstractScheduler, TimerHandle
from pacekit.utils.callables import ensure_callable, function_name
from pacekit.utils.coercion import to_int_non_neg

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


def noop(*args: Any, **kwargs: Any) -> None:
    return None


def identity(value: T) -> T:
    return value


def once(fn: Callable[..., R]) -> Callable[..., R | None]:
    """Run ``fn`` on the first call only; later calls return the first result.

    If the first call raises, the exception propagates and later calls return
    None without running ``fn`` again.
    """
    ensure_callable(fn)
    called = False
    value: R | None = None

    @functools.wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> R | None:
        nonlocal called, value
        if not called:
            called = True
            value = fn(*args, **kwargs)
        return value

    return wrapper


def once_async(fn: Callable[..., Awaitable[R]]) -> Callable[..., asyncio.Future[R]]:
    """Start ``fn`` on the first call; every call returns that same future."""
    ensure_callable(fn)
    future: asyncio.Future[R] | None = None

    @functools.wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> asyncio.Future[R]:
        nonlocal future
        if future is None:
            future = asyncio.ensure_future(fn(*args, **kwargs))
        return future

    return wrapper


async def delay(ms: float) -> None:
    """Sleep for ``ms`` milliseconds (truncated, negatives clamp to 0)."""
    await asyncio.sleep(to_int_non_neg(ms) / 1000.0)


def defer(
    fn: Callable[..., object],
    *args: Any,
    scheduler: AbstractScheduler | None = None,
    **kwargs: Any,
) -> TimerHandle:
    """Run ``fn(*args, **kwargs)`` on the scheduler's next tick."""
    ensure_callable(fn)
    scheduler = scheduler or AsyncioScheduler()
    return scheduler.schedule(functools.partial(fn, *args, **kwargs), 0)


def try_catch(
    fn: Callable[..., R],
    on_error: Callable[[Exception], object] | None = None,
) -> Callable[..., R | None]:
    """Wrap ``fn`` so an Exception yields None after being passed to on_error."""
    ensure_callable(fn)
    name = function_name(fn)

    @functools.wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> R | None:
        try:
            return fn(*args, **kwargs)
        except Exception as exc:
            logger.debug(
                "try_catch.caught",
                extra={"function": name, "error_type": type(exc).__name__},
            )
            if on_error is not None:
                on_error(exc)
            return None

    return wrapper


def pipe(*fns: Callable[[Any], Any]) -> Callable[[Any], Any]:
    """Compose single-argument functions left to right."""
    if not fns:
        return identity

    def piped(value: Any) -> Any:
        return functools.reduce(lambda acc, fn: fn(acc), fns, value)

    return piped


def compose(*fns: Callable[[Any], Any]) -> Callable[[Any], Any]:
    """Compose single-argument functions right to left."""
    return pipe(*reversed(fns))
