"""Debounce and throttle controllers.

A RateController wraps a function and decides, per call, whether to invoke it
now, arm a deferred (trailing) invocation, or merge the call into the pending
one. Throttling is the same engine with ``max_wait`` pinned to ``wait``.

Control flow (per call at time ``t``):
- The call is "invoking" when it is the first call, the quiet period
  (``wait``) elapsed since the previous call, the clock went backwards, or
  ``max_wait`` elapsed since the last invocation.
- The most recent call's arguments are always the ones a later invocation uses.
- With no timer armed, a leading-edge invocation happens immediately; a
  trailing invocation is deferred by arming a timer.
- With a timer armed, only reaching ``max_wait`` forces an immediate call.
- When the timer fires it either invokes (trailing edge) or re-arms for the
  remaining wait.
"""

from __future__ import annotations

import asyncio
import functools
import inspect
import logging
import types
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, TypeVar

from pacekit.adapters.scheduler.asyncio_loop import AsyncioScheduler
from pacekit.adapters.scheduler.base import AbstractScheduler, Clock, TimerHandle
from pacekit.schemas.options import DebounceOptions, ThrottleOptions
from pacekit.utils.callables import ensure_callable, function_name

logger = logging.getLogger(__name__)

R = TypeVar("R")


@dataclass
class InvocationRecord:
    """Per-controller call state.

    Attributes:
        call_args: Positional arguments of the latest unconsumed call.
        call_kwargs: Keyword arguments of the latest unconsumed call.
        last_call_time: Time of the latest call (None until the first call).
        last_invoke_time: Time of the latest invocation of the wrapped function.
        last_result: Value returned by the latest invocation.
    """

    call_args: tuple[Any, ...] | None = None
    call_kwargs: dict[str, Any] = field(default_factory=dict)
    last_call_time: float | None = None
    last_invoke_time: float = 0
    last_result: Any = None

    @property
    def has_call(self) -> bool:
        return self.call_args is not None

    def clear_call(self) -> None:
        self.call_args = None
        self.call_kwargs = {}

    def reset(self) -> None:
        self.clear_call()
        self.last_call_time = None
        self.last_invoke_time = 0
        self.last_result = None


class RateController(Generic[R]):
    """Debounced wrapper around ``fn``.

    Args:
        fn: Function to control.
        wait: Quiet period in milliseconds.
        leading: Invoke on the leading edge of a window.
        trailing: Invoke on the trailing edge with the latest arguments.
        max_wait: Maximum delay in milliseconds between invocations.
        scheduler: Timer facility; defaults to an AsyncioScheduler.
        clock: Time source in milliseconds; defaults to ``scheduler.now``.
    """

    def __init__(
        self,
        fn: Callable[..., R],
        wait: float = 0,
        *,
        leading: bool = False,
        trailing: bool = True,
        max_wait: float | None = None,
        scheduler: AbstractScheduler | None = None,
        clock: Clock | None = None,
        options: DebounceOptions | None = None,
    ) -> None:
        ensure_callable(fn)
        functools.update_wrapper(self, fn)
        if options is None:
            options = DebounceOptions.build(
                wait=wait, leading=leading, trailing=trailing, max_wait=max_wait
            )

        self._fn = fn
        self.options = options
        self._wait = options.wait
        self._leading = options.leading
        self._trailing = options.trailing
        self._max_wait = options.max_wait
        self._scheduler = scheduler or AsyncioScheduler()
        self._clock: Clock = clock or self._scheduler.now
        self._record = InvocationRecord()
        self._timer: TimerHandle | None = None
        self._name = function_name(fn)

    def __repr__(self) -> str:  # pragma: no cover - representation only
        return (
            f"RateController({self._name}, wait={self._wait}, leading={self._leading}, "
            f"trailing={self._trailing}, max_wait={self._max_wait}, pending={self.pending()})"
        )

    def __get__(self, instance: Any, owner: type | None = None) -> Any:
        # Bind like a plain function; the instance becomes the first argument.
        if instance is None:
            return self
        return types.MethodType(self, instance)

    def __call__(self, *args: Any, **kwargs: Any) -> R | None:
        now = self._clock()
        is_invoking = self._should_invoke(now)

        record = self._record
        record.call_args = args
        record.call_kwargs = kwargs
        record.last_call_time = now

        if self._timer is None:
            if self._leading and is_invoking:
                result = self._invoke(edge="leading")
                if self._trailing:
                    self._start_timer(self._wait)
                else:
                    record.clear_call()
                return result

            if self._trailing:
                self._start_timer(self._wait)
            else:
                record.clear_call()
            return record.last_result

        if self._max_wait is not None and is_invoking:
            if self._trailing:
                self._start_timer(self._wait)
            return self._invoke(edge="max_wait")

        return record.last_result

    def cancel(self) -> None:
        """Drop any pending invocation and reset the controller."""
        had_timer = self._timer is not None
        self._stop_timer()
        self._record.reset()
        logger.debug(
            "rate_control.cancel",
            extra={"function": self._name, "had_timer": had_timer},
        )

    def flush(self) -> R | None:
        """Run the pending trailing invocation now, if there is one."""
        if self._timer is None:
            return self._record.last_result
        self._stop_timer()
        if self._trailing:
            return self._invoke(edge="flush")
        return self._record.last_result

    def pending(self) -> bool:
        """True while a timer is armed."""
        return self._timer is not None

    @property
    def last_result(self) -> R | None:
        return self._record.last_result

    def _should_invoke(self, now: float) -> bool:
        record = self._record
        if record.last_call_time is None:
            return True
        since_call = now - record.last_call_time
        since_invoke = now - record.last_invoke_time
        return (
            since_call >= self._wait
            or since_call < 0
            or (self._max_wait is not None and since_invoke >= self._max_wait)
        )

    def _remaining_wait(self, now: float) -> float:
        record = self._record
        since_call = now - (record.last_call_time or 0)
        since_invoke = now - record.last_invoke_time
        time_waiting = self._wait - since_call
        if self._max_wait is None:
            return time_waiting
        return min(time_waiting, self._max_wait - since_invoke)

    def _invoke(self, *, edge: str) -> R | None:
        record = self._record
        if not record.has_call:
            return record.last_result

        args, kwargs = record.call_args or (), record.call_kwargs
        record.clear_call()
        record.last_invoke_time = self._clock()

        logger.debug(
            "rate_control.invoke",
            extra={
                "function": self._name,
                "edge": edge,
                "at_ms": record.last_invoke_time,
                "call_args": args,
                "call_kwargs": kwargs,
            },
        )
        result = self._fn(*args, **kwargs)
        if inspect.iscoroutine(result):
            # Deferred invocations have no awaiting caller; run them as tasks.
            result = asyncio.ensure_future(result)
        record.last_result = result
        return result

    def _on_timer(self) -> None:
        self._timer = None
        now = self._clock()
        if self._should_invoke(now):
            if self._trailing:
                self._invoke(edge="trailing")
            return
        self._start_timer(self._remaining_wait(now))

    def _start_timer(self, delay_ms: float) -> None:
        self._stop_timer()
        self._timer = self._scheduler.schedule(self._on_timer, delay_ms)
        logger.debug(
            "rate_control.timer_armed",
            extra={"function": self._name, "delay_ms": delay_ms},
        )

    def _stop_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
        self._timer = None


def debounce(
    fn: Callable[..., R] | None = None,
    wait: float = 0,
    *,
    leading: bool = False,
    trailing: bool = True,
    max_wait: float | None = None,
    scheduler: AbstractScheduler | None = None,
    clock: Clock | None = None,
) -> Any:
    """Create a debounced controller for ``fn``.

    Can be called directly (``debounce(fn, 100)``) or used as a decorator
    factory (``@debounce(wait=100)``).
    """

    def decorate(func: Callable[..., R]) -> RateController[R]:
        return RateController(
            func,
            wait,
            leading=leading,
            trailing=trailing,
            max_wait=max_wait,
            scheduler=scheduler,
            clock=clock,
        )

    if fn is None:
        return decorate
    return decorate(fn)


def throttle(
    fn: Callable[..., R] | None = None,
    wait: float = 0,
    *,
    leading: bool = True,
    trailing: bool = True,
    scheduler: AbstractScheduler | None = None,
    clock: Clock | None = None,
) -> Any:
    """Create a throttled controller: at most one invocation per ``wait`` window.

    Leading and trailing edges are both enabled by default; the trailing call
    uses the last arguments seen in the window.
    """

    options = ThrottleOptions.build(wait=wait, leading=leading, trailing=trailing)

    def decorate(func: Callable[..., R]) -> RateController[R]:
        return RateController(
            func,
            scheduler=scheduler,
            clock=clock,
            options=options.to_debounce(),
        )

    if fn is None:
        return decorate
    return decorate(fn)
