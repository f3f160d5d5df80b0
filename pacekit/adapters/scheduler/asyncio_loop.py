"""Scheduler backed by an asyncio event loop.

Notes:
- Timers are registered with ``loop.call_later``; callbacks run on the loop's
  thread, so controller state is only touched from loop turns.
- Exceptions raised by a timer callback are reported through the loop's
  exception handler.
"""

from __future__ import annotations

import asyncio
from typing import Callable

from pacekit.adapters.scheduler.base import AbstractScheduler, Clock, TimerHandle, monotonic_ms
from pacekit.core.errors import SchedulerUnavailableError


class AsyncioScheduler(AbstractScheduler):
    """Schedule callbacks on an asyncio event loop.

    When no loop is given, the loop running at schedule() time is used, which
    lets one scheduler serve wrappers created at import time.
    """

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop | None = None,
        *,
        clock: Clock = monotonic_ms,
    ) -> None:
        self._loop = loop
        self._clock = clock

    def now(self) -> float:
        return self._clock()

    def _resolve_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is not None:
            return self._loop
        try:
            return asyncio.get_running_loop()
        except RuntimeError as exc:
            raise SchedulerUnavailableError(
                code="no_running_loop",
                message="AsyncioScheduler needs a running event loop to arm a timer.",
                details={
                    "hint": "Call the wrapper from a coroutine, or pass a "
                    "VirtualScheduler / explicit loop.",
                },
            ) from exc

    def schedule(self, callback: Callable[[], object], delay_ms: float) -> TimerHandle:
        loop = self._resolve_loop()
        return loop.call_later(max(0.0, delay_ms) / 1000.0, callback)
