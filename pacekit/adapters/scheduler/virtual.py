"""Deterministic virtual-time scheduler.

Time only moves when the owner calls advance()/advance_to(). Due timers fire
in due-time order, ties broken by scheduling order, and the clock reads each
timer's due time while its callback runs. Timers armed by a callback fire in
the same advance() when they fall inside the window.

Exceptions raised by a callback propagate out of advance().
"""

from __future__ import annotations

import heapq
import itertools
from dataclasses import dataclass, field
from typing import Callable

from pacekit.adapters.scheduler.base import AbstractScheduler


@dataclass(order=True)
class VirtualTimer:
    due: float
    seq: int
    callback: Callable[[], object] = field(compare=False)
    cancelled: bool = field(default=False, compare=False)

    def cancel(self) -> None:
        self.cancelled = True


class VirtualScheduler(AbstractScheduler):
    """Scheduler whose clock is advanced manually."""

    def __init__(self, start: float = 0.0) -> None:
        self._now = float(start)
        self._queue: list[VirtualTimer] = []
        self._seq = itertools.count()

    def __repr__(self) -> str:  # pragma: no cover - representation only
        return f"VirtualScheduler(now={self._now}, pending={self.pending_timers})"

    def now(self) -> float:
        return self._now

    @property
    def pending_timers(self) -> int:
        """Number of armed, not yet cancelled timers."""
        return sum(1 for t in self._queue if not t.cancelled)

    def schedule(self, callback: Callable[[], object], delay_ms: float) -> VirtualTimer:
        timer = VirtualTimer(
            due=self._now + max(0.0, delay_ms),
            seq=next(self._seq),
            callback=callback,
        )
        heapq.heappush(self._queue, timer)
        return timer

    def advance(self, delta_ms: float) -> int:
        """Move time forward by delta_ms, firing due timers. Returns the number fired."""
        return self.advance_to(self._now + max(0.0, delta_ms))

    def advance_to(self, target: float) -> int:
        """Move time forward to target, firing due timers. Returns the number fired."""
        if target < self._now:
            raise ValueError(f"cannot move virtual time backwards ({target} < {self._now})")

        fired = 0
        while self._queue and self._queue[0].due <= target:
            timer = heapq.heappop(self._queue)
            if timer.cancelled:
                continue
            self._now = timer.due
            fired += 1
            timer.callback()

        self._now = target
        return fired

    def run_until_idle(self, *, max_timers: int = 10_000) -> int:
        """Fire timers until none remain armed. Returns the number fired."""
        fired = 0
        while fired < max_timers:
            live = [t for t in self._queue if not t.cancelled]
            if not live:
                break
            fired += self.advance_to(min(live).due)
        return fired
