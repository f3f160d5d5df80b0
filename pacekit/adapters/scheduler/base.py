"""Clock and scheduler interfaces.

Times are expressed in milliseconds. A clock is any zero-argument callable
returning the current time; schedulers own a clock and run deferred callbacks
no earlier than the requested delay, in the order they become due.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from typing import Callable, Protocol

Clock = Callable[[], float]

_ORIGIN = time.monotonic()


def monotonic_ms() -> float:
    """Milliseconds elapsed since pacekit was imported (monotonic)."""
    return (time.monotonic() - _ORIGIN) * 1000.0


class TimerHandle(Protocol):
    """Cancelable registration returned by AbstractScheduler.schedule()."""

    def cancel(self) -> None: ...


class AbstractScheduler(ABC):
    """Interface for deferred-callback schedulers."""

    @abstractmethod
    def now(self) -> float:
        """Return the scheduler's current time in milliseconds."""
        raise NotImplementedError

    @abstractmethod
    def schedule(self, callback: Callable[[], object], delay_ms: float) -> TimerHandle:
        """Run callback once after delay_ms milliseconds.

        Args:
            callback: Zero-argument callable to run.
            delay_ms: Minimum delay in milliseconds (negative values mean "now").

        Returns:
            A handle whose cancel() prevents the callback from running.
        """
        raise NotImplementedError
