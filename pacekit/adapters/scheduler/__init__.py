"""Scheduler adapters.

Rate controllers depend on this abstraction (not on a concrete event loop) so
timers can run on asyncio in production and on virtual time in tests and
simulations.
"""

from pacekit.adapters.scheduler.asyncio_loop import AsyncioScheduler
from pacekit.adapters.scheduler.base import (
    AbstractScheduler,
    Clock,
    TimerHandle,
    monotonic_ms,
)
from pacekit.adapters.scheduler.virtual import VirtualScheduler

__all__ = [
    "AbstractScheduler",
    "AsyncioScheduler",
    "Clock",
    "TimerHandle",
    "VirtualScheduler",
    "monotonic_ms",
]
