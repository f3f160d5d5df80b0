"""pacekit: debounce, throttle and memoization helpers."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

from pacekit.adapters.scheduler import (
    AbstractScheduler,
    AsyncioScheduler,
    VirtualScheduler,
    monotonic_ms,
)
from pacekit.core.config import settings
from pacekit.core.errors import InvalidOptionError, PacekitError, SchedulerUnavailableError
from pacekit.core.logging import configure_logging
from pacekit.services.functional import (
    compose,
    defer,
    delay,
    identity,
    noop,
    once,
    once_async,
    pipe,
    try_catch,
)
from pacekit.services.memoize import AsyncMemoized, Memoized, memoize, memoize_async
from pacekit.services.rate_control import RateController, debounce, throttle
from pacekit.utils.bounded_cache import BoundedCache


def _package_version() -> str:
    try:
        return version("pacekit")
    except PackageNotFoundError:
        # Running from a source checkout, or otherwise not installed.
        return "0.0.0"


__version__ = _package_version()

__all__ = [
    "AbstractScheduler",
    "AsyncMemoized",
    "AsyncioScheduler",
    "BoundedCache",
    "InvalidOptionError",
    "Memoized",
    "PacekitError",
    "RateController",
    "SchedulerUnavailableError",
    "VirtualScheduler",
    "__version__",
    "compose",
    "configure_logging",
    "debounce",
    "defer",
    "delay",
    "identity",
    "memoize",
    "memoize_async",
    "monotonic_ms",
    "noop",
    "once",
    "once_async",
    "pipe",
    "settings",
    "throttle",
    "try_catch",
]
