"""Pytest configuration and fixtures shared across all test modules.

This file is automatically loaded by pytest before running any tests.
It pins the settings environment before pacekit is imported so no local
.env.development file leaks into the test run.
"""

import os

# CRITICAL: Set this before any imports that might load settings
os.environ["PACEKIT_ENV"] = "testing"
os.environ.setdefault("PACEKIT_LOG_LEVEL", "DEBUG")
os.environ.setdefault("PACEKIT_MEMO_DEFAULT_MAX_SIZE", "0")

import pytest  # noqa: E402

from pacekit.adapters.scheduler import VirtualScheduler  # noqa: E402


@pytest.fixture
def scheduler() -> VirtualScheduler:
    """Virtual-time scheduler starting at t=0."""
    return VirtualScheduler()


class Recorder:
    """Callable that records every invocation and returns a tagged value."""

    def __init__(self) -> None:
        self.calls: list[tuple[tuple, dict]] = []

    def __call__(self, *args, **kwargs):
        self.calls.append((args, kwargs))
        return ("result", args)

    @property
    def count(self) -> int:
        return len(self.calls)

    @property
    def last_args(self) -> tuple:
        return self.calls[-1][0]


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()
