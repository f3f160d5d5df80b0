"""Tests for the asyncio-backed scheduler and controllers running on a real loop."""

import asyncio

import pytest

from pacekit.adapters.scheduler import AsyncioScheduler, monotonic_ms
from pacekit.core.errors import SchedulerUnavailableError
from pacekit.services.functional import delay
from pacekit.services.rate_control import debounce, throttle


def test_schedule_without_running_loop_raises() -> None:
    scheduler = AsyncioScheduler()

    with pytest.raises(SchedulerUnavailableError) as exc_info:
        scheduler.schedule(lambda: None, 10)

    assert exc_info.value.code == "no_running_loop"


def test_debounced_call_outside_loop_surfaces_scheduler_error() -> None:
    debounced = debounce(lambda: None, 10)

    with pytest.raises(SchedulerUnavailableError):
        debounced()


def test_monotonic_clock_never_goes_backwards() -> None:
    readings = [monotonic_ms() for _ in range(100)]

    assert readings == sorted(readings)
    assert readings[0] >= 0


@pytest.mark.asyncio
async def test_timer_fires_after_delay_and_can_be_cancelled() -> None:
    scheduler = AsyncioScheduler()
    fired: list[str] = []

    scheduler.schedule(lambda: fired.append("kept"), 5)
    handle = scheduler.schedule(lambda: fired.append("cancelled"), 5)
    handle.cancel()

    await asyncio.sleep(0.05)

    assert fired == ["kept"]


@pytest.mark.asyncio
async def test_debounce_on_event_loop_runs_trailing_call() -> None:
    seen: list[str] = []
    debounced = debounce(seen.append, 20)

    debounced("a")
    debounced("ab")
    debounced("abc")
    assert debounced.pending() is True

    await asyncio.sleep(0.1)

    assert seen == ["abc"]
    assert debounced.pending() is False


@pytest.mark.asyncio
async def test_throttle_on_event_loop_limits_burst_to_two_calls() -> None:
    seen: list[int] = []
    throttled = throttle(seen.append, 100)

    for i in range(5):
        throttled(i)
        await delay(2)

    await asyncio.sleep(0.3)

    assert seen == [0, 4]


@pytest.mark.asyncio
async def test_coroutine_results_run_as_tasks() -> None:
    completed: list[str] = []

    async def save(text: str) -> str:
        completed.append(text)
        return text.upper()

    debounced = debounce(save, 10)
    debounced("draft")

    await asyncio.sleep(0.05)

    assert completed == ["draft"]
    task = debounced.last_result
    assert isinstance(task, asyncio.Future)
    assert await task == "DRAFT"
