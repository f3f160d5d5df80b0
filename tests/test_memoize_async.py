"""Unit tests for memoize_async() / AsyncMemoized."""

import asyncio

import pytest

from pacekit.services.memoize import memoize_async


class FlakyFetcher:
    """Async callable whose completion is controlled by the test."""

    def __init__(self) -> None:
        self.calls: list[str] = []
        self.gates: dict[str, asyncio.Event] = {}
        self.fail_next: set[str] = set()

    async def __call__(self, key: str) -> str:
        self.calls.append(key)
        gate = self.gates.setdefault(key, asyncio.Event())
        await gate.wait()
        if key in self.fail_next:
            self.fail_next.discard(key)
            raise ConnectionError(f"fetch {key} failed")
        return f"value:{key}"

    def release(self, key: str) -> None:
        self.gates.setdefault(key, asyncio.Event()).set()


@pytest.mark.asyncio
async def test_concurrent_calls_share_one_future() -> None:
    fetcher = FlakyFetcher()
    fetch = memoize_async(fetcher)

    first = fetch("a")
    second = fetch("a")

    assert first is second
    assert not first.done()

    fetcher.release("a")
    results = await asyncio.gather(first, second)

    assert results == ["value:a", "value:a"]
    assert fetcher.calls == ["a"]


@pytest.mark.asyncio
async def test_settled_future_is_reused() -> None:
    fetcher = FlakyFetcher()
    fetcher.release("a")
    fetch = memoize_async(fetcher)

    assert await fetch("a") == "value:a"
    assert await fetch("a") == "value:a"
    assert fetch("a").done()
    assert fetcher.calls == ["a"]


@pytest.mark.asyncio
async def test_failure_evicts_entry_so_next_call_retries() -> None:
    fetcher = FlakyFetcher()
    fetcher.fail_next.add("a")
    fetch = memoize_async(fetcher)

    first = fetch("a")
    waiter = fetch("a")
    fetcher.release("a")

    with pytest.raises(ConnectionError):
        await first
    # Every observer of the shared future sees the failure.
    with pytest.raises(ConnectionError):
        await waiter

    assert "a" not in fetch.cache

    assert await fetch("a") == "value:a"
    assert fetcher.calls == ["a", "a"]


@pytest.mark.asyncio
async def test_failure_does_not_evict_a_replacement_entry() -> None:
    fetcher = FlakyFetcher()
    fetcher.fail_next.add("a")
    fetch = memoize_async(fetcher)

    stale = fetch("a")
    fetch.delete("a")
    replacement = fetch("a")
    assert replacement is not stale

    fetcher.release("a")
    with pytest.raises(ConnectionError):
        await stale
    assert await replacement == "value:a"

    assert fetch.cache.peek("a") is replacement


@pytest.mark.asyncio
async def test_clear_while_in_flight_is_safe() -> None:
    fetcher = FlakyFetcher()
    fetcher.fail_next.add("a")
    fetch = memoize_async(fetcher)

    pending = fetch("a")
    fetch.clear()
    fetcher.release("a")

    with pytest.raises(ConnectionError):
        await pending
    assert fetch.cache.size() == 0


@pytest.mark.asyncio
async def test_cancelled_future_is_evicted() -> None:
    fetcher = FlakyFetcher()
    fetch = memoize_async(fetcher)

    pending = fetch("a")
    pending.cancel()
    with pytest.raises(asyncio.CancelledError):
        await pending

    assert "a" not in fetch.cache


@pytest.mark.asyncio
async def test_max_size_bounds_cached_futures() -> None:
    fetcher = FlakyFetcher()
    for key in "abc":
        fetcher.release(key)
    fetch = memoize_async(fetcher, max_size=2)

    await fetch("a")
    await fetch("b")
    await fetch("a")
    await fetch("c")

    assert fetch.cache.keys() == ["a", "c"]
    await fetch("b")
    assert fetcher.calls == ["a", "b", "c", "b"]


@pytest.mark.asyncio
async def test_synchronous_error_propagates_and_is_not_cached() -> None:
    attempts: list[int] = []

    def broken(key: str):
        attempts.append(1)
        raise KeyError(key)

    fetch = memoize_async(broken)

    with pytest.raises(KeyError):
        fetch("a")
    with pytest.raises(KeyError):
        fetch("a")

    assert len(attempts) == 2
    assert fetch.cache.size() == 0


@pytest.mark.asyncio
async def test_existing_futures_are_cached_as_is() -> None:
    loop = asyncio.get_running_loop()
    made: list[asyncio.Future] = []

    def make_future(key: str) -> asyncio.Future:
        future = loop.create_future()
        made.append(future)
        return future

    fetch = memoize_async(make_future, lambda key: key.lower())

    handle = fetch("A")
    assert handle is made[0]
    assert fetch("a") is handle

    handle.set_result(1)
    assert await fetch("a") == 1
    assert len(made) == 1
