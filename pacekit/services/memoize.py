"""Memoizing wrappers backed by a BoundedCache.

Memoized caches return values keyed by a resolver (the first positional
argument by default). AsyncMemoized caches the future of each call instead of
its value, so concurrent callers with the same key share one underlying
computation, and failed futures are evicted so the next call retries.
"""

from __future__ import annotations

import asyncio
import functools
import logging
import types
from collections.abc import Awaitable, Hashable
from typing import Any, Callable, Generic, TypeVar

from pacekit.core.config import settings
from pacekit.core.errors import InvalidOptionError
from pacekit.schemas.options import MemoizeOptions
from pacekit.utils.bounded_cache import BoundedCache
from pacekit.utils.callables import ensure_callable, function_name

logger = logging.getLogger(__name__)

R = TypeVar("R")

KeyResolver = Callable[..., Hashable]

_MISSING: Any = object()


def first_argument(*args: Any, **kwargs: Any) -> Hashable:
    """Default key resolver: the first positional argument, as-is."""
    return args[0] if args else None


def _build_cache(max_size: float | None, cache: BoundedCache | None) -> BoundedCache:
    if cache is not None:
        if max_size is not None:
            raise InvalidOptionError(
                code="conflicting_options",
                message="Pass either 'cache' or 'max_size', not both.",
                details={"option": "max_size", "hint": "A shared cache keeps its own bound."},
            )
        return cache

    if max_size is None:
        max_size = settings.memo.default_max_size
    options = MemoizeOptions.build(max_size=max_size)
    return BoundedCache(max_size=options.max_size)


class Memoized(Generic[R]):
    """Cache results of ``fn`` by resolved key.

    Attributes:
        cache: The BoundedCache holding results (may be shared explicitly).
    """

    def __init__(
        self,
        fn: Callable[..., R],
        key_resolver: KeyResolver | None = None,
        *,
        max_size: float | None = None,
        cache: BoundedCache | None = None,
    ) -> None:
        ensure_callable(fn)
        if key_resolver is not None:
            ensure_callable(key_resolver, option="key_resolver")
        functools.update_wrapper(self, fn)

        self._fn = fn
        self._key_resolver: KeyResolver = key_resolver or first_argument
        self._name = function_name(fn)
        self.cache = _build_cache(max_size, cache)

    def __repr__(self) -> str:  # pragma: no cover - representation only
        return f"{type(self).__name__}({self._name}, cache={self.cache!r})"

    def __get__(self, instance: Any, owner: type | None = None) -> Any:
        if instance is None:
            return self
        return types.MethodType(self, instance)

    def __call__(self, *args: Any, **kwargs: Any) -> R:
        key = self._key_resolver(*args, **kwargs)

        cached = self.cache.get(key, _MISSING)
        if cached is not _MISSING:
            return cached

        result = self._fn(*args, **kwargs)
        self.cache.set(key, result)
        logger.debug(
            "memoize.miss",
            extra={
                "function": self._name,
                "call_args": args,
                "call_kwargs": kwargs,
                "result": result,
            },
        )
        return result

    def clear(self) -> None:
        self.cache.clear()

    def delete(self, key: Hashable) -> bool:
        return self.cache.delete(key)


class AsyncMemoized(Memoized[Any], Generic[R]):
    """Cache the futures returned by an async ``fn``.

    Every call returns an ``asyncio.Future``: the cached one on a hit, a new
    one (wrapping ``fn``'s awaitable) on a miss. Must be called with a running
    event loop when ``fn`` returns a coroutine.
    """

    _fn: Callable[..., Awaitable[R]]

    def __call__(self, *args: Any, **kwargs: Any) -> asyncio.Future[R]:
        key = self._key_resolver(*args, **kwargs)

        cached = self.cache.get(key, _MISSING)
        if cached is not _MISSING:
            return cached

        future: asyncio.Future[R] = asyncio.ensure_future(self._fn(*args, **kwargs))
        self.cache.set(key, future)
        future.add_done_callback(functools.partial(self._on_settled, key))
        logger.debug(
            "memoize_async.miss",
            extra={"function": self._name, "call_args": args, "call_kwargs": kwargs},
        )
        return future

    def _on_settled(self, key: Hashable, future: asyncio.Future[R]) -> None:
        if not future.cancelled() and future.exception() is None:
            return
        # Only drop the entry if a clear/delete/overwrite has not replaced it.
        if self.cache.peek(key, _MISSING) is future:
            self.cache.delete(key)
            logger.debug(
                "memoize_async.evicted_failed",
                extra={"function": self._name, "cancelled": future.cancelled()},
            )


def memoize(
    fn: Callable[..., R] | None = None,
    key_resolver: KeyResolver | None = None,
    *,
    max_size: float | None = None,
    cache: BoundedCache | None = None,
) -> Any:
    """Memoize ``fn``; usable directly or as ``@memoize(max_size=...)``."""

    def decorate(func: Callable[..., R]) -> Memoized[R]:
        return Memoized(func, key_resolver, max_size=max_size, cache=cache)

    if fn is None:
        return decorate
    return decorate(fn)


def memoize_async(
    fn: Callable[..., Awaitable[R]] | None = None,
    key_resolver: KeyResolver | None = None,
    *,
    max_size: float | None = None,
    cache: BoundedCache | None = None,
) -> Any:
    """Memoize an async ``fn`` by caching its in-flight and settled futures."""

    def decorate(func: Callable[..., Awaitable[R]]) -> AsyncMemoized[R]:
        return AsyncMemoized(func, key_resolver, max_size=max_size, cache=cache)

    if fn is None:
        return decorate
    return decorate(fn)
