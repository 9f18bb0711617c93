# SPDX-License-Identifier: MIT
"""Lock-keyed serialisation of function calls.

:func:`synchronize` wraps a callable so that every call goes through the
:class:`~orderly.queue.SerialQueue` registered for a *lock* object. Calls
sharing a lock run one at a time in call order; calls on different locks are
not ordered relative to each other. Without an explicit lock the wrapped
callable is its own lock, so two different functions only serialise together
when they are given the same lock.

Example:
    ```python
    lock = object()
    synced_bar = synchronize(bar, lock)  # sleeps, then writes
    synced_foo = synchronize(foo, lock)  # writes immediately
    await asyncio.gather(synced_bar(), synced_foo())  # foo writes last
    ```
"""

from __future__ import annotations

import asyncio
import functools
import weakref
from threading import RLock
from typing import (
    Awaitable,
    Callable,
    Generic,
    ParamSpec,
    TypeVar,
)

import logfire

from orderly.queue import SerialQueue

P = ParamSpec("P")
R = TypeVar("R")
V = TypeVar("V")


class LockRegistry(Generic[V]):
    """Map lock objects to lazily created values, keyed by identity.

    Any object can be a lock, including unhashable ones such as ``{}``, and
    two distinct objects never share a value even when they compare equal.
    Locks that support weak references are not kept alive by the registry;
    their entry is evicted when the lock is collected. Other locks (strings,
    numbers, dicts, bare ``object()`` instances) are held until
    :meth:`discard` is called.
    """

    def __init__(self, factory: Callable[[], V]) -> None:
        self._factory = factory
        # id(lock) -> (lock for strong entries, value, finalizer for weak ones)
        self._entries: dict[int, tuple[object | None, V, weakref.finalize | None]] = {}
        # Re-entrant: a finalizer may fire from garbage collection inside get().
        self._lock = RLock()

    def get(self, lock: object) -> V:
        """Return the value registered for ``lock``, creating it if absent."""
        key = id(lock)
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None:
                return entry[1]
            value = self._factory()
            try:
                finalizer = weakref.finalize(lock, self._evict, key)
            except TypeError:
                self._entries[key] = (lock, value, None)
            else:
                finalizer.atexit = False
                self._entries[key] = (None, value, finalizer)
            logfire.debug("Lock registered", lock=repr(lock))
            return value

    def discard(self, lock: object) -> None:
        """Forget ``lock``; later lookups start with a fresh value."""
        with self._lock:
            entry = self._entries.pop(id(lock), None)
        if entry is not None and entry[2] is not None:
            entry[2].detach()

    def _evict(self, key: int) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def __contains__(self, lock: object) -> bool:
        return id(lock) in self._entries

    def __len__(self) -> int:
        return len(self._entries)

default_registry: LockRegistry[SerialQueue] = LockRegistry(SerialQueue)
"""Registry shared by every :func:`synchronize` call without ``registry``."""


def synchronize(
    action: Callable[P, R | Awaitable[R]],
    lock: object | None = None,
    *,
    registry: LockRegistry[SerialQueue] | None = None,
) -> Callable[P, asyncio.Task[R]]:
    """Return a wrapper routing every call of ``action`` through a queue.

    Args:
        action: Synchronous callable or coroutine function to serialise.
        lock: Object identifying the ordering domain. Defaults to ``action``.
        registry: Registry to look the queue up in. Defaults to
            :data:`default_registry`.

    Returns:
        Callable with the signature of ``action`` that returns a task
        resolving with the action's result, even when ``action`` is
        synchronous.
    """
    if registry is None:
        registry = default_registry
    queue = registry.get(action if lock is None else lock)

    @functools.wraps(action)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> asyncio.Task[R]:
        return queue.enqueue(lambda: action(*args, **kwargs))

    return wrapper


def synchronized(
    lock: object | None = None,
    *,
    registry: LockRegistry[SerialQueue] | None = None,
) -> Callable[[Callable[P, R | Awaitable[R]]], Callable[P, asyncio.Task[R]]]:
    """Decorator form of :func:`synchronize`.

    On methods the default lock is the function itself, so every instance of
    the class shares one ordering domain.

    Example:
        ```python
        class Ledger:
            @synchronized()
            async def append(self, entry: str) -> None:
                ...
        ```
    """

    def decorator(action: Callable[P, R | Awaitable[R]]) -> Callable[P, asyncio.Task[R]]:
        return synchronize(action, lock, registry=registry)

    return decorator


__all__ = ["LockRegistry", "default_registry", "synchronize", "synchronized"]
