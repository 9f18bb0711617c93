# SPDX-License-Identifier: MIT
"""Trailing-edge debouncing on the asyncio event loop.

Repeated :func:`debounce` calls on the same lock within ``delay_ms`` collapse
into a single call of the most recently supplied function. Locks follow the
rules of :class:`~orderly.synchronize.LockRegistry`; the function itself is
the default lock.
"""

from __future__ import annotations

import asyncio
import inspect
from typing import Any, Callable

from orderly.synchronize import LockRegistry


class Debouncer:
    """Own a single timer; scheduling a call replaces the pending one."""

    def __init__(self) -> None:
        self._handle: asyncio.TimerHandle | None = None
        self._tasks: set[asyncio.Task[Any]] = set()

    @property
    def pending(self) -> bool:
        """Return ``True`` while a call is scheduled."""
        return self._handle is not None

    def debounce(self, fn: Callable[[], Any], delay_ms: int | float = 0) -> None:
        """Cancel the pending call and schedule ``fn`` after ``delay_ms``.

        Coroutine functions are started as tasks when the timer fires.

        Raises:
            ValueError: If ``delay_ms`` is negative.
            RuntimeError: If called without a running event loop.
        """
        if delay_ms < 0:
            raise ValueError("delay_ms must be >= 0")
        loop = asyncio.get_running_loop()
        self.clear()
        self._handle = loop.call_later(delay_ms / 1000, self._fire, fn)

    def clear(self) -> None:
        """Cancel the pending call without scheduling another one."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self, fn: Callable[[], Any]) -> None:
        self._handle = None
        result = fn()
        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result)
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)


default_debouncers: LockRegistry[Debouncer] = LockRegistry(Debouncer)


def debounce(
    fn: Callable[[], Any],
    delay_ms: int | float = 0,
    lock: object | None = None,
    *,
    registry: LockRegistry[Debouncer] | None = None,
) -> None:
    """Debounce ``fn`` on the timer registered for ``lock``.

    Example:
        ```python
        lock = object()
        debounce(save_draft, 500, lock)
        debounce(save_final, 500, lock)  # only save_final runs
        ```
    """
    if registry is None:
        registry = default_debouncers
    registry.get(fn if lock is None else lock).debounce(fn, delay_ms)


def debounced(
    fn: Callable[[], Any],
    delay_ms: int | float = 0,
    lock: object | None = None,
    *,
    registry: LockRegistry[Debouncer] | None = None,
) -> Callable[[], None]:
    """Return a zero-argument callable that debounces ``fn`` when called."""

    def trigger() -> None:
        debounce(fn, delay_ms, lock, registry=registry)

    return trigger


__all__ = ["Debouncer", "debounce", "debounced", "default_debouncers"]
