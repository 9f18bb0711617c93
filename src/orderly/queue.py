# SPDX-License-Identifier: MIT
"""Serial execution queue for asyncio.

:class:`SerialQueue` runs the actions submitted to it strictly one at a time,
in submission order, regardless of how long each action takes. Every action
waits for the completion of its predecessor (success, failure or cancellation)
before it starts, so a slow early action always finishes before a fast later
one begins.

Failures are isolated: the future returned for a failing action carries the
exception, while the internal chain absorbs it and moves on to the next
action.

Example:
    ```python
    queue = SerialQueue()
    first = queue.enqueue(lambda: write_slowly("a"))
    second = queue.enqueue(lambda: write("b"))  # starts after ``first``
    await asyncio.gather(first, second)
    ```
"""

from __future__ import annotations

import asyncio
import inspect
from typing import Awaitable, Callable, TypeVar

import logfire

from orderly.deferred import Deferred

T = TypeVar("T")

QUEUE_SUBMITTED = logfire.metric_counter("serial_queue_submitted")
"""Counter for actions handed to any serial queue."""

QUEUE_COMPLETED = logfire.metric_counter("serial_queue_completed")

QUEUE_FAILED = logfire.metric_counter("serial_queue_failed")


class SerialQueue:
    """FIFO queue executing one action at a time."""

    def __init__(self, name: str | None = None) -> None:
        """Create an empty queue.

        Args:
            name: Optional label recorded on tracing spans.
        """
        self.name = name
        self._tail: Deferred[None] | None = None
        self._pending = 0

    @property
    def pending(self) -> int:
        """Return the number of enqueued actions that have not finished."""
        return self._pending

    @property
    def idle(self) -> bool:
        return self._pending == 0

    def enqueue(self, action: Callable[[], T | Awaitable[T]]) -> asyncio.Task[T]:
        """Schedule ``action`` after every previously enqueued action.

        Args:
            action: Zero-argument callable. It may return a plain value or an
                awaitable, which is awaited before the action counts as done.

        Returns:
            Task resolving with the action's result or failing with its
            exception.

        Raises:
            RuntimeError: If called without a running event loop.
        """
        loop = asyncio.get_running_loop()
        previous = self._tail
        if previous is not None and (
            previous.loop is not loop or previous.status != "pending"
        ):
            # Settled, or left behind by a loop that no longer runs.
            previous = None
        tail: Deferred[None] = Deferred(loop)
        self._tail = tail
        self._pending += 1
        QUEUE_SUBMITTED.add(1)
        task = loop.create_task(self._run(previous, action))
        task.add_done_callback(lambda _: self._release(previous, tail))
        return task

    async def _run(
        self,
        previous: Deferred[None] | None,
        action: Callable[[], T | Awaitable[T]],
    ) -> T:
        if previous is not None:
            # Cancelling this task must not settle the shared tail.
            await asyncio.shield(previous.future)
        with logfire.span("serial_queue.run", queue=self.name):
            try:
                result = action()
                if inspect.isawaitable(result):
                    result = await result
            except Exception:
                QUEUE_FAILED.add(1)
                raise
        QUEUE_COMPLETED.add(1)
        return result  # type: ignore[return-value]

    def _release(self, previous: Deferred[None] | None, tail: Deferred[None]) -> None:
        self._pending -= 1
        if previous is not None and previous.status == "pending":
            # Cancelled while still waiting; keep the chain behind the predecessor.
            previous.add_done_callback(lambda _: tail.resolve())
        else:
            tail.resolve()


__all__ = ["SerialQueue"]
