# SPDX-License-Identifier: MIT
"""Externally settled futures.

A :class:`Deferred` pairs an ``asyncio`` future with the functions that settle
it, so code that does not own the awaiting side can resolve or reject it later.

Example:
    ```python
    deferred = Deferred[int]()
    loop.call_later(0.1, deferred.resolve, 1)
    assert await deferred == 1
    ```
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Generator, Generic, Literal, TypeVar

T = TypeVar("T")

Status = Literal["pending", "resolved", "rejected"]


class Deferred(Generic[T]):
    """Future with an exposed resolve/reject pair and a settlement status."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        """Create an unsettled deferred.

        Args:
            loop: Event loop owning the future. Defaults to the running loop.

        Raises:
            RuntimeError: If ``loop`` is omitted outside a running event loop.
        """

        self._loop = loop or asyncio.get_running_loop()
        self._future: asyncio.Future[T] = self._loop.create_future()

    @property
    def future(self) -> asyncio.Future[T]:
        """Return the underlying future."""

        return self._future

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop

    @property
    def status(self) -> Status:
        """Return ``"pending"`` until the deferred is settled."""

        if not self._future.done():
            return "pending"
        if self._future.cancelled() or self._future.exception() is not None:
            return "rejected"
        return "resolved"

    def resolve(self, value: T | None = None) -> None:
        """Fulfil the future with ``value``; ignored once settled."""

        if self._future.done():
            return
        self._future.set_result(value)  # type: ignore[arg-type]

    def reject(self, exc: BaseException) -> None:
        """Fail the future with ``exc``; ignored once settled."""

        if self._future.done():
            return
        self._future.set_exception(exc)

    def add_done_callback(self, callback: Callable[[asyncio.Future[T]], Any]) -> None:
        self._future.add_done_callback(callback)

    def __await__(self) -> Generator[Any, None, T]:
        return self._future.__await__()


__all__ = ["Deferred", "Status"]
