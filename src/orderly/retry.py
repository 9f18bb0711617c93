# SPDX-License-Identifier: MIT
"""Handler-driven retries with per-attempt backoff.

:func:`retryable` runs a handler that decides for itself whether an attempt
should be repeated. The handler receives a :class:`RetryContext`; calling
``ctx.retry(backoff_ms=...)`` aborts the current attempt, waits for the
requested backoff and invokes the handler again with ``try_count`` increased by
one. There is no built-in attempt limit: the handler stops retrying when it has
seen enough attempts.

Synchronous handlers are retried synchronously and their value is returned
directly. When the handler returns an awaitable, :func:`retryable` schedules
the retry chain on the running event loop and returns an ``asyncio.Future``;
retries run whether or not the caller awaits it right away.

Example:
    ```python
    def fetch(ctx: RetryContext) -> Response:
        response = client.get(url)
        if response.status_code == 503 and ctx.try_count < 5:
            ctx.retry(backoff_ms=100 * 2**ctx.try_count)
        return response

    response = retryable(fetch)
    ```
"""

from __future__ import annotations

import asyncio
import inspect
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, NoReturn, TypeVar, overload

import logfire

from orderly.sleep import sleep

T = TypeVar("T")

RETRY_REQUESTS = logfire.metric_counter("retry_requests")
"""Counter for retries requested by handlers."""


class RetryRequested(Exception):
    """Raised by :meth:`RetryContext.retry` to abort the current attempt.

    Only :func:`retryable` catches it. It derives from :class:`Exception` like
    any other error so callers classifying exceptions see nothing unusual.
    """

    def __init__(self, backoff_ms: int = 0, cause: Any = None) -> None:
        super().__init__(f"retry requested after {backoff_ms} ms")
        self.backoff_ms = backoff_ms
        self.cause = cause


@dataclass(frozen=True)
class RetryContext:
    """State handed to a retryable handler on each attempt."""

    try_count: int

    def retry(self, backoff_ms: int = 0, cause: Any = None) -> NoReturn:
        """Abort this attempt and run the handler again after ``backoff_ms``.

        Args:
            backoff_ms: Milliseconds to wait before the next attempt.
            cause: Optional reason recorded with the retry.

        Raises:
            RetryRequested: Always.
            ValueError: If ``backoff_ms`` is negative.
        """
        if backoff_ms < 0:
            raise ValueError("backoff_ms must be >= 0")
        raise RetryRequested(backoff_ms, cause)


def _record_retry(signal: RetryRequested, try_count: int) -> None:
    RETRY_REQUESTS.add(1)
    logfire.debug(
        "Retry requested",
        try_count=try_count,
        backoff_ms=signal.backoff_ms,
        cause=None if signal.cause is None else repr(signal.cause),
    )


@overload
def retryable(
    handler: Callable[[RetryContext], Awaitable[T]],
) -> asyncio.Future[T]: ...


@overload
def retryable(handler: Callable[[RetryContext], T]) -> T: ...


def retryable(handler: Callable[[RetryContext], Any]) -> Any:
    """Run ``handler`` until it completes without requesting a retry.

    Args:
        handler: Callable receiving a :class:`RetryContext`. It may return a
            plain value or an awaitable.

    Returns:
        The handler's value for synchronous handlers, otherwise a future
        resolving with the handler's eventual value.

    Raises:
        Exception: Whatever the handler raises other than
            :class:`RetryRequested`, unchanged and without further attempts.

    Note:
        A synchronous handler is retried with a blocking ``time.sleep``. Do not
        drive one that requests a non-zero backoff from event loop code; make
        the handler a coroutine function instead.
    """
    try_count = 1
    while True:
        try:
            result = handler(RetryContext(try_count))
        except RetryRequested as signal:
            _record_retry(signal, try_count)
            # Synchronous handler: the caller is blocked anyway.
            time.sleep(signal.backoff_ms / 1000)
            try_count += 1
            continue
        if inspect.isawaitable(result):
            return asyncio.ensure_future(_retry_async(handler, result, try_count))
        return result


async def _retry_async(
    handler: Callable[[RetryContext], Any],
    pending: Awaitable[T],
    try_count: int,
) -> T:
    while True:
        try:
            return await pending
        except RetryRequested as signal:
            _record_retry(signal, try_count)
            await sleep(signal.backoff_ms)
        try_count += 1
        pending = _invoke(handler, try_count)


async def _invoke(handler: Callable[[RetryContext], Any], try_count: int) -> Any:
    result = handler(RetryContext(try_count))
    if inspect.isawaitable(result):
        result = await result
    return result


__all__ = ["RetryContext", "RetryRequested", "retryable"]
