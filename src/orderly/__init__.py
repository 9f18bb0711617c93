# SPDX-License-Identifier: MIT
"""Ordered execution queues and handler-driven retries for asyncio."""

from orderly.debounce import Debouncer, debounce, debounced
from orderly.deferred import Deferred
from orderly.queue import SerialQueue
from orderly.retry import RetryContext, RetryRequested, retryable
from orderly.sleep import sleep
from orderly.synchronize import LockRegistry, synchronize, synchronized

__all__ = [
    "Debouncer",
    "Deferred",
    "LockRegistry",
    "RetryContext",
    "RetryRequested",
    "SerialQueue",
    "debounce",
    "debounced",
    "retryable",
    "sleep",
    "synchronize",
    "synchronized",
]
