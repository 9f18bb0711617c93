# SPDX-License-Identifier: MIT
"""Test configuration for orderly.

Keeps Logfire telemetry local and hands out isolated lock registries.
"""

from __future__ import annotations

import logfire
import pytest

from orderly.debounce import Debouncer
from orderly.queue import SerialQueue
from orderly.synchronize import LockRegistry

logfire.configure(send_to_logfire=False, console=False)


@pytest.fixture()
def registry() -> LockRegistry[SerialQueue]:
    """Provide a queue registry that is not shared with other tests."""

    return LockRegistry(SerialQueue)


@pytest.fixture()
def debouncers() -> LockRegistry[Debouncer]:
    """Provide a debouncer registry that is not shared with other tests."""

    return LockRegistry(Debouncer)


class FakeCounter:
    """Stand-in for a Logfire counter recording added values."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.values: list[float] = []

    def add(self, value: float) -> None:
        self.values.append(value)

    @property
    def total(self) -> float:
        return sum(self.values)
