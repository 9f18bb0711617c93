# SPDX-License-Identifier: MIT
"""Millisecond based delay primitive."""

from __future__ import annotations

import asyncio


async def sleep(ms: int | float) -> None:
    """Suspend the current task for at least ``ms`` milliseconds.

    ``sleep(0)`` still yields control to the event loop once.

    Raises:
        ValueError: If ``ms`` is negative.
    """
    if ms < 0:
        raise ValueError("ms must be >= 0")
    await asyncio.sleep(ms / 1000)


__all__ = ["sleep"]
