# SPDX-License-Identifier: MIT
"""Tests for the serial execution queue."""

import asyncio
import functools

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

import orderly.queue as queue_module
from conftest import FakeCounter
from orderly.queue import SerialQueue


@pytest.mark.asyncio()
async def test_actions_run_in_submission_order():
    queue = SerialQueue()
    events: list[str] = []

    async def action(label: str, delay: float) -> str:
        events.append(f"{label}-start")
        await asyncio.sleep(delay)
        events.append(f"{label}-end")
        return label

    first = queue.enqueue(lambda: action("a", 0.02))
    second = queue.enqueue(lambda: action("b", 0.01))
    assert await asyncio.gather(first, second) == ["a", "b"]
    assert events == ["a-start", "a-end", "b-start", "b-end"]


@pytest.mark.asyncio()
async def test_idle_queue_starts_first_action_on_next_step():
    queue = SerialQueue()
    ran: list[str] = []
    task = queue.enqueue(lambda: ran.append("first"))
    await asyncio.sleep(0)
    assert ran == ["first"]
    await task


@pytest.mark.asyncio()
async def test_synchronous_actions_are_wrapped_in_tasks():
    queue = SerialQueue()
    task = queue.enqueue(lambda: 5)
    assert isinstance(task, asyncio.Future)
    assert await task == 5


@pytest.mark.asyncio()
async def test_failed_action_does_not_block_later_actions():
    queue = SerialQueue()

    def fail() -> None:
        raise ValueError("boom")

    failing = queue.enqueue(fail)
    following = queue.enqueue(lambda: "still runs")
    with pytest.raises(ValueError, match="boom"):
        await failing
    assert await following == "still runs"


@given(outcomes=st.lists(st.booleans(), min_size=1, max_size=8))
@settings(max_examples=50, deadline=None)
def test_each_future_carries_its_own_outcome(outcomes: list[bool]) -> None:
    """Successes resolve with their value and failures with their own error."""

    async def action(index: int, ok: bool) -> int:
        await asyncio.sleep(0)
        if not ok:
            raise ValueError(index)
        return index

    async def scenario() -> list[object]:
        queue = SerialQueue()
        tasks = [
            queue.enqueue(functools.partial(action, index, ok))
            for index, ok in enumerate(outcomes)
        ]
        return await asyncio.gather(*tasks, return_exceptions=True)

    results = asyncio.run(scenario())
    for index, (ok, result) in enumerate(zip(outcomes, results, strict=True)):
        if ok:
            assert result == index
        else:
            assert isinstance(result, ValueError)
            assert result.args == (index,)


@pytest.mark.asyncio()
async def test_cancelled_action_keeps_order_of_the_rest():
    queue = SerialQueue()
    events: list[str] = []

    async def slow() -> None:
        events.append("a-start")
        await asyncio.sleep(0.03)
        events.append("a-end")

    first = queue.enqueue(slow)
    skipped = queue.enqueue(lambda: events.append("b"))
    last = queue.enqueue(lambda: events.append("c"))
    await asyncio.sleep(0)
    skipped.cancel()
    await asyncio.gather(first, last)
    assert skipped.cancelled()
    assert events == ["a-start", "a-end", "c"]


@pytest.mark.asyncio()
async def test_pending_tracks_unfinished_actions():
    queue = SerialQueue()
    assert queue.idle
    gate = asyncio.Event()
    first = queue.enqueue(gate.wait)
    second = queue.enqueue(lambda: None)
    assert queue.pending == 2
    gate.set()
    await asyncio.gather(first, second)
    await asyncio.sleep(0)
    assert queue.idle


def test_queue_is_reusable_across_event_loops():
    queue = SerialQueue()

    async def run(value: int) -> int:
        return await queue.enqueue(lambda: value)

    assert asyncio.run(run(1)) == 1
    assert asyncio.run(run(2)) == 2


def test_enqueue_requires_running_loop():
    with pytest.raises(RuntimeError):
        SerialQueue().enqueue(lambda: None)


@pytest.mark.asyncio()
async def test_outcomes_are_counted(monkeypatch):
    submitted = FakeCounter("serial_queue_submitted")
    completed = FakeCounter("serial_queue_completed")
    failed = FakeCounter("serial_queue_failed")
    monkeypatch.setattr(queue_module, "QUEUE_SUBMITTED", submitted)
    monkeypatch.setattr(queue_module, "QUEUE_COMPLETED", completed)
    monkeypatch.setattr(queue_module, "QUEUE_FAILED", failed)

    def fail() -> None:
        raise KeyError("missing")

    queue = SerialQueue(name="counted")
    await asyncio.gather(
        queue.enqueue(lambda: 1), queue.enqueue(fail), return_exceptions=True
    )
    assert submitted.total == 2
    assert completed.total == 1
    assert failed.total == 1
