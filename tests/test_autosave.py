"""Tests for the coalescing autosave scheduler."""

import asyncio

import pytest

from chartflow.autosave import AutosaveScheduler


class Clock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def test_burst_of_edits_writes_last_state_once() -> None:
    """Rapid edits coalesce into a single write of the final state."""

    clock, written = Clock(), []
    scheduler = AutosaveScheduler(written.append, delay=1.0, clock=clock)

    for i in range(5):
        scheduler.schedule(i)
        clock.now += 0.5
        assert not scheduler.poll()

    clock.now += 1.0
    assert scheduler.poll()
    assert written == [4]
    assert scheduler.pending is None
    assert not scheduler.poll()


def test_reschedule_pushes_deadline_out() -> None:
    clock = Clock()
    scheduler = AutosaveScheduler(lambda item: None, delay=1.0, clock=clock)
    scheduler.schedule("a")
    assert scheduler.due_at == 1.0
    clock.now = 0.9
    scheduler.schedule("b")
    assert scheduler.due_at == pytest.approx(1.9)


def test_flush_and_cancel() -> None:
    written = []
    scheduler = AutosaveScheduler(written.append, delay=10.0, clock=Clock())
    assert not scheduler.flush()
    scheduler.schedule("x")
    assert scheduler.flush()
    assert written == ["x"]

    scheduler.schedule("y")
    scheduler.cancel()
    assert not scheduler.flush()
    assert written == ["x"]


def test_failed_write_is_retried() -> None:
    clock, attempts = Clock(), []

    def flaky(item):
        attempts.append(item)
        if len(attempts) == 1:
            raise OSError("disk full")

    scheduler = AutosaveScheduler(flaky, delay=1.0, clock=clock)
    scheduler.schedule("x")
    clock.now = 1.0
    assert not scheduler.poll()
    assert scheduler.pending == "x"
    assert scheduler.due_at == 2.0
    clock.now = 2.0
    assert scheduler.poll()
    assert attempts == ["x", "x"]


def test_run_flushes_on_cancel() -> None:
    written = []
    scheduler = AutosaveScheduler(written.append, delay=60.0)

    async def main():
        task = asyncio.create_task(scheduler.run(interval=0.01))
        scheduler.schedule("final")
        await asyncio.sleep(0.05)
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    asyncio.run(main())
    assert written == ["final"]
