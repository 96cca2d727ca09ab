import asyncio

import pytest

from auction import AuctionError, AuctionEvent, BidError, LoopScheduler, TaskQueue
from auction.events import Observable


def test_task_queue_fifo() -> None:
    queue = TaskQueue()
    seen = []
    queue.schedule(seen.append, 1)
    queue.schedule(seen.append, 2)
    assert len(queue) == 2
    assert seen == []
    assert queue.drain() == 2
    assert seen == [1, 2]
    assert queue.drain() == 0


def test_task_queue_drains_nested_tasks() -> None:
    queue = TaskQueue()
    seen = []
    queue.schedule(lambda: queue.schedule(seen.append, "nested"))
    assert queue.drain() == 2
    assert seen == ["nested"]


@pytest.mark.asyncio
async def test_loop_scheduler() -> None:
    seen = []
    LoopScheduler().schedule(seen.append, 1)
    assert seen == []
    await asyncio.sleep(0)
    assert seen == [1]


def test_observable() -> None:
    events = Observable()
    seen = []
    events.on_started(seen.append)
    events.on(AuctionEvent.CHANGED, seen.append)

    assert events.emit("started", "a") is True
    assert events.emit(AuctionEvent.CHANGED, "b") is True
    assert events.emit("ended", "c") is False
    assert seen == ["a", "b"]

    events.off("started", seen.append)
    assert events.listeners("started") == []

    events.remove_all_listeners()
    assert events.emit("changed", "d") is False


def test_observable_unknown_event() -> None:
    with pytest.raises(ValueError):
        Observable().on("paused", print)


@pytest.mark.parametrize("error_class", [AuctionError, BidError])
def test_error_emits_on_emitter(error_class) -> None:
    events = Observable()
    errors = []
    events.on_error(errors.append)
    error = error_class("Invalid agent.", emitter=events)
    assert errors == [error]
    assert str(error) == error.message == "Invalid agent."
