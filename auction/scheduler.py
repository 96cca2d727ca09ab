"""Deferred delivery of completion callbacks and event notifications.

Auction commands commit their state synchronously and hand every
notification to a scheduler, so a command always returns before any of its
callbacks or listeners run.
"""

import asyncio
import logging
from collections import deque
from typing import Any, Callable, Deque, Optional, Protocol, Tuple

logger = logging.getLogger(__name__)


class Scheduler(Protocol):
    def schedule(self, fn: Callable[..., Any], *args: Any) -> None:
        ...


class TaskQueue:
    """FIFO queue of notification tasks, drained explicitly by its driver."""

    tasks: Deque[Tuple[Callable[..., Any], Tuple[Any, ...]]]

    def __init__(self) -> None:
        self.tasks = deque()

    def __len__(self) -> int:
        return len(self.tasks)

    def schedule(self, fn: Callable[..., Any], *args: Any) -> None:
        self.tasks.append((fn, args))

    def drain(self) -> int:
        """Run queued tasks until the queue is empty, return how many ran.

        Tasks scheduled by a running task are run in the same drain.
        """
        count = 0
        while self.tasks:
            fn, args = self.tasks.popleft()
            fn(*args)
            count += 1
        if count:
            logger.debug("drained %d task(s)", count)
        return count


class LoopScheduler:
    """Schedules notifications on an asyncio event loop."""

    loop: asyncio.AbstractEventLoop

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self.loop = loop or asyncio.get_running_loop()

    def schedule(self, fn: Callable[..., Any], *args: Any) -> None:
        self.loop.call_soon(fn, *args)
