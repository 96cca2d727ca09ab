import itertools
from typing import Any, Optional

import pytest

from auction import Auction, TaskQueue


class Outcome:
    """Completion callback that records what it was called with."""

    def __init__(self) -> None:
        self.calls: list[tuple[Optional[Exception], Any]] = []

    def __call__(self, err: Optional[Exception] = None, result: Any = None) -> None:
        self.calls.append((err, result))

    @property
    def error(self) -> Optional[Exception]:
        assert len(self.calls) == 1
        return self.calls[0][0]

    @property
    def result(self) -> Any:
        assert len(self.calls) == 1
        err, result = self.calls[0]
        assert err is None, err
        return result


@pytest.fixture
def ids():
    counter = itertools.count(1)
    return lambda: f"bid-{next(counter)}"


@pytest.fixture
def queue() -> TaskQueue:
    return TaskQueue()


@pytest.fixture
def outcome() -> Outcome:
    return Outcome()


@pytest.fixture
def make_auction(queue, ids):
    def factory(callback=None, **data) -> Auction:
        data = {"id": "A1", "open_price": 100, **data}
        return Auction(data, callback, scheduler=queue, id_factory=ids)

    return factory


@pytest.fixture
def started_auction(make_auction, queue) -> Auction:
    auction = make_auction()
    auction.start({"agent_id": "auctioneer"})
    queue.drain()
    return auction


@pytest.fixture
def new_outcome():
    return Outcome
