import logging
from dataclasses import fields
from typing import Any, Callable, Mapping, Optional

from . import settings
from .bid import Bid
from .errors import AuctionError, BidError
from .events import Listener, Observable
from .scheduler import Scheduler, TaskQueue
from .types import AuctionConfig, AuctionEvent, AuctionStatus, Err, Ok, Result
from .utils import format_price, is_number, now, omit

logger = logging.getLogger(__name__)

Callback = Callable[..., Any]

CONFIG_FIELDS = frozenset(f.name for f in fields(AuctionConfig))
READ_ONLY_FIELDS = frozenset(
    {
        "authorization",
        "auction_status",
        "current_price",
        "out_bid",
        "best_bid",
        "started",
        "ended",
        "bids",
    }
)
PRICE_FIELDS = ("open_price", "min_price", "increment", "min_increment")
INVALID_NUMBER = {
    "open_price": "Invalid open price.",
    "min_price": "Invalid minimum price.",
    "increment": "Invalid increment.",
    "min_increment": "Invalid minimum increment.",
}
# Never part of best_bid / out_bid.
BID_OMIT = ("auction_id", "sale_id")

DESTROYED = "Auction destroyed."


def noop(*args: Any) -> None:
    pass


class AuctionCore:
    """Lifecycle state machine and bid acceptance of a single auction.

    Every command commits its state change synchronously and hands the
    resulting event and completion callback to ``scheduler``, so callers
    observe the outcome only after the command has returned.
    """

    bid_class = Bid

    id: Any
    auction_status: AuctionStatus
    open_price: float
    min_price: float
    increment: float
    min_increment: float
    sale_id: Any
    sale_date: Any
    agents: Optional[list]
    bids: list[Bid]
    best_bid: dict
    out_bid: dict
    started: dict
    ended: dict
    destroyed: bool
    initialized: bool

    def __init__(
        self,
        data: Optional[Mapping] = None,
        callback: Optional[Callback] = None,
        *,
        scheduler: Optional[Scheduler] = None,
        id_factory: Optional[Callable[[], str]] = None,
        listeners: Optional[Mapping[str, Listener]] = None,
    ) -> None:
        self.events = Observable()
        self.scheduler = scheduler or TaskQueue()
        self.id_factory = id_factory
        self.initialized = False

        for event, fn in (listeners or {}).items():
            self.events.on(event, fn)

        self.set_defaults()

        result = self.check(dict(data or {}))
        if isinstance(result, Err):
            if not callback and not self.events.listeners(AuctionEvent.ERROR):
                raise result.error
            self._fail(result.error, callback or noop)
            return

        self.apply(result.value)
        self.initialized = True
        logger.debug("auction initialized %s", self.id)

        if callback:
            self.scheduler.schedule(callback, None, self.data)

    # ============= #
    # configuration #
    # ============= #

    def set_defaults(self) -> None:
        self.id = None
        self.open_price = 0
        self.min_price = 0
        self.increment = settings.AUCTION_INCREMENT
        self.min_increment = settings.AUCTION_MIN_INCREMENT
        self.sale_id = None
        self.sale_date = None
        self.agents = None
        self.reset()

    def check(self, data: dict) -> Result[AuctionConfig, AuctionError]:
        """Parse construction data into an `AuctionConfig`."""
        message = None
        if not data.get("id"):
            message = "Invalid auction ID."
        elif not is_number(data.get("open_price")):
            message = INVALID_NUMBER["open_price"]
        else:
            for key in ("min_price", "increment", "min_increment"):
                if key in data and not is_number(data[key]):
                    message = INVALID_NUMBER[key]
                    break
            else:
                message = self.validate(data)

        if message:
            logger.debug("auction error %s", message)
            return Err(AuctionError(message))

        ignored = set(data) - CONFIG_FIELDS
        if ignored:
            logger.debug("ignoring auction fields %s", sorted(ignored))
        config = {k: v for k, v in data.items() if k in CONFIG_FIELDS}
        return Ok(AuctionConfig(**config))

    def apply(self, config: AuctionConfig) -> None:
        for name in CONFIG_FIELDS:
            value = getattr(config, name)
            if value is not None:
                setattr(self, name, value)

    def validate(self, data: dict) -> Optional[str]:
        """Extension point, return an error message to reject `data`."""
        return None

    def normalize(self, data: dict) -> dict:
        """Extension point applied to `update` data before validation."""
        return data

    def diff(self, data: Mapping) -> dict:
        """Mutable fields of `data` that differ from the current values."""
        return {
            key: value
            for key, value in data.items()
            if key in CONFIG_FIELDS
            and key != "id"
            and key not in READ_ONLY_FIELDS
            and getattr(self, key) != value
        }

    def reset(self) -> "AuctionCore":
        self.bids = []
        self.out_bid = {}
        self.best_bid = {}
        self.started = {}
        self.ended = {}
        self.destroyed = False
        self.auction_status = AuctionStatus.CREATED
        return self

    # ======== #
    # commands #
    # ======== #

    def start(self, data: Optional[Mapping] = None, callback: Optional[Callback] = None):
        data, callback = data or {}, callback or noop
        if self.destroyed:
            return self._fail(DESTROYED, callback)

        agent_id = data.get("agent_id")
        open_price = data.get("open_price") or self.open_price
        status = self.auction_status

        error = None
        if not agent_id:
            error = "Invalid agent."
        elif status is AuctionStatus.ENDED:
            error = "Auction already ended."
        elif status is AuctionStatus.STARTED:
            error = "Auction already started."
        elif not is_number(open_price) or open_price <= 0:
            error = "Invalid opening price."

        if error:
            return self._fail(error, callback)

        self.open_price = open_price
        self.auction_status = AuctionStatus.STARTED
        self.started = {"agent_id": agent_id, "timestamp": now()}

        logger.debug("started auction %s", self.id)
        return self._succeed(AuctionEvent.STARTED, callback)

    def bid(self, data: Optional[Mapping] = None, callback: Optional[Callback] = None):
        data, callback = data or {}, callback or noop
        if self.destroyed:
            return self._fail(DESTROYED, callback)

        agent_id = data.get("agent_id")
        open_price = self.open_price
        status = self.auction_status

        # the first bid is measured against the opening price
        plus = self.increment if self.bids else self.min_increment

        best_bid = self.best_bid = omit(self.best_bid, BID_OMIT)
        best_price = best_bid.get("price")

        logger.debug("creating bid %s", data)

        try:
            bid = self.bid_class(
                {
                    "price": data.get("price"),
                    "max_price": data.get("max_price"),
                    "agent_id": agent_id,
                    "auction_id": self.id,
                    "sale_id": self.sale_id,
                },
                id_factory=self.id_factory,
            )
        except BidError as e:
            logger.debug("auction %s error %s", self.id, e.message)
            self.scheduler.schedule(callback, e)
            return self

        error = None
        if not agent_id:
            error = "Invalid agent."
        elif bid is None:
            error = "Invalid bid."
        elif not callable(getattr(bid, "place", None)):
            error = "Invalid bid object."
        elif getattr(bid, "max_price", None) and bid.price > bid.max_price:
            error = "Invalid bid price."
        elif status is AuctionStatus.CREATED:
            error = "Auction not started."
        elif status is AuctionStatus.ENDED:
            error = "Auction already ended."
        elif best_price is not None and bid.price < best_price + plus:
            error = (
                f"Bid price {format_price(bid.price)} must be {format_price(plus)} "
                f"higher than the current bid price ${format_price(best_price)}."
            )
        elif bid.price <= open_price:
            error = (
                f"Bid price {format_price(bid.price)} must be at least {format_price(plus)} "
                f"higher than the current bid price ${format_price(open_price)}."
            )
        elif best_price is not None and best_price > bid.price:
            error = "Invalid bid price"

        if error:
            if bid is not None and callable(getattr(bid, "reject", None)):
                bid.reject(error)
            return self._fail(error, callback)

        bid.accept()
        self.out_bid = best_bid
        self.best_bid = omit(bid.data, BID_OMIT)
        self.bids.append(bid)

        logger.debug("bid %s saved to auction %s", bid.id, self.id)
        return self._succeed(AuctionEvent.CHANGED, callback, bid.data)

    def end(self, data: Optional[Mapping] = None, callback: Optional[Callback] = None):
        data, callback = data or {}, callback or noop
        if self.destroyed:
            return self._fail(DESTROYED, callback)

        agent_id = data.get("agent_id")
        status = self.auction_status

        error = None
        if not agent_id:
            error = "Invalid agent."
        elif status is AuctionStatus.ENDED:
            error = "Auction already ended."
        elif status is not AuctionStatus.STARTED:
            error = "Auction not started."

        if error:
            return self._fail(error, callback)

        self.auction_status = AuctionStatus.ENDED
        self.ended = {"agent_id": agent_id, "timestamp": now()}

        logger.debug("ended auction %s", self.id)
        return self._succeed(AuctionEvent.ENDED, callback)

    def update(self, data: Optional[Mapping] = None, callback: Optional[Callback] = None):
        """Change configured fields; price fields only before the auction starts."""
        callback = callback or noop
        if self.destroyed:
            return self._fail(DESTROYED, callback)

        data = self.normalize(dict(data or {}))
        changes = self.diff(data)

        error = None
        for key in PRICE_FIELDS:
            if key in changes and not is_number(changes[key]):
                error = INVALID_NUMBER[key]
                break
        else:
            if self.auction_status is not AuctionStatus.CREATED and any(
                key in changes for key in PRICE_FIELDS
            ):
                error = "Auction already started."
            else:
                error = self.validate(data)

        if error:
            return self._fail(error, callback)

        for key, value in changes.items():
            setattr(self, key, value)

        logger.debug("updated auction %s fields %s", self.id, sorted(changes))
        self.scheduler.schedule(callback, None, self.data)
        return self

    def destroy(self, callback: Optional[Callback] = None) -> "AuctionCore":
        self.destroyed = True
        self.events.remove_all_listeners()
        logger.debug("destroyed auction %s", self.id)
        if callback:
            callback()
        return self

    def use(self, fn: Callable[["AuctionCore", Any], Any], options: Any = None):
        fn(self, options)
        return self

    def on(self, event: str, fn: Listener) -> "AuctionCore":
        self.events.on(event, fn)
        return self

    # ========== #
    # projection #
    # ========== #

    @property
    def current_price(self) -> float:
        return self.best_bid["price"] if self.best_bid else self.open_price

    @property
    def auctioneer(self) -> Any:
        return self.started.get("agent_id")

    @property
    def data(self) -> dict:
        return {
            "id": self.id,
            "agents": self.agents,
            "auctioneer": self.auctioneer,
            "started": dict(self.started),
            "ended": dict(self.ended),
            "sale_id": self.sale_id,
            "sale_date": self.sale_date,
            "bids": [bid.data for bid in self.bids],
            "out_bid": dict(self.out_bid),
            "best_bid": dict(self.best_bid),
            "min_price": self.min_price,
            "open_price": self.open_price,
            "current_price": self.current_price,
            "increment": self.increment,
            "auction_status": self.auction_status.value,
        }

    # ========= #
    # internals #
    # ========= #

    def _fail(self, error, callback: Callback) -> "AuctionCore":
        if not isinstance(error, Exception):
            error = AuctionError(error)
        logger.debug("auction %s error %s", self.id, error)
        self.scheduler.schedule(self.events.emit, AuctionEvent.ERROR, error)
        self.scheduler.schedule(callback, error)
        return self

    def _succeed(self, event: AuctionEvent, callback: Callback, result: Any = None):
        data = self.data
        self.scheduler.schedule(self.events.emit, event, data)
        self.scheduler.schedule(callback, None, data if result is None else result)
        return self
