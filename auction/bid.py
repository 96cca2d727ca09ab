import logging
from typing import Any, Callable, Optional

from .errors import BidError
from .types import BidStatus
from .utils import is_number, new_id, now

logger = logging.getLogger(__name__)


class Bid:
    """One price offer from an agent, resolved exactly once by its auction."""

    id: str
    agent_id: str
    auction_id: Any
    sale_id: Any
    price: float
    max_price: Optional[float]
    status: BidStatus
    placed: bool
    timestamp: Optional[float]

    def __init__(
        self, options: dict, id_factory: Optional[Callable[[], str]] = None
    ) -> None:
        self.status = BidStatus.REJECTED
        self.placed = False
        self.timestamp = None

        logger.debug("creating bid with options %s", options)

        price, max_price = options.get("price"), options.get("max_price")
        if max_price is not None and not is_number(max_price):
            raise BidError("Invalid bid price.")
        if price is not None and not is_number(price):
            raise BidError("Invalid bid price.")
        if price is None and not max_price:
            raise BidError("Invalid bid price.")
        if not options.get("auction_id"):
            raise BidError("Invalid auction id.")
        if not isinstance(options.get("agent_id"), str):
            raise BidError("Invalid agent.")

        self.id = (id_factory or new_id)()
        self.agent_id = options["agent_id"]
        self.price = price or 0
        self.max_price = max_price
        self.sale_id = options.get("sale_id")
        self.auction_id = options["auction_id"]
        self.status = BidStatus.INITIALIZED

        logger.debug("initialized bid %s", self.data)

    def accept(self) -> dict:
        if not self.place():
            raise BidError("Bid already placed.")
        self.status = BidStatus.ACCEPTED
        logger.debug("bid %s accepted", self.id)
        return self.data

    def reject(self, reason: Optional[str] = None) -> dict:
        if not self.place():
            raise BidError("Bid already placed.")
        self.status = BidStatus.REJECTED
        logger.debug("bid %s rejected: %s", self.id, reason)
        return self.data

    def place(self) -> Optional["Bid"]:
        """Mark the bid placed, or return ``None`` if it already was."""
        if self.placed:
            return None
        self.placed = True
        self.timestamp = now()
        logger.debug("bid %s placed", self.id)
        return self

    def use(self, fn: Callable[["Bid", Any], Any], options: Any = None) -> "Bid":
        fn(self, options)
        return self

    @property
    def data(self) -> dict:
        data = {
            "id": self.id,
            "price": self.price,
            "placed": self.placed,
            "status": self.status.value,
            "agent_id": self.agent_id,
            "timestamp": self.timestamp,
            "auction_id": self.auction_id,
        }
        if self.sale_id:
            data["sale_id"] = self.sale_id
        return data
