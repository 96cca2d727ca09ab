from .auction import Auction
from .auction_house import AuctionHouse
from .bid import Bid
from .core import AuctionCore
from .errors import AuctionError, AuctionNotFoundError, BidError
from .scheduler import LoopScheduler, TaskQueue
from .types import AuctionEvent, AuctionStatus, BidStatus

__all__ = [
    "Auction",
    "AuctionCore",
    "AuctionError",
    "AuctionEvent",
    "AuctionHouse",
    "AuctionNotFoundError",
    "AuctionStatus",
    "Bid",
    "BidError",
    "BidStatus",
    "LoopScheduler",
    "TaskQueue",
]
