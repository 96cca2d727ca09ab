from typing import Any, Optional


class AuctionError(Exception):
    """Lifecycle, authorization or command validation failure."""

    def __init__(self, message: str, emitter: Optional[Any] = None) -> None:
        super().__init__(message)
        self.message = message
        if emitter is not None:
            emitter.emit("error", self)


class AuctionNotFoundError(AuctionError):
    pass


class BidError(Exception):
    """Bid construction or placement failure."""

    def __init__(self, message: str, emitter: Optional[Any] = None) -> None:
        super().__init__(message)
        self.message = message
        if emitter is not None:
            emitter.emit("error", self)
