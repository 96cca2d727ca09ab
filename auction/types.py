from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, Optional, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E", bound=Exception)


class AuctionStatus(str, Enum):
    CREATED = "created"
    STARTED = "started"
    ENDED = "ended"


class BidStatus(str, Enum):
    INITIALIZED = "initialized"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class AuctionEvent(str, Enum):
    ERROR = "error"
    STARTED = "started"
    CHANGED = "changed"
    ENDED = "ended"


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Err(Generic[E]):
    error: E


Result = Union[Ok[T], Err[E]]


@dataclass
class AuctionConfig:
    """Recognized construction fields of an auction."""

    id: Any
    open_price: float
    min_price: float = 0
    increment: Optional[float] = None
    """Raise required over the best bid. ``None`` means the configured default."""
    min_increment: Optional[float] = None
    """Raise required over the opening price for the first bid."""
    sale_id: Any = None
    sale_date: Any = None
    agents: Optional[list] = field(default=None)
