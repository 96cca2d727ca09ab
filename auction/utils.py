import math
import time
import uuid
from numbers import Real
from typing import Any, Iterable


def new_id() -> str:
    """Return a fresh globally unique identifier."""
    return uuid.uuid4().hex


def now() -> float:
    return time.time()


def is_number(value: Any) -> bool:
    """True for real numbers, excluding booleans and NaN."""
    if isinstance(value, bool) or not isinstance(value, Real):
        return False
    return not math.isnan(value)


def omit(data: dict, keys: Iterable[str]) -> dict:
    """Copy of `data` without `keys`."""
    keys = set(keys)
    return {k: v for k, v in data.items() if k not in keys}


def format_price(value: Any) -> str:
    """Render a price the way it is shown in bid messages (``150``, ``150.5``)."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
