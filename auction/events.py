import logging
from typing import Any, Callable, Union

from .types import AuctionEvent

logger = logging.getLogger(__name__)

Listener = Callable[[Any], Any]


class Observable:
    """Listener registry for the auction lifecycle events."""

    _listeners: dict[AuctionEvent, list[Listener]]

    def __init__(self) -> None:
        self._listeners = {event: [] for event in AuctionEvent}

    def on(self, event: Union[AuctionEvent, str], fn: Listener) -> "Observable":
        self._listeners[AuctionEvent(event)].append(fn)
        return self

    def off(self, event: Union[AuctionEvent, str], fn: Listener) -> "Observable":
        listeners = self._listeners[AuctionEvent(event)]
        if fn in listeners:
            listeners.remove(fn)
        return self

    def on_error(self, fn: Listener) -> "Observable":
        return self.on(AuctionEvent.ERROR, fn)

    def on_started(self, fn: Listener) -> "Observable":
        return self.on(AuctionEvent.STARTED, fn)

    def on_changed(self, fn: Listener) -> "Observable":
        return self.on(AuctionEvent.CHANGED, fn)

    def on_ended(self, fn: Listener) -> "Observable":
        return self.on(AuctionEvent.ENDED, fn)

    def listeners(self, event: Union[AuctionEvent, str]) -> list[Listener]:
        return list(self._listeners[AuctionEvent(event)])

    def remove_all_listeners(self) -> None:
        for listeners in self._listeners.values():
            listeners.clear()

    def emit(self, event: Union[AuctionEvent, str], payload: Any) -> bool:
        """Call every listener of `event` with `payload`, return whether any ran."""
        listeners = self.listeners(event)
        for fn in listeners:
            fn(payload)
        if not listeners:
            logger.debug("no listeners for %s", AuctionEvent(event).value)
        return bool(listeners)
