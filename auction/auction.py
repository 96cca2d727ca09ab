import inspect
import logging
from typing import Any, Callable, Mapping, Optional

from .core import AuctionCore, Callback, noop
from .errors import AuctionError

logger = logging.getLogger(__name__)

Authorization = Callable[[str, Any, Callable[..., None]], Any]


def _arity(fn: Callable) -> float:
    params = inspect.signature(fn).parameters.values()
    if any(p.kind is inspect.Parameter.VAR_POSITIONAL for p in params):
        return float("inf")
    return sum(
        p.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
        for p in params
    )


class Auction(AuctionCore):
    """Auction whose state-changing commands pass an authorization gate.

    The gate is called as ``fn(command, data, done)``. Calling ``done(err)``
    with an error hands it to the command's callback without running the
    command, ``done()`` lets the command proceed.
    """

    _auth: Optional[Authorization]

    def __init__(
        self,
        data: Optional[Mapping] = None,
        callback: Optional[Callback] = None,
        *,
        authorization: Optional[Authorization] = None,
        **options: Any,
    ) -> None:
        self._auth = None
        super().__init__(data, callback, **options)
        if authorization is not None:
            self.authorize(authorization)

    def authorize(self, fn: Authorization) -> "Auction":
        if not callable(fn):
            raise AuctionError("Authorize only accepts functions")
        if _arity(fn) < 3:
            raise AuctionError("Authorize function requires more arguments")
        logger.debug("setting authorization function on auction %s", self.id)
        self._auth = fn
        return self

    def auth(self, command: str, data: Optional[Mapping], callback: Optional[Callback]):
        """Run `command` once the authorization gate lets it through."""
        callback = callback or noop
        run = getattr(super(), command)
        if self._auth is None or self.destroyed:
            return run(data, callback)

        answered = False

        def done(err: Any = None) -> None:
            nonlocal answered
            if answered:
                logger.warning("authorization for %s on auction %s answered twice", command, self.id)
                return
            answered = True
            if err:
                if not isinstance(err, Exception):
                    err = AuctionError(str(err))
                logger.debug("%s on auction %s not authorized: %s", command, self.id, err)
                self.scheduler.schedule(callback, err)
                return
            run(data, callback)

        self._auth(command, data, done)
        return self

    def start(self, data: Optional[Mapping] = None, callback: Optional[Callback] = None):
        return self.auth("start", data, callback)

    def bid(self, data: Optional[Mapping] = None, callback: Optional[Callback] = None):
        return self.auth("bid", data, callback)

    def end(self, data: Optional[Mapping] = None, callback: Optional[Callback] = None):
        return self.auth("end", data, callback)

    def update(self, data: Optional[Mapping] = None, callback: Optional[Callback] = None):
        return self.auth("update", data, callback)
