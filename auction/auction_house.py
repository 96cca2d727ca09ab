import asyncio
import logging
from collections.abc import Hashable
from typing import Any, Callable, Optional

from .auction import Auction, Authorization
from .errors import AuctionError, AuctionNotFoundError
from .scheduler import LoopScheduler

logger = logging.getLogger(__name__)


class AuctionHouse:
    """In-memory registry of auctions driven from an asyncio event loop.

    Commands on each auction are serialized through that auction's lock and
    their callback outcomes are turned into awaitable results: errors are raised,
    results returned.
    """

    auctions: dict[Any, Auction]
    auction_lock: asyncio.Lock
    """Guards the registry itself: creating and removing auctions."""
    command_locks: dict[Any, asyncio.Lock]
    """One lock per auction, so a stalled command only blocks its own auction."""

    authorization: Optional[Authorization]
    id_factory: Optional[Callable[[], str]]

    def __init__(
        self,
        authorization: Optional[Authorization] = None,
        id_factory: Optional[Callable[[], str]] = None,
    ) -> None:
        self.auctions = {}
        self.auction_lock = asyncio.Lock()
        self.command_locks = {}
        self.authorization = authorization
        self.id_factory = id_factory

    # ======== #
    # commands #
    # ======== #

    async def create(self, data: dict) -> dict:
        auction_id = data.get("id")
        if not isinstance(auction_id, Hashable):
            raise AuctionError("Invalid auction ID.")

        async with self.auction_lock:
            if auction_id in self.auctions:
                raise AuctionError("Auction already exists.")

            loop = asyncio.get_running_loop()
            future = loop.create_future()
            auction = Auction(
                data,
                self._resolve(future),
                authorization=self.authorization,
                scheduler=LoopScheduler(loop),
                id_factory=self.id_factory,
            )
            result = await future
            self.auctions[auction.id] = auction
            self.command_locks[auction.id] = asyncio.Lock()

        logger.info("created auction %s", auction.id)
        return result

    async def start(self, auction_id: Any, data: dict) -> dict:
        return await self._command(auction_id, "start", data)

    async def submit_bid(self, auction_id: Any, data: dict) -> dict:
        return await self._command(auction_id, "bid", data)

    async def end(self, auction_id: Any, data: dict) -> dict:
        return await self._command(auction_id, "end", data)

    async def update(self, auction_id: Any, data: dict) -> dict:
        return await self._command(auction_id, "update", data)

    async def destroy(self, auction_id: Any) -> None:
        async with self.auction_lock:
            auction = self._get_auction_by_id(auction_id)
            async with self.command_locks[auction_id]:
                auction.destroy()
                del self.auctions[auction_id]
                del self.command_locks[auction_id]
        logger.info("destroyed auction %s", auction_id)

    # ======= #
    # queries #
    # ======= #

    async def get_status(self, auction_id: Any) -> dict:
        return self._get_auction_by_id(auction_id).data

    async def list_auctions(self) -> list[dict]:
        return [auction.data for auction in self.auctions.values()]

    # ========= #
    # internals #
    # ========= #

    async def _command(self, auction_id: Any, command: str, data: dict) -> dict:
        auction = self._get_auction_by_id(auction_id)
        async with self.command_locks[auction_id]:
            if auction.destroyed:
                raise AuctionNotFoundError("Auction not found.")
            future = asyncio.get_running_loop().create_future()
            getattr(auction, command)(data, self._resolve(future))
            result = await future
        logger.info("%s on auction %s succeeded", command, auction_id)
        return result

    @staticmethod
    def _resolve(future: asyncio.Future) -> Callable[..., None]:
        def callback(err: Optional[Exception], result: Any = None) -> None:
            if future.done():
                return
            if err:
                future.set_exception(err)
            else:
                future.set_result(result)

        return callback

    def _get_auction_by_id(self, auction_id: Any) -> Auction:
        if not (auction := self.auctions.get(auction_id)):
            raise AuctionNotFoundError("Auction not found.")
        return auction
