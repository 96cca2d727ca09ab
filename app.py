import logging
import re
from typing import Any, Optional

from quart import Quart, request

from auction import AuctionHouse, settings
from auction.errors import AuctionError, AuctionNotFoundError, BidError

HTTP_ERROR = 400
HTTP_NOT_FOUND = 404

_ACRONYM = re.compile(r"([A-Z]+)([A-Z][a-z])")
_CAMEL = re.compile(r"([a-z0-9])([A-Z])")


def to_snake(data: Any) -> Any:
    """Translate camelCase wire keys (``openPrice``, ``saleID``) to attribute names."""
    if isinstance(data, dict):
        return {_snake(k): to_snake(v) for k, v in data.items()}
    if isinstance(data, list):
        return [to_snake(v) for v in data]
    return data


def to_camel(data: Any) -> Any:
    if isinstance(data, dict):
        return {_camel(k): to_camel(v) for k, v in data.items()}
    if isinstance(data, list):
        return [to_camel(v) for v in data]
    return data


def _snake(key: str) -> str:
    return _CAMEL.sub(r"\1_\2", _ACRONYM.sub(r"\1_\2", key)).lower()


def _camel(key: str) -> str:
    head, *tail = key.split("_")
    return head + "".join(part.title() for part in tail)


def register_routes(app: Quart, ah: AuctionHouse):

    @app.errorhandler(AuctionNotFoundError)
    async def not_found(e: AuctionNotFoundError):
        return str(e), HTTP_NOT_FOUND

    @app.errorhandler(AuctionError)
    async def auction_error(e: AuctionError):
        return str(e), HTTP_ERROR

    @app.errorhandler(BidError)
    async def bid_error(e: BidError):
        return str(e), HTTP_ERROR

    @app.route("/auctions", methods=["POST"])
    async def create_auction() -> dict:
        """
        input: {"id": "A1", "openPrice": 100, "minPrice": 0, "increment": 1, ...}
        """

        data = await request.get_json()
        return to_camel(await ah.create(to_snake(data or {})))

    @app.route("/auctions", methods=["GET"])
    async def list_auctions() -> list:
        return to_camel(await ah.list_auctions())

    @app.route("/auctions/<auction_id>", methods=["GET"])
    async def get_status(auction_id: str) -> dict:
        return to_camel(await ah.get_status(auction_id))

    @app.route("/auctions/<auction_id>", methods=["PATCH"])
    async def update_auction(auction_id: str) -> dict:
        """
        input: {"openPrice": 200, ...}
        """

        data = await request.get_json()
        return to_camel(await ah.update(auction_id, to_snake(data or {})))

    @app.route("/auctions/<auction_id>", methods=["DELETE"])
    async def destroy_auction(auction_id: str):
        await ah.destroy(auction_id)
        return ""

    @app.route("/auctions/<auction_id>/start", methods=["POST"])
    async def start_auction(auction_id: str) -> dict:
        """
        input: {"agentId": "auctioneer", "openPrice": 100}
        """

        data = await request.get_json()
        return to_camel(await ah.start(auction_id, to_snake(data or {})))

    @app.route("/auctions/<auction_id>/bid", methods=["POST"])
    async def submit_bid(auction_id: str) -> dict:
        """
        input: {"agentId": "bidder", "price": 150}
        """

        data = await request.get_json()
        return to_camel(await ah.submit_bid(auction_id, to_snake(data or {})))

    @app.route("/auctions/<auction_id>/end", methods=["POST"])
    async def end_auction(auction_id: str) -> dict:
        """
        input: {"agentId": "auctioneer"}
        """

        data = await request.get_json()
        return to_camel(await ah.end(auction_id, to_snake(data or {})))


def create_app(ah: Optional[AuctionHouse] = None) -> Quart:
    app = Quart(__name__)
    register_routes(app, ah or AuctionHouse())
    return app


if __name__ == "__main__":
    logging.basicConfig(level=settings.LOG_LEVEL)
    create_app().run(host=settings.HOST, port=settings.PORT)
