import asyncio

import pytest

from auction import AuctionError, AuctionHouse, AuctionNotFoundError, BidError


@pytest.mark.asyncio
async def test_auction_flow() -> None:
    ah = AuctionHouse()
    created = await ah.create({"id": "A1", "open_price": 100})
    assert created["auction_status"] == "created"

    started = await ah.start("A1", {"agent_id": "auctioneer"})
    assert started["auctioneer"] == "auctioneer"

    bid = await ah.submit_bid("A1", {"agent_id": "x", "price": 150})
    assert bid["price"] == 150
    assert bid["status"] == "accepted"

    with pytest.raises(AuctionError, match=r"must be 1 higher than the current bid price \$150"):
        await ah.submit_bid("A1", {"agent_id": "y", "price": 150})

    ended = await ah.end("A1", {"agent_id": "auctioneer"})
    assert ended["auction_status"] == "ended"

    status = await ah.get_status("A1")
    assert status["current_price"] == 150
    assert len(status["bids"]) == 1


@pytest.mark.asyncio
async def test_create_invalid() -> None:
    ah = AuctionHouse()
    with pytest.raises(AuctionError, match="Invalid open price."):
        await ah.create({"id": "A1", "open_price": "100"})
    assert await ah.list_auctions() == []


@pytest.mark.asyncio
async def test_create_duplicate() -> None:
    ah = AuctionHouse()
    await ah.create({"id": "A1", "open_price": 100})
    with pytest.raises(AuctionError, match="Auction already exists."):
        await ah.create({"id": "A1", "open_price": 200})


@pytest.mark.asyncio
async def test_unknown_auction() -> None:
    ah = AuctionHouse()
    with pytest.raises(AuctionNotFoundError):
        await ah.start("missing", {"agent_id": "auctioneer"})
    with pytest.raises(AuctionNotFoundError):
        await ah.get_status("missing")


@pytest.mark.asyncio
async def test_bid_error_raised() -> None:
    ah = AuctionHouse()
    await ah.create({"id": "A1", "open_price": 100})
    await ah.start("A1", {"agent_id": "auctioneer"})
    with pytest.raises(BidError, match="Invalid agent."):
        await ah.submit_bid("A1", {"price": 150})


@pytest.mark.asyncio
async def test_update_and_destroy() -> None:
    ah = AuctionHouse()
    await ah.create({"id": "A1", "open_price": 100})
    updated = await ah.update("A1", {"open_price": 250})
    assert updated["open_price"] == 250

    await ah.destroy("A1")
    assert await ah.list_auctions() == []
    with pytest.raises(AuctionNotFoundError):
        await ah.destroy("A1")


@pytest.mark.asyncio
async def test_authorization_and_ids() -> None:
    def gate(command, data, done):
        if command == "bid" and data.get("agent_id") == "banned":
            return done(AuctionError("Agent not allowed."))
        done()

    ah = AuctionHouse(authorization=gate, id_factory=lambda: "fixed")
    await ah.create({"id": "A1", "open_price": 100})
    await ah.start("A1", {"agent_id": "auctioneer"})

    with pytest.raises(AuctionError, match="Agent not allowed."):
        await ah.submit_bid("A1", {"agent_id": "banned", "price": 150})

    bid = await ah.submit_bid("A1", {"agent_id": "x", "price": 150})
    assert bid["id"] == "fixed"


@pytest.mark.asyncio
async def test_create_unhashable_id() -> None:
    ah = AuctionHouse()
    with pytest.raises(AuctionError, match="Invalid auction ID."):
        await ah.create({"id": ["A1"], "open_price": 100})


@pytest.mark.asyncio
async def test_bid_with_non_numeric_max_price() -> None:
    ah = AuctionHouse()
    await ah.create({"id": "A1", "open_price": 100})
    await ah.start("A1", {"agent_id": "auctioneer"})
    with pytest.raises(BidError, match="Invalid bid price."):
        await ah.submit_bid("A1", {"agent_id": "x", "max_price": "abc"})


@pytest.mark.asyncio
async def test_stalled_gate_blocks_only_its_auction() -> None:
    pending = []

    def gate(command, data, done):
        if data.get("agent_id") == "slow":
            pending.append(done)
        else:
            done()

    ah = AuctionHouse(authorization=gate)
    await ah.create({"id": "A1", "open_price": 100})
    await ah.create({"id": "A2", "open_price": 100})

    stalled = asyncio.ensure_future(ah.start("A1", {"agent_id": "slow"}))
    await asyncio.sleep(0)
    assert pending

    started = await asyncio.wait_for(ah.start("A2", {"agent_id": "auctioneer"}), 1)
    assert started["auction_status"] == "started"
    assert not stalled.done()

    pending[0]()
    assert (await stalled)["auction_status"] == "started"
