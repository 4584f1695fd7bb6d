"""Unit tests for the auction ticker."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from bidhall.auction.engine import AuctionEngine
from bidhall.auction.models import TickKind, TickOutcome
from bidhall.auction.ticker import Ticker
from bidhall.participants import BalanceInvariantError
from bidhall.publisher import StatePublisher
from bidhall.transport.messages import AUCTION_WON, GAME_STATE, decode_message


@pytest.fixture
def mock_publisher():
    publisher = MagicMock()
    publisher.broadcast_state = AsyncMock()
    publisher.broadcast_lot_won = MagicMock()
    return publisher


class BlockingEngine:
    def __init__(self) -> None:
        self.release = asyncio.Event()
        self.calls = 0

    async def tick(self) -> TickOutcome:
        self.calls += 1
        await self.release.wait()
        return TickOutcome(kind=TickKind.CONTINUING, time_remaining=14)


@pytest.mark.asyncio
async def test_fire_broadcasts_state_every_tick(engine, mock_publisher):
    ticker = Ticker(engine, mock_publisher)

    outcome = await ticker.fire()

    assert outcome.kind is TickKind.CONTINUING
    mock_publisher.broadcast_state.assert_awaited_once()
    mock_publisher.broadcast_lot_won.assert_not_called()
    assert ticker.ticks == 1


@pytest.mark.asyncio
async def test_fire_announces_settlement_before_state(engine, directory, make_subscriber, wait_until):
    publisher = StatePublisher(engine)
    subscriber = make_subscriber()
    await publisher.subscribe(subscriber)
    ticker = Ticker(engine, publisher)
    player = directory.create("P1")
    await engine.try_place_bid(player.id, 100)

    for _ in range(15):
        outcome = await ticker.fire()

    assert outcome.settled is not None
    await wait_until(lambda: len(subscriber.messages) == 17)
    types = [decode_message(raw)["type"] for raw in subscriber.messages[-2:]]
    assert types == [AUCTION_WON, GAME_STATE]
    final_state = decode_message(subscriber.messages[-1])["data"]
    assert final_state["currentBid"] is None
    assert final_state["players"][0]["coins"] == 400
    await publisher.close()


@pytest.mark.asyncio
async def test_overlapping_fire_is_skipped(mock_publisher):
    engine = BlockingEngine()
    ticker = Ticker(engine, mock_publisher)

    first = asyncio.create_task(ticker.fire())
    await asyncio.sleep(0)
    assert await ticker.fire() is None

    engine.release.set()
    assert (await first).time_remaining == 14
    assert engine.calls == 1
    assert ticker.skipped == 1
    mock_publisher.broadcast_state.assert_awaited_once()


@pytest.mark.asyncio
async def test_background_loop_rotates_lots(catalog, directory, mock_publisher, wait_until):
    engine = AuctionEngine(catalog, directory, duration_seconds=2)
    ticker = Ticker(engine, mock_publisher, interval_seconds=0.01)

    ticker.start()
    assert ticker.running
    await wait_until(lambda: engine.lots_rotated >= 2)
    await ticker.stop()

    assert not ticker.running
    assert ticker.ticks >= 4


@pytest.mark.asyncio
async def test_invariant_violation_stops_ticker(catalog, directory, mock_publisher, wait_until, caplog):
    engine = AuctionEngine(catalog, directory, duration_seconds=1)
    player = directory.create("P1")
    await engine.try_place_bid(player.id, 400)
    directory.debit(player.id, 200)
    ticker = Ticker(engine, mock_publisher, interval_seconds=0.01)

    ticker.start()
    await wait_until(lambda: not ticker.running)
    await asyncio.sleep(0.01)

    assert any(record.levelname == "CRITICAL" for record in caplog.records)
    with pytest.raises(BalanceInvariantError):
        await ticker.stop()


def test_interval_must_be_positive(engine, mock_publisher):
    with pytest.raises(ValueError):
        Ticker(engine, mock_publisher, interval_seconds=0)


class SlowEngine:
    """Engine whose tick takes several ticker intervals to finish."""

    def __init__(self, duration: float) -> None:
        self.duration = duration
        self.calls = 0

    async def tick(self) -> TickOutcome:
        self.calls += 1
        await asyncio.sleep(self.duration)
        return TickOutcome(kind=TickKind.CONTINUING, time_remaining=14)


@pytest.mark.asyncio
async def test_overrunning_ticks_are_coalesced_not_replayed(mock_publisher, wait_until, caplog):
    engine = SlowEngine(duration=0.035)
    ticker = Ticker(engine, mock_publisher, interval_seconds=0.01)
    loop = asyncio.get_running_loop()

    started = loop.time()
    ticker.start()
    await wait_until(lambda: ticker.ticks >= 3)
    await ticker.stop()
    elapsed = loop.time() - started

    assert ticker.skipped >= 2 * ticker.ticks
    assert engine.calls in (ticker.ticks, ticker.ticks + 1)
    assert engine.calls <= elapsed / engine.duration + 1
    assert any("coalescing" in record.getMessage() for record in caplog.records)
