"""Unit tests for the bid gateway."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from bidhall.auction.models import BidError
from bidhall.gateway.bids import BidGateway, BidReceipt


@pytest.fixture
def mock_publisher():
    publisher = MagicMock()
    publisher.broadcast_state = AsyncMock()
    return publisher


@pytest.fixture
def gateway(engine, mock_publisher):
    return BidGateway(engine=engine, publisher=mock_publisher)


@pytest.mark.asyncio
async def test_accepted_bid_broadcasts_immediately(gateway, directory, mock_publisher):
    player = directory.create("P1")

    receipt = await gateway.place_bid(player.id, 51)

    assert receipt == BidReceipt(success=True, current_bid=51)
    assert receipt.to_payload() == {"success": True, "currentBid": 51}
    mock_publisher.broadcast_state.assert_awaited_once()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("amount", "code"),
    [
        ("abc", BidError.INVALID_AMOUNT),
        (50, BidError.BID_TOO_LOW),
        (501, BidError.INSUFFICIENT_FUNDS),
    ],
)
async def test_rejected_bid_maps_to_stable_code(gateway, directory, mock_publisher, amount, code):
    player = directory.create("P1")

    receipt = await gateway.place_bid(player.id, amount)

    assert not receipt.success
    assert receipt.error is code
    payload = receipt.to_payload()
    assert payload["success"] is False
    assert payload["error"] == code.value
    assert payload["message"]
    mock_publisher.broadcast_state.assert_not_awaited()


@pytest.mark.asyncio
async def test_unknown_participant(gateway, mock_publisher):
    receipt = await gateway.place_bid("p_missing", 60)

    assert receipt.error is BidError.UNKNOWN_PARTICIPANT
    assert receipt.to_payload()["error"] == "UnknownParticipant"
    mock_publisher.broadcast_state.assert_not_awaited()
