"""Shared auction data structures."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from ..catalog import Item
from ..participants import Participant


class BidError(str, Enum):
    UNKNOWN_PARTICIPANT = "UnknownParticipant"
    INVALID_AMOUNT = "InvalidAmount"
    BID_TOO_LOW = "BidTooLow"
    INSUFFICIENT_FUNDS = "InsufficientFunds"


class BidRejected(ValueError):
    """Raised when a bid fails validation; the lot is left untouched."""

    def __init__(self, code: BidError, message: str) -> None:
        super().__init__(message)
        self.code = code


class TickKind(str, Enum):
    CONTINUING = "continuing"
    ROTATED = "rotated"


@dataclass
class AuctionLot:
    item_index: int
    current_bid: int | None
    highest_bidder_id: str | None
    time_remaining: int


@dataclass(frozen=True)
class LotSettled:
    item_name: str
    winner_id: str
    winner_name: str
    amount: int

    def to_payload(self) -> dict[str, Any]:
        return {
            "itemName": self.item_name,
            "winnerId": self.winner_id,
            "winnerName": self.winner_name,
            "amount": self.amount,
        }


@dataclass(frozen=True)
class TickOutcome:
    kind: TickKind
    time_remaining: int
    settled: LotSettled | None = None

    @property
    def rotated(self) -> bool:
        return self.kind is TickKind.ROTATED


@dataclass(frozen=True)
class StateSnapshot:
    participants: tuple[Participant, ...]
    current_item: Item
    current_bid: int | None
    highest_bidder_id: str | None
    highest_bidder_name: str | None
    time_remaining: int
    minimum_bid: int

    def to_payload(self) -> dict[str, Any]:
        return {
            "players": [participant.to_payload() for participant in self.participants],
            "currentItem": self.current_item.to_payload(),
            "currentBid": self.current_bid,
            "highestBidder": self.highest_bidder_id,
            "highestBidderName": self.highest_bidder_name,
            "timeRemaining": self.time_remaining,
            "minimumBid": self.minimum_bid,
        }
