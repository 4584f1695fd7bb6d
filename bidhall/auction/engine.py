"""The single current-lot state machine: bidding, settlement and rotation."""

from __future__ import annotations

import asyncio
import logging
from decimal import Decimal, InvalidOperation
from typing import Any

from ..catalog import Catalog, Item
from ..config import MAX_SAFE_INTEGER
from ..participants import ParticipantDirectory
from .models import (
    AuctionLot,
    BidError,
    BidRejected,
    LotSettled,
    StateSnapshot,
    TickKind,
    TickOutcome,
)

logger = logging.getLogger(__name__)


class AuctionEngine:
    """Owns the current lot; every read and write happens under one lock.

    The critical sections are plain in-memory code, so a bid and a tick can
    never interleave and readers never observe a half-applied update.
    """

    def __init__(
        self,
        catalog: Catalog,
        directory: ParticipantDirectory,
        *,
        duration_seconds: int = 15,
    ) -> None:
        if duration_seconds < 1:
            raise ValueError("duration_seconds must be at least 1")
        self._catalog = catalog
        self._directory = directory
        self._duration = duration_seconds
        self._lot = AuctionLot(
            item_index=0,
            current_bid=None,
            highest_bidder_id=None,
            time_remaining=duration_seconds,
        )
        self._lock = asyncio.Lock()
        self.bids_accepted = 0
        self.bids_rejected = 0
        self.lots_settled = 0
        self.lots_rotated = 0
        self.settled_volume = 0

    async def try_place_bid(self, participant_id: str, amount: Any) -> int:
        async with self._lock:
            try:
                return self._apply_bid(participant_id, amount)
            except BidRejected:
                self.bids_rejected += 1
                raise

    async def tick(self) -> TickOutcome:
        async with self._lock:
            return self._advance()

    async def snapshot(self) -> StateSnapshot:
        async with self._lock:
            return self._build_snapshot()

    # Critical sections -----------------------------------------------------

    def _apply_bid(self, participant_id: str, amount: Any) -> int:
        participant = self._directory.get(participant_id)
        if participant is None:
            raise BidRejected(BidError.UNKNOWN_PARTICIPANT, "participant not found")
        value = parse_amount(amount)
        minimum = self._minimum_bid()
        if value <= minimum:
            raise BidRejected(BidError.BID_TOO_LOW, f"bid must be greater than {minimum}")
        if value > participant.balance:
            raise BidRejected(
                BidError.INSUFFICIENT_FUNDS,
                f"bid of {value} exceeds balance of {participant.balance}",
            )
        self._lot.current_bid = value
        self._lot.highest_bidder_id = participant_id
        self.bids_accepted += 1
        return value

    def _advance(self) -> TickOutcome:
        lot = self._lot
        lot.time_remaining -= 1
        if lot.time_remaining > 0:
            return TickOutcome(kind=TickKind.CONTINUING, time_remaining=lot.time_remaining)
        settled = self._settle() if lot.highest_bidder_id is not None else None
        self._rotate()
        return TickOutcome(
            kind=TickKind.ROTATED,
            time_remaining=lot.time_remaining,
            settled=settled,
        )

    def _settle(self) -> LotSettled:
        lot = self._lot
        item = self._current_item()
        winner = self._directory.debit(lot.highest_bidder_id, lot.current_bid)
        event = LotSettled(
            item_name=item.name,
            winner_id=winner.id,
            winner_name=winner.name,
            amount=lot.current_bid,
        )
        self.lots_settled += 1
        self.settled_volume += event.amount
        logger.info(
            "lot settled item=%s winner=%s amount=%s",
            event.item_name,
            event.winner_id,
            event.amount,
        )
        return event

    def _rotate(self) -> None:
        lot = self._lot
        lot.item_index = (lot.item_index + 1) % len(self._catalog)
        lot.current_bid = None
        lot.highest_bidder_id = None
        lot.time_remaining = self._duration
        self.lots_rotated += 1

    def _build_snapshot(self) -> StateSnapshot:
        lot = self._lot
        bidder = (
            self._directory.get(lot.highest_bidder_id)
            if lot.highest_bidder_id is not None
            else None
        )
        return StateSnapshot(
            participants=tuple(self._directory.all()),
            current_item=self._current_item(),
            current_bid=lot.current_bid,
            highest_bidder_id=lot.highest_bidder_id,
            highest_bidder_name=bidder.name if bidder else None,
            time_remaining=lot.time_remaining,
            minimum_bid=self._minimum_bid(),
        )

    def _current_item(self) -> Item:
        return self._catalog.item_at(self._lot.item_index)

    def _minimum_bid(self) -> int:
        if self._lot.current_bid is not None:
            return self._lot.current_bid
        return self._current_item().starting_bid


def parse_amount(value: Any) -> int:
    """Return ``value`` as a positive integer or raise ``InvalidAmount``.

    Amounts are bounded by ``MAX_SAFE_INTEGER`` before conversion, so values
    such as ``"1e1000000"`` are rejected without building a huge integer.
    """
    if value is None or isinstance(value, bool):
        raise BidRejected(BidError.INVALID_AMOUNT, "amount must be a positive integer")
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise BidRejected(BidError.INVALID_AMOUNT, "amount must be a positive integer") from exc
    if not amount.is_finite() or amount <= 0:
        raise BidRejected(BidError.INVALID_AMOUNT, "amount must be a positive integer")
    if amount > MAX_SAFE_INTEGER:
        raise BidRejected(
            BidError.INVALID_AMOUNT,
            f"amount must not exceed {MAX_SAFE_INTEGER}",
        )
    if amount != amount.to_integral_value():
        raise BidRejected(BidError.INVALID_AMOUNT, "amount must be a positive integer")
    return int(amount)
