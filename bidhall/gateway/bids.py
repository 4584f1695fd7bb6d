"""Synchronous bid entry point in front of the auction engine."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from ..auction.engine import AuctionEngine
from ..auction.models import BidError, BidRejected
from ..publisher import StatePublisher

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BidReceipt:
    success: bool
    current_bid: int | None = None
    error: BidError | None = None
    message: str | None = None

    def to_payload(self) -> dict[str, Any]:
        if self.success:
            return {"success": True, "currentBid": self.current_bid}
        return {
            "success": False,
            "error": self.error.value if self.error else None,
            "message": self.message,
        }


@dataclass
class BidGateway:
    engine: AuctionEngine
    publisher: StatePublisher

    async def place_bid(self, participant_id: str, amount: Any) -> BidReceipt:
        try:
            current_bid = await self.engine.try_place_bid(participant_id, amount)
        except BidRejected as exc:
            logger.info(
                "bid rejected participant=%s amount=%r code=%s",
                participant_id,
                amount,
                exc.code.value,
            )
            return BidReceipt(success=False, error=exc.code, message=str(exc))
        await self.publisher.broadcast_state()
        return BidReceipt(success=True, current_bid=current_bid)
