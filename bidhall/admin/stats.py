"""Operational health and stats endpoints."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends, Request

from ..context import AuctionContext

router = APIRouter(prefix="/admin", tags=["admin"])


def _get_context(request: Request) -> AuctionContext:
    return request.app.state.auction


@router.get("/health")
async def health(
    request: Request,
    context: AuctionContext = Depends(_get_context),
) -> dict[str, Any]:
    start_time = getattr(request.app.state, "start_time", None)
    uptime = int((datetime.now(timezone.utc) - start_time).total_seconds()) if start_time else 0
    running = context.ticker.running
    return {
        "status": "healthy" if running else "degraded",
        "uptime_seconds": uptime,
        "ticker_running": running,
        "subscribers": context.publisher.subscriber_count,
    }


@router.get("/stats")
async def stats(context: AuctionContext = Depends(_get_context)) -> dict[str, Any]:
    engine = context.engine
    snapshot = await engine.snapshot()
    attempts = engine.bids_accepted + engine.bids_rejected
    return {
        "participants": len(context.directory),
        "subscribers": context.publisher.subscriber_count,
        "current_item_index": snapshot.current_item.index,
        "bids_accepted": engine.bids_accepted,
        "bids_rejected": engine.bids_rejected,
        "bid_rejection_rate": round(engine.bids_rejected / attempts, 4) if attempts else 0.0,
        "lots_settled": engine.lots_settled,
        "lots_rotated": engine.lots_rotated,
        "settled_volume": engine.settled_volume,
        "ticks": context.ticker.ticks,
        "ticks_skipped": context.ticker.skipped,
    }
