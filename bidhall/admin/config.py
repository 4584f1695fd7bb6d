"""Expose currently loaded server config for debugging."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from ..context import AuctionContext

router = APIRouter(prefix="/admin", tags=["admin"])


def _get_context(request: Request) -> AuctionContext:
    return request.app.state.auction


@router.get("/config")
async def config(
    request: Request,
    context: AuctionContext = Depends(_get_context),
) -> dict:
    settings = context.settings
    return {
        "auction_duration_seconds": settings.auction.duration_seconds,
        "tick_interval_ms": settings.auction.tick_interval_ms,
        "initial_balance": settings.participants.initial_balance,
        "max_name_length": settings.participants.max_name_length,
        "publisher_queue_size": settings.publisher.queue_size,
        "catalog_size": len(context.catalog),
        "cors_allow_origins": list(settings.cors.allow_origins),
        "version": request.app.version,
    }
