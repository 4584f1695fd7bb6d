"""Explicit wiring of the auction components."""

from __future__ import annotations

from dataclasses import dataclass

from .auction.engine import AuctionEngine
from .auction.ticker import Ticker
from .catalog import Catalog
from .config import ServerConfig
from .gateway.bids import BidGateway
from .participants import ParticipantDirectory
from .publisher import StatePublisher


@dataclass
class AuctionContext:
    settings: ServerConfig
    catalog: Catalog
    directory: ParticipantDirectory
    engine: AuctionEngine
    publisher: StatePublisher
    gateway: BidGateway
    ticker: Ticker


def build_context(settings: ServerConfig, catalog: Catalog) -> AuctionContext:
    directory = ParticipantDirectory(
        initial_balance=settings.participants.initial_balance,
        max_name_length=settings.participants.max_name_length,
    )
    engine = AuctionEngine(
        catalog,
        directory,
        duration_seconds=settings.auction.duration_seconds,
    )
    publisher = StatePublisher(engine, queue_size=settings.publisher.queue_size)
    gateway = BidGateway(engine=engine, publisher=publisher)
    ticker = Ticker(
        engine,
        publisher,
        interval_seconds=settings.auction.tick_interval_ms / 1000,
    )
    return AuctionContext(
        settings=settings,
        catalog=catalog,
        directory=directory,
        engine=engine,
        publisher=publisher,
        gateway=gateway,
        ticker=ticker,
    )
