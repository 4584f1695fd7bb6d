"""Shared fixtures for auction unit tests."""

from __future__ import annotations

import asyncio
from typing import Callable

import pytest

from bidhall.auction.engine import AuctionEngine
from bidhall.catalog import Catalog
from bidhall.participants import ParticipantDirectory


@pytest.fixture
def catalog() -> Catalog:
    return Catalog.from_entries(
        [
            {"id": 1, "name": "Legendary Sword", "starting_bid": 50},
            {"id": 2, "name": "Mithril Shield", "starting_bid": 75},
            {"id": 3, "name": "Potion of Eternal Life", "starting_bid": 100},
        ]
    )


@pytest.fixture
def directory() -> ParticipantDirectory:
    return ParticipantDirectory(initial_balance=500, max_name_length=20)


@pytest.fixture
def engine(catalog, directory) -> AuctionEngine:
    return AuctionEngine(catalog, directory, duration_seconds=15)


class RecordingSubscriber:
    def __init__(self) -> None:
        self.messages: list[str] = []

    async def send(self, message: str) -> None:
        self.messages.append(message)


async def wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met before timeout")
        await asyncio.sleep(0.005)


@pytest.fixture
def make_subscriber() -> Callable[[], RecordingSubscriber]:
    return RecordingSubscriber


@pytest.fixture(name="wait_until")
def wait_until_fixture():
    return wait_until
