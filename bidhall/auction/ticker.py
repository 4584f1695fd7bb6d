"""Periodic driver that advances the auction clock."""

from __future__ import annotations

import asyncio
import logging

from ..publisher import StatePublisher
from .engine import AuctionEngine
from .models import TickOutcome

logger = logging.getLogger(__name__)


class Ticker:
    def __init__(
        self,
        engine: AuctionEngine,
        publisher: StatePublisher,
        *,
        interval_seconds: float = 1.0,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._engine = engine
        self._publisher = publisher
        self._interval = interval_seconds
        self._busy = False
        self._task: asyncio.Task | None = None
        self.ticks = 0
        self.skipped = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def fire(self) -> TickOutcome | None:
        """Run one tick and its broadcasts; a firing that overlaps is skipped."""
        if self._busy:
            self.skipped += 1
            logger.debug("tick already in progress, skipping")
            return None
        self._busy = True
        try:
            outcome = await self._engine.tick()
            self.ticks += 1
            if outcome.settled is not None:
                self._publisher.broadcast_lot_won(outcome.settled)
            await self._publisher.broadcast_state()
            return outcome
        finally:
            self._busy = False

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="auction-ticker")
        self._task.add_done_callback(self._on_done)

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _run(self) -> None:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self._interval
        while True:
            await asyncio.sleep(max(0.0, deadline - loop.time()))
            await self.fire()
            deadline += self._interval
            now = loop.time()
            if now >= deadline:
                missed = int((now - deadline) // self._interval) + 1
                self.skipped += missed
                logger.warning("ticker fell behind, coalescing %d firing(s)", missed)
                deadline += missed * self._interval

    def _on_done(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.critical("auction ticker stopped: %s", exc, exc_info=exc)
