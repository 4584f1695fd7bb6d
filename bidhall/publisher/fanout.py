"""Snapshot fan-out to a dynamic set of subscribers."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Protocol

from ..auction.engine import AuctionEngine
from ..auction.models import LotSettled, StateSnapshot
from ..transport.messages import encode_lot_won, encode_state

logger = logging.getLogger(__name__)


class Subscriber(Protocol):
    async def send(self, message: str) -> None: ...


@dataclass(eq=False)
class _Subscription:
    subscriber: Subscriber
    queue: asyncio.Queue
    task: asyncio.Task | None = field(default=None)


class StatePublisher:
    """Delivers state and lot-won messages to every current subscriber.

    Each subscriber gets a bounded outbound queue drained by its own task, so
    a slow or broken connection never holds up the broadcaster or the other
    subscribers. A subscriber whose queue overflows or whose send fails is
    dropped.
    """

    def __init__(self, engine: AuctionEngine, *, queue_size: int = 32) -> None:
        if queue_size < 1:
            raise ValueError("queue_size must be at least 1")
        self._engine = engine
        self._queue_size = queue_size
        self._subscriptions: dict[Subscriber, _Subscription] = {}

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    async def subscribe(self, subscriber: Subscriber) -> None:
        if subscriber in self._subscriptions:
            return
        snapshot = await self._engine.snapshot()
        subscription = _Subscription(subscriber, asyncio.Queue(maxsize=self._queue_size))
        subscription.queue.put_nowait(encode_state(snapshot))
        subscription.task = asyncio.create_task(self._pump(subscription))
        self._subscriptions[subscriber] = subscription
        logger.info("subscriber connected total=%d", len(self._subscriptions))

    def unsubscribe(self, subscriber: Subscriber) -> None:
        subscription = self._subscriptions.get(subscriber)
        if subscription is not None:
            self._drop(subscription)

    async def broadcast_state(self) -> StateSnapshot:
        snapshot = await self._engine.snapshot()
        self._deliver(encode_state(snapshot))
        return snapshot

    def broadcast_lot_won(self, event: LotSettled) -> None:
        self._deliver(encode_lot_won(event))

    async def close(self) -> None:
        subscriptions = list(self._subscriptions.values())
        for subscription in subscriptions:
            self._drop(subscription)
        tasks = [s.task for s in subscriptions if s.task is not None]
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    def _deliver(self, message: str) -> None:
        for subscription in list(self._subscriptions.values()):
            try:
                subscription.queue.put_nowait(message)
            except asyncio.QueueFull:
                logger.warning("dropping subscriber with %d undelivered messages", self._queue_size)
                self._drop(subscription)

    def _drop(self, subscription: _Subscription) -> None:
        if self._subscriptions.get(subscription.subscriber) is not subscription:
            return
        del self._subscriptions[subscription.subscriber]
        task = subscription.task
        if task is not None and task is not asyncio.current_task():
            task.cancel()
        logger.info("subscriber disconnected total=%d", len(self._subscriptions))

    async def _pump(self, subscription: _Subscription) -> None:
        while True:
            message = await subscription.queue.get()
            try:
                await subscription.subscriber.send(message)
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                logger.info("send to subscriber failed: %s", exc)
                self._drop(subscription)
                return
