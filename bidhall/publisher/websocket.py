"""Adapter exposing a Starlette WebSocket as a publisher subscriber."""

from __future__ import annotations

from fastapi import WebSocket


class WebSocketSubscriber:
    def __init__(self, websocket: WebSocket) -> None:
        self._websocket = websocket

    async def send(self, message: str) -> None:
        await self._websocket.send_text(message)
