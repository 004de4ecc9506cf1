"""In-process WebSocket broadcast hub."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class BroadcastHub:
    """Fan events out to every connected WebSocket client.

    Delivery is fire-and-forget: nothing is acknowledged, and a client whose
    send fails is dropped without affecting the others.
    """

    def __init__(self) -> None:
        self._clients: set[WebSocket] = set()
        self._lock = asyncio.Lock()

    async def connect(self, websocket: WebSocket) -> None:
        await websocket.accept()
        async with self._lock:
            self._clients.add(websocket)
        logger.info("Realtime client connected (%s total)", len(self._clients))

    async def disconnect(self, websocket: WebSocket) -> None:
        async with self._lock:
            self._clients.discard(websocket)
        logger.info("Realtime client disconnected (%s total)", len(self._clients))

    @property
    def client_count(self) -> int:
        return len(self._clients)

    async def emit(self, event: str, payload: Any) -> int:
        """Send ``{"event", "data"}`` to all clients; returns how many accepted it."""

        async with self._lock:
            clients = list(self._clients)
        message = {"event": event, "data": payload}
        results = await asyncio.gather(
            *(client.send_json(message) for client in clients), return_exceptions=True
        )
        delivered = 0
        for client, result in zip(clients, results):
            if isinstance(result, Exception):
                logger.debug("Dropping realtime client after send failure: %s", result)
                await self.disconnect(client)
            else:
                delivered += 1
        return delivered


__all__ = ["BroadcastHub"]
