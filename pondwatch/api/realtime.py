"""WebSocket subscription for realtime reminders and alerts."""

from __future__ import annotations

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

router = APIRouter(tags=["realtime"])


@router.websocket("/ws")
async def subscribe(websocket: WebSocket) -> None:
    hub = websocket.app.state.runtime.hub
    await hub.connect(websocket)
    try:
        while True:
            # Clients only listen; incoming frames are read to notice disconnects.
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        await hub.disconnect(websocket)


__all__ = ["router"]
