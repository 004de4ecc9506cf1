"""Device token registration and push test endpoints."""

from __future__ import annotations

import asyncio
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from pondwatch.api.deps import get_runtime
from pondwatch.api.errors import error_response
from pondwatch.core.errors import DeliveryError, PondWatchError
from pondwatch.services.devices import register_device_token
from pondwatch.services.runtime import PondRuntime

router = APIRouter(prefix="/devices", tags=["devices"])


class TokenPayload(BaseModel):
    token: Optional[str] = None
    worker_id: Optional[int] = None


@router.post("/register-token")
async def register_token(payload: TokenPayload, runtime: PondRuntime = Depends(get_runtime)) -> Any:
    if not payload.token:
        raise HTTPException(status_code=400, detail="token is required")
    try:
        registration = await register_device_token(
            runtime.repository,
            runtime.push_client,
            payload.token,
            payload.worker_id,
            topic=runtime.settings.push_feeding_topic,
        )
    except PondWatchError as exc:
        return error_response(exc)
    return {"success": True, "subscribed": registration.subscribed}


@router.post("/test-push")
async def test_push(runtime: PondRuntime = Depends(get_runtime)) -> dict[str, Any]:
    """Send a test notification to the feeding topic."""

    if runtime.push_client is None:
        raise HTTPException(status_code=503, detail="push provider not initialised")
    try:
        message_id = await asyncio.to_thread(
            runtime.push_client.send_to_topic,
            runtime.settings.push_feeding_topic,
            "Feeding Test",
            "This is a test feeding reminder",
            {"test": "1"},
        )
    except DeliveryError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return {"success": True, "result": message_id}


__all__ = ["router"]
