"""Feeding reminder endpoints."""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from pondwatch.api.deps import get_runtime
from pondwatch.services.runtime import PondRuntime
from pondwatch.services.scheduler import ACTIVE_REMINDERS

router = APIRouter(prefix="/reminders", tags=["reminders"])


class AcknowledgePayload(BaseModel):
    feeding_id: Optional[int] = None


@router.get("")
def list_reminders(runtime: PondRuntime = Depends(get_runtime)) -> list[dict[str, Any]]:
    return [reminder.as_dict() for reminder in runtime.reminders.list_active()]


@router.post("/acknowledge")
def acknowledge(payload: AcknowledgePayload, runtime: PondRuntime = Depends(get_runtime)) -> dict[str, Any]:
    """Clear the reminder once the feeding is done; unknown ids are not an error."""

    if payload.feeding_id is None:
        raise HTTPException(status_code=400, detail="feeding_id is required")
    removed = runtime.reminders.acknowledge(payload.feeding_id)
    ACTIVE_REMINDERS.set(len(runtime.reminders))
    if removed:
        message = f"Reminder {payload.feeding_id} acknowledged"
    else:
        message = f"No active reminder for {payload.feeding_id}"
    return {"success": True, "acknowledged": removed, "message": message}


__all__ = ["router"]
