"""Live telemetry passthrough."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from pondwatch.api.deps import get_runtime
from pondwatch.api.errors import error_response
from pondwatch.core.errors import PondWatchError
from pondwatch.services.runtime import PondRuntime

router = APIRouter(prefix="/sensors", tags=["sensors"])


@router.get("/live")
async def live_snapshot(runtime: PondRuntime = Depends(get_runtime)) -> Any:
    try:
        snapshot = await runtime.fetcher.fetch()
    except PondWatchError as exc:
        return error_response(exc)
    return snapshot.to_wire()


__all__ = ["router"]
