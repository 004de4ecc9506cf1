"""System endpoints: health probe and recent logs."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from pondwatch.api.deps import get_runtime
from pondwatch.core.logging_config import get_log_buffer
from pondwatch.services.runtime import PondRuntime

health_router = APIRouter(tags=["system"])


@health_router.get("/health", summary="Service health probe")
async def healthcheck(runtime: PondRuntime = Depends(get_runtime)) -> dict[str, object]:
    """Return a heartbeat plus whether the loops and push channel are live."""

    return {
        "status": "ok",
        "scheduler_running": runtime.scheduler.running,
        "push_enabled": runtime.push_client is not None,
        "realtime_clients": runtime.hub.client_count,
    }


@health_router.get("/logs", summary="Recent log records")
def list_logs(
    limit: int = Query(100, ge=1, le=500),
    level: Optional[str] = Query(None, description="Minimum level, e.g. WARNING"),
    loop: Optional[str] = Query(None, description="Scheduler loop: feeding, conditions or archive"),
) -> dict[str, list[dict[str, str]]]:
    try:
        logs = get_log_buffer(limit=limit, min_level=level, loop=loop)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"logs": logs}
