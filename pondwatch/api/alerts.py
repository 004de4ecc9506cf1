"""Manual condition check and dispatch history."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query

from pondwatch.api.deps import get_runtime
from pondwatch.api.errors import error_response
from pondwatch.core.errors import PondWatchError
from pondwatch.services.runtime import PondRuntime

router = APIRouter(prefix="/alerts", tags=["alerts"])


@router.post("/check")
async def trigger_check(runtime: PondRuntime = Depends(get_runtime)) -> Any:
    """Run one condition check now, alongside the timer-driven ones."""

    try:
        result = await runtime.scheduler.run_condition_check()
    except PondWatchError as exc:
        return error_response(exc)
    return result.as_dict()


@router.get("/history")
def dispatch_history(
    limit: int = Query(20, ge=1, le=200), runtime: PondRuntime = Depends(get_runtime)
) -> dict[str, list[dict[str, Any]]]:
    reports = runtime.dispatcher.history.recent(limit)
    return {"reports": [report.as_dict() for report in reports]}


__all__ = ["router"]
