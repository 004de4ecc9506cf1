"""API dependencies."""

from __future__ import annotations

from fastapi import Request

from pondwatch.services.runtime import PondRuntime


def get_runtime(request: Request) -> PondRuntime:
    return request.app.state.runtime
