"""Map engine errors to structured HTTP responses."""

from __future__ import annotations

from fastapi.responses import JSONResponse

from pondwatch.core.errors import (
    ConfigurationError,
    FetchTimeoutError,
    PondWatchError,
    StoreError,
    TransportError,
)

_STATUS_CODES: list[tuple[type[PondWatchError], int]] = [
    (FetchTimeoutError, 504),
    (TransportError, 502),
    (ConfigurationError, 409),
    (StoreError, 503),
]


def error_response(exc: PondWatchError) -> JSONResponse:
    status_code = 500
    for error_type, code in _STATUS_CODES:
        if isinstance(exc, error_type):
            status_code = code
            break
    body: dict[str, object] = {"error": exc.kind, "detail": str(exc)}
    if isinstance(exc, TransportError) and exc.status is not None:
        body["upstream_status"] = exc.status
    return JSONResponse(status_code=status_code, content=body)
