"""JSON logging for the API and the headless worker.

Records also land in an in-memory ring buffer that ``GET /api/logs`` serves,
so an operator can see why a monitoring tick was skipped without shell access.
Scheduler records carry a ``loop`` field (``feeding``, ``conditions`` or
``archive``) that the buffer keeps and can filter on.
"""

from __future__ import annotations

import logging
import os
from collections import deque
from datetime import datetime, timezone
from typing import Optional

from pythonjsonlogger.json import JsonFormatter

_CONFIGURED = False
_LOG_BUFFER: deque[dict[str, str]] = deque(maxlen=int(os.getenv("LOG_BUFFER_SIZE", "500")))

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s %(service)s"


class _ServiceNameFilter(logging.Filter):
    def __init__(self, service_name: str) -> None:
        super().__init__()
        self.service_name = service_name

    def filter(self, record: logging.LogRecord) -> bool:
        record.service = self.service_name
        return True


class LogBufferHandler(logging.Handler):
    def emit(self, record: logging.LogRecord) -> None:
        try:
            created = datetime.fromtimestamp(record.created, tz=timezone.utc)
            entry = {
                "time": created.isoformat().replace("+00:00", "Z"),
                "level": record.levelname,
                "name": record.name,
                "message": record.getMessage(),
            }
            for key in ("service", "loop"):
                value = getattr(record, key, None)
                if value:
                    entry[key] = str(value)
            _LOG_BUFFER.appendleft(entry)
        except Exception:
            self.handleError(record)


def setup_logging(service_name: Optional[str] = None) -> None:
    global _CONFIGURED
    if _CONFIGURED:
        return

    log_level = os.getenv("LOG_LEVEL", "INFO").upper()
    service_filter = _ServiceNameFilter(service_name or os.getenv("SERVICE_NAME", "pondwatch"))

    stream = logging.StreamHandler()
    stream.setFormatter(JsonFormatter(LOG_FORMAT))
    buffer = LogBufferHandler()
    for handler in (stream, buffer):
        handler.addFilter(service_filter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(stream)
    root.addHandler(buffer)
    root.setLevel(log_level)
    # httpx logs every telemetry poll at INFO.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.captureWarnings(True)
    _CONFIGURED = True


def get_log_buffer(
    limit: int = 100,
    min_level: Optional[str] = None,
    loop: Optional[str] = None,
) -> list[dict[str, str]]:
    """Newest-first records, optionally only at or above ``min_level`` or from one loop."""

    threshold = logging.getLevelName(min_level.upper()) if min_level else logging.NOTSET
    if not isinstance(threshold, int):
        raise ValueError(f"Unknown log level: {min_level}")
    selected = []
    for entry in list(_LOG_BUFFER):
        level = logging.getLevelName(entry["level"])
        if isinstance(level, int) and level < threshold:
            continue
        if loop and entry.get("loop") != loop:
            continue
        selected.append(entry)
        if len(selected) >= limit:
            break
    return selected


__all__ = ["LogBufferHandler", "setup_logging", "get_log_buffer"]
