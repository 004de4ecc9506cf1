"""Capped in-memory log of recent dispatch reports for operators."""

from __future__ import annotations

import threading
from collections import deque
from typing import TYPE_CHECKING, Deque

if TYPE_CHECKING:
    from pondwatch.services.dispatcher import DispatchReport


class DispatchHistory:
    """Most recent reports first; older ones fall off past ``max_items``."""

    def __init__(self, max_items: int = 50) -> None:
        self.max_items = max_items
        self._items: Deque["DispatchReport"] = deque(maxlen=max_items)
        self._lock = threading.Lock()

    def add(self, report: "DispatchReport") -> None:
        with self._lock:
            self._items.appendleft(report)

    def recent(self, limit: int | None = None) -> list["DispatchReport"]:
        with self._lock:
            items = list(self._items)
        if limit is None:
            return items
        return items[:limit]


__all__ = ["DispatchHistory"]
