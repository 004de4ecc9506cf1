"""Outstanding feeding reminders, at most one per schedule entry."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import datetime, time
from typing import Any


@dataclass(frozen=True)
class FeedingScheduleEntry:
    feeding_id: int
    pond_id: int
    feeding_time: time


@dataclass(frozen=True)
class Reminder:
    feeding_id: int
    pond_id: int
    created_at: datetime
    reminder_time: str
    message: str
    acknowledged: bool = False

    def as_dict(self) -> dict[str, Any]:
        return {
            "feeding_id": self.feeding_id,
            "pond_id": self.pond_id,
            "created_at": self.created_at.isoformat(),
            "reminder_time": self.reminder_time,
            "message": self.message,
            "acknowledged": self.acknowledged,
        }


class ReminderStore:
    """Lock-guarded set of live reminders keyed by feeding id.

    A reminder lives until it is acknowledged; scans never replace or expire it.
    The lock is a plain threading lock so the scheduler (event loop) and sync
    request handlers (threadpool) can share one instance.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._live: dict[int, Reminder] = {}

    def try_create(self, entry: FeedingScheduleEntry, now: datetime) -> Reminder | None:
        with self._lock:
            if entry.feeding_id in self._live:
                return None
            reminder = Reminder(
                feeding_id=entry.feeding_id,
                pond_id=entry.pond_id,
                created_at=now,
                reminder_time=now.strftime("%H:%M:00"),
                message=(
                    f"Feeding reminder: Pond {entry.pond_id} needs feeding at "
                    f"{entry.feeding_time.strftime('%H:%M:%S')}"
                ),
            )
            self._live[entry.feeding_id] = reminder
            return reminder

    def acknowledge(self, feeding_id: int) -> bool:
        with self._lock:
            return self._live.pop(feeding_id, None) is not None

    def list_active(self) -> list[Reminder]:
        with self._lock:
            return list(self._live.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._live)

    def __contains__(self, feeding_id: object) -> bool:
        with self._lock:
            return feeding_id in self._live


__all__ = ["FeedingScheduleEntry", "Reminder", "ReminderStore"]
