"""Periodic feeding-reminder, condition-check and archival loops."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Awaitable, Callable

from prometheus_client import Counter, Gauge, Histogram

from pondwatch.core.errors import (
    ConfigurationError,
    FetchTimeoutError,
    StoreError,
    TransportError,
)
from pondwatch.models import SensorReading
from pondwatch.services.dispatcher import DispatchReport, NotificationDispatcher
from pondwatch.services.reminders import Reminder, ReminderStore
from pondwatch.services.repository import PondRepository
from pondwatch.services.telemetry import TelemetryFetcher, TelemetrySnapshot
from pondwatch.services.thresholds import AlertCondition, evaluate

logger = logging.getLogger(__name__)

TICKS_TOTAL = Counter(
    "pondwatch_scheduler_ticks_total",
    "Scheduler ticks by loop and outcome.",
    ["loop", "outcome"],
)
TICK_SECONDS = Histogram(
    "pondwatch_scheduler_tick_seconds",
    "Wall time of each scheduler tick.",
    ["loop"],
)
ACTIVE_REMINDERS = Gauge(
    "pondwatch_active_reminders",
    "Feeding reminders waiting for acknowledgment.",
)

FEEDING_LOOP = "feeding"
CONDITION_LOOP = "conditions"
ARCHIVE_LOOP = "archive"


@dataclass
class FeedingScanResult:
    scanned_at: datetime
    due: int = 0
    created: list[Reminder] = field(default_factory=list)
    reports: list[DispatchReport] = field(default_factory=list)


@dataclass
class ConditionCheckResult:
    snapshot: TelemetrySnapshot
    conditions: list[AlertCondition]
    report: DispatchReport | None = None

    @property
    def status(self) -> str:
        return "alerted" if self.conditions else "normal"

    def as_dict(self) -> dict:
        return {
            "status": self.status,
            "snapshot": self.snapshot.to_wire(),
            "alerts": [c.as_dict() for c in self.conditions],
            "report": self.report.as_dict() if self.report else None,
        }


class MonitorScheduler:
    """Own the three periodic loops; each runs as its own asyncio task.

    Loops share nothing but the reminder store and the repository, so a slow
    condition check never holds up a feeding scan. Every tick failure is
    caught and logged at the tick boundary; the loop carries on.
    """

    def __init__(
        self,
        *,
        fetcher: TelemetryFetcher,
        repository: PondRepository,
        reminders: ReminderStore,
        dispatcher: NotificationDispatcher,
        feeding_interval: float = 60.0,
        condition_interval: float = 60.0,
        archival_interval: float = 6 * 60 * 60,
        lookahead: timedelta = timedelta(minutes=15),
        email_reminders: bool = False,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.fetcher = fetcher
        self.repository = repository
        self.reminders = reminders
        self.dispatcher = dispatcher
        self.feeding_interval = feeding_interval
        self.condition_interval = condition_interval
        self.archival_interval = archival_interval
        self.lookahead = lookahead
        self.email_reminders = email_reminders
        self.clock = clock
        self._tasks: list[asyncio.Task] = []

    @property
    def running(self) -> bool:
        return any(not task.done() for task in self._tasks)

    def start(self) -> None:
        if self.running:
            return
        logger.info(
            "Starting scheduler (feeding=%ss, conditions=%ss, archive=%ss, lookahead=%s)",
            self.feeding_interval,
            self.condition_interval,
            self.archival_interval,
            self.lookahead,
        )
        self._tasks = [
            asyncio.create_task(self._loop(FEEDING_LOOP, self.feeding_interval, self.run_feeding_scan)),
            asyncio.create_task(self._loop(CONDITION_LOOP, self.condition_interval, self.run_condition_check)),
            asyncio.create_task(
                self._loop(ARCHIVE_LOOP, self.archival_interval, self.run_archival, delay_first=True)
            ),
        ]

    async def stop(self) -> None:
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []
        logger.info("Scheduler stopped")

    async def _loop(
        self,
        name: str,
        interval: float,
        tick: Callable[[], Awaitable[object]],
        delay_first: bool = False,
    ) -> None:
        if delay_first:
            await asyncio.sleep(interval)
        while True:
            started = time.perf_counter()
            await self._run_tick(name, tick)
            elapsed = time.perf_counter() - started
            TICK_SECONDS.labels(loop=name).observe(elapsed)
            await asyncio.sleep(max(0.0, interval - elapsed))

    async def _run_tick(self, name: str, tick: Callable[[], Awaitable[object]]) -> None:
        try:
            await tick()
        except FetchTimeoutError as exc:
            TICKS_TOTAL.labels(loop=name, outcome="timeout").inc()
            logger.warning("[%s] skipped tick: %s", name, exc, extra={"loop": name})
        except TransportError as exc:
            TICKS_TOTAL.labels(loop=name, outcome="transport").inc()
            logger.warning(
                "[%s] skipped tick: telemetry error (status=%s): %s", name, exc.status, exc, extra={"loop": name}
            )
        except ConfigurationError as exc:
            TICKS_TOTAL.labels(loop=name, outcome="configuration").inc()
            logger.error(
                "[%s] skipped tick: configuration needs an operator fix: %s", name, exc, extra={"loop": name}
            )
        except StoreError as exc:
            TICKS_TOTAL.labels(loop=name, outcome="store").inc()
            logger.error("[%s] skipped tick: %s", name, exc, extra={"loop": name})
        except Exception:
            TICKS_TOTAL.labels(loop=name, outcome="error").inc()
            logger.exception("[%s] tick failed", name, extra={"loop": name})
        else:
            TICKS_TOTAL.labels(loop=name, outcome="ok").inc()

    async def run_feeding_scan(self, now: datetime | None = None) -> FeedingScanResult:
        """Create and dispatch reminders for entries due within the lookahead."""

        now = (now or self.clock()).replace(second=0, microsecond=0)
        entries = await asyncio.to_thread(self.repository.feeding_entries_due, now, self.lookahead)
        result = FeedingScanResult(scanned_at=now, due=len(entries))

        recipients: list[str] | None = None
        for entry in entries:
            reminder = self.reminders.try_create(entry, now)
            if reminder is None:
                continue
            logger.info("Reminder created for feeding %s (pond %s)", reminder.feeding_id, reminder.pond_id)
            result.created.append(reminder)
            if self.email_reminders and recipients is None:
                recipients = await self._recipients()
            result.reports.append(await self.dispatcher.dispatch(reminder, recipients or ()))

        ACTIVE_REMINDERS.set(len(self.reminders))
        return result

    async def run_condition_check(self) -> ConditionCheckResult:
        """Fetch, evaluate and, when anything is out of range, alert.

        Raises the fetch/configuration/store errors so the manual trigger can
        report them; the loop wrapper logs and skips instead.
        """

        snapshot = await self.fetcher.fetch()
        thresholds = await asyncio.to_thread(self.repository.load_thresholds)
        conditions = evaluate(snapshot, thresholds)
        result = ConditionCheckResult(snapshot=snapshot, conditions=conditions)
        if not conditions:
            logger.info("All pond conditions are normal")
            return result

        logger.warning("Pond conditions out of range: %s", "; ".join(c.message for c in conditions))
        recipients = await self._recipients()
        result.report = await self.dispatcher.dispatch(conditions, recipients)
        return result

    async def run_archival(self) -> SensorReading:
        snapshot = await self.fetcher.fetch()
        row = await asyncio.to_thread(self.repository.archive_snapshot, snapshot)
        logger.info("Archived telemetry for pond %s (reading %s)", row.pond_id, row.id)
        return row

    async def _recipients(self) -> list[str]:
        try:
            emails = await asyncio.to_thread(self.repository.worker_emails)
        except StoreError as exc:
            # Realtime and push still go out without the contact list.
            logger.error("Could not load worker emails: %s", exc)
            return []
        if not emails:
            logger.error("No worker emails found; alert email will be skipped")
        return emails


__all__ = [
    "ConditionCheckResult",
    "FeedingScanResult",
    "MonitorScheduler",
]
