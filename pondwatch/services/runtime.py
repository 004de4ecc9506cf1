"""Build the long-lived monitoring components from settings."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from sqlalchemy.engine import Engine

from pondwatch.core.config import Settings
from pondwatch.db.resilience import ResilientExecutor
from pondwatch.services.dispatcher import NotificationDispatcher
from pondwatch.services.history import DispatchHistory
from pondwatch.services.mailer import Mailer, build_mailer
from pondwatch.services.push import PushClient, resolve_push_client
from pondwatch.services.realtime import BroadcastHub
from pondwatch.services.reminders import ReminderStore
from pondwatch.services.repository import PondRepository
from pondwatch.services.scheduler import MonitorScheduler
from pondwatch.services.telemetry import TelemetryFetcher


@dataclass
class PondRuntime:
    settings: Settings
    engine: Engine
    repository: PondRepository
    fetcher: TelemetryFetcher
    reminders: ReminderStore
    hub: BroadcastHub
    push_client: PushClient | None
    dispatcher: NotificationDispatcher
    scheduler: MonitorScheduler

    async def aclose(self) -> None:
        await self.scheduler.stop()
        await self.fetcher.aclose()


_UNSET = object()


def build_runtime(
    config: Settings,
    engine: Engine,
    *,
    fetcher: TelemetryFetcher | None = None,
    push_client: PushClient | None | object = _UNSET,
    mailer: Mailer | None | object = _UNSET,
) -> PondRuntime:
    """Wire components; push and mail are resolved once here unless injected."""

    if push_client is _UNSET:
        push_client = resolve_push_client(config)
    if mailer is _UNSET:
        mailer = build_mailer(config)

    repository = PondRepository(ResilientExecutor(engine))
    fetcher = fetcher or TelemetryFetcher(
        config.resolved_telemetry_url,
        timeout=config.telemetry_timeout,
        pond_id=config.telemetry_pond_id,
    )
    reminders = ReminderStore()
    hub = BroadcastHub()
    dispatcher = NotificationDispatcher(
        hub,
        push_client,
        mailer,
        feeding_topic=config.push_feeding_topic,
        alert_topic=config.push_alert_topic,
        feeding_event=config.realtime_feeding_event,
        alert_event=config.realtime_alert_event,
        history=DispatchHistory(config.dispatch_history_size),
    )
    scheduler = MonitorScheduler(
        fetcher=fetcher,
        repository=repository,
        reminders=reminders,
        dispatcher=dispatcher,
        feeding_interval=config.feeding_scan_interval_seconds,
        condition_interval=config.condition_scan_interval_seconds,
        archival_interval=config.archival_interval_seconds,
        lookahead=timedelta(minutes=config.feeding_lookahead_minutes),
        email_reminders=config.feeding_reminder_email,
    )
    return PondRuntime(
        settings=config,
        engine=engine,
        repository=repository,
        fetcher=fetcher,
        reminders=reminders,
        hub=hub,
        push_client=push_client,
        dispatcher=dispatcher,
        scheduler=scheduler,
    )


__all__ = ["PondRuntime", "build_runtime"]
