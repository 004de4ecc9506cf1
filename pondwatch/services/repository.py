"""Store queries used by the monitoring engine."""

from __future__ import annotations

import logging
from datetime import datetime, time, timedelta

from sqlalchemy import and_, or_
from sqlmodel import Session, select

from pondwatch.core.errors import ConfigurationError
from pondwatch.db.resilience import ResilientExecutor
from pondwatch.models import DeviceToken, FeedingSchedule, SensorReading, Threshold, Worker
from pondwatch.services.reminders import FeedingScheduleEntry
from pondwatch.services.telemetry import TelemetrySnapshot
from pondwatch.services.thresholds import ThresholdConfig

logger = logging.getLogger(__name__)


class PondRepository:
    """Blocking queries, each one unit of work through the reconnect wrapper."""

    def __init__(self, executor: ResilientExecutor) -> None:
        self.executor = executor

    def feeding_entries_due(self, now: datetime, lookahead: timedelta) -> list[FeedingScheduleEntry]:
        """Schedule entries whose time of day lies in ``[now, now + lookahead]``.

        A window that runs past midnight wraps to the start of the day. Results
        are ordered by how soon they are due, then by feeding id.
        """

        start = now.time().replace(microsecond=0)
        end = (now + lookahead).time().replace(microsecond=0)
        column = FeedingSchedule.feeding_time
        if start <= end:
            clause = and_(column >= start, column <= end)
        else:
            clause = or_(column >= start, column <= end)

        def _query(session: Session) -> list[FeedingSchedule]:
            return list(session.exec(select(FeedingSchedule).where(clause)).all())

        rows = self.executor.run(_query)
        entries = [
            FeedingScheduleEntry(feeding_id=row.feeding_id, pond_id=row.pond_id, feeding_time=row.feeding_time)
            for row in rows
        ]
        entries.sort(key=lambda entry: (_seconds_until(start, entry.feeding_time), entry.feeding_id))
        return entries

    def load_thresholds(self) -> ThresholdConfig:
        def _query(session: Session) -> Threshold | None:
            return session.exec(select(Threshold).order_by(Threshold.id)).first()

        row = self.executor.run(_query)
        if row is None:
            raise ConfigurationError("No threshold configuration found")
        return ThresholdConfig.from_row(row)

    def worker_emails(self) -> list[str]:
        def _query(session: Session) -> list[str | None]:
            return list(session.exec(select(Worker.email).order_by(Worker.id)).all())

        return [email.strip() for email in self.executor.run(_query) if email and email.strip()]

    def archive_snapshot(self, snapshot: TelemetrySnapshot) -> SensorReading:
        def _insert(session: Session) -> SensorReading:
            row = SensorReading(
                pond_id=snapshot.pond_id,
                water_level=snapshot.water_level,
                water_temp=snapshot.water_temp,
                tds=snapshot.tds,
                ph=snapshot.ph,
                updated_at=snapshot.captured_at,
            )
            session.add(row)
            session.commit()
            session.refresh(row)
            return row

        return self.executor.run(_insert)

    def upsert_device_token(self, token: str, worker_id: int | None) -> DeviceToken:
        """Insert the token, or update its worker association if already known."""

        def _upsert(session: Session) -> DeviceToken:
            row = session.exec(select(DeviceToken).where(DeviceToken.token == token)).first()
            if row is None:
                row = DeviceToken(token=token, worker_id=worker_id)
            else:
                row.worker_id = worker_id
            session.add(row)
            session.commit()
            session.refresh(row)
            return row

        return self.executor.run(_upsert)


def _seconds_until(start: time, target: time) -> int:
    delta = _seconds(target) - _seconds(start)
    return delta % (24 * 60 * 60)


def _seconds(value: time) -> int:
    return value.hour * 3600 + value.minute * 60 + value.second


__all__ = ["PondRepository"]
