"""Shared fixtures and channel fakes."""

import os

# Must be set before pondwatch.core.config builds its module-level settings.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SCHEDULER_ENABLED", "false")
os.environ.setdefault("METRICS_ENABLED", "false")

from datetime import datetime, time, timezone
from typing import Any, Mapping, Sequence

import pytest

from pondwatch.core.errors import DeliveryError
from pondwatch.db.resilience import ResilientExecutor
from pondwatch.db.session import build_engine, init_db
from pondwatch.models import FeedingSchedule, Threshold, Worker
from pondwatch.services.dispatcher import NotificationDispatcher
from pondwatch.services.reminders import ReminderStore
from pondwatch.services.repository import PondRepository
from pondwatch.services.scheduler import MonitorScheduler
from pondwatch.services.telemetry import TelemetrySnapshot
from sqlmodel import Session


class FakeBroadcaster:
    def __init__(self) -> None:
        self.events: list[tuple[str, Any]] = []

    async def emit(self, event: str, payload: Any) -> int:
        self.events.append((event, payload))
        return 1


class FakePushClient:
    def __init__(self, fail: bool = False, fail_subscribe: bool = False) -> None:
        self.fail = fail
        self.fail_subscribe = fail_subscribe
        self.sent: list[dict[str, Any]] = []
        self.subscriptions: list[tuple[list[str], str]] = []

    def send_to_topic(self, topic: str, title: str, body: str, data: Mapping[str, str]) -> str:
        if self.fail:
            raise DeliveryError("push", "provider outage")
        self.sent.append({"topic": topic, "title": title, "body": body, "data": dict(data)})
        return f"projects/test/messages/{len(self.sent)}"

    def subscribe(self, tokens: Sequence[str], topic: str) -> None:
        if self.fail_subscribe:
            raise DeliveryError("push", "subscription rejected")
        self.subscriptions.append((list(tokens), topic))


class FakeMailer:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.messages: list[tuple[list[str], str, str]] = []

    def send(self, to: Sequence[str], subject: str, body: str) -> None:
        if self.fail:
            raise DeliveryError("email", "mail server down")
        self.messages.append((list(to), subject, body))


class FakeFetcher:
    """Returns queued snapshots, or raises queued exceptions, in order."""

    def __init__(self, *outcomes: Any) -> None:
        self.outcomes = list(outcomes)
        self.calls = 0
        self.closed = False

    async def fetch(self) -> TelemetrySnapshot:
        self.calls += 1
        outcome = self.outcomes[0] if len(self.outcomes) == 1 else self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    async def aclose(self) -> None:
        self.closed = True


def make_snapshot(water_level: float = 30, water_temp: float = 26, tds: float = 300) -> TelemetrySnapshot:
    return TelemetrySnapshot(
        pond_id=1,
        water_level=water_level,
        water_temp=water_temp,
        tds=tds,
        captured_at=datetime(2026, 10, 18, 13, 50, tzinfo=timezone.utc),
    )


@pytest.fixture
def engine():
    engine = build_engine("sqlite://")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def repository(engine) -> PondRepository:
    return PondRepository(ResilientExecutor(engine))


@pytest.fixture
def seed(engine):
    """Insert rows: ``seed(Threshold(...), Worker(...))``."""

    def _seed(*rows: Any) -> None:
        with Session(engine) as session:
            for row in rows:
                session.add(row)
            session.commit()

    return _seed


@pytest.fixture
def default_thresholds() -> Threshold:
    return Threshold(
        min_water_level=10,
        max_water_level=50,
        min_temperature=20,
        max_temperature=32,
        min_tds=0,
        max_tds=500,
    )


@pytest.fixture
def broadcaster() -> FakeBroadcaster:
    return FakeBroadcaster()


@pytest.fixture
def push_client() -> FakePushClient:
    return FakePushClient()


@pytest.fixture
def mailer() -> FakeMailer:
    return FakeMailer()


@pytest.fixture
def dispatcher(broadcaster, push_client, mailer) -> NotificationDispatcher:
    return NotificationDispatcher(broadcaster, push_client, mailer)


@pytest.fixture
def reminders() -> ReminderStore:
    return ReminderStore()


@pytest.fixture
def make_scheduler(repository, reminders, dispatcher):
    def _make(fetcher: Any = None, **kwargs: Any) -> MonitorScheduler:
        return MonitorScheduler(
            fetcher=fetcher or FakeFetcher(make_snapshot()),
            repository=repository,
            reminders=reminders,
            dispatcher=dispatcher,
            **kwargs,
        )

    return _make


def feeding(feeding_id: int, pond_id: int, at: str) -> FeedingSchedule:
    return FeedingSchedule(feeding_id=feeding_id, pond_id=pond_id, feeding_time=time.fromisoformat(at))


def worker(name: str, email: str | None) -> Worker:
    return Worker(name=name, email=email, mobile_no="0700000000")
