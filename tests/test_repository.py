"""Store queries against an in-memory database."""

from datetime import datetime, timedelta, timezone

import pytest
from sqlmodel import Session, select

from pondwatch.core.errors import ConfigurationError
from pondwatch.models import DeviceToken, SensorReading, Threshold

from conftest import feeding, make_snapshot, worker

LOOKAHEAD = timedelta(minutes=15)


def test_feeding_window_is_inclusive(repository, seed):
    seed(
        feeding(1, 1, "13:49:00"),
        feeding(2, 1, "13:50:00"),
        feeding(3, 2, "14:00:00"),
        feeding(4, 2, "14:05:00"),
        feeding(5, 3, "14:06:00"),
    )

    entries = repository.feeding_entries_due(datetime(2026, 10, 18, 13, 50), LOOKAHEAD)

    assert [e.feeding_id for e in entries] == [2, 3, 4]


def test_feeding_window_wraps_past_midnight(repository, seed):
    seed(
        feeding(1, 1, "00:05:00"),
        feeding(2, 1, "23:58:00"),
        feeding(3, 1, "12:00:00"),
    )

    entries = repository.feeding_entries_due(datetime(2026, 10, 18, 23, 55), LOOKAHEAD)

    assert [e.feeding_id for e in entries] == [2, 1]


def test_missing_threshold_row(repository):
    with pytest.raises(ConfigurationError):
        repository.load_thresholds()


def test_first_threshold_row_wins(repository, seed, default_thresholds):
    seed(default_thresholds, Threshold(min_water_level=0, max_water_level=1, min_temperature=0,
                                       max_temperature=1, min_tds=0, max_tds=1))

    config = repository.load_thresholds()

    assert (config.water_level.minimum, config.water_level.maximum) == (10, 50)


def test_worker_emails_skip_blank(repository, seed):
    seed(
        worker("Ama", "ama@pond.test"),
        worker("Kofi", None),
        worker("Esi", "   "),
        worker("Nia", " nia@pond.test "),
    )

    assert repository.worker_emails() == ["ama@pond.test", "nia@pond.test"]


def test_archive_snapshot(repository, engine):
    snapshot = make_snapshot(water_level=12.5, water_temp=27, tds=410)

    row = repository.archive_snapshot(snapshot)

    with Session(engine) as session:
        stored = session.get(SensorReading, row.id)
    assert stored.pond_id == 1
    assert (stored.water_level, stored.water_temp, stored.tds) == (12.5, 27, 410)
    assert stored.updated_at.replace(tzinfo=timezone.utc) == snapshot.captured_at


def test_device_token_upsert_is_idempotent(repository, engine):
    repository.upsert_device_token("tok-1", None)
    repository.upsert_device_token("tok-1", 4)

    with Session(engine) as session:
        rows = session.exec(select(DeviceToken)).all()
    assert len(rows) == 1
    assert rows[0].worker_id == 4
