"""HTTP endpoints driving the monitoring engine."""

from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from pondwatch import create_app
from pondwatch.core.config import Settings
from pondwatch.core.errors import FetchTimeoutError, TransportError
from pondwatch.services.reminders import FeedingScheduleEntry
from pondwatch.services.runtime import build_runtime

from conftest import FakeFetcher, FakePushClient, make_snapshot, worker


@pytest.fixture
def config() -> Settings:
    return Settings(database_url="sqlite://", scheduler_enabled=False, metrics_enabled=False)


@pytest.fixture
def build_client(config, engine):
    def _build(fetcher=None, push_client=None):
        runtime = build_runtime(
            config,
            engine,
            fetcher=fetcher or FakeFetcher(make_snapshot()),
            push_client=push_client,
            mailer=None,
        )
        return TestClient(create_app(config, runtime=runtime)), runtime

    return _build


def test_health(build_client):
    client, _ = build_client()
    with client:
        body = client.get("/api/health").json()
    assert body["status"] == "ok"
    assert body["scheduler_running"] is False
    assert body["push_enabled"] is False


def test_list_and_acknowledge_reminders(build_client):
    client, runtime = build_client()
    runtime.reminders.try_create(
        FeedingScheduleEntry(feeding_id=5, pond_id=1, feeding_time=datetime(2026, 1, 1, 14).time()),
        datetime(2026, 10, 18, 13, 50),
    )

    with client:
        listed = client.get("/api/reminders").json()
        first = client.post("/api/reminders/acknowledge", json={"feeding_id": 5}).json()
        second = client.post("/api/reminders/acknowledge", json={"feeding_id": 5}).json()
        missing = client.post("/api/reminders/acknowledge", json={})

    assert [r["feeding_id"] for r in listed] == [5]
    assert first["acknowledged"] is True
    assert second == {"success": True, "acknowledged": False, "message": "No active reminder for 5"}
    assert missing.status_code == 400


def test_manual_check_returns_report(build_client, seed, default_thresholds):
    seed(default_thresholds, worker("Ama", "ama@pond.test"))
    client, _ = build_client(fetcher=FakeFetcher(make_snapshot(water_level=5)))

    with client:
        response = client.post("/api/alerts/check")
        history = client.get("/api/alerts/history").json()

    body = response.json()
    assert response.status_code == 200
    assert body["status"] == "alerted"
    assert body["alerts"][0]["message"] == "Water Level: 5 (Range: 10-50)"
    statuses = {r["channel"]: r["status"] for r in body["report"]["results"]}
    assert statuses == {"realtime": "sent", "push": "skipped", "email": "skipped"}
    assert len(history["reports"]) == 1


@pytest.mark.parametrize(
    "error, status_code, kind",
    [
        (FetchTimeoutError(30.0), 504, "timeout"),
        (TransportError("HTTP 500: boom", status=500), 502, "transport"),
    ],
)
def test_manual_check_errors_are_structured(build_client, error, status_code, kind):
    client, _ = build_client(fetcher=FakeFetcher(error))

    with client:
        response = client.post("/api/alerts/check")

    assert response.status_code == status_code
    assert response.json()["error"] == kind


def test_manual_check_without_thresholds(build_client):
    client, _ = build_client()
    with client:
        response = client.post("/api/alerts/check")
    assert response.status_code == 409
    assert response.json()["error"] == "configuration"


def test_live_sensor_snapshot(build_client):
    client, _ = build_client(fetcher=FakeFetcher(make_snapshot(water_level=22)))
    with client:
        body = client.get("/api/sensors/live").json()
    assert body["waterLevelInside"] == 22


def test_register_token_survives_subscription_failure(build_client):
    push = FakePushClient(fail_subscribe=True)
    client, _ = build_client(push_client=push)

    with client:
        response = client.post("/api/devices/register-token", json={"token": "tok-1", "worker_id": 3})
        missing = client.post("/api/devices/register-token", json={})

    assert response.status_code == 200
    assert response.json() == {"success": True, "subscribed": False}
    assert missing.status_code == 400


def test_register_token_subscribes_to_feeding(build_client):
    push = FakePushClient()
    client, _ = build_client(push_client=push)

    with client:
        body = client.post("/api/devices/register-token", json={"token": "tok-1"}).json()

    assert body["subscribed"] is True
    assert push.subscriptions == [(["tok-1"], "feeding")]


def test_test_push_requires_provider(build_client):
    client, _ = build_client()
    with client:
        assert client.post("/api/devices/test-push").status_code == 503


def test_logs_endpoint_rejects_unknown_level(build_client):
    client, _ = build_client()
    with client:
        assert client.get("/api/logs", params={"level": "LOUD"}).status_code == 400
        assert "logs" in client.get("/api/logs", params={"level": "WARNING"}).json()
