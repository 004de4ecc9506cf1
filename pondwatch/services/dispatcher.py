"""Fan reminders and alerts out to realtime, push and email channels."""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Callable, Protocol, Sequence, Union

from prometheus_client import Counter

from pondwatch.core.errors import DeliveryError
from pondwatch.services.history import DispatchHistory
from pondwatch.services.mailer import Mailer
from pondwatch.services.push import PushClient
from pondwatch.services.reminders import Reminder
from pondwatch.services.thresholds import AlertCondition

logger = logging.getLogger(__name__)

DISPATCH_RESULTS = Counter(
    "pondwatch_dispatch_results_total",
    "Notification channel attempts by channel and outcome.",
    ["channel", "status"],
)

FEEDING_TITLE = "Feeding Reminder"
ALERT_TITLE = "Pond Condition Alert"


class Broadcaster(Protocol):
    async def emit(self, event: str, payload: Any) -> int: ...


class Channel(str, Enum):
    REALTIME = "realtime"
    PUSH = "push"
    EMAIL = "email"


class DeliveryStatus(str, Enum):
    SENT = "sent"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class ChannelResult:
    channel: Channel
    status: DeliveryStatus
    detail: str | None = None

    def as_dict(self) -> dict[str, Any]:
        return {"channel": self.channel.value, "status": self.status.value, "detail": self.detail}


@dataclass
class DispatchReport:
    kind: str
    summary: str
    results: list[ChannelResult] = field(default_factory=list)
    dispatched_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def status_for(self, channel: Channel) -> DeliveryStatus | None:
        for result in self.results:
            if result.channel == channel:
                return result.status
        return None

    @property
    def failures(self) -> list[ChannelResult]:
        return [r for r in self.results if r.status == DeliveryStatus.FAILED]

    def as_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "summary": self.summary,
            "dispatched_at": self.dispatched_at.isoformat(),
            "results": [r.as_dict() for r in self.results],
        }


Payload = Union[Reminder, Sequence[AlertCondition]]


@dataclass(frozen=True)
class _Notice:
    kind: str
    title: str
    body: str
    event: str
    event_payload: Any
    topic: str
    data: dict[str, str]


class NotificationDispatcher:
    """Attempt every channel independently and report per-channel outcomes.

    ``dispatch`` never raises because a channel failed: a push outage must
    not hold back the realtime broadcast or the email. A missing push client
    or mailer is reported as ``skipped`` rather than ``failed``.
    """

    def __init__(
        self,
        broadcaster: Broadcaster,
        push_client: PushClient | None = None,
        mailer: Mailer | None = None,
        *,
        feeding_topic: str = "feeding",
        alert_topic: str = "all",
        feeding_event: str = "feeding-reminder",
        alert_event: str = "pond-alert",
        history: DispatchHistory | None = None,
    ) -> None:
        self.broadcaster = broadcaster
        self.push_client = push_client
        self.mailer = mailer
        self.feeding_topic = feeding_topic
        self.alert_topic = alert_topic
        self.feeding_event = feeding_event
        self.alert_event = alert_event
        self.history = history if history is not None else DispatchHistory()

    async def dispatch(self, payload: Payload, recipients: Sequence[str] = ()) -> DispatchReport:
        notice = self._build_notice(payload)
        recipients = [r for r in recipients if r]

        results = await asyncio.gather(
            self._attempt(Channel.REALTIME, lambda: self._send_realtime(notice)),
            self._attempt(Channel.PUSH, lambda: self._send_push(notice)),
            self._attempt(Channel.EMAIL, lambda: self._send_email(notice, recipients)),
        )
        report = DispatchReport(kind=notice.kind, summary=notice.body, results=list(results))
        self.history.add(report)
        logger.info(
            "Dispatched %s: %s",
            notice.kind,
            ", ".join(f"{r.channel.value}={r.status.value}" for r in report.results),
        )
        return report

    def _build_notice(self, payload: Payload) -> _Notice:
        if isinstance(payload, Reminder):
            return _Notice(
                kind="reminder",
                title=FEEDING_TITLE,
                body=payload.message,
                event=self.feeding_event,
                event_payload=payload.as_dict(),
                topic=self.feeding_topic,
                data={
                    "feeding_id": str(payload.feeding_id),
                    "pond_id": str(payload.pond_id),
                    "reminder_time": payload.reminder_time,
                },
            )

        conditions = list(payload)
        if not conditions:
            raise ValueError("dispatch() needs a reminder or at least one alert condition")
        messages = [c.message for c in conditions]
        return _Notice(
            kind="alert",
            title=ALERT_TITLE,
            body="\n".join(messages),
            event=self.alert_event,
            event_payload={"alerts": [c.as_dict() for c in conditions]},
            topic=self.alert_topic,
            data={"alerts": json.dumps(messages)},
        )

    async def _attempt(
        self, channel: Channel, send: Callable[[], Awaitable[ChannelResult]]
    ) -> ChannelResult:
        try:
            result = await send()
        except DeliveryError as exc:
            result = ChannelResult(channel, DeliveryStatus.FAILED, str(exc))
        except Exception as exc:  # a broken channel must not take the others down
            result = ChannelResult(channel, DeliveryStatus.FAILED, f"{type(exc).__name__}: {exc}")

        if result.status == DeliveryStatus.FAILED:
            level = logging.ERROR if channel == Channel.EMAIL else logging.WARNING
            logger.log(level, "%s delivery failed: %s", channel.value, result.detail)
        DISPATCH_RESULTS.labels(channel=channel.value, status=result.status.value).inc()
        return result

    async def _send_realtime(self, notice: _Notice) -> ChannelResult:
        delivered = await self.broadcaster.emit(notice.event, notice.event_payload)
        return ChannelResult(Channel.REALTIME, DeliveryStatus.SENT, f"{notice.event} to {delivered} client(s)")

    async def _send_push(self, notice: _Notice) -> ChannelResult:
        if self.push_client is None:
            return ChannelResult(Channel.PUSH, DeliveryStatus.SKIPPED, "push provider not initialised")
        message_id = await asyncio.to_thread(
            self.push_client.send_to_topic, notice.topic, notice.title, notice.body, notice.data
        )
        return ChannelResult(Channel.PUSH, DeliveryStatus.SENT, f"topic {notice.topic}: {message_id}")

    async def _send_email(self, notice: _Notice, recipients: list[str]) -> ChannelResult:
        if self.mailer is None:
            return ChannelResult(Channel.EMAIL, DeliveryStatus.SKIPPED, "no mail transport configured")
        if not recipients:
            return ChannelResult(Channel.EMAIL, DeliveryStatus.SKIPPED, "no recipients")
        await asyncio.to_thread(self.mailer.send, recipients, notice.title, notice.body)
        return ChannelResult(Channel.EMAIL, DeliveryStatus.SENT, f"{len(recipients)} recipient(s)")


__all__ = [
    "Channel",
    "ChannelResult",
    "DeliveryStatus",
    "DispatchReport",
    "NotificationDispatcher",
]
