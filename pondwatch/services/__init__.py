"""Monitoring engine: fetch, evaluate, deduplicate, dispatch, schedule."""

from .dispatcher import Channel, DeliveryStatus, DispatchReport, NotificationDispatcher
from .reminders import FeedingScheduleEntry, Reminder, ReminderStore
from .scheduler import ConditionCheckResult, FeedingScanResult, MonitorScheduler
from .telemetry import TelemetryFetcher, TelemetrySnapshot
from .thresholds import AlertCondition, MetricRange, ThresholdConfig, evaluate

__all__ = [
    "AlertCondition",
    "Channel",
    "ConditionCheckResult",
    "DeliveryStatus",
    "DispatchReport",
    "FeedingScanResult",
    "FeedingScheduleEntry",
    "MetricRange",
    "MonitorScheduler",
    "NotificationDispatcher",
    "Reminder",
    "ReminderStore",
    "TelemetryFetcher",
    "TelemetrySnapshot",
    "ThresholdConfig",
    "evaluate",
]
