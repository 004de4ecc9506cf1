"""Database models."""

from .feeding import FeedingSchedule
from .sensors import SensorReading
from .thresholds import Threshold
from .worker import DeviceToken, Worker

__all__ = [
    "FeedingSchedule",
    "SensorReading",
    "Threshold",
    "DeviceToken",
    "Worker",
]
