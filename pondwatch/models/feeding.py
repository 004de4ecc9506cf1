"""Feeding schedule models."""

from __future__ import annotations

from datetime import time
from typing import Optional

from sqlmodel import Field, SQLModel


class FeedingSchedule(SQLModel, table=True):
    """Daily feeding slot for a pond; maintained outside the monitoring engine."""

    __tablename__ = "feeding_schedule"

    feeding_id: Optional[int] = Field(default=None, primary_key=True)
    pond_id: int = Field(index=True)
    feeding_time: time = Field(index=True)


__all__ = ["FeedingSchedule"]
