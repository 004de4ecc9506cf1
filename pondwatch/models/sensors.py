"""Archived telemetry readings."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlmodel import Field, SQLModel


class SensorReading(SQLModel, table=True):
    """Telemetry snapshot written verbatim by the archival job."""

    __tablename__ = "sensors_data"

    id: Optional[int] = Field(default=None, primary_key=True)
    pond_id: int = Field(index=True)
    water_level: float
    water_temp: float
    tds: float
    ph: float | None = None
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), nullable=False, index=True
    )


__all__ = ["SensorReading"]
