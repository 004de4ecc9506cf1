"""Safety threshold configuration."""

from __future__ import annotations

from typing import Optional

from sqlmodel import Field, SQLModel


class Threshold(SQLModel, table=True):
    """Operator-maintained bounds. Only the first row is used."""

    __tablename__ = "thresholds"

    id: Optional[int] = Field(default=None, primary_key=True)
    min_water_level: float | None = None
    max_water_level: float | None = None
    min_temperature: float | None = None
    max_temperature: float | None = None
    min_tds: float | None = None
    max_tds: float | None = None


__all__ = ["Threshold"]
