"""Worker contact and device registration models."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlmodel import Field, SQLModel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Worker(SQLModel, table=True):
    __tablename__ = "worker"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=128)
    email: str | None = Field(default=None, max_length=255, index=True)
    mobile_no: str | None = Field(default=None, max_length=32)


class DeviceToken(SQLModel, table=True):
    """Mobile push registration; one row per device token."""

    __tablename__ = "device_tokens"

    id: Optional[int] = Field(default=None, primary_key=True)
    worker_id: int | None = Field(default=None, index=True)
    token: str = Field(max_length=255, unique=True, index=True)
    created_at: datetime = Field(default_factory=_utcnow, nullable=False)


__all__ = ["Worker", "DeviceToken"]
