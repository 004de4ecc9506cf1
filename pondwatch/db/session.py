"""SQLModel engine and table creation."""

from __future__ import annotations

from typing import Any

from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine

from pondwatch.core.config import settings

# Imported for table registration on SQLModel.metadata.
from pondwatch import models  # noqa: F401


def build_engine(url: str) -> Engine:
    options: dict[str, Any] = {"echo": False, "pool_pre_ping": True}
    if url.startswith("sqlite"):
        options["connect_args"] = {"check_same_thread": False}
        if url in {"sqlite://", "sqlite:///:memory:"}:
            # One shared connection, otherwise every checkout sees an empty database.
            options["poolclass"] = StaticPool
    return create_engine(url, **options)


engine = build_engine(settings.database_url)


def init_db(bind: Engine | None = None) -> None:
    SQLModel.metadata.create_all(bind or engine)


__all__ = ["build_engine", "engine", "init_db"]
