"""Reconnect-once wrapper around database units of work."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, TypeVar

from prometheus_client import Counter
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DBAPIError, DisconnectionError
from sqlmodel import Session

from pondwatch.core.errors import StoreError

logger = logging.getLogger(__name__)

T = TypeVar("T")

STORE_RECONNECTS = Counter(
    "pondwatch_store_reconnects_total",
    "Reconnect attempts after a lost database connection, by outcome.",
    ["outcome"],
)

# MySQL: server gone away, lost connection during query, lost connection to server.
_LOST_CONNECTION_CODES = {2006, 2013, 2055}
_LOST_CONNECTION_MARKERS = (
    "econnreset",
    "connection reset",
    "connection lost",
    "lost connection",
    "server has gone away",
    "server closed the connection",
    "connection was closed",
    "protocol_connection_lost",
)


def is_connection_lost(exc: BaseException) -> bool:
    """Whether ``exc`` means the connection dropped (as opposed to a bad query)."""

    if isinstance(exc, DisconnectionError):
        return True
    if isinstance(exc, ConnectionResetError):
        return True
    if isinstance(exc, DBAPIError):
        if exc.connection_invalidated:
            return True
        args = getattr(exc.orig, "args", ()) or ()
        if args and args[0] in _LOST_CONNECTION_CODES:
            return True
        if isinstance(exc.orig, ConnectionResetError):
            return True
        text = str(exc.orig).lower()
        return any(marker in text for marker in _LOST_CONNECTION_MARKERS)
    return False


class ResilientExecutor:
    """Run a unit of work in a fresh session, reconnecting once on a dropped connection.

    A second failure after the reconnect surfaces as :class:`StoreError`.
    Every other exception propagates unchanged. Callers on the event loop use
    :meth:`run_async`, which moves the blocking work to a thread.
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def run(self, work: Callable[[Session], T]) -> T:
        try:
            return self._run_once(work)
        except Exception as exc:
            if not is_connection_lost(exc):
                raise
            logger.warning("Database connection lost (%s); reconnecting", exc)

        self.engine.dispose()
        try:
            result = self._run_once(work)
        except Exception as exc:
            STORE_RECONNECTS.labels(outcome="failed").inc()
            logger.error("Database reconnect failed: %s", exc)
            raise StoreError(f"Database unavailable after reconnect: {exc}") from exc
        STORE_RECONNECTS.labels(outcome="recovered").inc()
        logger.info("Database connection re-established")
        return result

    async def run_async(self, work: Callable[[Session], T]) -> T:
        return await asyncio.to_thread(self.run, work)

    def _run_once(self, work: Callable[[Session], T]) -> T:
        with Session(self.engine) as session:
            return work(session)


__all__ = ["ResilientExecutor", "is_connection_lost"]
