"""Bounded telemetry fetch from the pond controller."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field

from pondwatch.core.errors import FetchTimeoutError, TransportError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0


class TelemetrySnapshot(BaseModel):
    """One reading from the controller's ``/sensors`` endpoint."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    pond_id: int = 1
    water_level: float = Field(alias="waterLevelInside")
    water_temp: float = Field(alias="waterTemp")
    tds: float
    ph: float | None = Field(default=None, alias="pH")
    captured_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def to_wire(self) -> dict[str, Any]:
        return {
            "pondId": self.pond_id,
            "waterLevelInside": self.water_level,
            "waterTemp": self.water_temp,
            "tds": self.tds,
            "pH": self.ph,
            "capturedAt": self.captured_at.isoformat(),
        }


class TelemetryFetcher:
    """Issue one GET per call, hard-bounded by ``timeout`` seconds.

    No retries here; the scheduler simply tries again on its next tick.
    """

    def __init__(
        self,
        url: str,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        pond_id: int = 1,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self.pond_id = pond_id
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def fetch(self) -> TelemetrySnapshot:
        try:
            # wait_for cancels the in-flight request once the deadline passes
            response = await asyncio.wait_for(self._client.get(self.url), timeout=self.timeout)
        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            raise FetchTimeoutError(self.timeout, self.url) from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"Telemetry request failed: {exc}") from exc

        if not response.is_success:
            body = response.text
            raise TransportError(
                f"HTTP {response.status_code}: {body[:200]}",
                status=response.status_code,
                body=body,
            )

        try:
            payload = response.json()
            if not isinstance(payload, dict):
                raise ValueError(f"expected a JSON object, got {type(payload).__name__}")
            snapshot = TelemetrySnapshot.model_validate({**payload, "pond_id": self.pond_id})
        except ValueError as exc:
            raise TransportError(
                f"Malformed telemetry payload: {exc}",
                status=response.status_code,
                body=response.text,
            ) from exc

        logger.debug("Fetched telemetry from %s: %s", self.url, snapshot)
        return snapshot

    async def aclose(self) -> None:
        await self._client.aclose()


__all__ = ["TelemetryFetcher", "TelemetrySnapshot", "DEFAULT_TIMEOUT_SECONDS"]
