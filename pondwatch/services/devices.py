"""Mobile device token registration."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from pondwatch.core.errors import DeliveryError
from pondwatch.services.push import PushClient
from pondwatch.services.repository import PondRepository

logger = logging.getLogger(__name__)


@dataclass
class DeviceRegistration:
    token: str
    worker_id: int | None
    subscribed: bool


async def register_device_token(
    repository: PondRepository,
    push_client: PushClient | None,
    token: str,
    worker_id: int | None = None,
    topic: str = "feeding",
) -> DeviceRegistration:
    """Save the token, then try to subscribe it to the feeding topic.

    Store failures propagate. A failed subscription is logged and reported
    as ``subscribed=False``; the registration itself still succeeds.
    """

    row = await asyncio.to_thread(repository.upsert_device_token, token, worker_id)
    subscribed = False
    if push_client is None:
        logger.info("Push disabled; token %s saved without topic subscription", row.id)
    else:
        try:
            await asyncio.to_thread(push_client.subscribe, [token], topic)
            subscribed = True
            logger.info("Token %s subscribed to topic %s", row.id, topic)
        except DeliveryError as exc:
            logger.error("Failed to subscribe token %s to %s: %s", row.id, topic, exc)
    return DeviceRegistration(token=row.token, worker_id=row.worker_id, subscribed=subscribed)


__all__ = ["DeviceRegistration", "register_device_token"]
