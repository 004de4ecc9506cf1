"""Firebase Cloud Messaging client, resolved once at startup."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Mapping, Protocol, Sequence

import firebase_admin
from firebase_admin import credentials, messaging
from firebase_admin.exceptions import FirebaseError

from pondwatch.core.config import Settings
from pondwatch.core.errors import DeliveryError

logger = logging.getLogger(__name__)

FIREBASE_APP_NAME = "pondwatch"


class PushClient(Protocol):
    def send_to_topic(self, topic: str, title: str, body: str, data: Mapping[str, str]) -> str: ...

    def subscribe(self, tokens: Sequence[str], topic: str) -> None: ...


class FirebasePushClient:
    """Topic-based sends through the Firebase Admin SDK (blocking calls)."""

    def __init__(self, app: firebase_admin.App) -> None:
        self.app = app

    def send_to_topic(self, topic: str, title: str, body: str, data: Mapping[str, str]) -> str:
        message = messaging.Message(
            notification=messaging.Notification(title=title, body=body),
            data={key: str(value) for key, value in data.items()},
            topic=topic,
        )
        try:
            return messaging.send(message, app=self.app)
        except (FirebaseError, ValueError) as exc:
            raise DeliveryError("push", f"FCM send to topic {topic} failed: {exc}") from exc

    def subscribe(self, tokens: Sequence[str], topic: str) -> None:
        try:
            response = messaging.subscribe_to_topic(list(tokens), topic, app=self.app)
        except (FirebaseError, ValueError) as exc:
            raise DeliveryError("push", f"FCM topic subscription failed: {exc}") from exc
        if response.failure_count:
            reasons = ", ".join(error.reason for error in response.errors)
            raise DeliveryError("push", f"{response.failure_count} token(s) not subscribed to {topic}: {reasons}")


def resolve_push_client(config: Settings) -> FirebasePushClient | None:
    """Pick one credential source from settings and initialise Firebase.

    Order: inline service-account JSON, then a credentials file, then
    application-default credentials when explicitly enabled. Returns ``None``
    (push disabled) when nothing is configured or initialisation fails.
    """

    try:
        credential = _resolve_credential(config)
    except (ValueError, OSError) as exc:
        logger.error("Invalid Firebase credentials; push disabled: %s", exc)
        return None
    if credential is None:
        logger.warning(
            "No Firebase credentials configured; set FIREBASE_SERVICE_ACCOUNT or "
            "FIREBASE_CREDENTIALS_PATH to enable push"
        )
        return None

    try:
        app = firebase_admin.get_app(FIREBASE_APP_NAME)
    except ValueError:
        try:
            app = firebase_admin.initialize_app(credential, name=FIREBASE_APP_NAME)
        except Exception as exc:  # credential lookup errors differ per source
            logger.error("Failed to initialise Firebase Admin; push disabled: %s", exc)
            return None
    logger.info("Firebase Admin initialised (project=%s)", app.project_id)
    return FirebasePushClient(app)


def _resolve_credential(config: Settings) -> credentials.Base | None:
    if config.firebase_service_account:
        return credentials.Certificate(json.loads(config.firebase_service_account))
    if config.firebase_credentials_path:
        path = Path(config.firebase_credentials_path).expanduser()
        if not path.exists():
            raise ValueError(f"Firebase credentials file not found: {path}")
        return credentials.Certificate(str(path))
    if config.firebase_use_application_default:
        return credentials.ApplicationDefault()
    return None


__all__ = ["PushClient", "FirebasePushClient", "resolve_push_client", "FIREBASE_APP_NAME"]
