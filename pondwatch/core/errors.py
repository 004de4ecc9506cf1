"""Error taxonomy shared by the monitoring engine."""

from __future__ import annotations


class PondWatchError(Exception):
    """Base class for recoverable engine failures."""

    kind = "error"


class FetchTimeoutError(PondWatchError, TimeoutError):
    """A bounded external call exceeded its deadline."""

    kind = "timeout"

    def __init__(self, timeout: float, url: str | None = None) -> None:
        self.timeout = timeout
        self.url = url
        target = f" ({url})" if url else ""
        super().__init__(f"Request timed out after {timeout:g} seconds{target}")


class TransportError(PondWatchError):
    """The peer was reached (or not) but did not return a usable result."""

    kind = "transport"

    def __init__(self, message: str, status: int | None = None, body: str | None = None) -> None:
        self.status = status
        self.body = body
        super().__init__(message)


class ConfigurationError(PondWatchError):
    """Threshold or schedule configuration is missing or invalid."""

    kind = "configuration"


class StoreError(PondWatchError):
    """The database failed and a reconnect did not help."""

    kind = "store"


class DeliveryError(PondWatchError):
    """One notification channel failed to deliver."""

    kind = "delivery"

    def __init__(self, channel: str, message: str) -> None:
        self.channel = channel
        super().__init__(message)


__all__ = [
    "PondWatchError",
    "FetchTimeoutError",
    "TransportError",
    "ConfigurationError",
    "StoreError",
    "DeliveryError",
]
