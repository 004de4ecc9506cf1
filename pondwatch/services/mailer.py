"""SMTP transport for alert email."""

from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage
from typing import Protocol, Sequence

from pondwatch.core.config import Settings
from pondwatch.core.errors import DeliveryError

logger = logging.getLogger(__name__)


class Mailer(Protocol):
    def send(self, to: Sequence[str], subject: str, body: str) -> None: ...


class SmtpMailer:
    def __init__(
        self,
        host: str,
        port: int = 587,
        sender: str = "",
        username: str | None = None,
        password: str | None = None,
        use_tls: bool = True,
        timeout: float = 20.0,
    ) -> None:
        self.host = host
        self.port = port
        self.sender = sender
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.timeout = timeout

    def send(self, to: Sequence[str], subject: str, body: str) -> None:
        msg = EmailMessage()
        msg["From"] = self.sender
        msg["To"] = ", ".join(to)
        msg["Subject"] = subject
        msg.set_content(body)
        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
                if self.use_tls:
                    smtp.starttls()
                if self.username:
                    smtp.login(self.username, self.password or "")
                smtp.send_message(msg)
        except (smtplib.SMTPException, OSError) as exc:
            raise DeliveryError("email", f"SMTP delivery via {self.host}:{self.port} failed: {exc}") from exc
        logger.debug("Sent '%s' to %s recipient(s)", subject, len(to))


def build_mailer(config: Settings) -> SmtpMailer | None:
    sender = config.email_sender or config.email_user
    if not config.email_host or not sender:
        logger.warning("No email sender configured; alert email disabled")
        return None
    return SmtpMailer(
        host=config.email_host,
        port=config.email_port,
        sender=sender,
        username=config.email_user,
        password=config.email_pass,
        use_tls=config.email_use_tls,
        timeout=config.email_timeout,
    )


__all__ = ["Mailer", "SmtpMailer", "build_mailer"]
