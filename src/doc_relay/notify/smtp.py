from __future__ import annotations

import logging
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Protocol

from starlette.concurrency import run_in_threadpool

from doc_relay.exceptions import NotificationError

from .settings import NotifySettings

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    async def send(self, recipient: str, url: str) -> None:
        ...


@dataclass
class SentNotification:
    recipient: str
    url: str


class NullNotifier:
    """Logs instead of delivering. Keeps what it 'sent' for tests/dev."""

    def __init__(self):
        self.sent: list[SentNotification] = []

    async def send(self, recipient: str, url: str) -> None:
        self.sent.append(SentNotification(recipient, url))
        logger.info("Notification for %s suppressed (null backend)", recipient)


class SmtpNotifier:
    def __init__(self, settings: NotifySettings):
        if not settings.smtp_host or not settings.sender:
            raise ValueError("NOTIFY_SMTP_HOST and NOTIFY_SENDER must be set for the smtp backend")
        self.settings = settings

    def build_message(self, recipient: str, url: str) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = self.settings.subject
        msg["From"] = self.settings.sender
        msg["To"] = recipient
        msg.set_content(f"Your document is ready for download:\n\n{url}\n")
        return msg

    def _deliver(self, msg: EmailMessage) -> None:
        s = self.settings
        with smtplib.SMTP(s.smtp_host, s.smtp_port, timeout=s.timeout_seconds) as server:
            if s.use_tls:
                server.starttls()
            if s.username:
                server.login(s.username, s.password.get_secret_value())
            server.send_message(msg)

    async def send(self, recipient: str, url: str) -> None:
        msg = self.build_message(recipient, url)
        try:
            await run_in_threadpool(self._deliver, msg)
        except (smtplib.SMTPException, OSError) as exc:
            logger.error("Notification to %s failed: %s", recipient, type(exc).__name__)
            raise NotificationError(
                f"Mail delivery failed: {type(exc).__name__}",
                operation="notify",
                identifier=recipient,
            ) from exc
        logger.info("Download link sent to %s", recipient)


def build_notifier(settings: NotifySettings) -> Notifier:
    if settings.backend == "smtp":
        return SmtpNotifier(settings)
    return NullNotifier()
