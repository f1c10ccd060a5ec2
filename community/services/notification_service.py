"""
Outbound email for watcher notifications.

When the SMTP transport is not configured every call is a silent no-op,
matching how the service behaves on developer machines.
"""

import smtplib
from collections.abc import Iterable
from email.message import EmailMessage
from typing import Protocol

from community.config import Settings
from community.logging import get_logger, log_timing

logger = get_logger("notifications")


class Notifier(Protocol):
    def notify(self, recipients: Iterable[str], subject: str, html: str) -> None: ...


class EmailNotifier:
    """
    SMTP-backed notifier.

    Usage:
        notifier = EmailNotifier.from_settings(get_settings())
        notifier.notify({"a@example.com"}, "Subject", "<p>Body</p>")
    """

    def __init__(
        self,
        host: str | None,
        port: int | None,
        username: str | None,
        password: str | None,
        sender: str = "no-reply@example.com",
        use_tls: bool = True,
        timeout: float = 10.0,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.sender = sender
        self.use_tls = use_tls
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "EmailNotifier":
        return cls(
            host=settings.email_host,
            port=settings.email_port,
            username=settings.email_user,
            password=settings.email_password,
            sender=settings.email_from,
            use_tls=settings.email_use_tls,
            timeout=settings.email_timeout_seconds,
        )

    @property
    def is_configured(self) -> bool:
        return all((self.host, self.port, self.username, self.password))

    def notify(self, recipients: Iterable[str], subject: str, html: str) -> None:
        addresses = sorted({r for r in recipients if r})
        if not addresses or not self.is_configured:
            return
        self._send(addresses, subject, html)

    def build_message(self, recipients: list[str], subject: str, html: str) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = ", ".join(recipients)
        message["Subject"] = subject
        message.set_content("This message requires an HTML capable mail client.")
        message.add_alternative(html, subtype="html")
        return message

    @log_timing("email_dispatch", logger=logger)
    def _send(self, recipients: list[str], subject: str, html: str) -> None:
        message = self.build_message(recipients, subject, html)
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
            if self.use_tls:
                smtp.starttls()
            smtp.login(self.username, self.password)
            smtp.send_message(message)
        logger.info("email_sent", recipient_count=len(recipients))
