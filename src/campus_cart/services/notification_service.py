"""Out-of-band email notifications.

Sending never blocks or fails a lifecycle transition: callers hand the
message to :func:`notify_in_background` after their commit, and any delivery
error is logged and dropped.
"""

import asyncio
import logging
import smtplib
from email.message import EmailMessage

from campus_cart.core.config import settings

logger = logging.getLogger(__name__)

# Strong references to in-flight notification tasks
_pending: set[asyncio.Task] = set()


class EmailNotifier:
    """SMTP notifier; a no-op when SMTP_HOST is not configured."""

    def __init__(
        self,
        host: str | None = None,
        port: int | None = None,
        username: str | None = None,
        password: str | None = None,
        sender: str | None = None,
    ):
        self.host = settings.SMTP_HOST if host is None else host
        self.port = port or settings.SMTP_PORT
        self.username = settings.SMTP_USERNAME if username is None else username
        self.password = settings.SMTP_PASSWORD if password is None else password
        self.sender = sender or settings.EMAIL_FROM

    @property
    def enabled(self) -> bool:
        return bool(self.host)

    async def send(self, to: str, subject: str, body: str) -> None:
        if not self.enabled:
            logger.info(f"Email disabled, skipping '{subject}' to {to}")
            return
        await asyncio.to_thread(self._send_sync, to, subject, body)
        logger.info(f"Email '{subject}' sent to {to}")

    def _send_sync(self, to: str, subject: str, body: str) -> None:
        msg = EmailMessage()
        msg["From"] = self.sender
        msg["To"] = to
        msg["Subject"] = subject
        msg.set_content(body)

        with smtplib.SMTP_SSL(self.host, self.port, timeout=10) as server:
            if self.username:
                server.login(self.username, self.password)
            server.send_message(msg)


async def _deliver(notifier: EmailNotifier, to: str, subject: str, body: str) -> None:
    try:
        await notifier.send(to, subject, body)
    except Exception:
        logger.exception(f"Failed to send email '{subject}' to {to}")


def notify_in_background(
    notifier: EmailNotifier, to: str, subject: str, body: str
) -> asyncio.Task:
    """Schedule an email without waiting for it."""
    task = asyncio.create_task(_deliver(notifier, to, subject, body))
    _pending.add(task)
    task.add_done_callback(_pending.discard)
    return task
