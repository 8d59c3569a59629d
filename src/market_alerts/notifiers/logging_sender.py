"""Notification sender that only logs; used when SMTP is not configured."""
import logging

from market_alerts.notifiers.base import NotificationResult, NotificationSender

logger = logging.getLogger(__name__)


class LoggingSender(NotificationSender):
    channel = "log"

    async def send(
        self, address: str, subject: str, body: str, html: str | None = None
    ) -> NotificationResult:
        logger.info("Notification for %s: %s\n%s", address, subject, body)
        return NotificationResult(success=True, channel=self.channel)
