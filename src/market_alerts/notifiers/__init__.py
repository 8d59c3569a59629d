"""Notification senders for triggered alerts."""
from market_alerts.config import Settings
from market_alerts.notifiers.base import NotificationResult, NotificationSender
from market_alerts.notifiers.email import EmailSender
from market_alerts.notifiers.logging_sender import LoggingSender


def build_notifier(settings: Settings) -> NotificationSender:
    """SMTP sender when SMTP_HOST is set, otherwise a logging sender."""
    if settings.smtp_host:
        return EmailSender(
            smtp_host=settings.smtp_host,
            smtp_port=settings.smtp_port,
            from_address=settings.mail_from,
            smtp_user=settings.smtp_user,
            smtp_password=settings.smtp_password,
        )
    return LoggingSender()


__all__ = [
    "EmailSender",
    "LoggingSender",
    "NotificationResult",
    "NotificationSender",
    "build_notifier",
]
