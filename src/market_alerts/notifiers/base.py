"""Base notification sender classes."""
from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass
class NotificationResult:
    """Result of a notification attempt."""

    success: bool
    channel: str
    error: str | None = None


class NotificationSender(ABC):
    """Delivers one message to one destination.

    Implementations report delivery problems through NotificationResult rather
    than raising; callers still guard against unexpected exceptions.
    """

    channel: str = "unknown"

    @abstractmethod
    async def send(
        self, address: str, subject: str, body: str, html: str | None = None
    ) -> NotificationResult:
        """Send a message.

        Args:
            address: Destination (an e-mail address for the e-mail sender).
            subject: Short subject line.
            body: Plain text body.
            html: Optional HTML alternative.

        Returns:
            NotificationResult indicating success or failure.
        """
