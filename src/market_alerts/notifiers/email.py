"""E-mail SMTP notification sender."""
import asyncio
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from market_alerts.notifiers.base import NotificationResult, NotificationSender

logger = logging.getLogger(__name__)


class EmailSender(NotificationSender):
    """Sends notifications via SMTP. smtplib is blocking, so sends run in a thread."""

    channel = "email"

    def __init__(
        self,
        smtp_host: str,
        smtp_port: int,
        from_address: str,
        smtp_user: str | None = None,
        smtp_password: str | None = None,
        timeout: float = 30.0,
    ) -> None:
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.from_address = from_address
        self.smtp_user = smtp_user
        self.smtp_password = smtp_password
        self.timeout = timeout

    def _create_message(
        self, address: str, subject: str, body: str, html: str | None
    ) -> MIMEMultipart:
        message = MIMEMultipart("alternative")
        message["Subject"] = subject
        message["From"] = self.from_address
        message["To"] = address
        message.attach(MIMEText(body, "plain"))
        if html:
            message.attach(MIMEText(html, "html"))
        return message

    def _send_sync(self, message: MIMEMultipart) -> None:
        with smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=self.timeout) as server:
            if self.smtp_user and self.smtp_password:
                server.starttls()
                server.login(self.smtp_user, self.smtp_password)
            server.send_message(message)

    async def send(
        self, address: str, subject: str, body: str, html: str | None = None
    ) -> NotificationResult:
        message = self._create_message(address, subject, body, html)
        try:
            await asyncio.to_thread(self._send_sync, message)
        except smtplib.SMTPAuthenticationError as e:
            return NotificationResult(
                success=False, channel=self.channel, error=f"Authentication failed: {e}"
            )
        except (smtplib.SMTPException, OSError) as e:
            return NotificationResult(
                success=False, channel=self.channel, error=f"SMTP error: {e}"
            )
        logger.info("E-mail sent to %s: %s", address, subject)
        return NotificationResult(success=True, channel=self.channel)
