"""SMTP notifier (STARTTLS on 587 or SSL on 465), run off the event loop."""
import asyncio
import logging
import smtplib
from email.message import EmailMessage
from email.utils import formataddr

from garden_alerts.notifiers.notifier_abc import NotifierABC, SendResult

logger = logging.getLogger(__name__)


class SmtpNotifier(NotifierABC):
    """Sends HTML email through an authenticated SMTP server.

    smtplib is blocking, so each delivery runs in a worker thread with a
    connection timeout.
    """

    def __init__(
        self,
        host: str,
        port: int,
        username: str,
        password: str,
        *,
        sender_name: str = "Grow A Garden Bot",
        timeout: float = 30.0,
    ) -> None:
        self._host = host
        self._port = port
        self._username = username
        self._password = password
        self._sender = formataddr((sender_name, username))
        self._timeout = timeout

    def build_message(self, recipient: str, subject: str, html_body: str) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self._sender
        message["To"] = recipient
        message["Subject"] = subject
        message.set_content("This message requires an HTML-capable mail client.")
        message.add_alternative(html_body, subtype="html")
        return message

    def _deliver(self, message: EmailMessage) -> None:
        if self._port == 465:
            server: smtplib.SMTP = smtplib.SMTP_SSL(self._host, self._port, timeout=self._timeout)
        else:
            server = smtplib.SMTP(self._host, self._port, timeout=self._timeout)
        with server:
            if self._port != 465:
                server.starttls()
            server.login(self._username, self._password)
            server.send_message(message)

    async def send(self, recipient: str, subject: str, html_body: str) -> SendResult:
        message = self.build_message(recipient, subject, html_body)
        try:
            await asyncio.to_thread(self._deliver, message)
        except smtplib.SMTPAuthenticationError as exc:
            logger.error(
                "Authentication failed sending to %s: %s. Ensure the SMTP password is a "
                "Gmail App Password (Google Account > Security > 2-Step Verification > App Passwords).",
                recipient,
                exc,
            )
            return SendResult.permanent(str(exc), auth_failure=True)
        except smtplib.SMTPRecipientsRefused as exc:
            logger.error("Invalid email address %s: %s", recipient, exc)
            return SendResult.permanent(str(exc))
        except smtplib.SMTPResponseException as exc:
            if exc.smtp_code >= 500:
                logger.error("SMTP server rejected email to %s: %s", recipient, exc)
                return SendResult.permanent(str(exc))
            logger.warning("SMTP server deferred email to %s: %s", recipient, exc)
            return SendResult.transient(str(exc))
        except (smtplib.SMTPException, OSError) as exc:
            logger.warning("Transport error sending email to %s: %s", recipient, exc)
            return SendResult.transient(f"{type(exc).__name__}: {exc}")
        logger.info("Email sent to %s", recipient)
        return SendResult.delivered()
