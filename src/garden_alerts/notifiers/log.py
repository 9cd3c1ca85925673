"""Development notifier that only logs."""
import logging

from garden_alerts.notifiers.notifier_abc import NotifierABC, SendResult

logger = logging.getLogger(__name__)


class LogNotifier(NotifierABC):
    """Logs each message instead of sending it."""

    async def send(self, recipient: str, subject: str, html_body: str) -> SendResult:
        logger.info("Email (log) → %s: %s (%d bytes)", recipient, subject, len(html_body))
        return SendResult.delivered("logged")
