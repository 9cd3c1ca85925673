"""Mail transports implementing NotifierABC."""
from garden_alerts.config import Settings
from garden_alerts.notifiers.log import LogNotifier
from garden_alerts.notifiers.notifier_abc import NotifierABC, SendResult, SendStatus
from garden_alerts.notifiers.smtp import SmtpNotifier


def create_notifier(settings: Settings) -> NotifierABC:
    """Notifier for the configured backend (log or smtp)."""
    if settings.notifier_backend == "smtp":
        return SmtpNotifier(
            settings.smtp_host,
            settings.smtp_port,
            settings.smtp_user or "",
            settings.smtp_password or "",
            sender_name=settings.sender_name,
            timeout=settings.smtp_timeout,
        )
    return LogNotifier()


__all__ = [
    "LogNotifier",
    "NotifierABC",
    "SendResult",
    "SendStatus",
    "SmtpNotifier",
    "create_notifier",
]
