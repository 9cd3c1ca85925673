"""Notifier contract: deliver one rendered message to one recipient."""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum


class SendStatus(str, Enum):
    DELIVERED = "delivered"
    TRANSIENT = "transient"
    PERMANENT = "permanent"


@dataclass(frozen=True)
class SendResult:
    """Result of one delivery attempt.

    auth_failure marks a permanent failure caused by rejected transport
    credentials, which is a configuration problem rather than a bad recipient.
    """

    status: SendStatus
    reason: str | None = None
    auth_failure: bool = False

    @property
    def ok(self) -> bool:
        return self.status is SendStatus.DELIVERED

    @classmethod
    def delivered(cls, detail: str | None = None) -> "SendResult":
        return cls(SendStatus.DELIVERED, detail)

    @classmethod
    def transient(cls, reason: str) -> "SendResult":
        return cls(SendStatus.TRANSIENT, reason)

    @classmethod
    def permanent(cls, reason: str, *, auth_failure: bool = False) -> "SendResult":
        return cls(SendStatus.PERMANENT, reason, auth_failure)


class NotifierABC(ABC):
    """Mail transport. Implementations report failures in the result instead of raising."""

    @abstractmethod
    async def send(self, recipient: str, subject: str, html_body: str) -> SendResult:
        """Deliver html_body to recipient.

        Args:
            recipient: Destination address.
            subject: Subject line.
            html_body: Rendered HTML body.

        Returns:
            SendResult describing the outcome.
        """

    async def close(self) -> None:
        """Release transport resources. Override if needed."""
