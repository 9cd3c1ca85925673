"""Error taxonomy shared by the feed pipeline, registry and HTTP layer."""
from enum import Enum


class GardenAlertsError(Exception):
    """Base class for all errors raised by garden_alerts."""


class UpstreamFetchError(GardenAlertsError):
    """A feed or catalog endpoint could not be reached or returned non-2xx."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class MalformedPayloadError(GardenAlertsError):
    """Upstream payload could not be decoded or has the wrong structure."""


class InvalidSubscriberInput(GardenAlertsError):
    """Subscriber supplied an empty email or an empty interest set."""


class VerificationReason(str, Enum):
    """Why a verification or confirmation step was rejected."""

    ALREADY_SUBSCRIBED = "already_subscribed"
    INVALID_OR_EXPIRED = "invalid_or_expired"
    NOT_VERIFIED = "not_verified"


_REASON_MESSAGES = {
    VerificationReason.ALREADY_SUBSCRIBED: "Email is already subscribed.",
    VerificationReason.INVALID_OR_EXPIRED: "Invalid or expired verification link.",
    VerificationReason.NOT_VERIFIED: "Email has not been verified yet.",
}


class VerificationFailure(GardenAlertsError):
    """Verification request, token check or confirmation was rejected."""

    def __init__(self, reason: VerificationReason) -> None:
        super().__init__(_REASON_MESSAGES[reason])
        self.reason = reason


class NotifierFailure(GardenAlertsError):
    """A message the caller depends on could not be delivered."""

    def __init__(self, recipient: str, reason: str, *, auth_failure: bool = False) -> None:
        super().__init__(f"Failed to deliver email to {recipient}: {reason}")
        self.recipient = recipient
        self.reason = reason
        self.auth_failure = auth_failure
