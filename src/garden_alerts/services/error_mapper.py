"""Domain concept for mapping service exceptions to HTTP responses."""
from dataclasses import dataclass

from fastapi import HTTPException

from garden_alerts.exceptions import (InvalidSubscriberInput, NotifierFailure,
                                      VerificationFailure, VerificationReason)


@dataclass(frozen=True)
class ErrorMapper:
    """Maps garden_alerts exceptions to HTTP (status_code, detail).

    Routers call raise_http() so status codes and user-facing messages are
    decided in one place.
    """

    def to_http(self, exc: Exception) -> tuple[int, str]:
        """Map an exception to (status_code, detail) for HTTP responses."""
        if isinstance(exc, InvalidSubscriberInput):
            return (400, str(exc))
        if isinstance(exc, VerificationFailure):
            if exc.reason is VerificationReason.ALREADY_SUBSCRIBED:
                return (409, str(exc))
            return (400, str(exc))
        if isinstance(exc, NotifierFailure):
            if exc.auth_failure:
                return (502, "Email service is misconfigured.")
            return (502, "Failed to send email. Please try again later.")
        return (500, "Internal server error")

    def raise_http(self, exc: Exception) -> None:
        """Map exception to HTTP and raise HTTPException. Never returns."""
        status_code, detail = self.to_http(exc)
        raise HTTPException(status_code=status_code, detail=detail) from exc
