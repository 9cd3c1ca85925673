import pytest
from fastapi import HTTPException

from garden_alerts.exceptions import (InvalidSubscriberInput, NotifierFailure,
                                      UpstreamFetchError, VerificationFailure,
                                      VerificationReason)
from garden_alerts.services import ErrorMapper


@pytest.mark.parametrize(
    "exc, expected",
    [
        (InvalidSubscriberInput("Email is required."), (400, "Email is required.")),
        (VerificationFailure(VerificationReason.ALREADY_SUBSCRIBED), (409, "Email is already subscribed.")),
        (VerificationFailure(VerificationReason.INVALID_OR_EXPIRED), (400, "Invalid or expired verification link.")),
        (VerificationFailure(VerificationReason.NOT_VERIFIED), (400, "Email has not been verified yet.")),
        (NotifierFailure("a@test", "535 auth", auth_failure=True), (502, "Email service is misconfigured.")),
        (NotifierFailure("a@test", "refused"), (502, "Failed to send email. Please try again later.")),
    ],
)
def test_to_http_maps_subscriber_errors(exc, expected):
    assert ErrorMapper().to_http(exc) == expected


@pytest.mark.parametrize("exc", [RuntimeError("boom"), UpstreamFetchError("down", status_code=503)])
def test_other_errors_are_internal(exc):
    assert ErrorMapper().to_http(exc) == (500, "Internal server error")


def test_raise_http_chains_original():
    original = VerificationFailure(VerificationReason.ALREADY_SUBSCRIBED)
    with pytest.raises(HTTPException) as excinfo:
        ErrorMapper().raise_http(original)
    assert excinfo.value.status_code == 409
    assert excinfo.value.__cause__ is original
