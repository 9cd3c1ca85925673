"""Subscriber routes: verification, subscribe, unsubscribe, test email."""
from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, model_validator

from garden_alerts.deps import ErrorMapperDep, SubscriptionServiceDep
from garden_alerts.exceptions import GardenAlertsError
from garden_alerts.schemas import InterestSet, ItemInterests, PartitionedInterests

router = APIRouter(tags=["subscriptions"])


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class RequestVerificationBody(BaseModel):
    email: str = ""


class SubscribeBody(BaseModel):
    """Either a flat `items` list or separate `seeds` and `gear` lists."""

    email: str = ""
    items: list[str] | None = None
    seeds: list[str] | None = None
    gear: list[str] | None = None

    @model_validator(mode="after")
    def _one_shape(self) -> "SubscribeBody":
        if self.items is not None and (self.seeds is not None or self.gear is not None):
            raise ValueError("Send either items or seeds/gear, not both")
        return self

    def interests(self) -> InterestSet:
        if self.items is not None or (self.seeds is None and self.gear is None):
            return ItemInterests(item_ids=frozenset(self.items or []))
        return PartitionedInterests(
            seed_ids=frozenset(self.seeds or []), gear_ids=frozenset(self.gear or [])
        )


class SubscribeResponse(MessageResponse):
    interests: InterestSet


@router.post("/request-verification", response_model=MessageResponse)
async def request_verification(
    body: RequestVerificationBody,
    service: SubscriptionServiceDep,
    errors: ErrorMapperDep,
) -> MessageResponse:
    """Create a pending verification and email the link."""
    try:
        email = await service.request_verification(body.email)
    except GardenAlertsError as exc:
        errors.raise_http(exc)
    return MessageResponse(message=f"Verification email sent to {email}. Check your inbox for the link.")


@router.get("/verify", response_model=MessageResponse)
async def verify(
    service: SubscriptionServiceDep,
    errors: ErrorMapperDep,
    email: str = Query(default=""),
    token: str = Query(default=""),
) -> MessageResponse:
    """Consume a verification link."""
    try:
        await service.verify(email, token)
    except GardenAlertsError as exc:
        errors.raise_http(exc)
    return MessageResponse(message="Email verified. You can now choose your items.")


@router.post("/subscribe", response_model=SubscribeResponse)
async def subscribe(
    body: SubscribeBody,
    service: SubscriptionServiceDep,
    errors: ErrorMapperDep,
) -> SubscribeResponse:
    """Create or replace a subscription."""
    try:
        subscription = await service.confirm(body.email, body.interests())
    except GardenAlertsError as exc:
        errors.raise_http(exc)
    return SubscribeResponse(
        message=f"Subscribed {subscription.email} to stock alerts.",
        interests=subscription.interests,
    )


@router.get("/unsub", response_model=MessageResponse)
async def unsubscribe(
    service: SubscriptionServiceDep,
    email: str = Query(default=""),
) -> MessageResponse:
    """Remove a subscription; 404 when the email is not subscribed."""
    if not await service.unsubscribe(email):
        raise HTTPException(status_code=404, detail="Email not found in subscription list.")
    return MessageResponse(message=f"{email.strip()} has been unsubscribed.")


@router.get("/test-email", response_model=MessageResponse)
async def test_email(
    service: SubscriptionServiceDep,
    errors: ErrorMapperDep,
    email: str = Query(default=""),
) -> MessageResponse:
    """Send the fixed test message to email."""
    try:
        email = await service.send_test_email(email)
    except GardenAlertsError as exc:
        errors.raise_http(exc)
    return MessageResponse(message=f"Test email sent to {email}.")
