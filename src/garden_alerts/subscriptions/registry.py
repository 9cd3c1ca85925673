"""Subscriber registry: confirmed interest sets and pending email verifications."""
import asyncio
import logging
import secrets
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from garden_alerts.config import VerificationMode
from garden_alerts.exceptions import (InvalidSubscriberInput, VerificationFailure,
                                      VerificationReason)
from garden_alerts.schemas import InterestSet, Subscription

logger = logging.getLogger(__name__)

DEFAULT_TTL = timedelta(hours=24)


def generate_token() -> str:
    """256-bit random hex token."""
    return secrets.token_hex(32)


def normalize_email(email: str | None) -> str:
    """Trim surrounding whitespace; case is preserved.

    Raises:
        InvalidSubscriberInput: Email is missing or blank.
    """
    value = (email or "").strip()
    if not value:
        raise InvalidSubscriberInput("Email is required.")
    return value


@dataclass(frozen=True)
class PendingVerification:
    """Unconfirmed request awaiting proof of email ownership."""

    email: str
    token: str
    created_at: datetime


class SubscriptionRegistry:
    """Owns every Subscription and PendingVerification.

    In VERIFY_THEN_CONFIRM mode an email must pass verify() before confirm()
    accepts it; a successful verify() leaves a grant that confirm() consumes
    and that expires with the same TTL as pending verifications. In
    DIRECT_CONFIRM mode confirm() is immediate. Existing subscribers may always
    replace their interest set.

    All state is guarded by one asyncio.Lock so subscribe/unsubscribe calls
    never race a planning pass into a lost update.
    """

    def __init__(
        self,
        mode: VerificationMode = VerificationMode.VERIFY_THEN_CONFIRM,
        *,
        ttl: timedelta = DEFAULT_TTL,
        clock: Callable[[], datetime] | None = None,
        token_factory: Callable[[], str] = generate_token,
    ) -> None:
        self.mode = mode
        self._ttl = ttl
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._token_factory = token_factory
        self._subscriptions: dict[str, Subscription] = {}
        self._pending: dict[str, PendingVerification] = {}
        self._verified: dict[str, datetime] = {}
        self._lock = asyncio.Lock()

    def _expired(self, created_at: datetime, now: datetime) -> bool:
        return now - created_at > self._ttl

    async def request_verification(self, email: str) -> str:
        """Create (or overwrite) the pending verification for email.

        Returns:
            The new token; any earlier token for this email stops working.

        Raises:
            InvalidSubscriberInput: Blank email.
            VerificationFailure: ALREADY_SUBSCRIBED.
        """
        email = normalize_email(email)
        async with self._lock:
            if email in self._subscriptions:
                raise VerificationFailure(VerificationReason.ALREADY_SUBSCRIBED)
            token = self._token_factory()
            self._pending[email] = PendingVerification(email, token, self._clock())
        return token

    async def verify(self, email: str, token: str) -> None:
        """Consume the pending verification if token matches.

        A wrong token leaves the pending entry untouched. A token older than
        the TTL is rejected even if the sweep has not removed it yet.

        Raises:
            VerificationFailure: INVALID_OR_EXPIRED.
        """
        email = (email or "").strip()
        async with self._lock:
            pending = self._pending.get(email)
            if pending is None or not secrets.compare_digest(pending.token, token or ""):
                raise VerificationFailure(VerificationReason.INVALID_OR_EXPIRED)
            now = self._clock()
            del self._pending[email]
            if self._expired(pending.created_at, now):
                raise VerificationFailure(VerificationReason.INVALID_OR_EXPIRED)
            self._verified[email] = now
        logger.info("Verified email ownership for %s", email)

    async def confirm(self, email: str, interests: InterestSet) -> Subscription:
        """Create or replace the subscription for email.

        Raises:
            InvalidSubscriberInput: Blank email or empty interest set.
            VerificationFailure: NOT_VERIFIED (verify-then-confirm mode only).
        """
        email = normalize_email(email)
        if interests.is_empty():
            raise InvalidSubscriberInput("Please select at least one item.")
        async with self._lock:
            if self.mode is VerificationMode.VERIFY_THEN_CONFIRM and email not in self._subscriptions:
                granted_at = self._verified.get(email)
                if granted_at is None or self._expired(granted_at, self._clock()):
                    raise VerificationFailure(VerificationReason.NOT_VERIFIED)
            self._verified.pop(email, None)
            subscription = Subscription(email=email, interests=interests)
            self._subscriptions[email] = subscription
        logger.info("New subscription: %s", email)
        return subscription

    async def unsubscribe(self, email: str) -> bool:
        """Remove the subscription. False if there was none."""
        email = (email or "").strip()
        async with self._lock:
            removed = self._subscriptions.pop(email, None) is not None
        if removed:
            logger.info("Unsubscribed: %s", email)
        return removed

    async def sweep_expired(self, now: datetime | None = None) -> int:
        """Drop pending verifications and verify grants older than the TTL.

        Returns:
            Number of entries removed.
        """
        async with self._lock:
            now = now or self._clock()
            expired = [e for e, p in self._pending.items() if self._expired(p.created_at, now)]
            for email in expired:
                del self._pending[email]
                logger.info("Removed expired verification token for %s", email)
            stale = [e for e, at in self._verified.items() if self._expired(at, now)]
            for email in stale:
                del self._verified[email]
        return len(expired) + len(stale)

    async def get(self, email: str) -> Subscription | None:
        async with self._lock:
            return self._subscriptions.get((email or "").strip())

    async def pending(self, email: str) -> PendingVerification | None:
        async with self._lock:
            return self._pending.get((email or "").strip())

    async def confirmed_subscriptions(self) -> list[Subscription]:
        """Copy of all confirmed subscriptions, taken under the lock."""
        async with self._lock:
            return list(self._subscriptions.values())

    async def counts(self) -> tuple[int, int]:
        """(confirmed subscriptions, pending verifications)."""
        async with self._lock:
            return len(self._subscriptions), len(self._pending)
