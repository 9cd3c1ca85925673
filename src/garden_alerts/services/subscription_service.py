"""Subscriber-facing operations used by the HTTP layer.

SubscriptionService wraps the registry, catalog and notifier so routers stay
thin: they call one method and let ErrorMapper turn garden_alerts exceptions
into HTTP responses.
"""
import logging
import time
from datetime import timedelta

from garden_alerts.catalog import CatalogClient, CategoryPolicy, ItemCatalog
from garden_alerts.engine import EmailRenderer
from garden_alerts.engine.render import TEST_SUBJECT, VERIFICATION_SUBJECT
from garden_alerts.exceptions import NotifierFailure
from garden_alerts.notifiers import NotifierABC
from garden_alerts.schemas import CatalogEntry, HealthStatus, InterestSet, Subscription
from garden_alerts.subscriptions import SubscriptionRegistry, normalize_email

logger = logging.getLogger(__name__)


class SubscriptionService:
    """Verification, confirmation, unsubscription, catalog and health."""

    def __init__(
        self,
        registry: SubscriptionRegistry,
        notifier: NotifierABC,
        renderer: EmailRenderer,
        catalog: ItemCatalog,
        catalog_client: CatalogClient | None = None,
        *,
        ttl: timedelta = timedelta(hours=24),
        started_at: float | None = None,
    ) -> None:
        self._registry = registry
        self._notifier = notifier
        self._renderer = renderer
        self._catalog = catalog
        self._catalog_client = catalog_client
        self._ttl_hours = int(ttl.total_seconds() // 3600)
        self._started_at = started_at if started_at is not None else time.monotonic()

    async def _send_or_raise(self, email: str, subject: str, body: str) -> None:
        result = await self._notifier.send(email, subject, body)
        if not result.ok:
            raise NotifierFailure(email, result.reason or "unknown", auth_failure=result.auth_failure)

    async def request_verification(self, email: str) -> str:
        """Create a pending verification and email its link.

        Returns:
            The normalized email the link was sent to.

        Raises:
            InvalidSubscriberInput: Blank email.
            VerificationFailure: Email is already subscribed.
            NotifierFailure: The verification email was not delivered.
        """
        email = normalize_email(email)
        token = await self._registry.request_verification(email)
        body = self._renderer.render_verification(email, token, ttl_hours=self._ttl_hours)
        await self._send_or_raise(email, VERIFICATION_SUBJECT, body)
        logger.info("Verification email sent to %s", email)
        return email

    async def verify(self, email: str, token: str) -> None:
        await self._registry.verify(email, token)

    async def confirm(self, email: str, interests: InterestSet) -> Subscription:
        return await self._registry.confirm(email, interests)

    async def unsubscribe(self, email: str) -> bool:
        return await self._registry.unsubscribe(email)

    async def refresh_catalog(self) -> bool:
        """Refetch item info; False when no client is configured or the fetch failed."""
        if self._catalog_client is None:
            logger.warning("No catalog client configured; refresh skipped")
            return False
        return await self._catalog_client.refresh()

    def grouped_catalog(self, policy: CategoryPolicy | None = None) -> dict[str, list[CatalogEntry]]:
        return self._catalog.grouped(policy)

    async def current_health(self) -> HealthStatus:
        subscribers, pending = await self._registry.counts()
        return HealthStatus(
            uptime_seconds=round(time.monotonic() - self._started_at, 3),
            subscriber_count=subscribers,
            pending_verification_count=pending,
            catalog_loaded=self._catalog.loaded,
            catalog_count=len(self._catalog),
        )

    async def send_test_email(self, email: str) -> str:
        """Send the fixed test message.

        Raises:
            InvalidSubscriberInput: Blank email.
            NotifierFailure: The message was not delivered.
        """
        email = normalize_email(email)
        await self._send_or_raise(email, TEST_SUBJECT, self._renderer.render_test())
        logger.info("Test email sent to %s", email)
        return email
