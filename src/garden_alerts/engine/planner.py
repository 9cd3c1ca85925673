"""Fan-out of changed snapshots into per-subscriber notification jobs."""
import logging
from collections.abc import Iterable

from garden_alerts.catalog import ItemCatalog
from garden_alerts.engine.render import (STOCK_SUBJECT, EmailRenderer, StockRow,
                                         StockSection, weather_subject)
from garden_alerts.schemas import (ItemInterests, NotificationJob,
                                   PartitionedInterests, Snapshot,
                                   StockCategory, StockItem, StockPayload,
                                   Subscription, WeatherEvent)
from garden_alerts.subscriptions import SubscriptionRegistry

logger = logging.getLogger(__name__)


def in_stock(items: Iterable[StockItem], wanted: frozenset[str]) -> list[StockItem]:
    """Items the subscriber wants that have a positive quantity."""
    return [item for item in items if item.item_id in wanted and item.quantity > 0]


class NotificationPlanner:
    """Builds NotificationJobs; never sends anything itself.

    Stock jobs are filtered per subscriber at planning time (no structural
    diff of the snapshot). Weather jobs go to every confirmed subscriber.
    """

    def __init__(self, catalog: ItemCatalog, renderer: EmailRenderer) -> None:
        self._catalog = catalog
        self._renderer = renderer

    def _row(self, item: StockItem) -> StockRow:
        name = item.display_name or self._catalog.display_name_for(item.item_id)
        return StockRow(name=name, quantity=item.quantity, icon=self._catalog.icon_for(item.item_id))

    def stock_sections(self, payload: StockPayload, subscription: Subscription) -> list[StockSection]:
        """Non-empty sections of in-stock items matching the subscriber's interests."""
        interests = subscription.interests
        if isinstance(interests, PartitionedInterests):
            candidates = [
                ("Seeds", in_stock(payload.in_category(StockCategory.SEED), interests.seed_ids)),
                ("Gear", in_stock(payload.in_category(StockCategory.GEAR), interests.gear_ids)),
            ]
        elif isinstance(interests, ItemInterests):
            candidates = [(None, in_stock(payload.all_items(), interests.item_ids))]
        else:
            return []
        return [
            StockSection(title=title, rows=[self._row(item) for item in items])
            for title, items in candidates
            if items
        ]

    def plan_stock_for(
        self, snapshot: Snapshot, subscriptions: Iterable[Subscription]
    ) -> list[NotificationJob]:
        """Stock jobs for the given subscriptions; subscribers with nothing in stock get none."""
        payload = snapshot.parsed_payload
        if not isinstance(payload, StockPayload):
            raise TypeError(f"Expected a stock snapshot, got {snapshot.channel.value}")
        jobs: list[NotificationJob] = []
        for subscription in subscriptions:
            sections = self.stock_sections(payload, subscription)
            if not sections:
                continue
            jobs.append(
                NotificationJob(
                    email=subscription.email,
                    subject=STOCK_SUBJECT,
                    body=self._renderer.render_stock(subscription.email, sections),
                )
            )
        return jobs

    async def plan_stock_notifications(
        self, snapshot: Snapshot, registry: SubscriptionRegistry
    ) -> list[NotificationJob]:
        """Stock jobs for every confirmed subscriber with a matching in-stock item."""
        subscriptions = await registry.confirmed_subscriptions()
        jobs = self.plan_stock_for(snapshot, subscriptions)
        logger.info("Stock change matched %d of %d subscribers", len(jobs), len(subscriptions))
        return jobs

    def plan_weather_for(
        self,
        event: WeatherEvent,
        subscriptions: Iterable[Subscription],
        discord_invite: str | None = None,
    ) -> list[NotificationJob]:
        """One weather job per subscription, regardless of interests."""
        subject = weather_subject(event.label)
        return [
            NotificationJob(
                email=subscription.email,
                subject=subject,
                body=self._renderer.render_weather(
                    subscription.email, event.label, event.duration_seconds, discord_invite
                ),
            )
            for subscription in subscriptions
        ]

    async def plan_weather_notification(
        self,
        started_event: WeatherEvent,
        registry: SubscriptionRegistry,
        discord_invite: str | None = None,
    ) -> list[NotificationJob]:
        """Broadcast a started weather event to every confirmed subscriber."""
        subscriptions = await registry.confirmed_subscriptions()
        return self.plan_weather_for(started_event, subscriptions, discord_invite)
