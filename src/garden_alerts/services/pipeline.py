"""Per-channel pipeline: snapshot replacement, change detection, planning, dispatch."""
import asyncio
import logging
from typing import Any

from garden_alerts.engine import (ChangeDetector, ChangeResult,
                                  NotificationPlanner, TransitionKind)
from garden_alerts.exceptions import MalformedPayloadError
from garden_alerts.feeds.core import excerpt
from garden_alerts.notifiers import NotifierABC
from garden_alerts.schemas import FeedChannel, NotificationJob, WeatherPayload
from garden_alerts.services.dispatcher import DispatchReport, dispatch
from garden_alerts.subscriptions import SubscriptionRegistry

logger = logging.getLogger(__name__)


class FeedPipeline:
    """Processes one payload at a time per channel.

    Feed sources call process() for every decoded document. A per-channel
    lock keeps replacement, planning and dispatch of one payload ahead of the
    next payload for the same channel, whichever transport delivered it.
    """

    def __init__(
        self,
        detector: ChangeDetector,
        planner: NotificationPlanner,
        registry: SubscriptionRegistry,
        notifier: NotifierABC,
        *,
        max_concurrent_sends: int = 5,
    ) -> None:
        self._detector = detector
        self._planner = planner
        self._registry = registry
        self._notifier = notifier
        self._max_concurrent_sends = max_concurrent_sends
        self._locks = {channel: asyncio.Lock() for channel in FeedChannel}

    async def process(self, channel: FeedChannel, document: Any) -> DispatchReport:
        """Ingest one document and send whatever notifications it causes.

        Malformed documents are logged and treated as no change.
        """
        async with self._locks[channel]:
            try:
                result = await self._detector.ingest(channel, document)
            except MalformedPayloadError as exc:
                logger.error("Malformed %s payload ignored: %s", channel.value, exc)
                return DispatchReport()
            jobs = await self.plan(result)
            return await dispatch(self._notifier, jobs, max_concurrency=self._max_concurrent_sends)

    async def plan(self, result: ChangeResult) -> list[NotificationJob]:
        """Jobs for a change result (empty when nothing notifiable happened)."""
        channel = result.channel.value
        if not result.changed:
            logger.info("Received %s data, no changes detected.", channel)
            return []

        if result.channel is FeedChannel.STOCK:
            logger.info(
                "Stock data changed, checking subscriber selections. Data: %s",
                excerpt(result.snapshot.raw_payload),
            )
            return await self._planner.plan_stock_notifications(result.snapshot, self._registry)

        transition = result.transition
        if transition.kind is TransitionKind.EVENT_STARTED and transition.event is not None:
            logger.info("New active weather event: %s", transition.event.label)
            payload = result.snapshot.parsed_payload
            invite = payload.discord_invite if isinstance(payload, WeatherPayload) else None
            return await self._planner.plan_weather_notification(
                transition.event, self._registry, invite
            )
        if transition.kind is TransitionKind.EVENT_ENDED and transition.event is not None:
            logger.info("Weather event ended: %s", transition.event.label)
        else:
            logger.info("No new active weather event detected.")
        return []
