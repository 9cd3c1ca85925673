"""Recurring expiry sweep for pending verifications."""
import asyncio
import logging

from garden_alerts.feeds.core.retry import Sleep
from garden_alerts.subscriptions.registry import SubscriptionRegistry

logger = logging.getLogger(__name__)


async def run_expiry_sweeper(
    registry: SubscriptionRegistry,
    interval: float,
    stop_event: asyncio.Event,
    *,
    sleep: Sleep | None = None,
) -> None:
    """Sweep every `interval` seconds until stop_event is set."""
    sleep = sleep or asyncio.sleep
    while not stop_event.is_set():
        await sleep(interval)
        if stop_event.is_set():
            break
        removed = await registry.sweep_expired()
        if removed:
            logger.info("Expiry sweep removed %d entries", removed)
