"""Polling feed source: fetch on startup, then on a fixed interval."""
import asyncio
import logging
import time
from collections.abc import Callable
from typing import Any

import httpx

from garden_alerts.exceptions import MalformedPayloadError, UpstreamFetchError
from garden_alerts.feeds.core import (FeedSourceABC, PayloadHandler, get_json,
                                      retry_with_backoff)
from garden_alerts.feeds.core.retry import Sleep
from garden_alerts.schemas import FeedChannel

logger = logging.getLogger(__name__)


class PollingSource(FeedSourceABC):
    """Feed source that polls a JSON endpoint.

    Each cycle retries failed fetches with exponential backoff (2**attempt
    seconds) up to max_attempts, then gives up until the next scheduled tick.
    Ticks are measured from the start of a cycle, so a slow cycle shortens the
    following wait rather than overlapping it.
    """

    def __init__(
        self,
        channel: FeedChannel,
        url: str,
        *,
        interval: float = 15.0,
        max_attempts: int = 5,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
        sleep: Sleep | None = None,
        clock: Callable[[], float] | None = None,
    ) -> None:
        """Initialize the polling source.

        Args:
            channel: Channel the fetched documents belong to.
            url: JSON endpoint to poll.
            interval: Seconds between cycle starts.
            max_attempts: Fetch attempts per cycle before giving up.
            timeout: httpx timeout for each request (ignored when client is given).
            client: Optional pre-configured client (tests inject one).
            sleep: Optional sleep coroutine (tests inject a fake).
            clock: Optional monotonic clock.
        """
        super().__init__(channel)
        self._url = url
        self._interval = interval
        self._max_attempts = max_attempts
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=timeout, headers={"Accept": "application/json"}
        )
        self._sleep = sleep or asyncio.sleep
        self._clock = clock or time.monotonic

    async def fetch(self) -> Any:
        """Fetch and decode one document (no retry)."""
        return await get_json(self._client, self._url)

    async def poll_once(self, handler: PayloadHandler) -> bool:
        """Run one cycle: fetch with retries and hand the document to handler.

        Returns:
            True if a document was delivered, False if the cycle was given up.
        """
        try:
            document = await retry_with_backoff(
                self.fetch,
                label=f"Polling {self.channel.value} feed",
                max_attempts=self._max_attempts,
                sleep=self._sleep,
            )
        except UpstreamFetchError:
            logger.warning("Giving up %s poll until the next tick", self.channel.value)
            return False
        except MalformedPayloadError as exc:
            logger.error("Malformed %s payload: %s", self.channel.value, exc)
            return False
        await handler(self.channel, document)
        return True

    async def run(self, handler: PayloadHandler) -> None:
        """Poll until stop() is called."""
        self.streaming = True
        try:
            while self.streaming:
                started = self._clock()
                try:
                    await self.poll_once(handler)
                except Exception:  # pylint: disable=broad-except
                    logger.exception("Error handling %s payload", self.channel.value)
                remaining = self._interval - (self._clock() - started)
                if self.streaming and remaining > 0:
                    await self._sleep(remaining)
        finally:
            self.streaming = False

    async def close(self) -> None:
        """Stop polling and close the HTTP client if we created it."""
        await super().close()
        if self._owns_client:
            await self._client.aclose()
