"""Streaming feed source: persistent websocket with fixed-delay reconnect."""
import asyncio
import json
import logging
from collections.abc import Callable
from typing import Any

import websockets

from garden_alerts.feeds.core import FeedSourceABC, PayloadHandler, excerpt
from garden_alerts.feeds.core.retry import Sleep
from garden_alerts.schemas import FeedChannel

logger = logging.getLogger(__name__)


class StreamingSource(FeedSourceABC):
    """Feed source backed by a websocket that pushes JSON documents.

    The feed is the primary data path, so the source never gives up: on close
    or error it waits reconnect_delay seconds and reconnects until stopped.
    """

    def __init__(
        self,
        channel: FeedChannel,
        url: str,
        *,
        reconnect_delay: float = 5.0,
        open_timeout: float = 10.0,
        idle_timeout: float = 30.0,
        connect: Callable[..., Any] | None = None,
        sleep: Sleep | None = None,
    ) -> None:
        """Initialize the streaming source.

        Args:
            channel: Channel the received documents belong to.
            url: Websocket URL.
            reconnect_delay: Seconds to wait before reconnecting.
            open_timeout: Bound on the opening handshake.
            idle_timeout: Seconds without a message before sending a ping.
            connect: Optional replacement for websockets.connect (tests inject a fake).
            sleep: Optional sleep coroutine (tests inject a fake).
        """
        super().__init__(channel)
        self._url = url
        self._reconnect_delay = reconnect_delay
        self._open_timeout = open_timeout
        self._idle_timeout = idle_timeout
        self._connect = connect or websockets.connect
        self._sleep = sleep or asyncio.sleep
        self._ws: Any = None

    async def run(self, handler: PayloadHandler) -> None:
        """Receive documents until stop() is called, reconnecting as needed."""
        self.streaming = True
        try:
            while self.streaming:
                try:
                    await self._consume(handler)
                except Exception:  # pylint: disable=broad-except
                    logger.exception("Unexpected %s stream error", self.channel.value)
                if self.streaming:
                    logger.info(
                        "WebSocket closed, attempting to reconnect in %.0f seconds...",
                        self._reconnect_delay,
                    )
                    await self._sleep(self._reconnect_delay)
        finally:
            self.streaming = False
            self._ws = None

    async def _consume(self, handler: PayloadHandler) -> None:
        """One connection lifetime. Returns when the connection ends for any reason."""
        logger.info("Connecting to %s websocket...", self.channel.value)
        try:
            async with self._connect(self._url, open_timeout=self._open_timeout) as ws:
                self._ws = ws
                logger.info("WebSocket connected")
                while self.streaming:
                    try:
                        raw = await asyncio.wait_for(ws.recv(), timeout=self._idle_timeout)
                    except asyncio.TimeoutError:
                        # Keep the connection alive through quiet periods
                        await ws.ping()
                        continue
                    await self._deliver(handler, raw)
        except websockets.ConnectionClosed as exc:
            logger.warning("WebSocket connection closed: %s", exc)
        except (websockets.WebSocketException, OSError, asyncio.TimeoutError) as exc:
            logger.error("WebSocket error: %s", exc)
        finally:
            self._ws = None

    async def _deliver(self, handler: PayloadHandler, raw: str | bytes) -> None:
        try:
            document = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            text = raw.decode(errors="replace") if isinstance(raw, bytes) else raw
            logger.error("WebSocket data error: %s (%s)", exc, excerpt(text))
            return
        try:
            await handler(self.channel, document)
        except Exception:  # pylint: disable=broad-except
            logger.exception("Error handling %s payload", self.channel.value)

    async def close(self) -> None:
        """Stop streaming and close the open connection, if any."""
        await super().close()
        if self._ws is not None:
            await self._ws.close()
            self._ws = None
