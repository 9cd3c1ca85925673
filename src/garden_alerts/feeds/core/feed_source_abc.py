"""Abstract base class for feed sources."""
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import Any

from garden_alerts.schemas import FeedChannel

PayloadHandler = Callable[[FeedChannel, Any], Awaitable[object]]


class FeedSourceABC(ABC):
    """Base interface for all feed sources.

    A source delivers decoded JSON documents for one channel to a handler
    until stopped. Both variants (polling, streaming) feed the same handler,
    so channel correctness does not depend on the transport.

    Subclasses must call super().__init__() and must not set _streaming directly;
    the streaming property is what run() loops on and what stop() clears.
    """

    def __init__(self, channel: FeedChannel) -> None:
        """Initialize source. Subclasses may override and should call super().__init__()."""
        self.channel = channel
        self._streaming = False

    @property
    def streaming(self) -> bool:
        """Flag used by run() to control its loop."""
        return getattr(self, "_streaming", False)

    @streaming.setter
    def streaming(self, value: bool) -> None:
        self._streaming = value

    @abstractmethod
    async def run(self, handler: PayloadHandler) -> None:
        """Deliver payloads to handler until stop() is called.

        Must never raise because of upstream failures; those are logged and
        recovered locally (retry, reconnect, or wait for the next tick).

        Args:
            handler: Async callable(channel, document) invoked once per payload,
                awaited before the next payload for this channel is fetched.
        """

    def stop(self) -> None:
        """Ask run() to exit after the current step."""
        self.streaming = False

    async def close(self) -> None:
        """Clean up resources (connections, clients).

        Override in subclasses if cleanup is needed.
        """
        self.stop()

    async def __aenter__(self) -> "FeedSourceABC":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        """Async context manager exit - calls close()."""
        await self.close()
