"""Feed sources for the stock and weather channels.

- PollingSource: periodic HTTP polling with bounded exponential retry
- StreamingSource: persistent websocket with fixed-delay reconnect

Both implement FeedSourceABC and hand decoded JSON documents to the same
handler, normally FeedPipeline.process.

Example:
    async with PollingSource(FeedChannel.WEATHER, url) as source:
        await source.run(pipeline.process)
"""
from garden_alerts.feeds.core import FeedSourceABC, PayloadHandler
from garden_alerts.feeds.factory import create_feed_source, create_feed_sources
from garden_alerts.feeds.polling import PollingSource
from garden_alerts.feeds.streaming import StreamingSource

__all__ = [
    "FeedSourceABC",
    "PayloadHandler",
    "PollingSource",
    "StreamingSource",
    "create_feed_source",
    "create_feed_sources",
]
