"""Factory for building the feed source of each channel from settings."""
from garden_alerts.config import Settings, Transport
from garden_alerts.feeds.core import FeedSourceABC
from garden_alerts.feeds.polling import PollingSource
from garden_alerts.feeds.streaming import StreamingSource
from garden_alerts.schemas import FeedChannel


def create_feed_source(
    channel: FeedChannel,
    transport: Transport,
    url: str,
    settings: Settings,
) -> FeedSourceABC:
    """Create a polling or streaming source for one channel.

    Args:
        channel: Channel the source feeds.
        transport: poll or stream.
        url: HTTP(S) endpoint for polling, ws(s) URL for streaming.
        settings: Intervals, attempts, delays and timeouts.

    Returns:
        A configured, not yet running, feed source.
    """
    if transport is Transport.STREAM:
        return StreamingSource(
            channel,
            url,
            reconnect_delay=settings.reconnect_delay,
            open_timeout=settings.request_timeout,
        )
    return PollingSource(
        channel,
        url,
        interval=settings.poll_interval,
        max_attempts=settings.poll_max_attempts,
        timeout=settings.request_timeout,
    )


def create_feed_sources(settings: Settings) -> list[FeedSourceABC]:
    """One source per channel, as configured."""
    return [
        create_feed_source(FeedChannel.STOCK, settings.stock_transport, settings.stock_url, settings),
        create_feed_source(
            FeedChannel.WEATHER, settings.weather_transport, settings.weather_url, settings
        ),
    ]
