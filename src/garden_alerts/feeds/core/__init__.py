"""Core feed source abstractions."""
from garden_alerts.feeds.core.feed_source_abc import FeedSourceABC, PayloadHandler
from garden_alerts.feeds.core.http import excerpt, get_json
from garden_alerts.feeds.core.retry import backoff_delay, retry_with_backoff

__all__ = [
    "FeedSourceABC",
    "PayloadHandler",
    "backoff_delay",
    "excerpt",
    "get_json",
    "retry_with_backoff",
]
