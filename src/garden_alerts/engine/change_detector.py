"""Change detection per channel and weather transition classification."""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from garden_alerts.engine.snapshot_store import SnapshotStore
from garden_alerts.feeds.parsers import normalize_stock_document, parse_weather_document
from garden_alerts.schemas import FeedChannel, Snapshot, WeatherEvent, WeatherPayload

logger = logging.getLogger(__name__)


class TransitionKind(str, Enum):
    """Classification of a weather snapshot change."""

    EVENT_STARTED = "event_started"
    EVENT_ENDED = "event_ended"
    NO_TRANSITION = "no_transition"


@dataclass(frozen=True)
class WeatherTransition:
    """Weather transition; event is the started or ended event (None for NO_TRANSITION)."""

    kind: TransitionKind
    event: WeatherEvent | None = None


NO_TRANSITION = WeatherTransition(TransitionKind.NO_TRANSITION)


def classify_weather(
    previous: WeatherPayload | None, current: WeatherPayload
) -> WeatherTransition:
    """Compare the active event of two weather payloads.

    none -> A is EVENT_STARTED(A); A -> none is EVENT_ENDED(A); A -> B with a
    different id is EVENT_STARTED(B) with no separate end signal for A; the
    same id on both sides (e.g. only the duration changed) is NO_TRANSITION.
    """
    new_active = current.active_event()
    old_active = previous.active_event() if previous is not None else None
    if new_active is not None:
        if old_active is None or old_active.event_id != new_active.event_id:
            return WeatherTransition(TransitionKind.EVENT_STARTED, new_active)
        return NO_TRANSITION
    if old_active is not None:
        return WeatherTransition(TransitionKind.EVENT_ENDED, old_active)
    return NO_TRANSITION


@dataclass(frozen=True)
class ChangeResult:
    """Outcome of ingesting one document."""

    channel: FeedChannel
    changed: bool
    snapshot: Snapshot
    previous: Snapshot | None
    transition: WeatherTransition = NO_TRANSITION


class ChangeDetector:
    """Parses documents, updates the SnapshotStore and reports what changed.

    Stock changes are not diffed: subscriber interest is matched against the
    whole snapshot at planning time. Weather changes are classified into
    transitions of the single active event.
    """

    def __init__(self, store: SnapshotStore) -> None:
        self._store = store

    async def ingest(self, channel: FeedChannel, document: Any) -> ChangeResult:
        """Ingest one decoded document for channel.

        Raises:
            MalformedPayloadError: Document cannot be parsed for this channel.
        """
        if channel is FeedChannel.STOCK:
            filtered, parsed = normalize_stock_document(document)
            result = await self._store.replace(channel, filtered, parsed)
            return ChangeResult(channel, result.changed, result.current, result.previous)

        parsed_weather = parse_weather_document(document)
        result = await self._store.replace(channel, document, parsed_weather)
        if not result.changed:
            return ChangeResult(channel, False, result.current, result.previous)

        previous_payload = result.previous.parsed_payload if result.previous else None
        if not isinstance(previous_payload, WeatherPayload):
            previous_payload = None
        transition = classify_weather(previous_payload, parsed_weather)
        return ChangeResult(channel, True, result.current, result.previous, transition)
