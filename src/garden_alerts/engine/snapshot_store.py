"""Last accepted payload per feed channel."""
import asyncio
import json
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from garden_alerts.schemas import FeedChannel, Snapshot, StockPayload, WeatherPayload


def canonical_json(document: Any) -> str:
    """Serialize with sorted keys and compact separators.

    Two documents that differ only in key order serialize identically, so
    upstream key-order churn is never mistaken for a change.
    """
    return json.dumps(document, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


@dataclass(frozen=True)
class ReplaceResult:
    """Outcome of SnapshotStore.replace."""

    changed: bool
    previous: Snapshot | None
    current: Snapshot


class SnapshotStore:
    """Holds at most one immutable Snapshot per channel.

    All access goes through an asyncio.Lock, so a reader never observes a
    replacement half done and two writers never interleave.
    """

    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        self._snapshots: dict[FeedChannel, Snapshot] = {}
        self._lock = asyncio.Lock()
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    async def get(self, channel: FeedChannel) -> Snapshot | None:
        """Current snapshot for channel, or None before the first payload."""
        async with self._lock:
            return self._snapshots.get(channel)

    async def replace(
        self,
        channel: FeedChannel,
        raw_document: Any,
        parsed_payload: StockPayload | WeatherPayload,
    ) -> ReplaceResult:
        """Store a new snapshot if its canonical form differs from the current one.

        Args:
            channel: Channel being updated.
            raw_document: Decoded JSON document (already stripped of invalid items).
            parsed_payload: Structured form of the same document.

        Returns:
            ReplaceResult. When unchanged, current is the existing snapshot
            (its observed_at is not refreshed) and previous is the same object.
        """
        raw = canonical_json(raw_document)
        async with self._lock:
            previous = self._snapshots.get(channel)
            if previous is not None and previous.raw_payload == raw:
                return ReplaceResult(changed=False, previous=previous, current=previous)
            current = Snapshot(
                channel=channel,
                raw_payload=raw,
                parsed_payload=parsed_payload,
                observed_at=self._clock(),
            )
            self._snapshots[channel] = current
            return ReplaceResult(changed=True, previous=previous, current=current)
