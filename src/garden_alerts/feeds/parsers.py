"""Mapping from upstream feed documents to StockPayload / WeatherPayload."""
import json
import logging
from typing import Any

from pydantic import ValidationError

from garden_alerts.exceptions import MalformedPayloadError
from garden_alerts.feeds.core import excerpt
from garden_alerts.schemas import (StockCategory, StockItem, StockPayload,
                                   WeatherEvent, WeatherPayload)

logger = logging.getLogger(__name__)


def _dump(value: Any) -> str:
    return excerpt(json.dumps(value, default=str))


def parse_stock_item(raw: Any, category: StockCategory) -> StockItem | None:
    """Validate one upstream item; None if it lacks an item_id or is otherwise invalid."""
    if not isinstance(raw, dict) or not raw.get("item_id"):
        return None
    try:
        return StockItem(
            item_id=raw["item_id"],
            display_name=raw.get("display_name"),
            quantity=raw.get("quantity") or 0,
            category=category,
        )
    except ValidationError:
        return None


def normalize_stock_document(document: Any) -> tuple[dict[str, Any], StockPayload]:
    """Drop invalid items from a stock document and parse what remains.

    Upstream groups items under seed_stock, gear_stock, egg_stock,
    cosmetic_stock and eventshop_stock. Items without an item_id are removed
    from both the returned document and the payload, so they never take part
    in change detection.

    Args:
        document: Decoded JSON from the stock feed.

    Returns:
        (filtered document, parsed payload). Unknown top-level keys are kept in
        the document so any upstream change still registers as a change.

    Raises:
        MalformedPayloadError: Document is not an object.
    """
    if not isinstance(document, dict):
        raise MalformedPayloadError(f"Stock payload is not an object: {_dump(document)}")

    filtered = dict(document)
    items: dict[StockCategory, list[StockItem]] = {}
    for category in StockCategory:
        key = category.payload_key
        raw_items = document.get(key)
        if raw_items is None:
            continue
        if not isinstance(raw_items, list):
            logger.warning("Ignoring %s: expected a list, got %s", key, type(raw_items).__name__)
            continue
        kept_raw: list[Any] = []
        parsed: list[StockItem] = []
        for raw in raw_items:
            item = parse_stock_item(raw, category)
            if item is None:
                logger.warning("Skipping invalid item in %s: %s", key, _dump(raw))
                continue
            kept_raw.append(raw)
            parsed.append(item)
        filtered[key] = kept_raw
        items[category] = parsed
    return filtered, StockPayload(items=items)


def parse_weather_document(document: Any) -> WeatherPayload:
    """Parse a weather document ({"weather": [...], "discord_invite": ...}).

    Events without a weather_id are skipped. Several active events violate the
    upstream contract; the first active one is used and a warning is logged.

    Raises:
        MalformedPayloadError: Document is not an object or has no weather list.
    """
    if not isinstance(document, dict) or not isinstance(document.get("weather"), list):
        raise MalformedPayloadError(f"Weather payload has no 'weather' list: {_dump(document)}")

    events: list[WeatherEvent] = []
    for raw in document["weather"]:
        try:
            events.append(WeatherEvent.model_validate(raw))
        except ValidationError:
            logger.warning("Skipping invalid weather event: %s", _dump(raw))

    active = [event.event_id for event in events if event.active]
    if len(active) > 1:
        logger.warning("Multiple active weather events %s; using %s", active, active[0])

    invite = document.get("discord_invite")
    return WeatherPayload(
        events=events,
        discord_invite=invite if isinstance(invite, str) and invite else None,
    )
