"""Pydantic schemas for feed payloads, subscriptions and notification jobs. Not persisted."""
from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field


class FeedChannel(str, Enum):
    """Independent feed with its own change-detection timeline."""

    STOCK = "stock"
    WEATHER = "weather"


class StockCategory(str, Enum):
    """Shop categories; value is the category name, payload_key the upstream list key."""

    SEED = "seed"
    GEAR = "gear"
    EGG = "egg"
    COSMETIC = "cosmetic"
    EVENT = "event"

    @property
    def payload_key(self) -> str:
        if self is StockCategory.EVENT:
            return "eventshop_stock"
        return f"{self.value}_stock"


class StockItem(BaseModel):
    """One item in a shop category. Items without an item_id never get this far."""

    model_config = ConfigDict(frozen=True)

    item_id: str = Field(min_length=1)
    display_name: str | None = None
    quantity: int = Field(default=0, ge=0)
    category: StockCategory


class StockPayload(BaseModel):
    """Stock feed message with invalid items already removed."""

    model_config = ConfigDict(frozen=True)

    items: dict[StockCategory, list[StockItem]] = Field(default_factory=dict)

    def in_category(self, category: StockCategory) -> list[StockItem]:
        return self.items.get(category, [])

    def all_items(self) -> list[StockItem]:
        """All items in category order (seed, gear, egg, cosmetic, event)."""
        return [item for category in StockCategory for item in self.in_category(category)]


class WeatherEvent(BaseModel):
    """Weather/event entry as published by the weather API."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    event_id: str = Field(alias="weather_id", min_length=1)
    event_name: str | None = Field(default=None, alias="weather_name")
    duration_seconds: float | None = Field(default=None, alias="duration")
    active: bool = False

    @property
    def label(self) -> str:
        return self.event_name or self.event_id or "Unknown"


class WeatherPayload(BaseModel):
    """Weather feed message: list of events, at most one active."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    events: list[WeatherEvent] = Field(default_factory=list, alias="weather")
    discord_invite: str | None = None

    def active_event(self) -> WeatherEvent | None:
        """The current event, or None when nothing is active."""
        return next((event for event in self.events if event.active), None)


class Snapshot(BaseModel):
    """Last accepted payload for a channel. Replaced, never mutated."""

    model_config = ConfigDict(frozen=True)

    channel: FeedChannel
    raw_payload: str
    parsed_payload: StockPayload | WeatherPayload
    observed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class CatalogEntry(BaseModel):
    """Item metadata used only to enrich rendering."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    item_id: str = Field(min_length=1)
    display_name: str = Field(min_length=1)
    icon: str | None = None
    item_type: str | None = Field(default=None, alias="type")


class ItemInterests(BaseModel):
    """Interest set over item ids from any shop category."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["items"] = "items"
    item_ids: frozenset[str] = frozenset()

    def is_empty(self) -> bool:
        return not self.item_ids


class PartitionedInterests(BaseModel):
    """Interest set split into seeds and gear, matched against their own shop lists."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["partitioned"] = "partitioned"
    seed_ids: frozenset[str] = frozenset()
    gear_ids: frozenset[str] = frozenset()

    def is_empty(self) -> bool:
        return not self.seed_ids and not self.gear_ids


InterestSet = Annotated[ItemInterests | PartitionedInterests, Field(discriminator="kind")]


class Subscription(BaseModel):
    """Confirmed subscriber and their whole interest set."""

    model_config = ConfigDict(frozen=True)

    email: str
    interests: InterestSet


class NotificationJob(BaseModel):
    """One rendered email for one recipient."""

    model_config = ConfigDict(frozen=True)

    email: str
    subject: str
    body: str


class HealthStatus(BaseModel):
    """Service health as reported to the web layer."""

    status: str = "OK"
    uptime_seconds: float
    subscriber_count: int
    pending_verification_count: int
    catalog_loaded: bool
    catalog_count: int


__all__ = [
    "CatalogEntry",
    "FeedChannel",
    "HealthStatus",
    "InterestSet",
    "ItemInterests",
    "NotificationJob",
    "PartitionedInterests",
    "Snapshot",
    "StockCategory",
    "StockItem",
    "StockPayload",
    "Subscription",
    "WeatherEvent",
    "WeatherPayload",
]
