"""Replaceable policies that assign catalog entries to a shop category.

The item-info endpoint is not authoritative about categories. Keyword
matching on display names misclassifies items whose names do not follow the
usual patterns, so it is kept behind CategoryPolicy and only used as a
fallback when the upstream entry carries no usable type.
"""
from typing import Protocol

from garden_alerts.schemas import CatalogEntry, StockCategory

GEAR_KEYWORDS: tuple[str, ...] = (
    "sprinkler",
    "watering can",
    "trowel",
    "wrench",
    "lightning rod",
    "staff",
    "tool",
    "spray",
    "harvest",
    "magnifying",
    "pot",
)
EGG_KEYWORDS: tuple[str, ...] = ("egg",)


class CategoryPolicy(Protocol):
    """Assigns a catalog entry to a category, or None if it cannot tell."""

    def classify(self, entry: CatalogEntry) -> StockCategory | None: ...


class KeywordCategoryPolicy:
    """Guess gear/egg/seed from display-name keywords; everything else is a seed."""

    def __init__(
        self,
        gear_keywords: tuple[str, ...] = GEAR_KEYWORDS,
        egg_keywords: tuple[str, ...] = EGG_KEYWORDS,
    ) -> None:
        self._gear = gear_keywords
        self._egg = egg_keywords

    def classify(self, entry: CatalogEntry) -> StockCategory | None:
        name = entry.display_name.lower()
        if any(keyword in name for keyword in self._gear):
            return StockCategory.GEAR
        if any(keyword in name for keyword in self._egg):
            return StockCategory.EGG
        return StockCategory.SEED


class ExplicitTypePolicy:
    """Trust the upstream `type` field when it names a category; otherwise defer to fallback."""

    def __init__(self, fallback: CategoryPolicy | None = None) -> None:
        self._fallback = fallback or KeywordCategoryPolicy()

    def classify(self, entry: CatalogEntry) -> StockCategory | None:
        if entry.item_type:
            value = entry.item_type.strip().lower()
            for candidate in (value, value.removesuffix("s")):
                try:
                    return StockCategory(candidate)
                except ValueError:
                    continue
        return self._fallback.classify(entry)
