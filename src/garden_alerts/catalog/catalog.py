"""Item catalog used to enrich notification rendering."""
import asyncio
import logging
from collections.abc import Iterable
from typing import Any

import httpx
from pydantic import ValidationError

from garden_alerts.catalog.classification import CategoryPolicy, ExplicitTypePolicy
from garden_alerts.exceptions import MalformedPayloadError, UpstreamFetchError
from garden_alerts.feeds.core import excerpt, get_json, retry_with_backoff
from garden_alerts.feeds.core.retry import Sleep
from garden_alerts.schemas import CatalogEntry

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_BASE_URL = "https://api.joshlei.com/v2/growagarden/image"


class ItemCatalog:
    """Mapping item_id -> CatalogEntry, replaced wholesale on refresh.

    May legitimately be empty; lookups then fall back to defaults derived from
    the item id, so rendering never depends on the catalog being loaded.
    """

    def __init__(self, image_base_url: str = DEFAULT_IMAGE_BASE_URL) -> None:
        self._image_base_url = image_base_url.rstrip("/")
        self._entries: dict[str, CatalogEntry] = {}

    def replace(self, entries: Iterable[CatalogEntry]) -> None:
        """Swap in a new set of entries in one assignment."""
        self._entries = {entry.item_id: entry for entry in entries}

    def display_name_for(self, item_id: str) -> str:
        """Catalog display name, or the item id itself."""
        entry = self._entries.get(item_id)
        return entry.display_name if entry is not None else item_id

    def icon_for(self, item_id: str) -> str:
        """Catalog icon, or the image endpoint for item_id."""
        entry = self._entries.get(item_id)
        if entry is not None and entry.icon:
            return entry.icon
        return f"{self._image_base_url}/{item_id}"

    @property
    def placeholder_icon(self) -> str:
        return f"{self._image_base_url}/placeholder"

    def entries(self) -> list[CatalogEntry]:
        return sorted(self._entries.values(), key=lambda e: e.display_name.lower())

    @property
    def loaded(self) -> bool:
        return bool(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def grouped(self, policy: CategoryPolicy | None = None) -> dict[str, list[CatalogEntry]]:
        """Entries grouped by category name; unclassifiable entries go under 'other'."""
        policy = policy or ExplicitTypePolicy()
        groups: dict[str, list[CatalogEntry]] = {}
        for entry in self.entries():
            category = policy.classify(entry)
            key = category.value if category is not None else "other"
            groups.setdefault(key, []).append(entry)
        return groups


def parse_catalog_document(document: Any) -> list[CatalogEntry]:
    """Extract entries with both item_id and display_name.

    Accepts a bare list or an object with an "items" list.

    Raises:
        MalformedPayloadError: Neither shape matches.
    """
    if isinstance(document, dict) and isinstance(document.get("items"), list):
        logger.info('Extracted item array from "items" property')
        raw_items = document["items"]
    elif isinstance(document, list):
        raw_items = document
    else:
        raise MalformedPayloadError(
            f'Item info is not an array and has no "items": {excerpt(str(document))}'
        )

    entries: list[CatalogEntry] = []
    for raw in raw_items:
        if not isinstance(raw, dict) or not raw.get("item_id") or not raw.get("display_name"):
            continue
        try:
            entries.append(CatalogEntry.model_validate(raw))
        except ValidationError:
            continue
    return entries


class CatalogClient:
    """Fetches the item-info endpoint into an ItemCatalog."""

    def __init__(
        self,
        url: str,
        catalog: ItemCatalog,
        *,
        max_attempts: int = 5,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
        sleep: Sleep | None = None,
    ) -> None:
        self._url = url
        self._catalog = catalog
        self._max_attempts = max_attempts
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=timeout, headers={"Accept": "application/json"}
        )
        self._sleep = sleep or asyncio.sleep

    async def fetch_entries(self) -> list[CatalogEntry]:
        """One fetch without retry."""
        return parse_catalog_document(await get_json(self._client, self._url))

    async def refresh(self) -> bool:
        """Refresh the catalog with bounded retries.

        On failure the previous catalog (possibly empty) stays in place.

        Returns:
            True if the catalog was replaced.
        """
        try:
            entries = await retry_with_backoff(
                self.fetch_entries,
                label="Fetching item info",
                max_attempts=self._max_attempts,
                sleep=self._sleep,
            )
        except (UpstreamFetchError, MalformedPayloadError) as exc:
            logger.error("Item info refresh failed, keeping %d cached items: %s", len(self._catalog), exc)
            return False
        if not entries:
            logger.warning("Filtered item info resulted in empty array")
        self._catalog.replace(entries)
        logger.info("Fetched item info: %d items", len(entries))
        return True

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()
