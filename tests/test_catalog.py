import httpx
import pytest
import respx

from garden_alerts.catalog import (CatalogClient, ExplicitTypePolicy, ItemCatalog,
                                   KeywordCategoryPolicy, parse_catalog_document)
from garden_alerts.exceptions import MalformedPayloadError
from garden_alerts.schemas import CatalogEntry, StockCategory

CATALOG_URL = "https://feeds.test/info/"

ITEMS = [
    {"item_id": "carrot", "display_name": "Carrot", "type": "seed", "icon": "https://cdn/carrot.png"},
    {"item_id": "trowel", "display_name": "Trowel", "type": "gears"},
    {"item_id": "sprinkler", "display_name": "Basic Sprinkler"},
    {"item_id": "bug_egg", "display_name": "Bug Egg"},
    {"item_id": "nameless"},
    {"display_name": "No id"},
]


def test_parse_accepts_list_or_items_object():
    assert [e.item_id for e in parse_catalog_document(ITEMS)] == ["carrot", "trowel", "sprinkler", "bug_egg"]
    assert len(parse_catalog_document({"items": ITEMS})) == 4


@pytest.mark.parametrize("document", [{"data": []}, "items", None])
def test_parse_rejects_other_shapes(document):
    with pytest.raises(MalformedPayloadError):
        parse_catalog_document(document)


def test_catalog_lookups_fall_back_to_item_id():
    catalog = ItemCatalog("https://img.test/")
    assert not catalog.loaded
    assert catalog.icon_for("carrot") == "https://img.test/carrot"
    assert catalog.display_name_for("carrot") == "carrot"

    catalog.replace(parse_catalog_document(ITEMS))

    assert catalog.loaded and len(catalog) == 4
    assert catalog.icon_for("carrot") == "https://cdn/carrot.png"
    assert catalog.icon_for("trowel") == "https://img.test/trowel"
    assert catalog.display_name_for("bug_egg") == "Bug Egg"
    assert catalog.placeholder_icon == "https://img.test/placeholder"


def test_grouping_prefers_explicit_type():
    catalog = ItemCatalog()
    catalog.replace(parse_catalog_document(ITEMS))

    groups = {name: [e.item_id for e in entries] for name, entries in catalog.grouped().items()}

    assert groups == {"egg": ["bug_egg"], "gear": ["sprinkler", "trowel"], "seed": ["carrot"]}


def test_keyword_policy_guesses_from_name():
    policy = KeywordCategoryPolicy()
    assert policy.classify(CatalogEntry(item_id="a", display_name="Godly Sprinkler")) is StockCategory.GEAR
    assert policy.classify(CatalogEntry(item_id="b", display_name="Mythical Egg")) is StockCategory.EGG
    assert policy.classify(CatalogEntry(item_id="c", display_name="Blueberry")) is StockCategory.SEED


def test_explicit_policy_uses_fallback_for_unknown_type():
    class Never:
        def classify(self, entry):
            return None

    policy = ExplicitTypePolicy(fallback=Never())
    assert policy.classify(CatalogEntry(item_id="x", display_name="X", type="Cosmetics")) is StockCategory.COSMETIC
    assert policy.classify(CatalogEntry(item_id="y", display_name="Y", type="pet")) is None


@pytest.mark.asyncio
async def test_refresh_replaces_catalog(fake_sleep):
    catalog = ItemCatalog()
    async with respx.mock() as router:
        router.get(CATALOG_URL).mock(return_value=httpx.Response(200, json={"items": ITEMS}))
        async with httpx.AsyncClient(transport=httpx.MockTransport(router.async_handler)) as session:
            client = CatalogClient(CATALOG_URL, catalog, client=session, sleep=fake_sleep)
            assert await client.refresh()

    assert len(catalog) == 4


@pytest.mark.asyncio
async def test_failed_refresh_keeps_previous_catalog(fake_sleep):
    catalog = ItemCatalog()
    catalog.replace([CatalogEntry(item_id="carrot", display_name="Carrot")])
    async with respx.mock() as router:
        route = router.get(CATALOG_URL).mock(return_value=httpx.Response(502))
        async with httpx.AsyncClient(transport=httpx.MockTransport(router.async_handler)) as session:
            client = CatalogClient(CATALOG_URL, catalog, max_attempts=3, client=session, sleep=fake_sleep)
            assert not await client.refresh()

    assert route.call_count == 3
    assert fake_sleep.delays == [2, 4]
    assert catalog.display_name_for("carrot") == "Carrot"
