import pytest

from conftest import stock_doc
from garden_alerts.engine import ChangeDetector, SnapshotStore
from garden_alerts.engine.render import (STOCK_SUBJECT, format_duration,
                                         weather_subject)
from garden_alerts.schemas import (CatalogEntry, FeedChannel, ItemInterests,
                                   PartitionedInterests, Subscription,
                                   WeatherEvent)


async def _stock_snapshot(document):
    result = await ChangeDetector(SnapshotStore()).ingest(FeedChannel.STOCK, document)
    return result.snapshot


def _sub(email, *items):
    return Subscription(email=email, interests=ItemInterests(item_ids=frozenset(items)))


@pytest.mark.asyncio
async def test_only_matching_in_stock_subscribers_get_jobs(planner):
    snapshot = await _stock_snapshot(
        stock_doc(
            seed=[{"item_id": "carrot", "display_name": "Carrot", "quantity": 5}, {"item_id": "tomato", "quantity": 0}],
            gear=[{"item_id": "trowel", "quantity": 2}],
        )
    )
    subs = [_sub("a@x.com", "carrot"), _sub("b@x.com", "tomato"), _sub("c@x.com", "mango")]

    jobs = planner.plan_stock_for(snapshot, subs)

    assert [job.email for job in jobs] == ["a@x.com"]
    assert jobs[0].subject == STOCK_SUBJECT
    assert "Carrot" in jobs[0].body and ">5<" in jobs[0].body
    assert "tomato" not in jobs[0].body
    assert "unsub?email=a%40x.com" in jobs[0].body


@pytest.mark.asyncio
async def test_partitioned_interests_match_their_own_shop(planner):
    snapshot = await _stock_snapshot(
        stock_doc(
            seed=[{"item_id": "carrot", "quantity": 5}],
            gear=[{"item_id": "trowel", "quantity": 1}, {"item_id": "carrot", "quantity": 9}],
        )
    )
    sub = Subscription(
        email="p@x.com",
        interests=PartitionedInterests(seed_ids=frozenset({"trowel"}), gear_ids=frozenset({"trowel"})),
    )

    sections = planner.stock_sections(snapshot.parsed_payload, sub)

    assert [(s.title, [r.name for r in s.rows]) for s in sections] == [("Gear", ["trowel"])]


@pytest.mark.asyncio
async def test_catalog_enriches_rows(planner, catalog):
    catalog.replace([CatalogEntry(item_id="carrot", display_name="Carrot Seed", icon="https://cdn/carrot.png")])
    snapshot = await _stock_snapshot(stock_doc(seed=[{"item_id": "carrot", "quantity": 1}, {"item_id": "beet", "quantity": 1}]))

    (section,) = planner.stock_sections(snapshot.parsed_payload, _sub("a@x.com", "carrot", "beet"))

    assert section.title is None
    assert [(r.name, r.icon) for r in section.rows] == [
        ("Carrot Seed", "https://cdn/carrot.png"),
        ("beet", "https://img.test/beet"),
    ]


@pytest.mark.asyncio
async def test_weather_broadcast_to_all_confirmed(planner, registry):
    await registry.confirm("a@x.com", ItemInterests(item_ids=frozenset({"carrot"})))
    await registry.confirm("b@x.com", ItemInterests(item_ids=frozenset({"mango"})))
    event = WeatherEvent(weather_id="rain", weather_name="Rain", duration=300, active=True)

    jobs = await planner.plan_weather_notification(event, registry, "https://discord.gg/x")

    assert sorted(job.email for job in jobs) == ["a@x.com", "b@x.com"]
    assert jobs[0].subject == weather_subject("Rain")
    assert "5 minutes" in jobs[0].body
    assert "https://discord.gg/x" in jobs[0].body


@pytest.mark.asyncio
async def test_plan_stock_rejects_weather_snapshot(planner):
    result = await ChangeDetector(SnapshotStore()).ingest(FeedChannel.WEATHER, {"weather": []})
    with pytest.raises(TypeError):
        planner.plan_stock_for(result.snapshot, [])


@pytest.mark.parametrize("seconds, expected", [(None, "Unknown"), (0, "Unknown"), (59, "0 minutes"), (300, "5 minutes"), (299.9, "4 minutes")])
def test_format_duration(seconds, expected):
    assert format_duration(seconds) == expected
