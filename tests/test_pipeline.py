import asyncio

import pytest

from conftest import stock_doc, weather_doc
from garden_alerts.engine.render import STOCK_SUBJECT
from garden_alerts.schemas import FeedChannel, ItemInterests

CARROT = ItemInterests(item_ids=frozenset({"carrot"}))


@pytest.mark.asyncio
async def test_carrot_scenario(pipeline, registry, notifier):
    await registry.confirm("a@x.com", CARROT)
    in_stock = stock_doc(seed=[{"item_id": "carrot", "display_name": "Carrot", "quantity": 5}])

    first = await pipeline.process(FeedChannel.STOCK, in_stock)
    repeat = await pipeline.process(FeedChannel.STOCK, in_stock)
    sold_out = await pipeline.process(
        FeedChannel.STOCK, stock_doc(seed=[{"item_id": "carrot", "display_name": "Carrot", "quantity": 0}])
    )

    assert (first.delivered, repeat.delivered, sold_out.delivered) == (1, 0, 0)
    ((recipient, subject, body),) = notifier.sent
    assert recipient == "a@x.com"
    assert subject == STOCK_SUBJECT
    assert "Carrot" in body and ">5<" in body


@pytest.mark.asyncio
async def test_rain_scenario(pipeline, registry, notifier):
    await registry.confirm("a@x.com", CARROT)
    await registry.confirm("b@x.com", ItemInterests(item_ids=frozenset({"mango"})))
    await pipeline.process(FeedChannel.WEATHER, weather_doc())

    rain = weather_doc({"weather_id": "rain", "weather_name": "Rain", "duration": 600, "active": True}, discord_invite="https://discord.gg/g")
    started = await pipeline.process(FeedChannel.WEATHER, rain)
    again = await pipeline.process(FeedChannel.WEATHER, rain)
    ended = await pipeline.process(FeedChannel.WEATHER, weather_doc({"weather_id": "rain", "active": False}))

    assert started.delivered == 2
    assert again.delivered == 0
    assert ended.delivered == 0
    assert sorted(notifier.recipients()) == ["a@x.com", "b@x.com"]
    assert all("Rain" in subject and "https://discord.gg/g" in body for _, subject, body in notifier.sent)


@pytest.mark.asyncio
async def test_event_switch_notifies_new_event(pipeline, registry, notifier):
    await registry.confirm("a@x.com", CARROT)
    await pipeline.process(FeedChannel.WEATHER, weather_doc({"weather_id": "rain", "weather_name": "Rain", "active": True}))
    await pipeline.process(FeedChannel.WEATHER, weather_doc({"weather_id": "frost", "weather_name": "Frost", "active": True}))

    assert [subject.rsplit(": ", 1)[1] for _, subject, _ in notifier.sent] == ["Rain", "Frost"]


@pytest.mark.asyncio
async def test_malformed_payload_is_no_change(pipeline, registry, notifier):
    await registry.confirm("a@x.com", CARROT)
    document = stock_doc(seed=[{"item_id": "carrot", "quantity": 2}])
    await pipeline.process(FeedChannel.STOCK, document)

    report = await pipeline.process(FeedChannel.STOCK, ["not", "an", "object"])
    repeat = await pipeline.process(FeedChannel.STOCK, document)

    assert report.delivered == 0 and report.failed == []
    assert repeat.delivered == 0
    assert len(notifier.sent) == 1


@pytest.mark.asyncio
async def test_unsubscribed_before_change_gets_nothing(pipeline, registry, notifier):
    await registry.confirm("a@x.com", CARROT)
    await registry.unsubscribe("a@x.com")

    report = await pipeline.process(FeedChannel.STOCK, stock_doc(seed=[{"item_id": "carrot", "quantity": 3}]))

    assert report.delivered == 0
    assert notifier.sent == []


@pytest.mark.asyncio
async def test_concurrent_payloads_on_one_channel_are_serialized(pipeline, registry, notifier):
    await registry.confirm("a@x.com", CARROT)
    documents = [stock_doc(seed=[{"item_id": "carrot", "quantity": n}]) for n in (1, 2, 3)]

    reports = await asyncio.gather(*(pipeline.process(FeedChannel.STOCK, d) for d in documents))

    assert sum(r.delivered for r in reports) == 3
    assert [">%d<" % n in body for n, (_, _, body) in zip((1, 2, 3), notifier.sent)] == [True] * 3
