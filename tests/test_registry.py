import asyncio
from datetime import timedelta

import pytest

from garden_alerts.exceptions import (InvalidSubscriberInput, VerificationFailure,
                                      VerificationReason)
from garden_alerts.schemas import ItemInterests, PartitionedInterests
from garden_alerts.subscriptions import (SubscriptionRegistry, generate_token,
                                         run_expiry_sweeper)

CARROT = ItemInterests(item_ids=frozenset({"carrot"}))


def test_generate_token_is_256_bit_hex():
    token = generate_token()
    assert len(token) == 64
    int(token, 16)
    assert token != generate_token()


@pytest.mark.asyncio
async def test_direct_confirm_creates_and_replaces(registry):
    await registry.confirm("  a@x.com ", CARROT)
    replaced = await registry.confirm("a@x.com", PartitionedInterests(gear_ids=frozenset({"trowel"})))

    assert isinstance((await registry.get("a@x.com")).interests, PartitionedInterests)
    assert replaced.email == "a@x.com"
    assert await registry.counts() == (1, 0)


@pytest.mark.asyncio
@pytest.mark.parametrize("email, interests", [("", CARROT), ("   ", CARROT), ("a@x.com", ItemInterests())])
async def test_confirm_rejects_invalid_input(registry, email, interests):
    with pytest.raises(InvalidSubscriberInput):
        await registry.confirm(email, interests)
    assert await registry.counts() == (0, 0)


@pytest.mark.asyncio
async def test_confirm_before_verify_is_rejected(verified_registry):
    with pytest.raises(VerificationFailure) as excinfo:
        await verified_registry.confirm("x@y.com", CARROT)

    assert excinfo.value.reason is VerificationReason.NOT_VERIFIED
    assert await verified_registry.get("x@y.com") is None


@pytest.mark.asyncio
async def test_verify_then_confirm(verified_registry):
    token = await verified_registry.request_verification("x@y.com")
    assert await verified_registry.counts() == (0, 1)

    await verified_registry.verify("x@y.com", token)
    subscription = await verified_registry.confirm("x@y.com", CARROT)

    assert subscription.interests == CARROT
    assert await verified_registry.counts() == (1, 0)


@pytest.mark.asyncio
async def test_subscriber_replaces_interests_without_new_grant(verified_registry):
    await verified_registry.verify("x@y.com", await verified_registry.request_verification("x@y.com"))
    await verified_registry.confirm("x@y.com", CARROT)

    with pytest.raises(VerificationFailure):
        await verified_registry.request_verification("x@y.com")
    trowel = PartitionedInterests(gear_ids=frozenset({"trowel"}))
    replaced = await verified_registry.confirm("x@y.com", trowel)

    assert replaced.interests == trowel
    assert await verified_registry.counts() == (1, 0)


@pytest.mark.asyncio
async def test_tokens_are_single_use(verified_registry):
    token = await verified_registry.request_verification("x@y.com")
    await verified_registry.verify("x@y.com", token)

    with pytest.raises(VerificationFailure) as excinfo:
        await verified_registry.verify("x@y.com", token)
    assert excinfo.value.reason is VerificationReason.INVALID_OR_EXPIRED


@pytest.mark.asyncio
async def test_wrong_token_leaves_pending_untouched(verified_registry):
    await verified_registry.request_verification("x@y.com")

    with pytest.raises(VerificationFailure):
        await verified_registry.verify("x@y.com", "nope")

    assert (await verified_registry.pending("x@y.com")).token == "tok1"


@pytest.mark.asyncio
async def test_new_request_overwrites_token(verified_registry):
    first = await verified_registry.request_verification("x@y.com")
    second = await verified_registry.request_verification("x@y.com")

    with pytest.raises(VerificationFailure):
        await verified_registry.verify("x@y.com", first)
    await verified_registry.verify("x@y.com", second)


@pytest.mark.asyncio
async def test_request_for_subscriber_is_rejected(registry):
    await registry.confirm("a@x.com", CARROT)

    with pytest.raises(VerificationFailure) as excinfo:
        await registry.request_verification("a@x.com")
    assert excinfo.value.reason is VerificationReason.ALREADY_SUBSCRIBED


@pytest.mark.asyncio
async def test_expired_token_is_rejected_before_sweep(verified_registry, clock):
    token = await verified_registry.request_verification("x@y.com")
    clock.advance(hours=24, seconds=1)

    with pytest.raises(VerificationFailure):
        await verified_registry.verify("x@y.com", token)


@pytest.mark.asyncio
async def test_sweep_respects_ttl_boundary(verified_registry, clock):
    created = clock.now
    await verified_registry.request_verification("x@y.com")

    assert await verified_registry.sweep_expired(created + timedelta(hours=24) - timedelta(seconds=1)) == 0
    assert await verified_registry.pending("x@y.com") is not None

    assert await verified_registry.sweep_expired(created + timedelta(hours=24, seconds=1)) == 1
    assert await verified_registry.pending("x@y.com") is None


@pytest.mark.asyncio
async def test_verified_grant_expires(verified_registry, clock):
    token = await verified_registry.request_verification("x@y.com")
    await verified_registry.verify("x@y.com", token)
    clock.advance(hours=25)

    with pytest.raises(VerificationFailure) as excinfo:
        await verified_registry.confirm("x@y.com", CARROT)
    assert excinfo.value.reason is VerificationReason.NOT_VERIFIED


@pytest.mark.asyncio
async def test_unsubscribe(registry):
    await registry.confirm("a@x.com", CARROT)

    assert await registry.unsubscribe("a@x.com")
    assert not await registry.unsubscribe("a@x.com")
    assert not await registry.unsubscribe("unknown@x.com")
    assert await registry.confirmed_subscriptions() == []


@pytest.mark.asyncio
async def test_sweeper_runs_until_stopped(verified_registry, clock):
    await verified_registry.request_verification("x@y.com")
    stop = asyncio.Event()
    calls = 0

    async def sleep(_delay):
        nonlocal calls
        calls += 1
        clock.advance(hours=13)
        if calls == 3:
            stop.set()

    await run_expiry_sweeper(verified_registry, 3600, stop, sleep=sleep)

    assert calls == 3
    assert await verified_registry.pending("x@y.com") is None


def test_registry_defaults():
    registry = SubscriptionRegistry()
    assert registry.mode.value == "verify-then-confirm"
